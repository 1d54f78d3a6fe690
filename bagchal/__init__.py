"""Bagh-Chal (tigers and goats) engine, computer opponent and peer sessions."""

from . import ai, core, env, evaluation, features, orchestration, session, validation
from .ai import Difficulty, HeuristicAI, RandomAgent, choose_ai_move
from .config import AIConfig, GameConfig, SessionConfig, TimerConfig, load_config
from .core import BoardState, Move, Outcome, Placement, Side, apply_action, enumerate_legal_actions, evaluate_outcome
from .env import BaghChalEnv
from .evaluation import EvaluationResult, evaluate_agents
from .orchestration import Controller, Controllers, GameMode, GameOrchestrator, GameOrchestratorConfig, MatchState
from .session import InMemoryRendezvous, PeerSession, Role, SessionBinding, SessionError, SessionErrorCategory
from .timer import TurnTimer

__all__ = [
    "ai",
    "core",
    "env",
    "evaluation",
    "features",
    "orchestration",
    "session",
    "validation",
    "Difficulty",
    "HeuristicAI",
    "RandomAgent",
    "choose_ai_move",
    "AIConfig",
    "GameConfig",
    "SessionConfig",
    "TimerConfig",
    "load_config",
    "BoardState",
    "Move",
    "Outcome",
    "Placement",
    "Side",
    "apply_action",
    "enumerate_legal_actions",
    "evaluate_outcome",
    "BaghChalEnv",
    "EvaluationResult",
    "evaluate_agents",
    "Controller",
    "Controllers",
    "GameMode",
    "GameOrchestrator",
    "GameOrchestratorConfig",
    "MatchState",
    "InMemoryRendezvous",
    "PeerSession",
    "Role",
    "SessionBinding",
    "SessionError",
    "SessionErrorCategory",
    "TurnTimer",
]
