"""Turn handling: the single writer of match state."""

from .events import (
    AIMoveReady,
    AITurnStarted,
    ControllersChanged,
    Event,
    GameReset,
    NodeClicked,
    PieceSelected,
    RemoteDisconnected,
    SnapshotApplied,
    TurnTimedOut,
)
from .loop import GameOrchestrator, GameOrchestratorConfig
from .reducer import reduce
from .state import Controller, Controllers, GameMode, GameStatus, MatchState, MoveRecord

__all__ = [
    "AIMoveReady",
    "AITurnStarted",
    "ControllersChanged",
    "Event",
    "GameReset",
    "NodeClicked",
    "PieceSelected",
    "RemoteDisconnected",
    "SnapshotApplied",
    "TurnTimedOut",
    "GameOrchestrator",
    "GameOrchestratorConfig",
    "reduce",
    "Controller",
    "Controllers",
    "GameMode",
    "GameStatus",
    "MatchState",
    "MoveRecord",
]
