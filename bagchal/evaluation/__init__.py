"""AI-vs-AI match runner."""

from .match import Agent, EvaluationResult, evaluate_agents, play_game

__all__ = ["Agent", "EvaluationResult", "evaluate_agents", "play_game"]
