"""Heuristic opponents."""

from .heuristic import (
    DIFFICULTY_PROFILES,
    Difficulty,
    DifficultyProfile,
    HeuristicAI,
    RandomAgent,
    ScoredAction,
    choose_ai_move,
    score_goat_moves,
    score_goat_placements,
    score_tiger_moves,
)

__all__ = [
    "DIFFICULTY_PROFILES",
    "Difficulty",
    "DifficultyProfile",
    "HeuristicAI",
    "RandomAgent",
    "ScoredAction",
    "choose_ai_move",
    "score_goat_moves",
    "score_goat_placements",
    "score_tiger_moves",
]
