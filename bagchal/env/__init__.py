"""Gymnasium environment wrapping the rules engine."""

from .gym_env import BaghChalEnv, render_board

__all__ = ["BaghChalEnv", "render_board"]
