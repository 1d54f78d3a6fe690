from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from bagchal.core import Action, BoardState, Side, encode_action
from bagchal.env import BaghChalEnv

logger = logging.getLogger(__name__)


class Agent(Protocol):
    def choose_action(self, board: BoardState, side: Optional[Side] = None) -> Optional[Action]:
        ...


@dataclass
class EvaluationResult:
    games_played: int
    tiger_wins: int
    goat_wins: int
    draws: int
    average_length: float

    def winrate_tiger(self) -> float:
        return self.tiger_wins / max(1, self.games_played)

    def winrate_goat(self) -> float:
        return self.goat_wins / max(1, self.games_played)


def play_game(tiger: Agent, goat: Agent, env: BaghChalEnv) -> Optional[Side]:
    """Play one game to completion or truncation; return the winner, if any."""
    env.reset()
    terminated = truncated = False
    while not (terminated or truncated):
        board = env.board
        agent = tiger if board.turn == Side.TIGER else goat
        action = agent.choose_action(board)
        if action is None:
            break
        _, _, terminated, truncated, _ = env.step(encode_action(action))
    outcome = env.outcome
    return outcome.winner if outcome is not None else None


def evaluate_agents(
    tiger: Agent,
    goat: Agent,
    *,
    episodes: int,
    max_ply: int = 200,
    env_factory: Optional[Callable[[], BaghChalEnv]] = None,
) -> EvaluationResult:
    env_factory = env_factory or (lambda: BaghChalEnv(max_ply=max_ply))

    tiger_wins = 0
    goat_wins = 0
    draws = 0
    total_ply = 0

    for episode in range(episodes):
        env = env_factory()
        winner = play_game(tiger, goat, env)
        ply = env.ply
        total_ply += ply
        if winner == Side.TIGER:
            tiger_wins += 1
        elif winner == Side.GOAT:
            goat_wins += 1
        else:
            draws += 1
        logger.debug("Game %d: %s after %d plies", episode + 1, winner.value if winner else "draw", ply)

    return EvaluationResult(
        games_played=episodes,
        tiger_wins=tiger_wins,
        goat_wins=goat_wins,
        draws=draws,
        average_length=total_ply / max(1, episodes),
    )
