from __future__ import annotations

from typing import Dict, Optional

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from bagchal.core import (
    ACTION_VECTOR_SIZE,
    BOARD_SIZE,
    BoardState,
    Outcome,
    Side,
    advance,
    decode_action,
    encode_action,
    enumerate_legal_actions,
    evaluate_outcome,
    initialize_board,
)
from bagchal.features import AUX_VECTOR_SIZE, BOARD_CHANNELS, build_aux_vector, build_board_tensor


class BaghChalEnv(gym.Env):
    """Two-player Bagh-Chal as a single-agent environment.

    Both sides act through ``step``; the reward is from the goat side's point
    of view (+1 goat win, -1 tiger win). Games that reach ``max_ply`` are
    truncated.
    """

    metadata = {"render_modes": ["ansi"], "render_fps": 4}

    def __init__(
        self,
        *,
        max_ply: int = 200,
        enforce_legal_actions: bool = True,
        render_mode: Optional[str] = None,
    ) -> None:
        super().__init__()
        self._max_ply = max_ply
        self._enforce_legal = enforce_legal_actions
        self.render_mode = render_mode

        board_shape = (BOARD_CHANNELS, BOARD_SIZE, BOARD_SIZE)
        self.observation_space = spaces.Dict(
            {
                "board": spaces.Box(low=0.0, high=1.0, shape=board_shape, dtype=np.float32),
                "aux": spaces.Box(low=0.0, high=1.0, shape=(AUX_VECTOR_SIZE,), dtype=np.float32),
            }
        )
        self.action_space = spaces.Discrete(ACTION_VECTOR_SIZE)

        self._board = initialize_board()
        self._outcome: Optional[Outcome] = None
        self._forfeited = False
        self._ply = 0

    @property
    def board(self) -> BoardState:
        return self._board

    @property
    def outcome(self) -> Optional[Outcome]:
        return self._outcome

    @property
    def ply(self) -> int:
        return self._ply

    def reset(self, *, seed: Optional[int] = None, options: Optional[Dict] = None):
        super().reset(seed=seed)
        if options and "max_ply" in options:
            self._max_ply = int(options["max_ply"])
        self._board = initialize_board()
        self._outcome = None
        self._forfeited = False
        self._ply = 0
        return self._build_observation(), self._build_info()

    def step(self, action_index: int):
        if not self.action_space.contains(action_index):
            raise ValueError(f"Action index {action_index} out of bounds.")
        if self._outcome is not None or self._forfeited:
            raise ValueError("Episode has finished; call reset().")

        legal_mask = self.legal_action_mask()
        if not legal_mask[action_index]:
            if self._enforce_legal:
                raise ValueError("Illegal action provided and enforce_legal_actions=True.")
            # Forfeit: the side that played the illegal index loses.
            reward = -1.0 if self._board.turn == Side.GOAT else 1.0
            self._forfeited = True
            return self._build_observation(), reward, True, False, self._build_info()

        self._board = advance(self._board, decode_action(int(action_index)))
        self._ply += 1
        self._outcome = evaluate_outcome(self._board)

        terminated = self._outcome is not None
        truncated = not terminated and self._ply >= self._max_ply
        return self._build_observation(), self._compute_reward(self._outcome), terminated, truncated, self._build_info()

    def legal_action_mask(self) -> np.ndarray:
        mask = np.zeros(self.action_space.n, dtype=np.int8)
        if self._outcome is not None:
            return mask
        for action in enumerate_legal_actions(self._board):
            mask[encode_action(action)] = 1
        return mask

    def render(self):
        if self.render_mode != "ansi":
            raise NotImplementedError("Only 'ansi' render mode is supported.")
        return render_board(self._board)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _build_observation(self) -> Dict[str, np.ndarray]:
        return {"board": build_board_tensor(self._board), "aux": build_aux_vector(self._board)}

    def _build_info(self) -> Dict[str, object]:
        return {
            "legal_action_mask": self.legal_action_mask(),
            "ply": self._ply,
            "turn": self._board.turn.value,
        }

    def _compute_reward(self, outcome: Optional[Outcome]) -> float:
        if outcome is None:
            return 0.0
        return 1.0 if outcome.winner == Side.GOAT else -1.0


def render_board(board: BoardState) -> str:
    symbols = {0: "+", 1: "G", 2: "T"}
    rows = []
    for r in range(BOARD_SIZE):
        rows.append(" ".join(symbols[int(board.grid[r, c])] for c in range(BOARD_SIZE)))
    return "\n".join(rows)
