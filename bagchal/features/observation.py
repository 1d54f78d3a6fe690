from __future__ import annotations

from typing import Tuple

import numpy as np

from bagchal.core import BOARD_SIZE, CAPTURES_TO_WIN, TOTAL_GOATS, BoardState, Cell, Phase, Side

BOARD_CHANNELS = 3  # tiger, goat, empty
AUX_VECTOR_SIZE = 5  # side to move one-hot (2) + goats to place + captures + placement flag


def build_board_tensor(board: BoardState) -> np.ndarray:
    """Return board tensor with shape (3, 5, 5) channel-first."""
    grid = board.grid
    tensor = np.zeros((BOARD_CHANNELS, BOARD_SIZE, BOARD_SIZE), dtype=np.float32)
    tensor[0] = grid == Cell.TIGER
    tensor[1] = grid == Cell.GOAT
    tensor[2] = grid == Cell.EMPTY
    return tensor


def build_aux_vector(board: BoardState) -> np.ndarray:
    aux = np.zeros((AUX_VECTOR_SIZE,), dtype=np.float32)
    aux[0 if board.turn == Side.TIGER else 1] = 1.0
    aux[2] = board.goats_to_place / TOTAL_GOATS
    aux[3] = min(board.goats_captured, CAPTURES_TO_WIN) / CAPTURES_TO_WIN
    aux[4] = 1.0 if board.phase == Phase.PLACEMENT else 0.0
    return aux


def state_to_numpy(board: BoardState) -> Tuple[np.ndarray, np.ndarray]:
    return build_board_tensor(board), build_aux_vector(board)
