"""Core game logic for Bagh-Chal."""

from .state import (
    BOARD_SIZE,
    CAPTURES_TO_WIN,
    TIGER_COUNT,
    TOTAL_GOATS,
    BoardState,
    Cell,
    Outcome,
    Phase,
    Piece,
    Position,
    Side,
    WinReason,
)
from .rules import (
    ACTION_VECTOR_SIZE,
    DIRECTIONS,
    Action,
    IllegalActionError,
    Move,
    Placement,
    advance,
    apply_action,
    capture_moves,
    count_trapped_tigers,
    decode_action,
    encode_action,
    enumerate_legal_actions,
    evaluate_outcome,
    goats_stalemated,
    has_diagonal,
    in_bounds,
    initialize_board,
    is_legal_action,
    legal_moves,
    piece_actions,
    tiger_mobility,
    tigers_trapped,
)

__all__ = [
    "BOARD_SIZE",
    "CAPTURES_TO_WIN",
    "TIGER_COUNT",
    "TOTAL_GOATS",
    "ACTION_VECTOR_SIZE",
    "DIRECTIONS",
    "BoardState",
    "Cell",
    "Outcome",
    "Phase",
    "Piece",
    "Position",
    "Side",
    "WinReason",
    "Action",
    "IllegalActionError",
    "Move",
    "Placement",
    "advance",
    "apply_action",
    "capture_moves",
    "count_trapped_tigers",
    "decode_action",
    "encode_action",
    "enumerate_legal_actions",
    "evaluate_outcome",
    "goats_stalemated",
    "has_diagonal",
    "in_bounds",
    "initialize_board",
    "is_legal_action",
    "legal_moves",
    "piece_actions",
    "tiger_mobility",
    "tigers_trapped",
]
