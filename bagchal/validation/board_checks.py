from __future__ import annotations

from bagchal.core import BOARD_SIZE, TIGER_COUNT, TOTAL_GOATS, BoardState, Side


class BoardInvariantError(ValueError):
    pass


def validate_board(board: BoardState) -> None:
    if len(board.tigers) != TIGER_COUNT:
        raise BoardInvariantError(f"expected {TIGER_COUNT} tigers, got {len(board.tigers)}")
    if any(tiger.kind != Side.TIGER for tiger in board.tigers):
        raise BoardInvariantError("tiger list contains a non-tiger piece")
    if any(goat.kind != Side.GOAT for goat in board.goats):
        raise BoardInvariantError("goat list contains a non-goat piece")
    positions = [piece.position for piece in board.tigers + board.goats]
    for row, col in positions:
        if not (0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE):
            raise BoardInvariantError(f"piece off the board at ({row}, {col})")
    if len(set(positions)) != len(positions):
        raise BoardInvariantError("two pieces share a position")
    if board.goats_to_place < 0 or board.goats_captured < 0:
        raise BoardInvariantError("goat counters must be non-negative")
    total = board.goats_captured + board.live_goats + board.goats_to_place
    if total != TOTAL_GOATS:
        raise BoardInvariantError(f"goat accounting sums to {total}, expected {TOTAL_GOATS}")


def is_valid_board(board: BoardState) -> bool:
    try:
        validate_board(board)
    except BoardInvariantError:
        return False
    return True
