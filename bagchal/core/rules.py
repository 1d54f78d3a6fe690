from __future__ import annotations

from dataclasses import dataclass, replace
from typing import FrozenSet, List, Optional, Tuple, Union

from .state import (
    BOARD_SIZE,
    CAPTURES_TO_WIN,
    BoardState,
    Cell,
    Outcome,
    Phase,
    Piece,
    Position,
    Side,
    WinReason,
)

DIRECTIONS: Tuple[Tuple[int, int], ...] = (
    (-1, 0), (1, 0), (0, -1), (0, 1),
    (-1, -1), (-1, 1), (1, -1), (1, 1),
)
MAX_DISTANCE = 2
PLACEMENT_ACTIONS = BOARD_SIZE * BOARD_SIZE
ACTION_VECTOR_SIZE = PLACEMENT_ACTIONS + BOARD_SIZE * BOARD_SIZE * len(DIRECTIONS) * MAX_DISTANCE


class IllegalActionError(ValueError):
    pass


@dataclass(frozen=True)
class Placement:
    position: Position


@dataclass(frozen=True)
class Move:
    origin: Position
    target: Position

    @property
    def is_capture(self) -> bool:
        return max(abs(self.target[0] - self.origin[0]), abs(self.target[1] - self.origin[1])) == 2

    @property
    def captured(self) -> Optional[Position]:
        if not self.is_capture:
            return None
        return ((self.origin[0] + self.target[0]) // 2, (self.origin[1] + self.target[1]) // 2)


Action = Union[Placement, Move]


def in_bounds(row: int, col: int) -> bool:
    return 0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE


def has_diagonal(source: Position, target: Position) -> bool:
    """True when a drawn diagonal line joins two adjacent points."""
    if abs(source[0] - target[0]) != 1 or abs(source[1] - target[1]) != 1:
        return False
    return sum(source) % 2 == 0 and sum(target) % 2 == 0


def legal_moves(piece: Piece, board: BoardState) -> FrozenSet[Position]:
    """Destinations reachable by ``piece`` with a single step or, for tigers, a capture jump."""
    row, col = piece.position
    grid = board.grid
    targets = set()
    for dr, dc in DIRECTIONS:
        step = (row + dr, col + dc)
        if not in_bounds(*step):
            continue
        diagonal = dr != 0 and dc != 0
        if diagonal and not has_diagonal(piece.position, step):
            continue
        if grid[step] == Cell.EMPTY:
            targets.add(step)
            continue
        if piece.kind != Side.TIGER or grid[step] != Cell.GOAT:
            continue
        landing = (row + 2 * dr, col + 2 * dc)
        if not in_bounds(*landing) or grid[landing] != Cell.EMPTY:
            continue
        if diagonal and not has_diagonal(step, landing):
            continue
        targets.add(landing)
    return frozenset(targets)


def piece_actions(piece: Piece, board: BoardState) -> List[Move]:
    return [Move(piece.position, target) for target in sorted(legal_moves(piece, board))]


def capture_moves(piece: Piece, board: BoardState) -> List[Move]:
    return [move for move in piece_actions(piece, board) if move.is_capture]


def enumerate_legal_actions(board: BoardState, side: Optional[Side] = None) -> List[Action]:
    if side is None:
        side = board.turn
    if side == Side.GOAT and board.phase == Phase.PLACEMENT:
        return [Placement(pos) for pos in board.empty_positions()]
    actions: List[Action] = []
    for piece in board.pieces(side):
        actions.extend(piece_actions(piece, board))
    return actions


def tiger_mobility(board: BoardState) -> int:
    return sum(len(legal_moves(tiger, board)) for tiger in board.tigers)


def count_trapped_tigers(board: BoardState) -> int:
    return sum(1 for tiger in board.tigers if not legal_moves(tiger, board))


def tigers_trapped(board: BoardState) -> bool:
    return all(not legal_moves(tiger, board) for tiger in board.tigers)


def goats_stalemated(board: BoardState) -> bool:
    if board.phase == Phase.PLACEMENT:
        return False
    return all(not legal_moves(goat, board) for goat in board.goats)


def evaluate_outcome(board: BoardState) -> Optional[Outcome]:
    if board.goats_captured >= CAPTURES_TO_WIN:
        return Outcome(Side.TIGER, WinReason.CAPTURE_THRESHOLD)
    if tigers_trapped(board):
        return Outcome(Side.GOAT, WinReason.TIGERS_TRAPPED)
    if board.turn == Side.GOAT and goats_stalemated(board):
        return Outcome(Side.TIGER, WinReason.GOATS_STALEMATED)
    return None


def is_legal_action(board: BoardState, action: Action) -> bool:
    if evaluate_outcome(board) is not None:
        return False
    if isinstance(action, Placement):
        return (
            board.turn == Side.GOAT
            and board.phase == Phase.PLACEMENT
            and in_bounds(*action.position)
            and board.is_empty(action.position)
        )
    if not (in_bounds(*action.origin) and in_bounds(*action.target)):
        return False
    piece = board.piece_at(action.origin)
    if piece is None or piece.kind != board.turn:
        return False
    if piece.kind == Side.GOAT and board.phase == Phase.PLACEMENT:
        return False
    return action.target in legal_moves(piece, board)


def apply_action(board: BoardState, action: Action) -> BoardState:
    """Return the board after ``action``; the turn always passes to the other side."""
    if evaluate_outcome(board) is not None:
        raise IllegalActionError("Cannot apply action to a finished game.")
    if not is_legal_action(board, action):
        raise IllegalActionError(f"Illegal action {action!r} for {board.turn.value}.")
    return advance(board, action)


def advance(board: BoardState, action: Action) -> BoardState:
    """Play ``action`` without legality checks; for lookahead over already-enumerated actions."""
    if isinstance(action, Placement):
        return replace(
            board,
            goats=board.goats + (Piece(Side.GOAT, action.position),),
            goats_to_place=board.goats_to_place - 1,
            turn=Side.TIGER,
        )

    if board.cell_at(action.origin) == Cell.TIGER:
        tigers = tuple(
            tiger.moved_to(action.target) if tiger.position == action.origin else tiger
            for tiger in board.tigers
        )
        goats = board.goats
        captured = board.goats_captured
        if action.is_capture:
            goats = tuple(goat for goat in goats if goat.position != action.captured)
            captured += 1
        return replace(board, tigers=tigers, goats=goats, goats_captured=captured, turn=Side.GOAT)

    goats = tuple(
        goat.moved_to(action.target) if goat.position == action.origin else goat
        for goat in board.goats
    )
    return replace(board, goats=goats, turn=Side.TIGER)


def initialize_board() -> BoardState:
    return BoardState.initial()


def encode_action(action: Action) -> int:
    if isinstance(action, Placement):
        row, col = action.position
        return row * BOARD_SIZE + col
    dr = action.target[0] - action.origin[0]
    dc = action.target[1] - action.origin[1]
    distance = max(abs(dr), abs(dc))
    if distance < 1 or distance > MAX_DISTANCE or (dr != 0 and dc != 0 and abs(dr) != abs(dc)):
        raise ValueError("Move is not along one of the eight directions.")
    direction_index = DIRECTIONS.index((dr // distance, dc // distance))
    base = action.origin[0] * BOARD_SIZE + action.origin[1]
    base = base * len(DIRECTIONS) + direction_index
    return PLACEMENT_ACTIONS + base * MAX_DISTANCE + (distance - 1)


def decode_action(index: int) -> Action:
    if not 0 <= index < ACTION_VECTOR_SIZE:
        raise ValueError("Action index out of range.")
    if index < PLACEMENT_ACTIONS:
        return Placement(divmod(index, BOARD_SIZE))
    index -= PLACEMENT_ACTIONS
    distance = (index % MAX_DISTANCE) + 1
    index //= MAX_DISTANCE
    dr, dc = DIRECTIONS[index % len(DIRECTIONS)]
    index //= len(DIRECTIONS)
    row, col = divmod(index, BOARD_SIZE)
    return Move((row, col), (row + dr * distance, col + dc * distance))
