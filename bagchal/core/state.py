from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, IntEnum
from functools import cached_property
from typing import Iterable, Optional, Tuple

import numpy as np
from numpy.typing import NDArray

BOARD_SIZE = 5
TOTAL_GOATS = 20
CAPTURES_TO_WIN = 5
TIGER_COUNT = 4

Position = Tuple[int, int]
BoardArray = NDArray[np.int8]


class Cell(IntEnum):
    EMPTY = 0
    GOAT = 1
    TIGER = 2


class Side(Enum):
    TIGER = "tiger"
    GOAT = "goat"

    def opponent(self) -> "Side":
        return Side.GOAT if self == Side.TIGER else Side.TIGER

    @property
    def cell(self) -> Cell:
        return Cell.TIGER if self == Side.TIGER else Cell.GOAT


class Phase(Enum):
    PLACEMENT = "placement"
    MOVEMENT = "movement"


class WinReason(Enum):
    CAPTURE_THRESHOLD = "capture_threshold"
    TIGERS_TRAPPED = "tigers_trapped"
    GOATS_STALEMATED = "goats_stalemated"

    @property
    def winner(self) -> Side:
        return Side.GOAT if self == WinReason.TIGERS_TRAPPED else Side.TIGER


_OUTCOME_MESSAGES = {
    WinReason.CAPTURE_THRESHOLD: "Tigers Win! 5 goats have been captured.",
    WinReason.TIGERS_TRAPPED: "Goats Win! All tigers are trapped.",
    WinReason.GOATS_STALEMATED: "Tigers Win! The goats have no legal move.",
}


@dataclass(frozen=True)
class Outcome:
    winner: Side
    reason: WinReason

    @property
    def message(self) -> str:
        return _OUTCOME_MESSAGES[self.reason]


@dataclass(frozen=True)
class Piece:
    kind: Side
    position: Position

    def moved_to(self, position: Position) -> "Piece":
        return Piece(self.kind, position)


INITIAL_TIGER_POSITIONS: Tuple[Position, ...] = ((0, 0), (0, 4), (4, 0), (4, 4))


@dataclass(frozen=True)
class BoardState:
    """Immutable position of a game.

    ``goats`` keeps insertion order so consumers can diff consecutive
    snapshots; the rules never depend on it.
    """

    tigers: Tuple[Piece, ...]
    goats: Tuple[Piece, ...] = field(default_factory=tuple)
    goats_to_place: int = TOTAL_GOATS
    goats_captured: int = 0
    turn: Side = Side.GOAT

    @classmethod
    def initial(cls) -> "BoardState":
        return cls(tigers=tuple(Piece(Side.TIGER, pos) for pos in INITIAL_TIGER_POSITIONS))

    @classmethod
    def from_positions(
        cls,
        tigers: Iterable[Position],
        goats: Iterable[Position] = (),
        *,
        goats_to_place: int = TOTAL_GOATS,
        goats_captured: int = 0,
        turn: Side = Side.GOAT,
    ) -> "BoardState":
        return cls(
            tigers=tuple(Piece(Side.TIGER, (int(r), int(c))) for r, c in tigers),
            goats=tuple(Piece(Side.GOAT, (int(r), int(c))) for r, c in goats),
            goats_to_place=goats_to_place,
            goats_captured=goats_captured,
            turn=turn,
        )

    @property
    def phase(self) -> Phase:
        return Phase.PLACEMENT if self.goats_to_place > 0 else Phase.MOVEMENT

    @property
    def live_goats(self) -> int:
        return len(self.goats)

    @cached_property
    def grid(self) -> BoardArray:
        # Read-only occupancy grid, computed once per board.
        grid = np.zeros((BOARD_SIZE, BOARD_SIZE), dtype=np.int8)
        for goat in self.goats:
            grid[goat.position] = Cell.GOAT
        for tiger in self.tigers:
            grid[tiger.position] = Cell.TIGER
        grid.flags.writeable = False
        return grid

    def cell_at(self, position: Position) -> Cell:
        return Cell(int(self.grid[position]))

    def is_empty(self, position: Position) -> bool:
        return self.grid[position] == Cell.EMPTY

    def piece_at(self, position: Position) -> Optional[Piece]:
        for piece in self.tigers + self.goats:
            if piece.position == position:
                return piece
        return None

    def pieces(self, side: Side) -> Tuple[Piece, ...]:
        return self.tigers if side == Side.TIGER else self.goats

    def empty_positions(self) -> Iterable[Position]:
        for r, c in np.argwhere(self.grid == Cell.EMPTY):
            yield int(r), int(c)

    def with_turn(self, turn: Side) -> "BoardState":
        return replace(self, turn=turn)

    def __repr__(self) -> str:
        symbols = {Cell.EMPTY: ".", Cell.GOAT: "G", Cell.TIGER: "T"}
        board_str = "\n".join(" ".join(symbols[Cell(int(cell))] for cell in row) for row in self.grid)
        return (
            f"BoardState(turn={self.turn.value}, to_place={self.goats_to_place}, "
            f"captured={self.goats_captured})\n{board_str}"
        )
