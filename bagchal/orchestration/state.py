from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional

from bagchal.core import (
    Action,
    BoardState,
    Move,
    Outcome,
    Phase,
    Placement,
    Position,
    Side,
    count_trapped_tigers,
    legal_moves,
)


class Controller(Enum):
    HUMAN = "human"
    AI = "ai"
    REMOTE = "remote"


class GameMode(Enum):
    PVP = "pvp"
    VS_TIGER = "vs-tiger"  # computer plays the tigers
    VS_GOAT = "vs-goat"  # computer plays the goats

    @property
    def controllers(self) -> "Controllers":
        if self == GameMode.VS_TIGER:
            return Controllers(tiger=Controller.AI, goat=Controller.HUMAN)
        if self == GameMode.VS_GOAT:
            return Controllers(tiger=Controller.HUMAN, goat=Controller.AI)
        return Controllers(tiger=Controller.HUMAN, goat=Controller.HUMAN)


class GameStatus(Enum):
    GOAT_PLACING = "goat_placing"
    GOAT_MOVING = "goat_moving"
    TIGER_MOVING = "tiger_moving"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class Controllers:
    tiger: Controller = Controller.HUMAN
    goat: Controller = Controller.HUMAN

    def of(self, side: Side) -> Controller:
        return self.tiger if side == Side.TIGER else self.goat

    def without_remote(self) -> "Controllers":
        return Controllers(
            tiger=Controller.HUMAN if self.tiger == Controller.REMOTE else self.tiger,
            goat=Controller.HUMAN if self.goat == Controller.REMOTE else self.goat,
        )

    @classmethod
    def networked(cls, local_side: Optional[Side]) -> "Controllers":
        # A spectator (local_side None) controls nothing.
        return cls(
            tiger=Controller.HUMAN if local_side == Side.TIGER else Controller.REMOTE,
            goat=Controller.HUMAN if local_side == Side.GOAT else Controller.REMOTE,
        )


@dataclass(frozen=True)
class MoveRecord:
    """Last-move descriptor; a placement has ``origin == target``."""

    piece: Side
    origin: Position
    target: Position
    captured: Optional[Position] = None

    @classmethod
    def from_action(cls, side: Side, action: Action) -> "MoveRecord":
        if isinstance(action, Placement):
            return cls(side, action.position, action.position)
        if isinstance(action, Move):
            return cls(side, action.origin, action.target, action.captured)
        raise TypeError(f"Unknown action {action!r}")


@dataclass(frozen=True)
class MatchState:
    board: BoardState = field(default_factory=BoardState.initial)
    controllers: Controllers = field(default_factory=Controllers)
    outcome: Optional[Outcome] = None
    selected: Optional[Position] = None
    ai_thinking: bool = False
    generation: int = 0
    last_move: Optional[MoveRecord] = None
    last_rejected: bool = False
    needs_sync: bool = False

    @property
    def is_over(self) -> bool:
        return self.outcome is not None

    @property
    def status(self) -> GameStatus:
        if self.outcome is not None:
            return GameStatus.GAME_OVER
        if self.board.turn == Side.TIGER:
            return GameStatus.TIGER_MOVING
        if self.board.phase == Phase.PLACEMENT:
            return GameStatus.GOAT_PLACING
        return GameStatus.GOAT_MOVING

    @property
    def controller_to_move(self) -> Controller:
        return self.controllers.of(self.board.turn)

    @property
    def accepts_input(self) -> bool:
        return not self.is_over and not self.ai_thinking and self.controller_to_move == Controller.HUMAN

    @property
    def awaiting_ai(self) -> bool:
        return not self.is_over and self.controller_to_move == Controller.AI

    @property
    def valid_targets(self) -> FrozenSet[Position]:
        if self.selected is None:
            return frozenset()
        piece = self.board.piece_at(self.selected)
        if piece is None:
            return frozenset()
        return legal_moves(piece, self.board)

    @property
    def outcome_text(self) -> Optional[str]:
        return self.outcome.message if self.outcome else None

    @property
    def tigers_trapped(self) -> int:
        return count_trapped_tigers(self.board)
