"""Inputs processed by the orchestrator, one at a time."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from bagchal.core import Action, BoardState, Outcome, Position

from .state import Controllers, MoveRecord


@dataclass(frozen=True)
class NodeClicked:
    position: Position


@dataclass(frozen=True)
class PieceSelected:
    position: Position


@dataclass(frozen=True)
class AITurnStarted:
    generation: int


@dataclass(frozen=True)
class AIMoveReady:
    action: Optional[Action]
    generation: int


@dataclass(frozen=True)
class SnapshotApplied:
    board: BoardState
    outcome: Optional[Outcome] = None
    last_move: Optional[MoveRecord] = None


@dataclass(frozen=True)
class TurnTimedOut:
    pass


@dataclass(frozen=True)
class GameReset:
    pass


@dataclass(frozen=True)
class ControllersChanged:
    controllers: Controllers


@dataclass(frozen=True)
class RemoteDisconnected:
    pass


Event = Union[
    NodeClicked,
    PieceSelected,
    AITurnStarted,
    AIMoveReady,
    SnapshotApplied,
    TurnTimedOut,
    GameReset,
    ControllersChanged,
    RemoteDisconnected,
]
