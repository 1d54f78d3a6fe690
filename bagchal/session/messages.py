"""Peer message envelopes.

Every message on the wire is a JSON object ``{"type": <tag>, "payload": {...}}``
with camelCase payload keys. The set of tags is closed; decoding anything
else raises ``MessageDecodeError``.
"""

from __future__ import annotations

import random
import string
import time
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from bagchal.core import BOARD_SIZE, BoardState, Outcome, Piece, Side, WinReason
from bagchal.orchestration import MatchState, MoveRecord
from bagchal.validation import validate_board


class MessageDecodeError(ValueError):
    pass


class Role(str, Enum):
    TIGER = "tiger"
    GOAT = "goat"
    SPECTATOR = "spectator"

    @property
    def side(self) -> Optional[Side]:
        if self == Role.SPECTATOR:
            return None
        return Side(self.value)

    def complement(self) -> "Role":
        if self == Role.TIGER:
            return Role.GOAT
        if self == Role.GOAT:
            return Role.TIGER
        return Role.SPECTATOR


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class PositionPayload(WireModel):
    row: int = Field(ge=0, lt=BOARD_SIZE)
    col: int = Field(ge=0, lt=BOARD_SIZE)

    @classmethod
    def of(cls, position) -> "PositionPayload":
        return cls(row=position[0], col=position[1])

    def as_tuple(self):
        return (self.row, self.col)


class PiecePayload(WireModel):
    type: Side
    position: PositionPayload


class MoveAnimation(WireModel):
    piece_type: Side
    origin: PositionPayload = Field(alias="from")
    to: PositionPayload
    captured_at: Optional[PositionPayload] = None

    @classmethod
    def from_record(cls, record: MoveRecord) -> "MoveAnimation":
        return cls(
            piece_type=record.piece,
            origin=PositionPayload.of(record.origin),
            to=PositionPayload.of(record.target),
            captured_at=PositionPayload.of(record.captured) if record.captured else None,
        )

    def to_record(self) -> MoveRecord:
        return MoveRecord(
            piece=self.piece_type,
            origin=self.origin.as_tuple(),
            target=self.to.as_tuple(),
            captured=self.captured_at.as_tuple() if self.captured_at else None,
        )


class TimerSettings(WireModel):
    enabled: bool = False
    seconds: int = Field(30, ge=0)


class MatchScore(WireModel):
    host: int = 0
    guest: int = 0


class ChatMessage(WireModel):
    id: str
    sender: str
    text: str
    timestamp: int
    is_emoji: bool = False


class PlayerInfo(WireModel):
    name: str
    host_role: Optional[Role] = None
    timer_settings: Optional[TimerSettings] = None
    is_host: bool = False
    # Set by the host when the recipient only gets to watch.
    role: Optional[Role] = None


class GameSnapshot(WireModel):
    tigers: List[PiecePayload]
    goats: List[PiecePayload] = Field(default_factory=list)
    goats_to_place: int
    goats_captured: int
    current_turn: Side
    game_over: Optional[str] = None
    winner: Optional[Side] = None
    win_reason: Optional[WinReason] = None
    host_role: Optional[Role] = None
    last_move: Optional[MoveAnimation] = None
    timer_settings: Optional[TimerSettings] = None
    timer_value: Optional[int] = None
    match_score: Optional[MatchScore] = None
    spectators: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_board(self) -> "GameSnapshot":
        if (self.winner is None) != (self.win_reason is None):
            raise ValueError("winner and winReason must be sent together")
        if self.win_reason is not None and self.win_reason.winner != self.winner:
            raise ValueError(f"{self.win_reason.value} is a {self.win_reason.winner.value} win, not {self.winner.value}")
        validate_board(self.to_board())
        return self

    @classmethod
    def capture(
        cls,
        state: MatchState,
        *,
        host_role: Optional[Role] = None,
        timer_settings: Optional[TimerSettings] = None,
        timer_value: Optional[int] = None,
        match_score: Optional[MatchScore] = None,
        spectators: Optional[List[str]] = None,
    ) -> "GameSnapshot":
        board = state.board
        return cls(
            tigers=[PiecePayload(type=Side.TIGER, position=PositionPayload.of(t.position)) for t in board.tigers],
            goats=[PiecePayload(type=Side.GOAT, position=PositionPayload.of(g.position)) for g in board.goats],
            goats_to_place=board.goats_to_place,
            goats_captured=board.goats_captured,
            current_turn=board.turn,
            game_over=state.outcome_text,
            winner=state.outcome.winner if state.outcome else None,
            win_reason=state.outcome.reason if state.outcome else None,
            host_role=host_role,
            last_move=MoveAnimation.from_record(state.last_move) if state.last_move else None,
            timer_settings=timer_settings,
            timer_value=timer_value,
            match_score=match_score,
            spectators=list(spectators or []),
        )

    def to_board(self) -> BoardState:
        return BoardState(
            tigers=tuple(Piece(p.type, p.position.as_tuple()) for p in self.tigers),
            goats=tuple(Piece(p.type, p.position.as_tuple()) for p in self.goats),
            goats_to_place=self.goats_to_place,
            goats_captured=self.goats_captured,
            turn=self.current_turn,
        )

    def outcome(self) -> Optional[Outcome]:
        if self.winner is None or self.win_reason is None:
            return None
        return Outcome(self.winner, self.win_reason)


class RematchRequest(WireModel):
    requested_by: Literal["host", "guest"] = Field(alias="from")


class RematchResponse(WireModel):
    accepted: bool


class TimerSync(WireModel):
    value: int


class SpectatorJoin(WireModel):
    name: str


class GameStateMessage(WireModel):
    type: Literal["game_state"] = "game_state"
    payload: GameSnapshot


class ChatEnvelope(WireModel):
    type: Literal["chat"] = "chat"
    payload: ChatMessage


class RematchRequestMessage(WireModel):
    type: Literal["rematch_request"] = "rematch_request"
    payload: RematchRequest


class RematchResponseMessage(WireModel):
    type: Literal["rematch_response"] = "rematch_response"
    payload: RematchResponse


class TimerSyncMessage(WireModel):
    type: Literal["timer_sync"] = "timer_sync"
    payload: TimerSync


class PlayerInfoMessage(WireModel):
    type: Literal["player_info"] = "player_info"
    payload: PlayerInfo


class SpectatorJoinMessage(WireModel):
    type: Literal["spectator_join"] = "spectator_join"
    payload: SpectatorJoin


PeerMessage = Annotated[
    Union[
        GameStateMessage,
        ChatEnvelope,
        RematchRequestMessage,
        RematchResponseMessage,
        TimerSyncMessage,
        PlayerInfoMessage,
        SpectatorJoinMessage,
    ],
    Field(discriminator="type"),
]

_PEER_MESSAGE = TypeAdapter(PeerMessage)


def encode_message(message: WireModel) -> str:
    return message.model_dump_json(by_alias=True)


def decode_message(raw: Union[str, bytes, dict]) -> PeerMessage:
    try:
        if isinstance(raw, dict):
            return _PEER_MESSAGE.validate_python(raw)
        return _PEER_MESSAGE.validate_json(raw)
    except ValidationError as exc:
        raise MessageDecodeError(f"Malformed peer message: {exc.error_count()} error(s)") from exc


_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_message_id() -> str:
    suffix = "".join(random.choice(_ID_ALPHABET) for _ in range(9))
    return f"{int(time.time() * 1000)}-{suffix}"


def now_millis() -> int:
    return int(time.time() * 1000)
