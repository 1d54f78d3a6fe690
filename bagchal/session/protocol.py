from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional

from bagchal.core import Side
from bagchal.orchestration import MatchState

from .messages import (
    ChatEnvelope,
    ChatMessage,
    GameSnapshot,
    GameStateMessage,
    MatchScore,
    MessageDecodeError,
    MoveAnimation,
    PeerMessage,
    PlayerInfo,
    PlayerInfoMessage,
    RematchRequest,
    RematchRequestMessage,
    RematchResponse,
    RematchResponseMessage,
    Role,
    SpectatorJoin,
    SpectatorJoinMessage,
    TimerSettings,
    TimerSync,
    TimerSyncMessage,
    WireModel,
    decode_message,
    encode_message,
    generate_message_id,
    now_millis,
)
from .transport import (
    Channel,
    Rendezvous,
    SessionError,
    SessionErrorCategory,
    generate_room_code,
    room_peer_id,
)

logger = logging.getLogger(__name__)

_RELAYED = (GameStateMessage, ChatEnvelope, RematchRequestMessage, RematchResponseMessage)


class ConnectionState(Enum):
    IDLE = "idle"
    CREATING = "creating"
    WAITING = "waiting"
    JOINING = "joining"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


@dataclass
class SessionContext:
    state: ConnectionState = ConnectionState.IDLE
    role: Optional[Role] = None
    room_code: str = ""
    error: Optional[SessionError] = None
    is_host: bool = False
    player_name: str = ""
    opponent_name: str = ""
    chat: List[ChatMessage] = field(default_factory=list)
    timer_settings: TimerSettings = field(default_factory=TimerSettings)
    timer_value: int = 30
    match_score: MatchScore = field(default_factory=MatchScore)
    rematch_requested: bool = False
    rematch_requested_by: Optional[str] = None
    spectators: List[str] = field(default_factory=list)
    last_move: Optional[MoveAnimation] = None

    @property
    def is_spectator(self) -> bool:
        return self.role == Role.SPECTATOR

    @property
    def local_side(self) -> Optional[Side]:
        return self.role.side if self.role is not None else None

    @property
    def host_side(self) -> Optional[Side]:
        if self.role is None or self.is_spectator:
            return None
        return self.local_side if self.is_host else self.role.complement().side


class PeerSession:
    """One peer's end of a networked match.

    The host registers a room and accepts one primary guest; any further
    joiner is treated as a spectator and receives a copy of everything the
    host sends. Game logic is not touched here: the ``on_*`` hooks are
    assigned by ``SessionBinding``.
    """

    def __init__(self, rendezvous: Rendezvous, *, rng: Optional[random.Random] = None) -> None:
        self.rendezvous = rendezvous
        self.rng = rng or random.Random()
        self.context = SessionContext()
        self._primary: Optional[Channel] = None
        self._spectator_links: List[Channel] = []
        self._spectator_names: Dict[int, str] = {}
        self._registered_id: Optional[str] = None
        self._finished_winner: Optional[Side] = None

        self.on_connected: Optional[Callable[[], None]] = None
        self.on_game_state: Optional[Callable[[GameSnapshot], None]] = None
        self.on_role_assigned: Optional[Callable[[Role], None]] = None
        self.on_rematch_accepted: Optional[Callable[[Role], None]] = None
        self.on_timer_sync: Optional[Callable[[int], None]] = None
        self.on_spectator_joined: Optional[Callable[[str], None]] = None
        self.on_disconnected: Optional[Callable[[], None]] = None

    @property
    def connected(self) -> bool:
        return self.context.state == ConnectionState.CONNECTED

    # ------------------------------------------------------------------
    # Establishment
    # ------------------------------------------------------------------
    async def create_room(self, role: Role, name: str, timer_settings: Optional[TimerSettings] = None) -> str:
        if role == Role.SPECTATOR:
            raise ValueError("The host must play a side")
        self._teardown()
        settings = timer_settings or TimerSettings()
        self.context = SessionContext(
            state=ConnectionState.CREATING,
            role=role,
            is_host=True,
            player_name=name,
            timer_settings=settings,
            timer_value=settings.seconds,
        )
        code = generate_room_code(self.rng)
        peer_id = room_peer_id(code)
        try:
            await self.rendezvous.register(peer_id, self._on_incoming)
        except SessionError as exc:
            self._fail(exc)
            raise
        self._registered_id = peer_id
        self.context.room_code = code
        self.context.state = ConnectionState.WAITING
        logger.info("Room %s created, waiting for an opponent", code)
        return code

    async def join_room(self, code: str, name: str, *, as_spectator: bool = False) -> None:
        self._teardown()
        self.context = SessionContext(
            state=ConnectionState.JOINING,
            role=Role.SPECTATOR if as_spectator else None,
            room_code=code,
            player_name=name,
        )
        try:
            channel = await self.rendezvous.connect(room_peer_id(code), metadata={"spectator": as_spectator})
        except SessionError as exc:
            self._fail(exc)
            raise
        self._primary = channel
        self._wire_primary(channel)
        logger.debug("Joining room %s as %s", code, "spectator" if as_spectator else "player")

    def _fail(self, error: SessionError) -> None:
        logger.warning("Session error: %s", error.user_message)
        self.context.error = error
        self.context.state = ConnectionState.IDLE

    def _on_incoming(self, channel: Channel) -> None:
        wants_spectator = bool(channel.metadata.get("spectator"))
        if wants_spectator or self._primary is not None:
            self._wire_spectator(channel)
            return
        self._primary = channel
        self._wire_primary(channel)

    def _wire_primary(self, channel: Channel) -> None:
        def opened() -> None:
            self.context.state = ConnectionState.CONNECTED
            self.context.error = None
            if not self.context.is_spectator:
                info = PlayerInfo(
                    name=self.context.player_name,
                    host_role=self.context.role if self.context.is_host else None,
                    timer_settings=self.context.timer_settings if self.context.is_host else None,
                    is_host=self.context.is_host,
                )
                channel.send(encode_message(PlayerInfoMessage(payload=info)))
            else:
                channel.send(encode_message(SpectatorJoinMessage(payload=SpectatorJoin(name=self.context.player_name))))
            logger.info("Connected to room %s", self.context.room_code)
            if self.on_connected is not None:
                self.on_connected()

        def closed() -> None:
            if channel is not self._primary:
                return
            logger.warning("Connection to the other player was lost")
            self._primary = None
            self.context.state = ConnectionState.DISCONNECTED
            if self.on_disconnected is not None:
                self.on_disconnected()

        def errored(error: Exception) -> None:
            if isinstance(error, SessionError):
                self.context.error = error
            else:
                self.context.error = SessionError(SessionErrorCategory.CONNECTION_FAILED, str(error))
            logger.warning("Connection error: %s", error)

        channel.on_open = opened
        channel.on_message = self._receive
        channel.on_close = closed
        channel.on_error = errored

    def _wire_spectator(self, channel: Channel) -> None:
        self._spectator_links.append(channel)

        def opened() -> None:
            info = PlayerInfo(
                name=self.context.player_name,
                timer_settings=self.context.timer_settings,
                is_host=True,
                role=Role.SPECTATOR,
            )
            channel.send(encode_message(PlayerInfoMessage(payload=info)))

        def closed() -> None:
            if channel in self._spectator_links:
                self._spectator_links.remove(channel)
            name = self._spectator_names.pop(id(channel), None)
            if name is not None and name in self.context.spectators:
                self.context.spectators.remove(name)
            logger.info("Spectator %s left", name or "(unnamed)")

        def received(data: str) -> None:
            message = self._decode(data)
            if message is None:
                return
            # A late player_info means a would-be player found the room full.
            if isinstance(message, (SpectatorJoinMessage, PlayerInfoMessage)):
                if id(channel) not in self._spectator_names:
                    self._spectator_joined(channel, message.payload.name)
            else:
                logger.debug("Ignoring %s from a spectator", message.type)

        channel.on_open = opened
        channel.on_message = received
        channel.on_close = closed
        channel.on_error = lambda error: logger.warning("Spectator link error: %s", error)

    def _spectator_joined(self, channel: Channel, name: str) -> None:
        self._spectator_names[id(channel)] = name
        self.context.spectators.append(name)
        logger.info("%s is watching", name)
        if self.on_spectator_joined is not None:
            self.on_spectator_joined(name)

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------
    def _send(self, message: WireModel) -> None:
        data = encode_message(message)
        if self._primary is not None and self._primary.is_open:
            self._primary.send(data)
        else:
            logger.warning("Main connection not ready; %s not sent", getattr(message, "type", message))
        for link in list(self._spectator_links):
            if link.is_open:
                link.send(data)

    def _can_speak(self) -> bool:
        if self.context.is_spectator:
            logger.debug("Spectators do not send game messages")
            return False
        return True

    def send_game_state(self, state: MatchState, *, timer_value: Optional[int] = None) -> None:
        if not self._can_speak():
            return
        snapshot = GameSnapshot.capture(
            state,
            host_role=self.context.role if self.context.is_host else None,
            timer_settings=self.context.timer_settings,
            timer_value=timer_value,
            match_score=self.context.match_score,
            spectators=self.context.spectators,
        )
        self._send(GameStateMessage(payload=snapshot))

    def send_chat(self, text: str, *, is_emoji: bool = False) -> ChatMessage:
        message = ChatMessage(
            id=generate_message_id(),
            sender=self.context.player_name,
            text=text,
            timestamp=now_millis(),
            is_emoji=is_emoji,
        )
        self.context.chat.append(message)
        if self._can_speak():
            self._send(ChatEnvelope(payload=message))
        return message

    def request_rematch(self) -> None:
        if not self._can_speak():
            return
        requested_by = "host" if self.context.is_host else "guest"
        self.context.rematch_requested = True
        self.context.rematch_requested_by = requested_by
        self._send(RematchRequestMessage(payload=RematchRequest(requested_by=requested_by)))

    def respond_to_rematch(self, accepted: bool) -> None:
        if not self._can_speak():
            return
        self._send(RematchResponseMessage(payload=RematchResponse(accepted=accepted)))
        self._clear_rematch()
        if accepted:
            self._start_rematch()

    def sync_timer(self, value: int) -> None:
        self.context.timer_value = value
        if self.context.is_host:
            self._send(TimerSyncMessage(payload=TimerSync(value=value)))

    def record_result(self, winner: Optional[Side]) -> None:
        """Remember who won the finished game; credited when a rematch starts."""
        self._finished_winner = winner

    def _clear_rematch(self) -> None:
        self.context.rematch_requested = False
        self.context.rematch_requested_by = None

    def _start_rematch(self) -> None:
        winner, self._finished_winner = self._finished_winner, None
        host_side = self.context.host_side
        if winner is not None and host_side is not None:
            score = self.context.match_score
            if winner == host_side:
                self.context.match_score = score.model_copy(update={"host": score.host + 1})
            else:
                self.context.match_score = score.model_copy(update={"guest": score.guest + 1})
        if self.context.role is not None and not self.context.is_spectator:
            self.context.role = self.context.role.complement()
        logger.info("Rematch: now playing %s", self.context.role.value if self.context.role else "nothing")
        if self.on_rematch_accepted is not None and self.context.role is not None:
            self.on_rematch_accepted(self.context.role)

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------
    def _decode(self, data) -> Optional[PeerMessage]:
        try:
            return decode_message(data)
        except MessageDecodeError as exc:
            logger.warning("Dropping malformed message: %s", exc.__cause__ or exc)
            return None

    def _receive(self, data) -> None:
        message = self._decode(data)
        if message is None:
            return
        self._handle(message)
        # Spectators only hear the host, so the guest's traffic is relayed.
        if self.context.is_host and isinstance(message, _RELAYED):
            relay = encode_message(message)
            for link in list(self._spectator_links):
                if link.is_open:
                    link.send(relay)

    def _handle(self, message: PeerMessage) -> None:
        logger.debug("Received %s", message.type)
        if isinstance(message, GameStateMessage):
            self._on_game_state(message.payload)
        elif isinstance(message, ChatEnvelope):
            self.context.chat.append(message.payload)
        elif isinstance(message, RematchRequestMessage):
            self.context.rematch_requested = True
            self.context.rematch_requested_by = message.payload.requested_by
        elif isinstance(message, RematchResponseMessage):
            self._clear_rematch()
            if message.payload.accepted:
                self._start_rematch()
        elif isinstance(message, TimerSyncMessage):
            self.context.timer_value = message.payload.value
            if self.on_timer_sync is not None:
                self.on_timer_sync(message.payload.value)
        elif isinstance(message, PlayerInfoMessage):
            self._on_player_info(message.payload)
        elif isinstance(message, SpectatorJoinMessage):
            logger.debug("Ignoring spectator_join on the primary link")

    def _on_game_state(self, snapshot: GameSnapshot) -> None:
        self.context.last_move = snapshot.last_move
        if snapshot.match_score is not None:
            self.context.match_score = snapshot.match_score
        if not self.context.is_host:
            self.context.spectators = list(snapshot.spectators)
        if self.on_game_state is not None:
            self.on_game_state(snapshot)

    def _on_player_info(self, info: PlayerInfo) -> None:
        self.context.opponent_name = info.name
        if self.context.is_host:
            return
        if info.timer_settings is not None:
            self.context.timer_settings = info.timer_settings
            self.context.timer_value = info.timer_settings.seconds
        if info.role == Role.SPECTATOR:
            if not self.context.is_spectator:
                logger.info("Room %s is full; watching instead", self.context.room_code)
            self.context.role = Role.SPECTATOR
            if self.on_role_assigned is not None:
                self.on_role_assigned(self.context.role)
        elif info.host_role is not None and not self.context.is_spectator:
            self.context.role = info.host_role.complement()
            logger.info("Playing as %s", self.context.role.value)
            if self.on_role_assigned is not None:
                self.on_role_assigned(self.context.role)

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------
    def _teardown(self) -> None:
        for link in self._spectator_links:
            link.detach()
            link.close()
        self._spectator_links = []
        self._spectator_names.clear()
        if self._primary is not None:
            self._primary.detach()
            self._primary.close()
            self._primary = None
        if self._registered_id is not None:
            self.rendezvous.unregister(self._registered_id)
            self._registered_id = None
        self._finished_winner = None

    def disconnect(self) -> None:
        self._teardown()
        self.context = SessionContext()
        logger.info("Left the session")
