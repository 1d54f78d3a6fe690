"""Transport boundary for peer sessions.

A ``Rendezvous`` resolves a room id to a bidirectional ``Channel``. The
in-memory implementation below delivers every callback through
``loop.call_soon`` so ordering matches a real network: nothing arrives
synchronously inside ``send``.
"""

from __future__ import annotations

import asyncio
import logging
import random
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

ROOM_CODE_MIN = 10000
ROOM_CODE_MAX = 99999
ROOM_ID_PREFIX = "bagchal-"


class SessionErrorCategory(Enum):
    ROOM_NOT_FOUND = "room_not_found"
    ROOM_CODE_IN_USE = "room_code_in_use"
    NETWORK = "network"
    SERVER = "server"
    CONNECTION_FAILED = "connection_failed"
    UNKNOWN = "unknown"

    @property
    def user_message(self) -> str:
        return _USER_MESSAGES[self]

    @classmethod
    def from_code(cls, code: str) -> "SessionErrorCategory":
        """Map a signalling-layer error code onto a category."""
        return _TRANSPORT_CODES.get(code, cls.UNKNOWN)


_USER_MESSAGES = {
    SessionErrorCategory.ROOM_NOT_FOUND: "Room not found - check the code and try again",
    SessionErrorCategory.ROOM_CODE_IN_USE: "Room code in use, please try again",
    SessionErrorCategory.NETWORK: "Network error - check your internet connection",
    SessionErrorCategory.SERVER: "Server error - please try again",
    SessionErrorCategory.CONNECTION_FAILED: "Connection failed - network may be blocking peer connections",
    SessionErrorCategory.UNKNOWN: "Unexpected connection error",
}

_TRANSPORT_CODES = {
    "peer-unavailable": SessionErrorCategory.ROOM_NOT_FOUND,
    "unavailable-id": SessionErrorCategory.ROOM_CODE_IN_USE,
    "network": SessionErrorCategory.NETWORK,
    "server-error": SessionErrorCategory.SERVER,
    "socket-error": SessionErrorCategory.SERVER,
    "webrtc": SessionErrorCategory.CONNECTION_FAILED,
}


class SessionError(Exception):
    def __init__(self, category: SessionErrorCategory, detail: Optional[str] = None) -> None:
        self.category = category
        self.detail = detail
        super().__init__(detail or category.user_message)

    @property
    def user_message(self) -> str:
        if self.category == SessionErrorCategory.UNKNOWN and self.detail:
            return f"{self.category.user_message}: {self.detail}"
        return self.category.user_message


def generate_room_code(rng: Optional[random.Random] = None) -> str:
    rng = rng or random.Random()
    return str(rng.randint(ROOM_CODE_MIN, ROOM_CODE_MAX))


def room_peer_id(code: str) -> str:
    return f"{ROOM_ID_PREFIX}{code}"


class Channel(ABC):
    """One end of an ordered, reliable message channel.

    Owners assign the ``on_*`` callbacks before the channel opens.
    ``on_close`` fires when the remote end goes away; closing locally is
    silent.
    """

    def __init__(self, metadata: Optional[Dict[str, Any]] = None) -> None:
        self.metadata: Dict[str, Any] = dict(metadata or {})
        self.on_open: Optional[Callable[[], None]] = None
        self.on_message: Optional[Callable[[str], None]] = None
        self.on_close: Optional[Callable[[], None]] = None
        self.on_error: Optional[Callable[[Exception], None]] = None

    @property
    @abstractmethod
    def is_open(self) -> bool:
        ...

    @abstractmethod
    def send(self, data: str) -> None:
        ...

    @abstractmethod
    def close(self) -> None:
        ...

    def detach(self) -> None:
        self.on_open = self.on_message = self.on_close = self.on_error = None


ConnectionHandler = Callable[[Channel], None]


class Rendezvous(ABC):
    """Signalling service: hosts register a room id, joiners connect to it."""

    @abstractmethod
    async def register(self, peer_id: str, on_connection: ConnectionHandler) -> None:
        ...

    @abstractmethod
    def unregister(self, peer_id: str) -> None:
        ...

    @abstractmethod
    async def connect(self, peer_id: str, *, metadata: Optional[Dict[str, Any]] = None) -> Channel:
        ...


class InMemoryChannel(Channel):
    def __init__(self, loop: asyncio.AbstractEventLoop, metadata: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(metadata)
        self._loop = loop
        self._peer: Optional["InMemoryChannel"] = None
        self._open = False
        self._closed = False

    @classmethod
    def pair(
        cls, loop: asyncio.AbstractEventLoop, metadata: Optional[Dict[str, Any]] = None
    ) -> Tuple["InMemoryChannel", "InMemoryChannel"]:
        left, right = cls(loop, metadata), cls(loop, metadata)
        left._peer, right._peer = right, left
        return left, right

    @property
    def is_open(self) -> bool:
        return self._open and not self._closed

    def open(self) -> None:
        self._loop.call_soon(self._mark_open)

    def _mark_open(self) -> None:
        if self._closed or self._open:
            return
        self._open = True
        if self.on_open is not None:
            self.on_open()

    def send(self, data: str) -> None:
        if not self.is_open:
            raise SessionError(SessionErrorCategory.CONNECTION_FAILED, "channel is not open")
        assert self._peer is not None
        self._loop.call_soon(self._peer._deliver, data)

    def _deliver(self, data: str) -> None:
        if self._closed:
            return
        if self.on_message is not None:
            self.on_message(data)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        peer = self._peer
        if peer is not None and not peer._closed:
            self._loop.call_soon(peer._remote_closed)

    def _remote_closed(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self.on_close is not None:
            self.on_close()

    def fail(self, error: Exception) -> None:
        """Report a transport error on this end, then drop the link."""
        if self.on_error is not None:
            self.on_error(error)
        self.close()


class InMemoryRendezvous(Rendezvous):
    """Process-local rendezvous used by tests and the local demo script.

    Setting ``outage`` makes every register/connect fail with that category.
    """

    def __init__(self) -> None:
        self._rooms: Dict[str, ConnectionHandler] = {}
        self.outage: Optional[SessionErrorCategory] = None

    def _check_outage(self) -> None:
        if self.outage is not None:
            raise SessionError(self.outage)

    async def register(self, peer_id: str, on_connection: ConnectionHandler) -> None:
        self._check_outage()
        if peer_id in self._rooms:
            raise SessionError(SessionErrorCategory.ROOM_CODE_IN_USE, f"{peer_id} is taken")
        self._rooms[peer_id] = on_connection
        logger.debug("Registered %s", peer_id)

    def unregister(self, peer_id: str) -> None:
        self._rooms.pop(peer_id, None)

    def is_registered(self, peer_id: str) -> bool:
        return peer_id in self._rooms

    async def connect(self, peer_id: str, *, metadata: Optional[Dict[str, Any]] = None) -> Channel:
        self._check_outage()
        handler = self._rooms.get(peer_id)
        if handler is None:
            raise SessionError(SessionErrorCategory.ROOM_NOT_FOUND, f"no peer {peer_id}")
        loop = asyncio.get_running_loop()
        local, remote = InMemoryChannel.pair(loop, metadata)
        handler(remote)
        remote.open()
        local.open()
        return local
