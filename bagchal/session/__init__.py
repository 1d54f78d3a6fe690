"""Peer-to-peer match sessions: wire messages, transport, protocol."""

from .binding import SessionBinding
from .messages import (
    ChatMessage,
    GameSnapshot,
    MatchScore,
    MessageDecodeError,
    MoveAnimation,
    PeerMessage,
    PlayerInfo,
    Role,
    TimerSettings,
    decode_message,
    encode_message,
    generate_message_id,
)
from .protocol import ConnectionState, PeerSession, SessionContext
from .transport import (
    Channel,
    InMemoryChannel,
    InMemoryRendezvous,
    Rendezvous,
    SessionError,
    SessionErrorCategory,
    generate_room_code,
    room_peer_id,
)

__all__ = [
    "SessionBinding",
    "ChatMessage",
    "GameSnapshot",
    "MatchScore",
    "MessageDecodeError",
    "MoveAnimation",
    "PeerMessage",
    "PlayerInfo",
    "Role",
    "TimerSettings",
    "decode_message",
    "encode_message",
    "generate_message_id",
    "ConnectionState",
    "PeerSession",
    "SessionContext",
    "Channel",
    "InMemoryChannel",
    "InMemoryRendezvous",
    "Rendezvous",
    "SessionError",
    "SessionErrorCategory",
    "generate_room_code",
    "room_peer_id",
]
