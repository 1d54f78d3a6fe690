import json
import re

import pytest

from bagchal.core import BoardState, Outcome, Side, WinReason
from bagchal.orchestration import GameMode, GameOrchestrator, GameOrchestratorConfig, MatchState
from bagchal.session import (
    ChatMessage,
    GameSnapshot,
    MessageDecodeError,
    Role,
    TimerSettings,
    decode_message,
    encode_message,
    generate_message_id,
)
from bagchal.session.messages import ChatEnvelope, GameStateMessage, RematchRequest, RematchRequestMessage

CORNERS = [(0, 0), (0, 4), (4, 0), (4, 4)]


def played_state() -> MatchState:
    orch = GameOrchestrator(GameOrchestratorConfig(mode=GameMode.PVP))
    orch.click((2, 2))
    orch.click((0, 0))
    return orch.click((1, 1))


def snapshot_dict(**overrides) -> dict:
    message = json.loads(encode_message(GameStateMessage(payload=GameSnapshot.capture(MatchState()))))
    message["payload"].update(overrides)
    return message


def test_game_state_uses_camel_case_keys() -> None:
    snapshot = GameSnapshot.capture(played_state(), host_role=Role.TIGER, timer_settings=TimerSettings())
    wire = json.loads(encode_message(GameStateMessage(payload=snapshot)))

    assert wire["type"] == "game_state"
    payload = wire["payload"]
    assert payload["goatsToPlace"] == 19
    assert payload["goatsCaptured"] == 0
    assert payload["currentTurn"] == "goat"
    assert payload["hostRole"] == "tiger"
    assert payload["timerSettings"] == {"enabled": False, "seconds": 30}
    assert payload["lastMove"] == {
        "pieceType": "tiger",
        "from": {"row": 0, "col": 0},
        "to": {"row": 1, "col": 1},
        "capturedAt": None,
    }
    assert payload["tigers"][0] == {"type": "tiger", "position": {"row": 1, "col": 1}}


def test_decoded_snapshot_rebuilds_the_board() -> None:
    state = played_state()
    message = decode_message(encode_message(GameStateMessage(payload=GameSnapshot.capture(state))))
    assert isinstance(message, GameStateMessage)
    assert message.payload.to_board() == state.board
    assert message.payload.outcome() is None
    assert message.payload.last_move.to_record() == state.last_move


def test_finished_snapshot_carries_outcome() -> None:
    board = BoardState.from_positions(CORNERS, goats_to_place=15, goats_captured=5)
    outcome = Outcome(Side.TIGER, WinReason.CAPTURE_THRESHOLD)
    snapshot = GameSnapshot.capture(MatchState(board=board, outcome=outcome))
    assert snapshot.game_over == outcome.message

    decoded = decode_message(encode_message(GameStateMessage(payload=snapshot)))
    assert decoded.payload.outcome() == outcome


@pytest.mark.parametrize(
    "raw",
    [
        '{"type": "teleport", "payload": {}}',
        '{"type": "chat"}',
        "not json",
        json.dumps({"type": "timer_sync", "payload": {"value": "soon"}}),
    ],
)
def test_unknown_or_malformed_messages_raise(raw) -> None:
    with pytest.raises(MessageDecodeError):
        decode_message(raw)


def test_snapshot_with_broken_board_is_rejected() -> None:
    overlapping = snapshot_dict(goats=[{"type": "goat", "position": {"row": 0, "col": 0}}], goatsToPlace=19)
    with pytest.raises(MessageDecodeError):
        decode_message(overlapping)

    with pytest.raises(MessageDecodeError):
        decode_message(snapshot_dict(goatsToPlace=12))

    off_board = snapshot_dict(goats=[{"type": "goat", "position": {"row": 5, "col": 0}}], goatsToPlace=19)
    with pytest.raises(MessageDecodeError):
        decode_message(off_board)

    with pytest.raises(MessageDecodeError):
        decode_message(snapshot_dict(winner="tiger"))


def test_rematch_request_uses_from_key() -> None:
    wire = json.loads(encode_message(RematchRequestMessage(payload=RematchRequest(requested_by="guest"))))
    assert wire == {"type": "rematch_request", "payload": {"from": "guest"}}
    assert decode_message(wire).payload.requested_by == "guest"


def test_chat_message_round_trip() -> None:
    chat = ChatMessage(id=generate_message_id(), sender="Asha", text="🐯", timestamp=1, is_emoji=True)
    wire = json.loads(encode_message(ChatEnvelope(payload=chat)))
    assert wire["payload"]["isEmoji"] is True
    assert decode_message(wire).payload == chat
    assert re.match(r"^\d+-[0-9a-z]{9}$", chat.id)


def test_role_complement() -> None:
    assert Role.TIGER.complement() == Role.GOAT
    assert Role.GOAT.complement() == Role.TIGER
    assert Role.SPECTATOR.complement() == Role.SPECTATOR
    assert Role.SPECTATOR.side is None
    assert Role.GOAT.side == Side.GOAT


def test_winner_must_match_the_win_reason() -> None:
    assert WinReason.TIGERS_TRAPPED.winner == Side.GOAT
    assert WinReason.GOATS_STALEMATED.winner == Side.TIGER
    with pytest.raises(MessageDecodeError):
        decode_message(snapshot_dict(winner="goat", winReason="capture_threshold"))
    with pytest.raises(MessageDecodeError):
        decode_message(snapshot_dict(winner="tiger", winReason="tigers_trapped"))
