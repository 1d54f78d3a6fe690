import json
from pathlib import Path

from bagchal import BaghChalEnv
from bagchal.core import Move, Placement, encode_action

from scripts.play_vs_ai import parse_positions, replay_logged_game


def create_sample_log(path: Path) -> None:
    env = BaghChalEnv()
    env.reset()
    moves = []
    action1 = encode_action(Placement((2, 2)))
    env.step(action1)
    moves.append({
        "move_index": 0,
        "actor": "human",
        "side": "goat",
        "action_index": action1,
        "from": [2, 2],
        "to": [2, 2],
    })
    action2 = encode_action(Move((0, 0), (0, 1)))
    moves.append({
        "move_index": 1,
        "actor": "ai",
        "side": "tiger",
        "action_index": action2,
        "from": [0, 0],
        "to": [0, 1],
    })
    log = {"metadata": {}, "moves": moves}
    path.write_text(json.dumps(log))


def test_replay_logged_game(tmp_path):
    log_path = tmp_path / "game.json"
    create_sample_log(log_path)
    summary = replay_logged_game(log_path, verbose=False)
    assert summary["moves"] == 2
    assert summary["result"] == "ongoing"
    assert summary["winner"] is None
    board = summary["board"]
    assert board[2][2] == 1
    assert board[0][1] == 2
    assert board[0][0] == 0


def test_parse_positions():
    assert parse_positions("2 2") == [(2, 2)]
    assert parse_positions("0,0 1,1") == [(0, 0), (1, 1)]
    assert parse_positions("1") is None
    assert parse_positions("a b") is None
