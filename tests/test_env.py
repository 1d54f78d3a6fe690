import numpy as np
import pytest

from bagchal import BaghChalEnv
from bagchal.core import ACTION_VECTOR_SIZE, Move, Placement, Side, encode_action, enumerate_legal_actions


def test_reset_returns_valid_observation():
    env = BaghChalEnv()
    obs, info = env.reset()

    assert obs["board"].shape == (3, 5, 5)
    assert obs["aux"].shape == (5,)
    assert info["legal_action_mask"].shape == (ACTION_VECTOR_SIZE,)
    assert info["turn"] == "goat"
    assert env.observation_space.contains(obs)


def test_legal_mask_matches_enumeration():
    env = BaghChalEnv()
    env.reset()
    mask = env.legal_action_mask()
    legal = enumerate_legal_actions(env.board)
    assert np.count_nonzero(mask) == len(legal) == 21
    for action in legal:
        assert mask[encode_action(action)] == 1


def test_step_advances_state_and_returns_reward():
    env = BaghChalEnv()
    obs, _ = env.reset()

    next_obs, reward, terminated, truncated, info = env.step(encode_action(Placement((2, 2))))

    assert reward == 0.0
    assert not terminated
    assert not truncated
    assert np.any(next_obs["board"] != obs["board"])
    assert info["turn"] == "tiger"
    assert info["ply"] == 1
    assert env.board.goats_to_place == 19


def test_illegal_action_raises_when_enforced():
    env = BaghChalEnv()
    env.reset()
    with pytest.raises(ValueError):
        env.step(encode_action(Placement((0, 0))))
    with pytest.raises(ValueError):
        env.step(ACTION_VECTOR_SIZE)


def test_illegal_action_forfeits_when_not_enforced():
    env = BaghChalEnv(enforce_legal_actions=False)
    env.reset()
    env.step(encode_action(Placement((2, 2))))

    # Tigers may not place pieces.
    _, reward, terminated, truncated, _ = env.step(encode_action(Placement((1, 1))))
    assert reward == 1.0
    assert terminated and not truncated
    with pytest.raises(ValueError):
        env.step(encode_action(Move((0, 0), (0, 1))))


def test_long_games_are_truncated():
    env = BaghChalEnv()
    env.reset(options={"max_ply": 2})
    env.step(encode_action(Placement((2, 2))))
    _, _, terminated, truncated, info = env.step(encode_action(Move((0, 0), (0, 1))))
    assert not terminated
    assert truncated
    assert env.ply == 2
    assert info["turn"] == Side.GOAT.value


def test_ansi_render():
    env = BaghChalEnv(render_mode="ansi")
    env.reset()
    env.step(encode_action(Placement((2, 2))))
    assert env.render().splitlines() == [
        "T + + + T",
        "+ + + + +",
        "+ + G + +",
        "+ + + + +",
        "T + + + T",
    ]
