import numpy as np

from bagchal.ai import Difficulty, HeuristicAI, RandomAgent
from bagchal.core import Side
from bagchal.env import BaghChalEnv
from bagchal.evaluation import evaluate_agents, play_game


def test_evaluate_random_vs_random_small():
    tiger = RandomAgent(np.random.default_rng(0))
    goat = RandomAgent(np.random.default_rng(1))
    result = evaluate_agents(tiger, goat, episodes=2, max_ply=60)
    assert result.games_played == 2
    assert result.tiger_wins + result.goat_wins + result.draws == 2
    assert 0 < result.average_length <= 60
    assert 0.0 <= result.winrate_tiger() <= 1.0


def test_play_game_reports_winner_or_draw():
    env = BaghChalEnv(max_ply=400)
    tiger = HeuristicAI(Difficulty.HARD, rng=np.random.default_rng(0))
    goat = RandomAgent(np.random.default_rng(2))
    winner = play_game(tiger, goat, env)
    assert winner in (Side.TIGER, Side.GOAT, None)
    if winner is not None:
        assert env.outcome.winner == winner
