#!/usr/bin/env python3
"""Pit two computer opponents against each other and report win rates."""

import argparse
import json
import logging

import numpy as np

from bagchal.ai import Difficulty, HeuristicAI, RandomAgent
from bagchal.evaluation import evaluate_agents

AGENT_CHOICES = [d.value for d in Difficulty] + ["random"]


def build_agent(name: str, rng: np.random.Generator):
    if name == "random":
        return RandomAgent(rng)
    return HeuristicAI(Difficulty(name), rng=rng)


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--tiger", choices=AGENT_CHOICES, default="hard")
    parser.add_argument("--goat", choices=AGENT_CHOICES, default="random")
    parser.add_argument("--episodes", type=int, default=20)
    parser.add_argument("--max-ply", type=int, default=200)
    parser.add_argument("--seed", type=int)
    parser.add_argument("--debug", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO, format="%(message)s")

    seeds = np.random.SeedSequence(args.seed).spawn(2)
    tiger = build_agent(args.tiger, np.random.default_rng(seeds[0]))
    goat = build_agent(args.goat, np.random.default_rng(seeds[1]))

    result = evaluate_agents(tiger, goat, episodes=args.episodes, max_ply=args.max_ply)

    output = {
        "tiger": args.tiger,
        "goat": args.goat,
        "games": result.games_played,
        "tiger_wins": result.tiger_wins,
        "goat_wins": result.goat_wins,
        "draws": result.draws,
        "average_length": result.average_length,
        "tiger_winrate": result.winrate_tiger(),
        "goat_winrate": result.winrate_goat(),
    }
    print(json.dumps(output, indent=2))


if __name__ == "__main__":
    main()
