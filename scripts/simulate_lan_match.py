#!/usr/bin/env python3
"""Run a host and a guest in one process over the in-memory transport.

Each peer's moves are chosen by its own computer opponent and travel as
snapshots, exactly as in a two-machine game. Useful for watching the
protocol with ``--debug``.
"""

import argparse
import asyncio
import json
import logging

import numpy as np

from bagchal.ai import Difficulty, HeuristicAI
from bagchal.config import GameConfig, load_config
from bagchal.orchestration import GameMode, GameOrchestrator, GameOrchestratorConfig
from bagchal.preferences import load_preferences, remember_display_name
from bagchal.session import InMemoryRendezvous, PeerSession, Role, SessionBinding

logger = logging.getLogger(__name__)


async def settle(rounds: int = 10) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


async def simulate(config: GameConfig, *, host_name: str, max_ply: int, seed=None) -> dict:
    rendezvous = InMemoryRendezvous()
    seeds = np.random.SeedSequence(seed).spawn(2)
    peers = []
    for name, peer_seed in ((host_name, seeds[0]), ("Guest", seeds[1])):
        orchestrator = GameOrchestrator(GameOrchestratorConfig(mode=GameMode.PVP))
        session = PeerSession(rendezvous)
        SessionBinding(orchestrator, session, config.timer.turn_timer()).attach()
        ai = HeuristicAI(Difficulty(config.ai.difficulty), rng=np.random.default_rng(peer_seed))
        peers.append((name, orchestrator, session, ai))

    _, host_orch, host_session, _ = peers[0]
    _, guest_orch, guest_session, _ = peers[1]
    code = await host_session.create_room(Role(config.session.role), host_name, config.timer.settings())
    await guest_session.join_room(code, "Guest")
    await settle()
    guest_session.send_chat("Good luck!")
    await settle()

    for _ in range(max_ply):
        if host_orch.state.is_over:
            break
        for name, orchestrator, session, ai in peers:
            state = orchestrator.state
            if state.accepts_input and state.board.turn == session.context.local_side:
                action = ai.choose_action(state.board)
                logger.debug("%s plays %r", name, action)
                orchestrator.play(action)
                break
        await settle()

    final = host_orch.state
    result = {
        "room": code,
        "host": host_name,
        "host_role": host_session.context.role.value,
        "guest_role": guest_session.context.role.value if guest_session.context.role else None,
        "outcome": final.outcome_text,
        "goats_captured": final.board.goats_captured,
        "boards_match": final.board == guest_orch.state.board,
        "chat": [message.text for message in host_session.context.chat],
    }
    host_session.disconnect()
    guest_session.disconnect()
    return result


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--config", type=str, default="configs/default.yaml")
    parser.add_argument("--name", type=str, help="Host display name; remembered for next time")
    parser.add_argument("--host-role", choices=[Role.TIGER.value, Role.GOAT.value])
    parser.add_argument("--difficulty", choices=[d.value for d in Difficulty])
    parser.add_argument("--max-ply", type=int, default=200)
    parser.add_argument("--seed", type=int)
    parser.add_argument("--debug", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO, format="%(message)s")

    config = load_config(args.config)
    if args.host_role is not None:
        config.session.role = args.host_role
    if args.difficulty is not None:
        config.ai.difficulty = args.difficulty

    if args.name:
        host_name = remember_display_name(args.name).display_name or "Host"
    else:
        host_name = config.session.display_name or load_preferences().display_name or "Host"

    result = asyncio.run(simulate(config, host_name=host_name, max_ply=args.max_ply, seed=args.seed))
    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
