#!/usr/bin/env python3
"""Play Bagh-Chal in the console against the computer, with optional move log & replay."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from bagchal.ai import Difficulty
from bagchal.config import GameConfig, load_config
from bagchal.core import Move, Phase, Placement, Position, Side, decode_action, encode_action
from bagchal.env import BaghChalEnv, render_board
from bagchal.orchestration import AIMoveReady, Controller, Event, GameMode, GameOrchestrator, MatchState, NodeClicked

logger = logging.getLogger(__name__)


def describe_action(action) -> str:
    if isinstance(action, Placement):
        return f"place at {action.position}"
    verb = "jumps" if action.is_capture else "moves"
    return f"{verb} {action.origin} -> {action.target}"


def format_state(state: MatchState) -> str:
    board = state.board
    lines = [render_board(board)]
    lines.append(
        f"Turn: {board.turn.value} | goats to place: {board.goats_to_place} | "
        f"captured: {board.goats_captured} | trapped tigers: {state.tigers_trapped}"
    )
    if state.selected is not None:
        lines.append(f"Selected {state.selected}; targets: {sorted(state.valid_targets)}")
    return "\n".join(lines)


def parse_positions(raw: str) -> Optional[List[Position]]:
    parts = raw.replace(",", " ").split()
    if not parts or len(parts) % 2 or not all(p.isdigit() for p in parts):
        return None
    values = [int(p) for p in parts]
    return [(values[i], values[i + 1]) for i in range(0, len(values), 2)]


def save_log(log: Dict, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(log, indent=2))
    logger.info("Saved move log to %s", path)


def replay_logged_game(log_path: Path, *, verbose: bool = True) -> Dict[str, object]:
    data = json.loads(log_path.read_text())
    moves = data.get("moves", [])
    env = BaghChalEnv()
    env.reset()
    if verbose:
        print(render_board(env.board))
    for entry in moves:
        idx = entry["action_index"]
        env.step(idx)
        if verbose:
            print(f"\n{entry.get('actor', 'unknown')} ({entry.get('side', '?')}) {describe_action(decode_action(idx))}")
            print(render_board(env.board))
    outcome = env.outcome
    summary = {
        "result": outcome.reason.value if outcome else "ongoing",
        "winner": outcome.winner.value if outcome else None,
        "moves": len(moves),
        "board": env.board.grid.tolist(),
    }
    if verbose:
        print(f"\nResult: {outcome.message if outcome else 'unfinished'}")
    return summary


async def play_interactive(config: GameConfig, log_file: Optional[str]) -> None:
    orchestrator = GameOrchestrator(config.orchestrator_config())
    log_records: List[Dict] = []

    def record(state: MatchState, event: Event) -> None:
        if not isinstance(event, (NodeClicked, AIMoveReady)) or not state.needs_sync:
            return
        move = state.last_move
        action = Placement(move.target) if move.origin == move.target else Move(move.origin, move.target)
        log_records.append(
            {
                "move_index": len(log_records),
                "actor": "ai" if isinstance(event, AIMoveReady) else "human",
                "side": move.piece.value,
                "action_index": encode_action(action),
                "from": list(move.origin),
                "to": list(move.target),
            }
        )
        if isinstance(event, AIMoveReady):
            print(f"Computer ({move.piece.value}) {describe_action(action)}")

    orchestrator.subscribe(record)
    orchestrator.start()
    loop = asyncio.get_running_loop()

    while True:
        await orchestrator.wait_for_ai()
        state = orchestrator.state
        if state.is_over:
            break
        print("\n" + format_state(state))
        if state.controller_to_move != Controller.HUMAN:
            await asyncio.sleep(0)
            continue
        placing = state.board.turn == Side.GOAT and state.board.phase == Phase.PLACEMENT
        prompt = "Place at 'row col'" if placing else "Move 'row col row col'"
        raw = (await loop.run_in_executor(None, input, f"{prompt} (q to quit): ")).strip()
        if raw.lower() in {"q", "quit", "exit"}:
            print("Bye.")
            orchestrator.close()
            return
        positions = parse_positions(raw)
        if positions is None:
            print("Enter coordinates as numbers, e.g. '2 2' or '0 0 1 1'.")
            continue
        for position in positions:
            state = orchestrator.click(position)
            if state.last_rejected:
                print("That is not a legal move.")
                break

    print("\n" + format_state(orchestrator.state))
    print(orchestrator.state.outcome.message)
    orchestrator.close()

    if log_file:
        metadata = {
            "mode": config.mode,
            "difficulty": config.ai.difficulty,
            "seed": config.ai.seed,
            "result": orchestrator.state.outcome.reason.value,
        }
        save_log({"metadata": metadata, "moves": log_records}, Path(log_file))


def main() -> None:
    parser = argparse.ArgumentParser(description="Play Bagh-Chal in the console against the computer.")
    parser.add_argument("--config", type=str, default="configs/default.yaml")
    parser.add_argument("--mode", choices=[m.value for m in GameMode])
    parser.add_argument("--difficulty", choices=[d.value for d in Difficulty])
    parser.add_argument("--seed", type=int)
    parser.add_argument("--log-file", type=str)
    parser.add_argument("--replay-log", type=str, help="Replay a logged game and exit")
    parser.add_argument("--replay-quiet", action="store_true")
    parser.add_argument("--debug", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO, format="%(message)s")

    if args.replay_log:
        replay_logged_game(Path(args.replay_log), verbose=not args.replay_quiet)
        return

    config = load_config(args.config)
    if args.mode is not None:
        config.mode = args.mode
    if args.difficulty is not None:
        config.ai.difficulty = args.difficulty
    if args.seed is not None:
        config.ai.seed = args.seed

    try:
        asyncio.run(play_interactive(config, args.log_file))
    except (KeyboardInterrupt, EOFError):
        sys.exit(0)


if __name__ == "__main__":
    main()
