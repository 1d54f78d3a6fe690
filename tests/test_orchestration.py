import asyncio

import pytest

from bagchal.ai import Difficulty
from bagchal.core import BoardState, Move, Outcome, Placement, Side, WinReason
from bagchal.orchestration import (
    AIMoveReady,
    Controller,
    Controllers,
    GameMode,
    GameOrchestrator,
    GameOrchestratorConfig,
    GameReset,
    GameStatus,
    MatchState,
    MoveRecord,
    NodeClicked,
    reduce,
)

CORNERS = [(0, 0), (0, 4), (4, 0), (4, 4)]


def make_orchestrator(mode: GameMode = GameMode.PVP, delay: float = 0.0) -> GameOrchestrator:
    config = GameOrchestratorConfig(mode=mode, think_delays={Difficulty.MEDIUM: delay}, seed=1)
    return GameOrchestrator(config)


def test_placement_in_pvp() -> None:
    orch = make_orchestrator()
    state = orch.click((2, 2))
    assert state.board.goats_to_place == 19
    assert state.board.turn == Side.TIGER
    assert state.status == GameStatus.TIGER_MOVING
    assert state.needs_sync
    assert state.last_move.piece == Side.GOAT
    assert state.last_move.origin == state.last_move.target == (2, 2)


def test_placement_on_occupied_node_is_rejected() -> None:
    orch = make_orchestrator()
    state = orch.click((0, 0))
    assert state.last_rejected
    assert state.board == BoardState.initial()
    assert not state.needs_sync


def test_goats_cannot_be_selected_during_placement() -> None:
    orch = make_orchestrator()
    orch.click((2, 2))
    orch.play(Move((0, 0), (0, 1)))
    assert orch.state.board.turn == Side.GOAT

    state = orch.select((2, 2))
    assert state.selected is None
    assert state.last_rejected

    state = orch.click((2, 2))
    assert state.last_rejected
    assert state.board.goats_to_place == 19


def test_select_and_deselect_tiger() -> None:
    orch = make_orchestrator()
    orch.click((2, 2))

    state = orch.click((0, 0))
    assert state.selected == (0, 0)
    assert state.valid_targets == frozenset({(0, 1), (1, 0), (1, 1)})

    state = orch.click((0, 0))
    assert state.selected is None
    assert state.valid_targets == frozenset()


def test_invalid_destination_clears_selection() -> None:
    orch = make_orchestrator()
    orch.click((2, 2))
    orch.click((0, 0))

    state = orch.click((3, 3))
    assert state.selected is None
    assert state.last_rejected
    assert state.board.turn == Side.TIGER


def test_finished_game_blocks_input_until_reset() -> None:
    orch = make_orchestrator()
    finished = BoardState.from_positions(CORNERS, goats_to_place=15, goats_captured=5)
    state = orch.apply_snapshot(finished, Outcome(Side.TIGER, WinReason.CAPTURE_THRESHOLD))
    assert state.status == GameStatus.GAME_OVER
    assert state.outcome_text == "Tigers Win! 5 goats have been captured."

    assert orch.click((2, 2)).board == finished

    generation = orch.state.generation
    state = orch.reset()
    assert state.generation == generation + 1
    assert state.outcome is None
    assert state.board == BoardState.initial()


def test_computer_replies_to_human_move() -> None:
    async def scenario() -> MatchState:
        orch = make_orchestrator(GameMode.VS_TIGER)
        state = orch.click((2, 2))
        assert state.ai_thinking
        # Input is ignored while the computer thinks.
        assert orch.click((1, 1)).board.goats_to_place == 19
        await orch.wait_for_ai()
        return orch.state

    state = asyncio.run(scenario())
    assert not state.ai_thinking
    assert state.board.turn == Side.GOAT
    assert state.last_move.piece == Side.TIGER
    assert state.board.goats_to_place == 19


def test_computer_opens_as_goat() -> None:
    async def scenario() -> MatchState:
        orch = make_orchestrator(GameMode.VS_GOAT)
        assert orch.state.awaiting_ai
        orch.start()
        await orch.wait_for_ai()
        return orch.state

    state = asyncio.run(scenario())
    assert state.board.turn == Side.TIGER
    assert state.board.goats_to_place == 19


def test_reset_discards_pending_computer_move() -> None:
    async def scenario() -> MatchState:
        orch = make_orchestrator(GameMode.VS_TIGER, delay=0.05)
        orch.click((2, 2))
        orch.reset()
        await orch.wait_for_ai()
        await asyncio.sleep(0.1)
        return orch.state

    state = asyncio.run(scenario())
    assert state.board == BoardState.initial()
    assert not state.ai_thinking


def test_stale_computer_move_is_ignored() -> None:
    board = BoardState.from_positions(CORNERS, [(2, 2)], goats_to_place=19, turn=Side.TIGER)
    state = MatchState(board=board, controllers=GameMode.VS_TIGER.controllers, generation=2)
    after = reduce(state, AIMoveReady(Move((0, 0), (0, 1)), generation=1))
    assert after.board == board
    assert after.last_move is None


def test_remote_disconnect_keeps_board() -> None:
    orch = make_orchestrator()
    orch.set_controllers(Controllers.networked(Side.GOAT))
    orch.click((2, 2))
    assert orch.state.controller_to_move == Controller.REMOTE

    state = orch.remote_disconnected()
    assert state.controllers == Controllers(Controller.HUMAN, Controller.HUMAN)
    assert state.board.live_goats == 1
    assert state.board.turn == Side.TIGER


def test_timeout_passes_the_turn() -> None:
    orch = make_orchestrator()
    state = orch.time_up()
    assert state.board.turn == Side.TIGER
    assert state.board.goats_to_place == 20
    assert state.needs_sync

    orch.set_controllers(Controllers.networked(Side.GOAT))
    state = orch.time_up()
    assert state.board.turn == Side.TIGER
    assert not state.needs_sync


def test_later_snapshot_wins() -> None:
    orch = make_orchestrator()
    first = BoardState.from_positions(CORNERS, [(2, 2)], goats_to_place=19, turn=Side.TIGER)
    second = BoardState.from_positions(CORNERS, [(2, 2), (1, 2)], goats_to_place=18, turn=Side.TIGER)
    orch.apply_snapshot(first)
    state = orch.apply_snapshot(second)
    assert state.board == second
    assert not state.needs_sync


def test_listeners_see_every_event() -> None:
    orch = make_orchestrator()
    seen = []
    unsubscribe = orch.subscribe(lambda state, event: seen.append((type(event), state.board.turn)))

    orch.click((2, 2))
    orch.reset()
    assert seen == [(NodeClicked, Side.TIGER), (GameReset, Side.GOAT)]

    unsubscribe()
    orch.click((2, 2))
    assert len(seen) == 2


def test_mode_and_difficulty_changes() -> None:
    orch = make_orchestrator()
    generation = orch.state.generation
    state = orch.set_mode(GameMode.VS_GOAT)
    assert state.controllers == Controllers(tiger=Controller.HUMAN, goat=Controller.AI)
    assert state.generation == generation + 1
    assert state.awaiting_ai

    orch.set_difficulty(Difficulty.HARD)
    assert orch.difficulty == Difficulty.HARD
    assert orch.think_delay() == 0.8


def test_disconnect_discards_pending_computer_move() -> None:
    async def scenario():
        orch = make_orchestrator(GameMode.VS_TIGER, delay=0.05)
        events = []
        orch.subscribe(lambda state, event: events.append(event))
        orch.click((2, 2))
        generation = orch.state.generation
        await asyncio.sleep(0.01)

        state = orch.remote_disconnected()
        assert state.generation == generation + 1
        assert state.board.turn == Side.TIGER
        await orch.wait_for_ai()
        return orch.state, [e for e in events if isinstance(e, AIMoveReady)]

    state, replies = asyncio.run(scenario())
    # Only the think started after the disconnect ever lands.
    assert [reply.generation for reply in replies] == [state.generation]
    assert not state.ai_thinking
    assert state.board.turn == Side.GOAT
    assert state.board.goats_to_place == 19
    assert state.board.live_goats == 1


def test_move_record_rejects_unknown_actions() -> None:
    assert MoveRecord.from_action(Side.GOAT, Placement((2, 2))) == MoveRecord(Side.GOAT, (2, 2), (2, 2))
    with pytest.raises(TypeError):
        MoveRecord.from_action(Side.GOAT, (2, 2))
