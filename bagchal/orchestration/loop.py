from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Dict, List, Optional

import numpy as np

from bagchal.ai import DIFFICULTY_PROFILES, Difficulty, HeuristicAI
from bagchal.core import Action, BoardState, Outcome, Phase, Placement, Position, Side

from .events import (
    AIMoveReady,
    AITurnStarted,
    ControllersChanged,
    Event,
    GameReset,
    NodeClicked,
    PieceSelected,
    RemoteDisconnected,
    SnapshotApplied,
    TurnTimedOut,
)
from .reducer import reduce
from .state import Controllers, GameMode, MatchState, MoveRecord

logger = logging.getLogger(__name__)

Listener = Callable[[MatchState, Event], None]


@dataclass
class GameOrchestratorConfig:
    mode: GameMode = GameMode.VS_TIGER
    difficulty: Difficulty = Difficulty.MEDIUM
    # Overrides the per-difficulty think delay (seconds) when set.
    think_delays: Dict[Difficulty, float] = field(default_factory=dict)
    seed: Optional[int] = None


class GameOrchestrator:
    """Single writer of the match state.

    Events are queued and reduced strictly one at a time; listeners run after
    each event. When the side to move is computer-controlled a thinking task
    is started on the running event loop, and its result is dropped if the
    state's generation moved on in the meantime.
    """

    def __init__(
        self,
        config: Optional[GameOrchestratorConfig] = None,
        *,
        ai: Optional[HeuristicAI] = None,
    ) -> None:
        self.config = config or GameOrchestratorConfig()
        self.ai = ai or HeuristicAI(self.config.difficulty, rng=np.random.default_rng(self.config.seed))
        self._state = MatchState(controllers=self.config.mode.controllers)
        self._queue: Deque[Event] = deque()
        self._draining = False
        self._listeners: List[Listener] = []
        self._ai_task: Optional[asyncio.Task] = None

    @property
    def state(self) -> MatchState:
        return self._state

    @property
    def difficulty(self) -> Difficulty:
        return self.ai.difficulty

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, event: Event) -> MatchState:
        self._queue.append(event)
        if self._draining:
            return self._state
        self._draining = True
        try:
            while self._queue:
                self._process(self._queue.popleft())
        finally:
            self._draining = False
        self._schedule_ai()
        return self._state

    def _process(self, event: Event) -> None:
        previous = self._state
        self._state = reduce(previous, event)
        if self._state.generation != previous.generation:
            self._cancel_ai()
        if self._state.is_over and not previous.is_over:
            logger.info("Game over: %s", self._state.outcome.message)
        for listener in list(self._listeners):
            listener(self._state, event)

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------
    def click(self, position: Position) -> MatchState:
        """Select a piece of the side to move, otherwise treat as a destination."""
        board = self._state.board
        piece = board.piece_at(position)
        selectable = (
            piece is not None
            and piece.kind == board.turn
            and not (piece.kind == Side.GOAT and board.phase == Phase.PLACEMENT)
        )
        if selectable:
            return self.dispatch(PieceSelected(position))
        return self.dispatch(NodeClicked(position))

    def select(self, position: Position) -> MatchState:
        return self.dispatch(PieceSelected(position))

    def place_or_move(self, position: Position) -> MatchState:
        return self.dispatch(NodeClicked(position))

    def play(self, action: Action) -> MatchState:
        """Feed ``action`` through the same clicks a person would make."""
        if isinstance(action, Placement):
            return self.place_or_move(action.position)
        self.select(action.origin)
        return self.place_or_move(action.target)

    def reset(self) -> MatchState:
        return self.dispatch(GameReset())

    def set_mode(self, mode: GameMode) -> MatchState:
        self.config.mode = mode
        return self.dispatch(ControllersChanged(mode.controllers))

    def set_controllers(self, controllers: Controllers) -> MatchState:
        return self.dispatch(ControllersChanged(controllers))

    def set_difficulty(self, difficulty: Difficulty) -> None:
        self.ai.difficulty = Difficulty(difficulty)

    def apply_snapshot(
        self,
        board: BoardState,
        outcome: Optional[Outcome] = None,
        last_move: Optional[MoveRecord] = None,
    ) -> MatchState:
        return self.dispatch(SnapshotApplied(board, outcome, last_move))

    def time_up(self) -> MatchState:
        return self.dispatch(TurnTimedOut())

    def remote_disconnected(self) -> MatchState:
        return self.dispatch(RemoteDisconnected())

    # ------------------------------------------------------------------
    # Computer turns
    # ------------------------------------------------------------------
    def think_delay(self) -> float:
        difficulty = self.ai.difficulty
        if difficulty in self.config.think_delays:
            return float(self.config.think_delays[difficulty])
        return DIFFICULTY_PROFILES[difficulty].think_delay

    def start(self) -> None:
        """Kick off a computer turn if one is due; call from inside the event loop."""
        self._schedule_ai()

    async def wait_for_ai(self) -> None:
        while self._ai_task is not None:
            task = self._ai_task
            try:
                await task
            except asyncio.CancelledError:
                if self._ai_task is task:
                    self._ai_task = None

    def _schedule_ai(self) -> None:
        state = self._state
        if not state.awaiting_ai or state.ai_thinking or self._ai_task is not None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; computer turn waits for start()")
            return
        generation = state.generation
        self.dispatch(AITurnStarted(generation))
        self._ai_task = loop.create_task(self._think(generation, state.board))

    async def _think(self, generation: int, board: BoardState) -> None:
        await asyncio.sleep(self.think_delay())
        action = self.ai.choose_action(board)
        self._ai_task = None
        logger.debug("Computer chose %r", action)
        self.dispatch(AIMoveReady(action, generation))

    def _cancel_ai(self) -> None:
        task, self._ai_task = self._ai_task, None
        if task is not None and not task.done():
            task.cancel()

    def close(self) -> None:
        self._cancel_ai()
        self._listeners.clear()
