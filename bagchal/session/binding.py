from __future__ import annotations

import logging
from typing import Callable, List, Optional

from bagchal.orchestration import Controllers, Event, GameOrchestrator, GameReset, MatchState, SnapshotApplied
from bagchal.timer import TurnTimer

from .messages import GameSnapshot, Role
from .protocol import PeerSession

logger = logging.getLogger(__name__)


class SessionBinding:
    """Connects a ``PeerSession`` to the local orchestrator and turn timer.

    Local moves go out as full snapshots; inbound snapshots replace local
    state wholesale. A rematch resets locally with sides swapped, and losing
    the link hands the remote side back to local control.
    """

    def __init__(
        self,
        orchestrator: GameOrchestrator,
        session: PeerSession,
        timer: Optional[TurnTimer] = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.session = session
        self.timer = timer
        self._unsubscribe: List[Callable[[], None]] = []

    def attach(self) -> "SessionBinding":
        session = self.session
        session.on_connected = self._on_connected
        session.on_game_state = self._on_snapshot
        session.on_role_assigned = self._on_role
        session.on_rematch_accepted = self._on_rematch
        session.on_spectator_joined = lambda name: self._send_state()
        session.on_disconnected = self._on_disconnected
        if self.timer is not None:
            self.timer.on_time_up = self.orchestrator.time_up
            self.timer.on_sync = session.sync_timer
            self.timer.is_host = session.context.is_host
            session.on_timer_sync = self.timer.apply_sync
        self._unsubscribe.append(self.orchestrator.subscribe(self._on_state))
        if session.context.role is not None:
            self._take_side(session.context.role)
        return self

    def detach(self) -> None:
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe.clear()

    def _take_side(self, role: Role) -> None:
        self.orchestrator.set_controllers(Controllers.networked(role.side))

    def _timer_value(self) -> Optional[int]:
        return self.timer.time_left if self.timer is not None else None

    def _send_state(self) -> None:
        if self.session.connected and self.session.context.is_host:
            self.session.send_game_state(self.orchestrator.state, timer_value=self._timer_value())

    def _on_connected(self) -> None:
        context = self.session.context
        if self.timer is not None:
            self.timer.is_host = context.is_host
            self.timer.configure(seconds=context.timer_settings.seconds, enabled=context.timer_settings.enabled)
            self.timer.connected = True
        if context.role is not None:
            self._take_side(context.role)
        self._send_state()

    def _on_role(self, role: Role) -> None:
        if self.timer is not None:
            settings = self.session.context.timer_settings
            self.timer.configure(seconds=settings.seconds, enabled=settings.enabled)
        self._take_side(role)

    def _on_snapshot(self, snapshot: GameSnapshot) -> None:
        last_move = snapshot.last_move.to_record() if snapshot.last_move else None
        self.orchestrator.apply_snapshot(snapshot.to_board(), snapshot.outcome(), last_move)
        if self.timer is None:
            return
        settings = snapshot.timer_settings
        if settings is not None and (settings.seconds, settings.enabled) != (self.timer.seconds, self.timer.enabled):
            self.timer.configure(seconds=settings.seconds, enabled=settings.enabled)
        if snapshot.timer_value is not None:
            self.timer.apply_sync(snapshot.timer_value)

    def _on_rematch(self, role: Role) -> None:
        self.orchestrator.reset()
        self._take_side(role)
        if self.timer is not None:
            self.timer.game_over = False
            self.timer.reset()
        # Carries the fresh board and score to anyone watching.
        self._send_state()

    def _on_disconnected(self) -> None:
        logger.info("Opponent disconnected; the board stays playable locally")
        if self.timer is not None:
            self.timer.connected = False
        self.orchestrator.remote_disconnected()

    def _on_state(self, state: MatchState, event: Event) -> None:
        if self.timer is not None:
            self.timer.game_over = state.is_over
            self.timer.turn_changed(state.board.turn)
            if isinstance(event, GameReset):
                self.timer.reset()
        if state.is_over:
            self.session.record_result(state.outcome.winner)
        if state.needs_sync and not isinstance(event, SnapshotApplied) and self.session.connected:
            self.session.send_game_state(state, timer_value=self._timer_value())
