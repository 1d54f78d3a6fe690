"""Pure state transitions: ``reduce(state, event) -> state'``.

Every transition clears the one-shot flags (``needs_sync``, ``last_rejected``)
before applying the event, so a listener only ever sees the effect of the
event that produced the state.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from bagchal.core import (
    Action,
    BoardState,
    Move,
    Phase,
    Placement,
    Position,
    Side,
    apply_action,
    evaluate_outcome,
    is_legal_action,
)

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
from .state import Controller, MatchState, MoveRecord

logger = logging.getLogger(__name__)


def _apply(state: MatchState, action: Action) -> MatchState:
    mover = state.board.turn
    board = apply_action(state.board, action)
    return replace(
        state,
        board=board,
        outcome=evaluate_outcome(board),
        selected=None,
        last_move=MoveRecord.from_action(mover, action),
        needs_sync=True,
    )


def _reject(state: MatchState) -> MatchState:
    return replace(state, selected=None, last_rejected=True)


def _on_node_clicked(state: MatchState, position: Position) -> MatchState:
    if not state.accepts_input:
        return state
    board = state.board
    if board.turn == Side.GOAT and board.phase == Phase.PLACEMENT and state.selected is None:
        placement = Placement(position)
        if is_legal_action(board, placement):
            return _apply(state, placement)
        return _reject(state)
    if state.selected is not None:
        move = Move(state.selected, position)
        if is_legal_action(board, move):
            return _apply(state, move)
    return _reject(state)


def _on_piece_selected(state: MatchState, position: Position) -> MatchState:
    if not state.accepts_input:
        return state
    piece = state.board.piece_at(position)
    if piece is None or piece.kind != state.board.turn:
        return _reject(state)
    if piece.kind == Side.GOAT and state.board.phase == Phase.PLACEMENT:
        return _reject(state)
    if state.selected == position:
        return replace(state, selected=None)
    return replace(state, selected=position)


def _on_ai_move(state: MatchState, event: AIMoveReady) -> MatchState:
    if event.generation != state.generation:
        logger.debug("Discarding stale AI move from generation %d", event.generation)
        return state
    state = replace(state, ai_thinking=False)
    if not state.awaiting_ai or event.action is None:
        return state
    if not is_legal_action(state.board, event.action):
        logger.warning("AI proposed an illegal action %r; ignoring it", event.action)
        return state
    return _apply(state, event.action)


def _on_snapshot(state: MatchState, event: SnapshotApplied) -> MatchState:
    return replace(
        state,
        board=event.board,
        outcome=event.outcome,
        selected=None,
        ai_thinking=False,
        generation=state.generation + 1,
        last_move=event.last_move,
    )


def _on_timeout(state: MatchState) -> MatchState:
    if state.is_over or state.controller_to_move != Controller.HUMAN:
        return state
    board = state.board.with_turn(state.board.turn.opponent())
    return replace(
        state,
        board=board,
        outcome=evaluate_outcome(board),
        selected=None,
        needs_sync=True,
    )


def reduce(state: MatchState, event: Event) -> MatchState:
    state = replace(state, needs_sync=False, last_rejected=False)

    if isinstance(event, NodeClicked):
        return _on_node_clicked(state, event.position)
    if isinstance(event, PieceSelected):
        return _on_piece_selected(state, event.position)
    if isinstance(event, AITurnStarted):
        if event.generation == state.generation and state.awaiting_ai:
            return replace(state, ai_thinking=True)
        return state
    if isinstance(event, AIMoveReady):
        return _on_ai_move(state, event)
    if isinstance(event, SnapshotApplied):
        return _on_snapshot(state, event)
    if isinstance(event, TurnTimedOut):
        return _on_timeout(state)
    if isinstance(event, GameReset):
        return MatchState(
            board=BoardState.initial(),
            controllers=state.controllers,
            generation=state.generation + 1,
        )
    if isinstance(event, ControllersChanged):
        return replace(
            state,
            controllers=event.controllers,
            selected=None,
            ai_thinking=False,
            generation=state.generation + 1,
        )
    if isinstance(event, RemoteDisconnected):
        return replace(
            state,
            controllers=state.controllers.without_remote(),
            ai_thinking=False,
            generation=state.generation + 1,
        )
    raise TypeError(f"Unknown event {event!r}")
