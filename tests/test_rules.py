import numpy as np
import pytest

from bagchal.ai import RandomAgent
from bagchal.core import (
    ACTION_VECTOR_SIZE,
    BOARD_SIZE,
    TOTAL_GOATS,
    BoardState,
    IllegalActionError,
    Move,
    Outcome,
    Phase,
    Piece,
    Placement,
    Side,
    WinReason,
    apply_action,
    count_trapped_tigers,
    decode_action,
    encode_action,
    enumerate_legal_actions,
    evaluate_outcome,
    has_diagonal,
    is_legal_action,
    legal_moves,
)

CORNERS = [(0, 0), (0, 4), (4, 0), (4, 4)]

# Every neighbour and jump landing of the four corner tigers is filled.
TRAPPING_GOATS = [
    (0, 1), (1, 0), (1, 1), (0, 2), (2, 0), (2, 2),
    (0, 3), (1, 4), (1, 3), (2, 4),
    (3, 0), (4, 1), (3, 1), (4, 2),
    (3, 4), (4, 3), (3, 3),
]


def tiger(position) -> Piece:
    return Piece(Side.TIGER, position)


def test_initial_board() -> None:
    board = BoardState.initial()
    assert sorted(t.position for t in board.tigers) == CORNERS
    assert board.goats == ()
    assert board.goats_to_place == TOTAL_GOATS
    assert board.goats_captured == 0
    assert board.turn == Side.GOAT
    assert board.phase == Phase.PLACEMENT
    assert evaluate_outcome(board) is None


def test_corner_tiger_cannot_jump_distant_goat() -> None:
    board = apply_action(BoardState.initial(), Placement((2, 2)))
    assert board.turn == Side.TIGER
    assert legal_moves(tiger((0, 0)), board) == frozenset({(0, 1), (1, 0), (1, 1)})


def test_orthogonal_capture_jump() -> None:
    board = BoardState.from_positions(
        [(0, 2), (0, 0), (4, 0), (4, 4)],
        [(1, 2)],
        goats_to_place=19,
        turn=Side.TIGER,
    )
    assert (2, 2) in legal_moves(tiger((0, 2)), board)

    after = apply_action(board, Move((0, 2), (2, 2)))

    assert after.goats_captured == 1
    assert after.live_goats == 0
    assert len(after.tigers) == 4
    assert after.piece_at((2, 2)) == tiger((2, 2))
    assert after.piece_at((0, 2)) is None
    assert after.turn == Side.GOAT


def test_diagonal_jump_follows_parity() -> None:
    board = BoardState.from_positions(
        [(1, 1), (0, 1), (4, 0), (4, 4)],
        [(2, 2), (1, 2)],
        goats_to_place=18,
        turn=Side.TIGER,
    )
    # (1,1) -> (2,2) -> (3,3) runs along a drawn diagonal.
    assert (3, 3) in legal_moves(tiger((1, 1)), board)
    # (0,1) has odd parity, so it has no diagonal over (1,2).
    assert (2, 3) not in legal_moves(tiger((0, 1)), board)
    assert (1, 2) not in legal_moves(tiger((0, 1)), board)


def test_tigers_do_not_jump_tigers_and_goats_do_not_jump() -> None:
    board = BoardState.from_positions(
        [(0, 0), (0, 1), (4, 0), (4, 4)],
        [(2, 1), (3, 1), (1, 3), (2, 3), (3, 3)],
        goats_to_place=11,
        goats_captured=4,
        turn=Side.GOAT,
    )
    assert (0, 2) not in legal_moves(tiger((0, 0)), board)
    goat = Piece(Side.GOAT, (2, 1))
    assert (4, 1) not in legal_moves(goat, board)
    assert all(max(abs(t[0] - 2), abs(t[1] - 1)) == 1 for t in legal_moves(goat, board))


def test_has_diagonal_is_symmetric() -> None:
    for row in range(BOARD_SIZE):
        for col in range(BOARD_SIZE):
            for dr, dc in [(-1, -1), (-1, 1), (1, -1), (1, 1)]:
                other = (row + dr, col + dc)
                if 0 <= other[0] < BOARD_SIZE and 0 <= other[1] < BOARD_SIZE:
                    assert has_diagonal((row, col), other) == has_diagonal(other, (row, col))


def test_random_play_preserves_invariants() -> None:
    agent = RandomAgent(np.random.default_rng(3))
    for _ in range(5):
        board = BoardState.initial()
        for _ in range(150):
            if evaluate_outcome(board) is not None:
                break
            for piece in board.tigers + board.goats:
                for target in legal_moves(piece, board):
                    assert 0 <= target[0] < BOARD_SIZE and 0 <= target[1] < BOARD_SIZE
                    assert board.is_empty(target)
            before = board
            action = agent.choose_action(board)
            board = apply_action(board, action)
            assert len(board.tigers) == 4
            assert board.goats_captured + board.live_goats + board.goats_to_place == TOTAL_GOATS
            if isinstance(action, Move) and action.is_capture:
                assert board.goats_captured == before.goats_captured + 1
                assert board.live_goats == before.live_goats - 1


def test_capture_threshold_wins_for_tiger() -> None:
    board = BoardState.from_positions(CORNERS, goats_to_place=15, goats_captured=5, turn=Side.GOAT)
    assert evaluate_outcome(board) == Outcome(Side.TIGER, WinReason.CAPTURE_THRESHOLD)
    assert evaluate_outcome(board).message == "Tigers Win! 5 goats have been captured."


def test_four_captures_keeps_game_going() -> None:
    board = BoardState.from_positions(CORNERS, goats_to_place=16, goats_captured=4, turn=Side.TIGER)
    assert enumerate_legal_actions(board)
    assert evaluate_outcome(board) is None


def test_trapped_tigers_win_for_goat() -> None:
    board = BoardState.from_positions(CORNERS, TRAPPING_GOATS, goats_to_place=3, turn=Side.TIGER)
    assert count_trapped_tigers(board) == 4
    outcome = evaluate_outcome(board)
    assert outcome == Outcome(Side.GOAT, WinReason.TIGERS_TRAPPED)
    assert outcome.message == "Goats Win! All tigers are trapped."


def test_goat_stalemate_wins_for_tiger() -> None:
    tigers = [(0, 1), (1, 0), (1, 1), (4, 4)]
    goats = [(r, c) for r in range(5) for c in range(5) if (r, c) not in tigers and (r, c) != (0, 0)]
    board = BoardState.from_positions(tigers, goats, goats_to_place=0, turn=Side.GOAT)
    assert evaluate_outcome(board) == Outcome(Side.TIGER, WinReason.GOATS_STALEMATED)
    assert evaluate_outcome(board.with_turn(Side.TIGER)) is None


def test_outcome_is_idempotent() -> None:
    board = BoardState.from_positions(CORNERS, TRAPPING_GOATS, goats_to_place=3, turn=Side.TIGER)
    snapshot = (board.tigers, board.goats, board.goats_to_place, board.goats_captured, board.turn)
    assert evaluate_outcome(board) == evaluate_outcome(board)
    assert (board.tigers, board.goats, board.goats_to_place, board.goats_captured, board.turn) == snapshot


def test_goats_cannot_move_during_placement() -> None:
    board = BoardState.from_positions(CORNERS, [(2, 2)], goats_to_place=19, turn=Side.GOAT)
    assert not is_legal_action(board, Move((2, 2), (2, 3)))
    assert all(isinstance(action, Placement) for action in enumerate_legal_actions(board))


def test_apply_action_rejects_illegal_and_finished() -> None:
    board = BoardState.initial()
    with pytest.raises(IllegalActionError):
        apply_action(board, Placement((0, 0)))
    with pytest.raises(IllegalActionError):
        apply_action(board, Move((0, 0), (0, 1)))

    finished = BoardState.from_positions(CORNERS, goats_to_place=15, goats_captured=5)
    with pytest.raises(IllegalActionError):
        apply_action(finished, Placement((2, 2)))


def test_action_index_encoding() -> None:
    assert ACTION_VECTOR_SIZE == 425
    board = BoardState.from_positions(
        [(0, 2), (0, 0), (4, 0), (4, 4)], [(1, 2)], goats_to_place=19, turn=Side.TIGER
    )
    indices = set()
    for action in enumerate_legal_actions(board) + enumerate_legal_actions(BoardState.initial()):
        index = encode_action(action)
        assert 0 <= index < ACTION_VECTOR_SIZE
        assert decode_action(index) == action
        indices.add(index)
    assert len(indices) == len(enumerate_legal_actions(board)) + 21
    with pytest.raises(ValueError):
        decode_action(ACTION_VECTOR_SIZE)
