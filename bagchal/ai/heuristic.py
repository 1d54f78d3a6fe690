"""Hand-tuned move scoring for both sides.

Each scorer enumerates every candidate for the side to move, scores it, and
ranks the candidates with a stable descending sort. ``HeuristicAI`` then takes
the best one, or samples uniformly from the top three when the difficulty's
suboptimal-move roll succeeds.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence

import numpy as np

from bagchal.core import (
    Action,
    BoardState,
    Move,
    Phase,
    Piece,
    Placement,
    Position,
    Side,
    advance,
    capture_moves,
    enumerate_legal_actions,
    evaluate_outcome,
    legal_moves,
    tiger_mobility,
)

CENTRE = (2, 2)
TOP_CANDIDATES = 3

CAPTURE_SCORE = 100
FOLLOW_UP_CAPTURE_BONUS = 50
CENTRE_BASE = 10
THREAT_BONUS = 25
MOBILITY_RISK_PENALTY = 15

PLACEMENT_CENTRE_WEIGHT = 2
BLOCK_LANDING_BONUS = 35
BLOCK_MIDPOINT_BONUS = 20
ADJACENT_GOAT_BONUS = 5
MOBILITY_BASELINE = 20
PLACEMENT_CAPTURABLE_PENALTY = 40

GOAT_MOVE_BASE = 50
GOAT_MOBILITY_WEIGHT = 2
TRAPPED_TIGER_BONUS = 30
NEAR_TRAP_BONUS = 15
NEAR_TRAP_MOVES = 2
GOAT_CAPTURABLE_PENALTY = 45


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


@dataclass(frozen=True)
class DifficultyProfile:
    suboptimal_probability: float
    lookahead_depth: int
    think_delay: float  # seconds


DIFFICULTY_PROFILES: Dict[Difficulty, DifficultyProfile] = {
    Difficulty.EASY: DifficultyProfile(suboptimal_probability=0.5, lookahead_depth=0, think_delay=0.3),
    Difficulty.MEDIUM: DifficultyProfile(suboptimal_probability=0.2, lookahead_depth=1, think_delay=0.5),
    Difficulty.HARD: DifficultyProfile(suboptimal_probability=0.0, lookahead_depth=2, think_delay=0.8),
}


@dataclass(frozen=True)
class ScoredAction:
    action: Action
    score: float


def centre_distance(position: Position) -> int:
    return abs(position[0] - CENTRE[0]) + abs(position[1] - CENTRE[1])


def _as_tiger_turn(board: BoardState) -> BoardState:
    return board if board.turn == Side.TIGER else board.with_turn(Side.TIGER)


def _capturable(board: BoardState, position: Position) -> bool:
    """Whether any tiger could jump the goat standing on ``position``."""
    for tiger in board.tigers:
        for move in capture_moves(tiger, board):
            if move.captured == position:
                return True
    return False


def _rank(scored: List[ScoredAction]) -> List[ScoredAction]:
    return sorted(scored, key=lambda item: item.score, reverse=True)


def score_tiger_moves(board: BoardState, depth: int) -> List[ScoredAction]:
    board = _as_tiger_turn(board)
    scored: List[ScoredAction] = []
    for tiger in board.tigers:
        for target in sorted(legal_moves(tiger, board)):
            move = Move(tiger.position, target)
            after = advance(board, move)
            moved = Piece(Side.TIGER, target)
            follow_ups = legal_moves(moved, after)

            if move.is_capture:
                score = CAPTURE_SCORE
                if depth >= 2 and capture_moves(moved, after):
                    score += FOLLOW_UP_CAPTURE_BONUS
            else:
                score = CENTRE_BASE - centre_distance(target)
                if depth >= 1 and capture_moves(moved, after):
                    score += THREAT_BONUS
                if depth >= 2 and len(follow_ups) <= 1:
                    score -= MOBILITY_RISK_PENALTY
            scored.append(ScoredAction(move, score))
    return _rank(scored)


def score_goat_placements(board: BoardState, depth: int) -> List[ScoredAction]:
    if board.phase != Phase.PLACEMENT:
        return []
    tiger_view = _as_tiger_turn(board)
    threats = [move for tiger in tiger_view.tigers for move in capture_moves(tiger, tiger_view)]

    scored: List[ScoredAction] = []
    for position in board.empty_positions():
        score = (4 - centre_distance(position)) * PLACEMENT_CENTRE_WEIGHT
        for threat in threats:
            if threat.target == position:
                score += BLOCK_LANDING_BONUS
            if threat.captured == position:
                score += BLOCK_MIDPOINT_BONUS

        for goat in board.goats:
            if abs(goat.position[0] - position[0]) + abs(goat.position[1] - position[1]) == 1:
                score += ADJACENT_GOAT_BONUS

        after = advance(board, Placement(position))
        if depth >= 2:
            score += MOBILITY_BASELINE - tiger_mobility(after)
        if _capturable(after, position):
            score -= PLACEMENT_CAPTURABLE_PENALTY
        scored.append(ScoredAction(Placement(position), score))
    return _rank(scored)


def score_goat_moves(board: BoardState, depth: int) -> List[ScoredAction]:
    if board.phase != Phase.MOVEMENT:
        return []
    goat_view = board if board.turn == Side.GOAT else board.with_turn(Side.GOAT)

    scored: List[ScoredAction] = []
    for goat in goat_view.goats:
        for target in sorted(legal_moves(goat, goat_view)):
            move = Move(goat.position, target)
            after = advance(goat_view, move)
            per_tiger = [len(legal_moves(tiger, after)) for tiger in after.tigers]

            score = GOAT_MOVE_BASE - sum(per_tiger) * GOAT_MOBILITY_WEIGHT
            score += sum(1 for count in per_tiger if count == 0) * TRAPPED_TIGER_BONUS
            if depth >= 2:
                score += sum(1 for count in per_tiger if count <= NEAR_TRAP_MOVES) * NEAR_TRAP_BONUS
            if _capturable(after, target):
                score -= GOAT_CAPTURABLE_PENALTY
            score += 4 - centre_distance(target)
            scored.append(ScoredAction(move, score))
    return _rank(scored)


class HeuristicAI:
    """Shallow-lookahead opponent for either side."""

    def __init__(
        self,
        difficulty: Difficulty = Difficulty.MEDIUM,
        *,
        rng: Optional[np.random.Generator] = None,
        profiles: Optional[Dict[Difficulty, DifficultyProfile]] = None,
    ) -> None:
        self.difficulty = Difficulty(difficulty)
        self.profiles = profiles or DIFFICULTY_PROFILES
        self.rng = rng or np.random.default_rng()

    @property
    def profile(self) -> DifficultyProfile:
        return self.profiles[self.difficulty]

    def rank(self, board: BoardState, side: Optional[Side] = None) -> List[ScoredAction]:
        side = side or board.turn
        if evaluate_outcome(board) is not None:
            return []
        depth = self.profile.lookahead_depth
        if side == Side.TIGER:
            return score_tiger_moves(board, depth)
        if board.phase == Phase.PLACEMENT:
            return score_goat_placements(board, depth)
        return score_goat_moves(board, depth)

    def choose_action(self, board: BoardState, side: Optional[Side] = None) -> Optional[Action]:
        return self.pick(self.rank(board, side))

    def pick(self, ranked: Sequence[ScoredAction]) -> Optional[Action]:
        if not ranked:
            return None
        suboptimal = self.rng.random() < self.profile.suboptimal_probability
        if suboptimal and len(ranked) > 1:
            index = int(self.rng.integers(0, min(len(ranked), TOP_CANDIDATES)))
            return ranked[index].action
        return ranked[0].action


class RandomAgent:
    """Uniformly random legal action; evaluation baseline."""

    def __init__(self, rng: Optional[np.random.Generator] = None) -> None:
        self.rng = rng or np.random.default_rng()

    def choose_action(self, board: BoardState, side: Optional[Side] = None) -> Optional[Action]:
        if evaluate_outcome(board) is not None:
            return None
        actions = enumerate_legal_actions(board, side)
        if not actions:
            return None
        return actions[int(self.rng.integers(0, len(actions)))]


def choose_ai_move(
    board: BoardState,
    turn: Optional[Side] = None,
    difficulty: Difficulty = Difficulty.MEDIUM,
    *,
    rng: Optional[np.random.Generator] = None,
) -> Optional[Action]:
    """Pick an action for ``turn`` (defaults to the side to move), or None when there is none."""
    return HeuristicAI(difficulty, rng=rng).choose_action(board, turn)
