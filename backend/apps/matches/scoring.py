"""
Scoring rules for referee-entered matches.

Pure functions; the service layer applies them to Match rows.
"""

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

DEFAULT_MAX_SCORE = 11
WIN_BY = 2

# Knockout rounds earn more fantasy points
KNOCKOUT_ROUND_KEYWORDS = ('final', 'semi', 'quarter')
KNOCKOUT_MULTIPLIER = 1.5

WINNING_MATCH_BONUS = 10
PERFECT_GAME_BONUS = 7.5
CLOSE_WIN_BONUS = 5


def is_set_complete(score1: int, score2: int, max_score: int = DEFAULT_MAX_SCORE,
                    golden_point: bool = False) -> bool:
    """
    A set ends when a side reaches max_score. Without golden point the
    leader must also be ahead by at least two.
    """
    leader = max(score1, score2)
    if leader < max_score:
        return False
    if golden_point:
        return True
    return abs(score1 - score2) >= WIN_BY


def set_winner(score1: int, score2: int) -> Optional[int]:
    """Side (1 or 2) leading the set, None on a tie."""
    if score1 > score2:
        return 1
    if score2 > score1:
        return 2
    return None


def sets_to_win(sets: int) -> int:
    """Best-of-N: a side needs a majority of sets."""
    return math.ceil(sets / 2)


def count_sets_won(set_scores: Iterable[Tuple[int, int]]) -> Tuple[int, int]:
    won1 = won2 = 0
    for score1, score2 in set_scores:
        winner = set_winner(score1, score2)
        if winner == 1:
            won1 += 1
        elif winner == 2:
            won2 += 1
    return won1, won2


def match_winner(set_scores: Iterable[Tuple[int, int]], sets: int) -> Optional[int]:
    """Side that has won enough sets to take the match, or None."""
    won1, won2 = count_sets_won(set_scores)
    needed = sets_to_win(sets)
    if won1 >= needed:
        return 1
    if won2 >= needed:
        return 2
    return None


def bonus_points(score1: int, score2: int) -> int:
    """
    Winner bonus for a finished set: 15 for a shutout, 10 for a margin
    under five, otherwise nothing.
    """
    winning, losing = max(score1, score2), min(score1, score2)
    if winning >= DEFAULT_MAX_SCORE and losing == 0:
        return 15
    if winning - losing < 5:
        return 10
    return 0


def is_knockout_round(round_name: str) -> bool:
    name = (round_name or '').lower()
    return any(keyword in name for keyword in KNOCKOUT_ROUND_KEYWORDS)


@dataclass
class SideBreakdown:
    base: int
    winning_match: float
    perfect_game: float
    close_win: float
    multiplier: float

    @property
    def bonus_total(self) -> float:
        return self.winning_match + self.perfect_game + self.close_win

    @property
    def total(self) -> float:
        return round((self.base + self.bonus_total) * self.multiplier, 2)

    def to_dict(self) -> dict:
        return {
            'base': self.base,
            'bonuses': {
                'winningMatch': self.winning_match,
                'perfectGame': self.perfect_game,
                'closeWin': self.close_win,
            },
            'multiplier': self.multiplier,
            'total': self.total,
        }


def side_breakdown(side: int, set_scores: List[Tuple[int, int]], match_completed: bool,
                   winner: Optional[int], round_name: str) -> SideBreakdown:
    """
    Fantasy breakdown for one side of a match.

    base is the side's total points across sets; bonuses are awarded for
    winning the match, any shutout set and any set won 11+ by exactly two
    against an opponent on 9 or more.
    """
    own_index = 0 if side == 1 else 1
    base = sum(scores[own_index] for scores in set_scores)

    perfect = close = 0.0
    for scores in set_scores:
        own, opp = scores[own_index], scores[1 - own_index]
        if own >= DEFAULT_MAX_SCORE and opp == 0:
            perfect = PERFECT_GAME_BONUS
        if own >= DEFAULT_MAX_SCORE and own - opp == WIN_BY and opp >= 9:
            close = CLOSE_WIN_BONUS

    return SideBreakdown(
        base=base,
        winning_match=WINNING_MATCH_BONUS if match_completed and winner == side else 0,
        perfect_game=perfect,
        close_win=close,
        multiplier=KNOCKOUT_MULTIPLIER if is_knockout_round(round_name) else 1.0,
    )
