"""
Fantasy points engine.

Pure arithmetic shared by the fantasy service, the payment flow and the
tests: point values, role multipliers, prize splits and fees.
"""

from dataclasses import dataclass, field, fields, replace
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional

TWO_PLACES = Decimal('0.01')


@dataclass(frozen=True)
class PointsConfig:
    match_win: float = 10
    match_loss: float = 2
    set_win: float = 5
    point_won: float = 0.5
    point_lost: float = -0.2
    winner: float = 2
    ace: float = 3
    error: float = -1
    fault: float = -0.5
    rally_won: float = 1
    captain_multiplier: float = 2.0
    vice_captain_multiplier: float = 1.5
    position_bonus: Dict[int, float] = field(default_factory=lambda: {
        1: 25, 2: 15, 3: 10, 4: 10, 5: 5, 6: 5, 7: 5, 8: 5,
    })

    @classmethod
    def from_overrides(cls, overrides: Optional[dict]) -> 'PointsConfig':
        """
        Build a config from tournament customPoints. Keys may be camelCase
        (matchWin) or snake_case (match_win); unknown keys are ignored.
        """
        if not overrides:
            return cls()
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in overrides.items():
            name = _snake(key)
            if name in known and name != 'position_bonus':
                values[name] = float(value)
        config = replace(cls(), **values)
        if overrides.get('positionBonus'):
            bonus = {int(k): float(v) for k, v in overrides['positionBonus'].items()}
            config = replace(config, position_bonus=bonus)
        return config


def _snake(name: str) -> str:
    out = []
    for ch in name:
        if ch.isupper():
            out.append('_')
            out.append(ch.lower())
        else:
            out.append(ch)
    return ''.join(out)


DEFAULT_POINTS_CONFIG = PointsConfig()


@dataclass
class PerformanceLine:
    """What one player did in one match"""
    won: bool
    sets_won: int = 0
    points_won: int = 0
    points_lost: int = 0
    winners: int = 0
    aces: int = 0
    errors: int = 0
    faults: int = 0
    rallies_won: int = 0
    match_id: Optional[int] = None


def calculate_match_points(performance: PerformanceLine, config: PointsConfig = DEFAULT_POINTS_CONFIG) -> float:
    """Fantasy points for one match, never negative."""
    points = config.match_win if performance.won else config.match_loss
    points += performance.sets_won * config.set_win
    points += performance.points_won * config.point_won
    points += performance.points_lost * config.point_lost
    points += performance.winners * config.winner
    points += performance.aces * config.ace
    points += performance.errors * config.error
    points += performance.faults * config.fault
    points += performance.rallies_won * config.rally_won
    return round(max(points, 0.0), 2)


def calculate_tournament_position_points(position: int, config: PointsConfig = DEFAULT_POINTS_CONFIG) -> float:
    return config.position_bonus.get(position, 0)


def role_multiplier(is_captain: bool, is_vice_captain: bool,
                    config: PointsConfig = DEFAULT_POINTS_CONFIG) -> float:
    if is_captain:
        return config.captain_multiplier
    if is_vice_captain:
        return config.vice_captain_multiplier
    return 1.0


def apply_role_multiplier(points: float, is_captain: bool, is_vice_captain: bool,
                          config: PointsConfig = DEFAULT_POINTS_CONFIG) -> float:
    return round(points * role_multiplier(is_captain, is_vice_captain, config), 2)


@dataclass
class Selection:
    player_id: int
    is_captain: bool = False
    is_vice_captain: bool = False


def calculate_team_points(selections: Iterable[Selection], player_points: Dict[int, float],
                          config: PointsConfig = DEFAULT_POINTS_CONFIG) -> float:
    """Sum of each selected player's points with captain/vice multipliers."""
    total = 0.0
    for selection in selections:
        base = player_points.get(selection.player_id, 0)
        total += apply_role_multiplier(base, selection.is_captain, selection.is_vice_captain, config)
    return round(total, 2)


def generate_player_summary(performances: List[PerformanceLine],
                            config: PointsConfig = DEFAULT_POINTS_CONFIG) -> dict:
    """
    Totals across a player's matches. bestMatch is the match_id with the
    highest score (first one on ties), or None without matches.
    """
    total = 0.0
    wins = 0
    sets_won = 0
    best_match = None
    best_points = None

    for performance in performances:
        points = calculate_match_points(performance, config)
        total += points
        wins += 1 if performance.won else 0
        sets_won += performance.sets_won
        if best_points is None or points > best_points:
            best_points = points
            best_match = performance.match_id

    played = len(performances)
    return {
        'totalPoints': round(total, 2),
        'matchesPlayed': played,
        'matchesWon': wins,
        'setsWon': sets_won,
        'winRate': round(wins / played * 100, 1) if played else 0.0,
        'bestMatch': best_match,
    }


# Contest economics

DEFAULT_PLAYER_PRICE = 5000
DEFAULT_WALLET_SIZE = 100000
DEFAULT_TEAM_SIZE = 7
DEFAULT_MAX_PLAYERS_TO_CHANGE = 2


def player_price(skill_level: str, rules: Optional[dict]) -> int:
    categories = (rules or {}).get('playerCategories') or {}
    try:
        return int(categories.get(skill_level, DEFAULT_PLAYER_PRICE))
    except (TypeError, ValueError):
        return DEFAULT_PLAYER_PRICE


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def breakdown_position(row: dict) -> int:
    """Prize breakdown rows name their place as 'position' (older rows used 'rank')."""
    return int(row.get('position', row.get('rank')))


def prize_breakdown(prize_pool, participants: int) -> List[dict]:
    """
    Default payout table:
    fewer than 5 entries pays 70% to first; fewer than 30 pays 40/24/16;
    larger contests also split 20% evenly across ranks 4-10.
    """
    pool = Decimal(str(prize_pool))
    if participants <= 0 or pool <= 0:
        return []

    if participants < 5:
        shares = [(1, Decimal('70'))]
    else:
        shares = [(1, Decimal('40')), (2, Decimal('24')), (3, Decimal('16'))]
        if participants >= 30:
            each = Decimal('20') / 7
            shares.extend((rank, each) for rank in range(4, 11))

    return [
        {'rank': rank, 'percentage': float(round(pct, 4)), 'amount': _money(pool * pct / 100)}
        for rank, pct in shares
        if rank <= participants
    ]


def calculate_processing_fee(amount, percent) -> Decimal:
    return _money(Decimal(str(amount)) * Decimal(str(percent)) / 100)


def calculate_payment_splits(amount, tournament_admin_percent=10, master_admin_percent=10) -> dict:
    """
    Split an entry fee. The prize pool takes the remainder so the three
    parts always add up to the amount.
    """
    total = _money(amount)
    tournament_admin = _money(total * Decimal(str(tournament_admin_percent)) / 100)
    master_admin = _money(total * Decimal(str(master_admin_percent)) / 100)
    return {
        'tournamentAdmin': tournament_admin,
        'masterAdmin': master_admin,
        'prizePool': total - tournament_admin - master_admin,
    }
