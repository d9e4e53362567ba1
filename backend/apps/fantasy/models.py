"""
Fantasy models.

Tables: fantasy_contests, fantasy_teams, fantasy_team_players,
fantasy_points, prize_distribution_rules, prize_disbursements
"""

from decimal import Decimal
from django.db import models

from .points import DEFAULT_MAX_PLAYERS_TO_CHANGE, DEFAULT_TEAM_SIZE, DEFAULT_WALLET_SIZE


def default_contest_rules():
    return {
        'teamSize': DEFAULT_TEAM_SIZE,
        'walletSize': DEFAULT_WALLET_SIZE,
        'playerCategories': {},
        'allowTeamChanges': False,
        'maxPlayersToChange': DEFAULT_MAX_PLAYERS_TO_CHANGE,
    }


class ContestStatus(models.TextChoices):
    DRAFT = 'DRAFT', 'Draft'
    OPEN = 'OPEN', 'Open'
    ONGOING = 'ONGOING', 'Ongoing'
    COMPLETED = 'COMPLETED', 'Completed'
    CANCELLED = 'CANCELLED', 'Cancelled'


CONTEST_TRANSITIONS = {
    ContestStatus.DRAFT: {ContestStatus.OPEN, ContestStatus.CANCELLED},
    ContestStatus.OPEN: {ContestStatus.ONGOING, ContestStatus.CANCELLED},
    ContestStatus.ONGOING: {ContestStatus.COMPLETED, ContestStatus.CANCELLED},
    ContestStatus.COMPLETED: set(),
    ContestStatus.CANCELLED: set(),
}


class FantasyContest(models.Model):
    tournament = models.ForeignKey('tournaments.Tournament', on_delete=models.CASCADE, related_name='contests')
    name = models.CharField(max_length=150)
    description = models.TextField(blank=True, default='')
    entry_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    prize_pool = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    max_entries = models.PositiveIntegerField(default=100)
    current_entries = models.PositiveIntegerField(default=0)
    status = models.CharField(max_length=10, choices=ContestStatus.choices, default=ContestStatus.DRAFT)
    rules = models.JSONField(default=default_contest_rules, blank=True)
    prize_breakdown = models.JSONField(default=list, blank=True)
    is_prizes_distributed = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'fantasy_contests'
        ordering = ['-created_at']

    def __str__(self):
        return f'{self.name} ({self.tournament_id})'

    def rule(self, key, default=None):
        value = (self.rules or {}).get(key)
        if value is None:
            value = default_contest_rules().get(key, default)
        return value

    @property
    def team_size(self) -> int:
        return int(self.rule('teamSize', DEFAULT_TEAM_SIZE))

    @property
    def wallet_size(self) -> int:
        return int(self.rule('walletSize', DEFAULT_WALLET_SIZE))

    @property
    def is_full(self) -> bool:
        return self.current_entries >= self.max_entries


class FantasyTeam(models.Model):
    name = models.CharField(max_length=100)
    user = models.ForeignKey('authentication.User', on_delete=models.CASCADE, related_name='fantasy_teams')
    contest = models.ForeignKey(FantasyContest, on_delete=models.CASCADE, related_name='teams')
    total_points = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    rank = models.PositiveIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'fantasy_teams'
        ordering = ['-total_points', 'created_at']
        constraints = [
            models.UniqueConstraint(fields=['user', 'contest'], name='unique_team_per_user_contest'),
        ]

    def __str__(self):
        return self.name


class FantasyTeamPlayer(models.Model):
    team = models.ForeignKey(FantasyTeam, on_delete=models.CASCADE, related_name='selections')
    player = models.ForeignKey('tournaments.Player', on_delete=models.CASCADE, related_name='fantasy_selections')
    is_captain = models.BooleanField(default=False)
    is_vice_captain = models.BooleanField(default=False)

    class Meta:
        db_table = 'fantasy_team_players'
        constraints = [
            models.UniqueConstraint(fields=['team', 'player'], name='unique_player_per_fantasy_team'),
        ]

    def __str__(self):
        return f'{self.player} in {self.team}'


class PointsCategory(models.TextChoices):
    MATCH_WIN = 'MATCH_WIN', 'Match win'
    MATCH_PARTICIPATION = 'MATCH_PARTICIPATION', 'Match participation'
    PERFORMANCE = 'PERFORMANCE', 'Performance'
    POSITION_BONUS = 'POSITION_BONUS', 'Position bonus'
    MVP_BONUS = 'MVP_BONUS', 'MVP bonus'


class FantasyPoints(models.Model):
    """Ledger of points a real player earned, before team multipliers"""
    player = models.ForeignKey('tournaments.Player', on_delete=models.CASCADE, related_name='fantasy_points')
    tournament = models.ForeignKey('tournaments.Tournament', on_delete=models.CASCADE, related_name='fantasy_points')
    match = models.ForeignKey(
        'matches.Match', on_delete=models.CASCADE, null=True, blank=True, related_name='fantasy_points'
    )
    points = models.DecimalField(max_digits=8, decimal_places=2)
    category = models.CharField(max_length=20, choices=PointsCategory.choices)
    description = models.CharField(max_length=255, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'fantasy_points'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['tournament', 'player'], name='fantasy_pts_tourn_player_idx'),
        ]


class PrizeDistributionRule(models.Model):
    """Share of the pool for one rank; contest rules override tournament rules"""
    tournament = models.ForeignKey('tournaments.Tournament', on_delete=models.CASCADE, related_name='prize_rules')
    contest = models.ForeignKey(
        FantasyContest, on_delete=models.CASCADE, null=True, blank=True, related_name='prize_rules'
    )
    rank = models.PositiveIntegerField()
    percentage = models.DecimalField(max_digits=6, decimal_places=3)
    min_players = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'prize_distribution_rules'
        ordering = ['rank']


class DisbursementStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    PROCESSING = 'PROCESSING', 'Processing'
    COMPLETED = 'COMPLETED', 'Completed'
    FAILED = 'FAILED', 'Failed'


class PrizeDisbursement(models.Model):
    contest = models.ForeignKey(FantasyContest, on_delete=models.CASCADE, related_name='disbursements')
    team = models.ForeignKey(FantasyTeam, on_delete=models.CASCADE, related_name='disbursements')
    user = models.ForeignKey('authentication.User', on_delete=models.CASCADE, related_name='prize_disbursements')
    rank = models.PositiveIntegerField()
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    processing_fee = models.DecimalField(max_digits=10, decimal_places=2)
    net_amount = models.DecimalField(max_digits=12, decimal_places=2)
    status = models.CharField(max_length=10, choices=DisbursementStatus.choices, default=DisbursementStatus.PENDING)
    payout_id = models.CharField(max_length=100, blank=True, default='')
    failure_reason = models.CharField(max_length=255, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'prize_disbursements'
        ordering = ['rank', 'id']

    def __str__(self):
        return f'{self.net_amount} to {self.user_id} (rank {self.rank})'
