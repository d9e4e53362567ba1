"""
Tournament models.

Tables: tournaments, players, teams, tournament_entries, player_stats
"""

from decimal import Decimal
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models


class TournamentType(models.TextChoices):
    SINGLES = 'SINGLES', 'Singles'
    DOUBLES = 'DOUBLES', 'Doubles'
    MIXED_DOUBLES = 'MIXED_DOUBLES', 'Mixed doubles'
    ROUND_ROBIN = 'ROUND_ROBIN', 'Round robin'
    KNOCKOUT = 'KNOCKOUT', 'Knockout'
    LEAGUE = 'LEAGUE', 'League'


class TournamentStatus(models.TextChoices):
    DRAFT = 'DRAFT', 'Draft'
    REGISTRATION_OPEN = 'REGISTRATION_OPEN', 'Registration open'
    REGISTRATION_CLOSED = 'REGISTRATION_CLOSED', 'Registration closed'
    IN_PROGRESS = 'IN_PROGRESS', 'In progress'
    COMPLETED = 'COMPLETED', 'Completed'
    CANCELLED = 'CANCELLED', 'Cancelled'


# Allowed forward transitions; CANCELLED is reachable from any non-terminal state
STATUS_TRANSITIONS = {
    TournamentStatus.DRAFT: {TournamentStatus.REGISTRATION_OPEN, TournamentStatus.CANCELLED},
    TournamentStatus.REGISTRATION_OPEN: {
        TournamentStatus.REGISTRATION_CLOSED,
        TournamentStatus.IN_PROGRESS,
        TournamentStatus.CANCELLED,
    },
    TournamentStatus.REGISTRATION_CLOSED: {TournamentStatus.IN_PROGRESS, TournamentStatus.CANCELLED},
    TournamentStatus.IN_PROGRESS: {TournamentStatus.COMPLETED, TournamentStatus.CANCELLED},
    TournamentStatus.COMPLETED: set(),
    TournamentStatus.CANCELLED: set(),
}


class SkillLevel(models.TextChoices):
    BEGINNER = 'BEGINNER', 'Beginner'
    INTERMEDIATE = 'INTERMEDIATE', 'Intermediate'
    ADVANCED = 'ADVANCED', 'Advanced'
    PROFESSIONAL = 'PROFESSIONAL', 'Professional'


class Tournament(models.Model):
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True, default='')
    location = models.CharField(max_length=255)
    type = models.CharField(max_length=20, choices=TournamentType.choices, default=TournamentType.SINGLES)
    status = models.CharField(max_length=20, choices=TournamentStatus.choices, default=TournamentStatus.DRAFT)
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()
    registration_open_date = models.DateTimeField(null=True, blank=True)
    registration_close_date = models.DateTimeField()
    max_participants = models.PositiveIntegerField(validators=[MinValueValidator(2)])
    entry_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    prize_money = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    organizer = models.ForeignKey(
        'authentication.User',
        on_delete=models.PROTECT,
        related_name='organized_tournaments',
    )
    fantasy_settings = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'tournaments'
        ordering = ['-start_date']
        indexes = [
            models.Index(fields=['status'], name='tournaments_status_idx'),
        ]

    def __str__(self):
        return self.name

    def clean(self):
        errors = {}
        if self.start_date and self.end_date and self.end_date < self.start_date:
            errors['end_date'] = 'End date must be on or after the start date'
        if self.registration_close_date and self.start_date and self.registration_close_date > self.start_date:
            errors['registration_close_date'] = 'Registration must close before the tournament starts'
        if (self.registration_open_date and self.registration_close_date
                and self.registration_open_date > self.registration_close_date):
            errors['registration_open_date'] = 'Registration must open before it closes'
        if self.max_participants is not None and self.max_participants < 2:
            errors['max_participants'] = 'A tournament needs at least 2 participants'
        if self.entry_fee is not None and self.entry_fee < 0:
            errors['entry_fee'] = 'Entry fee cannot be negative'
        if self.prize_money is not None and self.prize_money < 0:
            errors['prize_money'] = 'Prize money cannot be negative'
        if errors:
            raise ValidationError(errors)

    @property
    def is_finished(self):
        return self.status in (TournamentStatus.COMPLETED, TournamentStatus.CANCELLED)

    @property
    def fantasy_enabled(self):
        return bool((self.fantasy_settings or {}).get('enableFantasy'))

    def can_transition_to(self, new_status) -> bool:
        return new_status in STATUS_TRANSITIONS.get(self.status, set())


class Player(models.Model):
    """A competitor; optionally linked to a PLAYER user account"""
    name = models.CharField(max_length=150)
    user = models.OneToOneField(
        'authentication.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='player_profile',
    )
    country = models.CharField(max_length=100, blank=True, default='')
    age = models.PositiveSmallIntegerField(null=True, blank=True)
    gender = models.CharField(max_length=10, blank=True, default='')
    image_url = models.URLField(blank=True, default='')
    skill_level = models.CharField(max_length=20, choices=SkillLevel.choices, default=SkillLevel.INTERMEDIATE)
    ranking = models.PositiveIntegerField(null=True, blank=True)
    total_points = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'players'
        ordering = ['name']

    def __str__(self):
        return self.name


class Team(models.Model):
    """Doubles pairing inside one tournament"""
    name = models.CharField(max_length=150)
    tournament = models.ForeignKey(Tournament, on_delete=models.CASCADE, related_name='teams')
    players = models.ManyToManyField(Player, related_name='teams')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'teams'
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(fields=['tournament', 'name'], name='unique_team_name_per_tournament'),
        ]

    def __str__(self):
        return self.name


class PaymentStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    PAID = 'PAID', 'Paid'
    WAIVED = 'WAIVED', 'Waived'


class TournamentEntry(models.Model):
    tournament = models.ForeignKey(Tournament, on_delete=models.CASCADE, related_name='entries')
    player = models.ForeignKey(Player, on_delete=models.CASCADE, related_name='entries')
    seed = models.PositiveIntegerField(null=True, blank=True)
    payment_status = models.CharField(max_length=10, choices=PaymentStatus.choices, default=PaymentStatus.PENDING)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'tournament_entries'
        ordering = ['created_at']
        constraints = [
            models.UniqueConstraint(fields=['tournament', 'player'], name='unique_player_per_tournament'),
        ]

    def __str__(self):
        return f'{self.player} @ {self.tournament}'


class PlayerStats(models.Model):
    """Per-tournament aggregates updated when matches complete"""
    tournament = models.ForeignKey(Tournament, on_delete=models.CASCADE, related_name='player_stats')
    player = models.ForeignKey(Player, on_delete=models.CASCADE, related_name='stats')
    matches_played = models.PositiveIntegerField(default=0)
    wins = models.PositiveIntegerField(default=0)
    losses = models.PositiveIntegerField(default=0)
    points_scored = models.PositiveIntegerField(default=0)
    points_conceded = models.PositiveIntegerField(default=0)
    fantasy_points = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))

    class Meta:
        db_table = 'player_stats'
        ordering = ['-wins']
        constraints = [
            models.UniqueConstraint(fields=['tournament', 'player'], name='unique_stats_per_tournament'),
        ]

    def __str__(self):
        return f'{self.player} stats @ {self.tournament_id}'

    @property
    def point_difference(self):
        return self.points_scored - self.points_conceded
