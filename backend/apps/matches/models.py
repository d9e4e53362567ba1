"""
Match models.

Tables: matches, set_scores, point_events, match_results, match_performances
"""

from django.core.exceptions import ValidationError
from django.db import models

from .scoring import DEFAULT_MAX_SCORE


class MatchStatus(models.TextChoices):
    SCHEDULED = 'SCHEDULED', 'Scheduled'
    IN_PROGRESS = 'IN_PROGRESS', 'In progress'
    COMPLETED = 'COMPLETED', 'Completed'
    CANCELLED = 'CANCELLED', 'Cancelled'


class Match(models.Model):
    """
    A singles (player1 vs player2) or doubles (team1 vs team2) match.
    player1_score / player2_score hold the running score of the current
    set for side 1 and side 2.
    """
    tournament = models.ForeignKey('tournaments.Tournament', on_delete=models.CASCADE, related_name='matches')
    round = models.CharField(max_length=50, default='Round 1')
    court_number = models.PositiveSmallIntegerField(null=True, blank=True)
    scheduled_time = models.DateTimeField(null=True, blank=True)
    referee = models.ForeignKey(
        'authentication.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='refereed_matches',
    )
    is_doubles = models.BooleanField(default=False)
    player1 = models.ForeignKey(
        'tournaments.Player', on_delete=models.PROTECT, null=True, blank=True, related_name='matches_as_player1'
    )
    player2 = models.ForeignKey(
        'tournaments.Player', on_delete=models.PROTECT, null=True, blank=True, related_name='matches_as_player2'
    )
    team1 = models.ForeignKey(
        'tournaments.Team', on_delete=models.PROTECT, null=True, blank=True, related_name='matches_as_team1'
    )
    team2 = models.ForeignKey(
        'tournaments.Team', on_delete=models.PROTECT, null=True, blank=True, related_name='matches_as_team2'
    )
    player1_score = models.PositiveSmallIntegerField(default=0)
    player2_score = models.PositiveSmallIntegerField(default=0)
    current_set = models.PositiveSmallIntegerField(default=1)
    sets = models.PositiveSmallIntegerField(default=1)
    max_score = models.PositiveSmallIntegerField(default=DEFAULT_MAX_SCORE)
    is_golden_point = models.BooleanField(default=False)
    status = models.CharField(max_length=20, choices=MatchStatus.choices, default=MatchStatus.SCHEDULED)
    winner_side = models.PositiveSmallIntegerField(null=True, blank=True)
    start_time = models.DateTimeField(null=True, blank=True)
    end_time = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'matches'
        ordering = ['scheduled_time', 'id']
        indexes = [
            models.Index(fields=['tournament', 'status'], name='matches_tournament_status_idx'),
            models.Index(fields=['referee', 'status'], name='matches_referee_status_idx'),
        ]

    def __str__(self):
        return f'Match {self.id}: {self.side_name(1)} vs {self.side_name(2)}'

    def clean(self):
        errors = {}
        if self.sets % 2 == 0:
            errors['sets'] = 'Number of sets must be odd'
        if self.max_score < 1:
            errors['max_score'] = 'Max score must be positive'
        if self.is_doubles:
            if not self.team1_id or not self.team2_id:
                errors['team1'] = 'Doubles matches need two teams'
            elif self.team1_id == self.team2_id:
                errors['team2'] = 'A team cannot play itself'
        else:
            if not self.player1_id or not self.player2_id:
                errors['player1'] = 'Singles matches need two players'
            elif self.player1_id == self.player2_id:
                errors['player2'] = 'A player cannot play themselves'
        if errors:
            raise ValidationError(errors)

    def side_name(self, side: int) -> str:
        if self.is_doubles:
            team = self.team1 if side == 1 else self.team2
            return team.name if team else 'TBD'
        player = self.player1 if side == 1 else self.player2
        return player.name if player else 'TBD'

    def side_players(self, side: int) -> list:
        """Players on one side; doubles sides expand to the team roster."""
        if self.is_doubles:
            team = self.team1 if side == 1 else self.team2
            return list(team.players.all()) if team else []
        player = self.player1 if side == 1 else self.player2
        return [player] if player else []

    def score_for(self, side: int) -> int:
        return self.player1_score if side == 1 else self.player2_score


class SetScore(models.Model):
    match = models.ForeignKey(Match, on_delete=models.CASCADE, related_name='set_scores')
    set_number = models.PositiveSmallIntegerField()
    team1_score = models.PositiveSmallIntegerField()
    team2_score = models.PositiveSmallIntegerField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'set_scores'
        ordering = ['set_number']
        constraints = [
            models.UniqueConstraint(fields=['match', 'set_number'], name='unique_set_per_match'),
        ]

    def __str__(self):
        return f'Set {self.set_number}: {self.team1_score}-{self.team2_score}'


class PointEvent(models.Model):
    """One scored point; the newest event of the current set is what undo removes"""
    match = models.ForeignKey(Match, on_delete=models.CASCADE, related_name='point_events')
    set_number = models.PositiveSmallIntegerField()
    side = models.PositiveSmallIntegerField(choices=[(1, 'Side 1'), (2, 'Side 2')])
    created_by = models.ForeignKey(
        'authentication.User', on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'point_events'
        ordering = ['-id']
        indexes = [
            models.Index(fields=['match', 'set_number'], name='point_events_match_set_idx'),
        ]


class MatchResult(models.Model):
    match = models.OneToOneField(Match, on_delete=models.CASCADE, related_name='result')
    winner_side = models.PositiveSmallIntegerField()
    team1_sets = models.PositiveSmallIntegerField()
    team2_sets = models.PositiveSmallIntegerField()
    final_score = models.CharField(max_length=100)
    bonus_points = models.PositiveSmallIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'match_results'

    def __str__(self):
        return f'Result {self.match_id}: {self.final_score}'


class MatchPerformance(models.Model):
    """Per-player stat line recorded by the referee"""
    match = models.ForeignKey(Match, on_delete=models.CASCADE, related_name='performances')
    player = models.ForeignKey('tournaments.Player', on_delete=models.CASCADE, related_name='performances')
    points = models.PositiveIntegerField(default=0)
    aces = models.PositiveIntegerField(default=0)
    faults = models.PositiveIntegerField(default=0)
    winners = models.PositiveIntegerField(default=0)
    errors = models.PositiveIntegerField(default=0)
    rallies_won = models.PositiveIntegerField(default=0)
    other_stats = models.JSONField(default=dict, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'match_performances'
        constraints = [
            models.UniqueConstraint(fields=['match', 'player'], name='unique_performance_per_match'),
        ]

    def __str__(self):
        return f'{self.player} in match {self.match_id}'
