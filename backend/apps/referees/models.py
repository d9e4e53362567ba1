"""
Referee models.

Tables: referees, referee_join_requests
"""

from django.db import models


class CertificationLevel(models.TextChoices):
    BASIC = 'BASIC', 'Basic'
    ADVANCED = 'ADVANCED', 'Advanced'
    PROFESSIONAL = 'PROFESSIONAL', 'Professional'


class Referee(models.Model):
    user = models.OneToOneField('authentication.User', on_delete=models.CASCADE, related_name='referee_profile')
    certification_level = models.CharField(
        max_length=20, choices=CertificationLevel.choices, default=CertificationLevel.BASIC
    )
    experience_years = models.PositiveSmallIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'referees'

    def __str__(self):
        return f'Referee {self.user_id}'


class JoinRequestStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    APPROVED = 'APPROVED', 'Approved'
    REJECTED = 'REJECTED', 'Rejected'


class RefereeJoinRequest(models.Model):
    """A referee asking to officiate a tournament"""
    tournament = models.ForeignKey(
        'tournaments.Tournament', on_delete=models.CASCADE, related_name='referee_requests'
    )
    referee = models.ForeignKey(Referee, on_delete=models.CASCADE, related_name='join_requests')
    status = models.CharField(max_length=10, choices=JoinRequestStatus.choices, default=JoinRequestStatus.PENDING)
    message = models.TextField(blank=True, default='')
    reviewed_by = models.ForeignKey(
        'authentication.User', on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'referee_join_requests'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['tournament', 'referee'], name='unique_referee_request'),
        ]

    def __str__(self):
        return f'{self.referee} -> {self.tournament_id} ({self.status})'
