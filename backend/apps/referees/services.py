"""
Referee service.

Join requests, approvals and match assignments.
"""

import logging
from django.db import IntegrityError, transaction
from django.db.models import Count, Q
from django.utils import timezone

from apps.core.exceptions import authorization_error, conflict_error, not_found_error, validation_error
from apps.core.permissions import Role, ensure_can_manage_tournament, is_admin
from apps.matches.models import Match, MatchStatus
from apps.tournaments.models import Tournament, TournamentStatus
from .models import JoinRequestStatus, Referee, RefereeJoinRequest

logger = logging.getLogger(__name__)


class RefereeService:

    def get_profile(self, user) -> Referee:
        if user.role != Role.REFEREE:
            raise authorization_error('Only referees can do this')
        referee, _ = Referee.objects.get_or_create(user=user)
        return referee

    def apply(self, user, tournament: Tournament, message: str = '') -> RefereeJoinRequest:
        """Ask to officiate a tournament."""
        referee = self.get_profile(user)
        if tournament.is_finished:
            raise validation_error('Tournament is no longer accepting referees')

        try:
            with transaction.atomic():
                join_request = RefereeJoinRequest.objects.create(
                    tournament=tournament, referee=referee, message=message
                )
        except IntegrityError:
            raise conflict_error('You have already applied to this tournament', code='ALREADY_APPLIED')

        logger.info(f'Referee {user.id} applied to tournament {tournament.id}')
        return join_request

    def my_requests(self, user):
        referee = self.get_profile(user)
        return RefereeJoinRequest.objects.filter(referee=referee).select_related('tournament')

    def list_requests(self, user, tournament: Tournament, status: str = None):
        ensure_can_manage_tournament(user, tournament)
        requests = RefereeJoinRequest.objects.filter(tournament=tournament).select_related('referee__user')
        if status:
            requests = requests.filter(status=status)
        return requests

    def get_request(self, request_id) -> RefereeJoinRequest:
        try:
            return RefereeJoinRequest.objects.select_related('tournament', 'referee__user').get(id=request_id)
        except RefereeJoinRequest.DoesNotExist:
            raise not_found_error('Join request')

    def _review(self, user, join_request: RefereeJoinRequest, status: str) -> RefereeJoinRequest:
        ensure_can_manage_tournament(user, join_request.tournament)
        if join_request.status != JoinRequestStatus.PENDING:
            raise validation_error(f'Request has already been {join_request.status.lower()}')

        join_request.status = status
        join_request.reviewed_by = user
        join_request.reviewed_at = timezone.now()
        join_request.save(update_fields=['status', 'reviewed_by', 'reviewed_at'])
        logger.info(f'Join request {join_request.id} {status.lower()} by {user.id}')
        return join_request

    def approve(self, user, join_request: RefereeJoinRequest) -> RefereeJoinRequest:
        return self._review(user, join_request, JoinRequestStatus.APPROVED)

    def reject(self, user, join_request: RefereeJoinRequest) -> RefereeJoinRequest:
        return self._review(user, join_request, JoinRequestStatus.REJECTED)

    def can_officiate(self, user, tournament: Tournament) -> bool:
        """Admins always can; referees need an approved request."""
        if is_admin(user.role):
            return True
        if user.role != Role.REFEREE:
            return False
        return RefereeJoinRequest.objects.filter(
            tournament=tournament,
            referee__user=user,
            status=JoinRequestStatus.APPROVED,
        ).exists()

    def assignments(self, user, status: str = None):
        matches = Match.objects.filter(referee=user).select_related(
            'tournament', 'player1', 'player2', 'team1', 'team2'
        )
        if status:
            matches = matches.filter(status=status)
        return matches.order_by('scheduled_time', 'id')

    def decline_assignment(self, user, match: Match) -> Match:
        if match.referee_id != user.id:
            raise authorization_error('This match is not assigned to you')
        if match.status != MatchStatus.SCHEDULED:
            raise validation_error('Only scheduled matches can be declined')

        match.referee = None
        match.save(update_fields=['referee', 'updated_at'])
        logger.info(f'Referee {user.id} declined match {match.id}')
        return match

    def stats(self, user) -> dict:
        totals = Match.objects.filter(referee=user).aggregate(
            total=Count('id'),
            completed=Count('id', filter=Q(status=MatchStatus.COMPLETED)),
            in_progress=Count('id', filter=Q(status=MatchStatus.IN_PROGRESS)),
            scheduled=Count('id', filter=Q(status=MatchStatus.SCHEDULED)),
            tournaments=Count('tournament', distinct=True),
        )
        approved = RefereeJoinRequest.objects.filter(
            referee__user=user, status=JoinRequestStatus.APPROVED
        ).count()
        return {
            'matchesOfficiated': totals['total'],
            'completed': totals['completed'],
            'inProgress': totals['in_progress'],
            'scheduled': totals['scheduled'],
            'tournaments': totals['tournaments'],
            'approvedTournaments': approved,
        }

    def open_tournaments(self):
        """Tournaments a referee can still apply to"""
        return Tournament.objects.exclude(
            status__in=[TournamentStatus.COMPLETED, TournamentStatus.CANCELLED]
        ).order_by('start_date')


# Create singleton instance
referee_service = RefereeService()
