"""
Tests for referee join requests and match assignments.
"""

import pytest

from apps.core.exceptions import AppError
from apps.matches.models import MatchStatus
from apps.referees.models import JoinRequestStatus
from apps.referees.services import referee_service
from apps.tournaments.models import TournamentStatus
from tests.factories import (
    AdminFactory,
    JoinRequestFactory,
    MatchFactory,
    RefereeFactory,
    TournamentFactory,
)

pytestmark = pytest.mark.django_db


class TestJoinRequests:

    def test_referee_applies(self, auth_client, referee_user, tournament):
        response = auth_client(referee_user).post(
            f'/api/referees/tournaments/{tournament.id}/apply', {'message': 'Certified L2'}, format='json'
        )

        assert response.status_code == 201
        body = response.json()['request']
        assert body['status'] == JoinRequestStatus.PENDING
        assert body['tournamentId'] == tournament.id

    def test_second_application_conflicts(self, referee_user, tournament):
        referee_service.apply(referee_user, tournament)
        with pytest.raises(AppError) as excinfo:
            referee_service.apply(referee_user, tournament)
        assert excinfo.value.code == 'ALREADY_APPLIED'

    def test_only_referees_apply(self, auth_client, user, tournament):
        response = auth_client(user).post(f'/api/referees/tournaments/{tournament.id}/apply')
        assert response.status_code == 403

    def test_cannot_apply_to_finished_tournament(self, referee_user, admin):
        tournament = TournamentFactory(organizer=admin, status=TournamentStatus.COMPLETED)
        with pytest.raises(AppError):
            referee_service.apply(referee_user, tournament)

    def test_organizer_approves(self, auth_client, admin, tournament):
        join_request = JoinRequestFactory(tournament=tournament)

        response = auth_client(admin).post(f'/api/referees/requests/{join_request.id}/approve')
        assert response.status_code == 200
        assert response.json()['request']['status'] == JoinRequestStatus.APPROVED
        assert referee_service.can_officiate(join_request.referee.user, tournament)

    def test_other_admin_cannot_review(self, auth_client, tournament):
        join_request = JoinRequestFactory(tournament=tournament)
        response = auth_client(AdminFactory()).post(f'/api/referees/requests/{join_request.id}/approve')
        assert response.status_code == 403

    def test_request_is_reviewed_once(self, admin, tournament):
        join_request = JoinRequestFactory(tournament=tournament)
        referee_service.reject(admin, join_request)

        with pytest.raises(AppError):
            referee_service.approve(admin, join_request)
        assert not referee_service.can_officiate(join_request.referee.user, tournament)

    def test_list_filtered_by_status(self, auth_client, admin, tournament):
        approved = JoinRequestFactory(tournament=tournament, status=JoinRequestStatus.APPROVED)
        JoinRequestFactory(tournament=tournament)

        response = auth_client(admin).get(
            f'/api/tournaments/{tournament.id}/join-requests', {'status': JoinRequestStatus.APPROVED}
        )
        assert [r['id'] for r in response.json()['requests']] == [approved.id]


class TestCanOfficiate:

    def test_admins_always_can(self, admin, tournament):
        assert referee_service.can_officiate(admin, tournament)

    def test_regular_user_never_can(self, user, tournament):
        assert not referee_service.can_officiate(user, tournament)

    def test_referee_without_request(self, referee_user, tournament):
        assert not referee_service.can_officiate(referee_user, tournament)


class TestAssignments:

    def test_assignments_and_stats(self, auth_client, tournament):
        referee = RefereeFactory()
        JoinRequestFactory(tournament=tournament, referee=referee, status=JoinRequestStatus.APPROVED)
        MatchFactory(tournament=tournament, referee=referee.user)
        MatchFactory(tournament=tournament, referee=referee.user, status=MatchStatus.COMPLETED)

        client = auth_client(referee.user)
        assignments = client.get('/api/referees/assignments').json()['matches']
        assert len(assignments) == 2

        stats = client.get('/api/referees/stats').json()['stats']
        assert stats['matchesOfficiated'] == 2
        assert stats['completed'] == 1
        assert stats['scheduled'] == 1
        assert stats['approvedTournaments'] == 1

    def test_decline_scheduled_match(self, auth_client, tournament):
        referee = RefereeFactory()
        match = MatchFactory(tournament=tournament, referee=referee.user)

        response = auth_client(referee.user).post(f'/api/referees/assignments/{match.id}/decline')
        assert response.status_code == 200
        match.refresh_from_db()
        assert match.referee_id is None

    def test_cannot_decline_someone_elses_match(self, referee_user, tournament):
        match = MatchFactory(tournament=tournament)
        with pytest.raises(AppError) as excinfo:
            referee_service.decline_assignment(referee_user, match)
        assert excinfo.value.status_code == 403

    def test_cannot_decline_started_match(self, tournament):
        referee = RefereeFactory()
        match = MatchFactory(tournament=tournament, referee=referee.user, status=MatchStatus.IN_PROGRESS)
        with pytest.raises(AppError):
            referee_service.decline_assignment(referee.user, match)
