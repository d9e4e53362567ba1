"""
Tests for the tournament lifecycle, registration, teams and standings.
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from apps.core.exceptions import AppError
from apps.fantasy.models import ContestStatus, FantasyContest, FantasyPoints, PointsCategory
from apps.matches.models import MatchStatus
from apps.tournaments.models import PlayerStats, Tournament, TournamentEntry, TournamentStatus
from apps.tournaments.services import tournament_service
from tests.factories import (
    AdminFactory,
    FantasyContestFactory,
    MatchFactory,
    PlayerFactory,
    PlayerUserFactory,
    TournamentEntryFactory,
    TournamentFactory,
)

pytestmark = pytest.mark.django_db


def tournament_payload(**overrides):
    start = timezone.now() + timedelta(days=10)
    payload = {
        'name': 'Summer Slam',
        'location': 'Pune',
        'startDate': start.isoformat(),
        'endDate': (start + timedelta(days=2)).isoformat(),
        'registrationCloseDate': (start - timedelta(days=1)).isoformat(),
        'maxParticipants': 16,
    }
    payload.update(overrides)
    return payload


class TestTournamentCrud:

    def test_admin_creates_draft_tournament(self, auth_client, admin):
        response = auth_client(admin).post('/api/tournaments', tournament_payload(), format='json')

        assert response.status_code == 201
        body = response.json()['tournament']
        assert body['status'] == TournamentStatus.DRAFT
        assert body['organizerId'] == str(admin.id)
        assert body['participantCount'] == 0

    def test_regular_user_cannot_create(self, auth_client, user):
        response = auth_client(user).post('/api/tournaments', tournament_payload(), format='json')
        assert response.status_code == 403

    def test_registration_must_close_before_start(self, auth_client, admin):
        start = timezone.now() + timedelta(days=10)
        response = auth_client(admin).post('/api/tournaments', tournament_payload(
            registrationCloseDate=(start + timedelta(days=1)).isoformat(),
            startDate=start.isoformat(),
        ), format='json')

        assert response.status_code == 400

    def test_only_organizer_can_edit(self, auth_client, tournament):
        other_admin = AdminFactory()
        response = auth_client(other_admin).patch(
            f'/api/tournaments/{tournament.id}', {'name': 'Renamed'}, format='json'
        )
        assert response.status_code == 403

    def test_master_admin_can_edit_any_tournament(self, auth_client, master_admin, tournament):
        response = auth_client(master_admin).patch(
            f'/api/tournaments/{tournament.id}', {'name': 'Renamed'}, format='json'
        )
        assert response.status_code == 200
        assert response.json()['tournament']['name'] == 'Renamed'

    def test_only_drafts_can_be_deleted(self, auth_client, admin, tournament):
        response = auth_client(admin).delete(f'/api/tournaments/{tournament.id}')
        assert response.status_code == 400

        draft = TournamentFactory(organizer=admin, status=TournamentStatus.DRAFT)
        response = auth_client(admin).delete(f'/api/tournaments/{draft.id}')
        assert response.status_code == 204
        assert not Tournament.objects.filter(id=draft.id).exists()

    def test_missing_tournament_is_404(self, api_client):
        response = api_client.get('/api/tournaments/999999')
        assert response.status_code == 404
        assert response.json()['error']['code'] == 'NOT_FOUND'


class TestStatusTransitions:

    def test_forward_transition(self, admin):
        tournament = TournamentFactory(organizer=admin, status=TournamentStatus.DRAFT)
        tournament_service.change_status(admin, tournament, TournamentStatus.REGISTRATION_OPEN)
        assert tournament.status == TournamentStatus.REGISTRATION_OPEN

    def test_illegal_transition(self, admin):
        tournament = TournamentFactory(organizer=admin, status=TournamentStatus.DRAFT)
        with pytest.raises(AppError) as excinfo:
            tournament_service.change_status(admin, tournament, TournamentStatus.IN_PROGRESS)
        assert excinfo.value.details == {'from': TournamentStatus.DRAFT, 'to': TournamentStatus.IN_PROGRESS}

    def test_cancel_cancels_contests(self, admin, tournament):
        contest = FantasyContestFactory(tournament=tournament)
        tournament_service.change_status(admin, tournament, TournamentStatus.CANCELLED)

        contest.refresh_from_db()
        assert contest.status == ContestStatus.CANCELLED

    def test_start_locks_open_contests(self, admin, tournament):
        contest = FantasyContestFactory(tournament=tournament)
        tournament_service.change_status(admin, tournament, TournamentStatus.IN_PROGRESS)

        contest.refresh_from_db()
        assert contest.status == ContestStatus.ONGOING


class TestRegistration:

    def test_admin_registers_player(self, auth_client, admin, tournament):
        player = PlayerFactory()
        response = auth_client(admin).post(
            f'/api/tournaments/{tournament.id}/players', {'playerId': player.id, 'seed': 1}, format='json'
        )

        assert response.status_code == 201
        assert response.json()['entry']['paymentStatus'] == 'WAIVED'
        assert PlayerStats.objects.filter(tournament=tournament, player=player).exists()

    def test_paid_tournament_entry_is_pending(self, admin):
        tournament = TournamentFactory(organizer=admin, entry_fee=Decimal('500.00'))
        entry = tournament_service.register_player(admin, tournament, PlayerFactory())
        assert entry.payment_status == 'PENDING'

    def test_double_registration_conflicts(self, admin, tournament):
        player = PlayerFactory()
        tournament_service.register_player(admin, tournament, player)

        with pytest.raises(AppError) as excinfo:
            tournament_service.register_player(admin, tournament, player)
        assert excinfo.value.code == 'ALREADY_REGISTERED'

    def test_capacity_is_enforced(self, admin):
        tournament = TournamentFactory(organizer=admin, max_participants=2)
        tournament_service.register_player(admin, tournament, PlayerFactory())
        tournament_service.register_player(admin, tournament, PlayerFactory())

        with pytest.raises(AppError) as excinfo:
            tournament_service.register_player(admin, tournament, PlayerFactory())
        assert excinfo.value.status_code == 409
        assert excinfo.value.code == 'TOURNAMENT_FULL'
        assert TournamentEntry.objects.filter(tournament=tournament).count() == 2

    def test_closed_registration(self, admin):
        tournament = TournamentFactory(organizer=admin, status=TournamentStatus.REGISTRATION_CLOSED)
        with pytest.raises(AppError):
            tournament_service.register_player(admin, tournament, PlayerFactory())

    def test_player_registers_own_profile(self, tournament):
        account = PlayerUserFactory()
        player = PlayerFactory(user=account)

        entry = tournament_service.register_player(account, tournament, player)
        assert entry.player_id == player.id

    def test_player_cannot_register_someone_else(self, tournament):
        account = PlayerUserFactory()
        with pytest.raises(AppError) as excinfo:
            tournament_service.register_player(account, tournament, PlayerFactory())
        assert excinfo.value.status_code == 403


class TestTeams:

    def test_create_doubles_team(self, auth_client, admin, tournament):
        first = TournamentEntryFactory(tournament=tournament).player
        second = TournamentEntryFactory(tournament=tournament).player

        response = auth_client(admin).post(f'/api/tournaments/{tournament.id}/teams', {
            'name': 'Dink Masters',
            'playerIds': [first.id, second.id],
        }, format='json')

        assert response.status_code == 201
        assert tournament.teams.get().players.count() == 2

    def test_team_players_must_be_registered(self, admin, tournament):
        registered = TournamentEntryFactory(tournament=tournament).player
        with pytest.raises(AppError) as excinfo:
            tournament_service.create_team(admin, tournament, 'Pair', [registered.id, PlayerFactory().id])
        assert 'unregisteredPlayerIds' in excinfo.value.details

    def test_player_in_one_team_only(self, admin, tournament):
        players = [TournamentEntryFactory(tournament=tournament).player for _ in range(3)]
        tournament_service.create_team(admin, tournament, 'First', [players[0].id, players[1].id])

        with pytest.raises(AppError) as excinfo:
            tournament_service.create_team(admin, tournament, 'Second', [players[1].id, players[2].id])
        assert excinfo.value.status_code == 409


class TestCompletionAndStandings:

    def test_pending_matches_block_completion(self, admin, tournament):
        MatchFactory(tournament=tournament)
        with pytest.raises(AppError) as excinfo:
            tournament_service.complete_tournament(admin, tournament)
        assert excinfo.value.details == {'pendingMatches': 1}

    def test_completion_awards_position_bonus_and_closes_contests(self, auth_client, admin, tournament):
        winner = TournamentEntryFactory(tournament=tournament).player
        runner_up = TournamentEntryFactory(tournament=tournament).player
        PlayerStats.objects.filter(tournament=tournament, player=winner).update(wins=2, points_scored=22)
        PlayerStats.objects.filter(tournament=tournament, player=runner_up).update(wins=1, points_scored=15)
        MatchFactory(tournament=tournament, player1=winner, player2=runner_up, status=MatchStatus.COMPLETED)
        contest = FantasyContestFactory(tournament=tournament, status=ContestStatus.ONGOING)

        response = auth_client(admin).post(f'/api/tournaments/{tournament.id}/complete')
        assert response.status_code == 200
        assert response.json()['tournament']['status'] == TournamentStatus.COMPLETED

        bonuses = FantasyPoints.objects.filter(tournament=tournament, category=PointsCategory.POSITION_BONUS)
        assert bonuses.get(player=winner).points > bonuses.get(player=runner_up).points
        contest.refresh_from_db()
        assert contest.status == ContestStatus.COMPLETED

    def test_leaderboard_orders_by_wins_then_difference(self, api_client, tournament):
        players = [TournamentEntryFactory(tournament=tournament).player for _ in range(3)]
        PlayerStats.objects.filter(tournament=tournament, player=players[0]).update(wins=1, points_scored=11)
        PlayerStats.objects.filter(tournament=tournament, player=players[1]).update(
            wins=1, points_scored=20, points_conceded=2
        )
        PlayerStats.objects.filter(tournament=tournament, player=players[2]).update(wins=2)

        response = api_client.get(f'/api/tournaments/{tournament.id}/leaderboard')
        standings = response.json()['standings']

        assert [row['position'] for row in standings] == [1, 2, 3]
        assert [row['wins'] for row in standings] == [2, 1, 1]
        assert standings[1]['pointDifference'] == 18


class TestFantasySetup:

    def test_creates_and_updates_contests_by_name(self, auth_client, admin, tournament):
        client = auth_client(admin)
        setup = {
            'enableFantasy': True,
            'autoPublish': True,
            'contests': [{'name': 'Mega Contest', 'entryFee': 49, 'maxEntries': 500}],
        }
        first = client.post(f'/api/tournaments/{tournament.id}/fantasy-setup', setup, format='json')
        assert first.status_code == 200
        assert first.json()['contests'][0]['created'] is True

        setup['contests'][0] = {'name': 'mega contest', 'entryFee': 99}
        second = client.post(f'/api/tournaments/{tournament.id}/fantasy-setup', setup, format='json')
        assert second.json()['contests'][0]['created'] is False

        contest = FantasyContest.objects.get(tournament=tournament)
        assert contest.entry_fee == Decimal('99')
        assert contest.status == ContestStatus.OPEN

    def test_breakdown_must_sum_to_hundred(self, admin, tournament):
        with pytest.raises(AppError):
            tournament_service.configure_fantasy(admin, tournament, {
                'enableFantasy': True,
                'contests': [{'name': 'Bad', 'prizeBreakdown': [{'position': 1, 'percentage': 60}]}],
            })

    @pytest.mark.parametrize('breakdown', [
        [{'percentage': 100}],
        [{'position': None, 'percentage': 100}],
        [{'position': 0, 'percentage': 100}],
        [{'position': 1, 'percentage': 50}, {'position': 1, 'percentage': 50}],
    ])
    def test_breakdown_positions_are_validated(self, admin, tournament, breakdown):
        with pytest.raises(AppError) as excinfo:
            tournament_service.configure_fantasy(admin, tournament, {
                'enableFantasy': True,
                'contests': [{'name': 'Loose', 'prizeBreakdown': breakdown}],
            })
        assert excinfo.value.code == 'VALIDATION_ERROR'
        assert not FantasyContest.objects.filter(tournament=tournament).exists()
