"""
Tests for live scoring: match creation, points, undo, sets and completion.
"""

from decimal import Decimal

import pytest

from apps.core.exceptions import AppError
from apps.fantasy.models import ContestStatus, FantasyPoints, PointsCategory
from apps.matches import services as match_services
from apps.matches.models import MatchResult, MatchStatus, PointEvent
from apps.matches.services import match_service
from apps.referees.models import JoinRequestStatus
from apps.tournaments.models import PlayerStats, TournamentStatus
from apps.websocket.services import LiveScoreService, match_group
from tests.factories import (
    FantasyContestFactory,
    JoinRequestFactory,
    MatchFactory,
    PlayerFactory,
    RefereeFactory,
    TournamentEntryFactory,
)

pytestmark = pytest.mark.django_db


class RecordingLayer:
    """Channel layer stand-in that keeps every group_send."""

    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    async def group_send(self, group, message):
        if self.fail:
            raise ConnectionError('redis down')
        self.sent.append((group, message))


@pytest.fixture
def layer(monkeypatch):
    recording = RecordingLayer()
    monkeypatch.setattr(match_services, 'live_score_service', LiveScoreService(channel_layer=recording))
    return recording


def score(user, match, side, times=1):
    for _ in range(times):
        match, set_complete = match_service.score_point(user, match.id, side)
    return match, set_complete


@pytest.fixture
def live_match(admin, tournament, layer):
    match = MatchFactory(tournament=tournament, sets=3, max_score=11)
    return match_service.start_match(admin, match)


class TestCreateMatch:

    def test_admin_schedules_match(self, auth_client, admin, tournament):
        first = TournamentEntryFactory(tournament=tournament).player
        second = TournamentEntryFactory(tournament=tournament).player

        response = auth_client(admin).post(f'/api/tournaments/{tournament.id}/matches', {
            'player1Id': first.id,
            'player2Id': second.id,
            'sets': 3,
            'round': 'Quarter Final',
        }, format='json')

        assert response.status_code == 201
        body = response.json()['match']
        assert body['status'] == MatchStatus.SCHEDULED
        assert body['refereeId'] == str(admin.id)
        assert body['side1']['name'] == first.name

    def test_even_number_of_sets_rejected(self, auth_client, admin, tournament):
        first = TournamentEntryFactory(tournament=tournament).player
        second = TournamentEntryFactory(tournament=tournament).player

        response = auth_client(admin).post(f'/api/tournaments/{tournament.id}/matches', {
            'player1Id': first.id,
            'player2Id': second.id,
            'sets': 2,
        }, format='json')
        assert response.status_code == 400

    def test_players_must_be_registered(self, admin, tournament):
        registered = TournamentEntryFactory(tournament=tournament).player
        with pytest.raises(AppError) as excinfo:
            match_service.create_match(admin, tournament, {
                'player1_id': registered.id,
                'player2_id': PlayerFactory().id,
            })
        assert excinfo.value.status_code == 400

    def test_referee_needs_approval(self, tournament):
        referee = RefereeFactory()
        first = TournamentEntryFactory(tournament=tournament).player
        second = TournamentEntryFactory(tournament=tournament).player
        fields = {'player1_id': first.id, 'player2_id': second.id}

        with pytest.raises(AppError) as excinfo:
            match_service.create_match(referee.user, tournament, fields)
        assert excinfo.value.status_code == 403

        JoinRequestFactory(tournament=tournament, referee=referee, status=JoinRequestStatus.APPROVED)
        match = match_service.create_match(referee.user, tournament, fields)
        assert match.referee_id == referee.user.id

    def test_regular_user_cannot_create(self, auth_client, user, tournament):
        response = auth_client(user).post(f'/api/tournaments/{tournament.id}/matches', {}, format='json')
        assert response.status_code == 403


class TestStartMatch:

    def test_start_moves_tournament_and_contests(self, admin, tournament, layer):
        contest = FantasyContestFactory(tournament=tournament)
        match = match_service.start_match(admin, MatchFactory(tournament=tournament))

        assert match.status == MatchStatus.IN_PROGRESS
        tournament.refresh_from_db()
        contest.refresh_from_db()
        assert tournament.status == TournamentStatus.IN_PROGRESS
        assert contest.status == ContestStatus.ONGOING
        assert layer.sent[0][0] == match_group(match.id)

    def test_cannot_start_twice(self, admin, live_match):
        with pytest.raises(AppError):
            match_service.start_match(admin, live_match)

    def test_stranger_cannot_start(self, user, tournament):
        with pytest.raises(AppError) as excinfo:
            match_service.start_match(user, MatchFactory(tournament=tournament))
        assert excinfo.value.status_code == 403


class TestScoring:

    def test_point_is_recorded_and_broadcast(self, auth_client, admin, live_match, layer):
        response = auth_client(admin).post(f'/api/matches/{live_match.id}/score', {'side': 1}, format='json')

        assert response.status_code == 200
        body = response.json()
        assert body['match']['side1']['score'] == 1
        assert body['setComplete'] is False
        assert PointEvent.objects.filter(match=live_match, side=1).count() == 1

        group, message = layer.sent[-1]
        assert group == f'match_{live_match.id}'
        assert message['type'] == 'score_update'
        assert message['data']['side1']['score'] == 1

    def test_invalid_side(self, auth_client, admin, live_match):
        response = auth_client(admin).post(f'/api/matches/{live_match.id}/score', {'side': 3}, format='json')
        assert response.status_code == 400

    def test_scoring_requires_live_match(self, admin, tournament, layer):
        match = MatchFactory(tournament=tournament)
        with pytest.raises(AppError) as excinfo:
            match_service.score_point(admin, match.id, 1)
        assert excinfo.value.details == {'status': MatchStatus.SCHEDULED}

    def test_deuce_needs_two_point_lead(self, admin, live_match):
        score(admin, live_match, 1, 10)
        match, set_complete = score(admin, live_match, 2, 10)
        match, set_complete = score(admin, match, 1)
        assert (match.player1_score, match.player2_score) == (11, 10)
        assert not set_complete

        match, set_complete = score(admin, match, 1)
        assert set_complete

    def test_golden_point_ends_set_at_max_score(self, admin, tournament, layer):
        match = MatchFactory(tournament=tournament, is_golden_point=True)
        match_service.start_match(admin, match)
        score(admin, match, 1, 10)
        score(admin, match, 2, 10)

        _, set_complete = score(admin, match, 2)
        assert set_complete

    def test_no_scoring_after_set_is_won(self, admin, live_match):
        score(admin, live_match, 1, 11)
        with pytest.raises(AppError):
            match_service.score_point(admin, live_match.id, 2)

    def test_undo_removes_latest_point(self, auth_client, admin, live_match):
        score(admin, live_match, 1, 2)
        score(admin, live_match, 2)

        response = auth_client(admin).post(f'/api/matches/{live_match.id}/undo')
        assert response.status_code == 200
        body = response.json()
        assert body['undoneSide'] == 2
        assert (body['match']['side1']['score'], body['match']['side2']['score']) == (2, 0)

    def test_undo_with_no_points(self, admin, live_match):
        with pytest.raises(AppError):
            match_service.undo_point(admin, live_match.id)

    def test_broadcast_failure_does_not_break_scoring(self, admin, tournament, monkeypatch):
        monkeypatch.setattr(
            match_services, 'live_score_service', LiveScoreService(channel_layer=RecordingLayer(fail=True))
        )
        match = match_service.start_match(admin, MatchFactory(tournament=tournament))

        match, _ = match_service.score_point(admin, match.id, 1)
        assert match.player1_score == 1


class TestSetsAndCompletion:

    def test_best_of_three(self, auth_client, admin, live_match):
        client = auth_client(admin)

        score(admin, live_match, 1, 11)
        first = client.post(f'/api/matches/{live_match.id}/complete-set', {}, format='json').json()
        assert first['setNumber'] == 1
        assert first['matchCompleted'] is False
        assert first['match']['currentSet'] == 2
        assert first['match']['side1']['score'] == 0

        score(admin, live_match, 2, 3)
        score(admin, live_match, 1, 11)
        second = client.post(f'/api/matches/{live_match.id}/complete-set', {}, format='json').json()
        assert second['matchCompleted'] is True
        assert second['winnerSide'] == 1
        assert second['match']['status'] == MatchStatus.COMPLETED

        result = MatchResult.objects.get(match=live_match)
        assert result.final_score == '11-0, 11-3'
        assert (result.team1_sets, result.team2_sets) == (2, 0)
        assert result.bonus_points == 0

    def test_unfinished_set_cannot_be_completed(self, admin, live_match):
        score(admin, live_match, 1, 5)
        with pytest.raises(AppError) as excinfo:
            match_service.complete_set(admin, live_match.id)
        assert excinfo.value.details['team1Score'] == 5

    def test_admin_can_force_set(self, admin, live_match):
        score(admin, live_match, 1, 5)
        match, outcome = match_service.complete_set(admin, live_match.id, force=True)
        assert outcome['setNumber'] == 1
        assert match.current_set == 2

    def test_referee_cannot_force_set(self, tournament, layer):
        referee = RefereeFactory()
        JoinRequestFactory(tournament=tournament, referee=referee, status=JoinRequestStatus.APPROVED)
        match = match_service.start_match(referee.user, MatchFactory(tournament=tournament, referee=referee.user))
        score(referee.user, match, 1, 5)

        with pytest.raises(AppError) as excinfo:
            match_service.complete_set(referee.user, match.id, force=True)
        assert excinfo.value.status_code == 403

    def test_completion_updates_stats_and_fantasy_points(self, admin, tournament, layer):
        match = match_service.start_match(admin, MatchFactory(tournament=tournament, sets=1))
        score(admin, match, 2, 4)
        score(admin, match, 1, 11)
        match_service.complete_set(admin, match.id)

        winner_stats = PlayerStats.objects.get(tournament=tournament, player=match.player1)
        loser_stats = PlayerStats.objects.get(tournament=tournament, player=match.player2)
        assert (winner_stats.matches_played, winner_stats.wins, winner_stats.points_scored) == (1, 1, 11)
        assert (loser_stats.losses, loser_stats.points_conceded) == (1, 11)
        assert winner_stats.fantasy_points > loser_stats.fantasy_points

        assert FantasyPoints.objects.filter(
            player=match.player1, match=match, category=PointsCategory.MATCH_WIN
        ).exists()
        assert FantasyPoints.objects.filter(
            player=match.player2, match=match, category=PointsCategory.MATCH_PARTICIPATION
        ).exists()

    def test_fractional_points_reach_player_totals(self, admin, tournament, layer):
        match = match_service.start_match(admin, MatchFactory(tournament=tournament, sets=1))
        score(admin, match, 2, 4)
        score(admin, match, 1, 11)
        match_service.complete_set(admin, match.id)

        # 2 for playing, 4 points won at 0.5, 11 lost at -0.2
        loser = match.player2
        loser.refresh_from_db()
        assert loser.total_points == Decimal('1.80')

        winner = match.player1
        winner.refresh_from_db()
        assert winner.total_points == PlayerStats.objects.get(tournament=tournament, player=winner).fantasy_points

    def test_completion_queues_leaderboard_refresh(self, admin, tournament, layer,
                                                   django_capture_on_commit_callbacks):
        match = match_service.start_match(admin, MatchFactory(tournament=tournament, sets=1))
        score(admin, match, 1, 11)

        with django_capture_on_commit_callbacks(execute=False) as callbacks:
            match_service.complete_set(admin, match.id)
        assert len(callbacks) == 1

    def test_admin_closes_match_early_on_sets(self, admin, live_match):
        score(admin, live_match, 1, 11)
        match_service.complete_set(admin, live_match.id)
        score(admin, live_match, 1, 3)

        match = match_service.complete_match(admin, live_match.id)
        assert match.status == MatchStatus.COMPLETED
        assert match.winner_side == 1
        assert match.set_scores.count() == 2

    def test_referee_cannot_close_undecided_match(self, tournament, layer):
        referee = RefereeFactory()
        JoinRequestFactory(tournament=tournament, referee=referee, status=JoinRequestStatus.APPROVED)
        match = match_service.start_match(
            referee.user, MatchFactory(tournament=tournament, referee=referee.user, sets=3)
        )
        score(referee.user, match, 1, 11)
        match_service.complete_set(referee.user, match.id)

        with pytest.raises(AppError) as excinfo:
            match_service.complete_match(referee.user, match.id)
        assert excinfo.value.details == {'team1Sets': 1, 'team2Sets': 0}

    def test_cancel_is_admin_only(self, auth_client, admin, tournament):
        referee = RefereeFactory()
        match = MatchFactory(tournament=tournament, referee=referee.user)

        assert auth_client(referee.user).post(f'/api/matches/{match.id}/cancel').status_code == 403

        response = auth_client(admin).post(f'/api/matches/{match.id}/cancel')
        assert response.status_code == 200
        assert response.json()['match']['status'] == MatchStatus.CANCELLED


class TestPerformanceAndBreakdown:

    def test_record_performance(self, auth_client, admin, live_match):
        response = auth_client(admin).post(f'/api/matches/{live_match.id}/performance', {
            'playerId': live_match.player1_id,
            'aces': 3,
            'ralliesWon': 7,
        }, format='json')

        assert response.status_code == 200
        performance = response.json()['performance']
        assert (performance['aces'], performance['ralliesWon']) == (3, 7)

    def test_performance_for_outsider_rejected(self, admin, live_match):
        with pytest.raises(AppError):
            match_service.record_performance(admin, live_match, PlayerFactory(), {'aces': 1})

    def test_fantasy_breakdown_after_completion(self, api_client, admin, tournament, layer):
        match = match_service.start_match(admin, MatchFactory(tournament=tournament, sets=1, round='Final'))
        score(admin, match, 2, 9)
        score(admin, match, 1, 11)
        match_service.complete_set(admin, match.id)

        response = api_client.get(f'/api/matches/{match.id}/fantasy-points')
        body = response.json()
        assert body['status'] == MatchStatus.COMPLETED
        assert body['side1']['bonuses']['winningMatch'] > 0
        assert body['side2']['bonuses']['winningMatch'] == 0
        assert body['side1']['multiplier'] > 1

    def test_live_matches_listing(self, api_client, live_match):
        response = api_client.get('/api/matches/live')
        assert [m['id'] for m in response.json()['matches']] == [live_match.id]
