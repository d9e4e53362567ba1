"""
Tests for fantasy contests: team selection, points, ranking, MVP and prizes.
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.core import mail
from django.utils import timezone

from apps.core.exceptions import AppError
from apps.fantasy.models import (
    ContestStatus,
    DisbursementStatus,
    FantasyPoints,
    FantasyTeam,
    FantasyTeamPlayer,
    PointsCategory,
    PrizeDisbursement,
    PrizeDistributionRule,
)
from apps.fantasy.services import fantasy_service
from apps.payments.models import PaymentStatus, TransactionType, Wallet
from apps.tournaments.models import TournamentStatus
from tests.factories import (
    BankAccountFactory,
    FantasyContestFactory,
    PaymentFactory,
    TournamentEntryFactory,
    TournamentFactory,
    UserFactory,
)

pytestmark = pytest.mark.django_db


@pytest.fixture
def players(tournament):
    return [TournamentEntryFactory(tournament=tournament).player for _ in range(4)]


@pytest.fixture
def contest(tournament):
    return FantasyContestFactory(tournament=tournament)


def make_team(contest, picks, points=0, user=None):
    """picks: [(player, is_captain, is_vice_captain)]"""
    team = FantasyTeam.objects.create(
        name=f'Team {FantasyTeam.objects.count() + 1}',
        user=user or UserFactory(),
        contest=contest,
        total_points=Decimal(points),
    )
    for player, captain, vice in picks:
        FantasyTeamPlayer.objects.create(team=team, player=player, is_captain=captain, is_vice_captain=vice)
    return team


class TestTeamSelection:

    def test_join_contest(self, auth_client, user, contest, players):
        response = auth_client(user).post(f'/api/fantasy/contests/{contest.id}/teams', {
            'name': 'Kitchen Kings',
            'playerIds': [p.id for p in players[:3]],
            'captainId': players[0].id,
            'viceCaptainId': players[1].id,
        }, format='json')

        assert response.status_code == 201
        team = response.json()['team']
        assert team['rank'] == 1
        captain = next(p for p in team['players'] if p['playerId'] == players[0].id)
        assert captain['isCaptain'] is True
        assert captain['price'] == 5000

        contest.refresh_from_db()
        assert contest.current_entries == 1

    @pytest.mark.parametrize('pick,captain,vice', [
        ([0, 1], 0, 1),        # too few players
        ([0, 1, 2], 0, 0),     # same captain and vice
        ([0, 1, 2], 3, 1),     # captain not in team
        ([0, 0, 1], 0, 1),     # duplicate pick
    ])
    def test_invalid_selection(self, user, contest, players, pick, captain, vice):
        with pytest.raises(AppError) as excinfo:
            fantasy_service.create_team(
                user, contest, 'Bad', [players[i].id for i in pick], players[captain].id, players[vice].id
            )
        assert excinfo.value.status_code == 400

    def test_unregistered_players_listed(self, user, contest, players):
        outsider = TournamentEntryFactory().player
        ids = [players[0].id, players[1].id, outsider.id]

        with pytest.raises(AppError) as excinfo:
            fantasy_service.create_team(user, contest, 'Bad', ids, players[0].id, players[1].id)
        assert excinfo.value.details == {'invalidPlayerIds': [outsider.id]}

    def test_budget_is_enforced(self, user, tournament, players):
        contest = FantasyContestFactory(tournament=tournament, rules={'teamSize': 3, 'walletSize': 12000})
        ids = [p.id for p in players[:3]]

        with pytest.raises(AppError) as excinfo:
            fantasy_service.create_team(user, contest, 'Rich', ids, ids[0], ids[1])
        assert excinfo.value.details == {'budgetUsed': 15000, 'walletSize': 12000}

    def test_paid_contest_requires_payment(self, user, tournament, players):
        contest = FantasyContestFactory(tournament=tournament, entry_fee=Decimal('49.00'))
        ids = [p.id for p in players[:3]]

        with pytest.raises(AppError) as excinfo:
            fantasy_service.create_team(user, contest, 'Mine', ids, ids[0], ids[1])
        assert excinfo.value.status_code == 402
        assert excinfo.value.code == 'PAYMENT_REQUIRED'

        PaymentFactory(user=user, contest=contest, status=PaymentStatus.PAID)
        assert fantasy_service.create_team(user, contest, 'Mine', ids, ids[0], ids[1]).id

    def test_one_team_per_user(self, user, contest, players):
        ids = [p.id for p in players[:3]]
        fantasy_service.create_team(user, contest, 'First', ids, ids[0], ids[1])

        with pytest.raises(AppError) as excinfo:
            fantasy_service.create_team(user, contest, 'Second', ids, ids[0], ids[1])
        assert excinfo.value.code == 'ALREADY_JOINED'

    def test_full_contest(self, tournament, players):
        contest = FantasyContestFactory(tournament=tournament, max_entries=1)
        ids = [p.id for p in players[:3]]
        fantasy_service.create_team(UserFactory(), contest, 'First', ids, ids[0], ids[1])

        with pytest.raises(AppError) as excinfo:
            fantasy_service.create_team(UserFactory(), contest, 'Late', ids, ids[0], ids[1])
        assert excinfo.value.code == 'CONTEST_FULL'

    def test_contest_must_be_open(self, user, tournament, players):
        contest = FantasyContestFactory(tournament=tournament, status=ContestStatus.DRAFT)
        ids = [p.id for p in players[:3]]
        with pytest.raises(AppError):
            fantasy_service.create_team(user, contest, 'Early', ids, ids[0], ids[1])

    def test_no_joining_after_start(self, user, admin):
        tournament = TournamentFactory(organizer=admin, start_date=timezone.now() - timedelta(hours=1))
        contest = FantasyContestFactory(tournament=tournament)
        ids = [TournamentEntryFactory(tournament=tournament).player.id for _ in range(3)]

        with pytest.raises(AppError) as excinfo:
            fantasy_service.create_team(user, contest, 'Late', ids, ids[0], ids[1])
        assert 'started' in excinfo.value.message

    def test_team_changes_respect_rules(self, user, tournament, players):
        contest = FantasyContestFactory(tournament=tournament, rules={
            'teamSize': 3, 'allowTeamChanges': True, 'maxPlayersToChange': 1,
        })
        extra = TournamentEntryFactory(tournament=tournament).player
        ids = [p.id for p in players[:3]]
        team = fantasy_service.create_team(user, contest, 'Mine', ids, ids[0], ids[1])

        swapped = [ids[0], ids[1], players[3].id]
        fantasy_service.update_team(user, team, swapped, ids[1], ids[0])
        assert set(team.selections.values_list('player_id', flat=True)) == set(swapped)

        # Current squad is ids[0], ids[1], players[3]; swapping two exceeds the limit
        with pytest.raises(AppError) as excinfo:
            fantasy_service.update_team(user, team, [ids[2], players[3].id, extra.id], ids[2], extra.id)
        assert excinfo.value.details == {'changed': 2, 'maxPlayersToChange': 1}

    def test_changes_disabled_by_default(self, user, contest, players):
        ids = [p.id for p in players[:3]]
        team = fantasy_service.create_team(user, contest, 'Mine', ids, ids[0], ids[1])
        with pytest.raises(AppError):
            fantasy_service.update_team(user, team, ids, ids[1], ids[0])


class TestPointsAndRanking:

    def test_multipliers_applied_to_teams(self, contest, players):
        star = players[0]
        captain_team = make_team(contest, [(star, True, False)])
        vice_team = make_team(contest, [(star, False, True)])
        plain_team = make_team(contest, [(star, False, False)])

        fantasy_service.add_points_to_teams(contest.tournament, {star.id: Decimal('10')})

        totals = {t.id: t.total_points for t in FantasyTeam.objects.filter(contest=contest)}
        assert totals[captain_team.id] == Decimal('20.00')
        assert totals[vice_team.id] == Decimal('15.00')
        assert totals[plain_team.id] == Decimal('10.00')

    def test_cancelled_contests_do_not_score(self, tournament, players):
        contest = FantasyContestFactory(tournament=tournament, status=ContestStatus.CANCELLED)
        team = make_team(contest, [(players[0], True, False)])

        fantasy_service.add_points_to_teams(tournament, {players[0].id: Decimal('10')})
        team.refresh_from_db()
        assert team.total_points == 0

    def test_tied_teams_share_rank(self, api_client, contest, players):
        make_team(contest, [], points=50)
        make_team(contest, [], points=50)
        make_team(contest, [], points=20)
        fantasy_service.recompute_ranks(contest)

        response = api_client.get(f'/api/fantasy/contests/{contest.id}/leaderboard')
        entries = response.json()['leaderboard']
        assert [e['rank'] for e in entries] == [1, 1, 3]
        assert [e['position'] for e in entries] == [1, 2, 3]
        assert response.json()['pagination']['total'] == 3

    def test_leaderboard_pagination(self, api_client, contest):
        for points in range(5):
            make_team(contest, [], points=points)
        fantasy_service.recompute_ranks(contest)

        response = api_client.get(f'/api/fantasy/contests/{contest.id}/leaderboard', {'page': 2, 'limit': 2})
        entries = response.json()['leaderboard']
        assert [e['position'] for e in entries] == [3, 4]
        assert [e['totalPoints'] for e in entries] == [2.0, 1.0]

    def test_team_detail_shows_earned_points(self, api_client, contest, players):
        team = make_team(contest, [(players[0], True, False), (players[1], False, False)])
        FantasyPoints.objects.create(
            player=players[0], tournament=contest.tournament, points=Decimal('12'),
            category=PointsCategory.PERFORMANCE,
        )

        detail = api_client.get(f'/api/fantasy/teams/{team.id}').json()['team']
        captain = next(p for p in detail['players'] if p['playerId'] == players[0].id)
        assert captain['basePoints'] == 12.0
        assert captain['points'] == 24.0


class TestMvp:

    def test_mvp_rewards_early_teams_once(self, auth_client, admin, tournament, contest, players):
        early = make_team(contest, [(players[0], False, False)])
        late = make_team(contest, [(players[0], False, False)])
        FantasyTeam.objects.filter(id=late.id).update(created_at=tournament.start_date + timedelta(hours=1))
        tournament.status = TournamentStatus.COMPLETED
        tournament.save()

        client = auth_client(admin)
        response = client.post(f'/api/fantasy/tournaments/{tournament.id}/mvp', {'playerId': players[0].id},
                                format='json')
        assert response.status_code == 200
        assert response.json() == {'playerId': players[0].id, 'teamsAwarded': 1, 'contestsUpdated': 1}

        early.refresh_from_db()
        late.refresh_from_db()
        assert early.total_points == Decimal('50.00')
        assert late.total_points == 0

        again = client.post(f'/api/fantasy/tournaments/{tournament.id}/mvp', {'playerId': players[1].id},
                            format='json')
        assert again.status_code == 409

    def test_mvp_waits_for_completion(self, admin, tournament, players):
        with pytest.raises(AppError):
            fantasy_service.award_mvp(admin, tournament, players[0])


class TestPrizeRules:

    def test_contest_rules_override_defaults(self, auth_client, admin, contest):
        client = auth_client(admin)
        assert client.get(f'/api/fantasy/contests/{contest.id}/prize-rules').json()['source'] == 'default'

        response = client.post(f'/api/fantasy/contests/{contest.id}/prize-rules', {
            'rules': [{'rank': 1, 'percentage': 70}, {'rank': 2, 'percentage': 30}],
        }, format='json')
        assert response.status_code == 201
        body = response.json()
        assert body['source'] == 'contest'
        assert [r['percentage'] for r in body['rules']] == [70.0, 30.0]

    def test_tournament_rules_are_the_fallback(self, admin, contest):
        fantasy_service.set_prize_rules(admin, contest.tournament, [{'rank': 1, 'percentage': 100}])
        assert fantasy_service.get_prize_rules(contest)['source'] == 'tournament'

    @pytest.mark.parametrize('rules', [
        [{'rank': 1, 'percentage': 60}],
        [{'rank': 1, 'percentage': 50}, {'rank': 1, 'percentage': 50}],
        [{'rank': 0, 'percentage': 100}],
    ])
    def test_invalid_rules(self, admin, contest, rules):
        with pytest.raises(AppError):
            fantasy_service.set_prize_rules(admin, contest.tournament, rules, contest=contest)
        assert not PrizeDistributionRule.objects.exists()

    def test_listed_rules_are_the_ones_paid_out(self, admin, tournament):
        tournament.status = TournamentStatus.COMPLETED
        tournament.save()
        contest = FantasyContestFactory(
            tournament=tournament,
            status=ContestStatus.ONGOING,
            prize_pool=Decimal('1000.00'),
            prize_breakdown=[{'position': 2, 'percentage': 40}, {'position': 1, 'percentage': 60}],
        )
        PrizeDistributionRule.objects.create(
            tournament=tournament, contest=contest, rank=1, percentage=Decimal('100'), min_players=5
        )
        teams = [make_team(contest, [], points=p) for p in (30, 20)]

        listed = fantasy_service.get_prize_rules(contest, team_count=len(teams))
        assert listed['source'] == 'breakdown'
        assert [(r['rank'], r['percentage']) for r in listed['rules']] == [(1, 60.0), (2, 40.0)]

        paid = {d.team_id: d.amount for d in fantasy_service.distribute_prizes(admin, contest)}
        assert paid == {
            teams[0].id: Decimal('1000.00') * Decimal(str(listed['rules'][0]['percentage'])) / 100,
            teams[1].id: Decimal('1000.00') * Decimal(str(listed['rules'][1]['percentage'])) / 100,
        }


class TestPrizeDistribution:

    @pytest.fixture
    def finished(self, tournament):
        tournament.status = TournamentStatus.COMPLETED
        tournament.save()
        contest = FantasyContestFactory(
            tournament=tournament, status=ContestStatus.ONGOING, prize_pool=Decimal('1000.00')
        )
        PrizeDistributionRule.objects.bulk_create([
            PrizeDistributionRule(tournament=tournament, contest=contest, rank=1, percentage=Decimal('50')),
            PrizeDistributionRule(tournament=tournament, contest=contest, rank=2, percentage=Decimal('30')),
            PrizeDistributionRule(tournament=tournament, contest=contest, rank=3, percentage=Decimal('20')),
        ])
        return contest

    def test_distribution_credits_wallets_and_notifies(self, auth_client, admin, finished,
                                                       django_capture_on_commit_callbacks):
        teams = [make_team(finished, [], points=p) for p in (30, 20, 10)]
        BankAccountFactory(user=teams[0].user)

        with django_capture_on_commit_callbacks(execute=True):
            response = auth_client(admin).post(f'/api/fantasy/contests/{finished.id}/distribute-prizes')

        assert response.status_code == 200
        rows = response.json()['disbursements']
        assert [(r['rank'], r['amount']) for r in rows] == [(1, '500.00'), (2, '300.00'), (3, '200.00')]
        assert rows[0]['processingFee'] == '11.80'
        assert rows[0]['netAmount'] == '488.20'

        finished.refresh_from_db()
        assert finished.is_prizes_distributed
        assert finished.status == ContestStatus.COMPLETED
        assert len(mail.outbox) == 3

        # Winner with a bank account is paid out; the others keep the credit
        paid = PrizeDisbursement.objects.get(team=teams[0])
        assert paid.status == DisbursementStatus.COMPLETED
        assert paid.payout_id.startswith('pout_mock_')
        assert Wallet.objects.get(user=teams[0].user).balance == 0

        waiting = PrizeDisbursement.objects.get(team=teams[1])
        assert waiting.status == DisbursementStatus.PENDING
        assert waiting.failure_reason
        wallet = Wallet.objects.get(user=teams[1].user)
        assert wallet.balance == Decimal('292.92')
        assert wallet.transactions.get().type == TransactionType.CREDIT

    def test_tied_winners_split_first_and_second(self, admin, finished):
        first = make_team(finished, [], points=40)
        second = make_team(finished, [], points=40)
        third = make_team(finished, [], points=10)

        disbursements = fantasy_service.distribute_prizes(admin, finished)
        amounts = {d.team_id: (d.rank, d.amount) for d in disbursements}
        assert amounts[first.id] == (1, Decimal('400.00'))
        assert amounts[second.id] == (1, Decimal('400.00'))
        assert amounts[third.id] == (3, Decimal('200.00'))

    def test_free_contest_settles_without_payouts(self, admin, tournament):
        tournament.status = TournamentStatus.COMPLETED
        tournament.save()
        contest = FantasyContestFactory(
            tournament=tournament,
            status=ContestStatus.ONGOING,
            prize_pool=Decimal('0.00'),
            prize_breakdown=[{'position': 1, 'percentage': 100}],
        )
        make_team(contest, [], points=25)

        assert fantasy_service.distribute_prizes(admin, contest) == []

        contest.refresh_from_db()
        assert contest.is_prizes_distributed
        assert contest.status == ContestStatus.COMPLETED
        assert not PrizeDisbursement.objects.exists()
        assert not Wallet.objects.exists()

    def test_prizes_paid_only_once(self, admin, finished):
        make_team(finished, [], points=10)
        fantasy_service.distribute_prizes(admin, finished)

        with pytest.raises(AppError) as excinfo:
            fantasy_service.distribute_prizes(admin, finished)
        assert excinfo.value.code == 'PRIZES_ALREADY_DISTRIBUTED'

    def test_tournament_must_be_completed(self, admin, contest):
        make_team(contest, [], points=10)
        with pytest.raises(AppError) as excinfo:
            fantasy_service.distribute_prizes(admin, contest)
        assert excinfo.value.status_code == 400

    def test_regular_user_cannot_distribute(self, auth_client, user, finished):
        make_team(finished, [], points=10)
        response = auth_client(user).post(f'/api/fantasy/contests/{finished.id}/distribute-prizes')
        assert response.status_code == 403
