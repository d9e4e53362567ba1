"""
Fantasy service.

Contests, team selection, point propagation, ranking and prizes.
"""

import logging
from collections import defaultdict
from decimal import Decimal
from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import F, Q, Sum, Window
from django.db.models.functions import Rank
from django.utils import timezone

from apps.core.exceptions import (
    AppError,
    authorization_error,
    conflict_error,
    not_found_error,
    validation_error,
)
from apps.core.permissions import ADMIN_ROLES, ensure_can_manage_tournament
from apps.core.utils.pagination import paginate
from apps.matches.models import Match, MatchPerformance, MatchStatus
from apps.payments.models import Payment, PaymentStatus
from apps.payments.services import wallet_service
from apps.tournaments.models import Player, PlayerStats, Tournament, TournamentStatus
from .models import (
    CONTEST_TRANSITIONS,
    ContestStatus,
    DisbursementStatus,
    FantasyContest,
    FantasyPoints,
    FantasyTeam,
    FantasyTeamPlayer,
    PointsCategory,
    PrizeDisbursement,
    PrizeDistributionRule,
)
from .points import (
    DEFAULT_MAX_PLAYERS_TO_CHANGE,
    PerformanceLine,
    PointsConfig,
    breakdown_position,
    calculate_match_points,
    calculate_processing_fee,
    calculate_tournament_position_points,
    generate_player_summary,
    player_price,
    prize_breakdown,
    role_multiplier,
)

logger = logging.getLogger(__name__)

MVP_BONUS_POINTS = Decimal('50')
PERCENT_TOLERANCE = Decimal('0.01')


def _decimal(value) -> Decimal:
    return Decimal(str(value)).quantize(Decimal('0.01'))


class FantasyService:

    # Contests

    def get_contest(self, contest_id) -> FantasyContest:
        try:
            return FantasyContest.objects.select_related('tournament').get(id=contest_id)
        except FantasyContest.DoesNotExist:
            raise not_found_error('Contest')

    def list_contests(self, tournament_id=None, status=None):
        contests = FantasyContest.objects.select_related('tournament')
        if tournament_id:
            contests = contests.filter(tournament_id=tournament_id)
        if status:
            contests = contests.filter(status=status)
        return contests

    def create_contest(self, user, tournament: Tournament, data: dict) -> FantasyContest:
        ensure_can_manage_tournament(user, tournament)
        if tournament.is_finished:
            raise validation_error('Cannot add contests to a finished tournament')

        contest = FantasyContest(tournament=tournament, **data)
        contest.full_clean()
        contest.save()
        logger.info(f'Contest {contest.id} created for tournament {tournament.id}')
        return contest

    def update_contest(self, user, contest: FantasyContest, data: dict) -> FantasyContest:
        ensure_can_manage_tournament(user, contest.tournament)
        if contest.status not in (ContestStatus.DRAFT, ContestStatus.OPEN):
            raise validation_error('Only draft or open contests can be edited')
        if 'max_entries' in data and data['max_entries'] < contest.current_entries:
            raise validation_error('max entries cannot be below the current number of entries')

        for field, value in data.items():
            setattr(contest, field, value)
        contest.full_clean()
        contest.save()
        return contest

    def change_contest_status(self, user, contest: FantasyContest, new_status: str) -> FantasyContest:
        ensure_can_manage_tournament(user, contest.tournament)
        if new_status not in CONTEST_TRANSITIONS.get(contest.status, set()):
            raise validation_error(f'Cannot move contest from {contest.status} to {new_status}')
        contest.status = new_status
        contest.save(update_fields=['status', 'updated_at'])
        return contest

    def start_contests(self, tournament: Tournament) -> int:
        """Lock open contests once play begins."""
        return FantasyContest.objects.filter(
            tournament=tournament, status=ContestStatus.OPEN
        ).update(status=ContestStatus.ONGOING)

    def contest_players(self, contest: FantasyContest) -> list:
        players = Player.objects.filter(entries__tournament=contest.tournament).order_by('name')
        return [
            {'player': player, 'price': player_price(player.skill_level, contest.rules)}
            for player in players
        ]

    # Teams

    def _ensure_before_start(self, tournament: Tournament) -> None:
        started = tournament.status in (
            TournamentStatus.IN_PROGRESS, TournamentStatus.COMPLETED, TournamentStatus.CANCELLED
        ) or tournament.start_date <= timezone.now()
        if started:
            raise validation_error('Tournament has already started')

    def _ensure_joinable(self, contest: FantasyContest) -> None:
        if contest.status != ContestStatus.OPEN:
            raise validation_error('Contest is not open for entries')
        self._ensure_before_start(contest.tournament)

    def validate_selection(self, contest: FantasyContest, player_ids: list, captain_id, vice_captain_id):
        """
        Check a proposed squad against the contest rules.

        Returns:
            (players, budget_used)
        """
        team_size = contest.team_size
        ids = list(player_ids)

        if len(set(ids)) != len(ids):
            raise validation_error('A player can only be picked once')
        if len(ids) != team_size:
            raise validation_error(f'Team must have exactly {team_size} players')
        if captain_id is None or vice_captain_id is None:
            raise validation_error('Captain and vice-captain are required')
        if captain_id == vice_captain_id:
            raise validation_error('Captain and vice-captain must be different players')
        if captain_id not in ids or vice_captain_id not in ids:
            raise validation_error('Captain and vice-captain must be part of the team')

        players = list(Player.objects.filter(id__in=ids, entries__tournament=contest.tournament))
        if len(players) != len(ids):
            missing = sorted(set(ids) - {p.id for p in players})
            raise validation_error(
                'All players must be registered in the tournament',
                details={'invalidPlayerIds': missing},
            )

        budget = sum(player_price(p.skill_level, contest.rules) for p in players)
        if budget > contest.wallet_size:
            raise validation_error(
                'Team exceeds the wallet budget',
                details={'budgetUsed': budget, 'walletSize': contest.wallet_size},
            )
        return players, budget

    def _has_paid(self, user, contest: FantasyContest) -> bool:
        return Payment.objects.filter(user=user, contest=contest, status=PaymentStatus.PAID).exists()

    def create_team(self, user, contest: FantasyContest, name: str, player_ids: list,
                    captain_id, vice_captain_id) -> FantasyTeam:
        """Join a contest with a new team."""
        self._ensure_joinable(contest)

        if FantasyTeam.objects.filter(user=user, contest=contest).exists():
            raise conflict_error('You already have a team in this contest', code='ALREADY_JOINED')

        self.validate_selection(contest, player_ids, captain_id, vice_captain_id)

        if contest.entry_fee > 0 and not self._has_paid(user, contest):
            raise AppError('Entry fee payment is required to join this contest', 402, 'PAYMENT_REQUIRED')

        with transaction.atomic():
            locked = FantasyContest.objects.select_for_update().get(id=contest.id)
            if locked.is_full:
                raise conflict_error('Contest is full', code='CONTEST_FULL')

            try:
                with transaction.atomic():
                    team = FantasyTeam.objects.create(name=name, user=user, contest=locked)
            except IntegrityError:
                raise conflict_error('You already have a team in this contest', code='ALREADY_JOINED')

            FantasyTeamPlayer.objects.bulk_create([
                FantasyTeamPlayer(
                    team=team,
                    player_id=player_id,
                    is_captain=player_id == captain_id,
                    is_vice_captain=player_id == vice_captain_id,
                )
                for player_id in player_ids
            ])
            FantasyContest.objects.filter(id=locked.id).update(current_entries=F('current_entries') + 1)

        self.recompute_ranks(contest)
        team.refresh_from_db(fields=['rank'])
        logger.info(f'User {user.id} joined contest {contest.id} with team {team.id}')
        return team

    def update_team(self, user, team: FantasyTeam, player_ids: list, captain_id, vice_captain_id,
                    name: str = None) -> FantasyTeam:
        if team.user_id != user.id:
            raise authorization_error('You can only edit your own team')

        contest = team.contest
        if not contest.rule('allowTeamChanges', False):
            raise validation_error('Team changes are not allowed in this contest')
        self._ensure_joinable(contest)

        current_ids = set(team.selections.values_list('player_id', flat=True))
        replaced = len(current_ids - set(player_ids))
        max_changes = int(contest.rule('maxPlayersToChange', DEFAULT_MAX_PLAYERS_TO_CHANGE))
        if replaced > max_changes:
            raise validation_error(
                f'You can change at most {max_changes} players',
                details={'changed': replaced, 'maxPlayersToChange': max_changes},
            )

        self.validate_selection(contest, player_ids, captain_id, vice_captain_id)

        with transaction.atomic():
            team.selections.all().delete()
            FantasyTeamPlayer.objects.bulk_create([
                FantasyTeamPlayer(
                    team=team,
                    player_id=player_id,
                    is_captain=player_id == captain_id,
                    is_vice_captain=player_id == vice_captain_id,
                )
                for player_id in player_ids
            ])
            if name:
                team.name = name
                team.save(update_fields=['name', 'updated_at'])

        return team

    def get_team(self, team_id) -> FantasyTeam:
        try:
            return FantasyTeam.objects.select_related('contest__tournament', 'user').get(id=team_id)
        except FantasyTeam.DoesNotExist:
            raise not_found_error('Fantasy team')

    def user_teams(self, user):
        return FantasyTeam.objects.filter(user=user).select_related('contest__tournament')

    def team_detail(self, team: FantasyTeam) -> dict:
        """Team with each pick's price and the points it has contributed."""
        tournament_id = team.contest.tournament_id
        selections = list(team.selections.select_related('player'))
        earned = dict(
            FantasyPoints.objects.filter(
                tournament_id=tournament_id,
                player_id__in=[s.player_id for s in selections],
            ).values('player_id').annotate(total=Sum('points')).values_list('player_id', 'total')
        )

        players = []
        for selection in selections:
            base = earned.get(selection.player_id) or Decimal('0')
            multiplier = role_multiplier(selection.is_captain, selection.is_vice_captain)
            players.append({
                'playerId': selection.player_id,
                'name': selection.player.name,
                'skillLevel': selection.player.skill_level,
                'price': player_price(selection.player.skill_level, team.contest.rules),
                'isCaptain': selection.is_captain,
                'isViceCaptain': selection.is_vice_captain,
                'basePoints': float(base),
                'points': float(_decimal(base * Decimal(str(multiplier)))),
            })

        return {
            'id': team.id,
            'name': team.name,
            'contestId': team.contest_id,
            'userId': str(team.user_id),
            'totalPoints': float(team.total_points),
            'rank': team.rank,
            'players': players,
        }

    # Points

    def points_config(self, tournament: Tournament) -> PointsConfig:
        return PointsConfig.from_overrides((tournament.fantasy_settings or {}).get('customPoints'))

    def award_match_points(self, match: Match) -> dict:
        """
        Score every player of a completed match, write the ledger and push
        the points into fantasy teams.

        Returns:
            {player_id: points}
        """
        tournament = match.tournament
        config = self.points_config(tournament)
        set_scores = [(s.team1_score, s.team2_score) for s in match.set_scores.all()]
        bonus = Decimal(match.result.bonus_points) if hasattr(match, 'result') else Decimal('0')
        performances = {p.player_id: p for p in MatchPerformance.objects.filter(match=match)}

        awarded = {}
        with transaction.atomic():
            for side in (1, 2):
                own = 0 if side == 1 else 1
                won = match.winner_side == side
                line_kwargs = {
                    'won': won,
                    'sets_won': sum(1 for s in set_scores if s[own] > s[1 - own]),
                    'points_won': sum(s[own] for s in set_scores),
                    'points_lost': sum(s[1 - own] for s in set_scores),
                    'match_id': match.id,
                }

                for player in match.side_players(side):
                    performance = performances.get(player.id)
                    line = PerformanceLine(
                        winners=performance.winners if performance else 0,
                        aces=performance.aces if performance else 0,
                        errors=performance.errors if performance else 0,
                        faults=performance.faults if performance else 0,
                        rallies_won=performance.rallies_won if performance else 0,
                        **line_kwargs,
                    )
                    total = _decimal(calculate_match_points(line, config))
                    outcome = _decimal(config.match_win if won else config.match_loss)
                    if won:
                        total += bonus
                        outcome += bonus

                    FantasyPoints.objects.create(
                        player=player,
                        tournament=tournament,
                        match=match,
                        points=outcome,
                        category=PointsCategory.MATCH_WIN if won else PointsCategory.MATCH_PARTICIPATION,
                        description=f'Match {match.id} {"win" if won else "participation"}',
                    )
                    if total != outcome:
                        FantasyPoints.objects.create(
                            player=player,
                            tournament=tournament,
                            match=match,
                            points=total - outcome,
                            category=PointsCategory.PERFORMANCE,
                            description=f'Match {match.id} performance',
                        )

                    PlayerStats.objects.filter(tournament=tournament, player=player).update(
                        fantasy_points=F('fantasy_points') + total
                    )
                    Player.objects.filter(id=player.id).update(total_points=F('total_points') + total)
                    awarded[player.id] = total

            self.add_points_to_teams(tournament, awarded)

        logger.info(f'Awarded fantasy points for match {match.id}: {len(awarded)} players')
        return awarded

    def add_points_to_teams(self, tournament: Tournament, player_points: dict,
                            created_before=None) -> set:
        """
        Credit each fantasy team holding one of the players, applying the
        captain and vice-captain multipliers, then re-rank affected contests.
        """
        if not player_points:
            return set()

        config = self.points_config(tournament)
        selections = FantasyTeamPlayer.objects.filter(
            player_id__in=player_points.keys(),
            team__contest__tournament=tournament,
        ).exclude(team__contest__status=ContestStatus.CANCELLED).select_related('team')
        if created_before is not None:
            selections = selections.filter(team__created_at__lte=created_before)

        increments = defaultdict(Decimal)
        contests = set()
        for selection in selections:
            multiplier = Decimal(str(role_multiplier(selection.is_captain, selection.is_vice_captain, config)))
            increments[selection.team_id] += _decimal(player_points[selection.player_id] * multiplier)
            contests.add(selection.team.contest_id)

        for team_id, amount in increments.items():
            FantasyTeam.objects.filter(id=team_id).update(total_points=F('total_points') + amount)

        for contest_id in contests:
            self.recompute_ranks(contest_id)
        return contests

    def player_summary(self, player: Player, tournament: Tournament = None) -> dict:
        matches = Match.objects.filter(status=MatchStatus.COMPLETED).filter(
            Q(player1=player) | Q(player2=player) | Q(team1__players=player) | Q(team2__players=player)
        ).distinct().prefetch_related('set_scores', 'team1__players')
        if tournament is not None:
            matches = matches.filter(tournament=tournament)

        performances = {p.match_id: p for p in MatchPerformance.objects.filter(player=player)}
        lines = []
        for match in matches.order_by('end_time', 'id'):
            if match.is_doubles:
                side = 1 if any(p.id == player.id for p in match.team1.players.all()) else 2
            else:
                side = 1 if match.player1_id == player.id else 2
            own = 0 if side == 1 else 1
            set_scores = [(s.team1_score, s.team2_score) for s in match.set_scores.all()]
            performance = performances.get(match.id)
            lines.append(PerformanceLine(
                won=match.winner_side == side,
                sets_won=sum(1 for s in set_scores if s[own] > s[1 - own]),
                points_won=sum(s[own] for s in set_scores),
                points_lost=sum(s[1 - own] for s in set_scores),
                winners=performance.winners if performance else 0,
                aces=performance.aces if performance else 0,
                errors=performance.errors if performance else 0,
                faults=performance.faults if performance else 0,
                rallies_won=performance.rallies_won if performance else 0,
                match_id=match.id,
            ))

        config = self.points_config(tournament) if tournament is not None else PointsConfig()
        return generate_player_summary(lines, config)

    # Ranking

    def recompute_ranks(self, contest) -> None:
        """
        Store RANK() over total_points for every team of the contest.
        Teams with equal points share a rank and the next rank is skipped.
        """
        contest_id = contest.id if isinstance(contest, FantasyContest) else contest
        ranked = FantasyTeam.objects.filter(contest_id=contest_id).annotate(
            computed_rank=Window(expression=Rank(), order_by=F('total_points').desc())
        )
        changed = []
        for team in ranked:
            if team.rank != team.computed_rank:
                team.rank = team.computed_rank
                changed.append(team)
        if changed:
            FantasyTeam.objects.bulk_update(changed, ['rank'])

    def leaderboard(self, contest: FantasyContest, page: int = 1, limit: int = 20):
        teams = FantasyTeam.objects.filter(contest=contest).select_related('user').order_by(
            '-total_points', 'created_at', 'id'
        )
        items, meta = paginate(teams, page, limit)
        entries = [
            {
                'rank': team.rank,
                'position': meta['offset'] + index + 1,
                'teamId': team.id,
                'teamName': team.name,
                'userId': str(team.user_id),
                'userName': team.user.name or team.user.email,
                'totalPoints': float(team.total_points),
            }
            for index, team in enumerate(items)
        ]
        return entries, meta

    def recompute_tournament_standings(self, tournament: Tournament) -> None:
        """
        Final settlement after a tournament completes: position bonuses from
        the player standings, fresh ranks and closed contests.
        """
        config = self.points_config(tournament)
        standings = (
            PlayerStats.objects.filter(tournament=tournament)
            .annotate(diff=F('points_scored') - F('points_conceded'))
            .order_by('-wins', '-diff', 'player_id')
        )

        bonuses = {}
        for position, stats in enumerate(standings, start=1):
            points = calculate_tournament_position_points(position, config)
            if not points:
                continue
            amount = _decimal(points)
            FantasyPoints.objects.create(
                player_id=stats.player_id,
                tournament=tournament,
                points=amount,
                category=PointsCategory.POSITION_BONUS,
                description=f'Finished position {position}',
            )
            PlayerStats.objects.filter(id=stats.id).update(fantasy_points=F('fantasy_points') + amount)
            bonuses[stats.player_id] = amount

        self.add_points_to_teams(tournament, bonuses)

        contests = FantasyContest.objects.filter(tournament=tournament).exclude(status=ContestStatus.CANCELLED)
        for contest in contests:
            self.recompute_ranks(contest)
        contests.update(status=ContestStatus.COMPLETED)

    def award_mvp(self, user, tournament: Tournament, player: Player) -> dict:
        """
        Give the MVP bonus to every team that picked the player before the
        tournament started.
        """
        ensure_can_manage_tournament(user, tournament)
        if tournament.status != TournamentStatus.COMPLETED:
            raise validation_error('MVP can only be awarded after the tournament is completed')
        if not player.entries.filter(tournament=tournament).exists():
            raise validation_error('Player did not take part in this tournament')
        if FantasyPoints.objects.filter(tournament=tournament, category=PointsCategory.MVP_BONUS).exists():
            raise conflict_error('MVP has already been awarded for this tournament')

        with transaction.atomic():
            FantasyPoints.objects.create(
                player=player,
                tournament=tournament,
                points=MVP_BONUS_POINTS,
                category=PointsCategory.MVP_BONUS,
                description='Tournament MVP',
            )
            contests = self.add_points_to_teams(
                tournament, {player.id: MVP_BONUS_POINTS}, created_before=tournament.start_date
            )

        teams_awarded = FantasyTeamPlayer.objects.filter(
            player=player,
            team__contest__tournament=tournament,
            team__created_at__lte=tournament.start_date,
        ).count()

        logger.info(f'MVP {player.id} awarded for tournament {tournament.id} to {teams_awarded} teams')
        return {'playerId': player.id, 'teamsAwarded': teams_awarded, 'contestsUpdated': len(contests)}

    # Prizes

    def _prize_table(self, contest: FantasyContest, team_count: int) -> tuple:
        """
        Resolve the payout table for a contest of team_count entries.

        Contest rules win over tournament-wide rules, which win over the
        contest's own prize breakdown. The default tiered breakdown is the
        last resort. Rules only apply once min_players is reached.

        Returns:
            (source, [{'rank', 'percentage', 'minPlayers'}])
        """
        for source, scope in (
            ('contest', PrizeDistributionRule.objects.filter(contest=contest)),
            ('tournament', PrizeDistributionRule.objects.filter(
                tournament=contest.tournament, contest__isnull=True
            )),
        ):
            applicable = scope.filter(min_players__lte=team_count).order_by('rank')
            if applicable.exists():
                return source, [
                    {'rank': r.rank, 'percentage': Decimal(str(r.percentage)), 'minPlayers': r.min_players}
                    for r in applicable
                ]

        if contest.prize_breakdown:
            rows = sorted(contest.prize_breakdown, key=breakdown_position)
            return 'breakdown', [
                {'rank': breakdown_position(row), 'percentage': Decimal(str(row['percentage'])), 'minPlayers': 1}
                for row in rows
            ]

        # percentages only, the pool size does not change the split
        return 'default', [
            {'rank': row['rank'], 'percentage': Decimal(str(row['percentage'])), 'minPlayers': 1}
            for row in prize_breakdown(100, team_count)
        ]

    def get_prize_rules(self, contest: FantasyContest, team_count: int = None) -> dict:
        if team_count is None:
            team_count = max(contest.current_entries, 1)
        source, rows = self._prize_table(contest, team_count)
        return {
            'source': source,
            'teamCount': team_count,
            'rules': [{**row, 'percentage': float(row['percentage'])} for row in rows],
        }

    def set_prize_rules(self, user, tournament: Tournament, rules: list, contest: FantasyContest = None) -> list:
        """Replace the rule set for a contest (or tournament-wide when contest is None)."""
        ensure_can_manage_tournament(user, tournament)
        if contest is not None and contest.is_prizes_distributed:
            raise validation_error('Prizes have already been distributed')

        if not rules:
            raise validation_error('At least one prize rule is required')

        ranks = [int(r['rank']) for r in rules]
        if any(rank < 1 for rank in ranks):
            raise validation_error('Ranks must start at 1')
        if len(set(ranks)) != len(ranks):
            raise validation_error('Each rank can only appear once')

        total = sum(Decimal(str(r['percentage'])) for r in rules)
        if abs(total - Decimal('100')) > PERCENT_TOLERANCE:
            raise validation_error(
                'Prize percentages must add up to 100',
                details={'total': str(total)},
            )
        if any(Decimal(str(r['percentage'])) <= 0 for r in rules):
            raise validation_error('Percentages must be positive')

        with transaction.atomic():
            scope = PrizeDistributionRule.objects.filter(tournament=tournament)
            scope = scope.filter(contest=contest) if contest is not None else scope.filter(contest__isnull=True)
            scope.delete()
            created = PrizeDistributionRule.objects.bulk_create([
                PrizeDistributionRule(
                    tournament=tournament,
                    contest=contest,
                    rank=int(r['rank']),
                    percentage=Decimal(str(r['percentage'])),
                    min_players=int(r.get('minPlayers', 1)),
                )
                for r in rules
            ])
        return created

    def _payout_percentages(self, contest: FantasyContest, team_count: int) -> dict:
        """{position: percentage} for this contest size"""
        _, rows = self._prize_table(contest, team_count)
        return {row['rank']: row['percentage'] for row in rows}

    def plan_payouts(self, pool: Decimal, ranked_teams: list, percentages: dict) -> list:
        """
        Teams tied on a rank share the combined prizes of the positions they
        occupy. ranked_teams must be ordered by rank.

        Returns:
            [(team, rank, amount)]
        """
        groups = defaultdict(list)
        for team in ranked_teams:
            groups[team.rank].append(team)

        plan = []
        for rank in sorted(groups):
            teams = groups[rank]
            positions = range(rank, rank + len(teams))
            share = sum((percentages.get(p, Decimal('0')) for p in positions), Decimal('0'))
            if share <= 0:
                continue
            amount = _decimal(pool * share / 100 / len(teams))
            if amount <= 0:
                continue
            plan.extend((team, rank, amount) for team in teams)
        return plan

    def distribute_prizes(self, user, contest: FantasyContest) -> list:
        tournament = contest.tournament
        if tournament.status != TournamentStatus.COMPLETED:
            raise validation_error('Prizes can only be distributed after the tournament is completed')
        if user.role not in ADMIN_ROLES:
            raise authorization_error()
        ensure_can_manage_tournament(user, tournament)

        fee_percent = settings.PRIZE_PROCESSING_FEE_PERCENT

        with transaction.atomic():
            locked = FantasyContest.objects.select_for_update().get(id=contest.id)
            if locked.is_prizes_distributed:
                raise conflict_error('Prizes have already been distributed', code='PRIZES_ALREADY_DISTRIBUTED')

            self.recompute_ranks(locked)
            teams = list(FantasyTeam.objects.filter(contest=locked).select_related('user').order_by('rank', 'id'))
            if not teams:
                raise validation_error('No teams to distribute prizes to')

            percentages = self._payout_percentages(locked, len(teams))
            disbursements = []
            for team, rank, amount in self.plan_payouts(locked.prize_pool, teams, percentages):
                fee = calculate_processing_fee(amount, fee_percent)
                disbursement = PrizeDisbursement.objects.create(
                    contest=locked,
                    team=team,
                    user=team.user,
                    rank=rank,
                    amount=amount,
                    processing_fee=fee,
                    net_amount=amount - fee,
                    status=DisbursementStatus.PENDING,
                )
                wallet_service.credit(
                    team.user,
                    disbursement.net_amount,
                    reason=f'Prize for rank {rank} in {locked.name}',
                    reference=f'disbursement:{disbursement.id}',
                )
                disbursements.append(disbursement)

            locked.is_prizes_distributed = True
            locked.status = ContestStatus.COMPLETED
            locked.save(update_fields=['is_prizes_distributed', 'status', 'updated_at'])

            ids = [d.id for d in disbursements]
            transaction.on_commit(lambda: self._queue_prize_followups(ids))

        logger.info(f'Distributed {len(disbursements)} prizes for contest {contest.id}')
        return disbursements

    def _queue_prize_followups(self, disbursement_ids: list) -> None:
        from apps.notifications.tasks import send_winner_notification
        from apps.payments.tasks import process_prize_payout

        for disbursement_id in disbursement_ids:
            send_winner_notification.delay(disbursement_id)
            process_prize_payout.delay(disbursement_id)

    def live_contest(self, contest: FantasyContest) -> dict:
        entries, _ = self.leaderboard(contest, 1, 10)
        live = Match.objects.filter(
            tournament=contest.tournament, status=MatchStatus.IN_PROGRESS
        ).order_by('start_time')
        return {
            'contest': contest,
            'leaderboard': entries,
            'liveMatches': live,
        }


# Create singleton instance
fantasy_service = FantasyService()
