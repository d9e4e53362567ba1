"""
Match service.

Referee scoring: point entry, undo, set and match completion.
"""

import logging
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from apps.authentication.models import User
from apps.core.exceptions import authorization_error, not_found_error, validation_error
from apps.core.permissions import SCORING_ROLES, can_manage_tournament, ensure_can_manage_tournament, is_admin
from apps.fantasy.services import fantasy_service
from apps.referees.services import referee_service
from apps.tournaments.models import PlayerStats, Team, Tournament, TournamentEntry, TournamentStatus
from apps.websocket.services import live_score_service
from .models import Match, MatchPerformance, MatchResult, MatchStatus, PointEvent, SetScore
from .scoring import (
    bonus_points,
    count_sets_won,
    is_set_complete,
    match_winner,
    side_breakdown,
)

logger = logging.getLogger(__name__)

MATCH_INPUT_FIELDS = (
    'round', 'court_number', 'scheduled_time', 'is_doubles', 'player1_id', 'player2_id',
    'team1_id', 'team2_id', 'sets', 'max_score', 'is_golden_point', 'referee_id',
)
PERFORMANCE_FIELDS = ('points', 'aces', 'faults', 'winners', 'errors', 'rallies_won')


class MatchService:

    def get_match(self, match_id) -> Match:
        try:
            return Match.objects.select_related(
                'tournament', 'player1', 'player2', 'team1', 'team2', 'referee'
            ).get(id=match_id)
        except Match.DoesNotExist:
            raise not_found_error('Match')

    def _lock(self, match_id) -> Match:
        try:
            return Match.objects.select_for_update().get(id=match_id)
        except Match.DoesNotExist:
            raise not_found_error('Match')

    def _ensure_can_score(self, user, match: Match) -> None:
        if match.referee_id == user.id:
            return
        if is_admin(user.role) and can_manage_tournament(user, match.tournament):
            return
        raise authorization_error('Only the assigned referee or an admin can score this match')

    def _ensure_in_progress(self, match: Match) -> None:
        if match.status != MatchStatus.IN_PROGRESS:
            raise validation_error('Match is not in progress', details={'status': match.status})

    def list_matches(self, tournament_id=None, status=None):
        matches = Match.objects.select_related('tournament', 'player1', 'player2', 'team1', 'team2')
        if tournament_id:
            matches = matches.filter(tournament_id=tournament_id)
        if status:
            matches = matches.filter(status=status)
        return matches.prefetch_related('set_scores')

    def live_matches(self):
        return self.list_matches(status=MatchStatus.IN_PROGRESS).order_by('start_time', 'id')

    def create_match(self, user, tournament: Tournament, data: dict) -> Match:
        """
        Schedule a match. Referees create matches they will officiate;
        admins may assign any approved referee.
        """
        if user.role not in SCORING_ROLES:
            raise authorization_error('Only referees and admins can create matches')
        if is_admin(user.role):
            ensure_can_manage_tournament(user, tournament)
        elif not referee_service.can_officiate(user, tournament):
            raise authorization_error('You are not approved to referee this tournament')
        if tournament.is_finished:
            raise validation_error('Cannot add matches to a finished tournament')

        fields = {k: v for k, v in data.items() if k in MATCH_INPUT_FIELDS}
        fields.setdefault('referee_id', user.id)
        if fields['referee_id'] != user.id:
            try:
                assigned = User.objects.get(id=fields['referee_id'])
            except (User.DoesNotExist, ValueError):
                raise validation_error('Assigned referee does not exist')
            if not referee_service.can_officiate(assigned, tournament):
                raise validation_error('Assigned referee is not approved for this tournament')

        match = Match(tournament=tournament, **fields)
        match.full_clean()

        if match.is_doubles:
            teams = Team.objects.filter(id__in=[match.team1_id, match.team2_id], tournament=tournament).count()
            if teams != 2:
                raise validation_error('Both teams must belong to this tournament')
        else:
            registered = TournamentEntry.objects.filter(
                tournament=tournament, player_id__in=[match.player1_id, match.player2_id]
            ).count()
            if registered != 2:
                raise validation_error('Both players must be registered in the tournament')

        match.save()
        logger.info(f'Match {match.id} created in tournament {tournament.id} by {user.id}')
        return match

    def start_match(self, user, match: Match) -> Match:
        self._ensure_can_score(user, match)
        if match.status != MatchStatus.SCHEDULED:
            raise validation_error('Only scheduled matches can be started')

        with transaction.atomic():
            match.status = MatchStatus.IN_PROGRESS
            match.start_time = timezone.now()
            match.player1_score = 0
            match.player2_score = 0
            match.current_set = 1
            match.save()

            tournament = match.tournament
            if tournament.status in (TournamentStatus.REGISTRATION_OPEN, TournamentStatus.REGISTRATION_CLOSED):
                tournament.status = TournamentStatus.IN_PROGRESS
                tournament.save(update_fields=['status', 'updated_at'])
                fantasy_service.start_contests(tournament)
                logger.info(f'Tournament {tournament.id} started with match {match.id}')

        live_score_service.broadcast_score(match)
        return match

    def score_point(self, user, match_id, side: int):
        """
        Add one point to a side of the current set.

        Returns:
            (match, set_complete)
        """
        if side not in (1, 2):
            raise validation_error('Side must be 1 or 2')

        with transaction.atomic():
            match = self._lock(match_id)
            self._ensure_can_score(user, match)
            self._ensure_in_progress(match)

            if is_set_complete(match.player1_score, match.player2_score, match.max_score, match.is_golden_point):
                raise validation_error('Set is already complete; complete the set before scoring')

            field = 'player1_score' if side == 1 else 'player2_score'
            setattr(match, field, getattr(match, field) + 1)
            match.save(update_fields=[field, 'updated_at'])
            PointEvent.objects.create(match=match, set_number=match.current_set, side=side, created_by=user)

            set_complete = is_set_complete(
                match.player1_score, match.player2_score, match.max_score, match.is_golden_point
            )

        logger.info(
            f'Match {match.id} set {match.current_set}: point to side {side} '
            f'({match.player1_score}-{match.player2_score})'
        )
        live_score_service.broadcast_score(match)
        return match, set_complete

    def undo_point(self, user, match_id):
        """
        Remove the latest point of the current set.

        Returns:
            (match, side the point is taken from)
        """
        with transaction.atomic():
            match = self._lock(match_id)
            self._ensure_can_score(user, match)
            self._ensure_in_progress(match)

            event = PointEvent.objects.filter(match=match, set_number=match.current_set).order_by('-id').first()
            if event is None:
                raise validation_error('No points to undo')

            field = 'player1_score' if event.side == 1 else 'player2_score'
            setattr(match, field, max(0, getattr(match, field) - 1))
            match.save(update_fields=[field, 'updated_at'])
            side = event.side
            event.delete()

        logger.info(f'Match {match.id}: undid point for side {side}')
        live_score_service.broadcast_score(match)
        return match, side

    def complete_set(self, user, match_id, force: bool = False):
        """
        Record the current set. Completes the match once a side has won
        enough sets, otherwise opens the next set.

        Returns:
            (match, {'setNumber', 'matchCompleted', 'winnerSide'})
        """
        with transaction.atomic():
            match = self._lock(match_id)
            self._ensure_can_score(user, match)
            self._ensure_in_progress(match)

            score1, score2 = match.player1_score, match.player2_score
            if not is_set_complete(score1, score2, match.max_score, match.is_golden_point):
                if not force:
                    raise validation_error(
                        'Set is not complete yet',
                        details={'team1Score': score1, 'team2Score': score2, 'maxScore': match.max_score},
                    )
                if not is_admin(user.role):
                    raise authorization_error('Only admins can force a set to complete')
                if score1 == score2:
                    raise validation_error('A tied set cannot be completed')

            set_number = match.current_set
            SetScore.objects.create(match=match, set_number=set_number, team1_score=score1, team2_score=score2)
            set_scores = [(s.team1_score, s.team2_score) for s in match.set_scores.all()]

            winner = match_winner(set_scores, match.sets)
            if winner:
                self._finish(match, winner, set_scores)
            else:
                match.current_set = set_number + 1
                match.player1_score = 0
                match.player2_score = 0
                match.save(update_fields=['current_set', 'player1_score', 'player2_score', 'updated_at'])

        logger.info(f'Match {match.id} set {set_number} completed {score1}-{score2}')
        live_score_service.broadcast_score(match)
        return match, {'setNumber': set_number, 'matchCompleted': winner is not None, 'winnerSide': winner}

    def complete_match(self, user, match_id) -> Match:
        """
        End a match. An unrecorded current set with points is saved first.
        Admins may close a match early on sets won.
        """
        with transaction.atomic():
            match = self._lock(match_id)
            self._ensure_can_score(user, match)
            self._ensure_in_progress(match)

            set_scores = [(s.team1_score, s.team2_score) for s in match.set_scores.all()]
            score1, score2 = match.player1_score, match.player2_score
            recorded = match.set_scores.filter(set_number=match.current_set).exists()
            if (score1 or score2) and not recorded:
                if score1 == score2:
                    raise validation_error('The current set is tied')
                SetScore.objects.create(
                    match=match, set_number=match.current_set, team1_score=score1, team2_score=score2
                )
                set_scores.append((score1, score2))

            winner = match_winner(set_scores, match.sets)
            if winner is None:
                won1, won2 = count_sets_won(set_scores)
                if won1 == won2 or not is_admin(user.role):
                    raise validation_error(
                        'Match has no winner yet',
                        details={'team1Sets': won1, 'team2Sets': won2},
                    )
                winner = 1 if won1 > won2 else 2

            self._finish(match, winner, set_scores)

        live_score_service.broadcast_score(match)
        return match

    def _finish(self, match: Match, winner: int, set_scores: list) -> None:
        won1, won2 = count_sets_won(set_scores)
        match.status = MatchStatus.COMPLETED
        match.winner_side = winner
        match.end_time = timezone.now()
        match.save()

        MatchResult.objects.create(
            match=match,
            winner_side=winner,
            team1_sets=won1,
            team2_sets=won2,
            final_score=', '.join(f'{a}-{b}' for a, b in set_scores),
            bonus_points=bonus_points(*set_scores[-1]),
        )
        self._update_player_stats(match, winner, set_scores)
        fantasy_service.award_match_points(match)

        tournament_id = match.tournament_id
        transaction.on_commit(lambda: self._queue_leaderboard_refresh(tournament_id))
        logger.info(f'Match {match.id} completed, winner side {winner} ({won1}-{won2})')

    def _queue_leaderboard_refresh(self, tournament_id) -> None:
        from apps.fantasy.tasks import recompute_leaderboards
        recompute_leaderboards.delay(tournament_id)

    def _update_player_stats(self, match: Match, winner: int, set_scores: list) -> None:
        for side in (1, 2):
            own = 0 if side == 1 else 1
            scored = sum(s[own] for s in set_scores)
            conceded = sum(s[1 - own] for s in set_scores)
            won = winner == side
            for player in match.side_players(side):
                stats, _ = PlayerStats.objects.get_or_create(tournament=match.tournament, player=player)
                PlayerStats.objects.filter(id=stats.id).update(
                    matches_played=F('matches_played') + 1,
                    wins=F('wins') + (1 if won else 0),
                    losses=F('losses') + (0 if won else 1),
                    points_scored=F('points_scored') + scored,
                    points_conceded=F('points_conceded') + conceded,
                )

    def cancel_match(self, user, match: Match) -> Match:
        if not is_admin(user.role):
            raise authorization_error('Only admins can cancel matches')
        ensure_can_manage_tournament(user, match.tournament)
        if match.status in (MatchStatus.COMPLETED, MatchStatus.CANCELLED):
            raise validation_error(f'Match is already {match.status.lower()}')

        match.status = MatchStatus.CANCELLED
        match.end_time = timezone.now()
        match.save(update_fields=['status', 'end_time', 'updated_at'])
        logger.info(f'Match {match.id} cancelled by {user.id}')
        live_score_service.broadcast_score(match)
        return match

    def record_performance(self, user, match: Match, player, stats: dict) -> MatchPerformance:
        self._ensure_can_score(user, match)
        if match.status not in (MatchStatus.SCHEDULED, MatchStatus.IN_PROGRESS):
            raise validation_error('Performance can only be recorded before the match is completed')

        participants = {p.id for side in (1, 2) for p in match.side_players(side)}
        if player.id not in participants:
            raise validation_error('Player is not part of this match')

        defaults = {field: stats[field] for field in PERFORMANCE_FIELDS if field in stats}
        if 'other_stats' in stats:
            defaults['other_stats'] = stats['other_stats']

        performance, _ = MatchPerformance.objects.update_or_create(
            match=match, player=player, defaults=defaults
        )
        return performance

    def fantasy_breakdown(self, match: Match) -> dict:
        set_scores = [(s.team1_score, s.team2_score) for s in match.set_scores.all()]
        if match.status == MatchStatus.IN_PROGRESS and (match.player1_score or match.player2_score):
            if not any(s.set_number == match.current_set for s in match.set_scores.all()):
                set_scores.append((match.player1_score, match.player2_score))

        completed = match.status == MatchStatus.COMPLETED
        sides = {}
        for side in (1, 2):
            breakdown = side_breakdown(side, set_scores, completed, match.winner_side, match.round)
            sides[f'side{side}'] = {
                'name': match.side_name(side),
                'players': [{'id': p.id, 'name': p.name} for p in match.side_players(side)],
                **breakdown.to_dict(),
            }

        return {
            'matchId': match.id,
            'round': match.round,
            'status': match.status,
            **sides,
        }


# Create singleton instance
match_service = MatchService()
