"""
Tournament service.

Tournament lifecycle, player registration, teams, standings and fantasy
configuration.
"""

import logging
from decimal import Decimal
from django.db import IntegrityError, transaction
from django.db.models import F

from apps.core.exceptions import (
    AppError,
    authorization_error,
    conflict_error,
    not_found_error,
    validation_error,
)
from apps.core.permissions import ADMIN_ROLES, Role, ensure_can_manage_tournament
from apps.fantasy.models import ContestStatus, FantasyContest
from apps.fantasy.services import fantasy_service
from apps.matches.models import Match, MatchStatus
from .models import (
    Player,
    PlayerStats,
    Team,
    Tournament,
    TournamentEntry,
    TournamentStatus,
)

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    'name', 'description', 'location', 'type', 'start_date', 'end_date',
    'registration_open_date', 'registration_close_date', 'max_participants',
    'entry_fee', 'prize_money',
)


class TournamentService:

    def get_tournament(self, tournament_id) -> Tournament:
        try:
            return Tournament.objects.select_related('organizer').get(id=tournament_id)
        except Tournament.DoesNotExist:
            raise not_found_error('Tournament')

    def create_tournament(self, user, data: dict) -> Tournament:
        if user.role not in ADMIN_ROLES:
            raise authorization_error('Only tournament admins can create tournaments')

        tournament = Tournament(organizer=user, **{k: v for k, v in data.items() if k in EDITABLE_FIELDS})
        tournament.full_clean()
        tournament.save()

        logger.info(f'Tournament {tournament.id} created by {user.id}')
        return tournament

    def update_tournament(self, user, tournament: Tournament, data: dict) -> Tournament:
        ensure_can_manage_tournament(user, tournament)
        if tournament.is_finished:
            raise validation_error('Finished tournaments cannot be edited')

        for field, value in data.items():
            if field in EDITABLE_FIELDS:
                setattr(tournament, field, value)
        tournament.full_clean()
        tournament.save()
        return tournament

    def delete_tournament(self, user, tournament: Tournament) -> None:
        ensure_can_manage_tournament(user, tournament)
        if tournament.status != TournamentStatus.DRAFT:
            raise validation_error('Only draft tournaments can be deleted')
        tournament.delete()

    def change_status(self, user, tournament: Tournament, new_status: str) -> Tournament:
        """Move the tournament along its lifecycle."""
        if new_status == TournamentStatus.COMPLETED:
            return self.complete_tournament(user, tournament)

        ensure_can_manage_tournament(user, tournament)
        if not tournament.can_transition_to(new_status):
            raise validation_error(
                f'Cannot move tournament from {tournament.status} to {new_status}',
                details={'from': tournament.status, 'to': new_status},
            )

        tournament.status = new_status
        tournament.save(update_fields=['status', 'updated_at'])

        if new_status == TournamentStatus.CANCELLED:
            FantasyContest.objects.filter(tournament=tournament).exclude(
                status=ContestStatus.COMPLETED
            ).update(status=ContestStatus.CANCELLED)
        elif new_status == TournamentStatus.IN_PROGRESS:
            fantasy_service.start_contests(tournament)

        logger.info(f'Tournament {tournament.id} moved to {new_status}')
        return tournament

    def complete_tournament(self, user, tournament: Tournament) -> Tournament:
        """
        Close a tournament once every match is finished, then settle fantasy
        standings for all its contests.
        """
        ensure_can_manage_tournament(user, tournament)

        if tournament.status == TournamentStatus.COMPLETED:
            raise validation_error('Tournament is already completed')
        if tournament.status == TournamentStatus.CANCELLED:
            raise validation_error('Cancelled tournaments cannot be completed')

        pending = Match.objects.filter(
            tournament=tournament,
            status__in=[MatchStatus.SCHEDULED, MatchStatus.IN_PROGRESS],
        ).count()
        if pending:
            raise validation_error(
                f'Cannot complete tournament: {pending} match(es) are still pending',
                details={'pendingMatches': pending},
            )

        with transaction.atomic():
            tournament.status = TournamentStatus.COMPLETED
            tournament.save(update_fields=['status', 'updated_at'])
            fantasy_service.recompute_tournament_standings(tournament)

        logger.info(f'Tournament {tournament.id} completed by {user.id}')
        return tournament

    # Players

    def create_player(self, user, data: dict) -> Player:
        if user.role not in ADMIN_ROLES:
            raise authorization_error('Only tournament admins can create players')
        player = Player(**data)
        player.full_clean()
        player.save()
        return player

    def update_player(self, user, player: Player, data: dict) -> Player:
        if user.role not in ADMIN_ROLES:
            raise authorization_error('Only tournament admins can edit players')
        for field, value in data.items():
            setattr(player, field, value)
        player.full_clean()
        player.save()
        return player

    def get_player(self, player_id) -> Player:
        try:
            return Player.objects.get(id=player_id)
        except Player.DoesNotExist:
            raise not_found_error('Player')

    def register_player(self, user, tournament: Tournament, player: Player, seed=None) -> TournamentEntry:
        """
        Register a player for a tournament. Organizers may register anyone;
        a PLAYER account may register its own profile.
        """
        is_self = user.role == Role.PLAYER and player.user_id == user.id
        if not is_self:
            ensure_can_manage_tournament(user, tournament)

        if tournament.status not in (TournamentStatus.DRAFT, TournamentStatus.REGISTRATION_OPEN):
            raise validation_error('Registration is closed for this tournament')
        if is_self and tournament.status != TournamentStatus.REGISTRATION_OPEN:
            raise validation_error('Registration is not open yet')

        with transaction.atomic():
            # Lock the tournament row so concurrent registrations respect capacity
            locked = Tournament.objects.select_for_update().get(id=tournament.id)
            if locked.entries.count() >= locked.max_participants:
                raise AppError('Tournament is full', 409, 'TOURNAMENT_FULL')

            try:
                with transaction.atomic():
                    entry = TournamentEntry.objects.create(
                        tournament=locked,
                        player=player,
                        seed=seed,
                        payment_status='WAIVED' if locked.entry_fee == 0 else 'PENDING',
                    )
            except IntegrityError:
                raise conflict_error('Player is already registered for this tournament', code='ALREADY_REGISTERED')

            PlayerStats.objects.get_or_create(tournament=locked, player=player)

        logger.info(f'Player {player.id} registered for tournament {tournament.id}')
        return entry

    def registered_players(self, tournament: Tournament):
        return Player.objects.filter(entries__tournament=tournament).order_by('name')

    def create_team(self, user, tournament: Tournament, name: str, player_ids: list) -> Team:
        ensure_can_manage_tournament(user, tournament)

        unique_ids = set(player_ids)
        if len(unique_ids) != 2:
            raise validation_error('A team needs exactly 2 distinct players')

        registered = set(
            TournamentEntry.objects.filter(tournament=tournament, player_id__in=unique_ids)
            .values_list('player_id', flat=True)
        )
        missing = unique_ids - registered
        if missing:
            raise validation_error(
                'All team players must be registered for the tournament',
                details={'unregisteredPlayerIds': sorted(missing)},
            )

        already_paired = Team.objects.filter(tournament=tournament, players__id__in=unique_ids).exists()
        if already_paired:
            raise conflict_error('A player can only be in one team per tournament')

        try:
            with transaction.atomic():
                team = Team.objects.create(tournament=tournament, name=name)
                team.players.set(unique_ids)
        except IntegrityError:
            raise conflict_error('A team with this name already exists')
        return team

    # Standings

    def leaderboard(self, tournament: Tournament):
        """Player stats ordered by wins, then point difference."""
        return (
            PlayerStats.objects.filter(tournament=tournament)
            .select_related('player')
            .annotate(diff=F('points_scored') - F('points_conceded'))
            .order_by('-wins', '-diff', 'player__name')
        )

    # Fantasy configuration

    def configure_fantasy(self, user, tournament: Tournament, settings: dict) -> dict:
        """
        Store fantasy settings and create or update the contests listed in
        settings['contests'] (matched by case-insensitive name).
        """
        ensure_can_manage_tournament(user, tournament)

        enable = bool(settings.get('enableFantasy', False))
        tournament.fantasy_settings = {
            'enableFantasy': enable,
            'fantasyPoints': settings.get('fantasyPoints'),
            'autoPublish': bool(settings.get('autoPublish', False)),
            'customPoints': settings.get('customPoints') or {},
        }

        results = []
        with transaction.atomic():
            tournament.save(update_fields=['fantasy_settings', 'updated_at'])

            if enable:
                existing = {
                    c.name.lower(): c for c in FantasyContest.objects.filter(tournament=tournament)
                }
                for contest_data in settings.get('contests') or []:
                    results.append(self._upsert_contest(tournament, existing, contest_data))

        return {'fantasySettings': tournament.fantasy_settings, 'contests': results}

    def _upsert_contest(self, tournament, existing: dict, data: dict) -> dict:
        name = (data.get('name') or '').strip()
        if not name:
            return {'skipped': True, 'reason': 'Missing name'}

        breakdown = data.get('prizeBreakdown') or [{'position': 1, 'percentage': 100}]
        try:
            positions = [int(p['position']) for p in breakdown]
        except (KeyError, TypeError, ValueError):
            raise validation_error(
                f'Every prize breakdown row for contest "{name}" needs a numeric position',
                details={'contest': name},
            )
        if any(position < 1 for position in positions) or len(set(positions)) != len(positions):
            raise validation_error(
                f'Prize breakdown positions for contest "{name}" must be unique and start at 1',
                details={'contest': name, 'positions': positions},
            )

        total = sum(Decimal(str(p.get('percentage', 0))) for p in breakdown)
        if abs(total - Decimal('100')) > Decimal('0.1'):
            raise validation_error(
                f'Prize breakdown for contest "{name}" must sum to 100%',
                details={'contest': name, 'total': str(total)},
            )

        fields = {
            'entry_fee': Decimal(str(data.get('entryFee', 0))),
            'max_entries': int(data.get('maxEntries', 100)),
            'prize_breakdown': breakdown,
            'description': data.get('description', ''),
        }
        if data.get('rules'):
            fields['rules'] = data['rules']
        if tournament.fantasy_settings.get('autoPublish'):
            fields['status'] = ContestStatus.OPEN

        contest = existing.get(name.lower())
        if contest is None:
            contest = FantasyContest.objects.create(tournament=tournament, name=name, **fields)
            return {'id': contest.id, 'name': contest.name, 'created': True}

        for field, value in fields.items():
            setattr(contest, field, value)
        contest.save()
        return {'id': contest.id, 'name': contest.name, 'created': False}


# Create singleton instance
tournament_service = TournamentService()
