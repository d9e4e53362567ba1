"""
Fantasy views (controllers).
"""

from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import AllowAny

from apps.core.exceptions import validation_error
from apps.core.permissions import ADMIN_ROLES, current_user, require_roles
from apps.core.utils.pagination import parse_page_params
from apps.matches.serializers import MatchSerializer
from apps.tournaments.services import tournament_service
from .services import fantasy_service
from .serializers import (
    ContestInputSerializer,
    ContestPlayerSerializer,
    ContestSerializer,
    ContestStatusSerializer,
    DisbursementSerializer,
    FantasyTeamSerializer,
    MvpSerializer,
    PrizeRulesInputSerializer,
    TeamSelectionSerializer,
)


class ContestListView(APIView):
    """
    GET  /api/fantasy/contests?tournamentId=&status=
    POST /api/fantasy/contests
    """
    permission_classes = [AllowAny]

    def get(self, request):
        contests = fantasy_service.list_contests(
            tournament_id=request.query_params.get('tournamentId'),
            status=request.query_params.get('status'),
        )
        return Response({'contests': ContestSerializer(contests, many=True).data})

    def post(self, request):
        user = require_roles(request, *ADMIN_ROLES)
        tournament_id = request.data.get('tournamentId')
        if not tournament_id:
            raise validation_error('tournamentId is required')
        tournament = tournament_service.get_tournament(tournament_id)

        serializer = ContestInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        contest = fantasy_service.create_contest(user, tournament, serializer.to_model_fields())
        return Response({'contest': ContestSerializer(contest).data}, status=status.HTTP_201_CREATED)


class ContestDetailView(APIView):
    """
    GET   /api/fantasy/contests/:id
    PATCH /api/fantasy/contests/:id
    """
    permission_classes = [AllowAny]

    def get(self, request, contest_id):
        contest = fantasy_service.get_contest(contest_id)
        return Response({'contest': ContestSerializer(contest).data})

    def patch(self, request, contest_id):
        user = current_user(request)
        contest = fantasy_service.get_contest(contest_id)
        serializer = ContestInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        contest = fantasy_service.update_contest(user, contest, serializer.to_model_fields())
        return Response({'contest': ContestSerializer(contest).data})


class ContestStatusView(APIView):
    """
    POST /api/fantasy/contests/:id/status
    """
    permission_classes = [AllowAny]

    def post(self, request, contest_id):
        user = current_user(request)
        contest = fantasy_service.get_contest(contest_id)
        serializer = ContestStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        contest = fantasy_service.change_contest_status(user, contest, serializer.validated_data['status'])
        return Response({'contest': ContestSerializer(contest).data})


class ContestPlayersView(APIView):
    """
    GET /api/fantasy/contests/:id/players
    Registered players with their contest price.
    """
    permission_classes = [AllowAny]

    def get(self, request, contest_id):
        contest = fantasy_service.get_contest(contest_id)
        players = fantasy_service.contest_players(contest)
        return Response({
            'players': ContestPlayerSerializer(players, many=True).data,
            'walletSize': contest.wallet_size,
            'teamSize': contest.team_size,
        })


class ContestTeamsView(APIView):
    """
    POST /api/fantasy/contests/:id/teams
    Join the contest with a team.
    """
    permission_classes = [AllowAny]

    def post(self, request, contest_id):
        user = current_user(request)
        contest = fantasy_service.get_contest(contest_id)
        serializer = TeamSelectionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        team = fantasy_service.create_team(
            user,
            contest,
            data.get('name') or f'{user.name or user.email} XI',
            data['playerIds'],
            data['captainId'],
            data['viceCaptainId'],
        )
        return Response({'team': fantasy_service.team_detail(team)}, status=status.HTTP_201_CREATED)


class ContestLeaderboardView(APIView):
    """
    GET /api/fantasy/contests/:id/leaderboard?page=&limit=
    """
    permission_classes = [AllowAny]

    def get(self, request, contest_id):
        contest = fantasy_service.get_contest(contest_id)
        page, limit = parse_page_params(request.query_params)
        entries, meta = fantasy_service.leaderboard(contest, page, limit)
        return Response({'leaderboard': entries, 'pagination': meta})


class ContestLiveView(APIView):
    """
    GET /api/fantasy/contests/:id/live
    """
    permission_classes = [AllowAny]

    def get(self, request, contest_id):
        contest = fantasy_service.get_contest(contest_id)
        live = fantasy_service.live_contest(contest)
        return Response({
            'contest': ContestSerializer(live['contest']).data,
            'leaderboard': live['leaderboard'],
            'liveMatches': MatchSerializer(live['liveMatches'], many=True).data,
        })


class PrizeRulesView(APIView):
    """
    GET  /api/fantasy/contests/:id/prize-rules
    POST /api/fantasy/contests/:id/prize-rules
    """
    permission_classes = [AllowAny]

    def get(self, request, contest_id):
        contest = fantasy_service.get_contest(contest_id)
        return Response(fantasy_service.get_prize_rules(contest))

    def post(self, request, contest_id):
        user = current_user(request)
        contest = fantasy_service.get_contest(contest_id)
        serializer = PrizeRulesInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        scoped_contest = contest if serializer.validated_data['scope'] == 'contest' else None
        fantasy_service.set_prize_rules(
            user, contest.tournament, serializer.validated_data['rules'], contest=scoped_contest
        )
        return Response(fantasy_service.get_prize_rules(contest), status=status.HTTP_201_CREATED)


class DistributePrizesView(APIView):
    """
    POST /api/fantasy/contests/:id/distribute-prizes
    """
    permission_classes = [AllowAny]

    def post(self, request, contest_id):
        user = current_user(request)
        contest = fantasy_service.get_contest(contest_id)
        disbursements = fantasy_service.distribute_prizes(user, contest)
        return Response({
            'message': f'Distributed {len(disbursements)} prizes',
            'disbursements': DisbursementSerializer(disbursements, many=True).data,
        })


class MyTeamsView(APIView):
    """
    GET /api/fantasy/teams
    """
    permission_classes = [AllowAny]

    def get(self, request):
        user = current_user(request)
        teams = fantasy_service.user_teams(user)
        return Response({'teams': FantasyTeamSerializer(teams, many=True).data})


class TeamDetailView(APIView):
    """
    GET /api/fantasy/teams/:id
    PUT /api/fantasy/teams/:id
    """
    permission_classes = [AllowAny]

    def get(self, request, team_id):
        team = fantasy_service.get_team(team_id)
        return Response({'team': fantasy_service.team_detail(team)})

    def put(self, request, team_id):
        user = current_user(request)
        team = fantasy_service.get_team(team_id)
        serializer = TeamSelectionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        team = fantasy_service.update_team(
            user, team, data['playerIds'], data['captainId'], data['viceCaptainId'], name=data.get('name')
        )
        return Response({'team': fantasy_service.team_detail(team)})


class AwardMvpView(APIView):
    """
    POST /api/fantasy/tournaments/:id/mvp
    """
    permission_classes = [AllowAny]

    def post(self, request, tournament_id):
        user = current_user(request)
        tournament = tournament_service.get_tournament(tournament_id)
        serializer = MvpSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        player = tournament_service.get_player(serializer.validated_data['playerId'])
        result = fantasy_service.award_mvp(user, tournament, player)
        return Response(result)


class PlayerSummaryView(APIView):
    """
    GET /api/fantasy/players/:id/summary?tournamentId=
    """
    permission_classes = [AllowAny]

    def get(self, request, player_id):
        player = tournament_service.get_player(player_id)
        tournament_id = request.query_params.get('tournamentId')
        tournament = tournament_service.get_tournament(tournament_id) if tournament_id else None
        return Response({'playerId': player.id, 'summary': fantasy_service.player_summary(player, tournament)})
