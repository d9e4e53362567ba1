"""
Tournament views (controllers).
"""

from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import AllowAny

from apps.core.permissions import ADMIN_ROLES, current_user, require_roles
from apps.core.utils.pagination import paginate, parse_page_params
from .models import Player, Tournament
from .services import tournament_service
from .serializers import (
    CreateTeamSerializer,
    FantasySetupSerializer,
    PlayerSerializer,
    PlayerStatsSerializer,
    RegisterPlayerSerializer,
    StatusChangeSerializer,
    TeamSerializer,
    TournamentInputSerializer,
    TournamentSerializer,
)


class TournamentListView(APIView):
    """
    GET  /api/tournaments?status=&page=&limit=
    POST /api/tournaments
    """
    permission_classes = [AllowAny]

    def get(self, request):
        tournaments = Tournament.objects.all()
        status_filter = request.query_params.get('status')
        if status_filter:
            tournaments = tournaments.filter(status=status_filter)

        page, limit = parse_page_params(request.query_params)
        items, meta = paginate(tournaments, page, limit)
        return Response({
            'tournaments': TournamentSerializer(items, many=True).data,
            'pagination': meta,
        })

    def post(self, request):
        user = require_roles(request, *ADMIN_ROLES)
        serializer = TournamentInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        tournament = tournament_service.create_tournament(user, serializer.to_model_fields())
        return Response({'tournament': TournamentSerializer(tournament).data}, status=status.HTTP_201_CREATED)


class TournamentDetailView(APIView):
    """
    GET    /api/tournaments/:id
    PATCH  /api/tournaments/:id
    DELETE /api/tournaments/:id
    """
    permission_classes = [AllowAny]

    def get(self, request, tournament_id):
        tournament = tournament_service.get_tournament(tournament_id)
        return Response({'tournament': TournamentSerializer(tournament).data})

    def patch(self, request, tournament_id):
        user = current_user(request)
        tournament = tournament_service.get_tournament(tournament_id)
        serializer = TournamentInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        tournament = tournament_service.update_tournament(user, tournament, serializer.to_model_fields())
        return Response({'tournament': TournamentSerializer(tournament).data})

    def delete(self, request, tournament_id):
        user = current_user(request)
        tournament = tournament_service.get_tournament(tournament_id)
        tournament_service.delete_tournament(user, tournament)
        return Response(status=status.HTTP_204_NO_CONTENT)


class TournamentStatusView(APIView):
    """
    POST /api/tournaments/:id/status
    """
    permission_classes = [AllowAny]

    def post(self, request, tournament_id):
        user = current_user(request)
        tournament = tournament_service.get_tournament(tournament_id)
        serializer = StatusChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        tournament = tournament_service.change_status(user, tournament, serializer.validated_data['status'])
        return Response({'tournament': TournamentSerializer(tournament).data})


class CompleteTournamentView(APIView):
    """
    POST /api/tournaments/:id/complete
    """
    permission_classes = [AllowAny]

    def post(self, request, tournament_id):
        user = current_user(request)
        tournament = tournament_service.get_tournament(tournament_id)
        tournament = tournament_service.complete_tournament(user, tournament)
        return Response({
            'message': 'Tournament completed and fantasy standings updated',
            'tournament': TournamentSerializer(tournament).data,
        })


class TournamentPlayersView(APIView):
    """
    GET  /api/tournaments/:id/players
    POST /api/tournaments/:id/players
    """
    permission_classes = [AllowAny]

    def get(self, request, tournament_id):
        tournament = tournament_service.get_tournament(tournament_id)
        players = tournament_service.registered_players(tournament)
        return Response({'players': PlayerSerializer(players, many=True).data})

    def post(self, request, tournament_id):
        user = current_user(request)
        tournament = tournament_service.get_tournament(tournament_id)
        serializer = RegisterPlayerSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        player = tournament_service.get_player(serializer.validated_data['playerId'])
        entry = tournament_service.register_player(
            user, tournament, player, seed=serializer.validated_data.get('seed')
        )
        return Response({
            'entry': {
                'id': entry.id,
                'tournamentId': tournament.id,
                'playerId': player.id,
                'seed': entry.seed,
                'paymentStatus': entry.payment_status,
            }
        }, status=status.HTTP_201_CREATED)


class TournamentTeamsView(APIView):
    """
    GET  /api/tournaments/:id/teams
    POST /api/tournaments/:id/teams
    """
    permission_classes = [AllowAny]

    def get(self, request, tournament_id):
        tournament = tournament_service.get_tournament(tournament_id)
        teams = tournament.teams.prefetch_related('players')
        return Response({'teams': TeamSerializer(teams, many=True).data})

    def post(self, request, tournament_id):
        user = current_user(request)
        tournament = tournament_service.get_tournament(tournament_id)
        serializer = CreateTeamSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        team = tournament_service.create_team(
            user, tournament,
            serializer.validated_data['name'],
            serializer.validated_data['playerIds'],
        )
        return Response({'team': TeamSerializer(team).data}, status=status.HTTP_201_CREATED)


class TournamentLeaderboardView(APIView):
    """
    GET /api/tournaments/:id/leaderboard
    """
    permission_classes = [AllowAny]

    def get(self, request, tournament_id):
        tournament = tournament_service.get_tournament(tournament_id)
        stats = tournament_service.leaderboard(tournament)
        return Response({
            'tournamentId': tournament.id,
            'standings': [
                {'position': index + 1, **row}
                for index, row in enumerate(PlayerStatsSerializer(stats, many=True).data)
            ],
        })


class FantasySetupView(APIView):
    """
    POST /api/tournaments/:id/fantasy-setup
    """
    permission_classes = [AllowAny]

    def post(self, request, tournament_id):
        user = require_roles(request, *ADMIN_ROLES)
        tournament = tournament_service.get_tournament(tournament_id)
        serializer = FantasySetupSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = tournament_service.configure_fantasy(user, tournament, serializer.validated_data)
        return Response({'message': 'Fantasy settings saved', **result})


class PlayerListView(APIView):
    """
    GET  /api/players?search=&skillLevel=
    POST /api/players
    """
    permission_classes = [AllowAny]

    def get(self, request):
        players = Player.objects.all()
        search = request.query_params.get('search')
        if search:
            players = players.filter(name__icontains=search)
        skill_level = request.query_params.get('skillLevel')
        if skill_level:
            players = players.filter(skill_level=skill_level)

        page, limit = parse_page_params(request.query_params)
        items, meta = paginate(players, page, limit)
        return Response({'players': PlayerSerializer(items, many=True).data, 'pagination': meta})

    def post(self, request):
        user = require_roles(request, *ADMIN_ROLES)
        serializer = PlayerSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        player = tournament_service.create_player(user, serializer.validated_data)
        return Response({'player': PlayerSerializer(player).data}, status=status.HTTP_201_CREATED)


class PlayerDetailView(APIView):
    """
    GET   /api/players/:id
    PATCH /api/players/:id
    """
    permission_classes = [AllowAny]

    def get(self, request, player_id):
        player = tournament_service.get_player(player_id)
        return Response({'player': PlayerSerializer(player).data})

    def patch(self, request, player_id):
        user = require_roles(request, *ADMIN_ROLES)
        player = tournament_service.get_player(player_id)
        serializer = PlayerSerializer(player, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        player = tournament_service.update_player(user, player, serializer.validated_data)
        return Response({'player': PlayerSerializer(player).data})
