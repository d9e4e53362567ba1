"""
Match views (controllers).
"""

from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import AllowAny

from apps.core.permissions import SCORING_ROLES, current_user, require_roles
from apps.core.utils.pagination import paginate, parse_page_params
from apps.tournaments.services import tournament_service
from .services import match_service
from .serializers import (
    CompleteSetSerializer,
    CreateMatchSerializer,
    MatchPerformanceSerializer,
    MatchSerializer,
    PerformanceInputSerializer,
    ScorePointSerializer,
)


class TournamentMatchesView(APIView):
    """
    GET  /api/tournaments/:id/matches?status=
    POST /api/tournaments/:id/matches
    """
    permission_classes = [AllowAny]

    def get(self, request, tournament_id):
        tournament = tournament_service.get_tournament(tournament_id)
        matches = match_service.list_matches(tournament.id, request.query_params.get('status'))
        page, limit = parse_page_params(request.query_params)
        items, meta = paginate(matches, page, limit)
        return Response({'matches': MatchSerializer(items, many=True).data, 'pagination': meta})

    def post(self, request, tournament_id):
        user = require_roles(request, *SCORING_ROLES)
        tournament = tournament_service.get_tournament(tournament_id)
        serializer = CreateMatchSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        match = match_service.create_match(user, tournament, serializer.to_model_fields())
        return Response({'match': MatchSerializer(match).data}, status=status.HTTP_201_CREATED)


class LiveMatchesView(APIView):
    """
    GET /api/matches/live
    """
    permission_classes = [AllowAny]

    def get(self, request):
        return Response({'matches': MatchSerializer(match_service.live_matches(), many=True).data})


class MatchDetailView(APIView):
    """
    GET /api/matches/:id
    """
    permission_classes = [AllowAny]

    def get(self, request, match_id):
        match = match_service.get_match(match_id)
        return Response({'match': MatchSerializer(match).data})


class StartMatchView(APIView):
    """
    POST /api/matches/:id/start
    """
    permission_classes = [AllowAny]

    def post(self, request, match_id):
        user = current_user(request)
        match = match_service.start_match(user, match_service.get_match(match_id))
        return Response({'match': MatchSerializer(match).data})


class ScorePointView(APIView):
    """
    POST /api/matches/:id/score
    Body: {"side": 1 | 2}
    """
    permission_classes = [AllowAny]

    def post(self, request, match_id):
        user = current_user(request)
        serializer = ScorePointSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        match, set_complete = match_service.score_point(user, match_id, serializer.validated_data['side'])
        return Response({'match': MatchSerializer(match).data, 'setComplete': set_complete})


class UndoPointView(APIView):
    """
    POST /api/matches/:id/undo
    """
    permission_classes = [AllowAny]

    def post(self, request, match_id):
        user = current_user(request)
        match, side = match_service.undo_point(user, match_id)
        return Response({'match': MatchSerializer(match).data, 'undoneSide': side})


class CompleteSetView(APIView):
    """
    POST /api/matches/:id/complete-set
    """
    permission_classes = [AllowAny]

    def post(self, request, match_id):
        user = current_user(request)
        serializer = CompleteSetSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        match, outcome = match_service.complete_set(user, match_id, force=serializer.validated_data['force'])
        return Response({'match': MatchSerializer(match).data, **outcome})


class CompleteMatchView(APIView):
    """
    POST /api/matches/:id/complete
    """
    permission_classes = [AllowAny]

    def post(self, request, match_id):
        user = current_user(request)
        match = match_service.complete_match(user, match_id)
        return Response({'match': MatchSerializer(match).data})


class CancelMatchView(APIView):
    """
    POST /api/matches/:id/cancel
    """
    permission_classes = [AllowAny]

    def post(self, request, match_id):
        user = current_user(request)
        match = match_service.cancel_match(user, match_service.get_match(match_id))
        return Response({'match': MatchSerializer(match).data})


class MatchPerformanceView(APIView):
    """
    GET  /api/matches/:id/performance
    POST /api/matches/:id/performance
    """
    permission_classes = [AllowAny]

    def get(self, request, match_id):
        match = match_service.get_match(match_id)
        return Response({
            'performances': MatchPerformanceSerializer(match.performances.all(), many=True).data,
        })

    def post(self, request, match_id):
        user = current_user(request)
        match = match_service.get_match(match_id)
        serializer = PerformanceInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        player = tournament_service.get_player(serializer.validated_data['playerId'])
        performance = match_service.record_performance(user, match, player, serializer.stats())
        return Response({'performance': MatchPerformanceSerializer(performance).data})


class MatchFantasyBreakdownView(APIView):
    """
    GET /api/matches/:id/fantasy-points
    """
    permission_classes = [AllowAny]

    def get(self, request, match_id):
        match = match_service.get_match(match_id)
        return Response(match_service.fantasy_breakdown(match))
