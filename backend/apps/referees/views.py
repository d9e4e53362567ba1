"""
Referee views (controllers).
"""

from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import AllowAny

from apps.core.permissions import Role, current_user, require_roles
from apps.matches.serializers import MatchSerializer
from apps.matches.services import match_service
from apps.tournaments.serializers import TournamentSerializer
from apps.tournaments.services import tournament_service
from .services import referee_service
from .serializers import ApplySerializer, JoinRequestSerializer, RequestFilterSerializer


class RefereeTournamentsView(APIView):
    """
    GET /api/referees/tournaments
    Tournaments still accepting referees.
    """
    permission_classes = [AllowAny]

    def get(self, request):
        require_roles(request, Role.REFEREE)
        tournaments = referee_service.open_tournaments()
        return Response({'tournaments': TournamentSerializer(tournaments, many=True).data})


class ApplyView(APIView):
    """
    POST /api/referees/tournaments/:id/apply
    """
    permission_classes = [AllowAny]

    def post(self, request, tournament_id):
        user = require_roles(request, Role.REFEREE)
        tournament = tournament_service.get_tournament(tournament_id)
        serializer = ApplySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        join_request = referee_service.apply(user, tournament, serializer.validated_data['message'])
        return Response({'request': JoinRequestSerializer(join_request).data}, status=status.HTTP_201_CREATED)


class MyRequestsView(APIView):
    """
    GET /api/referees/requests
    """
    permission_classes = [AllowAny]

    def get(self, request):
        user = current_user(request)
        requests = referee_service.my_requests(user)
        return Response({'requests': JoinRequestSerializer(requests, many=True).data})


class TournamentJoinRequestsView(APIView):
    """
    GET /api/tournaments/:id/join-requests?status=
    """
    permission_classes = [AllowAny]

    def get(self, request, tournament_id):
        user = current_user(request)
        tournament = tournament_service.get_tournament(tournament_id)
        filters = RequestFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)

        requests = referee_service.list_requests(user, tournament, filters.validated_data.get('status'))
        return Response({'requests': JoinRequestSerializer(requests, many=True).data})


class ApproveRequestView(APIView):
    """
    POST /api/referees/requests/:id/approve
    """
    permission_classes = [AllowAny]

    def post(self, request, request_id):
        user = current_user(request)
        join_request = referee_service.approve(user, referee_service.get_request(request_id))
        return Response({'request': JoinRequestSerializer(join_request).data})


class RejectRequestView(APIView):
    """
    POST /api/referees/requests/:id/reject
    """
    permission_classes = [AllowAny]

    def post(self, request, request_id):
        user = current_user(request)
        join_request = referee_service.reject(user, referee_service.get_request(request_id))
        return Response({'request': JoinRequestSerializer(join_request).data})


class AssignmentsView(APIView):
    """
    GET /api/referees/assignments?status=
    """
    permission_classes = [AllowAny]

    def get(self, request):
        user = current_user(request)
        matches = referee_service.assignments(user, request.query_params.get('status'))
        return Response({'matches': MatchSerializer(matches, many=True).data})


class DeclineAssignmentView(APIView):
    """
    POST /api/referees/assignments/:match_id/decline
    """
    permission_classes = [AllowAny]

    def post(self, request, match_id):
        user = current_user(request)
        match = referee_service.decline_assignment(user, match_service.get_match(match_id))
        return Response({'match': MatchSerializer(match).data})


class RefereeStatsView(APIView):
    """
    GET /api/referees/stats
    """
    permission_classes = [AllowAny]

    def get(self, request):
        user = current_user(request)
        return Response({'stats': referee_service.stats(user)})
