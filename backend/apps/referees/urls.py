"""
Referee URL configuration.
"""

from django.urls import path
from .views import (
    ApplyView,
    ApproveRequestView,
    AssignmentsView,
    DeclineAssignmentView,
    MyRequestsView,
    RefereeStatsView,
    RefereeTournamentsView,
    RejectRequestView,
    TournamentJoinRequestsView,
)

app_name = 'referees'

urlpatterns = [
    # GET /api/referees/tournaments
    path('referees/tournaments', RefereeTournamentsView.as_view(), name='tournaments'),

    # POST /api/referees/tournaments/:id/apply
    path('referees/tournaments/<int:tournament_id>/apply', ApplyView.as_view(), name='apply'),

    # GET /api/referees/requests
    path('referees/requests', MyRequestsView.as_view(), name='my_requests'),

    # POST /api/referees/requests/:id/approve
    path('referees/requests/<int:request_id>/approve', ApproveRequestView.as_view(), name='approve'),

    # POST /api/referees/requests/:id/reject
    path('referees/requests/<int:request_id>/reject', RejectRequestView.as_view(), name='reject'),

    # GET /api/referees/assignments
    path('referees/assignments', AssignmentsView.as_view(), name='assignments'),

    # POST /api/referees/assignments/:match_id/decline
    path('referees/assignments/<int:match_id>/decline', DeclineAssignmentView.as_view(), name='decline'),

    # GET /api/referees/stats
    path('referees/stats', RefereeStatsView.as_view(), name='stats'),

    # GET /api/tournaments/:id/join-requests
    path('tournaments/<int:tournament_id>/join-requests', TournamentJoinRequestsView.as_view(), name='join_requests'),
]
