"""
Tournament and player URL configuration.
"""

from django.urls import path
from .views import (
    CompleteTournamentView,
    FantasySetupView,
    PlayerDetailView,
    PlayerListView,
    TournamentDetailView,
    TournamentLeaderboardView,
    TournamentListView,
    TournamentPlayersView,
    TournamentStatusView,
    TournamentTeamsView,
)

app_name = 'tournaments'

urlpatterns = [
    # GET/POST /api/tournaments
    path('tournaments', TournamentListView.as_view(), name='tournament_list'),

    # GET/PATCH/DELETE /api/tournaments/:id
    path('tournaments/<int:tournament_id>', TournamentDetailView.as_view(), name='tournament_detail'),

    # POST /api/tournaments/:id/status
    path('tournaments/<int:tournament_id>/status', TournamentStatusView.as_view(), name='tournament_status'),

    # POST /api/tournaments/:id/complete
    # Requires every match to be finished
    path('tournaments/<int:tournament_id>/complete', CompleteTournamentView.as_view(), name='tournament_complete'),

    # GET/POST /api/tournaments/:id/players
    path('tournaments/<int:tournament_id>/players', TournamentPlayersView.as_view(), name='tournament_players'),

    # GET/POST /api/tournaments/:id/teams
    path('tournaments/<int:tournament_id>/teams', TournamentTeamsView.as_view(), name='tournament_teams'),

    # GET /api/tournaments/:id/leaderboard
    path('tournaments/<int:tournament_id>/leaderboard', TournamentLeaderboardView.as_view(), name='tournament_leaderboard'),

    # POST /api/tournaments/:id/fantasy-setup
    path('tournaments/<int:tournament_id>/fantasy-setup', FantasySetupView.as_view(), name='fantasy_setup'),

    # GET/POST /api/players
    path('players', PlayerListView.as_view(), name='player_list'),

    # GET/PATCH /api/players/:id
    path('players/<int:player_id>', PlayerDetailView.as_view(), name='player_detail'),
]
