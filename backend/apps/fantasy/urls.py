"""
Fantasy URL configuration.
"""

from django.urls import path
from .views import (
    AwardMvpView,
    ContestDetailView,
    ContestLeaderboardView,
    ContestListView,
    ContestLiveView,
    ContestPlayersView,
    ContestStatusView,
    ContestTeamsView,
    DistributePrizesView,
    MyTeamsView,
    PlayerSummaryView,
    PrizeRulesView,
    TeamDetailView,
)

app_name = 'fantasy'

urlpatterns = [
    # GET/POST /api/fantasy/contests
    path('fantasy/contests', ContestListView.as_view(), name='contest_list'),

    # GET/PATCH /api/fantasy/contests/:id
    path('fantasy/contests/<int:contest_id>', ContestDetailView.as_view(), name='contest_detail'),

    # POST /api/fantasy/contests/:id/status
    path('fantasy/contests/<int:contest_id>/status', ContestStatusView.as_view(), name='contest_status'),

    # GET /api/fantasy/contests/:id/players
    path('fantasy/contests/<int:contest_id>/players', ContestPlayersView.as_view(), name='contest_players'),

    # POST /api/fantasy/contests/:id/teams
    path('fantasy/contests/<int:contest_id>/teams', ContestTeamsView.as_view(), name='contest_teams'),

    # GET /api/fantasy/contests/:id/leaderboard
    path('fantasy/contests/<int:contest_id>/leaderboard', ContestLeaderboardView.as_view(), name='leaderboard'),

    # GET /api/fantasy/contests/:id/live
    path('fantasy/contests/<int:contest_id>/live', ContestLiveView.as_view(), name='contest_live'),

    # GET/POST /api/fantasy/contests/:id/prize-rules
    path('fantasy/contests/<int:contest_id>/prize-rules', PrizeRulesView.as_view(), name='prize_rules'),

    # POST /api/fantasy/contests/:id/distribute-prizes
    path(
        'fantasy/contests/<int:contest_id>/distribute-prizes',
        DistributePrizesView.as_view(),
        name='distribute_prizes',
    ),

    # GET /api/fantasy/teams
    path('fantasy/teams', MyTeamsView.as_view(), name='my_teams'),

    # GET/PUT /api/fantasy/teams/:id
    path('fantasy/teams/<int:team_id>', TeamDetailView.as_view(), name='team_detail'),

    # POST /api/fantasy/tournaments/:id/mvp
    path('fantasy/tournaments/<int:tournament_id>/mvp', AwardMvpView.as_view(), name='award_mvp'),

    # GET /api/fantasy/players/:id/summary
    path('fantasy/players/<int:player_id>/summary', PlayerSummaryView.as_view(), name='player_summary'),
]
