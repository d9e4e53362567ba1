"""
Match URL configuration.
"""

from django.urls import path
from .views import (
    CancelMatchView,
    CompleteMatchView,
    CompleteSetView,
    LiveMatchesView,
    MatchDetailView,
    MatchFantasyBreakdownView,
    MatchPerformanceView,
    ScorePointView,
    StartMatchView,
    TournamentMatchesView,
    UndoPointView,
)

app_name = 'matches'

urlpatterns = [
    # GET/POST /api/tournaments/:id/matches
    path('tournaments/<int:tournament_id>/matches', TournamentMatchesView.as_view(), name='tournament_matches'),

    # GET /api/matches/live
    path('matches/live', LiveMatchesView.as_view(), name='live'),

    # GET /api/matches/:id
    path('matches/<int:match_id>', MatchDetailView.as_view(), name='detail'),

    # POST /api/matches/:id/start
    path('matches/<int:match_id>/start', StartMatchView.as_view(), name='start'),

    # POST /api/matches/:id/score
    path('matches/<int:match_id>/score', ScorePointView.as_view(), name='score'),

    # POST /api/matches/:id/undo
    # Remove the latest point of the current set
    path('matches/<int:match_id>/undo', UndoPointView.as_view(), name='undo'),

    # POST /api/matches/:id/complete-set
    path('matches/<int:match_id>/complete-set', CompleteSetView.as_view(), name='complete_set'),

    # POST /api/matches/:id/complete
    path('matches/<int:match_id>/complete', CompleteMatchView.as_view(), name='complete'),

    # POST /api/matches/:id/cancel
    path('matches/<int:match_id>/cancel', CancelMatchView.as_view(), name='cancel'),

    # GET/POST /api/matches/:id/performance
    path('matches/<int:match_id>/performance', MatchPerformanceView.as_view(), name='performance'),

    # GET /api/matches/:id/fantasy-points
    path('matches/<int:match_id>/fantasy-points', MatchFantasyBreakdownView.as_view(), name='fantasy_points'),
]
