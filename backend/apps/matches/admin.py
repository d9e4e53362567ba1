"""
Django admin configuration for matches app.
"""

from django.contrib import admin
from .models import Match, MatchPerformance, MatchResult, PointEvent, SetScore


class SetScoreInline(admin.TabularInline):
    model = SetScore
    extra = 0


@admin.register(Match)
class MatchAdmin(admin.ModelAdmin):
    """Admin interface for Match model"""
    list_display = ('id', 'tournament', 'round', 'status', 'player1_score', 'player2_score', 'current_set', 'referee')
    list_filter = ('status', 'is_doubles')
    search_fields = ('tournament__name', 'round')
    inlines = [SetScoreInline]


@admin.register(PointEvent)
class PointEventAdmin(admin.ModelAdmin):
    list_display = ('match', 'set_number', 'side', 'created_by', 'created_at')


@admin.register(MatchResult)
class MatchResultAdmin(admin.ModelAdmin):
    list_display = ('match', 'winner_side', 'final_score', 'bonus_points')


@admin.register(MatchPerformance)
class MatchPerformanceAdmin(admin.ModelAdmin):
    list_display = ('match', 'player', 'points', 'aces', 'winners', 'errors')
