"""
Django admin configuration for tournaments app.
"""

from django.contrib import admin
from .models import Player, PlayerStats, Team, Tournament, TournamentEntry


class TournamentEntryInline(admin.TabularInline):
    model = TournamentEntry
    extra = 0


@admin.register(Tournament)
class TournamentAdmin(admin.ModelAdmin):
    """Admin interface for Tournament model"""
    list_display = ('name', 'type', 'status', 'start_date', 'end_date', 'organizer')
    search_fields = ('name', 'location', 'organizer__email')
    list_filter = ('status', 'type')
    readonly_fields = ('created_at', 'updated_at')
    inlines = [TournamentEntryInline]


@admin.register(Player)
class PlayerAdmin(admin.ModelAdmin):
    list_display = ('name', 'skill_level', 'country', 'ranking', 'total_points')
    search_fields = ('name', 'country')
    list_filter = ('skill_level',)


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ('name', 'tournament')
    filter_horizontal = ('players',)


@admin.register(PlayerStats)
class PlayerStatsAdmin(admin.ModelAdmin):
    list_display = ('player', 'tournament', 'matches_played', 'wins', 'losses', 'fantasy_points')
