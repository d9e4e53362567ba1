"""
Django admin configuration for fantasy app.
"""

from django.contrib import admin
from .models import (
    FantasyContest,
    FantasyPoints,
    FantasyTeam,
    FantasyTeamPlayer,
    PrizeDisbursement,
    PrizeDistributionRule,
)


@admin.register(FantasyContest)
class FantasyContestAdmin(admin.ModelAdmin):
    """Admin interface for FantasyContest model"""
    list_display = ('name', 'tournament', 'status', 'entry_fee', 'prize_pool', 'current_entries', 'max_entries')
    search_fields = ('name', 'tournament__name')
    list_filter = ('status', 'is_prizes_distributed')


class FantasyTeamPlayerInline(admin.TabularInline):
    model = FantasyTeamPlayer
    extra = 0


@admin.register(FantasyTeam)
class FantasyTeamAdmin(admin.ModelAdmin):
    list_display = ('name', 'user', 'contest', 'total_points', 'rank')
    search_fields = ('name', 'user__email')
    inlines = [FantasyTeamPlayerInline]


@admin.register(FantasyPoints)
class FantasyPointsAdmin(admin.ModelAdmin):
    list_display = ('player', 'tournament', 'match', 'category', 'points', 'created_at')
    list_filter = ('category',)


@admin.register(PrizeDistributionRule)
class PrizeDistributionRuleAdmin(admin.ModelAdmin):
    list_display = ('tournament', 'contest', 'rank', 'percentage', 'min_players')


@admin.register(PrizeDisbursement)
class PrizeDisbursementAdmin(admin.ModelAdmin):
    list_display = ('contest', 'user', 'rank', 'amount', 'net_amount', 'status', 'payout_id')
    list_filter = ('status',)
    readonly_fields = ('created_at', 'updated_at')
