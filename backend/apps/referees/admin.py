"""
Django admin configuration for referees app.
"""

from django.contrib import admin
from .models import Referee, RefereeJoinRequest


@admin.register(Referee)
class RefereeAdmin(admin.ModelAdmin):
    list_display = ('user', 'certification_level', 'experience_years', 'created_at')
    search_fields = ('user__email',)


@admin.register(RefereeJoinRequest)
class RefereeJoinRequestAdmin(admin.ModelAdmin):
    list_display = ('referee', 'tournament', 'status', 'reviewed_at', 'created_at')
    list_filter = ('status',)
