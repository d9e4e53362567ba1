"""
Django admin configuration for authentication app.
"""

from django.contrib import admin
from .models import User, RefreshToken, PasswordResetToken


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    """Admin interface for User model"""
    list_display = ('email', 'name', 'role', 'approval_status', 'is_active', 'created_at')
    search_fields = ('email', 'name')
    list_filter = ('role', 'approval_status', 'is_active')
    readonly_fields = ('id', 'created_at', 'updated_at', 'password_hash', 'approved_at')
    ordering = ('-created_at',)

    fieldsets = (
        ('User Information', {
            'fields': ('id', 'email', 'name', 'phone')
        }),
        ('Access', {
            'fields': ('role', 'approval_status', 'rejection_reason', 'approved_at', 'is_active')
        }),
        ('Security', {
            'fields': ('password_hash',)
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at')
        }),
    )


@admin.register(RefreshToken)
class RefreshTokenAdmin(admin.ModelAdmin):
    """Admin interface for RefreshToken model"""
    list_display = ('user', 'expires_at', 'is_valid', 'created_at', 'revoked_at')
    search_fields = ('user__email',)
    list_filter = ('revoked_at', 'expires_at')
    readonly_fields = ('id', 'token', 'created_at')
    ordering = ('-created_at',)

    @admin.display(boolean=True, description='Valid')
    def is_valid(self, obj):
        return obj.is_valid


@admin.register(PasswordResetToken)
class PasswordResetTokenAdmin(admin.ModelAdmin):
    list_display = ('user', 'expires_at', 'used_at', 'created_at')
    search_fields = ('user__email',)
    readonly_fields = ('id', 'token_hash', 'created_at')
