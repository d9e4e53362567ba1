"""
Authentication URL configuration.
"""

from django.urls import path
from .views import (
    RegisterView,
    LoginView,
    RefreshTokenView,
    LogoutView,
    CurrentUserView,
    PasswordResetRequestView,
    PasswordResetConfirmView,
    ChangePasswordView,
    UserListView,
    ApproveUserView,
    RejectUserView,
    ChangeRoleView,
)

app_name = 'authentication'

urlpatterns = [
    # POST /api/auth/register
    path('register', RegisterView.as_view(), name='register'),

    # POST /api/auth/login
    path('login', LoginView.as_view(), name='login'),

    # POST /api/auth/refresh
    # Rotate refresh token
    path('refresh', RefreshTokenView.as_view(), name='refresh'),

    # POST /api/auth/logout
    path('logout', LogoutView.as_view(), name='logout'),

    # GET /api/auth/me
    path('me', CurrentUserView.as_view(), name='current_user'),

    # POST /api/auth/password-reset
    path('password-reset', PasswordResetRequestView.as_view(), name='password_reset'),

    # POST /api/auth/password-reset/confirm
    path('password-reset/confirm', PasswordResetConfirmView.as_view(), name='password_reset_confirm'),

    # POST /api/auth/change-password
    path('change-password', ChangePasswordView.as_view(), name='change_password'),

    # GET /api/auth/users
    # Master admin user management
    path('users', UserListView.as_view(), name='user_list'),

    # POST /api/auth/users/:id/approve
    path('users/<uuid:user_id>/approve', ApproveUserView.as_view(), name='approve_user'),

    # POST /api/auth/users/:id/reject
    path('users/<uuid:user_id>/reject', RejectUserView.as_view(), name='reject_user'),

    # PATCH /api/auth/users/:id/role
    path('users/<uuid:user_id>/role', ChangeRoleView.as_view(), name='change_role'),
]
