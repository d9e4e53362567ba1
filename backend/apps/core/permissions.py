"""
Role-based access helpers shared by every app.
"""

from django.db import models

from apps.core.exceptions import authentication_error, authorization_error


class Role(models.TextChoices):
    USER = 'USER', 'User'
    PLAYER = 'PLAYER', 'Player'
    REFEREE = 'REFEREE', 'Referee'
    TOURNAMENT_ADMIN = 'TOURNAMENT_ADMIN', 'Tournament admin'
    MASTER_ADMIN = 'MASTER_ADMIN', 'Master admin'


ADMIN_ROLES = (Role.TOURNAMENT_ADMIN, Role.MASTER_ADMIN)
SCORING_ROLES = (Role.REFEREE, Role.TOURNAMENT_ADMIN, Role.MASTER_ADMIN)


def is_admin(role) -> bool:
    return role in ADMIN_ROLES


def current_user(request):
    """
    Load the authenticated User for this request.

    Raises:
        AppError(401) if the request carries no valid token or the account
        no longer exists or is disabled.
    """
    from apps.authentication.models import User

    user_jwt = getattr(request, 'user_jwt', None)
    if not user_jwt or not user_jwt.get('user_id'):
        raise authentication_error()

    cached = getattr(request, '_current_user', None)
    if cached is not None:
        return cached

    try:
        user = User.objects.get(id=user_jwt['user_id'])
    except (User.DoesNotExist, ValueError):
        raise authentication_error('User no longer exists')

    if not user.is_active:
        raise authentication_error('Account is disabled')

    request._current_user = user
    return user


def require_roles(request, *roles):
    """Return the current user if their role is one of roles, else 403."""
    user = current_user(request)
    if user.role not in roles:
        raise authorization_error()
    return user


def can_manage_tournament(user, tournament) -> bool:
    """Organizer of the tournament, or any master admin."""
    if user.role == Role.MASTER_ADMIN:
        return True
    return user.role == Role.TOURNAMENT_ADMIN and tournament.organizer_id == user.id


def ensure_can_manage_tournament(user, tournament) -> None:
    if not can_manage_tournament(user, tournament):
        raise authorization_error('Only the tournament organizer or a master admin can do this')
