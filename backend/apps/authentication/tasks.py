"""
Authentication background tasks.

Celery tasks for cleanup and maintenance.
"""

from celery import shared_task
from django.utils import timezone
from .models import PasswordResetToken, RefreshToken
import logging

logger = logging.getLogger(__name__)


@shared_task(name='apps.authentication.tasks.cleanup_expired_tokens')
def cleanup_expired_tokens():
    """
    Delete expired refresh and password reset tokens
    Runs daily at 2 AM (configured in celery.py)
    """
    now = timezone.now()
    refresh_deleted, _ = RefreshToken.objects.filter(expires_at__lt=now).delete()
    reset_deleted, _ = PasswordResetToken.objects.filter(expires_at__lt=now).delete()

    logger.info(f'Cleaned up {refresh_deleted} refresh tokens and {reset_deleted} reset tokens')
    return {'refreshTokens': refresh_deleted, 'resetTokens': reset_deleted}
