"""
Celery configuration for pickleball fantasy.
"""

import os
from celery import Celery
from celery.schedules import crontab

# Set the default Django settings module for the 'celery' program.
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

app = Celery('pickleball_fantasy')

# namespace='CELERY' means all celery-related configuration keys
# should have a `CELERY_` prefix.
app.config_from_object('django.conf:settings', namespace='CELERY')

# Load task modules from all registered Django apps.
app.autodiscover_tasks()

# Celery Beat schedule for periodic tasks
app.conf.beat_schedule = {
    'recompute-leaderboards-every-5-minutes': {
        'task': 'apps.fantasy.tasks.recompute_leaderboards',
        'schedule': 300.0,
    },
    'poll-payout-statuses-every-10-minutes': {
        'task': 'apps.payments.tasks.poll_payout_statuses',
        'schedule': 600.0,
    },
    'cleanup-expired-tokens-daily': {
        'task': 'apps.authentication.tasks.cleanup_expired_tokens',
        'schedule': crontab(hour=2, minute=0),  # Every day at 2 AM
    },
}

# Celery configuration options
app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone='UTC',
    enable_utc=True,
    task_track_started=True,
    task_time_limit=30 * 60,  # 30 minutes
    task_soft_time_limit=25 * 60,  # 25 minutes
    task_acks_late=True,  # Acknowledge tasks after completion
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,
    broker_connection_retry_on_startup=True,
)
