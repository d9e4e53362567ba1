"""
Fantasy background tasks.
"""

from celery import shared_task
from .models import ContestStatus, FantasyContest
from .services import fantasy_service
import logging

logger = logging.getLogger(__name__)


@shared_task(name='apps.fantasy.tasks.recompute_leaderboards')
def recompute_leaderboards(tournament_id=None):
    """
    Re-rank running contests, for one tournament or all of them.
    Queued after every completed match and run every 5 minutes by beat.
    """
    contests = FantasyContest.objects.filter(status__in=[ContestStatus.OPEN, ContestStatus.ONGOING])
    if tournament_id is not None:
        contests = contests.filter(tournament_id=tournament_id)

    count = 0
    for contest in contests:
        fantasy_service.recompute_ranks(contest)
        count += 1

    logger.info(f'Recomputed ranks for {count} contests')
    return {'contests': count}
