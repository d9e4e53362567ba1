"""
Payment background tasks.
"""

from celery import shared_task
from apps.fantasy.models import DisbursementStatus, PrizeDisbursement
from .razorpay_client import RazorpayError
from .services import payout_service
import logging

logger = logging.getLogger(__name__)


@shared_task(name='apps.payments.tasks.process_prize_payout')
def process_prize_payout(disbursement_id):
    """Send a prize to the winner's primary bank account"""
    disbursement = payout_service.process(disbursement_id)
    return {'disbursementId': disbursement.id, 'status': disbursement.status}


@shared_task(name='apps.payments.tasks.poll_payout_statuses')
def poll_payout_statuses():
    """
    Refresh PROCESSING payouts from RazorpayX
    Runs every 10 minutes (configured in celery.py)
    """
    updated = 0
    for disbursement in PrizeDisbursement.objects.filter(status=DisbursementStatus.PROCESSING).select_related('user'):
        try:
            before = disbursement.status
            if payout_service.sync_status(disbursement).status != before:
                updated += 1
        except RazorpayError as e:
            logger.error(f'Could not refresh payout {disbursement.payout_id}: {e.message}')

    logger.info(f'Payout poll updated {updated} disbursements')
    return {'updated': updated}
