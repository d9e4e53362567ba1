"""
Email notification tasks.

Every task renders a plain text template and sends it with send_mail;
SMTP and connection failures are retried with exponential backoff.
"""

import logging
from smtplib import SMTPException

from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail

from apps.authentication.models import ApprovalStatus, User
from . import emails

logger = logging.getLogger(__name__)

RETRY_OPTIONS = {
    'autoretry_for': (SMTPException, ConnectionError),
    'retry_backoff': True,
    'retry_backoff_max': 600,
    'retry_kwargs': {'max_retries': 5},
}


def _send(template: emails.EmailTemplate, recipient: str, **context) -> int:
    subject, body = template.render(**context)
    sent = send_mail(subject, body, settings.DEFAULT_FROM_EMAIL, [recipient], fail_silently=False)
    logger.info(f'Sent "{subject}" to {recipient}')
    return sent


def _display_name(user: User) -> str:
    return user.name or user.email


@shared_task(name='apps.notifications.tasks.send_password_reset_email', **RETRY_OPTIONS)
def send_password_reset_email(user_id, token):
    user = User.objects.get(id=user_id)
    return _send(
        emails.PASSWORD_RESET,
        user.email,
        name=_display_name(user),
        reset_url=f'{settings.FRONTEND_URL}/reset-password?token={token}',
    )


@shared_task(name='apps.notifications.tasks.send_account_status_email', **RETRY_OPTIONS)
def send_account_status_email(user_id):
    """Tell a referee or tournament admin how their application went"""
    user = User.objects.get(id=user_id)
    role = user.get_role_display()

    if user.approval_status == ApprovalStatus.APPROVED:
        return _send(
            emails.ACCOUNT_APPROVED,
            user.email,
            name=_display_name(user),
            role=role,
            login_url=f'{settings.FRONTEND_URL}/login',
        )
    if user.approval_status == ApprovalStatus.REJECTED:
        return _send(
            emails.ACCOUNT_REJECTED,
            user.email,
            name=_display_name(user),
            role=role,
            reason=user.rejection_reason or 'Not specified',
        )

    logger.info(f'User {user_id} is still {user.approval_status}, no status email sent')
    return 0


@shared_task(name='apps.notifications.tasks.send_payment_receipt', **RETRY_OPTIONS)
def send_payment_receipt(payment_id):
    from apps.payments.models import Payment

    payment = Payment.objects.select_related('user', 'contest').get(id=payment_id)
    return _send(
        emails.PAYMENT_RECEIPT,
        payment.user.email,
        name=_display_name(payment.user),
        amount=payment.amount,
        currency=payment.currency,
        contest=payment.contest.name if payment.contest else 'your contest entry',
        order_id=payment.razorpay_order_id,
        payment_id=payment.razorpay_payment_id or '-',
    )


@shared_task(name='apps.notifications.tasks.send_winner_notification', **RETRY_OPTIONS)
def send_winner_notification(disbursement_id):
    from apps.fantasy.models import PrizeDisbursement

    disbursement = PrizeDisbursement.objects.select_related('user', 'contest').get(id=disbursement_id)
    return _send(
        emails.WINNER,
        disbursement.user.email,
        name=_display_name(disbursement.user),
        contest=disbursement.contest.name,
        rank=disbursement.rank,
        amount=disbursement.amount,
        fee=disbursement.processing_fee,
        net_amount=disbursement.net_amount,
        wallet_url=f'{settings.FRONTEND_URL}/wallet',
    )
