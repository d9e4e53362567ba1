"""
Payment services.

Checkout orders, signature verification, webhooks, bank accounts,
wallets and prize payouts.
"""

import logging
import re
import time
from decimal import Decimal
from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from apps.core.exceptions import AppError, conflict_error, not_found_error, validation_error
from apps.fantasy.models import ContestStatus, DisbursementStatus, FantasyContest, FantasyTeam, PrizeDisbursement
from apps.fantasy.points import calculate_payment_splits
from .models import BankAccount, Payment, PaymentStatus, TransactionType, Wallet, WalletTransaction
from .razorpay_client import RazorpayError, razorpay_client

logger = logging.getLogger(__name__)

IFSC_PATTERN = re.compile(r'^[A-Z]{4}0[A-Z0-9]{6}$')
ACCOUNT_NUMBER_PATTERN = re.compile(r'^\d{9,18}$')


def bypass_enabled() -> bool:
    return bool(getattr(settings, 'BYPASS_RAZORPAY', False))


class WalletService:

    def get_wallet(self, user) -> Wallet:
        wallet, _ = Wallet.objects.get_or_create(user=user)
        return wallet

    def credit(self, user, amount, reason: str, reference: str = '') -> WalletTransaction:
        amount = Decimal(str(amount))
        if amount <= 0:
            raise validation_error('Credit amount must be positive')
        with transaction.atomic():
            wallet = self.get_wallet(user)
            Wallet.objects.filter(id=wallet.id).update(balance=F('balance') + amount)
            entry = WalletTransaction.objects.create(
                wallet=wallet, amount=amount, type=TransactionType.CREDIT, reason=reason, reference=reference
            )
        logger.info(f'Wallet credit {amount} for user {user.id}: {reason}')
        return entry

    def debit(self, user, amount, reason: str, reference: str = '') -> WalletTransaction:
        amount = Decimal(str(amount))
        with transaction.atomic():
            wallet = Wallet.objects.select_for_update().get(id=self.get_wallet(user).id)
            if wallet.balance < amount:
                raise validation_error(
                    'Insufficient wallet balance',
                    details={'balance': str(wallet.balance), 'requested': str(amount)},
                )
            wallet.balance = wallet.balance - amount
            wallet.save(update_fields=['balance', 'updated_at'])
            entry = WalletTransaction.objects.create(
                wallet=wallet, amount=amount, type=TransactionType.DEBIT, reason=reason, reference=reference
            )
        logger.info(f'Wallet debit {amount} for user {user.id}: {reason}')
        return entry

    def summary(self, user, limit: int = 20) -> dict:
        wallet = self.get_wallet(user)
        return {
            'wallet': wallet,
            'transactions': list(wallet.transactions.all()[:limit]),
        }


class PaymentService:

    def create_order(self, user, contest: FantasyContest) -> dict:
        """
        Open a checkout order for a paid contest entry.

        Returns:
            {'orderId', 'amount', 'currency', 'keyId', 'paymentId'}
        """
        if contest.status != ContestStatus.OPEN:
            raise validation_error('Contest is not open for entries')
        if contest.is_full:
            raise conflict_error('Contest is full', code='CONTEST_FULL')
        if FantasyTeam.objects.filter(user=user, contest=contest).exists():
            raise conflict_error('You have already joined this contest', code='ALREADY_JOINED')
        if contest.entry_fee <= 0:
            raise validation_error('This contest is free to join')
        if Payment.objects.filter(user=user, contest=contest, status=PaymentStatus.PAID).exists():
            raise conflict_error('Entry fee already paid', code='ALREADY_PAID')

        timestamp = int(time.time() * 1000)
        receipt = f'order_{timestamp}_{user.id}_{contest.id}'[:40]

        if bypass_enabled():
            order_id = f'order_mock_{timestamp}'
        else:
            order = razorpay_client.create_order(
                contest.entry_fee,
                receipt,
                notes={'userId': str(user.id), 'contestId': str(contest.id)},
            )
            order_id = order['id']

        splits = calculate_payment_splits(
            contest.entry_fee,
            settings.PLATFORM_FEE_PERCENT,
            settings.MASTER_ADMIN_FEE_PERCENT,
        )
        payment = Payment.objects.create(
            user=user,
            contest=contest,
            tournament=contest.tournament,
            amount=contest.entry_fee,
            razorpay_order_id=order_id,
            tournament_admin_share=splits['tournamentAdmin'],
            master_admin_share=splits['masterAdmin'],
            prize_pool_share=splits['prizePool'],
            metadata={'receipt': receipt, 'bypass': bypass_enabled()},
        )

        logger.info(f'Created order {order_id} for user {user.id} contest {contest.id}')
        return {
            'paymentId': payment.id,
            'orderId': order_id,
            'amount': payment.amount,
            'currency': payment.currency,
            'keyId': settings.RAZORPAY_KEY_ID,
        }

    def _get_by_order(self, order_id: str) -> Payment:
        try:
            return Payment.objects.select_for_update().get(razorpay_order_id=order_id)
        except Payment.DoesNotExist:
            raise not_found_error('Payment')

    def _mark_paid(self, payment: Payment, payment_id: str, signature: str = '') -> bool:
        """Returns False when the payment was already settled."""
        if payment.status == PaymentStatus.PAID:
            return False

        payment.status = PaymentStatus.PAID
        payment.razorpay_payment_id = payment_id or payment.razorpay_payment_id
        payment.razorpay_signature = signature or payment.razorpay_signature
        payment.paid_at = timezone.now()
        payment.save()

        if payment.contest_id:
            FantasyContest.objects.filter(id=payment.contest_id).update(
                prize_pool=F('prize_pool') + payment.prize_pool_share
            )

        payment_pk = payment.id
        transaction.on_commit(lambda: self._send_receipt(payment_pk))
        logger.info(f'Payment {payment.razorpay_order_id} marked PAID')
        return True

    def _send_receipt(self, payment_id: int) -> None:
        from apps.notifications.tasks import send_payment_receipt
        send_payment_receipt.delay(payment_id)

    def verify_payment(self, user, order_id: str, payment_id: str, signature: str) -> Payment:
        with transaction.atomic():
            payment = self._get_by_order(order_id)
            if payment.user_id != user.id:
                raise not_found_error('Payment')
            if payment.status == PaymentStatus.PAID:
                return payment

            signature_ok = bypass_enabled() or razorpay_client.verify_payment_signature(
                order_id, payment_id, signature
            )
            if signature_ok:
                self._mark_paid(payment, payment_id, signature)
            else:
                payment.status = PaymentStatus.FAILED
                payment.metadata = {**payment.metadata, 'failureReason': 'Invalid signature'}
                payment.save(update_fields=['status', 'metadata', 'updated_at'])

        # raised after commit so the FAILED status is kept
        if not signature_ok:
            logger.warning(f'Signature mismatch for order {order_id}')
            raise AppError('Payment verification failed', 400, 'INVALID_SIGNATURE')
        return payment

    def handle_webhook(self, body: bytes, signature: str, event: dict) -> dict:
        if not bypass_enabled() and not razorpay_client.verify_webhook_signature(body, signature):
            raise AppError('Invalid webhook signature', 400, 'INVALID_SIGNATURE')

        event_type = event.get('event', '')
        entity = ((event.get('payload') or {}).get('payment') or {}).get('entity') or {}
        order_id = entity.get('order_id')

        if event_type not in ('payment.captured', 'payment.failed') or not order_id:
            logger.info(f'Ignoring webhook event {event_type}')
            return {'status': 'ignored', 'event': event_type}

        with transaction.atomic():
            try:
                payment = Payment.objects.select_for_update().get(razorpay_order_id=order_id)
            except Payment.DoesNotExist:
                logger.warning(f'Webhook for unknown order {order_id}')
                return {'status': 'ignored', 'event': event_type}

            if event_type == 'payment.captured':
                changed = self._mark_paid(payment, entity.get('id', ''))
            else:
                changed = payment.status == PaymentStatus.PENDING
                if changed:
                    payment.status = PaymentStatus.FAILED
                    payment.razorpay_payment_id = entity.get('id', '')
                    payment.metadata = {
                        **payment.metadata,
                        'failureReason': entity.get('error_description', ''),
                    }
                    payment.save()
                    logger.info(f'Payment {order_id} marked FAILED')

        return {'status': 'processed' if changed else 'duplicate', 'event': event_type}

    def user_payments(self, user):
        return Payment.objects.filter(user=user).select_related('contest', 'tournament')


class BankAccountService:

    def primary_account(self, user):
        return BankAccount.objects.filter(user=user, is_primary=True).first()

    def add_account(self, user, holder_name: str, account_number: str, ifsc_code: str,
                    bank_name: str = '', make_primary: bool = True) -> BankAccount:
        ifsc_code = (ifsc_code or '').strip().upper()
        account_number = (account_number or '').strip()
        if not IFSC_PATTERN.match(ifsc_code):
            raise validation_error('Invalid IFSC code', details={'ifscCode': ifsc_code})
        if not ACCOUNT_NUMBER_PATTERN.match(account_number):
            raise validation_error('Account number must be 9 to 18 digits')

        with transaction.atomic():
            has_primary = BankAccount.objects.filter(user=user, is_primary=True).exists()
            account = BankAccount(
                user=user,
                account_holder_name=holder_name,
                ifsc_code=ifsc_code,
                bank_name=bank_name,
                is_primary=make_primary or not has_primary,
            )
            account.set_account_number(account_number)
            if account.is_primary:
                BankAccount.objects.filter(user=user, is_primary=True).update(is_primary=False)
            account.save()

        logger.info(f'Bank account {account.id} added for user {user.id}')
        return account

    def set_primary(self, user, account_id) -> BankAccount:
        try:
            account = BankAccount.objects.get(id=account_id, user=user)
        except BankAccount.DoesNotExist:
            raise not_found_error('Bank account')
        with transaction.atomic():
            BankAccount.objects.filter(user=user, is_primary=True).exclude(id=account.id).update(is_primary=False)
            account.is_primary = True
            account.save(update_fields=['is_primary', 'updated_at'])
        return account


class PayoutService:

    def _ensure_fund_account(self, account: BankAccount) -> str:
        if account.razorpay_fund_account_id:
            return account.razorpay_fund_account_id

        user = account.user
        if not account.razorpay_contact_id:
            contact = razorpay_client.create_contact(
                account.account_holder_name, user.email, user.phone or '', reference_id=str(user.id)
            )
            account.razorpay_contact_id = contact['id']

        fund_account = razorpay_client.create_fund_account(
            account.razorpay_contact_id,
            account.account_holder_name,
            account.ifsc_code,
            account.account_number,
        )
        account.razorpay_fund_account_id = fund_account['id']
        account.save(update_fields=['razorpay_contact_id', 'razorpay_fund_account_id', 'updated_at'])
        return account.razorpay_fund_account_id

    def process(self, disbursement_id) -> PrizeDisbursement:
        try:
            disbursement = PrizeDisbursement.objects.select_related('user', 'contest').get(id=disbursement_id)
        except PrizeDisbursement.DoesNotExist:
            raise not_found_error('Disbursement')

        if disbursement.status not in (DisbursementStatus.PENDING, DisbursementStatus.FAILED):
            return disbursement

        account = bank_account_service.primary_account(disbursement.user)
        if account is None:
            disbursement.failure_reason = 'No primary bank account on file'
            disbursement.save(update_fields=['failure_reason', 'updated_at'])
            logger.info(f'Disbursement {disbursement.id} waiting for a bank account')
            return disbursement

        reference = f'disbursement:{disbursement.id}'

        if bypass_enabled():
            with transaction.atomic():
                wallet_service.debit(disbursement.user, disbursement.net_amount, 'Prize payout', reference)
                disbursement.status = DisbursementStatus.COMPLETED
                disbursement.payout_id = f'pout_mock_{int(time.time() * 1000)}'
                disbursement.failure_reason = ''
                disbursement.save()
            return disbursement

        try:
            fund_account_id = self._ensure_fund_account(account)
            payout = razorpay_client.create_payout(
                fund_account_id,
                disbursement.net_amount,
                reference_id=f'disb_{disbursement.id}',
                narration=f'Prize {disbursement.contest.name}',
            )
        except RazorpayError as e:
            disbursement.status = DisbursementStatus.FAILED
            disbursement.failure_reason = e.message[:255]
            disbursement.save(update_fields=['status', 'failure_reason', 'updated_at'])
            logger.error(f'Payout for disbursement {disbursement.id} failed: {e.message}')
            return disbursement

        disbursement.status = DisbursementStatus.PROCESSING
        disbursement.payout_id = payout['id']
        disbursement.failure_reason = ''
        disbursement.save(update_fields=['status', 'payout_id', 'failure_reason', 'updated_at'])
        logger.info(f'Payout {payout["id"]} created for disbursement {disbursement.id}')
        return disbursement

    def sync_status(self, disbursement: PrizeDisbursement) -> PrizeDisbursement:
        """Poll RazorpayX for a PROCESSING payout."""
        if disbursement.status != DisbursementStatus.PROCESSING or not disbursement.payout_id:
            return disbursement

        payout = razorpay_client.fetch_payout(disbursement.payout_id)
        status = payout.get('status')
        if status == 'processed':
            with transaction.atomic():
                wallet_service.debit(
                    disbursement.user, disbursement.net_amount, 'Prize payout', f'disbursement:{disbursement.id}'
                )
                disbursement.status = DisbursementStatus.COMPLETED
                disbursement.save(update_fields=['status', 'updated_at'])
        elif status in ('reversed', 'rejected', 'failed', 'cancelled'):
            disbursement.status = DisbursementStatus.FAILED
            disbursement.failure_reason = (payout.get('status_details') or {}).get('description', status)[:255]
            disbursement.save(update_fields=['status', 'failure_reason', 'updated_at'])
        return disbursement


# Create singleton instances
wallet_service = WalletService()
payment_service = PaymentService()
bank_account_service = BankAccountService()
payout_service = PayoutService()
