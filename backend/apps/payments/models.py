"""
Payment models.

Tables: payments, bank_accounts, wallets, wallet_transactions
"""

from decimal import Decimal
from django.db import models

from apps.core.utils.crypto import decrypt, encrypt, mask


class PaymentStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    PAID = 'PAID', 'Paid'
    FAILED = 'FAILED', 'Failed'
    REFUNDED = 'REFUNDED', 'Refunded'


class Payment(models.Model):
    """Contest entry payment collected through Razorpay checkout"""
    user = models.ForeignKey('authentication.User', on_delete=models.CASCADE, related_name='payments')
    contest = models.ForeignKey(
        'fantasy.FantasyContest', on_delete=models.SET_NULL, null=True, blank=True, related_name='payments'
    )
    tournament = models.ForeignKey(
        'tournaments.Tournament', on_delete=models.SET_NULL, null=True, blank=True, related_name='payments'
    )
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default='INR')
    status = models.CharField(max_length=10, choices=PaymentStatus.choices, default=PaymentStatus.PENDING)
    razorpay_order_id = models.CharField(max_length=100, unique=True)
    razorpay_payment_id = models.CharField(max_length=100, blank=True, default='')
    razorpay_signature = models.CharField(max_length=255, blank=True, default='')
    tournament_admin_share = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    master_admin_share = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    prize_pool_share = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    metadata = models.JSONField(default=dict, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'payments'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'contest', 'status'], name='payments_user_contest_idx'),
        ]

    def __str__(self):
        return f'{self.razorpay_order_id} ({self.status})'


class BankAccount(models.Model):
    """Payout destination. The account number is stored encrypted."""
    user = models.ForeignKey('authentication.User', on_delete=models.CASCADE, related_name='bank_accounts')
    account_holder_name = models.CharField(max_length=150)
    account_number_encrypted = models.TextField()
    account_number_last4 = models.CharField(max_length=4)
    ifsc_code = models.CharField(max_length=11)
    bank_name = models.CharField(max_length=150, blank=True, default='')
    is_primary = models.BooleanField(default=False)
    razorpay_contact_id = models.CharField(max_length=100, blank=True, default='')
    razorpay_fund_account_id = models.CharField(max_length=100, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'bank_accounts'
        ordering = ['-is_primary', '-created_at']

    def __str__(self):
        return f'{self.account_holder_name} {self.masked_account_number}'

    def set_account_number(self, account_number: str) -> None:
        self.account_number_encrypted = encrypt(account_number)
        self.account_number_last4 = account_number[-4:]

    @property
    def account_number(self) -> str:
        return decrypt(self.account_number_encrypted)

    @property
    def masked_account_number(self) -> str:
        return mask(self.account_number)


class Wallet(models.Model):
    user = models.OneToOneField('authentication.User', on_delete=models.CASCADE, related_name='wallet')
    balance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'wallets'

    def __str__(self):
        return f'Wallet {self.user_id}: {self.balance}'


class TransactionType(models.TextChoices):
    CREDIT = 'CREDIT', 'Credit'
    DEBIT = 'DEBIT', 'Debit'


class WalletTransaction(models.Model):
    wallet = models.ForeignKey(Wallet, on_delete=models.CASCADE, related_name='transactions')
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    type = models.CharField(max_length=6, choices=TransactionType.choices)
    reason = models.CharField(max_length=255)
    reference = models.CharField(max_length=100, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'wallet_transactions'
        ordering = ['-created_at', '-id']
