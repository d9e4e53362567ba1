"""
Django admin configuration for payments app.
"""

from django.contrib import admin
from .models import BankAccount, Payment, Wallet, WalletTransaction


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    """Admin interface for Payment model"""
    list_display = ('razorpay_order_id', 'user', 'contest', 'amount', 'status', 'paid_at', 'created_at')
    search_fields = ('razorpay_order_id', 'razorpay_payment_id', 'user__email')
    list_filter = ('status', 'currency')
    readonly_fields = ('razorpay_signature', 'created_at', 'updated_at')
    ordering = ('-created_at',)


@admin.register(BankAccount)
class BankAccountAdmin(admin.ModelAdmin):
    list_display = ('account_holder_name', 'user', 'account_number_last4', 'ifsc_code', 'is_primary')
    search_fields = ('account_holder_name', 'user__email', 'ifsc_code')
    exclude = ('account_number_encrypted',)


class WalletTransactionInline(admin.TabularInline):
    model = WalletTransaction
    extra = 0
    readonly_fields = ('amount', 'type', 'reason', 'reference', 'created_at')


@admin.register(Wallet)
class WalletAdmin(admin.ModelAdmin):
    list_display = ('user', 'balance', 'updated_at')
    search_fields = ('user__email',)
    inlines = [WalletTransactionInline]
