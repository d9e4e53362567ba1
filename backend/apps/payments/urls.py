"""
Payment URL configuration.
"""

from django.urls import path
from .views import (
    BankAccountView,
    CreateOrderView,
    MyPaymentsView,
    RazorpayWebhookView,
    SetPrimaryBankAccountView,
    VerifyPaymentView,
    WalletView,
)

app_name = 'payments'

urlpatterns = [
    # GET /api/payments
    path('payments', MyPaymentsView.as_view(), name='my_payments'),

    # POST /api/payments/create-order
    path('payments/create-order', CreateOrderView.as_view(), name='create_order'),

    # POST /api/payments/verify
    path('payments/verify', VerifyPaymentView.as_view(), name='verify'),

    # POST /api/payments/webhook
    # Razorpay events, no JWT
    path('payments/webhook', RazorpayWebhookView.as_view(), name='webhook'),

    # GET/POST /api/payments/bank-account
    path('payments/bank-account', BankAccountView.as_view(), name='bank_account'),

    # POST /api/payments/bank-account/:id/primary
    path('payments/bank-account/<int:account_id>/primary', SetPrimaryBankAccountView.as_view(), name='bank_account_primary'),

    # GET /api/payments/wallet
    path('payments/wallet', WalletView.as_view(), name='wallet'),
]
