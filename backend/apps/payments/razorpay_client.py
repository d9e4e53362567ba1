"""
Razorpay REST client.

Thin wrapper over requests.Session with basic auth; covers checkout
orders, signature checks and RazorpayX payouts.
"""

import hashlib
import hmac
import logging
from decimal import Decimal
from typing import Optional

import requests
from django.conf import settings

from apps.core.exceptions import AppError

logger = logging.getLogger(__name__)

API_BASE_URL = 'https://api.razorpay.com/v1'


class RazorpayError(AppError):
    def __init__(self, message: str, status_code: int = 502, retryable: bool = True, details=None):
        super().__init__(message, status_code, 'PAYMENT_GATEWAY_ERROR', retryable, details)


def to_paise(amount) -> int:
    return int((Decimal(str(amount)) * 100).to_integral_value())


def _hmac_hex(secret: str, message: bytes) -> str:
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


class RazorpayClient:
    """
    Razorpay API client

    Args:
        key_id / key_secret: API credentials, default from settings
    """

    def __init__(self, key_id: Optional[str] = None, key_secret: Optional[str] = None,
                 base_url: str = API_BASE_URL, timeout: int = 10):
        self.key_id = key_id if key_id is not None else settings.RAZORPAY_KEY_ID
        self.key_secret = key_secret if key_secret is not None else settings.RAZORPAY_KEY_SECRET
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = requests.Session()
        self.session.auth = (self.key_id, self.key_secret)
        self.session.headers.update({
            'Content-Type': 'application/json'
        })

    def _request(self, method: str, path: str, **kwargs) -> dict:
        url = f'{self.base_url}{path}'
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f'Razorpay {method} {path} failed: {e}', exc_info=True)
            raise RazorpayError('Payment gateway is unreachable', status_code=503)

        if response.status_code >= 400:
            try:
                error = response.json().get('error', {})
            except ValueError:
                error = {}
            message = error.get('description') or f'Razorpay returned {response.status_code}'
            logger.error(f'Razorpay {method} {path} returned {response.status_code}: {message}')
            raise RazorpayError(
                message,
                status_code=502 if response.status_code >= 500 else 400,
                retryable=response.status_code >= 500,
                details={'gatewayCode': error.get('code')},
            )

        return response.json()

    # Checkout

    def create_order(self, amount, receipt: str, notes: Optional[dict] = None, currency: str = 'INR') -> dict:
        return self._request('POST', '/orders', json={
            'amount': to_paise(amount),
            'currency': currency,
            'receipt': receipt,
            'notes': notes or {},
        })

    def fetch_payment(self, payment_id: str) -> dict:
        return self._request('GET', f'/payments/{payment_id}')

    def verify_payment_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        expected = _hmac_hex(self.key_secret, f'{order_id}|{payment_id}'.encode())
        return hmac.compare_digest(expected, signature or '')

    def verify_webhook_signature(self, body: bytes, signature: str, secret: Optional[str] = None) -> bool:
        secret = secret if secret is not None else settings.RAZORPAY_WEBHOOK_SECRET
        if not secret or not signature:
            return False
        return hmac.compare_digest(_hmac_hex(secret, body), signature)

    # Payouts (RazorpayX)

    def create_contact(self, name: str, email: str, phone: str = '', reference_id: str = '') -> dict:
        return self._request('POST', '/contacts', json={
            'name': name,
            'email': email,
            'contact': phone,
            'type': 'customer',
            'reference_id': reference_id,
        })

    def create_fund_account(self, contact_id: str, holder_name: str, ifsc: str, account_number: str) -> dict:
        return self._request('POST', '/fund_accounts', json={
            'contact_id': contact_id,
            'account_type': 'bank_account',
            'bank_account': {
                'name': holder_name,
                'ifsc': ifsc,
                'account_number': account_number,
            },
        })

    def create_payout(self, fund_account_id: str, amount, reference_id: str, narration: str = '',
                      mode: str = 'IMPS') -> dict:
        return self._request('POST', '/payouts', json={
            'account_number': settings.RAZORPAYX_ACCOUNT_NUMBER,
            'fund_account_id': fund_account_id,
            'amount': to_paise(amount),
            'currency': 'INR',
            'mode': mode,
            'purpose': 'payout',
            'queue_if_low_balance': True,
            'reference_id': reference_id,
            'narration': narration[:30],
        })

    def fetch_payout(self, payout_id: str) -> dict:
        return self._request('GET', f'/payouts/{payout_id}')


razorpay_client = RazorpayClient()
