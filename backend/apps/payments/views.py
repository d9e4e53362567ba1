"""
Payment views.
"""

import json
import logging
from django.utils.decorators import method_decorator
from django.views.decorators.csrf import csrf_exempt
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.exceptions import validation_error
from apps.core.permissions import current_user
from apps.core.utils.pagination import paginate, parse_page_params
from apps.fantasy.services import fantasy_service
from .serializers import (
    BankAccountInputSerializer,
    BankAccountSerializer,
    CreateOrderSerializer,
    PaymentSerializer,
    VerifyPaymentSerializer,
    WalletSerializer,
    WalletTransactionSerializer,
)
from .services import bank_account_service, payment_service, wallet_service

logger = logging.getLogger(__name__)


class CreateOrderView(APIView):
    """
    POST /api/payments/create-order
    Open a Razorpay order for a contest entry fee.
    """
    permission_classes = [AllowAny]

    def post(self, request):
        user = current_user(request)
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        contest = fantasy_service.get_contest(serializer.validated_data['contestId'])
        order = payment_service.create_order(user, contest)
        order['amount'] = str(order['amount'])
        return Response(order, status=status.HTTP_201_CREATED)


class VerifyPaymentView(APIView):
    """
    POST /api/payments/verify
    """
    permission_classes = [AllowAny]

    def post(self, request):
        user = current_user(request)
        serializer = VerifyPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        payment = payment_service.verify_payment(
            user, data['razorpayOrderId'], data['razorpayPaymentId'], data['razorpaySignature']
        )
        return Response({'payment': PaymentSerializer(payment).data})


@method_decorator(csrf_exempt, name='dispatch')
class RazorpayWebhookView(APIView):
    """
    Handle Razorpay webhook

    POST /api/payments/webhook
    Signed with X-Razorpay-Signature over the raw body.
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        body = request.body
        try:
            event = json.loads(body or b'{}')
        except ValueError:
            raise validation_error('Invalid JSON payload')

        result = payment_service.handle_webhook(
            body, request.headers.get('X-Razorpay-Signature', ''), event
        )
        return Response(result, status=status.HTTP_200_OK)


class MyPaymentsView(APIView):
    """
    GET /api/payments
    """
    permission_classes = [AllowAny]

    def get(self, request):
        user = current_user(request)
        page, limit = parse_page_params(request.query_params)
        items, meta = paginate(payment_service.user_payments(user), page, limit)
        return Response({'payments': PaymentSerializer(items, many=True).data, 'pagination': meta})


class BankAccountView(APIView):
    """
    GET  /api/payments/bank-account
    POST /api/payments/bank-account
    """
    permission_classes = [AllowAny]

    def get(self, request):
        user = current_user(request)
        account = bank_account_service.primary_account(user)
        return Response({'bankAccount': BankAccountSerializer(account).data if account else None})

    def post(self, request):
        user = current_user(request)
        serializer = BankAccountInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        account = bank_account_service.add_account(
            user,
            data['accountHolderName'],
            data['accountNumber'],
            data['ifscCode'],
            bank_name=data['bankName'],
            make_primary=data['isPrimary'],
        )
        return Response({'bankAccount': BankAccountSerializer(account).data}, status=status.HTTP_201_CREATED)


class SetPrimaryBankAccountView(APIView):
    """
    POST /api/payments/bank-account/:id/primary
    """
    permission_classes = [AllowAny]

    def post(self, request, account_id):
        user = current_user(request)
        account = bank_account_service.set_primary(user, account_id)
        return Response({'bankAccount': BankAccountSerializer(account).data})


class WalletView(APIView):
    """
    GET /api/payments/wallet
    """
    permission_classes = [AllowAny]

    def get(self, request):
        user = current_user(request)
        summary = wallet_service.summary(user)
        return Response({
            'wallet': WalletSerializer(summary['wallet']).data,
            'transactions': WalletTransactionSerializer(summary['transactions'], many=True).data,
        })
