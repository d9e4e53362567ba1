"""
Payment serializers.
"""

from rest_framework import serializers

from .models import BankAccount, Payment, Wallet, WalletTransaction


class CreateOrderSerializer(serializers.Serializer):
    contestId = serializers.IntegerField()


class VerifyPaymentSerializer(serializers.Serializer):
    razorpayOrderId = serializers.CharField(max_length=100)
    razorpayPaymentId = serializers.CharField(max_length=100)
    razorpaySignature = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')


class PaymentSerializer(serializers.ModelSerializer):
    contestId = serializers.IntegerField(source='contest_id', read_only=True)
    tournamentId = serializers.IntegerField(source='tournament_id', read_only=True)
    orderId = serializers.CharField(source='razorpay_order_id', read_only=True)
    paymentId = serializers.CharField(source='razorpay_payment_id', read_only=True)
    prizePoolShare = serializers.DecimalField(
        source='prize_pool_share', max_digits=10, decimal_places=2, read_only=True
    )
    paidAt = serializers.DateTimeField(source='paid_at', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Payment
        fields = [
            'id', 'contestId', 'tournamentId', 'amount', 'currency', 'status',
            'orderId', 'paymentId', 'prizePoolShare', 'paidAt', 'createdAt',
        ]


class BankAccountInputSerializer(serializers.Serializer):
    accountHolderName = serializers.CharField(max_length=150)
    accountNumber = serializers.CharField(max_length=18)
    ifscCode = serializers.CharField(max_length=11)
    bankName = serializers.CharField(max_length=150, required=False, allow_blank=True, default='')
    isPrimary = serializers.BooleanField(required=False, default=True)


class BankAccountSerializer(serializers.ModelSerializer):
    accountHolderName = serializers.CharField(source='account_holder_name', read_only=True)
    accountNumber = serializers.CharField(source='masked_account_number', read_only=True)
    ifscCode = serializers.CharField(source='ifsc_code', read_only=True)
    bankName = serializers.CharField(source='bank_name', read_only=True)
    isPrimary = serializers.BooleanField(source='is_primary', read_only=True)

    class Meta:
        model = BankAccount
        fields = ['id', 'accountHolderName', 'accountNumber', 'ifscCode', 'bankName', 'isPrimary']


class WalletTransactionSerializer(serializers.ModelSerializer):
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = WalletTransaction
        fields = ['id', 'amount', 'type', 'reason', 'reference', 'createdAt']


class WalletSerializer(serializers.ModelSerializer):
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Wallet
        fields = ['balance', 'updatedAt']
