"""
Authentication serializers for request/response validation.
"""

from rest_framework import serializers

from apps.core.permissions import Role
from .models import ApprovalStatus


class RegisterSerializer(serializers.Serializer):
    email = serializers.EmailField(required=True)
    password = serializers.CharField(required=True, min_length=8, write_only=True)
    name = serializers.CharField(required=False, allow_blank=True, max_length=150, default='')
    phone = serializers.CharField(required=False, allow_blank=True, max_length=20, default='')
    role = serializers.ChoiceField(choices=Role.choices, required=False, default=Role.USER)


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField(required=True)
    password = serializers.CharField(required=True, write_only=True)


class RefreshTokenSerializer(serializers.Serializer):
    refreshToken = serializers.CharField(required=True)


class PasswordResetRequestSerializer(serializers.Serializer):
    email = serializers.EmailField(required=True)


class PasswordResetConfirmSerializer(serializers.Serializer):
    token = serializers.CharField(required=True)
    password = serializers.CharField(required=True, min_length=8, write_only=True)


class ChangePasswordSerializer(serializers.Serializer):
    currentPassword = serializers.CharField(required=True, write_only=True)
    newPassword = serializers.CharField(required=True, min_length=8, write_only=True)


class RejectUserSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255, default='')


class ChangeRoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=Role.choices)


class UserResponseSerializer(serializers.Serializer):
    """
    Serializer for user response data
    """
    id = serializers.UUIDField()
    email = serializers.EmailField()
    name = serializers.CharField()
    phone = serializers.CharField()
    role = serializers.CharField()
    approvalStatus = serializers.ChoiceField(source='approval_status', choices=ApprovalStatus.choices)
    isActive = serializers.BooleanField(source='is_active')
    createdAt = serializers.DateTimeField(source='created_at')
