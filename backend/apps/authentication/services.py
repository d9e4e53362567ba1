"""
Authentication service.

Registration, login, JWT issuing/rotation, password reset and account
approval.
"""

import logging
import secrets
import jwt
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.core.exceptions import (
    AppError,
    authorization_error,
    conflict_error,
    not_found_error,
    validation_error,
)
from apps.core.permissions import Role
from apps.core.utils.crypto import hash_text
from apps.notifications import tasks as notification_tasks
from .models import ApprovalStatus, PasswordResetToken, RefreshToken, User

logger = logging.getLogger(__name__)

# Roles that need a master admin's approval before they can log in
ROLES_REQUIRING_APPROVAL = (Role.REFEREE, Role.TOURNAMENT_ADMIN)
SELF_REGISTER_ROLES = (Role.USER, Role.PLAYER, Role.REFEREE, Role.TOURNAMENT_ADMIN)


class AuthService:
    """
    Authentication service for user registration, login, and token management
    """

    def register(self, email: str, password: str, name: str = '', role: str = Role.USER,
                 phone: str = '') -> User:
        """
        Register a new user

        Args:
            email: User's email address
            password: User's password (plain text)
            name: Display name
            role: Requested role; REFEREE and TOURNAMENT_ADMIN start PENDING

        Returns:
            User instance

        Raises:
            AppError: If validation fails or user already exists
        """
        if not email or not password:
            raise validation_error('Email and password are required')

        if len(password) < 8:
            raise validation_error('Password must be at least 8 characters long')

        if role not in SELF_REGISTER_ROLES:
            raise validation_error(f'Role {role} cannot be self-registered')

        if User.objects.filter(email=email.lower()).exists():
            raise conflict_error('User with this email already exists', code='USER_EXISTS')

        approval = ApprovalStatus.PENDING if role in ROLES_REQUIRING_APPROVAL else ApprovalStatus.APPROVED

        user = User(
            email=email.lower(),
            name=name,
            phone=phone,
            role=role,
            approval_status=approval,
            approved_at=timezone.now() if approval == ApprovalStatus.APPROVED else None,
        )
        user.set_password(password)
        user.save()

        logger.info(f'Registered user {user.id} with role {role} ({approval})')
        return user

    def login(self, email: str, password: str) -> tuple:
        """
        Login user and generate tokens

        Returns:
            Tuple of (User instance, tokens dict)

        Raises:
            AppError: If credentials are invalid or the account is not approved
        """
        if not email or not password:
            raise validation_error('Email and password are required')

        try:
            user = User.objects.get(email=email.lower())
        except User.DoesNotExist:
            raise AppError('Invalid email or password', 401, 'AUTHENTICATION_FAILED')

        if not user.check_password(password):
            raise AppError('Invalid email or password', 401, 'AUTHENTICATION_FAILED')

        if not user.is_active:
            raise AppError('Account is disabled', 403, 'ACCOUNT_DISABLED')

        if user.approval_status != ApprovalStatus.APPROVED:
            message = (
                'Account is pending approval' if user.approval_status == ApprovalStatus.PENDING
                else 'Account registration was rejected'
            )
            raise AppError(
                message,
                403,
                'ACCOUNT_NOT_APPROVED',
                details={'approvalStatus': user.approval_status},
            )

        return user, self.generate_tokens(user)

    def generate_tokens(self, user: User) -> dict:
        """
        Generate access and refresh tokens and persist the refresh token

        Returns:
            Dict with accessToken and refreshToken
        """
        now = timezone.now()
        payload = {
            'userId': str(user.id),
            'email': user.email,
            'role': user.role,
        }

        access_token = jwt.encode(
            {
                **payload,
                'exp': now + settings.JWT_ACCESS_TOKEN_LIFETIME,
                'iat': now,
            },
            settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM
        )

        # jti keeps refresh tokens unique even when issued in the same second
        refresh_token_str = jwt.encode(
            {
                **payload,
                'exp': now + settings.JWT_REFRESH_TOKEN_LIFETIME,
                'iat': now,
                'jti': secrets.token_hex(8),
            },
            settings.JWT_REFRESH_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM
        )

        RefreshToken.objects.create(
            user=user,
            token=refresh_token_str,
            expires_at=now + settings.JWT_REFRESH_TOKEN_LIFETIME
        )

        return {
            'accessToken': access_token,
            'refreshToken': refresh_token_str
        }

    def refresh_access_token(self, refresh_token: str) -> dict:
        """
        Rotate a refresh token: issue new tokens and revoke the old one

        Raises:
            AppError(401): If token is invalid, expired, or revoked
        """
        try:
            jwt.decode(
                refresh_token,
                settings.JWT_REFRESH_SECRET_KEY,
                algorithms=[settings.JWT_ALGORITHM]
            )
        except jwt.ExpiredSignatureError:
            raise AppError('Refresh token has expired', 401, 'TOKEN_REFRESH_FAILED')
        except jwt.InvalidTokenError:
            raise AppError('Invalid refresh token', 401, 'TOKEN_REFRESH_FAILED')

        with transaction.atomic():
            try:
                token_record = RefreshToken.objects.select_for_update().select_related('user').get(
                    token=refresh_token
                )
            except RefreshToken.DoesNotExist:
                raise AppError('Invalid refresh token', 401, 'TOKEN_REFRESH_FAILED')

            if token_record.is_revoked:
                raise AppError('Refresh token has been revoked', 401, 'TOKEN_REFRESH_FAILED')

            if token_record.is_expired:
                raise AppError('Refresh token has expired', 401, 'TOKEN_REFRESH_FAILED')

            if not token_record.user.is_active:
                raise AppError('Account is disabled', 403, 'ACCOUNT_DISABLED')

            new_tokens = self.generate_tokens(token_record.user)

            token_record.revoked_at = timezone.now()
            token_record.save(update_fields=['revoked_at'])

        return new_tokens

    def logout(self, refresh_token: str) -> None:
        """Revoke a refresh token"""
        RefreshToken.objects.filter(token=refresh_token, revoked_at__isnull=True).update(
            revoked_at=timezone.now()
        )

    def verify_access_token(self, token: str) -> dict:
        """
        Verify access token

        Returns:
            Dict with userId, email and role

        Raises:
            ValueError: If token is invalid or expired
        """
        try:
            payload = jwt.decode(
                token,
                settings.JWT_SECRET_KEY,
                algorithms=[settings.JWT_ALGORITHM]
            )
        except jwt.ExpiredSignatureError:
            raise ValueError('Access token has expired')
        except jwt.InvalidTokenError:
            raise ValueError('Invalid access token')

        return {
            'userId': payload['userId'],
            'email': payload['email'],
            'role': payload.get('role'),
        }

    def revoke_all_user_tokens(self, user_id) -> int:
        """Revoke all refresh tokens for a user; returns the number revoked"""
        return RefreshToken.objects.filter(
            user_id=user_id,
            revoked_at__isnull=True
        ).update(revoked_at=timezone.now())

    # Password management

    def request_password_reset(self, email: str) -> None:
        """
        Email a reset link if the account exists. Silent otherwise so the
        endpoint cannot be used to probe for registered addresses.
        """
        user = User.objects.filter(email=(email or '').lower(), is_active=True).first()
        if user is None:
            logger.info('Password reset requested for unknown email')
            return

        raw_token = secrets.token_urlsafe(32)
        PasswordResetToken.objects.create(
            user=user,
            token_hash=hash_text(raw_token),
            expires_at=timezone.now() + settings.PASSWORD_RESET_TOKEN_LIFETIME,
        )

        notification_tasks.send_password_reset_email.delay(str(user.id), raw_token)

    def reset_password(self, token: str, new_password: str) -> User:
        """
        Consume a reset token and set a new password.
        All refresh tokens of the user are revoked.
        """
        if not new_password or len(new_password) < 8:
            raise validation_error('Password must be at least 8 characters long')

        with transaction.atomic():
            record = (
                PasswordResetToken.objects.select_for_update()
                .select_related('user')
                .filter(token_hash=hash_text(token or ''))
                .first()
            )
            if record is None or not record.is_usable:
                raise validation_error('Reset token is invalid or has expired')

            user = record.user
            user.set_password(new_password)
            user.save(update_fields=['password_hash', 'updated_at'])

            record.used_at = timezone.now()
            record.save(update_fields=['used_at'])

            self.revoke_all_user_tokens(user.id)

        logger.info(f'Password reset completed for user {user.id}')
        return user

    def change_password(self, user: User, current_password: str, new_password: str) -> None:
        if not user.check_password(current_password):
            raise validation_error('Current password is incorrect')
        if not new_password or len(new_password) < 8:
            raise validation_error('Password must be at least 8 characters long')

        user.set_password(new_password)
        user.save(update_fields=['password_hash', 'updated_at'])
        self.revoke_all_user_tokens(user.id)

    # Account approval (master admin)

    def _get_user(self, user_id) -> User:
        try:
            return User.objects.get(id=user_id)
        except (User.DoesNotExist, ValueError):
            raise not_found_error('User')

    def approve_user(self, admin: User, user_id) -> User:
        if admin.role != Role.MASTER_ADMIN:
            raise authorization_error('Only a master admin can approve accounts')

        user = self._get_user(user_id)
        user.approval_status = ApprovalStatus.APPROVED
        user.approved_at = timezone.now()
        user.rejection_reason = ''
        user.save(update_fields=['approval_status', 'approved_at', 'rejection_reason', 'updated_at'])

        logger.info(f'User {user.id} approved by {admin.id}')
        notification_tasks.send_account_status_email.delay(str(user.id))
        return user

    def reject_user(self, admin: User, user_id, reason: str = '') -> User:
        if admin.role != Role.MASTER_ADMIN:
            raise authorization_error('Only a master admin can reject accounts')

        user = self._get_user(user_id)
        if user.id == admin.id:
            raise validation_error('You cannot reject your own account')

        user.approval_status = ApprovalStatus.REJECTED
        user.rejection_reason = reason[:255]
        user.approved_at = None
        user.save(update_fields=['approval_status', 'rejection_reason', 'approved_at', 'updated_at'])
        self.revoke_all_user_tokens(user.id)

        logger.info(f'User {user.id} rejected by {admin.id}')
        notification_tasks.send_account_status_email.delay(str(user.id))
        return user

    def change_role(self, admin: User, user_id, role: str) -> User:
        if admin.role != Role.MASTER_ADMIN:
            raise authorization_error('Only a master admin can change roles')
        if role not in Role.values:
            raise validation_error(f'Unknown role {role}')

        user = self._get_user(user_id)
        user.role = role
        user.save(update_fields=['role', 'updated_at'])
        # Existing tokens carry the old role
        self.revoke_all_user_tokens(user.id)
        return user

    def create_master_admin(self, email: str, password: str, name: str = '') -> User:
        """Bootstrap path used by the create_master_admin management command"""
        if User.objects.filter(email=email.lower()).exists():
            raise conflict_error('User with this email already exists', code='USER_EXISTS')

        user = User(
            email=email.lower(),
            name=name,
            role=Role.MASTER_ADMIN,
            approval_status=ApprovalStatus.APPROVED,
            approved_at=timezone.now(),
        )
        user.set_password(password)
        user.save()
        return user


# Create singleton instance
auth_service = AuthService()
