"""
Authentication views (controllers).
"""

from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import AllowAny

from apps.core.permissions import Role, current_user, require_roles
from apps.core.utils.pagination import paginate, parse_page_params
from .models import User
from .services import auth_service
from .serializers import (
    RegisterSerializer,
    LoginSerializer,
    RefreshTokenSerializer,
    PasswordResetRequestSerializer,
    PasswordResetConfirmSerializer,
    ChangePasswordSerializer,
    RejectUserSerializer,
    ChangeRoleSerializer,
    UserResponseSerializer,
)


class RegisterView(APIView):
    """
    Register a new user

    POST /api/auth/register
    Accounts that need approval get no tokens until a master admin approves them.
    """
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        user = auth_service.register(
            data['email'],
            data['password'],
            name=data['name'],
            role=data['role'],
            phone=data['phone'],
        )

        body = {'user': UserResponseSerializer(user).data}
        if user.is_approved:
            body['tokens'] = auth_service.generate_tokens(user)
        else:
            body['message'] = 'Registration received. Your account is pending approval.'

        return Response(body, status=status.HTTP_201_CREATED)


class LoginView(APIView):
    """
    POST /api/auth/login
    """
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user, tokens = auth_service.login(
            serializer.validated_data['email'],
            serializer.validated_data['password'],
        )

        return Response({
            'user': UserResponseSerializer(user).data,
            'tokens': tokens,
        }, status=status.HTTP_200_OK)


class RefreshTokenView(APIView):
    """
    POST /api/auth/refresh
    """
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = RefreshTokenSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        tokens = auth_service.refresh_access_token(serializer.validated_data['refreshToken'])

        return Response({'tokens': tokens}, status=status.HTTP_200_OK)


class LogoutView(APIView):
    """
    POST /api/auth/logout
    """
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = RefreshTokenSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        auth_service.logout(serializer.validated_data['refreshToken'])

        return Response({'message': 'Logged out successfully'}, status=status.HTTP_200_OK)


class CurrentUserView(APIView):
    """
    GET /api/auth/me
    """
    permission_classes = [AllowAny]  # Check JWT in middleware instead

    def get(self, request):
        user = current_user(request)
        return Response({'user': UserResponseSerializer(user).data})


class PasswordResetRequestView(APIView):
    """
    POST /api/auth/password-reset
    Always 200 so the endpoint does not reveal which emails are registered.
    """
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = PasswordResetRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        auth_service.request_password_reset(serializer.validated_data['email'])

        return Response({
            'message': 'If the account exists, a reset link has been sent.'
        })


class PasswordResetConfirmView(APIView):
    """
    POST /api/auth/password-reset/confirm
    """
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = PasswordResetConfirmSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        auth_service.reset_password(
            serializer.validated_data['token'],
            serializer.validated_data['password'],
        )

        return Response({'message': 'Password has been reset. Please log in again.'})


class ChangePasswordView(APIView):
    """
    POST /api/auth/change-password
    """
    permission_classes = [AllowAny]

    def post(self, request):
        user = current_user(request)
        serializer = ChangePasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        auth_service.change_password(
            user,
            serializer.validated_data['currentPassword'],
            serializer.validated_data['newPassword'],
        )

        return Response({'message': 'Password changed. Please log in again.'})


class UserListView(APIView):
    """
    GET /api/auth/users?role=&approvalStatus=&page=&limit=
    Master admin only.
    """
    permission_classes = [AllowAny]

    def get(self, request):
        require_roles(request, Role.MASTER_ADMIN)

        users = User.objects.all()
        role = request.query_params.get('role')
        if role:
            users = users.filter(role=role)
        approval_status = request.query_params.get('approvalStatus')
        if approval_status:
            users = users.filter(approval_status=approval_status)

        page, limit = parse_page_params(request.query_params)
        items, meta = paginate(users, page, limit)

        return Response({
            'users': UserResponseSerializer(items, many=True).data,
            'pagination': meta,
        })


class ApproveUserView(APIView):
    """
    POST /api/auth/users/<id>/approve
    """
    permission_classes = [AllowAny]

    def post(self, request, user_id):
        admin = require_roles(request, Role.MASTER_ADMIN)
        user = auth_service.approve_user(admin, user_id)
        return Response({'user': UserResponseSerializer(user).data})


class RejectUserView(APIView):
    """
    POST /api/auth/users/<id>/reject
    """
    permission_classes = [AllowAny]

    def post(self, request, user_id):
        admin = require_roles(request, Role.MASTER_ADMIN)
        serializer = RejectUserSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = auth_service.reject_user(admin, user_id, serializer.validated_data['reason'])
        return Response({'user': UserResponseSerializer(user).data})


class ChangeRoleView(APIView):
    """
    PATCH /api/auth/users/<id>/role
    """
    permission_classes = [AllowAny]

    def patch(self, request, user_id):
        admin = require_roles(request, Role.MASTER_ADMIN)
        serializer = ChangeRoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = auth_service.change_role(admin, user_id, serializer.validated_data['role'])
        return Response({'user': UserResponseSerializer(user).data})
