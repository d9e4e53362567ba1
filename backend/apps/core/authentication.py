"""
DRF JWT Authentication class.

Integrates JWT authentication with Django Rest Framework.
"""

from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed
import jwt

from apps.core.middleware.auth import PUBLIC_PATHS, decode_access_token


class JWTUser(dict):
    """Token payload exposed to DRF as request.user"""

    @property
    def is_authenticated(self):
        return True

    @property
    def role(self):
        return self.get('role')


class JWTAuthentication(BaseAuthentication):
    """
    JWT Authentication for Django Rest Framework
    """

    def authenticate(self, request):
        """
        Authenticate the request using JWT token

        Returns:
            Tuple of (user_info, None) if authenticated
            None if no authentication attempted

        Raises:
            AuthenticationFailed if authentication fails
        """
        # The middleware already decoded the header
        user_jwt = getattr(request._request, 'user_jwt', None)
        if user_jwt:
            return (JWTUser(user_jwt), None)

        if any(request.path.startswith(path) for path in PUBLIC_PATHS):
            return None

        auth_header = request.META.get('HTTP_AUTHORIZATION', '')

        if not auth_header:
            return None

        parts = auth_header.split()
        if len(parts) != 2 or parts[0].lower() != 'bearer':
            raise AuthenticationFailed('Authorization header must be in format: Bearer <token>')

        try:
            return (JWTUser(decode_access_token(parts[1])), None)

        except jwt.ExpiredSignatureError:
            raise AuthenticationFailed('Access token has expired')

        except jwt.InvalidTokenError:
            raise AuthenticationFailed('Invalid access token')

    def authenticate_header(self, request):
        """
        Return the authentication header to use for 401 responses
        """
        return 'Bearer realm="api"'
