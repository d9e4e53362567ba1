"""
JWT Authentication middleware.

Attaches the decoded access token to request.user_jwt; views decide
whether authentication is required.
"""

import jwt
from django.conf import settings
from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin


PUBLIC_PATHS = [
    '/health',
    '/api/auth/register',
    '/api/auth/login',
    '/api/auth/refresh',
    '/api/auth/logout',
    '/api/auth/password-reset',
    '/api/payments/webhook',
    '/admin/',
]


def decode_access_token(token: str) -> dict:
    """
    Decode an access token into the request.user_jwt shape

    Raises:
        jwt.ExpiredSignatureError, jwt.InvalidTokenError
    """
    payload = jwt.decode(
        token,
        settings.JWT_SECRET_KEY,
        algorithms=[settings.JWT_ALGORITHM]
    )
    return {
        'user_id': payload.get('userId'),
        'email': payload.get('email'),
        'role': payload.get('role'),
    }


def _error(code: str, message: str, status: int) -> JsonResponse:
    return JsonResponse({
        'error': {
            'code': code,
            'message': message,
            'details': {},
            'retryable': False,
        }
    }, status=status)


class JWTAuthenticationMiddleware(MiddlewareMixin):
    """
    Middleware to authenticate JWT tokens
    """

    def process_request(self, request):
        """
        Extract and verify JWT token from Authorization header
        Attaches user info to request if token is valid
        """
        request.user_jwt = None

        # Skip authentication for public endpoints
        if any(request.path.startswith(path) for path in PUBLIC_PATHS):
            return None

        auth_header = request.META.get('HTTP_AUTHORIZATION', '')

        if not auth_header:
            # Anonymous request, views enforce their own requirements
            return None

        # Extract token (Bearer TOKEN format)
        parts = auth_header.split()
        if len(parts) != 2 or parts[0].lower() != 'bearer':
            return _error(
                'INVALID_TOKEN_FORMAT',
                'Authorization header must be in format: Bearer <token>',
                401,
            )

        try:
            request.user_jwt = decode_access_token(parts[1])

        except jwt.ExpiredSignatureError:
            return _error('TOKEN_EXPIRED', 'Access token has expired', 403)

        except jwt.InvalidTokenError:
            return _error('INVALID_TOKEN', 'Invalid access token', 403)

        return None
