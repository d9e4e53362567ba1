"""
WebSocket authentication middleware.
"""

import jwt
from channels.middleware import BaseMiddleware
from django.conf import settings
from urllib.parse import parse_qs


class JWTAuthMiddleware(BaseMiddleware):
    """
    Reads ?token=<access token> and fills scope['user'] with the JWT
    claims. Missing or invalid tokens leave the connection anonymous.
    """

    async def __call__(self, scope, receive, send):
        query_string = scope.get('query_string', b'').decode()
        query_params = parse_qs(query_string)

        token = query_params.get('token', [None])[0]
        scope['user'] = None

        if token:
            try:
                payload = jwt.decode(
                    token,
                    settings.JWT_SECRET_KEY,
                    algorithms=[settings.JWT_ALGORITHM]
                )
                scope['user'] = {
                    'user_id': payload.get('userId'),
                    'email': payload.get('email'),
                    'role': payload.get('role'),
                    'is_authenticated': True,
                }
            except jwt.InvalidTokenError:
                scope['user'] = None

        return await super().__call__(scope, receive, send)
