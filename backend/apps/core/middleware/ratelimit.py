"""
Rate limiting middleware using the Django cache.
"""

from datetime import datetime, timezone
from django.conf import settings
from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin

from apps.core.services.rate_limiter import (
    RateLimitConfig,
    RateLimitExceededError,
    SlidingWindowRateLimiter,
)


def _rate_limited_response(result, window_seconds: int) -> JsonResponse:
    response = JsonResponse({
        'error': {
            'code': 'RATE_LIMIT_EXCEEDED',
            'message': 'Rate limit exceeded. Please try again later.',
            'retryable': True,
            'details': {
                'limit': result.limit,
                'windowMs': window_seconds * 1000,
                'retryAfter': result.retry_after,
            }
        }
    }, status=429)
    response['Retry-After'] = str(result.retry_after)
    _set_headers(response, result)
    return response


def _set_headers(response, result) -> None:
    response['X-RateLimit-Limit'] = str(result.limit)
    response['X-RateLimit-Remaining'] = str(result.remaining)
    response['X-RateLimit-Reset'] = datetime.fromtimestamp(
        result.reset_at_ms / 1000, tz=timezone.utc
    ).isoformat()


def get_client_ip(request) -> str:
    """Client IP, honouring the first X-Forwarded-For hop set by the proxy"""
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR', 'unknown')


class RateLimitMiddleware(MiddlewareMixin):
    """
    Per-user rate limit for authenticated API traffic.
    Default: 100 requests per minute per user
    """

    skip_paths = [
        '/health',
        '/api/auth/',
        '/api/payments/webhook',
        '/admin/',
    ]

    # Money-moving endpoints share a tighter per-user budget
    strict_paths = [
        '/api/payments/create-order',
        '/api/payments/verify',
        '/api/payments/bank-account',
    ]

    def __init__(self, get_response):
        super().__init__(get_response)
        self.config = RateLimitConfig(
            max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
            window_seconds=settings.RATE_LIMIT_WINDOW,
            key_prefix='ratelimit:api',
        )
        self.limiter = SlidingWindowRateLimiter(self.config)
        self.strict_config = RateLimitConfig(
            max_requests=settings.RATE_LIMIT_STRICT_MAX_REQUESTS,
            window_seconds=settings.RATE_LIMIT_WINDOW,
            key_prefix='ratelimit:strict',
        )
        self.strict_limiter = SlidingWindowRateLimiter(self.strict_config)

    def get_key(self, request):
        user_jwt = getattr(request, 'user_jwt', None)
        if not user_jwt or not user_jwt.get('user_id'):
            return None
        return user_jwt['user_id']

    def process_request(self, request):
        """
        Check rate limit before processing request
        """
        if any(request.path.startswith(path) for path in self.skip_paths):
            return None

        key = self.get_key(request)
        if key is None:
            return None

        # a request refused by either window must not use up a slot in the other
        general = self.limiter.peek(key)
        if not general.allowed:
            return _rate_limited_response(general, self.config.window_seconds)

        try:
            if request.method == 'POST' and any(request.path.startswith(path) for path in self.strict_paths):
                self.strict_limiter.enforce(key)
        except RateLimitExceededError as e:
            return _rate_limited_response(e.result, self.strict_config.window_seconds)

        try:
            request.rate_limit_result = self.limiter.enforce(key)
        except RateLimitExceededError as e:
            return _rate_limited_response(e.result, self.config.window_seconds)
        return None

    def process_response(self, request, response):
        """
        Add rate limit headers to response
        """
        result = getattr(request, 'rate_limit_result', None)
        if result is not None:
            _set_headers(response, result)
        return response


class LoginRateLimitMiddleware(RateLimitMiddleware):
    """
    Per-IP limit for credential endpoints: 5 attempts per 15 minutes
    """

    limited_paths = [
        '/api/auth/login',
        '/api/auth/register',
        '/api/auth/password-reset',
    ]

    def __init__(self, get_response):
        MiddlewareMixin.__init__(self, get_response)
        self.config = RateLimitConfig(
            max_requests=settings.LOGIN_RATE_LIMIT_MAX,
            window_seconds=settings.LOGIN_RATE_LIMIT_WINDOW,
            key_prefix='ratelimit:login',
        )
        self.limiter = SlidingWindowRateLimiter(self.config)

    def process_request(self, request):
        if request.method != 'POST':
            return None
        if not any(request.path.startswith(path) for path in self.limited_paths):
            return None

        try:
            request.rate_limit_result = self.limiter.enforce(get_client_ip(request))
        except RateLimitExceededError as e:
            return _rate_limited_response(e.result, self.config.window_seconds)
        return None
