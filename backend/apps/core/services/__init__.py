"""
Core services module.
"""

from .rate_limiter import (
    RateLimitConfig,
    RateLimitResult,
    RateLimitExceededError,
    SlidingWindowRateLimiter,
)

__all__ = [
    'RateLimitConfig',
    'RateLimitResult',
    'RateLimitExceededError',
    'SlidingWindowRateLimiter',
]
