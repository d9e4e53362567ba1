"""
Sliding-window rate limiter backed by the Django cache.

Each key stores the list of hit timestamps (milliseconds) inside the
current window. Stale timestamps are dropped on every check, so keys of
idle clients expire with the cache timeout.
"""

import time
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional
from django.core.cache import cache

logger = logging.getLogger(__name__)


class RateLimitExceededError(Exception):
    """Raised when rate limit is exceeded."""

    def __init__(self, message: str, key: str, retry_after: int, result: 'RateLimitResult' = None):
        super().__init__(message)
        self.key = key
        self.retry_after = retry_after  # seconds until a slot frees up
        self.result = result


@dataclass
class RateLimitConfig:
    """
    Configuration for a sliding window.

    Attributes:
        max_requests: Maximum hits allowed inside the window
        window_seconds: Duration of the window in seconds
        key_prefix: Cache key namespace
    """
    max_requests: int
    window_seconds: int
    key_prefix: str = 'ratelimit'

    def __post_init__(self):
        """Validate configuration values."""
        if self.max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if self.window_seconds < 1:
            raise ValueError("window_seconds must be at least 1")

    @property
    def window_ms(self) -> int:
        return self.window_seconds * 1000


@dataclass
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    retry_after: int  # seconds, 0 when allowed
    reset_at_ms: int


def prune_window(timestamps: List[int], now_ms: int, window_ms: int) -> List[int]:
    """Keep only the hits that still fall inside the window ending at now_ms."""
    window_start = now_ms - window_ms
    return [ts for ts in timestamps if ts > window_start]


def evaluate_window(timestamps: List[int], now_ms: int, config: RateLimitConfig) -> RateLimitResult:
    """
    Decide whether one more hit fits in the window.

    Pure function: the caller persists the timestamps when allowed.
    """
    active = prune_window(timestamps, now_ms, config.window_ms)

    if len(active) >= config.max_requests:
        oldest = min(active)
        retry_after_ms = oldest + config.window_ms - now_ms
        # Round up so clients never retry a moment too early
        retry_after = max(1, -(-retry_after_ms // 1000))
        return RateLimitResult(
            allowed=False,
            limit=config.max_requests,
            remaining=0,
            retry_after=retry_after,
            reset_at_ms=oldest + config.window_ms,
        )

    remaining = config.max_requests - len(active) - 1
    reset_at = (min(active) if active else now_ms) + config.window_ms
    return RateLimitResult(
        allowed=True,
        limit=config.max_requests,
        remaining=remaining,
        retry_after=0,
        reset_at_ms=reset_at,
    )


class SlidingWindowRateLimiter:
    """
    Rate limiter enforcing a RateLimitConfig per key (user id or IP).

    Cache failures fail open: the request is allowed and the error logged.
    """

    def __init__(self, config: RateLimitConfig, clock: Optional[Callable[[], float]] = None):
        self.config = config
        self._clock = clock or time.time

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _cache_key(self, key: str) -> str:
        return f'{self.config.key_prefix}:{key}'

    def peek(self, key: str) -> RateLimitResult:
        """Evaluate key against the window without recording a hit."""
        now = self._now_ms()
        cache_key = self._cache_key(key)
        try:
            timestamps = cache.get(cache_key, [])
        except Exception as e:
            logger.warning(f'Rate limiter cache read failed for {cache_key}: {e}')
            return RateLimitResult(True, self.config.max_requests, self.config.max_requests, 0, now)
        return evaluate_window(timestamps, now, self.config)

    def check(self, key: str) -> RateLimitResult:
        """
        Record a hit for key if it fits in the window.

        Returns:
            RateLimitResult describing the decision
        """
        now = self._now_ms()
        cache_key = self._cache_key(key)

        try:
            timestamps = cache.get(cache_key, [])
        except Exception as e:
            logger.warning(f'Rate limiter cache read failed for {cache_key}: {e}')
            return RateLimitResult(True, self.config.max_requests, self.config.max_requests, 0, now)

        result = evaluate_window(timestamps, now, self.config)

        if result.allowed:
            active = prune_window(timestamps, now, self.config.window_ms)
            active.append(now)
            try:
                cache.set(cache_key, active, timeout=self.config.window_seconds + 1)
            except Exception as e:
                logger.warning(f'Rate limiter cache write failed for {cache_key}: {e}')

        return result

    def enforce(self, key: str) -> RateLimitResult:
        """Like check() but raises RateLimitExceededError when over the limit."""
        result = self.check(key)
        if not result.allowed:
            raise RateLimitExceededError(
                f'Rate limit exceeded. Try again in {result.retry_after} seconds.',
                key,
                result.retry_after,
                result=result,
            )
        return result

    def reset(self, key: str) -> None:
        cache.delete(self._cache_key(key))
