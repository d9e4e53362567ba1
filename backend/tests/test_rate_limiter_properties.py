"""
Property-based tests for the sliding-window rate limiter.
"""

import uuid

import pytest
from hypothesis import given, strategies as st, settings, HealthCheck

from apps.core.services.rate_limiter import (
    RateLimitConfig,
    RateLimitExceededError,
    SlidingWindowRateLimiter,
    evaluate_window,
    prune_window,
)


class FakeClock:
    """Controllable time source in seconds."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


config_strategy = st.builds(
    RateLimitConfig,
    max_requests=st.integers(min_value=1, max_value=20),
    window_seconds=st.integers(min_value=1, max_value=120),
)


class TestEvaluateWindow:
    """
    Property-based tests for the pure window evaluation.
    """

    @given(config=config_strategy,
           offsets=st.lists(st.integers(min_value=0, max_value=240_000), max_size=40),
           now=st.integers(min_value=300_000, max_value=400_000))
    @settings(max_examples=200)
    def test_allowed_iff_below_limit(self, config, offsets, now):
        """
        Property: A hit is allowed exactly when fewer than max_requests hits
        remain inside the window.
        """
        timestamps = [now - offset for offset in offsets]
        active = prune_window(timestamps, now, config.window_ms)
        result = evaluate_window(timestamps, now, config)

        assert result.allowed == (len(active) < config.max_requests)
        assert result.limit == config.max_requests
        if result.allowed:
            assert result.retry_after == 0
            assert result.remaining == config.max_requests - len(active) - 1
            assert result.remaining >= 0
        else:
            assert result.remaining == 0
            assert 1 <= result.retry_after <= config.window_seconds

    @given(timestamps=st.lists(st.integers(min_value=0, max_value=1_000_000), max_size=50),
           now=st.integers(min_value=0, max_value=1_000_000),
           window_ms=st.integers(min_value=1, max_value=500_000))
    def test_prune_keeps_only_window(self, timestamps, now, window_ms):
        """
        Property: Pruning keeps exactly the hits newer than the window start.
        """
        kept = prune_window(timestamps, now, window_ms)
        assert all(ts > now - window_ms for ts in kept)
        assert len(kept) == sum(1 for ts in timestamps if ts > now - window_ms)

    @pytest.mark.parametrize('max_requests,window_seconds', [(0, 60), (5, 0)])
    def test_invalid_config_rejected(self, max_requests, window_seconds):
        with pytest.raises(ValueError):
            RateLimitConfig(max_requests=max_requests, window_seconds=window_seconds)


class TestSlidingWindowRateLimiter:
    """
    Property-based tests for the cache-backed limiter.
    """

    @given(max_requests=st.integers(min_value=1, max_value=15),
           window_seconds=st.integers(min_value=1, max_value=60))
    @settings(max_examples=50, suppress_health_check=[HealthCheck.too_slow])
    def test_limit_then_recover(self, max_requests, window_seconds):
        """
        Property: Exactly max_requests hits pass inside one window, the next
        one is rejected and a full window later the key is usable again.
        """
        clock = FakeClock()
        limiter = SlidingWindowRateLimiter(
            RateLimitConfig(max_requests, window_seconds, key_prefix=f'test:{uuid.uuid4().hex}'),
            clock=clock,
        )

        for _ in range(max_requests):
            assert limiter.check('client').allowed
            clock.advance(0.001)

        blocked = limiter.check('client')
        assert not blocked.allowed
        assert blocked.retry_after >= 1

        clock.advance(window_seconds + 1)
        assert limiter.check('client').allowed

    def test_keys_are_independent(self):
        clock = FakeClock()
        limiter = SlidingWindowRateLimiter(
            RateLimitConfig(1, 60, key_prefix=f'test:{uuid.uuid4().hex}'), clock=clock
        )
        assert limiter.check('a').allowed
        assert limiter.check('b').allowed
        assert not limiter.check('a').allowed

    def test_enforce_raises_with_retry_after(self):
        clock = FakeClock()
        limiter = SlidingWindowRateLimiter(
            RateLimitConfig(1, 30, key_prefix=f'test:{uuid.uuid4().hex}'), clock=clock
        )
        limiter.enforce('user')
        clock.advance(10)
        with pytest.raises(RateLimitExceededError) as excinfo:
            limiter.enforce('user')
        assert excinfo.value.retry_after == 20

        limiter.reset('user')
        assert limiter.enforce('user').allowed

    def test_peek_does_not_record_a_hit(self):
        clock = FakeClock()
        limiter = SlidingWindowRateLimiter(
            RateLimitConfig(1, 60, key_prefix=f'test:{uuid.uuid4().hex}'), clock=clock
        )
        assert limiter.peek('user').allowed
        assert limiter.peek('user').allowed
        assert limiter.check('user').allowed
        assert not limiter.peek('user').allowed
