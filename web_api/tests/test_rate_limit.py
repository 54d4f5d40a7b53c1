# web_api/tests/test_rate_limit.py
"""Tests for the per-IP sliding-window rate limiter."""

from unittest.mock import Mock, patch

import pytest

from core.errors import RateLimitedError
from web_api.rate_limit import RateLimiter


def _request(ip: str, forwarded: str | None = None) -> Mock:
    request = Mock()
    request.headers = {"x-forwarded-for": forwarded} if forwarded else {}
    request.client.host = ip
    return request


@pytest.fixture
def clock():
    """Controllable monotonic clock for the limiter module."""
    with patch("web_api.rate_limit.time") as mock_time:
        mock_time.monotonic.return_value = 1000.0
        yield mock_time


class TestRateLimiter:
    def test_rejects_over_limit_with_retry_after(self, clock):
        limiter = RateLimiter(max_requests=2, window_seconds=60)
        limiter.check(_request("1.1.1.1"))
        clock.monotonic.return_value = 1010.0
        limiter.check(_request("1.1.1.1"))

        with pytest.raises(RateLimitedError) as exc_info:
            limiter.check(_request("1.1.1.1"))

        assert exc_info.value.status_code == 429
        assert exc_info.value.retry_after == 50

    def test_window_slides(self, clock):
        limiter = RateLimiter(max_requests=1, window_seconds=60)
        limiter.check(_request("1.1.1.1"))

        clock.monotonic.return_value = 1061.0
        limiter.check(_request("1.1.1.1"))

    def test_clients_counted_separately(self, clock):
        limiter = RateLimiter(max_requests=1, window_seconds=60)
        limiter.check(_request("1.1.1.1"))
        limiter.check(_request("2.2.2.2"))

    def test_forwarded_for_identifies_client(self, clock):
        limiter = RateLimiter(max_requests=1, window_seconds=60)
        limiter.check(_request("10.0.0.1", forwarded="3.3.3.3, 10.0.0.1"))

        with pytest.raises(RateLimitedError):
            limiter.check(_request("10.0.0.2", forwarded="3.3.3.3"))

    def test_idle_clients_are_forgotten(self, clock):
        limiter = RateLimiter(max_requests=5, window_seconds=60)
        for n in range(50):
            limiter.check(_request(f"10.0.0.{n}"))
        assert limiter.tracked_clients() == 50

        clock.monotonic.return_value = 1100.0
        limiter.check(_request("9.9.9.9"))

        assert limiter.tracked_clients() == 1
