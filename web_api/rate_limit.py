"""In-memory sliding-window rate limiter shared by the API routers."""

import math
import time
from collections import deque

from fastapi import Request

from core.errors import RateLimitedError


class RateLimiter:
    """
    Sliding-window rate limiter keyed by client IP.

    Clients that stop sending requests are forgotten once their window
    empties, so memory tracks active clients only.

    Args:
        max_requests: Maximum requests allowed in the window.
        window_seconds: Time window in seconds.
    """

    def __init__(self, max_requests: int, window_seconds: int):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        # {ip: deque of request timestamps, oldest first}
        self._requests: dict[str, deque[float]] = {}
        self._last_sweep = time.monotonic()

    def _get_client_ip(self, request: Request) -> str:
        """Extract client IP, respecting X-Forwarded-For behind reverse proxy."""
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
        return request.client.host if request.client else "unknown"

    def _sweep(self, cutoff: float) -> None:
        """Drop every client whose newest request is outside the window."""
        stale = [ip for ip, hits in self._requests.items() if hits[-1] <= cutoff]
        for ip in stale:
            del self._requests[ip]

    def check(self, request: Request) -> None:
        """
        Record a request, or reject it if the client is over the limit.

        Raises:
            RateLimitedError: With the seconds until the oldest hit expires
        """
        now = time.monotonic()
        cutoff = now - self.window_seconds

        if now - self._last_sweep >= self.window_seconds:
            self._sweep(cutoff)
            self._last_sweep = now

        ip = self._get_client_ip(request)
        hits = self._requests.setdefault(ip, deque())
        while hits and hits[0] <= cutoff:
            hits.popleft()

        if len(hits) >= self.max_requests:
            retry_after = max(1, math.ceil(hits[0] + self.window_seconds - now))
            raise RateLimitedError(retry_after)

        hits.append(now)

    def tracked_clients(self) -> int:
        return len(self._requests)

    def reset(self) -> None:
        self._requests.clear()
        self._last_sweep = time.monotonic()


# 100 requests per 15 minutes per IP across all API routes
api_limiter = RateLimiter(max_requests=100, window_seconds=15 * 60)
