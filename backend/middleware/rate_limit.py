"""
In-memory rate limiting for generation endpoints.

A simple in-memory dict keyed by client address; one process only.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import UTC, datetime, timedelta

from fastapi import HTTPException, Request, status

from backend.config import settings


class RateLimiter:
    """
    Simple in-memory rate limiter.

    Tracks request counts per key (client IP) within time windows.
    """

    def __init__(self):
        # key -> list of (timestamp, count) tuples
        self._requests: dict[str, list[tuple[datetime, int]]] = defaultdict(list)

    def check_rate_limit(self, key: str, max_requests: int, window_minutes: int = 1) -> bool:
        """
        Check if a key has exceeded the rate limit.

        Args:
            key: Identifier to rate limit (client IP address)
            max_requests: Maximum requests allowed in the window
            window_minutes: Time window in minutes (default 1)

        Returns:
            True if under the limit, False if limit exceeded
        """
        now = datetime.now(UTC)
        cutoff = now - timedelta(minutes=window_minutes)

        # Clean up old entries
        self._requests[key] = [(ts, count) for ts, count in self._requests[key] if ts > cutoff]

        # Count recent requests
        total = sum(count for _, count in self._requests[key])

        if total >= max_requests:
            return False

        # Record this request
        self._requests[key].append((now, 1))
        return True

    def cleanup_old_entries(self, max_age_minutes: int = 10):
        """
        Clean up rate limit entries older than specified minutes.

        Args:
            max_age_minutes: Remove entries older than this many minutes
        """
        cutoff = datetime.now(UTC) - timedelta(minutes=max_age_minutes)
        for key in list(self._requests.keys()):
            self._requests[key] = [(ts, count) for ts, count in self._requests[key] if ts > cutoff]
            if not self._requests[key]:
                del self._requests[key]

    def reset(self):
        self._requests.clear()


# Global rate limiter instance
rate_limiter = RateLimiter()


def client_key(request: Request) -> str:
    """Rate limit key: first X-Forwarded-For hop, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


async def limit_generation(request: Request) -> None:
    """FastAPI dependency: 429 once a client exceeds the per-minute generation budget."""
    key = client_key(request)
    if not rate_limiter.check_rate_limit(f"generate:{key}", settings.GENERATION_RATE_LIMIT_PER_MINUTE):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many generation requests. Try again in a minute.",
        )
