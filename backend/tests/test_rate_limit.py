"""Tests for the in-memory rate limiter."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from backend.middleware.rate_limit import RateLimiter


def test_allows_up_to_limit():
    limiter = RateLimiter()
    assert limiter.check_rate_limit("ip", max_requests=2)
    assert limiter.check_rate_limit("ip", max_requests=2)
    assert not limiter.check_rate_limit("ip", max_requests=2)


def test_keys_are_independent():
    limiter = RateLimiter()
    assert limiter.check_rate_limit("a", max_requests=1)
    assert limiter.check_rate_limit("b", max_requests=1)
    assert not limiter.check_rate_limit("a", max_requests=1)


def test_window_expires():
    limiter = RateLimiter()
    assert limiter.check_rate_limit("ip", max_requests=1, window_minutes=1)
    # Age the recorded request past the window
    limiter._requests["ip"] = [(datetime.now(UTC) - timedelta(minutes=2), 1)]
    assert limiter.check_rate_limit("ip", max_requests=1, window_minutes=1)


def test_cleanup_old_entries():
    limiter = RateLimiter()
    limiter._requests["old"] = [(datetime.now(UTC) - timedelta(minutes=30), 1)]
    limiter.check_rate_limit("new", max_requests=5)

    limiter.cleanup_old_entries(max_age_minutes=10)

    assert "old" not in limiter._requests
    assert "new" in limiter._requests


def test_reset():
    limiter = RateLimiter()
    limiter.check_rate_limit("ip", max_requests=1)
    limiter.reset()
    assert limiter.check_rate_limit("ip", max_requests=1)
