"""
Pytest configuration and fixtures for Component Builder tests.
"""

from __future__ import annotations

import os

# Set test environment variables before importing config
os.environ.setdefault("USE_MOCK_LLM", "true")
os.environ.setdefault("MOCK_LLM_PROFILE", "instant")
os.environ.setdefault("ANTHROPIC_API_KEY", "")
os.environ.setdefault("OPENAI_API_KEY", "")

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402

from backend.main import app  # noqa: E402
from backend.middleware.rate_limit import rate_limiter  # noqa: E402
from backend.routes.preview import renderer  # noqa: E402


@pytest.fixture(autouse=True)
def reset_state():
    """Fresh rate limit counters and no mounted previews for every test."""
    rate_limiter.reset()
    renderer.clear()
    yield
    rate_limiter.reset()
    renderer.clear()


@pytest_asyncio.fixture
async def async_client():
    """Async HTTP client against the ASGI app."""
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
