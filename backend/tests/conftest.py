"""
ChatGuard Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── manual_clock: Hand-advanced millisecond clock
    ├── test_settings: Settings with test defaults
    ├── rate_limiter: Fresh SlidingWindowRateLimiter (5 req / 15s)
    ├── chat_service: ChatService wired to rate_limiter + manual_clock
    ├── app: Fresh FastAPI app (own limiter, manual clock)
    └── test_client: HTTPX AsyncClient for API endpoint testing
"""

import os

# Override settings for testing BEFORE any app imports
os.environ["APP_ENV"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["ALLOWED_ORIGINS"] = ""
for _var in ("PORT", "HOST", "RATE_LIMIT_REQUESTS", "RATE_LIMIT_WINDOW_MS", "MAX_MESSAGE_LENGTH"):
    os.environ.pop(_var, None)

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from chatguard.config import Settings
from chatguard.main import create_app
from chatguard.services.chat_service import ChatService
from chatguard.services.rate_limiter import SlidingWindowRateLimiter


class ManualClock:
    """Millisecond clock that only moves when a test says so."""

    def __init__(self, start: int = 0):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures (created fresh for each test)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def manual_clock():
    return ManualClock(start=1_700_000_000_000)


@pytest.fixture
def test_settings():
    return Settings(app_env="test", log_level="WARNING", allowed_origins="")


@pytest.fixture
def rate_limiter():
    return SlidingWindowRateLimiter(max_requests=5, window_ms=15_000)


@pytest.fixture
def chat_service(rate_limiter, manual_clock):
    return ChatService(rate_limiter=rate_limiter, clock=manual_clock)


@pytest.fixture
def app(test_settings, manual_clock):
    """
    A fresh application per test.

    Each app owns its rate limiter, so request history never leaks
    between tests.
    """
    return create_app(settings=test_settings, clock=manual_clock)


@pytest_asyncio.fixture
async def test_client(app):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
