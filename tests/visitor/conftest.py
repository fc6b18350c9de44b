"""
Pytest fixtures for visitor service tests.
"""

import asyncio
import os
from unittest.mock import AsyncMock, MagicMock, patch

# IMPORTANT: Set environment variables BEFORE any imports from visitor_service
# so the module-level app picks them up when first loaded.
os.environ["CRON_SECRET"] = "test-secret-key-1234"
os.environ.pop("TARGET_URL", None)
os.environ.pop("KEEPALIVE_URL", None)

import pytest
from fastapi.testclient import TestClient

from visitor_service.config import VisitorSettings
from visitor_service.runner import JobRunner

SECRET = "test-secret-key-1234"


class FakeSession:
    """
    Stand-in for visit_and_stay.

    Records calls and optionally sleeps or raises so tests can observe the
    running state without a browser.
    """

    def __init__(self):
        self.calls = []
        self.delay = 0.0
        self.error = None

    async def __call__(self, url, stay_seconds, settings):
        self.calls.append((url, stay_seconds))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error


@pytest.fixture
def settings():
    """Settings with a known secret and no default target."""
    return VisitorSettings(
        _env_file=None,
        cron_secret=SECRET,
        target_url=None,
        stay_minutes=14,
        keepalive_url=None,
    )


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def runner(settings, fake_session):
    return JobRunner(settings, session=fake_session)


@pytest.fixture
def mock_pinger():
    """Replace KeepAlivePinger so no real HTTP pings are sent."""
    with patch("visitor_service.runner.KeepAlivePinger") as mock_cls:
        instance = MagicMock()
        instance.stop = AsyncMock()
        mock_cls.return_value = instance
        yield mock_cls


@pytest.fixture
def client(runner, mock_pinger):
    """
    FastAPI test client bound to a fresh runner.

    Used as a context manager so background sessions share one event loop
    across requests.
    """
    from visitor_service.app import app

    app.state.runner = runner
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {SECRET}"}

