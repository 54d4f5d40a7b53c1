"""Root pytest configuration."""

import os
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Load environment variables before tests run
_root = Path(__file__).parent
load_dotenv(_root / ".env")
load_dotenv(_root / ".env.local", override=True)

# Tests never talk to a real Sentry project
os.environ.pop("SENTRY_DSN", None)
os.environ.setdefault("DEV_MODE", "true")


@pytest.fixture(autouse=True)
def _utc_calendar_timezone(monkeypatch):
    """Pin the local calendar zone so date math is machine-independent."""
    monkeypatch.setenv("CALENDAR_TIMEZONE", "UTC")


@pytest.fixture(scope="session")
def event_loop_policy():
    """Use default event loop policy for all async tests."""
    import asyncio

    return asyncio.DefaultEventLoopPolicy()
