# web_api/tests/conftest.py
"""Pytest fixtures for web API tests.

Route tests mock the core calendar layer; nothing here touches a
database or Google.
"""

import sys
from pathlib import Path
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

# Ensure we import from root main.py
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from main import app
from web_api.rate_limit import api_limiter


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Each test starts with an empty rate limit window."""
    api_limiter.reset()
    yield
    api_limiter.reset()


@pytest.fixture(autouse=True)
def _jwt_secret():
    """Ensure JWT_SECRET is set so OAuth state can be signed and verified."""
    with patch("core.calendar.oauth.JWT_SECRET", "test-secret"):
        yield


@pytest.fixture
def client():
    return TestClient(app)
