"""Tests for Google OAuth URL generation, code exchange and refresh.

Google's token endpoint is never contacted; Flow and Credentials are mocked
where a network call would happen.
"""

import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock, patch
from urllib.parse import parse_qs, urlparse

import jwt
from google.auth.exceptions import RefreshError
from oauthlib.oauth2.rfc6749.errors import InvalidGrantError

from core.calendar import oauth
from core.calendar.oauth import (
    create_state,
    exchange_code,
    generate_auth_url,
    read_state,
    refresh,
)
from core.errors import OAuthNotConfiguredError, RemoteServiceError

TEST_SECRET = "test-secret-for-oauth-state"


@pytest.fixture(autouse=True)
def google_client(monkeypatch):
    monkeypatch.setenv("GOOGLE_CLIENT_ID", "client-123.apps.googleusercontent.com")
    monkeypatch.setenv("GOOGLE_CLIENT_SECRET", "shh")
    monkeypatch.setenv(
        "GOOGLE_REDIRECT_URI", "http://localhost:3001/api/auth/google/callback"
    )


@pytest.fixture(autouse=True)
def jwt_secret():
    with patch("core.calendar.oauth.JWT_SECRET", TEST_SECRET):
        yield


class TestState:
    def test_round_trip(self):
        assert read_state(create_state("user-42")) == "user-42"

    def test_tampered_state_rejected(self):
        state = create_state("user-42")
        forged = jwt.encode(
            jwt.decode(state, options={"verify_signature": False}),
            "another-secret",
            algorithm="HS256",
        )

        assert read_state(forged) is None

    def test_expired_state_rejected(self):
        past = datetime.now(timezone.utc) - timedelta(minutes=30)
        state = jwt.encode(
            {
                "sub": "user-42",
                "purpose": "google_calendar_oauth",
                "iat": past,
                "exp": past + timedelta(minutes=10),
            },
            TEST_SECRET,
            algorithm="HS256",
        )

        assert read_state(state) is None

    def test_other_purpose_rejected(self):
        state = jwt.encode(
            {"sub": "user-42", "purpose": "session"}, TEST_SECRET, algorithm="HS256"
        )

        assert read_state(state) is None

    def test_garbage_rejected(self):
        assert read_state("not-a-jwt") is None

    def test_missing_secret(self):
        with patch("core.calendar.oauth.JWT_SECRET", None):
            with pytest.raises(ValueError):
                create_state("user-42")


class TestGenerateAuthUrl:
    def _query(self, url: str) -> dict:
        return parse_qs(urlparse(url).query)

    def test_requests_offline_access_with_consent(self):
        url = generate_auth_url(user_id="user-42")

        assert url.startswith(oauth.AUTH_URI)
        query = self._query(url)
        assert query["access_type"] == ["offline"]
        assert query["prompt"] == ["consent"]
        assert query["client_id"] == ["client-123.apps.googleusercontent.com"]
        assert query["scope"] == ["https://www.googleapis.com/auth/calendar"]
        assert query["redirect_uri"] == [
            "http://localhost:3001/api/auth/google/callback"
        ]

    def test_state_carries_user_id(self):
        query = self._query(generate_auth_url(user_id="user-42"))

        assert read_state(query["state"][0]) == "user-42"

    def test_flags_can_be_disabled(self):
        query = self._query(
            generate_auth_url(offline_access=False, force_consent=False)
        )

        assert query["access_type"] == ["online"]
        assert "prompt" not in query

    def test_custom_scopes(self):
        scope = "https://www.googleapis.com/auth/calendar.readonly"
        query = self._query(generate_auth_url(scopes=[scope]))

        assert query["scope"] == [scope]

    def test_missing_client_config(self, monkeypatch):
        monkeypatch.delenv("GOOGLE_CLIENT_SECRET")

        with pytest.raises(OAuthNotConfiguredError):
            generate_auth_url()


class TestExchangeCode:
    @pytest.mark.asyncio
    async def test_returns_token_grant(self):
        flow = Mock()
        flow.credentials.token = "at-new"
        flow.credentials.refresh_token = "rt-new"
        flow.credentials.expiry = datetime(2026, 1, 15, 13, 0)

        with patch("core.calendar.oauth._build_flow", return_value=flow):
            grant = await exchange_code("auth-code")

        flow.fetch_token.assert_called_once_with(code="auth-code")
        assert grant.access_token == "at-new"
        assert grant.refresh_token == "rt-new"
        assert grant.expiry == datetime(2026, 1, 15, 13, 0, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_rejected_code(self):
        flow = Mock()
        flow.fetch_token.side_effect = InvalidGrantError()

        with patch("core.calendar.oauth._build_flow", return_value=flow):
            with pytest.raises(RemoteServiceError):
                await exchange_code("bad-code")


class TestRefresh:
    @pytest.mark.asyncio
    async def test_keeps_refresh_token(self):
        with patch("core.calendar.oauth.Credentials") as mock_credentials:
            creds = mock_credentials.return_value
            creds.token = "at-fresh"
            creds.expiry = datetime(2026, 1, 15, 13, 0)

            grant = await refresh("rt-1")

        assert mock_credentials.call_args.kwargs["refresh_token"] == "rt-1"
        assert mock_credentials.call_args.kwargs["token_uri"] == oauth.TOKEN_URI
        creds.refresh.assert_called_once()
        assert grant.access_token == "at-fresh"
        assert grant.refresh_token == "rt-1"
        assert grant.expiry.tzinfo is not None

    @pytest.mark.asyncio
    async def test_revoked_refresh_token(self):
        with patch("core.calendar.oauth.Credentials") as mock_credentials:
            mock_credentials.return_value.refresh.side_effect = RefreshError(
                "invalid_grant: Token has been expired or revoked."
            )

            with pytest.raises(RemoteServiceError):
                await refresh("rt-revoked")

    @pytest.mark.asyncio
    async def test_requires_client_config(self, monkeypatch):
        monkeypatch.delenv("GOOGLE_CLIENT_ID")

        with pytest.raises(OAuthNotConfiguredError):
            await refresh("rt-1")
