"""
Google OAuth 2.0 authorization server calls.

Wraps google-auth-oauthlib's Flow (consent URL + code exchange) and
google-auth's Credentials.refresh (access token renewal). All blocking
HTTP runs in a worker thread.

The user ID travels through the consent screen inside a short-lived
HS256-signed ``state`` value, so the callback derives the user from
something this server issued rather than from a bare query parameter.
"""

import asyncio
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow
from oauthlib.oauth2.rfc6749.errors import OAuth2Error

from core.config import (
    GOOGLE_CALENDAR_SCOPES,
    get_google_client_id,
    get_google_client_secret,
    get_google_redirect_uri,
)
from core.errors import OAuthNotConfiguredError, RemoteServiceError

logger = logging.getLogger(__name__)

AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
TOKEN_URI = "https://oauth2.googleapis.com/token"

JWT_SECRET = os.environ.get("JWT_SECRET")
JWT_ALGORITHM = "HS256"
STATE_EXPIRATION_MINUTES = 10


@dataclass
class TokenGrant:
    """Tokens returned by the authorization server."""

    access_token: str
    refresh_token: str | None
    expiry: datetime | None  # timezone-aware UTC

    def __repr__(self) -> str:
        return (
            f"TokenGrant(access_token=<REDACTED>, "
            f"refresh_token={'<REDACTED>' if self.refresh_token else None}, "
            f"expiry={self.expiry!r})"
        )


def _client_credentials() -> tuple[str, str]:
    client_id = get_google_client_id()
    client_secret = get_google_client_secret()
    if not client_id or not client_secret:
        raise OAuthNotConfiguredError(
            "Set GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET environment variables"
        )
    return client_id, client_secret


def _build_flow(scopes: list[str], state: str | None = None) -> Flow:
    client_id, client_secret = _client_credentials()
    redirect_uri = get_google_redirect_uri()
    return Flow.from_client_config(
        {
            "web": {
                "client_id": client_id,
                "client_secret": client_secret,
                "auth_uri": AUTH_URI,
                "token_uri": TOKEN_URI,
                "redirect_uris": [redirect_uri],
            }
        },
        scopes=scopes,
        state=state,
        redirect_uri=redirect_uri,
        # The callback arrives on a different request with a new Flow,
        # so there is nowhere to keep a PKCE verifier between the two.
        autogenerate_code_verifier=False,
    )


def _as_utc(expiry: datetime | None) -> datetime | None:
    """google-auth reports expiry as naive UTC."""
    if expiry is None:
        return None
    if expiry.tzinfo is None:
        return expiry.replace(tzinfo=timezone.utc)
    return expiry.astimezone(timezone.utc)


# =====================================================
# Signed state
# =====================================================


def create_state(user_id: str) -> str:
    """Sign a user ID into an OAuth state value."""
    if not JWT_SECRET:
        raise ValueError("JWT_SECRET environment variable not set")

    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "purpose": "google_calendar_oauth",
        "iat": now,
        "exp": now + timedelta(minutes=STATE_EXPIRATION_MINUTES),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def read_state(state: str) -> str | None:
    """
    Verify a state value produced by create_state.

    Returns:
        The user ID, or None if the state is invalid or expired
    """
    if not JWT_SECRET:
        raise ValueError("JWT_SECRET environment variable not set")

    try:
        payload = jwt.decode(state, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.InvalidTokenError:
        return None

    if payload.get("purpose") != "google_calendar_oauth":
        return None
    return payload.get("sub")


# =====================================================
# Authorization server operations
# =====================================================


def generate_auth_url(
    user_id: str | None = None,
    scopes: list[str] | None = None,
    offline_access: bool = True,
    force_consent: bool = True,
) -> str:
    """
    Build the Google consent screen URL.

    Offline access + forced consent make Google issue a refresh token
    even when the user has authorized this client before.
    """
    state = create_state(user_id) if user_id else None
    flow = _build_flow(scopes or GOOGLE_CALENDAR_SCOPES, state=state)

    # Flow defaults access_type to offline
    params = {"access_type": "offline" if offline_access else "online"}
    if force_consent:
        params["prompt"] = "consent"

    url, _ = flow.authorization_url(**params)
    return url


async def exchange_code(code: str) -> TokenGrant:
    """
    Exchange an authorization code for tokens.

    Raises:
        RemoteServiceError: If Google rejects the code
    """
    flow = _build_flow(GOOGLE_CALENDAR_SCOPES)

    try:
        await asyncio.to_thread(flow.fetch_token, code=code)
    except (OAuth2Error, GoogleAuthError, ValueError) as e:
        logger.warning(f"Authorization code exchange failed: {e}")
        raise RemoteServiceError(f"Failed to exchange authorization code: {e}") from e

    creds = flow.credentials
    logger.info(
        "Tokens received",
        extra={
            "has_refresh_token": bool(creds.refresh_token),
            "expiry": creds.expiry.isoformat() if creds.expiry else None,
        },
    )
    return TokenGrant(
        access_token=creds.token,
        refresh_token=creds.refresh_token,
        expiry=_as_utc(creds.expiry),
    )


async def refresh(refresh_token: str) -> TokenGrant:
    """
    Obtain a new access token from a refresh token.

    The returned grant carries the same refresh token; it is never rotated
    here.

    Raises:
        RemoteServiceError: If Google refuses the refresh (revoked, invalid)
    """
    client_id, client_secret = _client_credentials()
    creds = Credentials(
        token=None,
        refresh_token=refresh_token,
        token_uri=TOKEN_URI,
        client_id=client_id,
        client_secret=client_secret,
    )

    try:
        await asyncio.to_thread(creds.refresh, Request())
    except GoogleAuthError as e:
        logger.warning(f"Access token refresh failed: {e}")
        raise RemoteServiceError(f"Failed to refresh access token: {e}") from e

    return TokenGrant(
        access_token=creds.token,
        refresh_token=refresh_token,
        expiry=_as_utc(creds.expiry),
    )
