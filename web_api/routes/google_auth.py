"""
Google OAuth routes for connecting a user's Google Calendar.

Endpoints:
- GET /api/auth/google/url - Build the Google consent URL
- GET /api/auth/google/callback - Exchange the code and store tokens
- GET /api/auth/google/tokens/{user_id} - Stored tokens for a user
- POST /api/auth/google/refresh/{user_id} - Force an access token refresh
- DELETE /api/auth/google/disconnect/{user_id} - Forget the user's tokens
"""

import logging

from fastapi import APIRouter, Depends, Query

from core.calendar.credentials import (
    disconnect,
    get_stored_tokens,
    refresh_credential,
    store_authorization,
)
from core.calendar.oauth import generate_auth_url, read_state
from core.errors import InvalidInputError, OAuthNotConfiguredError
from web_api.rate_limit import api_limiter

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/auth/google",
    tags=["google-auth"],
    dependencies=[Depends(api_limiter.check)],
)

# Where the frontend lands after a successful connection
POST_CONNECT_REDIRECT = "/projects"


@router.get("/url")
async def google_auth_url(user_id: str | None = Query(None, alias="userId")):
    """
    Build the Google consent screen URL.

    When userId is given it is signed into the OAuth state, and the
    callback reads the user back out of it.
    """
    try:
        url = generate_auth_url(user_id=user_id)
    except ValueError as e:
        logger.error(f"Error generating auth URL: {e}")
        raise OAuthNotConfiguredError(str(e)) from e

    return {"authUrl": url}


@router.get("/callback")
async def google_auth_callback(
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
):
    """
    Handle the redirect back from Google.

    Exchanges the authorization code for tokens and upserts the user's
    credential record.
    """
    if error:
        raise InvalidInputError(f"Authorization denied: {error}")
    if not code:
        raise InvalidInputError("Authorization code is required")
    if not state:
        raise InvalidInputError("User ID is required")

    user_id = read_state(state)
    if not user_id:
        raise InvalidInputError("Invalid or expired OAuth state")

    logger.info(f"OAuth callback received for user {user_id}")
    await store_authorization(user_id, code)

    return {
        "success": True,
        "message": "Google Calendar connected successfully",
        "redirectUrl": POST_CONNECT_REDIRECT,
    }


@router.get("/tokens/{user_id}")
async def google_tokens(user_id: str):
    """Return the stored credential record (no freshness check)."""
    credential = await get_stored_tokens(user_id)
    return {"tokens": credential.to_dict()}


@router.post("/refresh/{user_id}")
async def google_refresh(user_id: str):
    """Refresh the user's access token now, whatever its expiry."""
    credential = await refresh_credential(user_id)
    return {
        "success": True,
        "message": "Tokens refreshed successfully",
        "tokens": credential.to_dict(),
    }


@router.delete("/disconnect/{user_id}")
async def google_disconnect(user_id: str):
    """Delete the user's tokens. Succeeds even if none were stored."""
    await disconnect(user_id)
    return {
        "success": True,
        "message": "Google Calendar disconnected successfully",
    }
