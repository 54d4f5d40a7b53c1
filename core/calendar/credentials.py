"""
Per-user Google credential lifecycle.

Resolves a usable access token for a user, refreshing it through the
authorization server when the stored one has expired, and derives the
connected/needs-refresh status shown to the frontend.

No credential is cached between calls: every resolution reads the
``google_calendar_tokens`` row. Refreshes are not serialized per user;
two concurrent refreshes both succeed and the later write wins.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from core.database import get_connection, get_transaction
from core.errors import (
    ExpiredNoRefreshError,
    NoRefreshTokenError,
    NotConnectedError,
    StoreError,
)
from core.queries.credentials import (
    delete_credential,
    get_credential,
    update_access_token,
    upsert_credential,
)

from . import oauth

logger = logging.getLogger(__name__)


@dataclass
class AccessCredential:
    """An access token resolved for one operation. Not stored anywhere."""

    user_id: str
    access_token: str
    refresh_token: str | None = None
    expiry: datetime | None = None

    def __repr__(self) -> str:
        return (
            f"AccessCredential(user_id={self.user_id!r}, "
            f"access_token=<REDACTED>, "
            f"refresh_token={'<REDACTED>' if self.refresh_token else None}, "
            f"expiry={self.expiry!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expiry_date": self.expiry.isoformat() if self.expiry else None,
            "user_id": self.user_id,
        }


def _as_utc(value: datetime | None) -> datetime | None:
    """Stores without timezone support hand back naive UTC timestamps."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_expired(expiry: datetime | None, now: datetime | None = None) -> bool:
    """
    An expiry equal to now already counts as expired.

    A missing expiry never expires.
    """
    if expiry is None:
        return False
    now = now or datetime.now(timezone.utc)
    return now >= _as_utc(expiry)


def _from_record(record: dict[str, Any]) -> AccessCredential:
    return AccessCredential(
        user_id=record["user_id"],
        access_token=record["access_token"],
        refresh_token=record.get("refresh_token"),
        expiry=_as_utc(record.get("expiry_date")),
    )


async def _load_record(user_id: str) -> dict[str, Any] | None:
    try:
        async with get_connection() as conn:
            return await get_credential(conn, user_id)
    except SQLAlchemyError as e:
        logger.error(f"Failed to load credential for user {user_id}: {e}")
        raise StoreError(str(e)) from e


async def _refresh_and_store(user_id: str, refresh_token: str) -> AccessCredential:
    grant = await oauth.refresh(refresh_token)

    try:
        async with get_transaction() as conn:
            await update_access_token(conn, user_id, grant.access_token, grant.expiry)
    except SQLAlchemyError as e:
        logger.error(f"Failed to update tokens in database for user {user_id}: {e}")
        raise StoreError(f"Failed to update tokens in database: {e}") from e

    logger.info(f"Refreshed Google access token for user {user_id}")
    return AccessCredential(
        user_id=user_id,
        access_token=grant.access_token,
        refresh_token=refresh_token,
        expiry=grant.expiry,
    )


async def resolve_credential(
    user_id: str, now: datetime | None = None
) -> AccessCredential:
    """
    Get a valid access credential for the user, refreshing if expired.

    Raises:
        NotConnectedError: No credential record for this user
        ExpiredNoRefreshError: Expired and nothing to refresh with
        RemoteServiceError: Google refused the refresh
        StoreError: Database failure
    """
    record = await _load_record(user_id)
    if not record:
        raise NotConnectedError()

    credential = _from_record(record)

    if is_expired(credential.expiry, now):
        if not credential.refresh_token:
            raise ExpiredNoRefreshError()
        return await _refresh_and_store(user_id, credential.refresh_token)

    return credential


async def refresh_credential(user_id: str) -> AccessCredential:
    """
    Refresh the user's access token regardless of its expiry.

    Raises:
        NoRefreshTokenError: No record, or the record has no refresh token
    """
    record = await _load_record(user_id)
    if not record or not record.get("refresh_token"):
        raise NoRefreshTokenError()

    return await _refresh_and_store(user_id, record["refresh_token"])


async def get_stored_tokens(user_id: str) -> AccessCredential:
    """Return the stored credential as-is, without a freshness check."""
    record = await _load_record(user_id)
    if not record:
        raise NotConnectedError("No tokens found")
    return _from_record(record)


async def store_authorization(user_id: str, code: str) -> AccessCredential:
    """
    Complete the OAuth callback: exchange the code and persist the tokens.

    Overwrites any existing record for the user, except that a grant
    without a refresh token keeps the stored one.
    """
    grant = await oauth.exchange_code(code)

    try:
        async with get_transaction() as conn:
            record = await upsert_credential(
                conn,
                user_id=user_id,
                access_token=grant.access_token,
                refresh_token=grant.refresh_token,
                expiry_date=grant.expiry,
            )
    except SQLAlchemyError as e:
        logger.error(f"Error saving tokens to database for user {user_id}: {e}")
        raise StoreError(f"Failed to save tokens: {e}") from e

    logger.info(
        f"Google Calendar connected for user {user_id}",
        extra={"has_refresh_token": bool(grant.refresh_token)},
    )
    return _from_record(record)


async def disconnect(user_id: str) -> None:
    """Delete the user's credential record. Succeeds if none existed."""
    try:
        async with get_transaction() as conn:
            deleted = await delete_credential(conn, user_id)
    except SQLAlchemyError as e:
        logger.error(f"Error deleting tokens from database for user {user_id}: {e}")
        raise StoreError("Failed to disconnect Google Calendar") from e

    if deleted:
        logger.info(f"Google Calendar disconnected for user {user_id}")


def derive_status(
    record: dict[str, Any], now: datetime | None = None
) -> dict[str, Any]:
    """Compute connection status from a credential record, no I/O."""
    expiry = _as_utc(record.get("expiry_date"))
    expired = is_expired(expiry, now)
    has_refresh = bool(record.get("refresh_token"))

    return {
        "connected": not expired or has_refresh,
        "lastSync": expiry.isoformat() if expiry else None,
        "needsRefresh": expired and has_refresh,
    }


async def connection_status(
    user_id: str, now: datetime | None = None
) -> dict[str, Any]:
    """
    Best-effort connection check. Never raises.

    Any failure reads as disconnected.
    """
    disconnected = {"connected": False, "lastSync": None, "needsRefresh": False}
    if not user_id:
        return disconnected

    try:
        async with get_connection() as conn:
            record = await get_credential(conn, user_id)
        if not record:
            return disconnected
        return derive_status(record, now)
    except Exception as e:
        logger.warning(f"Connection status check failed for user {user_id}: {e}")
        return {**disconnected, "error": str(e)}
