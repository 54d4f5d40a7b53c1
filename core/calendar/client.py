"""Google Calendar API client construction and call execution.

A fresh service object is built for every operation from the caller's
resolved access token. Nothing credential-bearing is kept at module level,
so requests for different users never share client state.
"""

import asyncio
import logging
from typing import Any

import sentry_sdk
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import Resource, build
from googleapiclient.errors import HttpError

from core.errors import RemoteServiceError

logger = logging.getLogger(__name__)


def _is_rate_limit_error(exception: Exception) -> bool:
    """Check if exception is a Google API rate limit error."""
    if isinstance(exception, HttpError):
        return exception.resp.status == 429
    return False


def _log_calendar_error(
    exception: Exception,
    operation: str,
    context: dict | None = None,
) -> None:
    """
    Log calendar API errors with appropriate severity.

    Rate limits get warning level + specific Sentry event.
    Other errors get error level.
    """
    context = context or {}

    if _is_rate_limit_error(exception):
        logger.warning(
            f"Google Calendar rate limit hit during {operation}",
            extra={"operation": operation, **context},
        )
        sentry_sdk.capture_message(
            f"Google Calendar rate limit: {operation}",
            level="warning",
            extras={"operation": operation, **context},
        )
    else:
        logger.error(
            f"Google Calendar API error during {operation}: {exception}",
            extra={"operation": operation, **context},
        )
        sentry_sdk.capture_exception(exception)


def build_calendar_service(access_token: str) -> Resource:
    """
    Build a Calendar v3 service authorized with one access token.

    The token is used as-is; refreshing is the credential manager's job.
    """
    creds = Credentials(token=access_token)
    return build("calendar", "v3", credentials=creds, cache_discovery=False)


async def execute(request, operation: str, context: dict | None = None) -> Any:
    """
    Execute a prepared googleapiclient request in a worker thread.

    Raises:
        RemoteServiceError: If Google rejects or fails the call
    """
    try:
        return await asyncio.to_thread(request.execute)
    except Exception as e:
        _log_calendar_error(e, operation=operation, context=context)
        raise RemoteServiceError(str(e)) from e
