"""
Google Calendar operations on behalf of a connected user.

Every operation follows the same path: resolve the user's credential
(refreshing if needed), build a Calendar client for that credential
alone, make the call, and hand back the result. Pull-sync additionally
maps remote events to local rows and upserts them in one transaction.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any

from dateutil.parser import isoparse
from sqlalchemy.exc import SQLAlchemyError

from core.config import get_local_timezone
from core.database import get_connection, get_transaction
from core.enums import EventType
from core.errors import InvalidInputError, StoreError
from core.queries.events import list_events, upsert_events

from .client import build_calendar_service, execute
from .credentials import resolve_credential
from .mapping import summarize_remote, to_internal, to_remote, to_remote_update

logger = logging.getLogger(__name__)

# Google's per-page maximum; later pages are not fetched.
PULL_SYNC_PAGE_SIZE = 2500
PULL_SYNC_DEFAULT_DAYS = 365
LIST_EVENTS_DEFAULT_DAYS = 30
LIST_EVENTS_DEFAULT_MAX = 50
LIST_CALENDARS_MAX = 100


def parse_instant(value: datetime | str | None) -> datetime | None:
    """ISO string or datetime to an aware datetime (naive means UTC)."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            value = isoparse(value)
        except ValueError as e:
            raise InvalidInputError(f"Invalid date: {value!r}") from e
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


@dataclass
class SyncWindow:
    """Calendar and [start, end) range to pull."""

    calendar_id: str
    start: datetime
    end: datetime

    @classmethod
    def build(
        cls,
        calendar_id: str = "primary",
        start: datetime | str | None = None,
        end: datetime | str | None = None,
        default_days: int = PULL_SYNC_DEFAULT_DAYS,
        now: datetime | None = None,
    ) -> "SyncWindow":
        """Fill in missing bounds: start defaults to now, end to now + N days."""
        now = now or datetime.now(timezone.utc)
        start_at = parse_instant(start) or now
        end_at = parse_instant(end) or now + timedelta(days=default_days)
        if end_at <= start_at:
            raise InvalidInputError("endDate must be after startDate")
        return cls(calendar_id=calendar_id or "primary", start=start_at, end=end_at)


def collapse_duplicates(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Keep one row per (user_id, title, due_date); the later row wins."""
    collapsed: dict[tuple, dict[str, Any]] = {}
    for row in rows:
        collapsed[(row["user_id"], row["title"], row["due_date"])] = row
    return list(collapsed.values())


# =====================================================
# Pull: Google -> local
# =====================================================


async def pull_sync(
    user_id: str,
    calendar_id: str = "primary",
    start: datetime | str | None = None,
    end: datetime | str | None = None,
) -> dict[str, Any]:
    """
    Pull events in a window from Google and upsert them locally.

    Recurring events are expanded server-side into single instances.
    Repeating a pull against an unchanged calendar rewrites the same rows.

    Returns:
        {"syncedCount": number of remote events, "events": mapped rows}

    Raises:
        StoreError: The upsert failed; nothing from this pull is committed
    """
    window = SyncWindow.build(calendar_id, start, end)
    credential = await resolve_credential(user_id)
    service = build_calendar_service(credential.access_token)

    response = await execute(
        service.events().list(
            calendarId=window.calendar_id,
            timeMin=window.start.isoformat(),
            timeMax=window.end.isoformat(),
            maxResults=PULL_SYNC_PAGE_SIZE,
            singleEvents=True,
            orderBy="startTime",
        ),
        operation="pull_sync",
        context={"user_id": user_id, "calendar_id": window.calendar_id},
    )
    items = response.get("items", [])
    if response.get("nextPageToken"):
        logger.warning(
            f"Pull sync for user {user_id} hit the {PULL_SYNC_PAGE_SIZE} event cap; "
            "later events in the window were not synced"
        )

    now = datetime.now(timezone.utc)
    rows = []
    for item in items:
        if not item.get("start"):
            logger.warning(f"Skipping remote event {item.get('id')} without a start")
            continue
        try:
            rows.append(to_internal(item, user_id, now=now))
        except InvalidInputError as e:
            logger.warning(f"Skipping remote event {item.get('id')}: {e.details}")
    rows = collapse_duplicates(rows)

    try:
        async with get_transaction() as conn:
            await upsert_events(conn, rows)
    except SQLAlchemyError as e:
        logger.error(f"Failed to sync events to database for user {user_id}: {e}")
        raise StoreError(f"Failed to sync events to database: {e}") from e

    logger.info(f"Synced {len(items)} Google Calendar events for user {user_id}")
    return {"syncedCount": len(items), "events": rows}


async def list_synced_events(
    user_id: str,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[dict[str, Any]]:
    """Locally stored rows that came from Google Calendar."""
    try:
        async with get_connection() as conn:
            return await list_events(
                conn,
                user_id,
                start_date=start_date,
                end_date=end_date,
                event_type=EventType.google_calendar,
            )
    except SQLAlchemyError as e:
        logger.error(f"Failed to fetch synced events for user {user_id}: {e}")
        raise StoreError("Failed to fetch synced events") from e


# =====================================================
# Push and remote event management
# =====================================================


def _require_event_fields(event: dict[str, Any] | None) -> dict[str, Any]:
    if not event or not event.get("title") or not event.get("due_date"):
        raise InvalidInputError(
            "Missing required fields: eventData.title and eventData.due_date"
        )
    return event


def _event_result(data: dict[str, Any]) -> dict[str, Any]:
    return {"eventId": data.get("id"), "eventUrl": data.get("htmlLink"), "data": data}


async def push_event(
    user_id: str,
    event: dict[str, Any] | None,
    calendar_id: str = "primary",
) -> dict[str, Any]:
    """
    Create a Google Calendar event from a local event draft.

    Attendees are notified. Nothing is written locally.

    Returns:
        {"eventId", "eventUrl", "data"}
    """
    body = to_remote(_require_event_fields(event))
    credential = await resolve_credential(user_id)
    service = build_calendar_service(credential.access_token)

    data = await execute(
        service.events().insert(calendarId=calendar_id, body=body, sendUpdates="all"),
        operation="push_event",
        context={"user_id": user_id, "calendar_id": calendar_id},
    )
    return _event_result(data)


async def update_remote_event(
    user_id: str,
    event_id: str,
    event: dict[str, Any] | None,
    calendar_id: str = "primary",
) -> dict[str, Any]:
    """Overwrite a Google event's title, description, location and time."""
    if not event:
        raise InvalidInputError("Event data is required")
    if not event.get("due_date"):
        raise InvalidInputError("Missing required field: eventData.due_date")

    body = to_remote_update(event)
    credential = await resolve_credential(user_id)
    service = build_calendar_service(credential.access_token)

    data = await execute(
        service.events().update(
            calendarId=calendar_id,
            eventId=event_id,
            body=body,
            sendUpdates="all",
        ),
        operation="update_event",
        context={"user_id": user_id, "event_id": event_id},
    )
    return _event_result(data)


async def delete_remote_event(
    user_id: str,
    event_id: str,
    calendar_id: str = "primary",
) -> None:
    """Delete a Google event and notify attendees."""
    credential = await resolve_credential(user_id)
    service = build_calendar_service(credential.access_token)

    await execute(
        service.events().delete(
            calendarId=calendar_id,
            eventId=event_id,
            sendUpdates="all",
        ),
        operation="delete_event",
        context={"user_id": user_id, "event_id": event_id},
    )


async def list_remote_events(
    user_id: str,
    calendar_id: str = "primary",
    start: datetime | str | None = None,
    end: datetime | str | None = None,
    max_results: int = LIST_EVENTS_DEFAULT_MAX,
) -> dict[str, Any]:
    """
    Read-through listing of Google events (default: next 30 days).

    Returns:
        {"events": [...], "nextPageToken": str | None}
    """
    if max_results < 1:
        raise InvalidInputError("maxResults must be a positive integer")

    window = SyncWindow.build(
        calendar_id, start, end, default_days=LIST_EVENTS_DEFAULT_DAYS
    )
    credential = await resolve_credential(user_id)
    service = build_calendar_service(credential.access_token)

    response = await execute(
        service.events().list(
            calendarId=window.calendar_id,
            timeMin=window.start.isoformat(),
            timeMax=window.end.isoformat(),
            maxResults=max_results,
            singleEvents=True,
            orderBy="startTime",
        ),
        operation="list_events",
        context={"user_id": user_id, "calendar_id": window.calendar_id},
    )
    return {
        "events": [summarize_remote(item) for item in response.get("items", [])],
        "nextPageToken": response.get("nextPageToken"),
    }


# =====================================================
# Calendars
# =====================================================


async def list_calendars(user_id: str) -> list[dict[str, Any]]:
    """Calendars visible to the user."""
    credential = await resolve_credential(user_id)
    service = build_calendar_service(credential.access_token)

    response = await execute(
        service.calendarList().list(
            maxResults=LIST_CALENDARS_MAX,
            showDeleted=False,
            showHidden=False,
        ),
        operation="list_calendars",
        context={"user_id": user_id},
    )
    return [
        {
            "id": cal.get("id"),
            "summary": cal.get("summary"),
            "description": cal.get("description"),
            "primary": cal.get("primary", False),
            "accessRole": cal.get("accessRole"),
            "backgroundColor": cal.get("backgroundColor"),
            "foregroundColor": cal.get("foregroundColor"),
            "selected": cal.get("selected"),
        }
        for cal in response.get("items", [])
    ]


async def create_calendar(
    user_id: str,
    summary: str | None,
    description: str | None = None,
    time_zone: str | None = None,
) -> dict[str, Any]:
    """Create a secondary calendar owned by the user."""
    if not summary:
        raise InvalidInputError("Calendar summary is required")

    credential = await resolve_credential(user_id)
    service = build_calendar_service(credential.access_token)

    data = await execute(
        service.calendars().insert(
            body={
                "summary": summary,
                "description": description or "",
                "timeZone": time_zone or get_local_timezone(),
            }
        ),
        operation="create_calendar",
        context={"user_id": user_id},
    )
    return {"calendarId": data.get("id"), "data": data}


async def delete_calendar(user_id: str, calendar_id: str) -> None:
    """Delete one of the user's secondary calendars."""
    credential = await resolve_credential(user_id)
    service = build_calendar_service(credential.access_token)

    await execute(
        service.calendars().delete(calendarId=calendar_id),
        operation="delete_calendar",
        context={"user_id": user_id, "calendar_id": calendar_id},
    )
