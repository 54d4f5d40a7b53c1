"""
Translation between local calendar events and Google Calendar resources.

Local events carry a due date and an optional time-of-day in the
server's configured timezone. Timed events become one-hour blocks; events
without a time become a 24-hour block starting at local midnight.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil.parser import isoparse

from core.config import get_local_timezone
from core.enums import EventType
from core.errors import InvalidInputError

TIMED_EVENT_DURATION = timedelta(hours=1)
ALL_DAY_EVENT_DURATION = timedelta(days=1)

DEFAULT_REMINDERS = {
    "useDefault": False,
    "overrides": [
        {"method": "email", "minutes": 24 * 60},  # 1 day before
        {"method": "popup", "minutes": 30},
    ],
}

UNTITLED_EVENT = "Untitled Event"
SOURCE_TEXT_TEMPLATE = "Google Calendar Event: {summary}"


def _zone(tz_name: str | None) -> tuple[str, ZoneInfo]:
    name = tz_name or get_local_timezone()
    try:
        return name, ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise InvalidInputError(f"Unknown timezone: {name}") from e


def parse_due_date(value: date | str) -> date:
    """Accept a date or a YYYY-MM-DD string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError as e:
        raise InvalidInputError(f"Invalid due_date: {value!r}") from e


def parse_due_time(value: time | str | None) -> time | None:
    """Accept a time, an HH:MM[:SS] string, or nothing."""
    if value is None or value == "":
        return None
    if isinstance(value, time):
        return value
    try:
        return time.fromisoformat(str(value))
    except ValueError as e:
        raise InvalidInputError(f"Invalid due_time: {value!r}") from e


def event_window(
    due_date: date | str,
    due_time: time | str | None = None,
    tz_name: str | None = None,
) -> tuple[datetime, datetime]:
    """
    Start and end instants for a local event.

    Durations are elapsed time, so on DST changeover days an all-day
    event still spans 24 hours and may end at 23:00 or 01:00 local.

    Returns:
        (start, end) as timezone-aware datetimes in the local zone
    """
    _, tz = _zone(tz_name)
    day = parse_due_date(due_date)
    at = parse_due_time(due_time)

    start = datetime.combine(day, at or time(0, 0), tzinfo=tz)
    duration = TIMED_EVENT_DURATION if at else ALL_DAY_EVENT_DURATION
    end = (start.astimezone(timezone.utc) + duration).astimezone(tz)
    return start, end


def to_remote_update(event: dict[str, Any], tz_name: str | None = None) -> dict:
    """Google event body for an update (existing reminders are left alone)."""
    name, _ = _zone(tz_name)
    start, end = event_window(event["due_date"], event.get("due_time"), name)

    return {
        "summary": event.get("title"),
        "description": event.get("description") or "",
        "location": event.get("location") or "",
        "start": {"dateTime": start.isoformat(), "timeZone": name},
        "end": {"dateTime": end.isoformat(), "timeZone": name},
    }


def to_remote(event: dict[str, Any], tz_name: str | None = None) -> dict:
    """Google event body for creating a new event, with default reminders."""
    body = to_remote_update(event, tz_name)
    body["reminders"] = {
        "useDefault": DEFAULT_REMINDERS["useDefault"],
        "overrides": [dict(o) for o in DEFAULT_REMINDERS["overrides"]],
    }
    return body


def _remote_start(start: dict, tz: ZoneInfo) -> tuple[date, time | None]:
    if start.get("dateTime"):
        instant = isoparse(start["dateTime"])
        if instant.tzinfo is None:
            # Floating time: interpret in the event's own zone if given
            own_zone = start.get("timeZone")
            instant = instant.replace(tzinfo=_zone(own_zone)[1] if own_zone else tz)
        local = instant.astimezone(tz)
        return local.date(), local.time().replace(second=0, microsecond=0)
    if start.get("date"):
        return date.fromisoformat(start["date"]), None
    raise InvalidInputError("Remote event has no start")


def to_internal(
    remote: dict[str, Any],
    user_id: str,
    tz_name: str | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """
    Local calendar_events row for a pulled Google event.

    Timed starts are converted to the local zone before the date and time
    are split off, so the row shows the day the user sees in their calendar.
    """
    _, tz = _zone(tz_name)
    due_date, due_time = _remote_start(remote.get("start") or {}, tz)
    title = remote.get("summary") or UNTITLED_EVENT

    return {
        "user_id": user_id,
        "class_id": None,
        "title": title,
        "description": remote.get("description") or "",
        "event_type": EventType.google_calendar,
        "due_date": due_date,
        "due_time": due_time,
        "confidence_score": 1.0,
        "source_text": SOURCE_TEXT_TEMPLATE.format(summary=title),
        "created_at": now or datetime.now(timezone.utc),
    }


def summarize_remote(remote: dict[str, Any]) -> dict[str, Any]:
    """Fields passed through to clients listing remote events."""
    return {
        "id": remote.get("id"),
        "summary": remote.get("summary"),
        "description": remote.get("description"),
        "location": remote.get("location"),
        "start": remote.get("start"),
        "end": remote.get("end"),
        "attendees": remote.get("attendees"),
        "organizer": remote.get("organizer"),
        "status": remote.get("status"),
        "htmlLink": remote.get("htmlLink"),
        "created": remote.get("created"),
        "updated": remote.get("updated"),
    }
