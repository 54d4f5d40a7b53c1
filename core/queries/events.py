"""Calendar event queries using SQLAlchemy Core."""

from datetime import date
from typing import Any

from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncConnection

from ..database import dialect_insert
from ..enums import EventType
from ..tables import calendar_events

# Columns overwritten when a row with the same (user_id, title, due_date)
# already exists.
_UPSERT_COLUMNS = (
    "class_id",
    "description",
    "event_type",
    "due_time",
    "confidence_score",
    "source_text",
    "created_at",
)


async def upsert_events(
    conn: AsyncConnection,
    rows: list[dict[str, Any]],
) -> int:
    """
    Batch upsert events keyed on (user_id, title, due_date).

    Rows sharing a key within the batch must already be collapsed by the
    caller; Postgres refuses to update the same row twice in one statement.

    Returns:
        Number of rows written
    """
    if not rows:
        return 0

    stmt = dialect_insert(conn, calendar_events).values(rows)
    stmt = stmt.on_conflict_do_update(
        index_elements=[
            calendar_events.c.user_id,
            calendar_events.c.title,
            calendar_events.c.due_date,
        ],
        set_={col: stmt.excluded[col] for col in _UPSERT_COLUMNS},
    )
    await conn.execute(stmt)
    return len(rows)


async def insert_events(
    conn: AsyncConnection,
    user_id: str,
    events: list[dict[str, Any]],
    class_id: str | None = None,
) -> list[dict[str, Any]]:
    """Insert locally authored/extracted events and return the created rows."""
    if not events:
        return []

    values = [
        {
            "user_id": user_id,
            "class_id": class_id,
            "title": event["title"],
            "description": event.get("description"),
            "event_type": event.get("event_type") or EventType.other,
            "due_date": event["due_date"],
            "due_time": event.get("due_time"),
            "confidence_score": event.get("confidence_score"),
            "source_text": event.get("source_text"),
        }
        for event in events
    ]
    result = await conn.execute(
        insert(calendar_events).values(values).returning(calendar_events)
    )
    return [dict(row) for row in result.mappings()]


async def list_events(
    conn: AsyncConnection,
    user_id: str,
    start_date: date | None = None,
    end_date: date | None = None,
    event_type: EventType | None = None,
) -> list[dict[str, Any]]:
    """List a user's events ordered by due date, with optional filters."""
    query = select(calendar_events).where(calendar_events.c.user_id == user_id)

    if start_date:
        query = query.where(calendar_events.c.due_date >= start_date)
    if end_date:
        query = query.where(calendar_events.c.due_date <= end_date)
    if event_type:
        query = query.where(calendar_events.c.event_type == event_type)

    query = query.order_by(
        calendar_events.c.due_date.asc(),
        calendar_events.c.due_time.asc(),
        calendar_events.c.event_id.asc(),
    )
    result = await conn.execute(query)
    return [dict(row) for row in result.mappings()]
