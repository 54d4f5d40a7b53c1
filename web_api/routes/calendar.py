"""
Local calendar event routes.

Events saved here live only in our database; pushing them to Google
is a separate call under /api/google-calendar.

Endpoints:
- GET /api/calendar/events/{user_id} - List a user's events
- POST /api/calendar/save-events/{user_id} - Save extracted events
"""

import logging
from datetime import date, time

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError

from core.database import get_connection, get_transaction
from core.enums import EventType
from core.errors import InvalidInputError, StoreError
from core.queries.events import insert_events, list_events
from web_api.rate_limit import api_limiter

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/calendar",
    tags=["calendar"],
    dependencies=[Depends(api_limiter.check)],
)


class LocalEvent(BaseModel):
    """One event to store for a user."""

    title: str = Field(min_length=1)
    description: str | None = None
    event_type: EventType = EventType.other
    due_date: date
    due_time: time | None = None
    confidence_score: float | None = Field(default=None, ge=0, le=1)
    source_text: str | None = None


class SaveEventsRequest(BaseModel):
    events: list[LocalEvent]
    classId: str | None = None


@router.get("/events/{user_id}")
async def get_events(
    user_id: str,
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    event_type: EventType | None = Query(None, alias="eventType"),
):
    """List events ordered by due date, optionally filtered."""
    try:
        async with get_connection() as conn:
            events = await list_events(
                conn,
                user_id,
                start_date=start_date,
                end_date=end_date,
                event_type=event_type,
            )
    except SQLAlchemyError as e:
        logger.error(f"Failed to fetch events for user {user_id}: {e}")
        raise StoreError("Failed to fetch events") from e

    return {"success": True, "events": events}


@router.post("/save-events/{user_id}")
async def save_events(user_id: str, request: SaveEventsRequest):
    """Insert a batch of events in one transaction."""
    if not request.events:
        raise InvalidInputError("Events array is required")

    rows = [event.model_dump() for event in request.events]
    try:
        async with get_transaction() as conn:
            saved = await insert_events(conn, user_id, rows, class_id=request.classId)
    except SQLAlchemyError as e:
        logger.error(f"Failed to save events for user {user_id}: {e}")
        raise StoreError("Failed to save events") from e

    return {
        "success": True,
        "message": f"Saved {len(saved)} events",
        "events": saved,
    }
