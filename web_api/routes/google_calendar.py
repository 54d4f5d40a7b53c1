"""
Google Calendar routes for a connected user.

Endpoints:
- GET /api/google-calendar/connection-status/{user_id}
- GET /api/google-calendar/calendars/{user_id}
- GET /api/google-calendar/events/{user_id}
- POST /api/google-calendar/add-to-google-calendar/{user_id}
- PUT /api/google-calendar/update-event/{event_id}/{user_id}
- DELETE /api/google-calendar/delete-event/{event_id}/{user_id}
- POST /api/google-calendar/sync-events/{user_id}
- GET /api/google-calendar/synced-events/{user_id}
- POST /api/google-calendar/create-calendar/{user_id}
- DELETE /api/google-calendar/delete-calendar/{calendar_id}/{user_id}
"""

from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict

from core.calendar.credentials import connection_status
from core.calendar.sync import (
    create_calendar,
    delete_calendar,
    delete_remote_event,
    list_calendars,
    list_remote_events,
    list_synced_events,
    pull_sync,
    push_event,
    update_remote_event,
)
from web_api.rate_limit import api_limiter

router = APIRouter(
    prefix="/api/google-calendar",
    tags=["google-calendar"],
    dependencies=[Depends(api_limiter.check)],
)


class EventData(BaseModel):
    """Local event draft sent to Google Calendar."""

    model_config = ConfigDict(extra="allow")

    title: str | None = None
    description: str | None = None
    location: str | None = None
    due_date: str | None = None
    due_time: str | None = None


class EventRequest(BaseModel):
    eventData: EventData | None = None
    calendarId: str = "primary"


class SyncEventsRequest(BaseModel):
    calendarId: str = "primary"
    startDate: str | None = None
    endDate: str | None = None


class CreateCalendarRequest(BaseModel):
    summary: str | None = None
    description: str | None = None
    timeZone: str | None = None


def _event_dict(event: EventData | None) -> dict[str, Any] | None:
    return event.model_dump(exclude_none=True) if event else None


@router.get("/connection-status/{user_id}")
async def get_connection_status(user_id: str):
    """Connected / needs-refresh status. Never fails."""
    status = await connection_status(user_id)
    return {"success": True, **status}


@router.get("/calendars/{user_id}")
async def get_calendars(user_id: str):
    calendars = await list_calendars(user_id)
    return {"success": True, "calendars": calendars}


@router.get("/events/{user_id}")
async def get_events(
    user_id: str,
    calendar_id: str = Query("primary", alias="calendarId"),
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    max_results: int = Query(50, alias="maxResults"),
):
    """Events straight from Google (default window: the next 30 days)."""
    result = await list_remote_events(
        user_id,
        calendar_id=calendar_id,
        start=start_date,
        end=end_date,
        max_results=max_results,
    )
    return {"success": True, **result}


@router.post("/add-to-google-calendar/{user_id}")
async def add_event(user_id: str, request: EventRequest):
    result = await push_event(
        user_id, _event_dict(request.eventData), calendar_id=request.calendarId
    )
    return {
        "success": True,
        "message": "Event added to Google Calendar successfully",
        **result,
    }


@router.put("/update-event/{event_id}/{user_id}")
async def update_event(event_id: str, user_id: str, request: EventRequest):
    result = await update_remote_event(
        user_id,
        event_id,
        _event_dict(request.eventData),
        calendar_id=request.calendarId,
    )
    return {"success": True, "message": "Event updated successfully", **result}


@router.delete("/delete-event/{event_id}/{user_id}")
async def delete_event(
    event_id: str,
    user_id: str,
    calendar_id: str = Query("primary", alias="calendarId"),
):
    await delete_remote_event(user_id, event_id, calendar_id=calendar_id)
    return {"success": True, "message": "Event deleted successfully"}


@router.post("/sync-events/{user_id}")
async def sync_events(user_id: str, request: SyncEventsRequest | None = None):
    """Pull Google events into the local calendar_events table."""
    request = request or SyncEventsRequest()
    result = await pull_sync(
        user_id,
        calendar_id=request.calendarId,
        start=request.startDate,
        end=request.endDate,
    )
    return {
        "success": True,
        "message": f"Successfully synced {result['syncedCount']} events",
        "syncedCount": result["syncedCount"],
    }


@router.get("/synced-events/{user_id}")
async def get_synced_events(
    user_id: str,
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
):
    events = await list_synced_events(user_id, start_date=start_date, end_date=end_date)
    return {"success": True, "events": events}


@router.post("/create-calendar/{user_id}")
async def create_calendar_endpoint(user_id: str, request: CreateCalendarRequest):
    result = await create_calendar(
        user_id,
        request.summary,
        description=request.description,
        time_zone=request.timeZone,
    )
    return {"success": True, "message": "Calendar created successfully", **result}


@router.delete("/delete-calendar/{calendar_id}/{user_id}")
async def delete_calendar_endpoint(calendar_id: str, user_id: str):
    await delete_calendar(user_id, calendar_id)
    return {"success": True, "message": "Calendar deleted successfully"}
