# web_api/tests/test_google_calendar_routes.py
"""Tests for the /api/google-calendar endpoints.

The sync layer is mocked; these check request parsing, response shape
and how core errors are rendered.
"""

from datetime import date
from unittest.mock import AsyncMock, patch

from core.errors import (
    ExpiredNoRefreshError,
    InvalidInputError,
    NotConnectedError,
    StoreError,
)

ROUTES = "web_api.routes.google_calendar"


class TestConnectionStatus:
    def test_connected(self, client):
        status = {
            "connected": True,
            "lastSync": "2026-01-15T13:00:00+00:00",
            "needsRefresh": False,
        }
        with patch(
            f"{ROUTES}.connection_status", new_callable=AsyncMock, return_value=status
        ):
            response = client.get("/api/google-calendar/connection-status/user-42")

        assert response.status_code == 200
        assert response.json() == {"success": True, **status}

    def test_failure_still_200(self, client):
        status = {
            "connected": False,
            "lastSync": None,
            "needsRefresh": False,
            "error": "db down",
        }
        with patch(
            f"{ROUTES}.connection_status", new_callable=AsyncMock, return_value=status
        ):
            response = client.get("/api/google-calendar/connection-status/user-42")

        assert response.status_code == 200
        assert response.json()["connected"] is False


class TestAddEvent:
    def test_pushes_event(self, client):
        result = {"eventId": "evt1", "eventUrl": "https://x/evt1", "data": {"id": "evt1"}}
        with patch(
            f"{ROUTES}.push_event", new_callable=AsyncMock, return_value=result
        ) as mock_push:
            response = client.post(
                "/api/google-calendar/add-to-google-calendar/user-42",
                json={
                    "eventData": {
                        "title": "Midterm",
                        "due_date": "2026-01-20",
                        "due_time": "14:00",
                    }
                },
            )

        assert response.status_code == 200
        assert response.json()["eventId"] == "evt1"
        mock_push.assert_awaited_once_with(
            "user-42",
            {"title": "Midterm", "due_date": "2026-01-20", "due_time": "14:00"},
            calendar_id="primary",
        )

    def test_missing_fields(self, client):
        with patch(
            f"{ROUTES}.push_event",
            new_callable=AsyncMock,
            side_effect=InvalidInputError(
                "Missing required fields: eventData.title and eventData.due_date"
            ),
        ):
            response = client.post(
                "/api/google-calendar/add-to-google-calendar/user-42", json={}
            )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_INPUT"

    def test_expired_without_refresh_token(self, client):
        with patch(
            f"{ROUTES}.push_event",
            new_callable=AsyncMock,
            side_effect=ExpiredNoRefreshError(),
        ):
            response = client.post(
                "/api/google-calendar/add-to-google-calendar/user-42",
                json={"eventData": {"title": "X", "due_date": "2026-01-20"}},
            )

        assert response.status_code == 404
        assert response.json()["code"] == "EXPIRED_NO_REFRESH"


class TestSyncEvents:
    def test_sync_with_window(self, client):
        with patch(
            f"{ROUTES}.pull_sync",
            new_callable=AsyncMock,
            return_value={"syncedCount": 3, "events": []},
        ) as mock_pull:
            response = client.post(
                "/api/google-calendar/sync-events/user-42",
                json={
                    "calendarId": "work",
                    "startDate": "2026-01-01T00:00:00Z",
                    "endDate": "2026-02-01T00:00:00Z",
                },
            )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Successfully synced 3 events",
            "syncedCount": 3,
        }
        mock_pull.assert_awaited_once_with(
            "user-42",
            calendar_id="work",
            start="2026-01-01T00:00:00Z",
            end="2026-02-01T00:00:00Z",
        )

    def test_sync_without_body_uses_defaults(self, client):
        with patch(
            f"{ROUTES}.pull_sync",
            new_callable=AsyncMock,
            return_value={"syncedCount": 0, "events": []},
        ) as mock_pull:
            response = client.post("/api/google-calendar/sync-events/user-42")

        assert response.status_code == 200
        mock_pull.assert_awaited_once_with(
            "user-42", calendar_id="primary", start=None, end=None
        )

    def test_not_connected(self, client):
        with patch(
            f"{ROUTES}.pull_sync",
            new_callable=AsyncMock,
            side_effect=NotConnectedError(),
        ):
            response = client.post("/api/google-calendar/sync-events/user-42")

        assert response.status_code == 404
        assert response.json()["error"] == "No Google tokens found in database"

    def test_store_failure(self, client):
        with patch(
            f"{ROUTES}.pull_sync",
            new_callable=AsyncMock,
            side_effect=StoreError("Failed to sync events to database: boom"),
        ):
            response = client.post("/api/google-calendar/sync-events/user-42")

        assert response.status_code == 500
        assert response.json()["code"] == "STORE_ERROR"


class TestSyncedEvents:
    def test_parses_date_filters(self, client):
        with patch(
            f"{ROUTES}.list_synced_events", new_callable=AsyncMock, return_value=[]
        ) as mock_list:
            response = client.get(
                "/api/google-calendar/synced-events/user-42",
                params={"startDate": "2026-01-01", "endDate": "2026-01-31"},
            )

        assert response.status_code == 200
        assert response.json() == {"success": True, "events": []}
        mock_list.assert_awaited_once_with(
            "user-42", start_date=date(2026, 1, 1), end_date=date(2026, 1, 31)
        )

    def test_bad_date_is_400(self, client):
        response = client.get(
            "/api/google-calendar/synced-events/user-42",
            params={"startDate": "January"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_INPUT"


class TestRemoteEvents:
    def test_list_events(self, client):
        result = {"events": [{"id": "g1"}], "nextPageToken": None}
        with patch(
            f"{ROUTES}.list_remote_events", new_callable=AsyncMock, return_value=result
        ) as mock_list:
            response = client.get(
                "/api/google-calendar/events/user-42", params={"maxResults": 5}
            )

        assert response.status_code == 200
        assert response.json()["events"] == [{"id": "g1"}]
        assert mock_list.call_args.kwargs["max_results"] == 5

    def test_update_event(self, client):
        with patch(
            f"{ROUTES}.update_remote_event",
            new_callable=AsyncMock,
            return_value={"eventId": "evt1", "eventUrl": None, "data": {}},
        ) as mock_update:
            response = client.put(
                "/api/google-calendar/update-event/evt1/user-42",
                json={"eventData": {"title": "Moved", "due_date": "2026-01-22"}},
            )

        assert response.status_code == 200
        assert mock_update.call_args.args[:2] == ("user-42", "evt1")

    def test_delete_event(self, client):
        with patch(
            f"{ROUTES}.delete_remote_event", new_callable=AsyncMock
        ) as mock_delete:
            response = client.delete(
                "/api/google-calendar/delete-event/evt1/user-42",
                params={"calendarId": "work"},
            )

        assert response.status_code == 200
        mock_delete.assert_awaited_once_with("user-42", "evt1", calendar_id="work")


class TestCalendars:
    def test_list(self, client):
        with patch(
            f"{ROUTES}.list_calendars",
            new_callable=AsyncMock,
            return_value=[{"id": "primary@x", "primary": True}],
        ):
            response = client.get("/api/google-calendar/calendars/user-42")

        assert response.status_code == 200
        assert response.json()["calendars"][0]["id"] == "primary@x"

    def test_create(self, client):
        with patch(
            f"{ROUTES}.create_calendar",
            new_callable=AsyncMock,
            return_value={"calendarId": "new@x", "data": {"id": "new@x"}},
        ) as mock_create:
            response = client.post(
                "/api/google-calendar/create-calendar/user-42",
                json={"summary": "Coursework", "timeZone": "Europe/London"},
            )

        assert response.status_code == 200
        assert response.json()["calendarId"] == "new@x"
        mock_create.assert_awaited_once_with(
            "user-42", "Coursework", description=None, time_zone="Europe/London"
        )

    def test_delete(self, client):
        with patch(f"{ROUTES}.delete_calendar", new_callable=AsyncMock) as mock_delete:
            response = client.delete(
                "/api/google-calendar/delete-calendar/work@x/user-42"
            )

        assert response.status_code == 200
        mock_delete.assert_awaited_once_with("user-42", "work@x")
