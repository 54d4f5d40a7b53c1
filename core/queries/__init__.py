"""Query layer for database operations using SQLAlchemy Core."""

from .credentials import (
    delete_credential,
    get_credential,
    update_access_token,
    upsert_credential,
)
from .events import insert_events, list_events, upsert_events

__all__ = [
    # Credential records
    "get_credential",
    "upsert_credential",
    "update_access_token",
    "delete_credential",
    # Calendar events
    "upsert_events",
    "insert_events",
    "list_events",
]
