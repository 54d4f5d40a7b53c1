"""Google Calendar integration: per-user OAuth credentials and event sync."""

from .client import build_calendar_service
from .credentials import (
    AccessCredential,
    connection_status,
    disconnect,
    get_stored_tokens,
    refresh_credential,
    resolve_credential,
    store_authorization,
)
from .mapping import to_internal, to_remote
from .oauth import generate_auth_url, read_state
from .sync import (
    SyncWindow,
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

__all__ = [
    "build_calendar_service",
    "AccessCredential",
    "resolve_credential",
    "refresh_credential",
    "get_stored_tokens",
    "store_authorization",
    "disconnect",
    "connection_status",
    "to_remote",
    "to_internal",
    "generate_auth_url",
    "read_state",
    "SyncWindow",
    "pull_sync",
    "push_event",
    "update_remote_event",
    "delete_remote_event",
    "list_remote_events",
    "list_synced_events",
    "list_calendars",
    "create_calendar",
    "delete_calendar",
]
