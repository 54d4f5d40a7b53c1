"""
Core business logic - platform-agnostic.
Can be used by the web API, operator scripts, or any other interface.
"""

# Database (SQLAlchemy)
from .database import get_connection, get_transaction, get_engine, close_engine, is_configured

# Enums and errors
from .enums import EventType
from .errors import (
    CalendarSyncError,
    NotConnectedError,
    ExpiredNoRefreshError,
    NoRefreshTokenError,
    InvalidInputError,
    OAuthNotConfiguredError,
    RateLimitedError,
    RemoteServiceError,
    StoreError,
)

__all__ = [
    # Database
    "get_connection",
    "get_transaction",
    "get_engine",
    "close_engine",
    "is_configured",
    # Enums
    "EventType",
    # Errors
    "CalendarSyncError",
    "NotConnectedError",
    "ExpiredNoRefreshError",
    "NoRefreshTokenError",
    "InvalidInputError",
    "OAuthNotConfiguredError",
    "RateLimitedError",
    "RemoteServiceError",
    "StoreError",
]
