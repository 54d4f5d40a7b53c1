"""
Exceptions raised by the credential and calendar sync layer.

Each carries a machine-readable ``code`` and the HTTP status the web
layer renders it with. ``details`` is a human-readable string.
"""


class CalendarSyncError(Exception):
    """Base exception for calendar sync errors."""

    code = "INTERNAL_ERROR"
    status_code = 500
    message = "Internal server error"

    def __init__(self, details: str | None = None):
        self.details = details or self.message
        super().__init__(self.details)


class NotConnectedError(CalendarSyncError):
    """No credential record exists for the user."""

    code = "NOT_CONNECTED"
    status_code = 404
    message = "No Google tokens found in database"


class ExpiredNoRefreshError(CalendarSyncError):
    """Access token expired and there is no refresh token to renew it."""

    code = "EXPIRED_NO_REFRESH"
    status_code = 404
    message = "Token expired and no refresh token available"


class NoRefreshTokenError(CalendarSyncError):
    """Explicit refresh requested but no refresh token is stored."""

    code = "NO_REFRESH_TOKEN"
    status_code = 404
    message = "No refresh token found"


class InvalidInputError(CalendarSyncError):
    """Missing or malformed request fields."""

    code = "INVALID_INPUT"
    status_code = 400
    message = "Invalid input"


class OAuthNotConfiguredError(CalendarSyncError):
    """Google OAuth client ID/secret are not set."""

    code = "OAUTH_NOT_CONFIGURED"
    status_code = 500
    message = "Google OAuth not configured"


class RemoteServiceError(CalendarSyncError):
    """Google rejected or failed a call (Calendar API or token endpoint)."""

    code = "REMOTE_SERVICE_ERROR"
    status_code = 500
    message = "Google Calendar request failed"


class StoreError(CalendarSyncError):
    """Database read or write failed."""

    code = "STORE_ERROR"
    status_code = 500
    message = "Database operation failed"


class RateLimitedError(CalendarSyncError):
    """Too many requests from one client in the current window."""

    code = "RATE_LIMITED"
    status_code = 429
    message = "Too many requests"

    def __init__(self, retry_after: int, details: str | None = None):
        self.retry_after = retry_after
        super().__init__(details or f"Retry after {retry_after} seconds")
