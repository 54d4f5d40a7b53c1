"""
Centralized configuration for the calendar sync backend.

Provides environment-aware settings so main.py, the routers and the
Google integration read the same values.
"""

import os

GOOGLE_CALENDAR_SCOPES = ["https://www.googleapis.com/auth/calendar"]


def is_dev_mode() -> bool:
    """Check if running in development mode (--dev flag or DEV_MODE env)."""
    return os.getenv("DEV_MODE", "").lower() in ("true", "1", "yes")


def is_production() -> bool:
    """Check if running on Railway (production environment)."""
    return bool(os.environ.get("RAILWAY_ENVIRONMENT"))


def get_api_port() -> int:
    """Get API server port from env or default."""
    return int(os.getenv("API_PORT", "3001"))


def get_frontend_url() -> str:
    """Get frontend URL (used for CORS and post-OAuth redirects)."""
    return os.environ.get("FRONTEND_URL", "http://localhost:3000").rstrip("/")


def get_allowed_origins() -> list[str]:
    """
    Get list of allowed CORS origins.

    Includes localhost variants for dev and the configured frontend URL.
    """
    hosts = ["localhost", "127.0.0.1"]
    origins = [f"http://{host}:{port}" for host in hosts for port in (3000, 5173)]

    frontend_url = get_frontend_url()
    if frontend_url not in origins:
        origins.append(frontend_url)

    return origins


def get_google_client_id() -> str | None:
    return os.environ.get("GOOGLE_CLIENT_ID")


def get_google_client_secret() -> str | None:
    return os.environ.get("GOOGLE_CLIENT_SECRET")


def get_google_redirect_uri() -> str:
    return os.environ.get(
        "GOOGLE_REDIRECT_URI",
        f"http://localhost:{get_api_port()}/api/auth/google/callback",
    )


def get_local_timezone() -> str:
    """
    IANA timezone used when turning local dates/times into instants.

    CALENDAR_TIMEZONE wins, then TZ (only if it looks like an IANA name),
    then UTC.
    """
    configured = os.environ.get("CALENDAR_TIMEZONE")
    if configured:
        return configured
    tz = os.environ.get("TZ", "").lstrip(":")
    if "/" in tz or tz == "UTC":
        return tz
    return "UTC"


# Required environment variables for production
# Format: (name, description, required_in_dev)
REQUIRED_ENV_VARS = [
    ("DATABASE_URL", "Database connection string", True),
    ("GOOGLE_CLIENT_ID", "Google OAuth client ID", True),
    ("GOOGLE_CLIENT_SECRET", "Google OAuth client secret", True),
    ("GOOGLE_REDIRECT_URI", "Google OAuth redirect URI", False),
    ("JWT_SECRET", "Secret key for signing OAuth state", True),
    ("SENTRY_DSN", "Sentry error reporting DSN", False),
]


def check_required_env_vars() -> tuple[bool, list[str]]:
    """
    Check that required environment variables are set.

    Returns:
        (all_ok, warnings): Tuple of success flag and list of warning messages
    """
    warnings = []
    errors = []
    in_dev = is_dev_mode()

    for name, description, required_in_dev in REQUIRED_ENV_VARS:
        value = os.environ.get(name)

        if not value:
            if is_production():
                errors.append(f"  ✗ {name}: Not set ({description})")
            elif required_in_dev or not in_dev:
                warnings.append(f"  ⚠ {name}: Not set ({description})")

    if errors:
        for error in errors:
            print(error)
        return False, warnings

    return True, warnings
