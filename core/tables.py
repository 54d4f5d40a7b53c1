"""SQLAlchemy Core table definitions for the database schema."""

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Float,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    Time,
    UniqueConstraint,
    func,
)

from .enums import event_type_enum

# Naming convention for constraints (helps Alembic generate better names)
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}
metadata = MetaData(naming_convention=convention)


# =====================================================
# 1. GOOGLE_CALENDAR_TOKENS
# =====================================================
# One OAuth credential record per user, upserted on user_id.
google_calendar_tokens = Table(
    "google_calendar_tokens",
    metadata,
    Column("user_id", Text, primary_key=True),
    Column("access_token", Text, nullable=False),
    Column("refresh_token", Text),  # NULL = cannot be renewed once expired
    Column("expiry_date", DateTime(timezone=True)),  # NULL = never expires
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    Column(
        "updated_at",
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    ),
)


# =====================================================
# 2. CALENDAR_EVENTS
# =====================================================
calendar_events = Table(
    "calendar_events",
    metadata,
    Column("event_id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Text, nullable=False),
    Column("class_id", Text),  # NULL for events pulled from Google Calendar
    Column("title", Text, nullable=False),
    Column("description", Text),
    Column("event_type", event_type_enum, nullable=False),
    Column("due_date", Date, nullable=False),
    Column("due_time", Time),  # NULL = all-day
    Column("confidence_score", Float),
    Column("source_text", Text),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    UniqueConstraint(
        "user_id",
        "title",
        "due_date",
        name="calendar_events_user_title_date_unique",
    ),
    Index("idx_calendar_events_user_id_due_date", "user_id", "due_date"),
)
