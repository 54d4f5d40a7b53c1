"""SQLAlchemy enum definitions for the database schema."""

import enum

from sqlalchemy import Enum as SQLEnum


# =====================================================
# Python Enum Classes
# =====================================================


class EventType(str, enum.Enum):
    assignment = "assignment"
    exam = "exam"
    reading = "reading"
    other = "other"
    # Rows pulled from a user's Google Calendar
    google_calendar = "google_calendar"


# =====================================================
# SQLAlchemy Enum Types
# =====================================================

event_type_enum = SQLEnum(EventType, name="calendar_event_type", native_enum=True)
