"""Calendar sync schema: Google tokens and calendar events.

Revision ID: 001
Revises:
Create Date: 2026-10-18

google_calendar_tokens holds one OAuth credential record per user.
calendar_events holds local and Google-pulled events, deduplicated on
(user_id, title, due_date).
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

event_type = sa.Enum(
    "assignment",
    "exam",
    "reading",
    "other",
    "google_calendar",
    name="calendar_event_type",
)


def upgrade() -> None:
    op.create_table(
        "google_calendar_tokens",
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("access_token", sa.Text(), nullable=False),
        sa.Column("refresh_token", sa.Text(), nullable=True),
        sa.Column("expiry_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=True,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("user_id", name=op.f("pk_google_calendar_tokens")),
    )

    op.create_table(
        "calendar_events",
        sa.Column("event_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("class_id", sa.Text(), nullable=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("event_type", event_type, nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("due_time", sa.Time(), nullable=True),
        sa.Column("confidence_score", sa.Float(), nullable=True),
        sa.Column("source_text", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("event_id", name=op.f("pk_calendar_events")),
        sa.UniqueConstraint(
            "user_id",
            "title",
            "due_date",
            name="calendar_events_user_title_date_unique",
        ),
    )
    op.create_index(
        "idx_calendar_events_user_id_due_date",
        "calendar_events",
        ["user_id", "due_date"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("idx_calendar_events_user_id_due_date", table_name="calendar_events")
    op.drop_table("calendar_events")
    event_type.drop(op.get_bind(), checkfirst=True)
    op.drop_table("google_calendar_tokens")
