"""Google OAuth credential record queries using SQLAlchemy Core."""

from datetime import datetime
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncConnection

from ..database import dialect_insert
from ..tables import google_calendar_tokens


async def get_credential(
    conn: AsyncConnection,
    user_id: str,
) -> dict[str, Any] | None:
    """Look up the credential record for a user."""
    result = await conn.execute(
        select(google_calendar_tokens).where(
            google_calendar_tokens.c.user_id == user_id
        )
    )
    row = result.mappings().first()
    return dict(row) if row else None


async def upsert_credential(
    conn: AsyncConnection,
    user_id: str,
    access_token: str,
    refresh_token: str | None,
    expiry_date: datetime | None,
) -> dict[str, Any]:
    """
    Insert or overwrite the user's credential record and return it.

    A missing refresh token keeps the one already stored; Google only
    sends a refresh token on some authorizations.
    """
    values = {
        "user_id": user_id,
        "access_token": access_token,
        "refresh_token": refresh_token,
        "expiry_date": expiry_date,
    }
    stmt = dialect_insert(conn, google_calendar_tokens).values(**values)
    stmt = stmt.on_conflict_do_update(
        index_elements=[google_calendar_tokens.c.user_id],
        set_={
            "access_token": stmt.excluded.access_token,
            "refresh_token": func.coalesce(
                stmt.excluded.refresh_token,
                google_calendar_tokens.c.refresh_token,
            ),
            "expiry_date": stmt.excluded.expiry_date,
            "updated_at": func.now(),
        },
    ).returning(google_calendar_tokens)

    result = await conn.execute(stmt)
    return dict(result.mappings().first())


async def update_access_token(
    conn: AsyncConnection,
    user_id: str,
    access_token: str,
    expiry_date: datetime | None,
) -> int:
    """
    Replace access token and expiry after a refresh.

    The refresh token column is left alone. Returns rows updated.
    """
    result = await conn.execute(
        update(google_calendar_tokens)
        .where(google_calendar_tokens.c.user_id == user_id)
        .values(access_token=access_token, expiry_date=expiry_date)
    )
    return result.rowcount


async def delete_credential(
    conn: AsyncConnection,
    user_id: str,
) -> int:
    """Delete the user's credential record. Returns count deleted (0 is fine)."""
    result = await conn.execute(
        delete(google_calendar_tokens).where(
            google_calendar_tokens.c.user_id == user_id
        )
    )
    return result.rowcount
