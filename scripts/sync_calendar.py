#!/usr/bin/env python3
"""
Pull a user's Google Calendar events into the local database.

Usage:
    python scripts/sync_calendar.py --user-id USER [--calendar-id primary]
        [--start 2026-01-01T00:00:00Z] [--end 2026-12-31T00:00:00Z]
    python scripts/sync_calendar.py --user-id USER --status
"""

import argparse
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

load_dotenv(".env")
load_dotenv(".env.local", override=True)

from core.calendar.credentials import connection_status
from core.calendar.sync import pull_sync
from core.database import close_engine
from core.errors import CalendarSyncError


async def run(args: argparse.Namespace) -> int:
    try:
        if args.status:
            status = await connection_status(args.user_id)
            print(f"Connected: {status['connected']}")
            print(f"Token expiry: {status['lastSync'] or '-'}")
            print(f"Needs refresh: {status['needsRefresh']}")
            return 0

        result = await pull_sync(
            args.user_id,
            calendar_id=args.calendar_id,
            start=args.start,
            end=args.end,
        )
        print(f"Synced {result['syncedCount']} events for user {args.user_id}")
        for row in result["events"][:10]:
            when = row["due_date"].isoformat()
            if row["due_time"]:
                when += f" {row['due_time'].strftime('%H:%M')}"
            print(f"  - {when}  {row['title']}")
        if len(result["events"]) > 10:
            print(f"  ... and {len(result['events']) - 10} more")
        return 0
    except CalendarSyncError as e:
        print(f"Error [{e.code}]: {e.details}", file=sys.stderr)
        return 1
    finally:
        await close_engine()


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--user-id", required=True, help="User whose calendar to sync")
    parser.add_argument("--calendar-id", default="primary")
    parser.add_argument("--start", help="Window start (ISO 8601, default: now)")
    parser.add_argument("--end", help="Window end (ISO 8601, default: now + 365 days)")
    parser.add_argument(
        "--status", action="store_true", help="Only show connection status"
    )
    args = parser.parse_args()

    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
