#!/usr/bin/env python3
"""
Run the ended-booking cleanup once, outside the Celery schedule.

Usage:
    python scripts/close_ended_bookings.py
    python scripts/close_ended_bookings.py --now 2025-06-01T12:00:00+00:00
"""

import argparse
import asyncio
import logging
from datetime import UTC, datetime

from app.database import close_db, get_db_context
from app.services.booking_cleanup_service import close_ended_bookings


async def run(now: datetime | None) -> int:
    """Close ended bookings and release their cars."""
    try:
        async with get_db_context() as db:
            return await close_ended_bookings(db, now)
    finally:
        await close_db()


def parse_now(value: str) -> datetime:
    """Parse an ISO 8601 timestamp; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Close bookings whose end date has passed")
    parser.add_argument("--now", type=parse_now, help="Reference time (ISO 8601, default: current UTC time)")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

    closed = asyncio.run(run(args.now))
    print(f"Closed bookings: {closed}")
