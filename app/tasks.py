"""Celery background tasks.

This module contains the periodic booking maintenance tasks.
"""

import asyncio
import logging
import time
from datetime import UTC, datetime

from celery import shared_task

from app.database import close_db, get_db_context
from app.services.booking_cleanup_service import close_ended_bookings as run_cleanup

logger = logging.getLogger(__name__)


def run_async(coro):
    """Run async function in sync context."""
    return asyncio.run(coro)


# ==================== BOOKING TASKS ====================


@shared_task(bind=True, max_retries=3)
def close_ended_bookings(self):
    """Close in-progress bookings whose end date has passed.

    Runs on the beat schedule (every minute by default). A failed run is
    retried; bookings it missed are picked up by the next run anyway.
    """
    started = time.perf_counter()
    logger.info(f"Booking cleanup task started at {datetime.now(UTC).isoformat()}")
    try:
        closed = run_async(_close_ended_bookings())
    except Exception as exc:
        logger.error(f"Booking cleanup task failed: {exc}")
        raise self.retry(exc=exc, countdown=60)

    duration = round(time.perf_counter() - started, 3)
    logger.info(f"Booking cleanup task finished: closed={closed}, duration={duration}s")
    return {"status": "success", "closed": closed, "duration_seconds": duration}


async def _close_ended_bookings() -> int:
    """Async implementation of the booking cleanup."""
    try:
        async with get_db_context() as db:
            return await run_cleanup(db)
    finally:
        # Pooled connections are bound to this event loop
        await close_db()
