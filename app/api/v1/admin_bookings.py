"""Admin booking maintenance endpoints."""

import logging
import time
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import AdminPrincipal, get_current_admin, get_db
from app.schemas.booking import CloseEndedBookingsResult
from app.schemas.common import ApiResponse
from app.services.booking_cleanup_service import close_ended_bookings

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/close-ended", response_model=ApiResponse[CloseEndedBookingsResult])
async def close_ended_bookings_now(
    current_user: Annotated[AdminPrincipal, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse[CloseEndedBookingsResult]:
    """Run the ended-booking cleanup once, outside the schedule."""
    ran_at = datetime.now(UTC)
    started = time.perf_counter()
    logger.info(f"Manual booking cleanup requested by {current_user.id}")

    closed = await close_ended_bookings(db, ran_at)
    result = CloseEndedBookingsResult(
        closed=closed,
        ran_at=ran_at,
        duration_seconds=round(time.perf_counter() - started, 3),
    )
    return ApiResponse[CloseEndedBookingsResult].success(
        result, message=f"{closed} ended bookings closed"
    )
