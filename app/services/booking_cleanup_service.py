"""Stale booking cleanup.

A reconciliation tick closes in-progress bookings whose rental window has
ended and then recomputes availability for the cars they referenced:

    BookingReconciler -> bulk status update -> AvailabilityRecalculator
                      -> per-car active booking check -> car status update

Both components talk to storage only through a ``BookingStore``; the
SQLAlchemy implementation is ``SqlBookingStore``.
"""

import logging
import time
from collections.abc import Iterable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import AsyncIterator, Protocol

from sqlalchemy import exists, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.booking_state import ACTIVE_BOOKING_STATUSES, BookingStatus
from app.domain.car_state import CarStatus
from app.models.booking import Booking
from app.models.car import Car

logger = logging.getLogger(__name__)

_ACTIVE_STATUS_VALUES = sorted(int(s) for s in ACTIVE_BOOKING_STATUSES)


@dataclass(frozen=True)
class EndedBooking:
    """Projection of a booking found past its end date."""

    id: int
    car_id: int
    booking_number: str


class BookingStore(Protocol):
    """Storage operations needed by the cleanup components."""

    async def find_ended_active_bookings(self, now: datetime) -> list[EndedBooking]:
        ...

    async def close_ended_in_progress_bookings(self, now: datetime) -> int:
        ...

    async def has_active_bookings(self, car_id: int) -> bool:
        ...

    async def mark_car_available(self, car_id: int) -> int:
        ...

    def isolated(self) -> AbstractAsyncContextManager[None]:
        ...


class SqlBookingStore:
    """``BookingStore`` backed by an async SQLAlchemy session."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def find_ended_active_bookings(self, now: datetime) -> list[EndedBooking]:
        result = await self.db.execute(
            select(Booking.id, Booking.car_id, Booking.booking_number)
            .where(
                Booking.end_date < now,
                Booking.status.in_(_ACTIVE_STATUS_VALUES),
            )
            .order_by(Booking.id)
        )
        return [EndedBooking(*row) for row in result.all()]

    async def close_ended_in_progress_bookings(self, now: datetime) -> int:
        result = await self.db.execute(
            update(Booking)
            .where(
                Booking.end_date < now,
                Booking.status == int(BookingStatus.IN_PROGRESS),
            )
            .values(status=int(BookingStatus.CLOSED), updated_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    async def has_active_bookings(self, car_id: int) -> bool:
        result = await self.db.execute(
            select(
                exists().where(
                    Booking.car_id == car_id,
                    Booking.status.in_(_ACTIVE_STATUS_VALUES),
                )
            )
        )
        return bool(result.scalar())

    async def mark_car_available(self, car_id: int) -> int:
        result = await self.db.execute(
            update(Car)
            .where(Car.id == car_id)
            .values(status=int(CarStatus.AVAILABLE))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    @asynccontextmanager
    async def isolated(self) -> AsyncIterator[None]:
        # SAVEPOINT: a failed statement only rolls back this car's work
        async with self.db.begin_nested():
            yield


# ============ AVAILABILITY ============


class CarUpdateResult(str, Enum):
    UPDATED = "updated"
    MISSING = "missing"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class CarAvailability:
    car_id: int
    result: CarUpdateResult
    error: str | None = None


@dataclass
class AvailabilityOutcome:
    """Per-car results of one recalculation pass."""

    results: list[CarAvailability] = field(default_factory=list)

    @property
    def updated_count(self) -> int:
        return sum(1 for r in self.results if r.result == CarUpdateResult.UPDATED)

    @property
    def failed_ids(self) -> list[int]:
        return [r.car_id for r in self.results if r.result == CarUpdateResult.FAILED]

    @property
    def succeeded(self) -> bool:
        return not self.failed_ids


class AvailabilityRecalculator:
    """Marks cars Available once no active booking references them."""

    def __init__(self, store: BookingStore) -> None:
        self.store = store

    async def recalculate_availability(self, car_ids: Iterable[int]) -> AvailabilityOutcome:
        """Recompute availability for each car independently.

        A failure on one car is logged and recorded in the outcome; the
        remaining cars are still processed.
        """
        outcome = AvailabilityOutcome()
        for car_id in dict.fromkeys(car_ids):
            try:
                outcome.results.append(await self._recalculate_car(car_id))
            except Exception as e:
                logger.error(f"Failed to recalculate availability for car {car_id}: {e}")
                outcome.results.append(
                    CarAvailability(car_id, CarUpdateResult.FAILED, error=str(e))
                )

        if outcome.results:
            logger.info(
                f"Availability recalculated: cars={len(outcome.results)}, "
                f"updated={outcome.updated_count}, failed={len(outcome.failed_ids)}"
            )
        return outcome

    async def _recalculate_car(self, car_id: int) -> CarAvailability:
        async with self.store.isolated():
            if await self.store.has_active_bookings(car_id):
                return CarAvailability(car_id, CarUpdateResult.SKIPPED)
            rows = await self.store.mark_car_available(car_id)

        if rows == 0:
            logger.warning(f"Car {car_id} not found while updating availability")
            return CarAvailability(car_id, CarUpdateResult.MISSING)

        logger.info(f"Car {car_id} marked as available")
        return CarAvailability(car_id, CarUpdateResult.UPDATED)


# ============ RECONCILIATION ============


class BookingReconciler:
    """Closes in-progress bookings whose end date has passed."""

    def __init__(self, store: BookingStore, recalculator: AvailabilityRecalculator) -> None:
        self.store = store
        self.recalculator = recalculator

    async def reconcile_stale_bookings(self, now: datetime | None = None) -> int:
        """Run one reconciliation tick.

        Args:
            now: Reference time; defaults to the current UTC time

        Returns:
            Number of bookings moved to Closed
        """
        now = now or datetime.now(UTC)
        started = time.perf_counter()
        found: int | None = None
        closed: int | None = None
        logger.info(f"Starting stale booking cleanup at {now.isoformat()}")

        try:
            ended = await self.store.find_ended_active_bookings(now)
            found = len(ended)
            if not ended:
                logger.info("No ended bookings to close")
                return 0

            car_ids = list(dict.fromkeys(b.car_id for b in ended))
            closed = await self.store.close_ended_in_progress_bookings(now)
            logger.info(f"Closed {closed} of {found} ended bookings")

            outcome = await self.recalculator.recalculate_availability(car_ids)
            if not outcome.succeeded:
                logger.warning(
                    f"Availability not recalculated for cars {outcome.failed_ids}"
                )
        except SQLAlchemyError as e:
            logger.error(
                f"Database error in reconcile_stale_bookings at {now.isoformat()} "
                f"(found={found}, closed={closed}): {e}"
            )
            raise
        except Exception as e:
            logger.error(
                f"Unexpected error in reconcile_stale_bookings at {now.isoformat()} "
                f"(found={found}, closed={closed}): {e}"
            )
            raise

        duration_ms = int((time.perf_counter() - started) * 1000)
        logger.info(f"Stale booking cleanup finished: closed={closed}, duration={duration_ms}ms")
        return closed


async def close_ended_bookings(db: AsyncSession, now: datetime | None = None) -> int:
    """Wire the SQL store into a reconciler and run one tick."""
    store = SqlBookingStore(db)
    reconciler = BookingReconciler(store, AvailabilityRecalculator(store))
    return await reconciler.reconcile_stale_bookings(now)
