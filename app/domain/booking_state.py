"""Booking statuses."""

from enum import IntEnum


class BookingStatus(IntEnum):
    """Booking statuses, ordered by lifecycle progress."""

    OPEN = 1
    CONFIRMED = 2
    IN_PROGRESS = 3
    COMPLETED = 4
    CANCELED = 5
    CLOSED = 6

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    BookingStatus.OPEN: "Open",
    BookingStatus.CONFIRMED: "Confirmed",
    BookingStatus.IN_PROGRESS: "InProgress",
    BookingStatus.COMPLETED: "Completed",
    BookingStatus.CANCELED: "Canceled",
    BookingStatus.CLOSED: "Closed",
}

# Bookings in these statuses still occupy their car
ACTIVE_BOOKING_STATUSES = frozenset(
    {BookingStatus.OPEN, BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS}
)


def status_label(status: int) -> str:
    """Human-readable status name, tolerant of unknown values."""
    try:
        return BookingStatus(status).label
    except ValueError:
        return str(status)
