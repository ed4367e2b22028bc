"""Car availability states."""

from enum import IntEnum


class CarStatus(IntEnum):
    """Fleet status of a car.

    Only the booking cleanup job moves a car back to AVAILABLE; every other
    transition is driven by fleet staff.
    """

    AVAILABLE = 1
    RENTED = 2
    MAINTENANCE = 3
    OUT_OF_SERVICE = 4
