"""Extras pricing domain logic.

Extras are priced per day, per week and per month. Weekly and monthly
prices are expected to be discounted against the daily price:
- weekly savings  = daily * 7  - weekly
- monthly savings = daily * 30 - monthly
"""

from decimal import ROUND_HALF_UP, Decimal
from enum import IntEnum


class ExtraType(IntEnum):
    """Rental add-on types."""

    GPS = 1
    CHILD_SEAT = 2
    ADDITIONAL_DRIVER = 3
    INSURANCE = 4
    WIFI_HOTSPOT = 5
    PHONE_CHARGER = 6
    BLUETOOTH = 7
    ROOF_RACK = 8
    SKI_RACK = 9
    BIKE_RACK = 10


EXTRA_TYPE_NAMES: dict[ExtraType, str] = {
    ExtraType.GPS: "GPS",
    ExtraType.CHILD_SEAT: "ChildSeat",
    ExtraType.ADDITIONAL_DRIVER: "AdditionalDriver",
    ExtraType.INSURANCE: "Insurance",
    ExtraType.WIFI_HOTSPOT: "WifiHotspot",
    ExtraType.PHONE_CHARGER: "PhoneCharger",
    ExtraType.BLUETOOTH: "Bluetooth",
    ExtraType.ROOF_RACK: "RoofRack",
    ExtraType.SKI_RACK: "SkiRack",
    ExtraType.BIKE_RACK: "BikeRack",
}

DAYS_PER_WEEK = 7
DAYS_PER_MONTH = 30

# (min, max) inclusive price bounds per period
PRICE_LIMITS: dict[str, tuple[Decimal, Decimal]] = {
    "daily": (Decimal("0.01"), Decimal("10000")),
    "weekly": (Decimal("0.01"), Decimal("50000")),
    "monthly": (Decimal("0.01"), Decimal("200000")),
}
MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500

CENT = Decimal("0.01")


def extra_type_name(extra_type: int) -> str:
    try:
        return EXTRA_TYPE_NAMES[ExtraType(extra_type)]
    except ValueError:
        return str(extra_type)


def weekly_savings(daily_price: Decimal, weekly_price: Decimal) -> Decimal:
    return daily_price * DAYS_PER_WEEK - weekly_price


def monthly_savings(daily_price: Decimal, monthly_price: Decimal) -> Decimal:
    return daily_price * DAYS_PER_MONTH - monthly_price


def discount_percentage(savings: Decimal, daily_price: Decimal, days: int) -> Decimal:
    """Savings as a percentage of the undiscounted period price.

    Returns 0 when the daily price is not positive.
    """
    if daily_price <= 0:
        return Decimal("0")
    return (savings / (daily_price * days) * 100).quantize(CENT, rounding=ROUND_HALF_UP)


def adjust_price(price: Decimal, percentage: Decimal, is_increase: bool) -> Decimal:
    """Apply a percentage increase or decrease, rounded to cents."""
    factor = Decimal("1") + (percentage / 100 if is_increase else -percentage / 100)
    return (price * factor).quantize(CENT, rounding=ROUND_HALF_UP)


def validate_prices(
    daily_price: Decimal | None,
    weekly_price: Decimal | None,
    monthly_price: Decimal | None,
) -> list[str]:
    """Check whichever prices are provided against PRICE_LIMITS."""
    errors: list[str] = []
    for period, value in (
        ("daily", daily_price),
        ("weekly", weekly_price),
        ("monthly", monthly_price),
    ):
        if value is None:
            continue
        low, high = PRICE_LIMITS[period]
        if value < low:
            errors.append(f"{period.capitalize()} price must be greater than 0")
        elif value > high:
            errors.append(f"{period.capitalize()} price must not exceed {high}")
    return errors


def pricing_warnings(
    daily_price: Decimal,
    weekly_price: Decimal,
    monthly_price: Decimal,
) -> list[str]:
    """Non-blocking notes about period prices that give no discount."""
    warnings: list[str] = []
    if weekly_savings(daily_price, weekly_price) < 0:
        warnings.append(f"Weekly price is higher than {DAYS_PER_WEEK} daily rentals")
    if monthly_savings(daily_price, monthly_price) < 0:
        warnings.append(f"Monthly price is higher than {DAYS_PER_MONTH} daily rentals")
    return warnings
