"""Database models."""

from app.models.admin import AuditLog
from app.models.booking import Booking, BookingExtra
from app.models.car import Branch, Car, Category
from app.models.extra import ExtraTypePrice
from app.models.user import User

__all__ = [
    # User
    "User",
    # Fleet
    "Branch",
    "Car",
    "Category",
    # Booking
    "Booking",
    "BookingExtra",
    # Extras
    "ExtraTypePrice",
    # Admin
    "AuditLog",
]
