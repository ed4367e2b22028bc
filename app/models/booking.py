"""Booking-related database models."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.database import Base
from app.domain.booking_state import BookingStatus

if TYPE_CHECKING:
    from app.models.car import Car
    from app.models.extra import ExtraTypePrice
    from app.models.user import User


class Booking(Base):
    """Car rental booking."""

    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    booking_number: Mapped[str] = mapped_column(
        String(30), unique=True, nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, index=True
    )
    car_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("cars.id"), nullable=False, index=True
    )

    # Rental window
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    total_days: Mapped[Decimal] = mapped_column(Numeric(6, 2), default=Decimal("0"))

    # Branches
    receiving_branch_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("branches.id"), index=True
    )
    delivery_branch_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("branches.id"), index=True
    )

    # Pricing
    car_rental_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    extras_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    total_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    discount_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    final_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))

    status: Mapped[int] = mapped_column(
        Integer, nullable=False, default=int(BookingStatus.OPEN), index=True
    )  # BookingStatus
    notes: Mapped[str | None] = mapped_column(Text)
    cancellation_reason: Mapped[str | None] = mapped_column(Text)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="bookings")
    car: Mapped["Car"] = relationship("Car", back_populates="bookings")
    booking_extras: Mapped[list["BookingExtra"]] = relationship(
        "BookingExtra", back_populates="booking", cascade="all, delete-orphan"
    )


class BookingExtra(Base):
    """An extra attached to a booking, priced at booking time."""

    __tablename__ = "booking_extras"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    booking_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    extra_type_price_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("extra_type_prices.id"), nullable=False, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    # Relationships
    booking: Mapped["Booking"] = relationship("Booking", back_populates="booking_extras")
    extra_type_price: Mapped["ExtraTypePrice"] = relationship(
        "ExtraTypePrice", back_populates="booking_extras"
    )
