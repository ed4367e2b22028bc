"""Rental extras pricing model."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.database import Base

if TYPE_CHECKING:
    from app.models.booking import BookingExtra


class ExtraTypePrice(Base):
    """Price list entry for a rental add-on."""

    __tablename__ = "extra_type_prices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    extra_type: Mapped[int] = mapped_column(Integer, nullable=False, index=True)  # ExtraType
    name_en: Mapped[str] = mapped_column(String(100), nullable=False)
    name_ar: Mapped[str] = mapped_column(String(100), nullable=False)
    description_en: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    description_ar: Mapped[str] = mapped_column(String(500), nullable=False, default="")

    daily_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    weekly_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    monthly_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    booking_extras: Mapped[list["BookingExtra"]] = relationship(
        "BookingExtra", back_populates="extra_type_price"
    )
