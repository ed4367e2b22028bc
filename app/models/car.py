"""Fleet database models."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.database import Base
from app.domain.car_state import CarStatus

if TYPE_CHECKING:
    from app.models.booking import Booking


class Category(Base):
    """Car category (economy, SUV, luxury...)."""

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name_en: Mapped[str] = mapped_column(String(100), nullable=False)
    name_ar: Mapped[str] = mapped_column(String(100), nullable=False, default="")

    cars: Mapped[list["Car"]] = relationship("Car", back_populates="category")


class Branch(Base):
    """Rental branch where cars are picked up and returned."""

    __tablename__ = "branches"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name_en: Mapped[str] = mapped_column(String(100), nullable=False)
    name_ar: Mapped[str] = mapped_column(String(100), nullable=False, default="")

    cars: Mapped[list["Car"]] = relationship("Car", back_populates="branch")


class Car(Base):
    """Rentable car."""

    __tablename__ = "cars"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    brand_en: Mapped[str] = mapped_column(String(100), nullable=False)
    brand_ar: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    model_en: Mapped[str] = mapped_column(String(100), nullable=False)
    model_ar: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    plate_number: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)

    # Rates
    daily_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    weekly_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    monthly_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    status: Mapped[int] = mapped_column(
        Integer, nullable=False, default=int(CarStatus.AVAILABLE), index=True
    )  # CarStatus
    description_en: Mapped[str | None] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("categories.id"), nullable=False, index=True
    )
    branch_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("branches.id"), nullable=False, index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    category: Mapped["Category"] = relationship("Category", back_populates="cars")
    branch: Mapped["Branch"] = relationship("Branch", back_populates="cars")
    bookings: Mapped[list["Booking"]] = relationship("Booking", back_populates="car")
