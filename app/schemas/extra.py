"""Extras price management schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

from app.domain.extra_pricing import (
    DAYS_PER_MONTH,
    DAYS_PER_WEEK,
    MAX_DESCRIPTION_LENGTH,
    MAX_NAME_LENGTH,
    ExtraType,
    discount_percentage,
    monthly_savings,
    weekly_savings,
)

# ============ ADMIN VIEW ============


class AdminExtraTypePrice(BaseModel):
    """Extra with usage statistics and computed savings."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    extra_type: ExtraType
    extra_type_name: str
    name_ar: str
    name_en: str
    description_ar: str
    description_en: str
    daily_price: Decimal
    weekly_price: Decimal
    monthly_price: Decimal
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    # Usage statistics
    total_bookings: int = 0
    active_bookings: int = 0
    total_revenue: Decimal = Decimal("0")
    usage_count: int = 0
    last_used: datetime | None = None

    @computed_field
    @property
    def weekly_savings(self) -> Decimal:
        return weekly_savings(self.daily_price, self.weekly_price)

    @computed_field
    @property
    def monthly_savings(self) -> Decimal:
        return monthly_savings(self.daily_price, self.monthly_price)

    @computed_field
    @property
    def weekly_discount_percentage(self) -> Decimal:
        return discount_percentage(self.weekly_savings, self.daily_price, DAYS_PER_WEEK)

    @computed_field
    @property
    def monthly_discount_percentage(self) -> Decimal:
        return discount_percentage(self.monthly_savings, self.daily_price, DAYS_PER_MONTH)


# ============ WRITE MODELS ============


class ExtraTypePriceCreate(BaseModel):
    """Schema for creating an extra.

    Positive prices and required names are checked by the service so that
    all problems are reported together.
    """

    extra_type: ExtraType
    name_ar: str = Field(default="", max_length=MAX_NAME_LENGTH)
    name_en: str = Field(default="", max_length=MAX_NAME_LENGTH)
    description_ar: str = Field(default="", max_length=MAX_DESCRIPTION_LENGTH)
    description_en: str = Field(default="", max_length=MAX_DESCRIPTION_LENGTH)
    daily_price: Decimal = Field(..., le=10000, decimal_places=2)
    weekly_price: Decimal = Field(..., le=50000, decimal_places=2)
    monthly_price: Decimal = Field(..., le=200000, decimal_places=2)
    is_active: bool = True


class ExtraTypePriceUpdate(BaseModel):
    """Partial update; only fields that are set are applied."""

    name_ar: str | None = Field(default=None, max_length=MAX_NAME_LENGTH)
    name_en: str | None = Field(default=None, max_length=MAX_NAME_LENGTH)
    description_ar: str | None = Field(default=None, max_length=MAX_DESCRIPTION_LENGTH)
    description_en: str | None = Field(default=None, max_length=MAX_DESCRIPTION_LENGTH)
    daily_price: Decimal | None = Field(default=None, le=10000, decimal_places=2)
    weekly_price: Decimal | None = Field(default=None, le=50000, decimal_places=2)
    monthly_price: Decimal | None = Field(default=None, le=200000, decimal_places=2)
    is_active: bool | None = None


class ExtraTypePricingUpdate(BaseModel):
    daily_price: Decimal = Field(..., le=10000, decimal_places=2)
    weekly_price: Decimal = Field(..., le=50000, decimal_places=2)
    monthly_price: Decimal = Field(..., le=200000, decimal_places=2)
    reason: str | None = Field(default=None, max_length=MAX_DESCRIPTION_LENGTH)


class BulkPricingItem(BaseModel):
    id: int
    daily_price: Decimal | None = None
    weekly_price: Decimal | None = None
    monthly_price: Decimal | None = None


class BulkIdsRequest(BaseModel):
    ids: list[int] = Field(..., min_length=1)


class BulkStatusRequest(BaseModel):
    ids: list[int] = Field(..., min_length=1)
    is_active: bool


class PricingAdjustmentRequest(BaseModel):
    ids: list[int] = Field(..., min_length=1)
    percentage: Decimal = Field(..., gt=0, le=100)
    is_increase: bool = True


# ============ QUERY MODELS ============


class ExtraTypePriceFilter(BaseModel):
    """Listing filter, sort and pagination options."""

    extra_type: ExtraType | None = None
    is_active: bool | None = None
    min_daily_price: Decimal | None = None
    max_daily_price: Decimal | None = None
    min_weekly_price: Decimal | None = None
    max_weekly_price: Decimal | None = None
    min_monthly_price: Decimal | None = None
    max_monthly_price: Decimal | None = None
    search_term: str | None = None
    created_after: datetime | None = None
    created_before: datetime | None = None
    updated_after: datetime | None = None
    updated_before: datetime | None = None
    sort_by: str = "name_en"
    sort_order: Literal["asc", "desc"] = "asc"
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=10, ge=1, le=100)


# ============ RESULTS ============


class PricingHistoryEntry(BaseModel):
    id: str
    extra_type_price_id: int
    old_daily_price: Decimal
    new_daily_price: Decimal
    old_weekly_price: Decimal
    new_weekly_price: Decimal
    old_monthly_price: Decimal
    new_monthly_price: Decimal
    reason: str = ""
    updated_by: str = ""
    updated_at: datetime | None = None


class ValidationResult(BaseModel):
    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class ValidationRules(BaseModel):
    min_daily_price: Decimal
    max_daily_price: Decimal
    min_weekly_price: Decimal
    max_weekly_price: Decimal
    min_monthly_price: Decimal
    max_monthly_price: Decimal
    max_name_length: int
    max_description_length: int
    require_unique_names: bool = True
    allowed_extra_types: list[ExtraType] = Field(default_factory=list)
