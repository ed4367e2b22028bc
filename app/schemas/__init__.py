"""Pydantic schemas for API validation."""

from app.schemas.booking import CloseEndedBookingsResult
from app.schemas.common import ApiResponse, BulkOperationResult, Page
from app.schemas.dashboard import (
    BookingStats,
    CarStats,
    CustomerStats,
    DashboardFilter,
    DashboardStats,
    OverallStats,
    PopularCar,
    RecentBooking,
    RevenueStats,
)
from app.schemas.extra import (
    AdminExtraTypePrice,
    BulkPricingItem,
    ExtraTypePriceCreate,
    ExtraTypePriceFilter,
    ExtraTypePriceUpdate,
    ExtraTypePricingUpdate,
    PricingAdjustmentRequest,
    PricingHistoryEntry,
    ValidationResult,
    ValidationRules,
)

__all__ = [
    # Common
    "ApiResponse",
    "BulkOperationResult",
    "Page",
    # Booking
    "CloseEndedBookingsResult",
    # Dashboard
    "DashboardFilter",
    "DashboardStats",
    "OverallStats",
    "RevenueStats",
    "BookingStats",
    "CarStats",
    "CustomerStats",
    "PopularCar",
    "RecentBooking",
    # Extras
    "AdminExtraTypePrice",
    "ExtraTypePriceCreate",
    "ExtraTypePriceUpdate",
    "ExtraTypePricingUpdate",
    "ExtraTypePriceFilter",
    "BulkPricingItem",
    "PricingAdjustmentRequest",
    "PricingHistoryEntry",
    "ValidationResult",
    "ValidationRules",
]
