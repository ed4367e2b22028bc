"""Admin dashboard schemas (read-only)."""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field


class DashboardFilter(BaseModel):
    """Filters shared by the dashboard endpoints."""

    start_date: datetime | None = None
    end_date: datetime | None = None
    branch_id: int | None = None
    category_id: int | None = None
    period: Literal["day", "week", "month", "year"] = "month"


class OverallStats(BaseModel):
    total_bookings: int
    total_revenue: Decimal
    active_cars: int
    total_customers: int
    pending_bookings: int
    completed_bookings: int
    average_booking_value: Decimal
    car_utilization_rate: float


class DailyRevenue(BaseModel):
    day: date
    revenue: Decimal
    booking_count: int


class MonthlyRevenue(BaseModel):
    year: int
    month: int
    month_name: str
    revenue: Decimal
    booking_count: int


class RevenueStats(BaseModel):
    today_revenue: Decimal
    week_revenue: Decimal
    month_revenue: Decimal
    year_revenue: Decimal
    previous_month_revenue: Decimal
    monthly_growth_percentage: float
    daily_revenue: list[DailyRevenue] = Field(default_factory=list)
    monthly_revenue: list[MonthlyRevenue] = Field(default_factory=list)


class BookingStatusCount(BaseModel):
    status: str
    count: int
    percentage: float


class DailyBookings(BaseModel):
    day: date
    booking_count: int
    completed_count: int
    cancelled_count: int


class BookingStats(BaseModel):
    today_bookings: int
    week_bookings: int
    month_bookings: int
    year_bookings: int
    cancelled_bookings: int
    cancellation_rate: float
    bookings_by_status: list[BookingStatusCount] = Field(default_factory=list)
    daily_bookings: list[DailyBookings] = Field(default_factory=list)


class CarGroupStats(BaseModel):
    """Fleet breakdown for one category or branch."""

    id: int
    name: str
    total_cars: int
    available_cars: int
    rented_cars: int
    utilization_rate: float


class CarStats(BaseModel):
    total_cars: int
    available_cars: int
    rented_cars: int
    maintenance_cars: int
    out_of_service_cars: int
    utilization_rate: float
    cars_by_category: list[CarGroupStats] = Field(default_factory=list)
    cars_by_branch: list[CarGroupStats] = Field(default_factory=list)


class CustomerSegment(BaseModel):
    segment_name: str
    customer_count: int
    percentage: float
    average_spending: Decimal


class CustomerStats(BaseModel):
    total_customers: int
    new_customers_this_month: int
    active_customers: int
    customer_retention_rate: float
    average_loyalty_points: Decimal
    customer_segments: list[CustomerSegment] = Field(default_factory=list)


class PopularCar(BaseModel):
    car_id: int
    brand: str
    model: str
    plate_number: str
    booking_count: int
    revenue: Decimal


class RecentBooking(BaseModel):
    booking_id: int
    booking_number: str
    customer_name: str
    car_info: str
    start_date: datetime
    end_date: datetime
    total_amount: Decimal
    status: str
    created_at: datetime


class DashboardStats(BaseModel):
    """Every dashboard section in one document."""

    overall_stats: OverallStats
    revenue_stats: RevenueStats
    booking_stats: BookingStats
    car_stats: CarStats
    customer_stats: CustomerStats
    popular_cars: list[PopularCar] = Field(default_factory=list)
    recent_bookings: list[RecentBooking] = Field(default_factory=list)
