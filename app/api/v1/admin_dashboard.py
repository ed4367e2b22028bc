"""Admin dashboard endpoints (read-only)."""

from datetime import UTC, datetime
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import AdminPrincipal, get_current_admin, get_db
from app.schemas.common import ApiResponse
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
from app.services.dashboard_service import dashboard_service

router = APIRouter()


def dashboard_filter(
    start_date: datetime | None = Query(default=None),
    end_date: datetime | None = Query(default=None),
    branch_id: int | None = Query(default=None),
    category_id: int | None = Query(default=None),
    period: Literal["day", "week", "month", "year"] = Query(default="month"),
) -> DashboardFilter:
    return DashboardFilter(
        start_date=start_date,
        end_date=end_date,
        branch_id=branch_id,
        category_id=category_id,
        period=period,
    )


Filters = Annotated[DashboardFilter, Depends(dashboard_filter)]


@router.get("/stats", response_model=ApiResponse[DashboardStats])
async def get_dashboard_stats(
    current_user: Annotated[AdminPrincipal, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
    filters: Filters,
) -> ApiResponse[DashboardStats]:
    """Get every dashboard section in one response."""
    data = await dashboard_service.get_dashboard_stats(db, filters)
    return ApiResponse[DashboardStats].success(DashboardStats(**data))


@router.get("/overall", response_model=ApiResponse[OverallStats])
async def get_overall_stats(
    current_user: Annotated[AdminPrincipal, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
    filters: Filters,
) -> ApiResponse[OverallStats]:
    data = await dashboard_service.get_overall_stats(db, filters)
    return ApiResponse[OverallStats].success(OverallStats(**data))


@router.get("/revenue", response_model=ApiResponse[RevenueStats])
async def get_revenue_stats(
    current_user: Annotated[AdminPrincipal, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
    filters: Filters,
) -> ApiResponse[RevenueStats]:
    data = await dashboard_service.get_revenue_stats(db, filters)
    return ApiResponse[RevenueStats].success(RevenueStats(**data))


@router.get("/bookings", response_model=ApiResponse[BookingStats])
async def get_booking_stats(
    current_user: Annotated[AdminPrincipal, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
    filters: Filters,
) -> ApiResponse[BookingStats]:
    data = await dashboard_service.get_booking_stats(db, filters)
    return ApiResponse[BookingStats].success(BookingStats(**data))


@router.get("/cars", response_model=ApiResponse[CarStats])
async def get_car_stats(
    current_user: Annotated[AdminPrincipal, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
    filters: Filters,
) -> ApiResponse[CarStats]:
    data = await dashboard_service.get_car_stats(db, filters)
    return ApiResponse[CarStats].success(CarStats(**data))


@router.get("/customers", response_model=ApiResponse[CustomerStats])
async def get_customer_stats(
    current_user: Annotated[AdminPrincipal, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
    filters: Filters,
) -> ApiResponse[CustomerStats]:
    data = await dashboard_service.get_customer_stats(db, filters)
    return ApiResponse[CustomerStats].success(CustomerStats(**data))


@router.get("/popular-cars", response_model=ApiResponse[list[PopularCar]])
async def get_popular_cars(
    current_user: Annotated[AdminPrincipal, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
    filters: Filters,
    count: int = Query(default=10, ge=1, le=100),
) -> ApiResponse[list[PopularCar]]:
    data = await dashboard_service.get_popular_cars(db, count, filters)
    return ApiResponse[list[PopularCar]].success([PopularCar(**c) for c in data])


@router.get("/recent-bookings", response_model=ApiResponse[list[RecentBooking]])
async def get_recent_bookings(
    current_user: Annotated[AdminPrincipal, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
    count: int = Query(default=10, ge=1, le=100),
) -> ApiResponse[list[RecentBooking]]:
    data = await dashboard_service.get_recent_bookings(db, count)
    return ApiResponse[list[RecentBooking]].success([RecentBooking(**b) for b in data])


# ============ EXPORTS ============


@router.get("/export")
async def export_dashboard_report(
    current_user: Annotated[AdminPrincipal, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
    filters: Filters,
) -> Response:
    """Download the dashboard as a plain-text report."""
    now = datetime.now(UTC)
    content = await dashboard_service.export_report(db, filters, now)
    return Response(
        content=content,
        media_type="text/plain; charset=utf-8",
        headers={
            "Content-Disposition": f"attachment; filename=dashboard_report_{now:%Y%m%d_%H%M%S}.txt"
        },
    )
