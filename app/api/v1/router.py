"""Main API router that includes all endpoint routers."""

from fastapi import APIRouter

from app.api.v1 import admin_bookings, admin_dashboard, admin_extras

api_router = APIRouter()

# Dashboard
api_router.include_router(
    admin_dashboard.router, prefix="/admin/dashboard", tags=["Admin Dashboard"]
)

# Extras
api_router.include_router(
    admin_extras.router, prefix="/admin/extra-type-prices", tags=["Admin Extras"]
)

# Booking maintenance
api_router.include_router(
    admin_bookings.router, prefix="/admin/bookings", tags=["Admin Bookings"]
)
