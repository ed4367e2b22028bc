"""Admin HTTP API tests."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import select

from app.domain.booking_state import BookingStatus
from app.domain.car_state import CarStatus
from app.models import Booking, Car
from tests.conftest import Seeder, auth_headers

pytestmark = pytest.mark.anyio

EXTRAS = "/api/v1/admin/extra-type-prices"


async def seed_committed(session_factory, build):
    """Run a seeding coroutine in its own committed session."""
    async with session_factory() as session:
        result = await build(Seeder(session))
        await session.commit()
        return result


# ==================== AUTH & ENVELOPE ====================


async def test_missing_token_is_rejected(client):
    response = await client.get("/api/v1/admin/dashboard/overall")

    assert response.status_code == 401
    body = response.json()
    assert body["succeeded"] is False
    assert body["message"] == "Not authenticated"
    assert body["status_code"] == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


async def test_invalid_token_is_rejected(client):
    response = await client.get(
        "/api/v1/admin/dashboard/overall",
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert response.status_code == 401


async def test_non_admin_is_forbidden(client):
    response = await client.get(
        "/api/v1/admin/dashboard/overall", headers=auth_headers("customer")
    )

    assert response.status_code == 403
    assert response.json()["succeeded"] is False


async def test_responses_carry_request_headers(client, admin_headers):
    response = await client.get(f"{EXTRAS}/validation-rules", headers=admin_headers)

    assert response.status_code == 200
    assert "X-Request-ID" in response.headers
    assert "X-Response-Time" in response.headers
    assert response.headers["X-Content-Type-Options"] == "nosniff"


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


# ==================== DASHBOARD ====================


async def test_overall_stats_endpoint(client, admin_headers, session_factory):
    async def build(seed):
        user = await seed.user()
        car = await seed.car(status=int(CarStatus.RENTED))
        await seed.booking(user, car, BookingStatus.COMPLETED)

    await seed_committed(session_factory, build)

    response = await client.get("/api/v1/admin/dashboard/overall", headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["succeeded"] is True
    assert body["data"]["total_bookings"] == 1
    assert body["data"]["total_revenue"] == "300.00"
    assert body["data"]["car_utilization_rate"] == 100.0


async def test_dashboard_stats_endpoint(client, admin_headers, session_factory):
    async def build(seed):
        user = await seed.user()
        car = await seed.car()
        await seed.booking(
            user, car, BookingStatus.CONFIRMED, end_date=datetime.now(UTC) + timedelta(days=3)
        )

    await seed_committed(session_factory, build)

    response = await client.get("/api/v1/admin/dashboard/stats", headers=admin_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert set(data) == {
        "overall_stats",
        "revenue_stats",
        "booking_stats",
        "car_stats",
        "customer_stats",
        "popular_cars",
        "recent_bookings",
    }
    assert len(data["revenue_stats"]["daily_revenue"]) == 31
    assert data["recent_bookings"][0]["status"] == "Confirmed"


async def test_popular_cars_count_is_validated(client, admin_headers):
    response = await client.get(
        "/api/v1/admin/dashboard/popular-cars", params={"count": 0}, headers=admin_headers
    )

    assert response.status_code == 422
    body = response.json()
    assert body["message"] == "Validation failed"
    assert body["errors"][0].startswith("query.count:")


async def test_export_returns_text_attachment(client, admin_headers):
    response = await client.get("/api/v1/admin/dashboard/export", headers=admin_headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert response.headers["content-disposition"].startswith(
        "attachment; filename=dashboard_report_"
    )
    assert "=== OVERALL STATISTICS ===" in response.text


# ==================== EXTRAS ====================


async def test_extras_crud_flow(client, admin_headers):
    payload = {
        "extra_type": 3,
        "name_en": "Additional Driver",
        "name_ar": "سائق إضافي",
        "description_en": "Add an additional authorized driver",
        "daily_price": "30.00",
        "weekly_price": "180.00",
        "monthly_price": "600.00",
    }

    created = await client.post(EXTRAS, json=payload, headers=admin_headers)
    assert created.status_code == 201
    body = created.json()
    assert body["status_code"] == 201
    extra = body["data"]
    assert extra["extra_type_name"] == "AdditionalDriver"
    assert extra["weekly_savings"] == "30.00"

    listed = await client.get(EXTRAS, params={"search_term": "driver"}, headers=admin_headers)
    assert listed.json()["data"]["total_count"] == 1

    updated = await client.put(
        f"{EXTRAS}/{extra['id']}", json={"description_en": "Second driver"}, headers=admin_headers
    )
    assert updated.status_code == 200
    assert updated.json()["data"]["description_en"] == "Second driver"
    assert updated.json()["data"]["name_en"] == "Additional Driver"

    deactivated = await client.post(f"{EXTRAS}/{extra['id']}/deactivate", headers=admin_headers)
    assert deactivated.json()["data"]["is_active"] is False

    can_delete = await client.get(f"{EXTRAS}/{extra['id']}/can-delete", headers=admin_headers)
    assert can_delete.json()["data"] is True

    deleted = await client.delete(f"{EXTRAS}/{extra['id']}", headers=admin_headers)
    assert deleted.status_code == 200
    assert deleted.json()["message"] == "Extra type price deleted successfully"

    missing = await client.get(f"{EXTRAS}/{extra['id']}", headers=admin_headers)
    assert missing.status_code == 404
    assert missing.json()["message"] == f"Extra type price with ID '{extra['id']}' not found"


async def test_create_with_invalid_data_returns_error_list(client, admin_headers):
    response = await client.post(
        EXTRAS,
        json={
            "extra_type": 1,
            "name_en": "",
            "name_ar": "",
            "daily_price": "0",
            "weekly_price": "10",
            "monthly_price": "10",
        },
        headers=admin_headers,
    )

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Validation failed"
    assert body["errors"] == [
        "Daily price must be greater than 0",
        "English name is required",
        "Arabic name is required",
    ]


async def test_unknown_extra_type_is_a_request_error(client, admin_headers):
    response = await client.post(
        EXTRAS,
        json={
            "extra_type": 42,
            "name_en": "Teleporter",
            "name_ar": "ناقل",
            "daily_price": "1",
            "weekly_price": "1",
            "monthly_price": "1",
        },
        headers=admin_headers,
    )

    assert response.status_code == 422
    assert response.json()["errors"][0].startswith("extra_type:")


async def test_pricing_update_and_history(client, admin_headers, session_factory):
    extra = await seed_committed(session_factory, lambda seed: seed.extra())
    headers = auth_headers("admin", sub="pricing-admin")

    response = await client.put(
        f"{EXTRAS}/{extra.id}/pricing",
        json={
            "daily_price": "27.50",
            "weekly_price": "165.00",
            "monthly_price": "550.00",
            "reason": "Supplier price change",
        },
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["data"]["daily_price"] == "27.50"

    history = await client.get(f"{EXTRAS}/{extra.id}/pricing-history", headers=admin_headers)
    entries = history.json()["data"]
    assert len(entries) == 1
    assert entries[0]["old_daily_price"] == "25.00"
    assert entries[0]["new_daily_price"] == "27.50"
    assert entries[0]["reason"] == "Supplier price change"
    assert entries[0]["updated_by"] == "pricing-admin"


async def test_bulk_status_and_adjustment(client, admin_headers, session_factory):
    async def build(seed):
        return [await seed.extra(), await seed.extra()]

    first, second = await seed_committed(session_factory, build)

    status_result = await client.post(
        f"{EXTRAS}/bulk-status",
        json={"ids": [first.id, second.id, 999], "is_active": False},
        headers=admin_headers,
    )
    data = status_result.json()["data"]
    assert data["successful_items"] == 2
    assert data["failed_items"] == 1
    assert data["is_successful"] is False

    adjustment = await client.post(
        f"{EXTRAS}/pricing-adjustment",
        json={"ids": [first.id], "percentage": "20", "is_increase": False},
        headers=admin_headers,
    )
    assert adjustment.json()["data"]["is_successful"] is True

    refreshed = await client.get(f"{EXTRAS}/{first.id}", headers=admin_headers)
    assert refreshed.json()["data"]["daily_price"] == "20.00"
    assert refreshed.json()["data"]["is_active"] is False


async def test_check_name_unique(client, admin_headers, session_factory):
    extra = await seed_committed(
        session_factory, lambda seed: seed.extra(name_en="Roof Rack", name_ar="حمالة سقف")
    )

    taken = await client.get(
        f"{EXTRAS}/check-name-unique",
        params={"name_en": "Roof Rack", "name_ar": "x"},
        headers=admin_headers,
    )
    assert taken.json()["data"] is False

    own = await client.get(
        f"{EXTRAS}/check-name-unique",
        params={"name_en": "Roof Rack", "name_ar": "حمالة سقف", "exclude_id": extra.id},
        headers=admin_headers,
    )
    assert own.json()["data"] is True


# ==================== BOOKINGS ====================


async def test_close_ended_bookings_endpoint(client, admin_headers, session_factory):
    async def build(seed):
        user = await seed.user()
        car = await seed.car(status=int(CarStatus.RENTED))
        booking = await seed.booking(
            user, car, BookingStatus.IN_PROGRESS, end_date=datetime.now(UTC) - timedelta(hours=2)
        )
        return booking.id, car.id

    booking_id, car_id = await seed_committed(session_factory, build)

    response = await client.post("/api/v1/admin/bookings/close-ended", headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "1 ended bookings closed"
    assert body["data"]["closed"] == 1

    async with session_factory() as session:
        status = await session.scalar(select(Booking.status).where(Booking.id == booking_id))
        car_status = await session.scalar(select(Car.status).where(Car.id == car_id))
    assert status == BookingStatus.CLOSED
    assert car_status == CarStatus.AVAILABLE

    again = await client.post("/api/v1/admin/bookings/close-ended", headers=admin_headers)
    assert again.json()["data"]["closed"] == 0
