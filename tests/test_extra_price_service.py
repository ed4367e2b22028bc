"""Extras price service tests."""

from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy import select

from app.core.exceptions import BadRequestError, NotFoundError
from app.domain.booking_state import BookingStatus
from app.domain.extra_pricing import ExtraType
from app.models import AuditLog, ExtraTypePrice
from app.schemas.extra import (
    BulkPricingItem,
    ExtraTypePriceCreate,
    ExtraTypePriceFilter,
    ExtraTypePriceUpdate,
    ExtraTypePricingUpdate,
)
from app.services.extra_price_service import extra_price_service
from tests.conftest import NOW

pytestmark = pytest.mark.anyio

ADMIN = "admin-1"


def create_payload(**overrides) -> ExtraTypePriceCreate:
    values = {
        "extra_type": ExtraType.CHILD_SEAT,
        "name_en": "Child Safety Seat",
        "name_ar": "مقعد أطفال",
        "description_en": "Internationally certified child safety seat",
        "daily_price": Decimal("15.00"),
        "weekly_price": Decimal("90.00"),
        "monthly_price": Decimal("300.00"),
    }
    values.update(overrides)
    return ExtraTypePriceCreate(**values)


async def used_extra(seed, status=BookingStatus.CONFIRMED):
    extra = await seed.extra()
    booking = await seed.booking(await seed.user(), await seed.car(), status)
    await seed.booking_extra(booking, extra, quantity=2)
    return extra


# ==================== LISTING ====================


async def test_list_filters_search_and_paginates(db, seed):
    await seed.extra(name_en="Roof Rack", extra_type=int(ExtraType.ROOF_RACK),
                     daily_price=Decimal("35.00"))
    await seed.extra(name_en="Ski Rack", extra_type=int(ExtraType.SKI_RACK),
                     daily_price=Decimal("40.00"), is_active=False)
    await seed.extra(name_en="Bike Rack", extra_type=int(ExtraType.BIKE_RACK),
                     daily_price=Decimal("30.00"))
    await seed.extra(name_en="Portable WiFi", extra_type=int(ExtraType.WIFI_HOTSPOT),
                     daily_price=Decimal("20.00"), description_en="High-speed internet")

    racks = await extra_price_service.list_extras(
        db, ExtraTypePriceFilter(search_term="rack", page_size=2)
    )
    assert racks.total_count == 3
    assert racks.total_pages == 2
    assert [e.name_en for e in racks.items] == ["Bike Rack", "Roof Rack"]

    active_cheap = await extra_price_service.list_extras(
        db, ExtraTypePriceFilter(is_active=True, max_daily_price=Decimal("30"))
    )
    assert [e.name_en for e in active_cheap.items] == ["Bike Rack", "Portable WiFi"]

    by_description = await extra_price_service.list_extras(
        db, ExtraTypePriceFilter(search_term="HIGH-SPEED")
    )
    assert [e.name_en for e in by_description.items] == ["Portable WiFi"]

    by_type = await extra_price_service.list_extras(
        db, ExtraTypePriceFilter(extra_type=ExtraType.SKI_RACK)
    )
    assert [e.name_en for e in by_type.items] == ["Ski Rack"]


async def test_list_sorting_accepts_any_casing_and_falls_back_to_name(db, seed):
    await seed.extra(name_en="B", daily_price=Decimal("10.00"))
    await seed.extra(name_en="A", daily_price=Decimal("30.00"))
    await seed.extra(name_en="C", daily_price=Decimal("20.00"))

    by_price = await extra_price_service.list_extras(
        db, ExtraTypePriceFilter(sort_by="DailyPrice", sort_order="desc")
    )
    assert [e.name_en for e in by_price.items] == ["A", "C", "B"]

    unknown = await extra_price_service.list_extras(db, ExtraTypePriceFilter(sort_by="color"))
    assert [e.name_en for e in unknown.items] == ["A", "B", "C"]


async def test_search_term_wildcards_are_literal(db, seed):
    await seed.extra(name_en="100% Coverage")
    await seed.extra(name_en="Full Coverage")

    page = await extra_price_service.list_extras(db, ExtraTypePriceFilter(search_term="%"))

    assert [e.name_en for e in page.items] == ["100% Coverage"]


async def test_dto_includes_usage_and_savings(db, seed):
    extra = await used_extra(seed)

    dto = await extra_price_service.get_extra(db, extra.id)

    assert dto.extra_type_name == "GPS"
    assert dto.total_bookings == 1
    assert dto.active_bookings == 1
    assert dto.usage_count == 1
    assert dto.total_revenue == Decimal("50.00")
    assert dto.last_used is not None
    # 25 * 7 - 150 and 25 * 30 - 500
    assert dto.weekly_savings == Decimal("25.00")
    assert dto.monthly_savings == Decimal("250.00")
    assert dto.weekly_discount_percentage == Decimal("14.29")
    assert dto.monthly_discount_percentage == Decimal("33.33")


async def test_get_missing_extra_raises_not_found(db):
    with pytest.raises(NotFoundError) as exc_info:
        await extra_price_service.get_extra(db, 404)
    assert exc_info.value.detail == "Extra type price with ID '404' not found"


# ==================== CREATE / UPDATE ====================


async def test_create_extra(db):
    dto = await extra_price_service.create_extra(db, create_payload(), ADMIN)

    assert dto.id is not None
    assert dto.extra_type == ExtraType.CHILD_SEAT
    assert dto.total_bookings == 0
    stored = await db.get(ExtraTypePrice, dto.id)
    assert stored.name_en == "Child Safety Seat"


async def test_create_collects_every_validation_error(db, seed):
    await seed.extra(name_en="Child Safety Seat")
    payload = create_payload(
        name_ar="",
        daily_price=Decimal("0"),
        monthly_price=Decimal("-1"),
    )

    with pytest.raises(BadRequestError) as exc_info:
        await extra_price_service.create_extra(db, payload, ADMIN)

    assert exc_info.value.errors == [
        "Daily price must be greater than 0",
        "Monthly price must be greater than 0",
        "Arabic name is required",
        "An extra with this name already exists",
    ]


async def test_validate_extra_reports_without_saving(db):
    result = await extra_price_service.validate_extra(db, create_payload(name_en=" "))

    assert not result.is_valid
    assert result.errors == ["English name is required"]
    count = await db.execute(select(ExtraTypePrice.id))
    assert count.all() == []


async def test_name_uniqueness_excludes_the_entry_itself(db, seed):
    extra = await seed.extra(name_en="Dash Camera", name_ar="كاميرا قيادة")

    assert not await extra_price_service.is_name_unique(db, "Dash Camera", "other")
    assert not await extra_price_service.is_name_unique(db, "other", "كاميرا قيادة")
    assert await extra_price_service.is_name_unique(db, "Dash Camera", "x", exclude_id=extra.id)


async def test_update_is_partial_and_bumps_updated_at(db, seed):
    extra = await seed.extra(name_en="Emergency Kit")
    before = extra.updated_at

    dto = await extra_price_service.update_extra(
        db, extra.id, ExtraTypePriceUpdate(daily_price=Decimal("12.50")), ADMIN
    )

    assert dto.daily_price == Decimal("12.50")
    assert dto.name_en == "Emergency Kit"
    assert dto.weekly_price == Decimal("150.00")
    assert dto.updated_at > before


async def test_update_rejects_duplicate_name(db, seed):
    await seed.extra(name_en="Booster Seat")
    extra = await seed.extra(name_en="Infant Car Seat")

    with pytest.raises(BadRequestError) as exc_info:
        await extra_price_service.update_extra(
            db, extra.id, ExtraTypePriceUpdate(name_en="Booster Seat"), ADMIN
        )
    assert exc_info.value.errors == ["An extra with this name already exists"]


# ==================== DELETE ====================


async def test_delete_unused_extra(db, seed):
    extra = await seed.extra()

    await extra_price_service.delete_extra(db, extra.id, ADMIN)

    with pytest.raises(NotFoundError):
        await extra_price_service.get_extra(db, extra.id)


async def test_delete_refused_while_referenced_by_a_booking(db, seed):
    extra = await used_extra(seed, BookingStatus.COMPLETED)

    with pytest.raises(BadRequestError, match="used in bookings"):
        await extra_price_service.delete_extra(db, extra.id, ADMIN)


async def test_bulk_delete_reports_each_failure(db, seed):
    unused = await seed.extra()
    used = await used_extra(seed)

    result = await extra_price_service.bulk_delete(db, [unused.id, used.id, 999], ADMIN)

    assert result.total_items == 3
    assert result.successful_items == 1
    assert result.failed_items == 2
    assert not result.is_successful
    assert result.success_rate == 33.33
    assert result.errors == [
        f"ID {used.id}: Cannot delete extra type price that is used in bookings",
        "ID 999: Extra type price with ID '999' not found",
    ]


async def test_can_delete_only_counts_current_bookings(db, seed):
    confirmed = await used_extra(seed, BookingStatus.CONFIRMED)
    completed = await used_extra(seed, BookingStatus.COMPLETED)

    assert not await extra_price_service.can_delete(db, confirmed.id)
    assert await extra_price_service.can_delete(db, completed.id)


async def test_booking_count_with_date_range(db, seed):
    extra = await seed.extra()
    user = await seed.user()
    old = await seed.booking(user, await seed.car(), created_at=NOW - timedelta(days=60))
    recent = await seed.booking(user, await seed.car(), created_at=NOW - timedelta(days=5))
    await seed.booking_extra(old, extra)
    await seed.booking_extra(recent, extra)

    assert await extra_price_service.get_booking_count(db, extra.id) == 2
    assert await extra_price_service.get_booking_count(
        db, extra.id, start_date=NOW - timedelta(days=30)
    ) == 1


# ==================== STATUS ====================


async def test_activate_and_deactivate(db, seed):
    extra = await seed.extra()

    dto = await extra_price_service.set_active(db, extra.id, False, ADMIN)
    assert dto.is_active is False

    dto = await extra_price_service.set_active(db, extra.id, True, ADMIN)
    assert dto.is_active is True


async def test_bulk_status_counts_missing_ids_as_failed(db, seed):
    first = await seed.extra()
    second = await seed.extra()

    result = await extra_price_service.bulk_update_status(
        db, [first.id, second.id, 77], False, ADMIN
    )

    assert result.successful_items == 2
    assert result.errors == ["ID 77: Extra type price not found"]
    assert first.is_active is False
    assert second.is_active is False


# ==================== PRICING ====================


async def test_update_pricing_records_history(db, seed):
    extra = await seed.extra()

    await extra_price_service.update_pricing(
        db,
        extra.id,
        ExtraTypePricingUpdate(
            daily_price=Decimal("30.00"),
            weekly_price=Decimal("180.00"),
            monthly_price=Decimal("600.00"),
            reason="Summer season",
        ),
        ADMIN,
    )
    await extra_price_service.update_pricing(
        db,
        extra.id,
        ExtraTypePricingUpdate(
            daily_price=Decimal("28.00"),
            weekly_price=Decimal("170.00"),
            monthly_price=Decimal("560.00"),
        ),
        ADMIN,
    )

    history = await extra_price_service.get_pricing_history(db, extra.id)

    assert len(history) == 2
    latest, first = history
    assert latest.old_daily_price == Decimal("30.00")
    assert latest.new_daily_price == Decimal("28.00")
    assert latest.reason == ""
    assert first.old_daily_price == Decimal("25.00")
    assert first.new_monthly_price == Decimal("600.00")
    assert first.reason == "Summer season"
    assert first.updated_by == ADMIN


async def test_update_pricing_rejects_non_positive_prices(db, seed):
    extra = await seed.extra()

    with pytest.raises(BadRequestError) as exc_info:
        await extra_price_service.update_pricing(
            db,
            extra.id,
            ExtraTypePricingUpdate(
                daily_price=Decimal("0"),
                weekly_price=Decimal("10"),
                monthly_price=Decimal("0"),
            ),
            ADMIN,
        )
    assert exc_info.value.errors == [
        "Daily price must be greater than 0",
        "Monthly price must be greater than 0",
    ]
    audit = await db.execute(select(AuditLog.id))
    assert audit.all() == []


async def test_bulk_pricing_keeps_omitted_prices(db, seed):
    extra = await seed.extra()

    result = await extra_price_service.bulk_update_pricing(
        db,
        [
            BulkPricingItem(id=extra.id, weekly_price=Decimal("140.00")),
            BulkPricingItem(id=12345, daily_price=Decimal("1.00")),
            BulkPricingItem(id=extra.id, daily_price=Decimal("-5")),
        ],
        ADMIN,
    )

    assert result.successful_items == 1
    assert result.errors == [
        "ID 12345: Extra type price not found",
        f"ID {extra.id}: Daily price must be greater than 0",
    ]
    assert extra.daily_price == Decimal("25.00")
    assert extra.weekly_price == Decimal("140.00")


async def test_pricing_adjustment_rounds_to_cents(db, seed):
    extra = await seed.extra(
        daily_price=Decimal("10.00"),
        weekly_price=Decimal("65.55"),
        monthly_price=Decimal("250.00"),
    )

    result = await extra_price_service.apply_pricing_adjustment(
        db, [extra.id], Decimal("10"), True, ADMIN
    )

    assert result.is_successful
    assert extra.daily_price == Decimal("11.00")
    assert extra.weekly_price == Decimal("72.11")
    assert extra.monthly_price == Decimal("275.00")

    history = await extra_price_service.get_pricing_history(db, extra.id)
    assert history[0].reason == "Pricing adjustment: 10% increase"


async def test_full_decrease_is_rejected(db, seed):
    extra = await seed.extra()

    result = await extra_price_service.apply_pricing_adjustment(
        db, [extra.id], Decimal("100"), False, ADMIN
    )

    assert result.failed_items == 1
    assert extra.daily_price == Decimal("25.00")


async def test_bulk_pricing_rejects_prices_above_the_limit(db, seed):
    extra = await seed.extra()

    result = await extra_price_service.bulk_update_pricing(
        db, [BulkPricingItem(id=extra.id, daily_price=Decimal("999999"))], ADMIN
    )

    assert result.successful_items == 0
    assert result.errors == [f"ID {extra.id}: Daily price must not exceed 10000"]
    assert extra.daily_price == Decimal("25.00")


async def test_adjustment_past_the_limit_is_rejected(db, seed):
    extra = await seed.extra(
        daily_price=Decimal("9000.00"),
        weekly_price=Decimal("40000.00"),
        monthly_price=Decimal("150000.00"),
    )

    result = await extra_price_service.apply_pricing_adjustment(
        db, [extra.id], Decimal("100"), True, ADMIN
    )

    assert result.successful_items == 0
    assert result.errors == [
        f"ID {extra.id}: Daily price must not exceed 10000; "
        "Weekly price must not exceed 50000; "
        "Monthly price must not exceed 200000"
    ]
    assert extra.daily_price == Decimal("9000.00")


async def test_bulk_pricing_warns_about_undiscounted_periods(db, seed):
    extra = await seed.extra()

    result = await extra_price_service.bulk_update_pricing(
        db, [BulkPricingItem(id=extra.id, weekly_price=Decimal("200.00"))], ADMIN
    )

    assert result.is_successful
    assert result.warnings == [f"ID {extra.id}: Weekly price is higher than 7 daily rentals"]


async def test_validate_extra_warns_without_failing(db):
    result = await extra_price_service.validate_extra(
        db, create_payload(monthly_price=Decimal("500.00"))
    )

    assert result.is_valid
    assert result.warnings == ["Monthly price is higher than 30 daily rentals"]


def test_validation_rules():
    rules = extra_price_service.get_validation_rules()

    assert rules.min_daily_price == Decimal("0.01")
    assert rules.max_weekly_price == Decimal("50000")
    assert rules.max_monthly_price == Decimal("200000")
    assert rules.max_name_length == 100
    assert rules.max_description_length == 500
    assert len(rules.allowed_extra_types) == 10
