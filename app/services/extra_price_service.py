"""Extras price management service."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import case, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AppException, BadRequestError, NotFoundError
from app.domain.booking_state import BookingStatus
from app.domain.extra_pricing import (
    MAX_DESCRIPTION_LENGTH,
    MAX_NAME_LENGTH,
    PRICE_LIMITS,
    ExtraType,
    adjust_price,
    extra_type_name,
    pricing_warnings,
    validate_prices,
)
from app.models.booking import Booking, BookingExtra
from app.models.extra import ExtraTypePrice
from app.schemas.common import BulkOperationResult, Page
from app.schemas.extra import (
    AdminExtraTypePrice,
    BulkPricingItem,
    ExtraTypePriceCreate,
    ExtraTypePriceFilter,
    ExtraTypePriceUpdate,
    ExtraTypePricingUpdate,
    PricingHistoryEntry,
    ValidationResult,
    ValidationRules,
)
from app.services.audit_service import audit_service

logger = logging.getLogger(__name__)

RESOURCE_NAME = "Extra type price"

# Bookings in these statuses count as current usage of an extra
IN_USE_BOOKING_STATUSES = (int(BookingStatus.CONFIRMED), int(BookingStatus.IN_PROGRESS))

SORT_COLUMNS = {
    "name_ar": ExtraTypePrice.name_ar,
    "name_en": ExtraTypePrice.name_en,
    "extra_type": ExtraTypePrice.extra_type,
    "daily_price": ExtraTypePrice.daily_price,
    "weekly_price": ExtraTypePrice.weekly_price,
    "monthly_price": ExtraTypePrice.monthly_price,
    "created_at": ExtraTypePrice.created_at,
    "updated_at": ExtraTypePrice.updated_at,
}
# Accepts "name_en", "NameEn" and "nameen" alike
_SORT_LOOKUP = {key.replace("_", ""): column for key, column in SORT_COLUMNS.items()}


@dataclass
class UsageStats:
    total_bookings: int = 0
    active_bookings: int = 0
    total_revenue: Decimal = Decimal("0")
    last_used: datetime | None = None


def _prices(extra: ExtraTypePrice) -> dict[str, Decimal]:
    return {
        "daily_price": extra.daily_price,
        "weekly_price": extra.weekly_price,
        "monthly_price": extra.monthly_price,
    }


def _to_dto(extra: ExtraTypePrice, stats: UsageStats | None = None) -> AdminExtraTypePrice:
    stats = stats or UsageStats()
    return AdminExtraTypePrice(
        id=extra.id,
        extra_type=extra.extra_type,
        extra_type_name=extra_type_name(extra.extra_type),
        name_ar=extra.name_ar,
        name_en=extra.name_en,
        description_ar=extra.description_ar,
        description_en=extra.description_en,
        daily_price=extra.daily_price,
        weekly_price=extra.weekly_price,
        monthly_price=extra.monthly_price,
        is_active=extra.is_active,
        created_at=extra.created_at,
        updated_at=extra.updated_at,
        total_bookings=stats.total_bookings,
        active_bookings=stats.active_bookings,
        total_revenue=stats.total_revenue,
        usage_count=stats.total_bookings,
        last_used=stats.last_used,
    )


class ExtraPriceService:
    """Admin management of rental extras and their prices."""

    # ============ QUERIES ============

    async def list_extras(
        self,
        db: AsyncSession,
        filters: ExtraTypePriceFilter,
    ) -> Page[AdminExtraTypePrice]:
        """Filter, sort and paginate extras."""
        query = select(ExtraTypePrice)

        if filters.extra_type is not None:
            query = query.where(ExtraTypePrice.extra_type == int(filters.extra_type))
        if filters.is_active is not None:
            query = query.where(ExtraTypePrice.is_active == filters.is_active)

        # Price ranges
        for column, low, high in (
            (ExtraTypePrice.daily_price, filters.min_daily_price, filters.max_daily_price),
            (ExtraTypePrice.weekly_price, filters.min_weekly_price, filters.max_weekly_price),
            (ExtraTypePrice.monthly_price, filters.min_monthly_price, filters.max_monthly_price),
        ):
            if low is not None:
                query = query.where(column >= low)
            if high is not None:
                query = query.where(column <= high)

        if filters.search_term:
            term = filters.search_term.strip()
            query = query.where(
                or_(
                    ExtraTypePrice.name_en.icontains(term, autoescape=True),
                    ExtraTypePrice.name_ar.icontains(term, autoescape=True),
                    ExtraTypePrice.description_en.icontains(term, autoescape=True),
                    ExtraTypePrice.description_ar.icontains(term, autoescape=True),
                )
            )

        if filters.created_after:
            query = query.where(ExtraTypePrice.created_at >= filters.created_after)
        if filters.created_before:
            query = query.where(ExtraTypePrice.created_at <= filters.created_before)
        if filters.updated_after:
            query = query.where(ExtraTypePrice.updated_at >= filters.updated_after)
        if filters.updated_before:
            query = query.where(ExtraTypePrice.updated_at <= filters.updated_before)

        total = await db.execute(select(func.count()).select_from(query.subquery()))
        total_count = total.scalar() or 0

        sort_column = _SORT_LOOKUP.get(
            filters.sort_by.lower().replace("_", ""), ExtraTypePrice.name_en
        )
        order = sort_column.desc() if filters.sort_order == "desc" else sort_column.asc()
        query = (
            query.order_by(order, ExtraTypePrice.id)
            .offset((filters.page - 1) * filters.page_size)
            .limit(filters.page_size)
        )
        result = await db.execute(query)
        extras = list(result.scalars().all())

        stats = await self.get_usage_stats(db, [e.id for e in extras])
        return Page[AdminExtraTypePrice](
            items=[_to_dto(e, stats.get(e.id)) for e in extras],
            total_count=total_count,
            page=filters.page,
            page_size=filters.page_size,
        )

    async def get_extra(self, db: AsyncSession, extra_id: int) -> AdminExtraTypePrice:
        extra = await self._get_or_404(db, extra_id)
        stats = await self.get_usage_stats(db, [extra_id])
        return _to_dto(extra, stats.get(extra_id))

    async def get_usage_stats(
        self,
        db: AsyncSession,
        extra_ids: list[int],
    ) -> dict[int, UsageStats]:
        """Booking usage per extra id (ids without bookings are omitted)."""
        if not extra_ids:
            return {}

        result = await db.execute(
            select(
                BookingExtra.extra_type_price_id,
                func.count(BookingExtra.id),
                func.sum(case((Booking.status.in_(IN_USE_BOOKING_STATUSES), 1), else_=0)),
                func.coalesce(func.sum(BookingExtra.total_price), 0),
                func.max(BookingExtra.created_at),
            )
            .join(Booking, Booking.id == BookingExtra.booking_id)
            .where(BookingExtra.extra_type_price_id.in_(extra_ids))
            .group_by(BookingExtra.extra_type_price_id)
        )
        return {
            extra_id: UsageStats(
                total_bookings=count,
                active_bookings=int(active or 0),
                total_revenue=Decimal(str(revenue)),
                last_used=last_used,
            )
            for extra_id, count, active, revenue, last_used in result.all()
        }

    async def get_booking_count(
        self,
        db: AsyncSession,
        extra_id: int,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> int:
        """Number of booking lines using an extra, optionally within a date range."""
        query = select(func.count()).select_from(BookingExtra).where(
            BookingExtra.extra_type_price_id == extra_id
        )
        if start_date:
            query = query.where(BookingExtra.created_at >= start_date)
        if end_date:
            query = query.where(BookingExtra.created_at <= end_date)
        result = await db.execute(query)
        return result.scalar() or 0

    async def can_delete(self, db: AsyncSession, extra_id: int) -> bool:
        """False while a confirmed or in-progress booking uses the extra."""
        result = await db.execute(
            select(func.count())
            .select_from(BookingExtra)
            .join(Booking, Booking.id == BookingExtra.booking_id)
            .where(
                BookingExtra.extra_type_price_id == extra_id,
                Booking.status.in_(IN_USE_BOOKING_STATUSES),
            )
        )
        return (result.scalar() or 0) == 0

    # ============ VALIDATION ============

    async def is_name_unique(
        self,
        db: AsyncSession,
        name_en: str,
        name_ar: str,
        exclude_id: int | None = None,
    ) -> bool:
        query = select(func.count()).select_from(ExtraTypePrice).where(
            or_(ExtraTypePrice.name_en == name_en, ExtraTypePrice.name_ar == name_ar)
        )
        if exclude_id is not None:
            query = query.where(ExtraTypePrice.id != exclude_id)
        result = await db.execute(query)
        return (result.scalar() or 0) == 0

    async def validate_extra(
        self,
        db: AsyncSession,
        data: ExtraTypePriceCreate,
        exclude_id: int | None = None,
    ) -> ValidationResult:
        """Collect every validation problem for a new extra."""
        errors = validate_prices(data.daily_price, data.weekly_price, data.monthly_price)
        if not data.name_en.strip():
            errors.append("English name is required")
        if not data.name_ar.strip():
            errors.append("Arabic name is required")
        if data.name_en.strip() or data.name_ar.strip():
            if not await self.is_name_unique(db, data.name_en, data.name_ar, exclude_id):
                errors.append("An extra with this name already exists")
        warnings = pricing_warnings(data.daily_price, data.weekly_price, data.monthly_price)
        return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)

    def get_validation_rules(self) -> ValidationRules:
        return ValidationRules(
            min_daily_price=PRICE_LIMITS["daily"][0],
            max_daily_price=PRICE_LIMITS["daily"][1],
            min_weekly_price=PRICE_LIMITS["weekly"][0],
            max_weekly_price=PRICE_LIMITS["weekly"][1],
            min_monthly_price=PRICE_LIMITS["monthly"][0],
            max_monthly_price=PRICE_LIMITS["monthly"][1],
            max_name_length=MAX_NAME_LENGTH,
            max_description_length=MAX_DESCRIPTION_LENGTH,
            allowed_extra_types=list(ExtraType),
        )

    # ============ CRUD ============

    async def create_extra(
        self,
        db: AsyncSession,
        data: ExtraTypePriceCreate,
        admin_id: str,
    ) -> AdminExtraTypePrice:
        validation = await self.validate_extra(db, data)
        if not validation.is_valid:
            raise BadRequestError("Validation failed", errors=validation.errors)

        now = datetime.now(UTC)
        extra = ExtraTypePrice(
            extra_type=int(data.extra_type),
            name_ar=data.name_ar,
            name_en=data.name_en,
            description_ar=data.description_ar,
            description_en=data.description_en,
            daily_price=data.daily_price,
            weekly_price=data.weekly_price,
            monthly_price=data.monthly_price,
            is_active=data.is_active,
            created_at=now,
            updated_at=now,
        )
        db.add(extra)
        await db.flush()

        logger.info(f"Extra type price created: {extra.id} by {admin_id}")
        return _to_dto(extra)

    async def update_extra(
        self,
        db: AsyncSession,
        extra_id: int,
        data: ExtraTypePriceUpdate,
        admin_id: str,
    ) -> AdminExtraTypePrice:
        extra = await self._get_or_404(db, extra_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        errors = validate_prices(
            changes.get("daily_price"),
            changes.get("weekly_price"),
            changes.get("monthly_price"),
        )
        if "name_en" in changes or "name_ar" in changes:
            name_en = changes.get("name_en", extra.name_en)
            name_ar = changes.get("name_ar", extra.name_ar)
            if not name_en.strip() or not name_ar.strip():
                errors.append("Names cannot be empty")
            elif not await self.is_name_unique(db, name_en, name_ar, exclude_id=extra_id):
                errors.append("An extra with this name already exists")
        if errors:
            raise BadRequestError("Validation failed", errors=errors)

        for field_name, value in changes.items():
            setattr(extra, field_name, value)
        extra.updated_at = datetime.now(UTC)
        await db.flush()

        logger.info(f"Extra type price updated: {extra_id} by {admin_id}")
        stats = await self.get_usage_stats(db, [extra_id])
        return _to_dto(extra, stats.get(extra_id))

    async def delete_extra(self, db: AsyncSession, extra_id: int, admin_id: str) -> None:
        extra = await self._get_or_404(db, extra_id)
        if await self.get_booking_count(db, extra_id) > 0:
            raise BadRequestError("Cannot delete extra type price that is used in bookings")

        await db.execute(delete(ExtraTypePrice).where(ExtraTypePrice.id == extra_id))
        db.expunge(extra)
        logger.info(f"Extra type price deleted: {extra_id} by {admin_id}")

    async def bulk_delete(
        self,
        db: AsyncSession,
        extra_ids: list[int],
        admin_id: str,
    ) -> BulkOperationResult:
        result = BulkOperationResult(total_items=len(extra_ids))
        for extra_id in extra_ids:
            try:
                await self.delete_extra(db, extra_id, admin_id)
                result.record_success()
            except AppException as e:
                result.record_failure(f"ID {extra_id}: {e.detail}")
        return result

    # ============ STATUS ============

    async def set_active(
        self,
        db: AsyncSession,
        extra_id: int,
        is_active: bool,
        admin_id: str,
    ) -> AdminExtraTypePrice:
        extra = await self._get_or_404(db, extra_id)
        extra.is_active = is_active
        extra.updated_at = datetime.now(UTC)
        await db.flush()

        action = "activated" if is_active else "deactivated"
        logger.info(f"Extra type price {action}: {extra_id} by {admin_id}")
        stats = await self.get_usage_stats(db, [extra_id])
        return _to_dto(extra, stats.get(extra_id))

    async def bulk_update_status(
        self,
        db: AsyncSession,
        extra_ids: list[int],
        is_active: bool,
        admin_id: str,
    ) -> BulkOperationResult:
        """Activate or deactivate many extras; unknown ids count as failed."""
        result = await db.execute(
            select(ExtraTypePrice).where(ExtraTypePrice.id.in_(extra_ids))
        )
        extras = {e.id: e for e in result.scalars().all()}

        outcome = BulkOperationResult(total_items=len(extra_ids))
        now = datetime.now(UTC)
        for extra_id in extra_ids:
            extra = extras.get(extra_id)
            if extra is None:
                outcome.record_failure(f"ID {extra_id}: {RESOURCE_NAME} not found")
                continue
            extra.is_active = is_active
            extra.updated_at = now
            outcome.record_success()
        await db.flush()

        action = "activated" if is_active else "deactivated"
        logger.info(
            f"Bulk status update completed: {outcome.successful_items} items {action} by {admin_id}"
        )
        return outcome

    # ============ PRICING ============

    async def update_pricing(
        self,
        db: AsyncSession,
        extra_id: int,
        data: ExtraTypePricingUpdate,
        admin_id: str,
    ) -> AdminExtraTypePrice:
        """Replace all three prices and record the change in the audit log."""
        extra = await self._get_or_404(db, extra_id)
        errors = validate_prices(data.daily_price, data.weekly_price, data.monthly_price)
        if errors:
            raise BadRequestError("Validation failed", errors=errors)

        await self._apply_prices(
            db,
            extra,
            {
                "daily_price": data.daily_price,
                "weekly_price": data.weekly_price,
                "monthly_price": data.monthly_price,
            },
            admin_id,
            data.reason,
        )
        logger.info(f"Extra type price pricing updated: {extra_id} by {admin_id}")
        stats = await self.get_usage_stats(db, [extra_id])
        return _to_dto(extra, stats.get(extra_id))

    async def get_pricing_history(
        self,
        db: AsyncSession,
        extra_id: int,
    ) -> list[PricingHistoryEntry]:
        await self._get_or_404(db, extra_id)
        rows = await audit_service.get_resource_history(
            db, "extra_type_price", extra_id, action="extra_price_update"
        )
        history = []
        for row in rows:
            old = row.old_values or {}
            new = row.new_values or {}
            history.append(
                PricingHistoryEntry(
                    id=str(row.id),
                    extra_type_price_id=extra_id,
                    old_daily_price=Decimal(old.get("daily_price", "0")),
                    new_daily_price=Decimal(new.get("daily_price", "0")),
                    old_weekly_price=Decimal(old.get("weekly_price", "0")),
                    new_weekly_price=Decimal(new.get("weekly_price", "0")),
                    old_monthly_price=Decimal(old.get("monthly_price", "0")),
                    new_monthly_price=Decimal(new.get("monthly_price", "0")),
                    reason=new.get("reason", ""),
                    updated_by=row.user_id or "",
                    updated_at=row.created_at,
                )
            )
        return history

    async def bulk_update_pricing(
        self,
        db: AsyncSession,
        items: list[BulkPricingItem],
        admin_id: str,
    ) -> BulkOperationResult:
        """Apply per-extra price changes; omitted prices keep their value."""
        outcome = BulkOperationResult(total_items=len(items))
        for item in items:
            extra = await db.get(ExtraTypePrice, item.id)
            if extra is None:
                outcome.record_failure(f"ID {item.id}: {RESOURCE_NAME} not found")
                continue

            errors = validate_prices(item.daily_price, item.weekly_price, item.monthly_price)
            if errors:
                outcome.record_failure(f"ID {item.id}: {'; '.join(errors)}")
                continue

            new_prices = _prices(extra)
            for key in new_prices:
                value = getattr(item, key)
                if value is not None:
                    new_prices[key] = value
            await self._apply_prices(db, extra, new_prices, admin_id, "Bulk pricing update")
            outcome.record_success()
            outcome.warnings.extend(
                f"ID {item.id}: {warning}" for warning in pricing_warnings(*new_prices.values())
            )

        logger.info(
            f"Bulk pricing update completed: {outcome.successful_items} items by {admin_id}"
        )
        return outcome

    async def apply_pricing_adjustment(
        self,
        db: AsyncSession,
        extra_ids: list[int],
        percentage: Decimal,
        is_increase: bool,
        admin_id: str,
    ) -> BulkOperationResult:
        """Raise or lower every price of the given extras by a percentage."""
        direction = "increase" if is_increase else "decrease"
        reason = f"Pricing adjustment: {percentage}% {direction}"

        outcome = BulkOperationResult(total_items=len(extra_ids))
        for extra_id in extra_ids:
            extra = await db.get(ExtraTypePrice, extra_id)
            if extra is None:
                outcome.record_failure(f"ID {extra_id}: {RESOURCE_NAME} not found")
                continue

            new_prices = {
                key: adjust_price(value, percentage, is_increase)
                for key, value in _prices(extra).items()
            }
            errors = validate_prices(*new_prices.values())
            if errors:
                outcome.record_failure(f"ID {extra_id}: {'; '.join(errors)}")
                continue

            await self._apply_prices(db, extra, new_prices, admin_id, reason)
            outcome.record_success()
            outcome.warnings.extend(
                f"ID {extra_id}: {warning}" for warning in pricing_warnings(*new_prices.values())
            )

        logger.info(
            f"Pricing {direction} of {percentage}% applied to "
            f"{outcome.successful_items} items by {admin_id}"
        )
        return outcome

    # ============ HELPERS ============

    async def _get_or_404(self, db: AsyncSession, extra_id: int) -> ExtraTypePrice:
        extra = await db.get(ExtraTypePrice, extra_id)
        if extra is None:
            raise NotFoundError(RESOURCE_NAME, str(extra_id))
        return extra

    async def _apply_prices(
        self,
        db: AsyncSession,
        extra: ExtraTypePrice,
        new_prices: dict[str, Decimal],
        admin_id: str,
        reason: str | None,
    ) -> None:
        old_prices = _prices(extra)
        for key, value in new_prices.items():
            setattr(extra, key, value)
        extra.updated_at = datetime.now(UTC)
        await audit_service.log_pricing_change(
            db,
            user_id=admin_id,
            extra_type_price_id=extra.id,
            old_prices=old_prices,
            new_prices=new_prices,
            reason=reason,
        )
        await db.flush()


extra_price_service = ExtraPriceService()
