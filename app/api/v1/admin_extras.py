"""Admin extras price management endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import AdminPrincipal, get_current_admin, get_db
from app.domain.extra_pricing import ExtraType
from app.schemas.common import ApiResponse, BulkOperationResult, Page
from app.schemas.extra import (
    AdminExtraTypePrice,
    BulkIdsRequest,
    BulkPricingItem,
    BulkStatusRequest,
    ExtraTypePriceCreate,
    ExtraTypePriceFilter,
    ExtraTypePriceUpdate,
    ExtraTypePricingUpdate,
    PricingAdjustmentRequest,
    PricingHistoryEntry,
    ValidationResult,
    ValidationRules,
)
from app.services.extra_price_service import extra_price_service

router = APIRouter()

Admin = Annotated[AdminPrincipal, Depends(get_current_admin)]
Session = Annotated[AsyncSession, Depends(get_db)]


def extra_filter(
    extra_type: ExtraType | None = Query(default=None),
    is_active: bool | None = Query(default=None),
    min_daily_price: Decimal | None = Query(default=None),
    max_daily_price: Decimal | None = Query(default=None),
    min_weekly_price: Decimal | None = Query(default=None),
    max_weekly_price: Decimal | None = Query(default=None),
    min_monthly_price: Decimal | None = Query(default=None),
    max_monthly_price: Decimal | None = Query(default=None),
    search_term: str | None = Query(default=None, max_length=100),
    created_after: datetime | None = Query(default=None),
    created_before: datetime | None = Query(default=None),
    updated_after: datetime | None = Query(default=None),
    updated_before: datetime | None = Query(default=None),
    sort_by: str = Query(default="name_en"),
    sort_order: Literal["asc", "desc"] = Query(default="asc"),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=10, ge=1, le=100),
) -> ExtraTypePriceFilter:
    return ExtraTypePriceFilter(
        extra_type=extra_type,
        is_active=is_active,
        min_daily_price=min_daily_price,
        max_daily_price=max_daily_price,
        min_weekly_price=min_weekly_price,
        max_weekly_price=max_weekly_price,
        min_monthly_price=min_monthly_price,
        max_monthly_price=max_monthly_price,
        search_term=search_term,
        created_after=created_after,
        created_before=created_before,
        updated_after=updated_after,
        updated_before=updated_before,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        page_size=page_size,
    )


# ============ LISTING & VALIDATION ============


@router.get("", response_model=ApiResponse[Page[AdminExtraTypePrice]])
async def list_extra_type_prices(
    current_user: Admin,
    db: Session,
    filters: Annotated[ExtraTypePriceFilter, Depends(extra_filter)],
) -> ApiResponse[Page[AdminExtraTypePrice]]:
    """List extras with filtering, sorting and pagination."""
    page = await extra_price_service.list_extras(db, filters)
    return ApiResponse[Page[AdminExtraTypePrice]].success(page)


@router.get("/validation-rules", response_model=ApiResponse[ValidationRules])
async def get_validation_rules(current_user: Admin) -> ApiResponse[ValidationRules]:
    return ApiResponse[ValidationRules].success(extra_price_service.get_validation_rules())


@router.get("/check-name-unique", response_model=ApiResponse[bool])
async def check_name_unique(
    current_user: Admin,
    db: Session,
    name_en: str = Query(...),
    name_ar: str = Query(...),
    exclude_id: int | None = Query(default=None),
) -> ApiResponse[bool]:
    unique = await extra_price_service.is_name_unique(db, name_en, name_ar, exclude_id)
    return ApiResponse[bool].success(unique)


@router.post("/validate", response_model=ApiResponse[ValidationResult])
async def validate_extra_type_price(
    data: ExtraTypePriceCreate,
    current_user: Admin,
    db: Session,
) -> ApiResponse[ValidationResult]:
    """Dry-run the create validation."""
    result = await extra_price_service.validate_extra(db, data)
    return ApiResponse[ValidationResult].success(result)


# ============ CRUD ============


@router.post(
    "",
    response_model=ApiResponse[AdminExtraTypePrice],
    status_code=status.HTTP_201_CREATED,
)
async def create_extra_type_price(
    data: ExtraTypePriceCreate,
    current_user: Admin,
    db: Session,
) -> ApiResponse[AdminExtraTypePrice]:
    extra = await extra_price_service.create_extra(db, data, current_user.id)
    return ApiResponse[AdminExtraTypePrice].success(
        extra, message="Extra type price created successfully", status_code=201
    )


@router.get("/{extra_id}", response_model=ApiResponse[AdminExtraTypePrice])
async def get_extra_type_price(
    extra_id: int,
    current_user: Admin,
    db: Session,
) -> ApiResponse[AdminExtraTypePrice]:
    extra = await extra_price_service.get_extra(db, extra_id)
    return ApiResponse[AdminExtraTypePrice].success(extra)


@router.put("/{extra_id}", response_model=ApiResponse[AdminExtraTypePrice])
async def update_extra_type_price(
    extra_id: int,
    data: ExtraTypePriceUpdate,
    current_user: Admin,
    db: Session,
) -> ApiResponse[AdminExtraTypePrice]:
    extra = await extra_price_service.update_extra(db, extra_id, data, current_user.id)
    return ApiResponse[AdminExtraTypePrice].success(
        extra, message="Extra type price updated successfully"
    )


@router.delete("/{extra_id}", response_model=ApiResponse[None])
async def delete_extra_type_price(
    extra_id: int,
    current_user: Admin,
    db: Session,
) -> ApiResponse[None]:
    await extra_price_service.delete_extra(db, extra_id, current_user.id)
    return ApiResponse[None].success(message="Extra type price deleted successfully")


@router.post("/bulk-delete", response_model=ApiResponse[BulkOperationResult])
async def bulk_delete_extra_type_prices(
    data: BulkIdsRequest,
    current_user: Admin,
    db: Session,
) -> ApiResponse[BulkOperationResult]:
    result = await extra_price_service.bulk_delete(db, data.ids, current_user.id)
    return ApiResponse[BulkOperationResult].success(result)


# ============ STATUS ============


@router.post("/{extra_id}/activate", response_model=ApiResponse[AdminExtraTypePrice])
async def activate_extra_type_price(
    extra_id: int,
    current_user: Admin,
    db: Session,
) -> ApiResponse[AdminExtraTypePrice]:
    extra = await extra_price_service.set_active(db, extra_id, True, current_user.id)
    return ApiResponse[AdminExtraTypePrice].success(extra, message="Extra type price activated")


@router.post("/{extra_id}/deactivate", response_model=ApiResponse[AdminExtraTypePrice])
async def deactivate_extra_type_price(
    extra_id: int,
    current_user: Admin,
    db: Session,
) -> ApiResponse[AdminExtraTypePrice]:
    extra = await extra_price_service.set_active(db, extra_id, False, current_user.id)
    return ApiResponse[AdminExtraTypePrice].success(extra, message="Extra type price deactivated")


@router.post("/bulk-status", response_model=ApiResponse[BulkOperationResult])
async def bulk_update_status(
    data: BulkStatusRequest,
    current_user: Admin,
    db: Session,
) -> ApiResponse[BulkOperationResult]:
    result = await extra_price_service.bulk_update_status(
        db, data.ids, data.is_active, current_user.id
    )
    return ApiResponse[BulkOperationResult].success(result)


# ============ PRICING ============


@router.put("/{extra_id}/pricing", response_model=ApiResponse[AdminExtraTypePrice])
async def update_pricing(
    extra_id: int,
    data: ExtraTypePricingUpdate,
    current_user: Admin,
    db: Session,
) -> ApiResponse[AdminExtraTypePrice]:
    extra = await extra_price_service.update_pricing(db, extra_id, data, current_user.id)
    return ApiResponse[AdminExtraTypePrice].success(extra, message="Pricing updated successfully")


@router.get("/{extra_id}/pricing-history", response_model=ApiResponse[list[PricingHistoryEntry]])
async def get_pricing_history(
    extra_id: int,
    current_user: Admin,
    db: Session,
) -> ApiResponse[list[PricingHistoryEntry]]:
    history = await extra_price_service.get_pricing_history(db, extra_id)
    return ApiResponse[list[PricingHistoryEntry]].success(history)


@router.post("/bulk-pricing", response_model=ApiResponse[BulkOperationResult])
async def bulk_update_pricing(
    items: list[BulkPricingItem],
    current_user: Admin,
    db: Session,
) -> ApiResponse[BulkOperationResult]:
    result = await extra_price_service.bulk_update_pricing(db, items, current_user.id)
    return ApiResponse[BulkOperationResult].success(result)


@router.post("/pricing-adjustment", response_model=ApiResponse[BulkOperationResult])
async def apply_pricing_adjustment(
    data: PricingAdjustmentRequest,
    current_user: Admin,
    db: Session,
) -> ApiResponse[BulkOperationResult]:
    result = await extra_price_service.apply_pricing_adjustment(
        db, data.ids, data.percentage, data.is_increase, current_user.id
    )
    return ApiResponse[BulkOperationResult].success(result)


# ============ USAGE ============


@router.get("/{extra_id}/booking-count", response_model=ApiResponse[int])
async def get_booking_count(
    extra_id: int,
    current_user: Admin,
    db: Session,
    start_date: datetime | None = Query(default=None),
    end_date: datetime | None = Query(default=None),
) -> ApiResponse[int]:
    count = await extra_price_service.get_booking_count(db, extra_id, start_date, end_date)
    return ApiResponse[int].success(count)


@router.get("/{extra_id}/can-delete", response_model=ApiResponse[bool])
async def can_delete_extra_type_price(
    extra_id: int,
    current_user: Admin,
    db: Session,
) -> ApiResponse[bool]:
    can_delete = await extra_price_service.can_delete(db, extra_id)
    return ApiResponse[bool].success(can_delete)
