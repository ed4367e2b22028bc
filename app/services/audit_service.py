"""Admin audit trail service."""

from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.admin import AuditLog


class AuditService:
    """Service for admin audit logging."""

    async def log_action(
        self,
        db: AsyncSession,
        user_id: str,
        action: str,
        resource_type: str,
        resource_id: int | str,
        old_values: dict[str, Any] | None = None,
        new_values: dict[str, Any] | None = None,
    ) -> AuditLog:
        """Record an admin action.

        Args:
            db: Database session
            user_id: Admin performing the action
            action: Action name (e.g., "extra_price_update")
            resource_type: Resource type (e.g., "extra_type_price")
            resource_id: Resource ID
            old_values: Previous state
            new_values: New state

        Returns:
            Created audit log entry
        """
        audit = AuditLog(
            user_id=user_id,
            action=action,
            resource_type=resource_type,
            resource_id=str(resource_id),
            old_values=old_values,
            new_values=new_values,
            created_at=datetime.now(UTC),
        )
        db.add(audit)
        return audit

    async def log_pricing_change(
        self,
        db: AsyncSession,
        user_id: str,
        extra_type_price_id: int,
        old_prices: dict[str, Decimal],
        new_prices: dict[str, Decimal],
        reason: str | None = None,
    ) -> AuditLog:
        """Log a change to an extra's daily/weekly/monthly prices."""
        new_values: dict[str, Any] = {k: str(v) for k, v in new_prices.items()}
        new_values["reason"] = reason or ""
        return await self.log_action(
            db=db,
            user_id=user_id,
            action="extra_price_update",
            resource_type="extra_type_price",
            resource_id=extra_type_price_id,
            old_values={k: str(v) for k, v in old_prices.items()},
            new_values=new_values,
        )

    async def get_resource_history(
        self,
        db: AsyncSession,
        resource_type: str,
        resource_id: int | str,
        action: str | None = None,
    ) -> list[AuditLog]:
        """Audit rows for one resource, newest first."""
        query = select(AuditLog).where(
            AuditLog.resource_type == resource_type,
            AuditLog.resource_id == str(resource_id),
        )
        if action:
            query = query.where(AuditLog.action == action)
        result = await db.execute(query.order_by(AuditLog.created_at.desc()))
        return list(result.scalars().all())


audit_service = AuditService()
