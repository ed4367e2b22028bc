"""Initial database schema.

Revision ID: 001_initial
Revises: None
Create Date: 2025-06-02

Creates the tables used by the NOL admin backend:
- Users (read for dashboard statistics)
- Fleet (categories, branches, cars)
- Extras price list
- Bookings and booking extras
- Admin audit logs
"""

from typing import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create all database tables."""

    # ==================== USERS ====================
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(255), unique=True, nullable=False, index=True),
        sa.Column("full_name", sa.String(200), nullable=False, server_default=""),
        sa.Column("role", sa.String(20), nullable=False, server_default="customer"),
        sa.Column("available_loyalty_points", sa.Integer, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # ==================== FLEET ====================
    op.create_table(
        "categories",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name_en", sa.String(100), nullable=False),
        sa.Column("name_ar", sa.String(100), nullable=False, server_default=""),
    )

    op.create_table(
        "branches",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name_en", sa.String(100), nullable=False),
        sa.Column("name_ar", sa.String(100), nullable=False, server_default=""),
    )

    op.create_table(
        "cars",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("brand_en", sa.String(100), nullable=False),
        sa.Column("brand_ar", sa.String(100), nullable=False, server_default=""),
        sa.Column("model_en", sa.String(100), nullable=False),
        sa.Column("model_ar", sa.String(100), nullable=False, server_default=""),
        sa.Column("year", sa.Integer, nullable=False),
        sa.Column("plate_number", sa.String(20), nullable=False, unique=True),
        sa.Column("daily_rate", sa.Numeric(10, 2), nullable=False),
        sa.Column("weekly_rate", sa.Numeric(10, 2), nullable=False),
        sa.Column("monthly_rate", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", sa.Integer, nullable=False, server_default="1", index=True),
        sa.Column("description_en", sa.Text),
        sa.Column("is_active", sa.Boolean, server_default=sa.true()),
        sa.Column("category_id", sa.Integer, sa.ForeignKey("categories.id"), nullable=False, index=True),
        sa.Column("branch_id", sa.Integer, sa.ForeignKey("branches.id"), nullable=False, index=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # ==================== EXTRAS ====================
    op.create_table(
        "extra_type_prices",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("extra_type", sa.Integer, nullable=False, index=True),
        sa.Column("name_en", sa.String(100), nullable=False),
        sa.Column("name_ar", sa.String(100), nullable=False),
        sa.Column("description_en", sa.String(500), nullable=False, server_default=""),
        sa.Column("description_ar", sa.String(500), nullable=False, server_default=""),
        sa.Column("daily_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("weekly_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("monthly_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("is_active", sa.Boolean, server_default=sa.true(), index=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # ==================== BOOKINGS ====================
    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("booking_number", sa.String(30), unique=True, nullable=False, index=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("car_id", sa.Integer, sa.ForeignKey("cars.id"), nullable=False, index=True),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column("total_days", sa.Numeric(6, 2), server_default="0"),
        sa.Column("receiving_branch_id", sa.Integer, sa.ForeignKey("branches.id"), index=True),
        sa.Column("delivery_branch_id", sa.Integer, sa.ForeignKey("branches.id"), index=True),
        sa.Column("car_rental_cost", sa.Numeric(12, 2), server_default="0"),
        sa.Column("extras_cost", sa.Numeric(12, 2), server_default="0"),
        sa.Column("total_cost", sa.Numeric(12, 2), server_default="0"),
        sa.Column("discount_amount", sa.Numeric(12, 2), server_default="0"),
        sa.Column("final_amount", sa.Numeric(12, 2), server_default="0"),
        sa.Column("status", sa.Integer, nullable=False, server_default="1", index=True),
        sa.Column("notes", sa.Text),
        sa.Column("cancellation_reason", sa.Text),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), index=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # Scan used by the ended-booking cleanup
    op.create_index("ix_bookings_status_end_date", "bookings", ["status", "end_date"])

    op.create_table(
        "booking_extras",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("booking_id", sa.Integer, sa.ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("extra_type_price_id", sa.Integer, sa.ForeignKey("extra_type_prices.id"), nullable=False, index=True),
        sa.Column("quantity", sa.Integer, server_default="1"),
        sa.Column("unit_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("total_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # ==================== ADMIN ====================
    op.create_table(
        "audit_logs",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.String(64), index=True),
        sa.Column("action", sa.String(100), nullable=False, index=True),
        sa.Column("resource_type", sa.String(50), nullable=False, index=True),
        sa.Column("resource_id", sa.String(64), index=True),
        sa.Column("old_values", postgresql.JSONB),
        sa.Column("new_values", postgresql.JSONB),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), index=True),
    )


def downgrade() -> None:
    """Drop all database tables in reverse order."""
    op.drop_table("audit_logs")
    op.drop_table("booking_extras")
    op.drop_index("ix_bookings_status_end_date", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("extra_type_prices")
    op.drop_table("cars")
    op.drop_table("branches")
    op.drop_table("categories")
    op.drop_table("users")
