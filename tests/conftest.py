"""Shared test configuration and fixtures.

- Each test gets its own SQLite database file (aiosqlite) with the full schema.
- SQLite's driver-level transaction handling is switched off so SAVEPOINTs
  behave as they do on PostgreSQL.
- HTTP tests go through the local ASGI app with ``get_db`` overridden.
"""

import uuid
from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Any

import httpx
import pytest
from httpx import ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import app.models  # noqa: F401
from app.core.security import create_access_token
from app.database import Base, get_db
from app.domain.booking_state import BookingStatus
from app.domain.car_state import CarStatus
from app.domain.extra_pricing import ExtraType
from app.models import Booking, BookingExtra, Branch, Car, Category, ExtraTypePrice, User

NOW = datetime(2025, 6, 18, 12, 0, tzinfo=UTC)


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Run async tests on asyncio."""
    return "asyncio"


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# ==================== SEED HELPERS ====================


class Seeder:
    """Adds rows through a session and flushes so ids are assigned."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    async def _add(self, obj: Any) -> Any:
        self.db.add(obj)
        await self.db.flush()
        return obj

    async def category(self, name: str = "Economy") -> Category:
        return await self._add(Category(name_en=name, name_ar=name))

    async def branch(self, name: str = "Riyadh Airport") -> Branch:
        return await self._add(Branch(name_en=name, name_ar=name))

    async def user(self, **overrides: Any) -> User:
        n = self._next()
        values = {
            "id": uuid.uuid4(),
            "email": f"customer{n}@example.com",
            "full_name": f"Customer {n}",
            "role": "customer",
            "available_loyalty_points": 0,
            "created_at": NOW - timedelta(days=90),
        }
        values.update(overrides)
        return await self._add(User(**values))

    async def car(
        self,
        category: Category | None = None,
        branch: Branch | None = None,
        **overrides: Any,
    ) -> Car:
        n = self._next()
        category = category or await self.category()
        branch = branch or await self.branch()
        values = {
            "brand_en": "Toyota",
            "model_en": "Camry",
            "year": 2024,
            "plate_number": f"ABC-{n:04d}",
            "daily_rate": Decimal("150.00"),
            "weekly_rate": Decimal("900.00"),
            "monthly_rate": Decimal("3200.00"),
            "status": int(CarStatus.RENTED),
            "category_id": category.id,
            "branch_id": branch.id,
            "created_at": NOW - timedelta(days=365),
            "updated_at": NOW - timedelta(days=365),
        }
        values.update(overrides)
        return await self._add(Car(**values))

    async def booking(
        self,
        user: User,
        car: Car,
        status: BookingStatus = BookingStatus.IN_PROGRESS,
        end_date: datetime | None = None,
        created_at: datetime | None = None,
        final_amount: Decimal = Decimal("300.00"),
        **overrides: Any,
    ) -> Booking:
        n = self._next()
        end_date = end_date or NOW - timedelta(days=1)
        created_at = created_at or end_date - timedelta(days=3)
        values = {
            "booking_number": f"BK-{n:06d}",
            "user_id": user.id,
            "car_id": car.id,
            "start_date": end_date - timedelta(days=2),
            "end_date": end_date,
            "total_days": Decimal("2"),
            "receiving_branch_id": car.branch_id,
            "delivery_branch_id": car.branch_id,
            "total_cost": final_amount,
            "final_amount": final_amount,
            "status": int(status),
            "created_at": created_at,
            "updated_at": created_at,
        }
        values.update(overrides)
        return await self._add(Booking(**values))

    async def extra(self, **overrides: Any) -> ExtraTypePrice:
        n = self._next()
        values = {
            "extra_type": int(ExtraType.GPS),
            "name_en": f"GPS Navigation {n}",
            "name_ar": f"ملاحة {n}",
            "description_en": "GPS navigation system with updated maps",
            "description_ar": "",
            "daily_price": Decimal("25.00"),
            "weekly_price": Decimal("150.00"),
            "monthly_price": Decimal("500.00"),
            "is_active": True,
            "created_at": NOW - timedelta(days=30),
            "updated_at": NOW - timedelta(days=30),
        }
        values.update(overrides)
        return await self._add(ExtraTypePrice(**values))

    async def booking_extra(
        self,
        booking: Booking,
        extra: ExtraTypePrice,
        quantity: int = 1,
        created_at: datetime | None = None,
    ) -> BookingExtra:
        return await self._add(
            BookingExtra(
                booking_id=booking.id,
                extra_type_price_id=extra.id,
                quantity=quantity,
                unit_price=extra.daily_price,
                total_price=extra.daily_price * quantity,
                created_at=created_at or booking.created_at,
            )
        )


@pytest.fixture
def seed(db) -> Seeder:
    return Seeder(db)


# ==================== HTTP ====================


def auth_headers(role: str = "admin", sub: str | None = None) -> dict[str, str]:
    token = create_access_token({"sub": sub or str(uuid.uuid4()), "role": role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return auth_headers("admin", sub="admin-1")


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[httpx.AsyncClient, None]:
    from app.main import app

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    try:
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
