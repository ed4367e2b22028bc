"""Admin dashboard analytics (read-only queries).

Rows are fetched with plain selects and aggregated in Python. The
aggregation helpers take an explicit ``now`` so windows such as "this
week" (weeks start on Sunday) and "previous month" are deterministic.
"""

import calendar
from collections import Counter, defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.domain.booking_state import BookingStatus, status_label
from app.domain.car_state import CarStatus
from app.models.booking import Booking
from app.models.car import Branch, Car, Category
from app.models.user import User
from app.schemas.dashboard import DashboardFilter

ZERO = Decimal("0")
CENT = Decimal("0.01")

DAILY_SERIES_DAYS = 30
MONTHLY_SERIES_MONTHS = 12
REPORT_TOP_ITEMS = 5

PENDING_STATUSES = (int(BookingStatus.CONFIRMED), int(BookingStatus.IN_PROGRESS))

# (name, min completed bookings, max completed bookings exclusive)
CUSTOMER_SEGMENTS = (
    ("Frequent Customers", 5, None),
    ("Regular Customers", 2, 5),
    ("New Customers", 0, 2),
)


# ============ HELPERS ============


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes from the database as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def percentage(part: int | float, whole: int | float) -> float:
    if not whole:
        return 0.0
    return round(part / whole * 100, 2)


def money(value: Decimal | int | None) -> Decimal:
    return Decimal(value or 0).quantize(CENT, rounding=ROUND_HALF_UP)


def add_months(month_start: date, months: int) -> date:
    """Shift a first-of-month date by a number of months."""
    years, month_index = divmod(month_start.month - 1 + months, 12)
    return date(month_start.year + years, month_index + 1, 1)


@dataclass(frozen=True)
class TimeWindows:
    """Calendar boundaries relative to a reference time (UTC)."""

    now: datetime
    today: date
    week_start: date
    month_start: date
    year_start: date
    previous_month_start: date
    previous_month_end: date

    @classmethod
    def at(cls, now: datetime) -> "TimeWindows":
        now = as_utc(now)
        today = now.date()
        month_start = today.replace(day=1)
        return cls(
            now=now,
            today=today,
            # date.weekday() is Monday=0; weeks here start on Sunday
            week_start=today - timedelta(days=(today.weekday() + 1) % 7),
            month_start=month_start,
            year_start=date(today.year, 1, 1),
            previous_month_start=add_months(month_start, -1),
            previous_month_end=month_start - timedelta(days=1),
        )


def _day(booking: Any) -> date:
    return as_utc(booking.created_at).date()


def _total(bookings: Iterable[Any]) -> Decimal:
    return sum((b.final_amount or ZERO for b in bookings), ZERO)


# ============ AGGREGATIONS ============


def compute_overall_stats(
    bookings: Sequence[Any],
    car_statuses: Sequence[int],
    total_customers: int,
) -> dict:
    completed = [b for b in bookings if b.status == BookingStatus.COMPLETED]
    total_revenue = _total(completed)
    rented = sum(1 for s in car_statuses if s == CarStatus.RENTED)
    return {
        "total_bookings": len(bookings),
        "total_revenue": money(total_revenue),
        "active_cars": sum(1 for s in car_statuses if s == CarStatus.AVAILABLE),
        "total_customers": total_customers,
        "pending_bookings": sum(1 for b in bookings if b.status in PENDING_STATUSES),
        "completed_bookings": len(completed),
        "average_booking_value": money(total_revenue / len(completed)) if completed else money(0),
        "car_utilization_rate": percentage(rented, len(car_statuses)),
    }


def daily_revenue_series(bookings: Sequence[Any], start: date, end: date) -> list[dict]:
    """One zero-filled point per day from start to end inclusive."""
    by_day: dict[date, list[Any]] = defaultdict(list)
    for b in bookings:
        if b.status == BookingStatus.COMPLETED:
            by_day[_day(b)].append(b)

    series = []
    day = start
    while day <= end:
        rows = by_day.get(day, [])
        series.append({"day": day, "revenue": money(_total(rows)), "booking_count": len(rows)})
        day += timedelta(days=1)
    return series


def monthly_revenue_series(bookings: Sequence[Any], start: datetime, end: datetime) -> list[dict]:
    """Completed revenue grouped by (year, month) for start <= created_at <= end."""
    groups: dict[tuple[int, int], list[Any]] = defaultdict(list)
    for b in bookings:
        created = as_utc(b.created_at)
        if b.status == BookingStatus.COMPLETED and start <= created <= end:
            groups[(created.year, created.month)].append(b)

    return [
        {
            "year": year,
            "month": month,
            "month_name": calendar.month_name[month],
            "revenue": money(_total(rows)),
            "booking_count": len(rows),
        }
        for (year, month), rows in sorted(groups.items())
    ]


def compute_revenue_stats(completed: Sequence[Any], now: datetime) -> dict:
    """Revenue windows over completed bookings, keyed by booking creation day."""
    w = TimeWindows.at(now)
    today = _total(b for b in completed if _day(b) == w.today)
    week = _total(b for b in completed if _day(b) >= w.week_start)
    month = _total(b for b in completed if _day(b) >= w.month_start)
    year = _total(b for b in completed if _day(b) >= w.year_start)
    previous = _total(
        b for b in completed if w.previous_month_start <= _day(b) <= w.previous_month_end
    )
    growth = round(float((month - previous) / previous * 100), 2) if previous > 0 else 0.0

    month_start_dt = datetime(w.month_start.year, w.month_start.month, 1, tzinfo=UTC)
    series_start = add_months(w.month_start, -MONTHLY_SERIES_MONTHS)
    return {
        "today_revenue": money(today),
        "week_revenue": money(week),
        "month_revenue": money(month),
        "year_revenue": money(year),
        "previous_month_revenue": money(previous),
        "monthly_growth_percentage": growth,
        "daily_revenue": daily_revenue_series(
            completed, w.today - timedelta(days=DAILY_SERIES_DAYS), w.today
        ),
        "monthly_revenue": monthly_revenue_series(
            completed,
            datetime(series_start.year, series_start.month, 1, tzinfo=UTC),
            month_start_dt,
        ),
    }


def status_breakdown(bookings: Sequence[Any]) -> list[dict]:
    counts = Counter(b.status for b in bookings)
    return [
        {
            "status": status_label(status),
            "count": count,
            "percentage": percentage(count, len(bookings)),
        }
        for status, count in sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    ]


def daily_booking_series(bookings: Sequence[Any], start: date, end: date) -> list[dict]:
    by_day: dict[date, list[Any]] = defaultdict(list)
    for b in bookings:
        by_day[_day(b)].append(b)

    series = []
    day = start
    while day <= end:
        rows = by_day.get(day, [])
        series.append(
            {
                "day": day,
                "booking_count": len(rows),
                "completed_count": sum(1 for b in rows if b.status == BookingStatus.COMPLETED),
                "cancelled_count": sum(1 for b in rows if b.status == BookingStatus.CANCELED),
            }
        )
        day += timedelta(days=1)
    return series


def compute_booking_stats(bookings: Sequence[Any], now: datetime) -> dict:
    w = TimeWindows.at(now)
    cancelled = sum(1 for b in bookings if b.status == BookingStatus.CANCELED)
    return {
        "today_bookings": sum(1 for b in bookings if _day(b) == w.today),
        "week_bookings": sum(1 for b in bookings if _day(b) >= w.week_start),
        "month_bookings": sum(1 for b in bookings if _day(b) >= w.month_start),
        "year_bookings": sum(1 for b in bookings if _day(b) >= w.year_start),
        "cancelled_bookings": cancelled,
        "cancellation_rate": percentage(cancelled, len(bookings)),
        "bookings_by_status": status_breakdown(bookings),
        "daily_bookings": daily_booking_series(
            bookings, w.today - timedelta(days=DAILY_SERIES_DAYS), w.today
        ),
    }


def _group_car_stats(cars: Sequence[Any], key: str, name: str) -> list[dict]:
    groups: dict[tuple[int, str], list[Any]] = defaultdict(list)
    for car in cars:
        groups[(getattr(car, key), getattr(car, name))].append(car)

    stats = []
    for (group_id, group_name), rows in groups.items():
        rented = sum(1 for c in rows if c.status == CarStatus.RENTED)
        stats.append(
            {
                "id": group_id,
                "name": group_name,
                "total_cars": len(rows),
                "available_cars": sum(1 for c in rows if c.status == CarStatus.AVAILABLE),
                "rented_cars": rented,
                "utilization_rate": percentage(rented, len(rows)),
            }
        )
    stats.sort(key=lambda s: (-s["total_cars"], s["id"]))
    return stats


def compute_car_stats(cars: Sequence[Any]) -> dict:
    """Fleet totals per status plus category and branch breakdowns.

    Each car row needs ``status``, ``category_id``, ``category_name``,
    ``branch_id`` and ``branch_name``.
    """
    counts = Counter(c.status for c in cars)
    return {
        "total_cars": len(cars),
        "available_cars": counts[CarStatus.AVAILABLE],
        "rented_cars": counts[CarStatus.RENTED],
        "maintenance_cars": counts[CarStatus.MAINTENANCE],
        "out_of_service_cars": counts[CarStatus.OUT_OF_SERVICE],
        "utilization_rate": percentage(counts[CarStatus.RENTED], len(cars)),
        "cars_by_category": _group_car_stats(cars, "category_id", "category_name"),
        "cars_by_branch": _group_car_stats(cars, "branch_id", "branch_name"),
    }


def customer_segments(
    customer_ids: Sequence[Any],
    completed_by_customer: dict[Any, list[Decimal]],
) -> list[dict]:
    """Segment customers by their number of completed bookings."""
    total = len(customer_ids)
    if total == 0:
        return []

    segments = []
    for segment_name, low, high in CUSTOMER_SEGMENTS:
        members = [
            cid
            for cid in customer_ids
            if len(completed_by_customer.get(cid, [])) >= low
            and (high is None or len(completed_by_customer.get(cid, [])) < high)
        ]
        spending = [sum(completed_by_customer.get(cid, []), ZERO) for cid in members]
        segments.append(
            {
                "segment_name": segment_name,
                "customer_count": len(members),
                "percentage": percentage(len(members), total),
                "average_spending": money(sum(spending, ZERO) / len(spending)) if spending else money(0),
            }
        )
    return segments


def compute_customer_stats(
    customers: Sequence[Any],
    bookings: Sequence[Any],
    now: datetime,
) -> dict:
    """Customer totals, retention and segments.

    Customers need ``id``, ``created_at`` and ``available_loyalty_points``;
    bookings need ``user_id``, ``status``, ``final_amount`` and ``created_at``.
    """
    w = TimeWindows.at(now)
    month_start = datetime(w.month_start.year, w.month_start.month, 1, tzinfo=UTC)
    last_month_start = datetime(
        w.previous_month_start.year, w.previous_month_start.month, 1, tzinfo=UTC
    )

    customer_ids = [c.id for c in customers]
    known = set(customer_ids)
    completed_by_customer: dict[Any, list[Decimal]] = defaultdict(list)
    booked_last_month: set = set()
    booked_this_month: set = set()
    for b in bookings:
        if b.user_id not in known:
            continue
        created = as_utc(b.created_at)
        if b.status == BookingStatus.COMPLETED:
            completed_by_customer[b.user_id].append(b.final_amount or ZERO)
        if last_month_start <= created < month_start:
            booked_last_month.add(b.user_id)
        elif created >= month_start:
            booked_this_month.add(b.user_id)

    retained = len(booked_last_month & booked_this_month)
    points = [Decimal(c.available_loyalty_points or 0) for c in customers]
    return {
        "total_customers": len(customers),
        "new_customers_this_month": sum(
            1 for c in customers if c.created_at and as_utc(c.created_at) >= month_start
        ),
        "active_customers": len(completed_by_customer),
        "customer_retention_rate": percentage(retained, len(booked_last_month)),
        "average_loyalty_points": money(sum(points, ZERO) / len(points)) if points else money(0),
        "customer_segments": customer_segments(customer_ids, completed_by_customer),
    }


def render_report(stats: dict, generated_at: datetime) -> str:
    """Plain-text dashboard report."""
    overall = stats["overall_stats"]
    revenue = stats["revenue_stats"]
    bookings = stats["booking_stats"]
    cars = stats["car_stats"]
    customers = stats["customer_stats"]

    popular = "\n".join(
        f"{c['brand']} {c['model']} ({c['plate_number']}) - "
        f"{c['booking_count']} bookings, ${c['revenue']:,.2f} revenue"
        for c in stats["popular_cars"][:REPORT_TOP_ITEMS]
    )
    recent = "\n".join(
        f"{b['booking_number']} - {b['customer_name']} - {b['car_info']} - "
        f"${b['total_amount']:,.2f} ({b['status']})"
        for b in stats["recent_bookings"][:REPORT_TOP_ITEMS]
    )

    return f"""{settings.app_name} - Dashboard Report
Generated: {as_utc(generated_at):%Y-%m-%d %H:%M:%S} UTC

=== OVERALL STATISTICS ===
Total Bookings: {overall['total_bookings']}
Total Revenue: ${overall['total_revenue']:,.2f}
Active Cars: {overall['active_cars']}
Total Customers: {overall['total_customers']}
Pending Bookings: {overall['pending_bookings']}
Completed Bookings: {overall['completed_bookings']}
Average Booking Value: ${overall['average_booking_value']:,.2f}
Car Utilization Rate: {overall['car_utilization_rate']:.2f}%

=== REVENUE STATISTICS ===
Today's Revenue: ${revenue['today_revenue']:,.2f}
This Week's Revenue: ${revenue['week_revenue']:,.2f}
This Month's Revenue: ${revenue['month_revenue']:,.2f}
This Year's Revenue: ${revenue['year_revenue']:,.2f}
Monthly Growth: {revenue['monthly_growth_percentage']:.2f}%

=== BOOKING STATISTICS ===
Today's Bookings: {bookings['today_bookings']}
This Week's Bookings: {bookings['week_bookings']}
This Month's Bookings: {bookings['month_bookings']}
This Year's Bookings: {bookings['year_bookings']}
Cancelled Bookings: {bookings['cancelled_bookings']}
Cancellation Rate: {bookings['cancellation_rate']:.2f}%

=== CAR STATISTICS ===
Total Cars: {cars['total_cars']}
Available Cars: {cars['available_cars']}
Rented Cars: {cars['rented_cars']}
Maintenance Cars: {cars['maintenance_cars']}
Out of Service Cars: {cars['out_of_service_cars']}
Utilization Rate: {cars['utilization_rate']:.2f}%

=== CUSTOMER STATISTICS ===
Total Customers: {customers['total_customers']}
New Customers This Month: {customers['new_customers_this_month']}
Active Customers: {customers['active_customers']}
Customer Retention Rate: {customers['customer_retention_rate']:.2f}%
Average Loyalty Points: {customers['average_loyalty_points']:,.0f}

=== TOP POPULAR CARS ===
{popular}

=== RECENT BOOKINGS ===
{recent}
"""


# ============ SERVICE ============


class DashboardService:
    """Read-only dashboard queries."""

    def _branch_filter(self, query, filters: DashboardFilter):
        if filters.branch_id is not None:
            query = query.where(
                or_(
                    Booking.receiving_branch_id == filters.branch_id,
                    Booking.delivery_branch_id == filters.branch_id,
                )
            )
        return query

    async def _bookings(self, db: AsyncSession, query) -> list[Any]:
        result = await db.execute(query)
        return list(result.all())

    async def get_overall_stats(self, db: AsyncSession, filters: DashboardFilter) -> dict:
        query = select(Booking.status, Booking.final_amount)
        if filters.start_date:
            query = query.where(Booking.created_at >= filters.start_date)
        if filters.end_date:
            query = query.where(Booking.created_at <= filters.end_date)
        bookings = await self._bookings(db, self._branch_filter(query, filters))

        cars_query = select(Car.status)
        if filters.category_id is not None:
            cars_query = cars_query.where(Car.category_id == filters.category_id)
        car_statuses = list((await db.execute(cars_query)).scalars().all())

        customers = await db.execute(
            select(func.count()).select_from(User).where(User.role == "customer")
        )
        return compute_overall_stats(bookings, car_statuses, customers.scalar() or 0)

    async def get_revenue_stats(
        self,
        db: AsyncSession,
        filters: DashboardFilter,
        now: datetime | None = None,
    ) -> dict:
        query = select(Booking.status, Booking.final_amount, Booking.created_at).where(
            Booking.status == int(BookingStatus.COMPLETED)
        )
        completed = await self._bookings(db, self._branch_filter(query, filters))
        return compute_revenue_stats(completed, now or datetime.now(UTC))

    async def get_booking_stats(
        self,
        db: AsyncSession,
        filters: DashboardFilter,
        now: datetime | None = None,
    ) -> dict:
        query = select(Booking.status, Booking.final_amount, Booking.created_at)
        bookings = await self._bookings(db, self._branch_filter(query, filters))
        return compute_booking_stats(bookings, now or datetime.now(UTC))

    async def get_car_stats(self, db: AsyncSession, filters: DashboardFilter) -> dict:
        query = (
            select(
                Car.status,
                Car.category_id,
                Category.name_en.label("category_name"),
                Car.branch_id,
                Branch.name_en.label("branch_name"),
            )
            .join(Category, Category.id == Car.category_id)
            .join(Branch, Branch.id == Car.branch_id)
        )
        if filters.branch_id is not None:
            query = query.where(Car.branch_id == filters.branch_id)
        if filters.category_id is not None:
            query = query.where(Car.category_id == filters.category_id)
        cars = list((await db.execute(query)).all())
        return compute_car_stats(cars)

    async def get_customer_stats(
        self,
        db: AsyncSession,
        filters: DashboardFilter,
        now: datetime | None = None,
    ) -> dict:
        customers = (
            await db.execute(
                select(User.id, User.created_at, User.available_loyalty_points).where(
                    User.role == "customer"
                )
            )
        ).all()
        bookings = await self._bookings(
            db,
            select(Booking.user_id, Booking.status, Booking.final_amount, Booking.created_at),
        )
        return compute_customer_stats(customers, bookings, now or datetime.now(UTC))

    async def get_popular_cars(
        self,
        db: AsyncSession,
        count: int | None = None,
        filters: DashboardFilter | None = None,
    ) -> list[dict]:
        """Cars ranked by completed bookings."""
        filters = filters or DashboardFilter()
        booking_count = func.count(Booking.id).label("booking_count")
        query = (
            select(
                Car.id,
                Car.brand_en,
                Car.model_en,
                Car.plate_number,
                booking_count,
                func.coalesce(func.sum(Booking.final_amount), 0).label("revenue"),
            )
            .join(Car, Car.id == Booking.car_id)
            .where(Booking.status == int(BookingStatus.COMPLETED))
        )
        if filters.start_date:
            query = query.where(Booking.created_at >= filters.start_date)
        if filters.end_date:
            query = query.where(Booking.created_at <= filters.end_date)
        if filters.branch_id is not None:
            query = query.where(Car.branch_id == filters.branch_id)

        query = (
            query.group_by(Car.id, Car.brand_en, Car.model_en, Car.plate_number)
            .order_by(booking_count.desc(), Car.id)
            .limit(count or settings.popular_cars_count)
        )
        result = await db.execute(query)
        return [
            {
                "car_id": car_id,
                "brand": brand,
                "model": model,
                "plate_number": plate,
                "booking_count": bookings,
                "revenue": money(revenue),
            }
            for car_id, brand, model, plate, bookings, revenue in result.all()
        ]

    async def get_recent_bookings(self, db: AsyncSession, count: int | None = None) -> list[dict]:
        """Newest bookings with customer and car details."""
        result = await db.execute(
            select(Booking, User.full_name, User.email, Car.brand_en, Car.model_en, Car.plate_number)
            .join(User, User.id == Booking.user_id)
            .join(Car, Car.id == Booking.car_id)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
            .limit(count or settings.recent_bookings_count)
        )
        return [
            {
                "booking_id": booking.id,
                "booking_number": booking.booking_number,
                "customer_name": full_name or email,
                "car_info": f"{brand} {model} ({plate})",
                "start_date": booking.start_date,
                "end_date": booking.end_date,
                "total_amount": money(booking.final_amount),
                "status": status_label(booking.status),
                "created_at": booking.created_at,
            }
            for booking, full_name, email, brand, model, plate in result.all()
        ]

    async def get_dashboard_stats(
        self,
        db: AsyncSession,
        filters: DashboardFilter,
        now: datetime | None = None,
    ) -> dict:
        now = now or datetime.now(UTC)
        return {
            "overall_stats": await self.get_overall_stats(db, filters),
            "revenue_stats": await self.get_revenue_stats(db, filters, now),
            "booking_stats": await self.get_booking_stats(db, filters, now),
            "car_stats": await self.get_car_stats(db, filters),
            "customer_stats": await self.get_customer_stats(db, filters, now),
            "popular_cars": await self.get_popular_cars(db, filters=filters),
            "recent_bookings": await self.get_recent_bookings(db),
        }

    async def export_report(
        self,
        db: AsyncSession,
        filters: DashboardFilter,
        now: datetime | None = None,
    ) -> bytes:
        """Render the dashboard as a UTF-8 text report."""
        now = now or datetime.now(UTC)
        stats = await self.get_dashboard_stats(db, filters, now)
        return render_report(stats, now).encode("utf-8")


dashboard_service = DashboardService()
