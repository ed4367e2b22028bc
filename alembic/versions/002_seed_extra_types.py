"""Seed extras price list.

Revision ID: 002_seed_extra_types
Revises: 001_initial
Create Date: 2025-06-02

Seeds the extra_type_prices table with the standard rental add-ons
organized by group. Extra types: 1 GPS, 2 ChildSeat, 3 AdditionalDriver,
4 Insurance, 5 WifiHotspot, 6 PhoneCharger, 7 Bluetooth, 8 RoofRack,
9 SkiRack, 10 BikeRack.
"""

from typing import Sequence

from alembic import op
from sqlalchemy import Boolean, Integer, Numeric, String, column, table

# revision identifiers
revision: str = "002_seed_extra_types"
down_revision: str = "001_initial"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

# (extra_type, name_en, name_ar, description_en, description_ar, daily, weekly, monthly)
EXTRAS = [
    # ===== ESSENTIAL SERVICES =====
    (1, "GPS Navigation System", "نظام تحديد المواقع", "GPS navigation system with updated maps", "نظام تحديد المواقع مع الخرائط المحدثة", "25.00", "150.00", "500.00"),
    (2, "Child Safety Seat", "مقعد أطفال", "Internationally certified child safety seat", "مقعد أمان للأطفال معتمد دولياً", "15.00", "90.00", "300.00"),
    (3, "Additional Driver", "سائق إضافي", "Add an additional authorized driver", "إضافة سائق إضافي مخول للقيادة", "30.00", "180.00", "600.00"),
    (4, "Additional Insurance", "تأمين إضافي", "Comprehensive insurance against all risks", "تأمين شامل ضد جميع المخاطر", "50.00", "300.00", "1000.00"),
    (5, "Portable WiFi", "واي فاي محمول", "Portable WiFi device with high-speed internet", "جهاز واي فاي محمول مع إنترنت عالي السرعة", "20.00", "120.00", "400.00"),

    # ===== TECHNOLOGY =====
    (6, "Phone Charger", "شاحن هاتف", "Multi-port car charger for all phone types", "شاحن سيارة متعدد المنافذ لجميع أنواع الهواتف", "5.00", "30.00", "100.00"),
    (7, "Bluetooth Adapter", "بلوتوث محمول", "Bluetooth adapter for older cars", "جهاز بلوتوث للسيارات القديمة", "10.00", "60.00", "200.00"),

    # ===== STORAGE & EQUIPMENT =====
    (8, "Roof Rack", "حمالة سقف", "Roof rack for additional luggage transport", "حمالة سقف لنقل الأمتعة الإضافية", "35.00", "210.00", "700.00"),
    (9, "Ski Rack", "حمالة تزلج", "Specialized rack for ski equipment", "حمالة خاصة لمعدات التزلج", "40.00", "240.00", "800.00"),
    (10, "Bike Rack", "حمالة دراجات", "Rack for transporting bicycles", "حمالة لنقل الدراجات الهوائية", "30.00", "180.00", "600.00"),

    # ===== PREMIUM SERVICES =====
    (1, "Premium Navigation", "نظام ملاحة متقدم", "Advanced navigation with traffic alerts", "نظام ملاحة متقدم مع تنبيهات حركة المرور", "35.00", "210.00", "700.00"),
    (2, "Infant Car Seat", "مقعد أطفال رضع", "Specialized seat for infants (0-12 months)", "مقعد خاص للأطفال الرضع (0-12 شهر)", "20.00", "120.00", "400.00"),
    (2, "Booster Seat", "مقعد أطفال كبار", "Booster seat for older children (4-12 years)", "مقعد مرتفع للأطفال الكبار (4-12 سنة)", "12.00", "72.00", "240.00"),

    # ===== COMFORT =====
    (6, "Wireless Charger", "شاحن لاسلكي", "Dashboard wireless charging pad", "شاحن لاسلكي لوحة القيادة", "15.00", "90.00", "300.00"),
    (5, "High-Speed Internet", "إنترنت فائق السرعة", "Ultra-fast 5G internet connection", "إنترنت فائق السرعة 5G", "35.00", "210.00", "700.00"),

    # ===== SAFETY =====
    (1, "Emergency Kit", "نظام طوارئ", "Comprehensive emergency kit with first aid", "عدة طوارئ شاملة مع الإسعافات الأولية", "10.00", "60.00", "200.00"),
    (1, "Dash Camera", "كاميرا قيادة", "Dashboard recording camera", "كاميرا تسجيل أثناء القيادة", "20.00", "120.00", "400.00"),

    # ===== LUXURY =====
    (6, "Luxury Neck Pillows", "وسائد رقبة فاخرة", "Premium comfort neck pillows", "وسائد رقبة فاخرة للراحة", "8.00", "48.00", "160.00"),
    (7, "Surround Sound System", "نظام صوت محيطي", "Premium surround sound audio system", "نظام صوت محيطي فائق الجودة", "25.00", "150.00", "500.00"),
]


def upgrade() -> None:
    """Insert seed extras."""
    extras_table = table(
        "extra_type_prices",
        column("extra_type", Integer),
        column("name_en", String),
        column("name_ar", String),
        column("description_en", String),
        column("description_ar", String),
        column("daily_price", Numeric),
        column("weekly_price", Numeric),
        column("monthly_price", Numeric),
        column("is_active", Boolean),
    )

    rows = [
        {
            "extra_type": extra_type,
            "name_en": name_en,
            "name_ar": name_ar,
            "description_en": description_en,
            "description_ar": description_ar,
            "daily_price": daily,
            "weekly_price": weekly,
            "monthly_price": monthly,
            "is_active": True,
        }
        for extra_type, name_en, name_ar, description_en, description_ar, daily, weekly, monthly in EXTRAS
    ]

    op.bulk_insert(extras_table, rows)


def downgrade() -> None:
    """Remove seed extras."""
    names = [extra[1] for extra in EXTRAS]
    extras_table = table("extra_type_prices", column("name_en", String))
    op.execute(extras_table.delete().where(extras_table.c.name_en.in_(names)))
