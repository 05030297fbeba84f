"""Pytest fixtures for cast payroll tests."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from typing import AsyncGenerator
from uuid import uuid4
from zoneinfo import ZoneInfo

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from cast_payroll.calculators.business_date import BusinessDateResolver
from cast_payroll.calculators.types import (
    BackCalculationType,
    BackRule,
    CommissionConfiguration,
    DeductionKind,
    DeductionRule,
    FeeCategory,
    HourlySettings,
)
from cast_payroll.config import Settings
from cast_payroll.models import (
    Base,
    Menu,
    MenuCategory,
    Order,
    Profile,
    ProfileSalarySystem,
    SalarySystem,
    Store,
    StoreTable,
    TableSession,
    TimeCard,
)

JST = ZoneInfo("Asia/Tokyo")

# Use in-memory SQLite for tests (with async support)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def jst(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    """Aware datetime in Japan time."""
    return datetime(year, month, day, hour, minute, tzinfo=JST)


def utc(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    """The UTC instant of a Japan wall-clock time (SQLite keeps wall-clock only)."""
    return jst(year, month, day, hour, minute).astimezone(timezone.utc)


@pytest.fixture
def resolver() -> BusinessDateResolver:
    """Resolver with the default 05:00 switch in Japan time."""
    return BusinessDateResolver(5, JST)


@pytest.fixture
def standard_config() -> CommissionConfiguration:
    """¥2,000/h, 10% store back, ¥500 fixed + 5% deductions."""
    return CommissionConfiguration(
        id="system-1",
        name="Standard",
        hourly=HourlySettings(amount=2000),
        back_rules={
            FeeCategory.STORE: BackRule(
                calculation=BackCalculationType.TOTAL_PERCENT,
                percentage=Decimal("10"),
            ),
            FeeCategory.NOMINATION: BackRule(
                calculation=BackCalculationType.FIXED,
                fixed_amount=1000,
            ),
        },
        deductions=(
            DeductionRule(name="厚生費", kind=DeductionKind.FIXED, amount=Decimal("500")),
            DeductionRule(name="源泉", kind=DeductionKind.PERCENT, amount=Decimal("5")),
        ),
    )


@pytest.fixture
def test_settings() -> Settings:
    """Settings independent of the environment."""
    return Settings(
        database_url=TEST_DATABASE_URL,
        engine_version="test",
        timezone="Asia/Tokyo",
        default_day_switch_time="05:00",
        window_months=3,
        log_level="DEBUG",
    )


@pytest_asyncio.fixture
async def db_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    session_factory = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def store_data(session: AsyncSession) -> SimpleNamespace:
    """Seed one store with casts, a staff member, a guest and a night of sales.

    Business date 2026-03-14 (JST):
    - Aoi: 18:00-23:00 at ¥2,000/h, シャンパン x2 (10% store back) and a
      manual 指名料 (¥1,000 fixed nomination back); ¥500 + 5% deductions
    - Mei: no salary system, シャンパン x1 (intrinsic ¥500 back)
    - Ken (staff): 19:00-21:00 on 2026-03-13, no salary system
    Plus an out-of-window session and time card from November 2025.
    """
    ids = SimpleNamespace(
        store_id=uuid4(),
        table_id=uuid4(),
        drink_category_id=uuid4(),
        nomination_category_id=uuid4(),
        champagne_id=uuid4(),
        nomination_menu_id=uuid4(),
        aoi_id=uuid4(),
        mei_id=uuid4(),
        ken_id=uuid4(),
        guest_id=uuid4(),
        system_id=uuid4(),
        session_id=uuid4(),
        old_session_id=uuid4(),
        aoi_card_id=uuid4(),
    )

    session.add(Store(store_id=ids.store_id, name="Club Test", day_switch_time="05:00"))
    await session.flush()

    session.add_all([
        StoreTable(table_id=ids.table_id, store_id=ids.store_id, name="A1"),
        MenuCategory(
            menu_category_id=ids.drink_category_id, store_id=ids.store_id, name="ドリンク"
        ),
        MenuCategory(
            menu_category_id=ids.nomination_category_id, store_id=ids.store_id, name="指名"
        ),
        Profile(profile_id=ids.aoi_id, store_id=ids.store_id, display_name="Aoi", role="cast"),
        Profile(profile_id=ids.mei_id, store_id=ids.store_id, display_name="Mei", role="cast"),
        Profile(profile_id=ids.ken_id, store_id=ids.store_id, display_name="Ken", role="staff"),
        Profile(profile_id=ids.guest_id, store_id=ids.store_id, display_name="Taro", role="guest"),
        SalarySystem(
            salary_system_id=ids.system_id,
            store_id=ids.store_id,
            name="Standard",
            hourly_settings={"amount": 2000, "time_unit_minutes": 60, "time_rounding_type": "round"},
            store_back_settings={"calculation_type": "total_percent", "percentage": 10},
            shimei_back_settings={"calculation_type": "fixed", "fixed_amount": 1000},
            deductions=[
                {"name": "厚生費", "type": "fixed", "amount": 500},
                {"name": "源泉", "type": "percent", "amount": 5},
            ],
        ),
    ])
    await session.flush()

    session.add_all([
        Menu(
            menu_id=ids.champagne_id,
            store_id=ids.store_id,
            category_id=ids.drink_category_id,
            name="シャンパン",
            price=5000,
            cast_back_amount=500,
        ),
        Menu(
            menu_id=ids.nomination_menu_id,
            store_id=ids.store_id,
            category_id=ids.nomination_category_id,
            name="本指名",
            price=3000,
            cast_back_amount=0,
        ),
        ProfileSalarySystem(profile_id=ids.aoi_id, salary_system_id=ids.system_id),
        TimeCard(
            time_card_id=ids.aoi_card_id,
            profile_id=ids.aoi_id,
            work_date=date(2026, 3, 14),
            clock_in=utc(2026, 3, 14, 18),
            clock_out=utc(2026, 3, 14, 23),
        ),
        TimeCard(
            profile_id=ids.ken_id,
            work_date=date(2026, 3, 13),
            clock_in=utc(2026, 3, 13, 19),
            clock_out=utc(2026, 3, 13, 21),
        ),
        TimeCard(
            profile_id=ids.aoi_id,
            work_date=date(2025, 11, 20),
            clock_in=utc(2025, 11, 20, 19),
            clock_out=utc(2025, 11, 20, 22),
        ),
        TableSession(
            table_session_id=ids.session_id,
            store_id=ids.store_id,
            table_id=ids.table_id,
            start_time=utc(2026, 3, 14, 20),
        ),
        TableSession(
            table_session_id=ids.old_session_id,
            store_id=ids.store_id,
            table_id=ids.table_id,
            start_time=utc(2025, 11, 20, 20),
        ),
    ])
    await session.flush()

    session.add_all([
        Order(
            table_session_id=ids.session_id,
            cast_id=ids.aoi_id,
            guest_id=ids.guest_id,
            menu_id=ids.champagne_id,
            quantity=2,
            amount=10000,
        ),
        Order(
            table_session_id=ids.session_id,
            cast_id=ids.aoi_id,
            item_name="指名料",
            quantity=1,
            amount=3000,
        ),
        Order(
            table_session_id=ids.session_id,
            cast_id=ids.mei_id,
            menu_id=ids.champagne_id,
            quantity=1,
            amount=5000,
        ),
        Order(
            table_session_id=ids.session_id,
            cast_id=None,
            menu_id=ids.champagne_id,
            quantity=1,
            amount=5000,
        ),
        Order(
            table_session_id=ids.old_session_id,
            cast_id=ids.aoi_id,
            menu_id=ids.champagne_id,
            quantity=10,
            amount=50000,
        ),
    ])
    await session.flush()

    # Force the service to read everything back through its own queries.
    session.expire_all()
    return ids
