"""Loads the read-only input window for one payroll computation."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date, datetime, timezone, tzinfo
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cast_payroll.calculators.types import (
    AttendancePunch,
    Menu,
    OrderLine,
    PayrollSnapshot,
    Person,
    TableSession,
)
from cast_payroll.models import (
    Menu as MenuModel,
    Order,
    Profile,
    ProfileSalarySystem,
    Store,
    TableSession as TableSessionModel,
    TimeCard,
)
from cast_payroll.schemas import SalarySystemSchema

logger = logging.getLogger(__name__)

UNKNOWN_GUEST_NAME = "不明"


def window_start(now: datetime, months: int, tz: tzinfo) -> datetime:
    """First local midnight of the month ``months`` months before ``now``."""
    local = now.astimezone(tz)
    month_index = local.year * 12 + (local.month - 1) - months
    year, month = divmod(month_index, 12)
    return datetime(year, month + 1, 1, tzinfo=tz)


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SnapshotLoader:
    """Reads profiles, time cards, sessions, orders and menus for a window.

    Only reads; the returned snapshot is detached from the session and can
    be handed to the engine as-is.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_store(self, store_id: UUID) -> Store | None:
        result = await self.session.execute(select(Store).where(Store.store_id == store_id))
        return result.scalar_one_or_none()

    async def get_profile(self, profile_id: UUID) -> Profile | None:
        result = await self.session.execute(
            select(Profile).where(Profile.profile_id == profile_id)
        )
        return result.scalar_one_or_none()

    async def load(
        self,
        store_id: UUID,
        start: datetime,
        end: datetime,
        today: date,
        roles: Sequence[str] | None = None,
        profile_id: UUID | None = None,
    ) -> PayrollSnapshot:
        """Load the snapshot for a store.

        Args:
            store_id: Store whose data to read
            start: Window start (sessions starting at or after it)
            end: Window end, normally "now"
            today: Last work date to include for time cards
            roles: Restrict people to these roles
            profile_id: Restrict people to a single profile
        """
        profiles = await self._get_profiles(store_id, roles, profile_id)
        if not profiles:
            return PayrollSnapshot()

        profile_ids = [p.profile_id for p in profiles]
        people = [self._to_person(p) for p in profiles]

        punches = await self._get_punches(profile_ids, start.date(), today)
        sessions = await self._get_sessions(store_id, start, end)
        orders = await self._get_orders([s.table_session_id for s in sessions], profile_ids)
        guest_names = await self._get_guest_names(orders)
        menus = await self._get_menus(store_id)

        logger.debug(
            "Loaded snapshot for store %s: %d people, %d punches, %d sessions, %d orders",
            store_id,
            len(people),
            len(punches),
            len(sessions),
            len(orders),
        )

        return PayrollSnapshot(
            people=people,
            punches=punches,
            sessions=[
                TableSession(
                    id=str(s.table_session_id),
                    start_time=s.start_time,
                    table_name=s.table.name if s.table is not None else None,
                )
                for s in sessions
            ],
            orders=[
                OrderLine(
                    session_id=str(o.table_session_id),
                    cast_id=str(o.cast_id) if o.cast_id else None,
                    menu_id=str(o.menu_id) if o.menu_id else None,
                    item_name=o.item_name,
                    quantity=o.quantity,
                    amount=o.amount,
                    guest_id=str(o.guest_id) if o.guest_id else None,
                )
                for o in orders
            ],
            menus=menus,
            guest_names=guest_names,
        )

    @staticmethod
    def _to_person(profile: Profile) -> Person:
        configuration = None
        if profile.salary_systems:
            # At most one salary system is active per profile.
            salary_system = profile.salary_systems[0].salary_system
            configuration = SalarySystemSchema.model_validate(salary_system).to_configuration()
        return Person(
            id=str(profile.profile_id),
            display_name=profile.display_name,
            configuration=configuration,
        )

    # === Data Loading Methods ===

    async def _get_profiles(
        self,
        store_id: UUID,
        roles: Sequence[str] | None,
        profile_id: UUID | None,
    ) -> list[Profile]:
        query = (
            select(Profile)
            .where(Profile.store_id == store_id)
            .options(
                selectinload(Profile.salary_systems).selectinload(
                    ProfileSalarySystem.salary_system
                )
            )
        )
        if roles is not None:
            query = query.where(Profile.role.in_(list(roles)))
        if profile_id is not None:
            query = query.where(Profile.profile_id == profile_id)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def _get_punches(
        self, profile_ids: list[UUID], first_day: date, last_day: date
    ) -> list[AttendancePunch]:
        result = await self.session.execute(
            select(TimeCard)
            .where(
                TimeCard.profile_id.in_(profile_ids),
                TimeCard.work_date >= first_day,
                TimeCard.work_date <= last_day,
            )
            .order_by(TimeCard.work_date.desc())
        )
        return [
            AttendancePunch(
                id=str(tc.time_card_id),
                person_id=str(tc.profile_id),
                work_date=tc.work_date,
                clock_in=tc.clock_in,
                clock_out=tc.clock_out,
            )
            for tc in result.scalars().all()
        ]

    async def _get_sessions(
        self, store_id: UUID, start: datetime, end: datetime
    ) -> list[TableSessionModel]:
        result = await self.session.execute(
            select(TableSessionModel)
            .where(
                TableSessionModel.store_id == store_id,
                TableSessionModel.start_time >= _utc(start),
                TableSessionModel.start_time <= _utc(end),
            )
            .options(selectinload(TableSessionModel.table))
        )
        return list(result.scalars().all())

    async def _get_orders(
        self, session_ids: list[UUID], profile_ids: list[UUID]
    ) -> list[Order]:
        if not session_ids:
            return []
        result = await self.session.execute(
            select(Order).where(
                Order.table_session_id.in_(session_ids),
                Order.cast_id.in_(profile_ids),
            )
        )
        return list(result.scalars().all())

    async def _get_guest_names(self, orders: list[Order]) -> dict[str, str]:
        guest_ids = {o.guest_id for o in orders if o.guest_id}
        if not guest_ids:
            return {}
        result = await self.session.execute(
            select(Profile.profile_id, Profile.display_name).where(
                Profile.profile_id.in_(guest_ids)
            )
        )
        return {
            str(profile_id): display_name or UNKNOWN_GUEST_NAME
            for profile_id, display_name in result.all()
        }

    async def _get_menus(self, store_id: UUID) -> list[Menu]:
        result = await self.session.execute(
            select(MenuModel)
            .where(MenuModel.store_id == store_id)
            .options(selectinload(MenuModel.category))
        )
        return [
            Menu(
                id=str(m.menu_id),
                name=m.name,
                cast_back_amount=m.cast_back_amount or 0,
                price=m.price or 0,
                category_name=m.category.name if m.category is not None else None,
            )
            for m in result.scalars().all()
        ]
