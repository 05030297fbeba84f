"""Payroll service: load a snapshot, run the engine, shape the response."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import UUID
from zoneinfo import ZoneInfo

from sqlalchemy.ext.asyncio import AsyncSession

from cast_payroll.calculators.business_date import BusinessDateResolver, parse_day_switch_hour
from cast_payroll.calculators.engine import PayrollEngine
from cast_payroll.calculators.types import PayrollResult
from cast_payroll.config import Settings, get_settings
from cast_payroll.models import Store
from cast_payroll.schemas import PayrollResponse
from cast_payroll.services.snapshot_loader import SnapshotLoader, window_start

logger = logging.getLogger(__name__)

# Role filter -> profile roles it covers
ROLE_GROUPS: dict[str, tuple[str, ...]] = {
    "cast": ("cast",),
    "staff": ("staff", "admin"),
}


class StoreNotFoundError(Exception):
    """Raised when the requested store does not exist."""

    def __init__(self, store_id: UUID):
        self.store_id = store_id
        super().__init__(f"Store {store_id} not found")


class ProfileNotFoundError(Exception):
    """Raised when the requested profile does not exist."""

    def __init__(self, profile_id: UUID):
        self.profile_id = profile_id
        super().__init__(f"Profile {profile_id} not found")


def roles_for(role_filter: str) -> tuple[str, ...]:
    """Expand a role filter ("cast", "staff", ...) into profile roles."""
    return ROLE_GROUPS.get(role_filter, (role_filter,))


class PayrollService:
    """Computes payroll over the trailing window for a store or a profile.

    All reads happen before the engine runs; nothing is written back.
    """

    def __init__(self, session: AsyncSession, settings: Settings | None = None):
        self.session = session
        self.settings = settings or get_settings()
        self.loader = SnapshotLoader(session)

    async def compute_store_payroll(
        self,
        store_id: UUID,
        role: str = "cast",
        now: datetime | None = None,
    ) -> PayrollResponse:
        """Payroll for every profile of ``store_id`` matching ``role``."""
        store = await self.loader.get_store(store_id)
        if store is None:
            raise StoreNotFoundError(store_id)

        result = await self._compute(store, now, roles=roles_for(role))
        return self.to_response(result)

    async def compute_profile_payroll(
        self,
        profile_id: UUID,
        now: datetime | None = None,
    ) -> PayrollResponse:
        """Payroll of a single profile, whatever its role."""
        profile = await self.loader.get_profile(profile_id)
        if profile is None:
            raise ProfileNotFoundError(profile_id)
        store = await self.loader.get_store(profile.store_id)
        if store is None:
            raise StoreNotFoundError(profile.store_id)

        result = await self._compute(store, now, profile_id=profile_id)
        return self.to_response(result)

    def resolver_for(self, store: Store) -> BusinessDateResolver:
        """Business date resolver using the store's day-switch time."""
        default_hour = parse_day_switch_hour(self.settings.default_day_switch_time)
        hour = parse_day_switch_hour(store.day_switch_time, default=default_hour)
        return BusinessDateResolver(hour, ZoneInfo(self.settings.timezone))

    async def _compute(
        self,
        store: Store,
        now: datetime | None,
        roles: tuple[str, ...] | None = None,
        profile_id: UUID | None = None,
    ) -> PayrollResult:
        now = now or datetime.now(timezone.utc)
        resolver = self.resolver_for(store)
        start = window_start(now, self.settings.window_months, resolver.tz)

        snapshot = await self.loader.load(
            store.store_id,
            start=start,
            end=now,
            today=resolver.calendar_date(now),
            roles=roles,
            profile_id=profile_id,
        )
        logger.info(
            "Computing payroll for store %s from %s (day switch %02d:00, engine %s)",
            store.store_id,
            start.date(),
            resolver.day_switch_hour,
            self.settings.engine_version,
        )
        return PayrollEngine(resolver).calculate(snapshot, now=now)

    @staticmethod
    def to_response(result: PayrollResult) -> PayrollResponse:
        return PayrollResponse.model_validate(result)
