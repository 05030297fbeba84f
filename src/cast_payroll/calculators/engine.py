"""Payroll calculation engine - main orchestrator."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from decimal import Decimal

from cast_payroll.calculators.back_calculator import BackCalculator
from cast_payroll.calculators.business_date import BusinessDateResolver
from cast_payroll.calculators.fee_classifier import FeeClassifier
from cast_payroll.calculators.time_rounder import TimeRounder, floor_yen
from cast_payroll.calculators.types import (
    AttendancePunch,
    BackDetail,
    DeductionDetail,
    DeductionKind,
    HourlyDetail,
    HourlySettings,
    Menu,
    OrderLine,
    PayrollRecord,
    PayrollResult,
    PayrollSnapshot,
    Person,
    TableSession,
)

logger = logging.getLogger(__name__)

UNKNOWN_NAME = "不明"
DEFAULT_DEDUCTION_NAME = "控除"
FIXED_DEDUCTION_LABEL = "固定"


class PayrollEngine:
    """Folds punches and order lines into per-day payroll records.

    Calculation pipeline:
    1) Collect: each punch adds its hourly wage to the (business date,
       person) record; each order line adds its back amount
    2) Finalize: once every row is folded, resolve deductions against the
       record's final gross (percent deductions need the full gross)
    3) Sort by business date, newest first

    The engine is pure: it reads a prepared snapshot and never raises for
    orphaned rows, which are dropped.
    """

    def __init__(self, resolver: BusinessDateResolver | None = None):
        self.resolver = resolver or BusinessDateResolver()

    def calculate(
        self,
        snapshot: PayrollSnapshot,
        now: datetime | None = None,
    ) -> PayrollResult:
        """Compute payroll records for every person in ``snapshot``."""
        now = now or datetime.now(timezone.utc)
        people = {p.id: p for p in snapshot.people}
        records: dict[tuple[date, str], PayrollRecord] = {}

        self._collect_punches(records, people, snapshot.punches, now)
        self._collect_orders(records, people, snapshot)

        for (_, person_id), record in records.items():
            self._finalize(record, people[person_id])

        ordered = sorted(records.values(), key=lambda r: (r.name, r.profile_id))
        ordered.sort(key=lambda r: r.date, reverse=True)

        today = self.resolver.resolve(now)
        today_total = sum(max(0, r.total_salary) for r in ordered if r.date == today)

        logger.info(
            "Computed %d payroll records for %d people (today %s: %d)",
            len(ordered),
            len(people),
            today,
            today_total,
        )
        return PayrollResult(records=ordered, today_total=today_total, business_date=today)

    # === Pass 1: collecting ===

    def _collect_punches(
        self,
        records: dict[tuple[date, str], PayrollRecord],
        people: dict[str, Person],
        punches: list[AttendancePunch],
        now: datetime,
    ) -> None:
        for punch in punches:
            person = people.get(punch.person_id)
            if person is None:
                logger.debug("Dropping punch %s for unknown person %s", punch.id, punch.person_id)
                continue

            if punch.clock_in is not None:
                business_date = self.resolver.resolve(punch.clock_in)
            else:
                business_date = punch.work_date

            record = self._get_or_create(records, business_date, person)
            detail = self._hourly_detail(punch, person, now)
            if detail is not None:
                record.hourly_wage += detail.wage
                record.hourly_details.append(detail)

    def _hourly_detail(
        self, punch: AttendancePunch, person: Person, now: datetime
    ) -> HourlyDetail | None:
        """Compute the wage of one punch; None when it has no clock-in."""
        if punch.clock_in is None:
            return None

        config = person.configuration
        settings = config.hourly if config is not None else HourlySettings()
        worked = TimeRounder.compute(punch.clock_in, punch.clock_out, settings, now)

        return HourlyDetail(
            time_card_id=punch.id,
            hourly_rate=settings.amount,
            clock_in=self.resolver.format_time(punch.clock_in),
            clock_out=self.resolver.format_time(punch.clock_out) if punch.clock_out else None,
            hours_worked=worked.display_hours,
            wage=worked.wage,
        )

    def _collect_orders(
        self,
        records: dict[tuple[date, str], PayrollRecord],
        people: dict[str, Person],
        snapshot: PayrollSnapshot,
    ) -> None:
        sessions = {s.id: s for s in snapshot.sessions}
        menus = {m.id: m for m in snapshot.menus}

        for order in snapshot.orders:
            if not order.cast_id:
                continue
            session = sessions.get(order.session_id)
            if session is None:
                logger.debug("Dropping order for unknown session %s", order.session_id)
                continue
            person = people.get(order.cast_id)
            if person is None:
                logger.debug("Dropping order for unknown person %s", order.cast_id)
                continue

            menu = menus.get(order.menu_id) if order.menu_id else None
            if menu is None and not order.item_name:
                continue

            business_date = self.resolver.resolve(session.start_time)
            record = self._get_or_create(records, business_date, person)
            self._add_back(record, person, order, menu, session, snapshot.guest_names)

    def _add_back(
        self,
        record: PayrollRecord,
        person: Person,
        order: OrderLine,
        menu: Menu | None,
        session: TableSession,
        guest_names: dict[str, str],
    ) -> None:
        quantity = order.quantity or 1
        category = FeeClassifier.classify_order(menu, order.item_name)
        config = person.configuration
        rule = config.back_rule_for(category) if config is not None else None

        if menu is not None:
            item_name = menu.name or UNKNOWN_NAME
            price = menu.price
            intrinsic = menu.cast_back_amount
        else:
            # Manual lines (指名料 etc.) carry their price on the line itself.
            item_name = order.item_name or UNKNOWN_NAME
            price = order.amount or 0
            intrinsic = 0

        amount = BackCalculator.calculate(rule, price, quantity, intrinsic)
        record.back_amount += amount

        if amount > 0:
            guest_name = guest_names.get(order.guest_id) if order.guest_id else None
            record.back_details.append(
                BackDetail(
                    session_id=order.session_id,
                    table_name=session.table_name or UNKNOWN_NAME,
                    guest_name=guest_name,
                    menu_name=item_name,
                    quantity=quantity,
                    unit_back=amount // quantity,
                    amount=amount,
                    fee_category=category,
                )
            )

    def _get_or_create(
        self,
        records: dict[tuple[date, str], PayrollRecord],
        business_date: date,
        person: Person,
    ) -> PayrollRecord:
        key = (business_date, person.id)
        record = records.get(key)
        if record is None:
            config = person.configuration
            record = PayrollRecord(
                date=business_date,
                label=self.resolver.label(business_date),
                profile_id=person.id,
                name=person.display_name or UNKNOWN_NAME,
                salary_system_id=config.id if config is not None else None,
                salary_system_name=config.name if config is not None else None,
            )
            records[key] = record
        return record

    # === Pass 2: finalizing ===

    @staticmethod
    def _finalize(record: PayrollRecord, person: Person) -> None:
        """Resolve deductions against the record's final gross."""
        gross = record.gross
        config = person.configuration
        rules = config.deductions if config is not None else ()

        details: list[DeductionDetail] = []
        for rule in rules:
            if not rule.amount:
                continue
            name = rule.name or DEFAULT_DEDUCTION_NAME
            if rule.kind == DeductionKind.FIXED:
                details.append(
                    DeductionDetail(name=name, amount=int(rule.amount), type=FIXED_DEDUCTION_LABEL)
                )
            else:
                amount = floor_yen(Decimal(gross) * rule.amount / 100)
                details.append(
                    DeductionDetail(name=name, amount=amount, type=f"{_format_percent(rule.amount)}%")
                )

        record.deduction_details = details
        record.deduction_amount = sum(d.amount for d in details)
        record.total_salary = gross - record.deduction_amount


def _format_percent(value: Decimal) -> str:
    """Render 5 as "5" and 2.5 as "2.5"."""
    normalized = value.normalize()
    if normalized == normalized.to_integral_value():
        return str(int(normalized))
    return format(normalized, "f")
