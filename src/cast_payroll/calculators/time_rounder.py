"""Rounding of worked time (and money) to configured units."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import ROUND_CEILING, ROUND_FLOOR, ROUND_HALF_UP, Decimal

from cast_payroll.calculators.types import HourlySettings, RoundingMethod

_DECIMAL_ROUNDING = {
    RoundingMethod.DOWN: ROUND_FLOOR,
    RoundingMethod.UP: ROUND_CEILING,
    RoundingMethod.NEAREST: ROUND_HALF_UP,
}

HOURS_PRECISION = Decimal("0.01")


def round_to_unit(value: Decimal, unit: int, method: RoundingMethod) -> Decimal:
    """Snap ``value`` to a multiple of ``unit`` in the direction of ``method``.

    Used both for minutes worked and for yen amounts.
    """
    steps = (value / unit).to_integral_value(rounding=_DECIMAL_ROUNDING[method])
    return steps * unit


def floor_yen(value: Decimal) -> int:
    """Truncate a non-negative currency amount to whole yen."""
    return int(value.to_integral_value(rounding=ROUND_FLOOR))


@dataclass(frozen=True)
class WorkedTime:
    """Billable time and wage for one punch."""

    raw_minutes: Decimal
    rounded_minutes: Decimal
    hours: Decimal
    wage: int

    @property
    def display_hours(self) -> Decimal:
        return self.hours.quantize(HOURS_PRECISION, rounding=ROUND_HALF_UP)


class TimeRounder:
    """Turns a clock-in/clock-out pair into billable hours and wage.

    Rules:
    - A missing clock-out bills the shift up to ``now``
    - A clock-out earlier than clock-in is moved 24 hours later
      (shift crossed midnight without the date advancing)
    - Raw minutes are rounded to ``time_unit_minutes`` per the method
    - wage = floor(hours x rate)
    """

    # TODO: in-progress shifts bill up to "now", so the wage grows on every
    # recompute; confirm with store owners whether open punches should be
    # shown as zero instead.

    @staticmethod
    def raw_minutes(
        clock_in: datetime,
        clock_out: datetime | None,
        now: datetime,
    ) -> Decimal:
        """Minutes between clock-in and clock-out with the day-crossing fix."""
        end = clock_out if clock_out is not None else now
        start, end = _comparable(clock_in), _comparable(end)
        if end < start:
            end = end + timedelta(hours=24)
        seconds = Decimal(str((end - start).total_seconds()))
        return seconds / 60

    @staticmethod
    def compute(
        clock_in: datetime,
        clock_out: datetime | None,
        settings: HourlySettings,
        now: datetime,
    ) -> WorkedTime:
        """Compute billable time and wage for one punch."""
        raw = TimeRounder.raw_minutes(clock_in, clock_out, now)
        rounded = round_to_unit(raw, settings.time_unit_minutes, settings.rounding)
        hours = rounded / 60
        # Multiply before dividing so 20 min at 1800/h is exactly 600.
        wage = floor_yen(rounded * settings.amount / 60)
        return WorkedTime(
            raw_minutes=raw,
            rounded_minutes=rounded,
            hours=hours,
            wage=wage,
        )


def _comparable(timestamp: datetime) -> datetime:
    # Naive timestamps are UTC throughout the pipeline.
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp
