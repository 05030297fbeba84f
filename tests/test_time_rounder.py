"""Tests for worked-time rounding and hourly wage."""

from datetime import timedelta
from decimal import Decimal

import pytest

from cast_payroll.calculators.time_rounder import TimeRounder, round_to_unit
from cast_payroll.calculators.types import HourlySettings, RoundingMethod
from tests.conftest import jst


class TestRoundToUnit:
    """Test unit rounding shared by time and money."""

    def test_down(self):
        assert round_to_unit(Decimal("89"), 30, RoundingMethod.DOWN) == 60

    def test_up(self):
        assert round_to_unit(Decimal("61"), 30, RoundingMethod.UP) == 90

    def test_nearest_rounds_half_up(self):
        """Exactly half a unit rounds up."""
        assert round_to_unit(Decimal("45"), 30, RoundingMethod.NEAREST) == 60
        assert round_to_unit(Decimal("44.9"), 30, RoundingMethod.NEAREST) == 30

    def test_exact_multiple_unchanged(self):
        for method in RoundingMethod:
            assert round_to_unit(Decimal("120"), 60, method) == 120

    @pytest.mark.parametrize("unit", [1, 15, 30, 60])
    @pytest.mark.parametrize("raw", ["0", "7", "29.5", "300", "301", "359.99"])
    def test_rounded_value_within_one_unit(self, raw, unit):
        """Rounded minutes are a multiple of the unit and within one unit of raw."""
        value = Decimal(raw)

        down = round_to_unit(value, unit, RoundingMethod.DOWN)
        up = round_to_unit(value, unit, RoundingMethod.UP)
        nearest = round_to_unit(value, unit, RoundingMethod.NEAREST)

        for rounded in (down, up, nearest):
            assert rounded % unit == 0
        assert value - unit < down <= value
        assert value <= up < value + unit
        assert abs(nearest - value) <= Decimal(unit) / 2


class TestTimeRounder:
    """Test hourly wage computation for one punch."""

    def test_five_hour_shift(self):
        """18:00-23:00 at ¥2,000/h is ¥10,000."""
        worked = TimeRounder.compute(
            jst(2026, 3, 14, 18),
            jst(2026, 3, 14, 23),
            HourlySettings(amount=2000),
            now=jst(2026, 3, 15, 1),
        )

        assert worked.raw_minutes == 300
        assert worked.hours == 5
        assert worked.wage == 10000

    def test_day_crossing_without_date_advance(self):
        """Clock-out 00:10 on the same date as a 23:50 clock-in is 20 minutes."""
        raw = TimeRounder.raw_minutes(
            jst(2026, 3, 14, 23, 50),
            jst(2026, 3, 14, 0, 10),
            now=jst(2026, 3, 15, 1),
        )
        assert raw == 20

    def test_missing_clock_out_bills_until_now(self):
        """An open punch is billed up to now."""
        clock_in = jst(2026, 3, 14, 20)
        worked = TimeRounder.compute(
            clock_in,
            None,
            HourlySettings(amount=1500),
            now=clock_in + timedelta(hours=2, minutes=10),
        )

        assert worked.raw_minutes == 130
        assert worked.rounded_minutes == 120
        assert worked.wage == 3000

    def test_rounding_down_to_quarter_hours(self):
        """5h10m rounded down to 15 minutes is 5h."""
        worked = TimeRounder.compute(
            jst(2026, 3, 14, 18),
            jst(2026, 3, 14, 23, 10),
            HourlySettings(amount=1500, time_unit_minutes=15, rounding=RoundingMethod.DOWN),
            now=jst(2026, 3, 15, 1),
        )
        assert worked.rounded_minutes == 300
        assert worked.wage == 7500

    def test_rounding_up(self):
        """A 61 minute shift rounded up to 30 minutes bills 90 minutes."""
        worked = TimeRounder.compute(
            jst(2026, 3, 14, 20),
            jst(2026, 3, 14, 21, 1),
            HourlySettings(amount=1000, time_unit_minutes=30, rounding=RoundingMethod.UP),
            now=jst(2026, 3, 15, 1),
        )
        assert worked.rounded_minutes == 90
        assert worked.wage == 1500

    def test_wage_is_floored(self):
        """Fractional yen are truncated, never rounded."""
        worked = TimeRounder.compute(
            jst(2026, 3, 14, 20),
            jst(2026, 3, 14, 20, 50),
            HourlySettings(amount=1999, time_unit_minutes=10),
            now=jst(2026, 3, 15, 1),
        )
        # 50/60 * 1999 = 1665.83
        assert worked.wage == 1665
        assert worked.display_hours == Decimal("0.83")

    def test_thirds_of_an_hour_are_exact(self):
        """20 minutes at ¥1,800/h is exactly ¥600."""
        worked = TimeRounder.compute(
            jst(2026, 3, 14, 20),
            jst(2026, 3, 14, 20, 20),
            HourlySettings(amount=1800, time_unit_minutes=10),
            now=jst(2026, 3, 15, 1),
        )
        assert worked.wage == 600

    def test_long_shift_is_billed_in_full(self):
        """There is no cap on shift length."""
        worked = TimeRounder.compute(
            jst(2026, 3, 14, 10),
            jst(2026, 3, 15, 4),
            HourlySettings(amount=1000),
            now=jst(2026, 3, 15, 5),
        )
        assert worked.hours == 18
        assert worked.wage == 18000
