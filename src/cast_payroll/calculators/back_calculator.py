"""Back (commission) calculation for a single order line."""

from __future__ import annotations

from decimal import Decimal

from cast_payroll.calculators.time_rounder import floor_yen, round_to_unit
from cast_payroll.calculators.types import BackCalculationType, BackRule

_PERCENT_TYPES = (BackCalculationType.TOTAL_PERCENT, BackCalculationType.SUBTOTAL_PERCENT)


class BackCalculator:
    """Computes the back amount of one order line.

    - No rule: the menu's intrinsic per-unit back x quantity
    - fixed: fixed amount x quantity
    - total_percent / subtotal_percent: floor(price x quantity x pct / 100)

    A rule with both a rounding unit and method re-rounds the result.
    """

    @staticmethod
    def calculate(
        rule: BackRule | None,
        price: int,
        quantity: int,
        intrinsic_back: int = 0,
    ) -> int:
        if rule is None:
            return intrinsic_back * quantity

        if rule.calculation == BackCalculationType.FIXED:
            amount = rule.fixed_amount * quantity
        elif rule.calculation in _PERCENT_TYPES:
            amount = floor_yen(Decimal(price) * quantity * rule.percentage / 100)
        else:
            amount = 0

        if rule.rounding is not None and rule.rounding_unit:
            amount = int(round_to_unit(Decimal(amount), rule.rounding_unit, rule.rounding))

        return amount
