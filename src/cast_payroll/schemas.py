"""Pydantic schemas for salary-system settings and payroll responses.

Settings arrive as loosely-typed JSON edited through the admin UI. They are
validated here exactly once; malformed values fall back to documented
defaults so the calculators can rely on well-formed inputs.
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from cast_payroll.calculators.types import (
    BackCalculationType,
    BackRule,
    CommissionConfiguration,
    DeductionKind,
    DeductionRule,
    FeeCategory,
    HourlySettings,
    RoundingMethod,
)

DEFAULT_TIME_UNIT_MINUTES = 60


def _to_int(value: Any, default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(Decimal(str(value)))
    except (InvalidOperation, ValueError, OverflowError):
        return default


def _to_decimal(value: Any, default: Decimal = Decimal("0")) -> Decimal:
    if value is None or isinstance(value, bool):
        return default
    try:
        parsed = Decimal(str(value))
    except (InvalidOperation, ValueError, OverflowError):
        return default
    return parsed if parsed.is_finite() else default


def _to_rounding(value: Any) -> RoundingMethod:
    try:
        return RoundingMethod(value)
    except ValueError:
        return RoundingMethod.NEAREST


# ============================================================================
# Settings schemas
# ============================================================================


class HourlySettingsSchema(BaseModel):
    """hourly_settings JSON."""

    model_config = ConfigDict(extra="ignore")

    amount: int = 0
    time_unit_minutes: int = DEFAULT_TIME_UNIT_MINUTES
    time_rounding_type: RoundingMethod = RoundingMethod.NEAREST

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> int:
        return max(0, _to_int(value, 0))

    @field_validator("time_unit_minutes", mode="before")
    @classmethod
    def _coerce_unit(cls, value: Any) -> int:
        unit = _to_int(value, DEFAULT_TIME_UNIT_MINUTES)
        return unit if unit > 0 else DEFAULT_TIME_UNIT_MINUTES

    @field_validator("time_rounding_type", mode="before")
    @classmethod
    def _coerce_rounding(cls, value: Any) -> RoundingMethod:
        return _to_rounding(value)

    def to_settings(self) -> HourlySettings:
        return HourlySettings(
            amount=self.amount,
            time_unit_minutes=self.time_unit_minutes,
            rounding=self.time_rounding_type,
        )


class BackSettingsSchema(BaseModel):
    """*_back_settings JSON for one fee category."""

    model_config = ConfigDict(extra="ignore")

    calculation_type: BackCalculationType = BackCalculationType.UNKNOWN
    fixed_amount: int = 0
    percentage: Decimal = Decimal("0")
    rounding_type: RoundingMethod | None = None
    rounding_unit: int | None = None

    @field_validator("calculation_type", mode="before")
    @classmethod
    def _coerce_calculation(cls, value: Any) -> BackCalculationType:
        try:
            return BackCalculationType(value)
        except ValueError:
            return BackCalculationType.UNKNOWN

    @field_validator("fixed_amount", mode="before")
    @classmethod
    def _coerce_fixed(cls, value: Any) -> int:
        return _to_int(value, 0)

    @field_validator("percentage", mode="before")
    @classmethod
    def _coerce_percentage(cls, value: Any) -> Decimal:
        return _to_decimal(value)

    @field_validator("rounding_type", mode="before")
    @classmethod
    def _coerce_rounding(cls, value: Any) -> RoundingMethod | None:
        if not value:
            return None
        return _to_rounding(value)

    @field_validator("rounding_unit", mode="before")
    @classmethod
    def _coerce_unit(cls, value: Any) -> int | None:
        unit = _to_int(value, 0)
        return unit if unit > 0 else None

    def to_rule(self) -> BackRule:
        return BackRule(
            calculation=self.calculation_type,
            fixed_amount=self.fixed_amount,
            percentage=self.percentage,
            rounding_unit=self.rounding_unit,
            rounding=self.rounding_type,
        )


class DeductionSchema(BaseModel):
    """One entry of the deductions JSON list."""

    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    type: DeductionKind | None = None
    amount: Decimal = Decimal("0")

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value: Any) -> DeductionKind | None:
        if value == "percentage":
            return DeductionKind.PERCENT
        try:
            return DeductionKind(value)
        except ValueError:
            return None

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> Decimal:
        return _to_decimal(value)

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_name(cls, value: Any) -> str | None:
        return str(value) if value else None


class SalarySystemSchema(BaseModel):
    """A salary system row, normalized into a CommissionConfiguration."""

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    salary_system_id: str
    name: str | None = None
    hourly_settings: HourlySettingsSchema = Field(default_factory=HourlySettingsSchema)
    store_back_settings: BackSettingsSchema | None = None
    jounai_back_settings: BackSettingsSchema | None = None
    shimei_back_settings: BackSettingsSchema | None = None
    douhan_back_settings: BackSettingsSchema | None = None
    deductions: list[DeductionSchema] = Field(default_factory=list)

    @field_validator("salary_system_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        return str(value)

    @field_validator("hourly_settings", mode="before")
    @classmethod
    def _coerce_hourly(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}

    @field_validator(
        "store_back_settings",
        "jounai_back_settings",
        "shimei_back_settings",
        "douhan_back_settings",
        mode="before",
    )
    @classmethod
    def _coerce_back(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else None

    @field_validator("deductions", mode="before")
    @classmethod
    def _coerce_deductions(cls, value: Any) -> list[Any]:
        if not isinstance(value, list):
            return []
        return [d for d in value if isinstance(d, dict)]

    def to_configuration(self) -> CommissionConfiguration:
        """Build the calculator-facing configuration."""
        back_rules: dict[FeeCategory, BackRule] = {}
        for category, settings in (
            (FeeCategory.STORE, self.store_back_settings),
            (FeeCategory.IN_HOUSE_NOMINATION, self.jounai_back_settings),
            (FeeCategory.NOMINATION, self.shimei_back_settings),
            (FeeCategory.COMPANION, self.douhan_back_settings),
        ):
            if settings is not None:
                back_rules[category] = settings.to_rule()

        deductions = tuple(
            DeductionRule(name=d.name or "", kind=d.type, amount=d.amount)
            for d in self.deductions
            if d.type is not None
        )

        return CommissionConfiguration(
            id=self.salary_system_id,
            name=self.name,
            hourly=self.hourly_settings.to_settings(),
            back_rules=back_rules,
            deductions=deductions,
        )


# ============================================================================
# Response schemas
# ============================================================================


class ResponseBase(BaseModel):
    """Base response schema; serialized with camelCase keys."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class HourlyDetailResponse(ResponseBase):
    time_card_id: str
    hourly_rate: int
    clock_in: str | None = None
    clock_out: str | None = None
    hours_worked: float
    wage: int


class BackDetailResponse(ResponseBase):
    session_id: str
    table_name: str
    guest_name: str | None = None
    menu_name: str
    quantity: int
    unit_back: int
    amount: int
    fee_category: FeeCategory


class DeductionDetailResponse(ResponseBase):
    name: str
    amount: int
    type: str


class PayrollRecordResponse(ResponseBase):
    """Payroll of one person for one business date."""

    date: dt.date
    label: str
    profile_id: str
    name: str
    hourly_wage: int
    hourly_details: list[HourlyDetailResponse]
    back_amount: int
    back_details: list[BackDetailResponse]
    deduction_amount: int
    deduction_details: list[DeductionDetailResponse]
    total_salary: int
    salary_system_id: str | None = None
    salary_system_name: str | None = None


class PayrollResponse(ResponseBase):
    """Records newest first, plus the same-day total."""

    records: list[PayrollRecordResponse]
    today_total: int
