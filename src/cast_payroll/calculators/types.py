"""Type definitions for the payroll calculation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum


class RoundingMethod(str, Enum):
    """Direction used when snapping a value to a rounding unit."""

    DOWN = "down"
    UP = "up"
    NEAREST = "round"


class FeeCategory(str, Enum):
    """Commission categories, valued by their settings key prefix."""

    STORE = "store"
    NOMINATION = "shimei"
    IN_HOUSE_NOMINATION = "jounai"
    COMPANION = "douhan"


class BackCalculationType(str, Enum):
    """How a back rule turns an order line into a commission."""

    FIXED = "fixed"
    TOTAL_PERCENT = "total_percent"
    SUBTOTAL_PERCENT = "subtotal_percent"
    UNKNOWN = "unknown"


class DeductionKind(str, Enum):
    """Deduction rule kinds."""

    FIXED = "fixed"
    PERCENT = "percent"


# ============================================================================
# Configuration
# ============================================================================


@dataclass(frozen=True)
class HourlySettings:
    """Hourly wage settings of a salary system."""

    amount: int = 0  # yen per hour
    time_unit_minutes: int = 60
    rounding: RoundingMethod = RoundingMethod.NEAREST


@dataclass(frozen=True)
class BackRule:
    """Back (commission) rule for one fee category."""

    calculation: BackCalculationType
    fixed_amount: int = 0
    percentage: Decimal = Decimal("0")
    rounding_unit: int | None = None
    rounding: RoundingMethod | None = None


@dataclass(frozen=True)
class DeductionRule:
    """A fixed-yen or percent-of-gross deduction."""

    name: str
    kind: DeductionKind
    amount: Decimal  # yen for FIXED, percent for PERCENT


@dataclass(frozen=True)
class CommissionConfiguration:
    """A salary system: hourly settings, back rules and deductions."""

    id: str
    name: str | None
    hourly: HourlySettings = field(default_factory=HourlySettings)
    back_rules: dict[FeeCategory, BackRule] = field(default_factory=dict)
    deductions: tuple[DeductionRule, ...] = ()

    def back_rule_for(self, category: FeeCategory) -> BackRule | None:
        return self.back_rules.get(category)


# ============================================================================
# Input snapshot
# ============================================================================


@dataclass(frozen=True)
class Person:
    """A cast or staff member eligible for payroll."""

    id: str
    display_name: str | None
    configuration: CommissionConfiguration | None = None


@dataclass(frozen=True)
class AttendancePunch:
    """One clock-in/clock-out pair."""

    id: str
    person_id: str
    work_date: date
    clock_in: datetime | None = None
    clock_out: datetime | None = None


@dataclass(frozen=True)
class TableSession:
    """A table session grouping order lines."""

    id: str
    start_time: datetime
    table_name: str | None = None


@dataclass(frozen=True)
class Menu:
    """Menu metadata needed for classification and intrinsic back."""

    id: str
    name: str | None
    cast_back_amount: int = 0
    price: int = 0
    category_name: str | None = None


@dataclass(frozen=True)
class OrderLine:
    """One sold item within a table session."""

    session_id: str
    cast_id: str | None
    menu_id: str | None = None
    item_name: str | None = None
    quantity: int | None = None
    amount: int | None = None
    guest_id: str | None = None


@dataclass
class PayrollSnapshot:
    """Everything one payroll computation reads, fetched ahead of time."""

    people: list[Person] = field(default_factory=list)
    punches: list[AttendancePunch] = field(default_factory=list)
    sessions: list[TableSession] = field(default_factory=list)
    orders: list[OrderLine] = field(default_factory=list)
    menus: list[Menu] = field(default_factory=list)
    guest_names: dict[str, str] = field(default_factory=dict)


# ============================================================================
# Output
# ============================================================================


@dataclass
class HourlyDetail:
    """How the hourly wage of one punch was computed."""

    time_card_id: str
    hourly_rate: int
    clock_in: str | None
    clock_out: str | None
    hours_worked: Decimal
    wage: int


@dataclass
class BackDetail:
    """One itemized commission line."""

    session_id: str
    table_name: str
    guest_name: str | None
    menu_name: str
    quantity: int
    unit_back: int
    amount: int
    fee_category: FeeCategory = FeeCategory.STORE


@dataclass
class DeductionDetail:
    """One itemized deduction, resolved to yen."""

    name: str
    amount: int
    type: str  # display label: "固定" or e.g. "5%"


@dataclass
class PayrollRecord:
    """Payroll of one person for one business date."""

    date: date
    label: str
    profile_id: str
    name: str
    salary_system_id: str | None = None
    salary_system_name: str | None = None
    hourly_wage: int = 0
    hourly_details: list[HourlyDetail] = field(default_factory=list)
    back_amount: int = 0
    back_details: list[BackDetail] = field(default_factory=list)
    deduction_amount: int = 0
    deduction_details: list[DeductionDetail] = field(default_factory=list)
    total_salary: int = 0

    @property
    def gross(self) -> int:
        """Hourly wage plus commission, before deductions."""
        return self.hourly_wage + self.back_amount


@dataclass
class PayrollResult:
    """Result of one payroll computation."""

    records: list[PayrollRecord]
    today_total: int = 0
    business_date: date | None = None
