"""ORM models for the payroll source data."""

from cast_payroll.models.base import Base, TimestampMixin
from cast_payroll.models.staff import Profile, ProfileSalarySystem, SalarySystem, TimeCard
from cast_payroll.models.store import (
    Menu,
    MenuCategory,
    Order,
    Store,
    StoreTable,
    TableSession,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "Menu",
    "MenuCategory",
    "Order",
    "Profile",
    "ProfileSalarySystem",
    "SalarySystem",
    "Store",
    "StoreTable",
    "TableSession",
    "TimeCard",
]
