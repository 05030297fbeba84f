"""Profile, salary system and attendance models."""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cast_payroll.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from cast_payroll.models.store import Store


class Profile(Base, TimestampMixin):
    """A member of a store: cast, staff, admin or guest."""

    __tablename__ = "profiles"

    profile_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    store_id: Mapped[UUID] = mapped_column(
        ForeignKey("stores.store_id", ondelete="CASCADE"), nullable=False
    )
    display_name: Mapped[str | None] = mapped_column(String, nullable=True)
    role: Mapped[str] = mapped_column(String, nullable=False, default="cast")

    __table_args__ = (
        CheckConstraint(
            "role IN ('cast', 'staff', 'admin', 'guest')",
            name="profiles_role_check",
        ),
    )

    # Relationships
    store: Mapped[Store] = relationship(back_populates="profiles")
    salary_systems: Mapped[list[ProfileSalarySystem]] = relationship(
        back_populates="profile"
    )
    time_cards: Mapped[list[TimeCard]] = relationship(back_populates="profile")


class SalarySystem(Base, TimestampMixin):
    """Salary system: hourly wage, per-category back settings and deductions.

    Settings are stored as raw JSON and normalized when loaded:
        hourly_settings: {"amount", "time_unit_minutes", "time_rounding_type"}
        *_back_settings: {"calculation_type", "fixed_amount", "percentage",
                          "rounding_type", "rounding_unit"}
        deductions: [{"name", "type": "fixed" | "percent", "amount"}]
    """

    __tablename__ = "salary_systems"

    salary_system_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    store_id: Mapped[UUID] = mapped_column(
        ForeignKey("stores.store_id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str | None] = mapped_column(String, nullable=True)
    target_type: Mapped[str | None] = mapped_column(String, nullable=True)
    hourly_settings: Mapped[dict[str, Any] | None] = mapped_column(nullable=True)
    store_back_settings: Mapped[dict[str, Any] | None] = mapped_column(nullable=True)
    jounai_back_settings: Mapped[dict[str, Any] | None] = mapped_column(nullable=True)
    shimei_back_settings: Mapped[dict[str, Any] | None] = mapped_column(nullable=True)
    douhan_back_settings: Mapped[dict[str, Any] | None] = mapped_column(nullable=True)
    deductions: Mapped[list[dict[str, Any]] | None] = mapped_column(nullable=True)


class ProfileSalarySystem(Base, TimestampMixin):
    """Assignment of a salary system to a profile."""

    __tablename__ = "profile_salary_systems"

    profile_id: Mapped[UUID] = mapped_column(
        ForeignKey("profiles.profile_id", ondelete="CASCADE"), primary_key=True
    )
    salary_system_id: Mapped[UUID] = mapped_column(
        ForeignKey("salary_systems.salary_system_id", ondelete="CASCADE"), primary_key=True
    )

    profile: Mapped[Profile] = relationship(back_populates="salary_systems")
    salary_system: Mapped[SalarySystem] = relationship()


class TimeCard(Base, TimestampMixin):
    """One clock-in/clock-out pair."""

    __tablename__ = "time_cards"

    time_card_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    profile_id: Mapped[UUID] = mapped_column(
        ForeignKey("profiles.profile_id", ondelete="CASCADE"), nullable=False
    )
    work_date: Mapped[date] = mapped_column(Date, nullable=False)
    clock_in: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    clock_out: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("profile_id", "clock_in", name="time_cards_profile_clock_in_unique"),
    )

    profile: Mapped[Profile] = relationship(back_populates="time_cards")
