"""Store, floor and point-of-sale models."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cast_payroll.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from cast_payroll.models.staff import Profile


class Store(Base, TimestampMixin):
    """A store; owns its business-day switch time."""

    __tablename__ = "stores"

    store_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String, nullable=False)
    # "HH:MM" or "HH:MM:SS"; hours before it belong to the previous business day
    day_switch_time: Mapped[str | None] = mapped_column(String, nullable=True, default="05:00")

    # Relationships
    profiles: Mapped[list[Profile]] = relationship(back_populates="store")
    tables: Mapped[list[StoreTable]] = relationship(back_populates="store")


class StoreTable(Base, TimestampMixin):
    """A physical table on the floor."""

    __tablename__ = "tables"

    table_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    store_id: Mapped[UUID] = mapped_column(
        ForeignKey("stores.store_id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str | None] = mapped_column(String, nullable=True)

    store: Mapped[Store] = relationship(back_populates="tables")


class TableSession(Base, TimestampMixin):
    """A seating at a table; groups order lines."""

    __tablename__ = "table_sessions"

    table_session_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    store_id: Mapped[UUID] = mapped_column(
        ForeignKey("stores.store_id", ondelete="CASCADE"), nullable=False
    )
    table_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("tables.table_id", ondelete="SET NULL"), nullable=True
    )
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    table: Mapped[StoreTable | None] = relationship()
    orders: Mapped[list[Order]] = relationship(back_populates="table_session")


class MenuCategory(Base, TimestampMixin):
    """Menu category; its name decides the fee category of its menus."""

    __tablename__ = "menu_categories"

    menu_category_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    store_id: Mapped[UUID] = mapped_column(
        ForeignKey("stores.store_id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String, nullable=False)


class Menu(Base, TimestampMixin):
    """A menu item with its intrinsic per-unit cast back."""

    __tablename__ = "menus"

    menu_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    store_id: Mapped[UUID] = mapped_column(
        ForeignKey("stores.store_id", ondelete="CASCADE"), nullable=False
    )
    category_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("menu_categories.menu_category_id", ondelete="SET NULL"), nullable=True
    )
    name: Mapped[str | None] = mapped_column(String, nullable=True)
    price: Mapped[int | None] = mapped_column(Integer, nullable=True)
    cast_back_amount: Mapped[int | None] = mapped_column(Integer, nullable=True)

    category: Mapped[MenuCategory | None] = relationship()


class Order(Base, TimestampMixin):
    """An order line; manual lines carry ``item_name`` instead of a menu."""

    __tablename__ = "orders"

    order_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    table_session_id: Mapped[UUID] = mapped_column(
        ForeignKey("table_sessions.table_session_id", ondelete="CASCADE"), nullable=False
    )
    cast_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("profiles.profile_id", ondelete="SET NULL"), nullable=True
    )
    guest_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("profiles.profile_id", ondelete="SET NULL"), nullable=True
    )
    menu_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("menus.menu_id", ondelete="SET NULL"), nullable=True
    )
    item_name: Mapped[str | None] = mapped_column(String, nullable=True)
    quantity: Mapped[int | None] = mapped_column(Integer, nullable=True, default=1)
    amount: Mapped[int | None] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        CheckConstraint("quantity IS NULL OR quantity >= 0", name="orders_quantity_check"),
    )

    table_session: Mapped[TableSession] = relationship(back_populates="orders")
