"""
models.py
Domain records (frozen dataclasses) and membership plans.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

# Plan durations in months (used for end_date auto-calculation)
PLAN_MONTHS = {
    "1 month": 1,
    "3 months": 3,
    "6 months": 6,
    "12 months": 12,
}


class Role(str, Enum):
    ADMIN = "admin"
    TRAINER = "trainer"
    MEMBER = "member"

    @property
    def label(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True)
class Identity:
    # Never carries the password hash.
    id: int | None
    username: str
    email: str | None
    phone: str | None
    address: str | None
    role: Role


@dataclass(frozen=True)
class WorkoutClass:
    id: int | None
    class_type: str
    description: str | None
    owner_id: int  # trainer identity id
    scheduled_at: datetime
    capacity: int


@dataclass(frozen=True)
class Membership:
    id: int | None
    membership_type: str
    description: str | None
    cost: Decimal | None  # legacy rows may have no cost
    holder_id: int
    start_date: date
    end_date: date | None


@dataclass(frozen=True)
class MerchItem:
    id: int | None
    name: str
    item_type: str
    unit_price: Decimal
    quantity_in_stock: int

    @property
    def stock_value(self) -> Decimal:
        return self.unit_price * self.quantity_in_stock
