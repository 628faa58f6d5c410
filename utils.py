"""
utils.py
Dates, money parsing/formatting, CSV exports, revenue summary, sample data.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import asdict
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Iterable

import pandas as pd

from errors import DuplicateUsername
from models import Identity, Membership, MerchItem, Role, WorkoutClass

CENT = Decimal("0.01")


def add_months(start: date, months: int) -> date:
    """
    Add months while keeping day in valid range (e.g., Jan 31 + 1 month => Feb 28/29).
    """
    y = start.year + (start.month - 1 + months) // 12
    m = (start.month - 1 + months) % 12 + 1
    # last day of target month
    if m == 12:
        next_month = date(y + 1, 1, 1)
    else:
        next_month = date(y, m + 1, 1)
    last_day = next_month - timedelta(days=1)
    day = min(start.day, last_day.day)
    return date(y, m, day)


def to_decimal(value) -> Decimal:
    """
    Parse user/caller input into an exact Decimal.
    Floats go through str() so 49.99 stays 49.99.
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool) or value is None:
        raise ValueError(f"Not a monetary amount: {value!r}")
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError(f"Not a monetary amount: {value!r}") from None
    if not result.is_finite():
        raise ValueError(f"Not a monetary amount: {value!r}")
    return result


def format_money(amount: Decimal | None) -> str:
    if amount is None:
        return "-"
    return f"{amount.quantize(CENT):,}"


def combine_schedule(day: date, time_of_day) -> datetime:
    return datetime.combine(day, time_of_day).replace(second=0, microsecond=0)


# ---------- Reports ----------

def _frame(records: list[dict], columns: list[str]) -> pd.DataFrame:
    if not records:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame(records, columns=columns)


def users_frame(users: Iterable[Identity]) -> pd.DataFrame:
    records = [{**asdict(u), "role": u.role.value} for u in users]
    return _frame(records, ["id", "username", "email", "phone", "address", "role"])


def classes_frame(classes: Iterable[WorkoutClass]) -> pd.DataFrame:
    records = [
        {**asdict(c), "scheduled_at": c.scheduled_at.isoformat(sep=" ", timespec="minutes")}
        for c in classes
    ]
    return _frame(records, ["id", "class_type", "description", "owner_id", "scheduled_at", "capacity"])


def memberships_frame(memberships: Iterable[Membership]) -> pd.DataFrame:
    records = [
        {
            **asdict(m),
            "cost": str(m.cost) if m.cost is not None else None,
            "start_date": m.start_date.isoformat(),
            "end_date": m.end_date.isoformat() if m.end_date else None,
        }
        for m in memberships
    ]
    return _frame(
        records,
        ["id", "membership_type", "description", "cost", "holder_id", "start_date", "end_date"],
    )


def merch_frame(items: Iterable[MerchItem]) -> pd.DataFrame:
    records = [{**asdict(i), "unit_price": str(i.unit_price)} for i in items]
    return _frame(records, ["id", "name", "item_type", "unit_price", "quantity_in_stock"])


def users_to_csv_bytes(users) -> bytes:
    return users_frame(users).to_csv(index=False).encode("utf-8")


def classes_to_csv_bytes(classes) -> bytes:
    return classes_frame(classes).to_csv(index=False).encode("utf-8")


def memberships_to_csv_bytes(memberships) -> bytes:
    return memberships_frame(memberships).to_csv(index=False).encode("utf-8")


def merch_to_csv_bytes(items) -> bytes:
    return merch_frame(items).to_csv(index=False).encode("utf-8")


def revenue_summary_by_month(memberships: Iterable[Membership]) -> pd.DataFrame:
    """Revenue per start month (YYYY-MM), newest first. Summed as Decimal, not float."""
    totals: dict[str, Decimal] = defaultdict(Decimal)
    for m in memberships:
        totals[m.start_date.strftime("%Y-%m")] += m.cost if m.cost is not None else Decimal("0")
    if not totals:
        return pd.DataFrame(columns=["month", "revenue"])
    records = [{"month": k, "revenue": totals[k]} for k in sorted(totals, reverse=True)]
    return pd.DataFrame(records, columns=["month", "revenue"])


# ---------- Sample data ----------

SAMPLE_PASSWORD = "changeme123"


def _sample_user(auth, username: str, role: Role, email: str, phone: str) -> Identity:
    try:
        return auth.register(username, SAMPLE_PASSWORD, email, phone, "1 Main Street", role)
    except DuplicateUsername:
        return auth.directory.find_by_username(username)


def insert_sample_data(auth, workouts, memberships, merch) -> dict:
    """
    Insert a demo trainer + member (password: changeme123), a few classes,
    memberships and merch items. Existing demo users are reused; other rows
    are added on every run.
    """
    trainer = _sample_user(auth, "demo_trainer", Role.TRAINER, "trainer@example.com", "01000000001")
    member = _sample_user(auth, "demo_member", Role.MEMBER, "member@example.com", "01000000002")

    start = datetime.combine(date.today() + timedelta(days=1), datetime.min.time()).replace(hour=9)
    classes = [
        workouts.create(trainer.id, "Yoga", "Morning flow", start, 15),
        workouts.create(trainer.id, "HIIT", "Intervals, bring water", start + timedelta(days=1), 10),
        workouts.create(trainer.id, "Spin", None, start + timedelta(days=2, hours=9), 20),
    ]

    bought = [
        memberships.purchase(member.id, "Monthly", "Standard access", Decimal("49.99"), 1),
        memberships.purchase(trainer.id, "Annual", "Staff rate", Decimal("300.00"), 12),
    ]

    items = [
        merch.add("Water bottle", "Gear", Decimal("12.50"), 40),
        merch.add("Protein bar", "Food", Decimal("2.75"), 120),
        merch.add("Electrolyte drink", "Drink", Decimal("3.20"), 60),
    ]

    return {"users": [trainer, member], "classes": classes, "memberships": bought, "merch": items}
