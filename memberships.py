"""
memberships.py
Membership purchases and exact-decimal revenue / expense totals.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Callable, Iterable

from db import Database
from models import Membership
from utils import add_months, to_decimal


def _row_to_membership(row: sqlite3.Row) -> Membership:
    cost = row["cost"]
    end = row["end_date"]
    return Membership(
        id=row["id"],
        membership_type=row["membership_type"],
        description=row["description"],
        cost=Decimal(cost) if cost is not None else None,
        holder_id=row["holder_id"],
        start_date=date.fromisoformat(row["start_date"]),
        end_date=date.fromisoformat(end) if end else None,
    )


def sum_costs(memberships: Iterable[Membership]) -> Decimal:
    """Exact total; rows without a cost count as zero."""
    total = Decimal("0")
    for m in memberships:
        if m.cost is not None:
            total += m.cost
    return total


class MembershipStore:
    def __init__(self, database: Database):
        self.db = database

    def insert(self, membership: Membership) -> Membership:
        new_id = self.db.execute(
            """
            INSERT INTO memberships(membership_type, description, cost, holder_id, start_date, end_date)
            VALUES(?,?,?,?,?,?)
            """,
            (
                membership.membership_type,
                membership.description,
                str(membership.cost) if membership.cost is not None else None,
                membership.holder_id,
                membership.start_date.isoformat(),
                membership.end_date.isoformat() if membership.end_date else None,
            ),
        )
        return replace(membership, id=new_id)

    def by_holder(self, holder_id: int) -> list[Membership]:
        rows = self.db.fetch_all(
            "SELECT * FROM memberships WHERE holder_id = ? ORDER BY start_date DESC, id DESC",
            (holder_id,),
        )
        return [_row_to_membership(r) for r in rows]

    def all(self) -> list[Membership]:
        rows = self.db.fetch_all("SELECT * FROM memberships ORDER BY id ASC")
        return [_row_to_membership(r) for r in rows]


class MembershipService:
    def __init__(
        self,
        store: MembershipStore,
        today: Callable[[], date] = date.today,
        logger: logging.Logger | None = None,
    ):
        self.store = store
        self.today = today
        self.log = logger or logging.getLogger("gym_app.memberships")

    def purchase(
        self,
        holder_id: int,
        membership_type: str,
        description: str | None,
        cost: Decimal | str | int | float,
        duration_months: int | None = None,
    ) -> Membership:
        """
        Start today; end ``duration_months`` calendar months later (clamped to month end),
        or open-ended when no duration is given.
        """
        price = to_decimal(cost)
        if price < 0:
            raise ValueError("Membership cost must not be negative.")
        if duration_months is not None and duration_months < 0:
            raise ValueError("Membership duration must not be negative.")

        start = self.today()
        end = add_months(start, duration_months) if duration_months is not None else None

        created = self.store.insert(
            Membership(
                id=None,
                membership_type=membership_type,
                description=description,
                cost=price,
                holder_id=holder_id,
                start_date=start,
                end_date=end,
            )
        )
        self.log.info(
            "Membership purchased: holder=%s type=%s cost=%s", holder_id, membership_type, price
        )
        return created

    def list_by_holder(self, holder_id: int) -> list[Membership]:
        return self.store.by_holder(holder_id)

    def list_all(self) -> list[Membership]:
        return self.store.all()

    def total_revenue(self) -> Decimal:
        return sum_costs(self.store.all())

    def total_expenses(self, holder_id: int) -> Decimal:
        return sum_costs(self.store.by_holder(holder_id))
