"""
merch.py
Merchandise catalog: add items, list them, value the stock.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import replace
from decimal import Decimal

from db import Database
from models import MerchItem
from utils import to_decimal


def _row_to_item(row: sqlite3.Row) -> MerchItem:
    return MerchItem(
        id=row["id"],
        name=row["name"],
        item_type=row["item_type"],
        unit_price=Decimal(row["unit_price"]),
        quantity_in_stock=row["quantity_in_stock"],
    )


def _to_quantity(value) -> int:
    """Whole, non-negative stock count; 2.9 is an error, not 2."""
    if isinstance(value, bool):
        raise ValueError(f"Not a stock quantity: {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"Not a stock quantity: {value!r}")
        value = int(value)
    if not isinstance(value, int):
        raise ValueError(f"Not a stock quantity: {value!r}")
    if value < 0:
        raise ValueError("Stock quantity must not be negative.")
    return value


class MerchStore:
    def __init__(self, database: Database):
        self.db = database

    def insert(self, item: MerchItem) -> MerchItem:
        new_id = self.db.execute(
            "INSERT INTO merch_items(name, item_type, unit_price, quantity_in_stock) VALUES(?,?,?,?)",
            (item.name, item.item_type, str(item.unit_price), item.quantity_in_stock),
        )
        return replace(item, id=new_id)

    def all(self) -> list[MerchItem]:
        rows = self.db.fetch_all("SELECT * FROM merch_items ORDER BY id ASC")
        return [_row_to_item(r) for r in rows]


class MerchService:
    def __init__(self, store: MerchStore, logger: logging.Logger | None = None):
        self.store = store
        self.log = logger or logging.getLogger("gym_app.merch")

    def add(self, name: str, item_type: str, unit_price: Decimal | str | int | float, quantity: int) -> MerchItem:
        price = to_decimal(unit_price)
        if price < 0:
            raise ValueError("Unit price must not be negative.")
        count = _to_quantity(quantity)

        created = self.store.insert(
            MerchItem(
                id=None,
                name=name,
                item_type=item_type,
                unit_price=price,
                quantity_in_stock=count,
            )
        )
        self.log.info("Merch item added: %s, quantity=%s", name, quantity)
        return created

    def list_all(self) -> list[MerchItem]:
        return self.store.all()

    def total_stock_value(self) -> Decimal:
        total = Decimal("0")
        for item in self.store.all():
            total += item.stock_value
        return total
