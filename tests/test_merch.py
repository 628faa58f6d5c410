"""
Tests for merch.py (catalog add / list / stock value).
"""

from decimal import Decimal

import pytest

from errors import IntegrityViolation


class TestMerchService:
    def test_add_and_list_in_id_order(self, merch):
        bottle = merch.add("Water bottle", "Gear", "12.50", 4)
        bar = merch.add("Protein bar", "Food", Decimal("2.75"), 10)
        assert bottle.id < bar.id
        assert merch.list_all() == [bottle, bar]
        assert merch.list_all()[0].unit_price == Decimal("12.50")

    def test_stock_value_empty(self, merch):
        assert merch.total_stock_value() == Decimal("0")

    def test_stock_value_is_exact(self, merch):
        merch.add("Water bottle", "Gear", "12.50", 4)
        merch.add("Protein bar", "Food", "2.75", 10)
        merch.add("Gel", "Food", "0.10", 3)
        assert merch.total_stock_value() == Decimal("77.80")

    def test_out_of_stock_item_adds_nothing(self, merch):
        merch.add("Towel", "Gear", "9.99", 0)
        assert merch.total_stock_value() == Decimal("0")

    def test_bad_price_rejected(self, merch):
        with pytest.raises(ValueError):
            merch.add("Towel", "Gear", "cheap", 1)
        assert merch.list_all() == []

    @pytest.mark.parametrize(
        "price, quantity",
        [("-5.00", 3), ("5.00", -3), ("-5.00", -3), ("1.00", 2.9), ("1.00", "4"), ("1.00", True)],
    )
    def test_invalid_price_or_quantity_rejected(self, merch, price, quantity):
        """Negative prices, negative or fractional counts never reach the store."""
        with pytest.raises(ValueError):
            merch.add("Refund", "Gear", price, quantity)
        assert merch.list_all() == []
        assert merch.total_stock_value() == Decimal("0")

    def test_whole_float_quantity_accepted(self, merch):
        assert merch.add("Towel", "Gear", "9.99", 3.0).quantity_in_stock == 3

    @pytest.mark.parametrize("price, quantity", [("-5.00", 3), ("5.00", -3)])
    def test_store_rejects_negative_values(self, database, price, quantity):
        with pytest.raises(IntegrityViolation):
            database.execute(
                "INSERT INTO merch_items(name, item_type, unit_price, quantity_in_stock) VALUES(?,?,?,?)",
                ("Refund", "Gear", price, quantity),
            )
