"""
Tests for InventoryLedger

Author: TM3
Date: 2026-10-19
"""
from decimal import Decimal

import pytest

from storefront.core.exceptions import (
    InsufficientStockError,
    ProductNotFoundError,
    StockConflictError,
    ValidationError,
)
from storefront.services.inventory_ledger import InventoryLedger


class TestInventoryLedger:
    """Stock checks and movements"""

    def test_check_and_reserve_snapshots_price(self, db_session, seed):
        ledger = InventoryLedger(db_session)

        reservation = ledger.check_and_reserve(seed.brew, 3)

        assert reservation.product_name == "Cold Brew"
        assert reservation.unit_price == Decimal("7.25")
        assert reservation.subtotal == Decimal("21.75")

    def test_check_does_not_move_stock(self, db_session, seed):
        ledger = InventoryLedger(db_session)

        ledger.check_and_reserve(seed.bar, 3)

        assert ledger.get_stock(seed.bar).stock == 3

    def test_check_rejects_excess_quantity(self, db_session, seed):
        with pytest.raises(InsufficientStockError) as exc_info:
            InventoryLedger(db_session).check_and_reserve(seed.bar, 4)

        assert exc_info.value.to_dict() == {
            "code": "insufficient_stock",
            "message": "Insufficient stock for Keto Bar: requested 4, available 3",
            "product_id": seed.bar,
            "product_name": "Keto Bar",
            "requested": 4,
            "available": 3,
        }

    def test_check_unknown_product(self, db_session, seed):
        with pytest.raises(ProductNotFoundError):
            InventoryLedger(db_session).check_and_reserve(9999, 1)

    def test_check_rejects_non_positive_quantity(self, db_session, seed):
        with pytest.raises(ValidationError):
            InventoryLedger(db_session).check_and_reserve(seed.bar, 0)

    def test_decrement_and_restock(self, db_session, seed):
        ledger = InventoryLedger(db_session)

        ledger.decrement(seed.bar, 2)
        assert ledger.get_stock(seed.bar).stock == 1

        ledger.restock(seed.bar, 5)
        assert ledger.get_stock(seed.bar).stock == 6

    def test_decrement_never_goes_negative(self, db_session, seed):
        ledger = InventoryLedger(db_session)

        with pytest.raises(StockConflictError) as exc_info:
            ledger.decrement(seed.granola, 2)

        assert exc_info.value.available == 1
        assert ledger.get_stock(seed.granola).stock == 1

    def test_decrement_unknown_product(self, db_session, seed):
        with pytest.raises(ProductNotFoundError):
            InventoryLedger(db_session).decrement(9999, 1)

    def test_restock_unknown_product(self, db_session, seed):
        with pytest.raises(ProductNotFoundError):
            InventoryLedger(db_session).restock(9999, 1)

    def test_get_stock(self, db_session, seed):
        level = InventoryLedger(db_session).get_stock(seed.brew)

        assert level.to_dict() == {
            "product_id": seed.brew,
            "product_name": "Cold Brew",
            "stock": 20,
            "price": 7.25,
        }

    def test_get_stock_unknown_product(self, db_session, seed):
        with pytest.raises(ProductNotFoundError):
            InventoryLedger(db_session).get_stock(9999)
