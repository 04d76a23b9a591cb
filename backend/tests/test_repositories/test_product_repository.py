"""
Tests for ProductRepository

Author: TM3
Date: 2026-10-19
"""
from decimal import Decimal

from storefront.domain.product import Product
from storefront.repositories.product_repository import ProductRepository


class TestProductRepository:
    """Test ProductRepository methods"""

    def test_find_by_id_returns_product(self, db_session, seed):
        product = ProductRepository(db_session).find_by_id(seed.bar)

        assert isinstance(product, Product)
        assert product.name == "Keto Bar"
        assert product.category_name == "Snacks"
        assert product.inventory_value == Decimal("30.00")

    def test_find_by_ids_for_update_skips_missing(self, db_session, seed):
        found = ProductRepository(db_session).find_by_ids_for_update([seed.brew, 9999, seed.bar])

        assert sorted(found) == sorted([seed.bar, seed.brew])

    def test_conditional_decrement(self, db_session, seed):
        repo = ProductRepository(db_session)

        assert repo.decrement_if_available(seed.bar, 3) is True
        assert repo.decrement_if_available(seed.bar, 1) is False
        assert repo.get_stock(seed.bar) == 0

    def test_find_all_by_category(self, db_session, seed):
        products = ProductRepository(db_session).find_all(category_id=seed.snacks)

        assert [p.id for p in products] == [seed.bar, seed.granola]
