"""
Tests for OrderRepository

Author: TM3
Date: 2026-10-19
"""
from datetime import date, datetime
from decimal import Decimal

from storefront.domain.order import Order
from storefront.domain.order_status import OrderStatus
from storefront.repositories.order_repository import OrderRepository


def _create(repo, seed, total="7.25", product_id=None, quantity=1):
    return repo.create(
        customer_id=seed.alice.id,
        placed_by_id=seed.alice.id,
        channel="storefront",
        total=Decimal(total),
        lines=[{
            "product_id": product_id or seed.brew,
            "product_name": "Cold Brew",
            "quantity": quantity,
            "unit_price": Decimal("7.25"),
            "subtotal": Decimal(total),
        }],
    )


class TestOrderRepository:
    """Test OrderRepository methods"""

    def test_create_and_find_by_id(self, db_session, seed):
        # Arrange
        repo = OrderRepository(db_session)

        # Act
        order_id = _create(repo, seed)
        db_session.commit()
        order = repo.find_by_id(order_id)

        # Assert
        assert isinstance(order, Order)
        assert order.status == OrderStatus.PENDING
        assert order.customer_name == "Alice"
        assert order.items[0].product_name == "Cold Brew"

    def test_find_by_id_returns_none_when_not_found(self, db_session, seed):
        assert OrderRepository(db_session).find_by_id(9999) is None

    def test_create_without_commit_is_rolled_back(self, db_session, seed):
        repo = OrderRepository(db_session)

        _create(repo, seed)
        db_session.rollback()

        orders, total = repo.find_all()
        assert total == 0
        assert orders == []

    def test_update_status_appends_audit_row(self, db_session, seed):
        repo = OrderRepository(db_session)
        order_id = _create(repo, seed)

        current = repo.get_status_for_update(order_id)
        repo.update_status(order_id, current, OrderStatus.PAID, changed_by_id=seed.admin.id)
        db_session.commit()

        assert repo.find_by_id(order_id).status == OrderStatus.PAID
        history = repo.find_status_history(order_id)
        assert len(history) == 1
        assert history[0].old_status == OrderStatus.PENDING

    def test_sales_lines_exclude_cancelled_and_respect_dates(self, db_session, seed):
        repo = OrderRepository(db_session)
        kept = _create(repo, seed)
        cancelled = _create(repo, seed)
        repo.update_status(cancelled, OrderStatus.PENDING, OrderStatus.CANCELLED, changed_by_id=seed.admin.id)
        db_session.commit()

        lines = repo.find_sales_lines()
        assert [line["order_id"] for line in lines] == [kept]
        assert lines[0]["category_id"] == seed.drinks

        created = lines[0]["created_at"]
        assert isinstance(created, datetime)
        assert repo.find_sales_lines(start_date=created.date(), end_date=created.date())
        assert repo.find_sales_lines(end_date=date(2000, 1, 1)) == []
        assert [line["order_id"] for line in repo.find_sales_lines(end_date=date.max)] == [kept]
