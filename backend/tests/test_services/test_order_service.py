"""
Tests for OrderService (access control, status workflow, audit trail)

Author: TM3
Date: 2026-10-19
"""
import pytest

from storefront.core.exceptions import (
    AuthorizationError,
    InvalidStatusTransitionError,
    NotFoundError,
    OrderNotFoundError,
)
from storefront.domain.order_status import OrderStatus
from storefront.services.checkout_service import CheckoutService
from storefront.services.order_service import OrderService


@pytest.fixture
def orders(session_factory, seed):
    """Two orders for Alice and one for Bob"""
    with session_factory() as session:
        checkout = CheckoutService(session)
        return {
            "alice_1": checkout.create_order(seed.alice, [(seed.brew, 1)]).id,
            "alice_2": checkout.create_order(seed.alice, [(seed.bar, 2), (seed.brew, 1)]).id,
            "bob_1": checkout.create_order(seed.bob, [(seed.brew, 3)]).id,
        }


class TestOrderAccess:
    """Who can see which orders"""

    def test_customer_lists_only_own_orders(self, db_session, seed, orders):
        result, total = OrderService(db_session).list_orders(seed.alice)

        assert total == 2
        assert {order.id for order in result} == {orders["alice_1"], orders["alice_2"]}
        assert all(order.customer_id == seed.alice.id for order in result)

    def test_admin_lists_all_orders_newest_first(self, db_session, seed, orders):
        result, total = OrderService(db_session).list_orders(seed.admin)

        assert total == 3
        assert [order.id for order in result] == [orders["bob_1"], orders["alice_2"], orders["alice_1"]]

    def test_list_paginates(self, db_session, seed, orders):
        result, total = OrderService(db_session).list_orders(seed.admin, limit=1, offset=1)

        assert total == 3
        assert [order.id for order in result] == [orders["alice_2"]]

    def test_list_filters_by_status(self, db_session, seed, orders):
        service = OrderService(db_session)
        service.update_order_status(seed.admin, orders["alice_1"], OrderStatus.PAID)

        result, total = service.list_orders(seed.alice, status=OrderStatus.PAID)

        assert total == 1
        assert result[0].id == orders["alice_1"]

    def test_customer_reads_own_order(self, db_session, seed, orders):
        order = OrderService(db_session).get_order(seed.alice, orders["alice_2"])

        assert order.customer_id == seed.alice.id
        assert order.customer_name == "Alice"
        assert order.item_count == 2

    def test_foreign_order_is_forbidden_not_missing(self, db_session, seed, orders):
        """Reading another customer's order is 403, a missing id is 404"""
        service = OrderService(db_session)

        with pytest.raises(AuthorizationError) as forbidden:
            service.get_order(seed.alice, orders["bob_1"])
        with pytest.raises(OrderNotFoundError) as missing:
            service.get_order(seed.alice, 9999)

        assert not isinstance(forbidden.value, NotFoundError)
        assert forbidden.value.status_code == 403
        assert missing.value.status_code == 404

    def test_admin_reads_any_order(self, db_session, seed, orders):
        order = OrderService(db_session).get_order(seed.admin, orders["bob_1"])

        assert order.customer_id == seed.bob.id


class TestStatusUpdates:
    """Administrator status workflow"""

    def test_admin_updates_status_and_history_is_recorded(self, db_session, seed, orders):
        service = OrderService(db_session)

        service.update_order_status(seed.admin, orders["alice_1"], OrderStatus.PAID)
        order = service.update_order_status(seed.admin, orders["alice_1"], OrderStatus.SHIPPED)

        assert order.status == OrderStatus.SHIPPED
        history = service.get_order_history(seed.alice, orders["alice_1"])
        assert [(h.old_status, h.new_status) for h in history] == [
            (OrderStatus.PENDING, OrderStatus.PAID),
            (OrderStatus.PAID, OrderStatus.SHIPPED),
        ]
        assert all(h.changed_by_id == seed.admin.id for h in history)

    def test_customer_cannot_update_status(self, db_session, seed, orders):
        with pytest.raises(AuthorizationError):
            OrderService(db_session).update_order_status(seed.alice, orders["alice_1"], OrderStatus.PAID)

    def test_unknown_order(self, db_session, seed, orders):
        with pytest.raises(OrderNotFoundError):
            OrderService(db_session).update_order_status(seed.admin, 9999, OrderStatus.PAID)

    def test_same_status_is_a_noop(self, db_session, seed, orders):
        service = OrderService(db_session)

        order = service.update_order_status(seed.admin, orders["alice_1"], OrderStatus.PENDING)

        assert order.status == OrderStatus.PENDING
        assert service.get_order_history(seed.admin, orders["alice_1"]) == []

    def test_update_releases_the_write_lock(self, db_session, session_factory, seed, orders, stock_of):
        order = OrderService(db_session).update_order_status(seed.admin, orders["alice_1"], OrderStatus.PAID)

        assert order.status == OrderStatus.PAID
        assert not db_session.in_transaction()

        with session_factory() as session:
            CheckoutService(session).create_order(seed.bob, [(seed.brew, 1)])

        assert stock_of(seed.brew) == 14

    def test_permissive_mode_allows_any_jump(self, db_session, seed, orders):
        service = OrderService(db_session, strict_transitions=False)

        service.update_order_status(seed.admin, orders["alice_1"], OrderStatus.DELIVERED)
        order = service.update_order_status(seed.admin, orders["alice_1"], OrderStatus.PENDING)

        assert order.status == OrderStatus.PENDING

    def test_strict_mode_rejects_illegal_transition(self, db_session, seed, orders):
        service = OrderService(db_session, strict_transitions=True)

        with pytest.raises(InvalidStatusTransitionError) as exc_info:
            service.update_order_status(seed.admin, orders["alice_1"], OrderStatus.DELIVERED)

        assert exc_info.value.status_code == 409
        assert service.get_order(seed.admin, orders["alice_1"]).status == OrderStatus.PENDING
        assert service.get_order_history(seed.admin, orders["alice_1"]) == []

    def test_customer_cannot_read_foreign_history(self, db_session, seed, orders):
        with pytest.raises(AuthorizationError):
            OrderService(db_session).get_order_history(seed.bob, orders["alice_1"])


class TestCancellationStock:
    """Stock policy when an order is cancelled"""

    def test_cancel_keeps_stock_by_default(self, db_session, seed, orders, stock_of):
        OrderService(db_session, restock_on_cancel=False).update_order_status(
            seed.admin, orders["alice_2"], OrderStatus.CANCELLED
        )

        assert stock_of(seed.bar) == 1

    def test_cancel_restocks_when_enabled(self, db_session, seed, orders, stock_of):
        brew_before = stock_of(seed.brew)

        OrderService(db_session, restock_on_cancel=True).update_order_status(
            seed.admin, orders["alice_2"], OrderStatus.CANCELLED
        )

        assert stock_of(seed.bar) == 3
        assert stock_of(seed.brew) == brew_before + 1

    def test_leaving_cancelled_rejected_after_restock(self, db_session, seed, orders, stock_of):
        service = OrderService(db_session, restock_on_cancel=True)
        service.update_order_status(seed.admin, orders["alice_2"], OrderStatus.CANCELLED)

        with pytest.raises(InvalidStatusTransitionError):
            service.update_order_status(seed.admin, orders["alice_2"], OrderStatus.PENDING)

        assert stock_of(seed.bar) == 3
