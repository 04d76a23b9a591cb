"""
Order Service

Read access to orders and the administrator status workflow.

Access rules:
- Customers list and read only their own orders
- Administrators list and read every order
- Reading someone else's order is an AuthorizationError (403), never a
  NotFoundError, so the two stay distinguishable

Author: TM3
Date: 2026-10-19
"""
import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from storefront.core.config import settings
from storefront.core.database import begin_write
from storefront.core.exceptions import (
    AuthorizationError,
    InvalidStatusTransitionError,
    OrderNotFoundError,
)
from storefront.domain.order import Order, OrderStatusChange
from storefront.domain.order_status import OrderStatus, can_transition
from storefront.domain.user import Identity
from storefront.repositories.order_repository import OrderRepository
from storefront.services.inventory_ledger import InventoryLedger

logger = logging.getLogger(__name__)


class OrderService:
    """Order queries and status updates"""

    def __init__(
        self,
        session: Session,
        strict_transitions: Optional[bool] = None,
        restock_on_cancel: Optional[bool] = None,
    ):
        self.session = session
        self.orders = OrderRepository(session)
        self.strict_transitions = (
            settings.STRICT_STATUS_TRANSITIONS if strict_transitions is None else strict_transitions
        )
        self.restock_on_cancel = (
            settings.RESTOCK_ON_CANCEL if restock_on_cancel is None else restock_on_cancel
        )

    def list_orders(
        self,
        actor: Identity,
        status: Optional[OrderStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[Order], int]:
        """Orders visible to the actor, newest first, plus the unpaged count"""
        customer_id = None if actor.is_admin else actor.id
        return self.orders.find_all(
            customer_id=customer_id,
            status=status,
            limit=limit,
            offset=offset,
        )

    def get_order(self, actor: Identity, order_id: int) -> Order:
        """
        Raises:
            OrderNotFoundError: no such order
            AuthorizationError: order belongs to another customer
        """
        order = self.orders.find_by_id(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)

        self._check_access(actor, order.customer_id, order_id)
        return order

    def get_order_history(self, actor: Identity, order_id: int) -> List[OrderStatusChange]:
        """Status audit trail of an order, oldest first"""
        self.get_order(actor, order_id)
        return self.orders.find_status_history(order_id)

    def update_order_status(self, actor: Identity, order_id: int, new_status: OrderStatus) -> Order:
        """
        Move an order to a new status (administrators only)

        Setting the current status again changes nothing and records nothing.

        Raises:
            AuthorizationError: actor is not an administrator
            OrderNotFoundError: no such order
            InvalidStatusTransitionError: transition rejected (strict mode, or
                leaving CANCELLED after stock was returned)
        """
        if not actor.is_admin:
            raise AuthorizationError(
                "Only administrators can change order status",
                user_id=actor.id,
                order_id=order_id,
            )

        new_status = OrderStatus(new_status)

        try:
            begin_write(self.session)

            current = self.orders.get_status_for_update(order_id)
            if current is None:
                raise OrderNotFoundError(order_id)

            if current == new_status:
                order = self.orders.find_by_id(order_id)
                self.session.rollback()
                return order

            if not can_transition(current, new_status, strict=self.strict_transitions):
                raise InvalidStatusTransitionError(order_id, current.value, new_status.value)

            if self.restock_on_cancel and current == OrderStatus.CANCELLED:
                # Stock for this order was already returned
                raise InvalidStatusTransitionError(order_id, current.value, new_status.value)

            if self.restock_on_cancel and new_status == OrderStatus.CANCELLED:
                ledger = InventoryLedger(self.session)
                for item in self.orders.find_items(order_id):
                    ledger.restock(item.product_id, item.quantity)

            self.orders.update_status(order_id, current, new_status, changed_by_id=actor.id)
            self.session.commit()

        except Exception:
            self.session.rollback()
            raise

        order = self.orders.find_by_id(order_id)
        self.session.rollback()

        logger.info(f"Order {order_id} status {current.value} -> {new_status.value} by user {actor.id}")
        return order

    @staticmethod
    def _check_access(actor: Identity, owner_id: int, order_id: int) -> None:
        if actor.is_admin or actor.id == owner_id:
            return
        raise AuthorizationError(
            f"Order {order_id} belongs to another customer",
            order_id=order_id,
            user_id=actor.id,
        )
