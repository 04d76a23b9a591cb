"""
Checkout Service (Order Transaction Coordinator)

Turns a cart into a persisted order, all or nothing:

1. Validate the cart (non-empty, positive quantities) and merge duplicate
   product entries
2. Return the existing order when the idempotency key was already used
3. Lock the products, check stock and snapshot prices through the ledger
4. Insert the order (PENDING) and its lines, then decrement stock with the
   ledger's conditional update
5. Commit; any failure rolls back the order rows and every decrement

Self-checkout and administrator checkout share _checkout().

Author: TM3
Date: 2026-10-19
"""
import logging
from decimal import Decimal
from typing import Iterable, List, Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.core.config import settings
from storefront.core.database import begin_write
from storefront.core.exceptions import (
    AuthorizationError,
    ConflictError,
    CustomerNotFoundError,
    EmptyCartError,
    ValidationError,
)
from storefront.domain.order import CartItem, Order, SalesChannel
from storefront.domain.user import Identity, UserRole
from storefront.repositories.order_repository import OrderRepository
from storefront.repositories.user_repository import UserRepository
from storefront.services.inventory_ledger import InventoryLedger

logger = logging.getLogger(__name__)

CartInput = Union[CartItem, dict, tuple]

# Matches orders.idempotency_key
IDEMPOTENCY_KEY_MAX_LENGTH = 100


def _to_cart_item(item: CartInput) -> CartItem:
    if isinstance(item, CartItem):
        return item
    if isinstance(item, dict):
        return CartItem(**item)
    product_id, quantity = item
    return CartItem(product_id=product_id, quantity=quantity)


def merge_cart_items(items: Optional[Iterable[CartInput]]) -> List[CartItem]:
    """
    Validate a cart and merge repeated product ids

    Quantities of repeated entries are summed; the merged list keeps the
    order in which each product first appeared.

    Raises:
        EmptyCartError: no items
        ValidationError: a quantity is zero or negative
    """
    cart = [_to_cart_item(item) for item in (items or [])]
    if not cart:
        raise EmptyCartError()

    merged = {}
    for item in cart:
        if item.quantity <= 0:
            raise ValidationError(
                f"Quantity for product {item.product_id} must be positive",
                product_id=item.product_id,
                quantity=item.quantity,
            )
        merged[item.product_id] = merged.get(item.product_id, 0) + item.quantity

    return [CartItem(product_id=pid, quantity=qty) for pid, qty in merged.items()]


class CheckoutService:
    """Order Transaction Coordinator"""

    def __init__(self, session: Session, default_channel: Optional[str] = None):
        self.session = session
        self.orders = OrderRepository(session)
        self.users = UserRepository(session)
        self.default_channel = SalesChannel(default_channel or settings.DEFAULT_SALES_CHANNEL)

    def create_order(
        self,
        actor: Identity,
        items: Iterable[CartInput],
        channel: Optional[SalesChannel] = None,
        idempotency_key: Optional[str] = None,
    ) -> Order:
        """
        Self-checkout: the acting customer owns the order

        Raises:
            AuthorizationError: actor is an administrator (admins never own orders)
        """
        if actor.is_admin:
            raise AuthorizationError(
                "Administrators cannot own orders; use the on-behalf checkout",
                user_id=actor.id,
            )

        return self._checkout(
            actor=actor,
            customer_id=actor.id,
            items=items,
            channel=channel or self.default_channel,
            idempotency_key=idempotency_key,
        )

    def create_order_for_customer(
        self,
        actor: Identity,
        customer_id: int,
        items: Iterable[CartInput],
        channel: Optional[SalesChannel] = None,
        idempotency_key: Optional[str] = None,
    ) -> Order:
        """
        Administrator checkout on behalf of a customer

        Orders placed by staff default to the seller channel.

        Raises:
            AuthorizationError: actor is not an administrator
        """
        if not actor.is_admin:
            raise AuthorizationError(
                "Only administrators can place orders for other customers",
                user_id=actor.id,
            )

        return self._checkout(
            actor=actor,
            customer_id=customer_id,
            items=items,
            channel=channel or SalesChannel.SELLER,
            idempotency_key=idempotency_key,
        )

    def _checkout(
        self,
        actor: Identity,
        customer_id: int,
        items: Iterable[CartInput],
        channel: SalesChannel,
        idempotency_key: Optional[str],
    ) -> Order:
        # Pure validation first: nothing touches the database for a bad cart
        cart = merge_cart_items(items)
        idempotency_key = (idempotency_key or "").strip() or None
        if idempotency_key and len(idempotency_key) > IDEMPOTENCY_KEY_MAX_LENGTH:
            raise ValidationError(
                f"Idempotency key must be at most {IDEMPOTENCY_KEY_MAX_LENGTH} characters",
                length=len(idempotency_key),
            )

        try:
            begin_write(self.session)

            customer = self.users.find_by_id(customer_id)
            if customer is None:
                raise CustomerNotFoundError(customer_id)
            if customer.role != UserRole.CUSTOMER:
                raise ValidationError(
                    f"User {customer_id} is not a customer and cannot own orders",
                    customer_id=customer_id,
                )

            if idempotency_key:
                existing = self.orders.find_by_idempotency_key(customer_id, idempotency_key)
                if existing:
                    logger.info(
                        f"Checkout replay for customer {customer_id} (key {idempotency_key}): returning order {existing.id}"
                    )
                    self.session.rollback()
                    return existing

            ledger = InventoryLedger(self.session)
            ledger.lock_products(item.product_id for item in cart)
            reservations = [ledger.check_and_reserve(item.product_id, item.quantity) for item in cart]

            total = sum((r.subtotal for r in reservations), Decimal("0.00"))

            order_id = self.orders.create(
                customer_id=customer_id,
                placed_by_id=actor.id,
                channel=channel.value,
                total=total,
                idempotency_key=idempotency_key,
                lines=[
                    {
                        "product_id": r.product_id,
                        "product_name": r.product_name,
                        "quantity": r.quantity,
                        "unit_price": r.unit_price,
                        "subtotal": r.subtotal,
                    }
                    for r in reservations
                ],
            )

            for r in reservations:
                ledger.decrement(r.product_id, r.quantity)

            self.session.commit()

        except IntegrityError as e:
            self.session.rollback()
            if idempotency_key:
                # A concurrent request with the same key committed first
                existing = self.orders.find_by_idempotency_key(customer_id, idempotency_key)
                if existing:
                    self.session.rollback()
                    return existing
            logger.error(f"Checkout integrity error for customer {customer_id}: {e}")
            raise ConflictError("Order could not be stored", customer_id=customer_id)
        except Exception:
            self.session.rollback()
            raise

        order = self.orders.find_by_id(order_id)
        self.session.rollback()

        logger.info(
            f"Order {order_id} accepted for customer {customer_id} "
            f"(placed by {actor.id}, channel {channel.value}, {len(cart)} lines, total {total})"
        )
        return order
