"""
Inventory Ledger

Authoritative stock per product and the only component allowed to move it.
Every method runs inside the caller's Session/transaction; the ledger never
commits.

Stock correctness relies on two layers:
- check_and_reserve() reads products under a row lock (SELECT ... FOR UPDATE)
- decrement() is a conditional UPDATE (stock >= qty); a zero row count means
  another checkout won the race and the caller must roll back

Author: TM3
Date: 2026-10-19
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable

from sqlalchemy.orm import Session

from storefront.core.exceptions import (
    InsufficientStockError,
    ProductNotFoundError,
    StockConflictError,
    ValidationError,
)
from storefront.domain.product import Product, StockLevel
from storefront.repositories.product_repository import ProductRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reservation:
    """Result of a successful stock check: the price snapshot for one line"""
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


class InventoryLedger:
    """Stock checks and movements for one transaction"""

    def __init__(self, session: Session):
        self.products = ProductRepository(session)
        self._locked: Dict[int, Product] = {}

    def lock_products(self, product_ids: Iterable[int]) -> Dict[int, Product]:
        """
        Lock every product a checkout touches, in id order

        Missing products are not an error here; check_and_reserve reports them.
        """
        locked = self.products.find_by_ids_for_update(product_ids)
        self._locked.update(locked)
        return locked

    def check_and_reserve(self, product_id: int, quantity: int) -> Reservation:
        """
        Verify stock for one line and snapshot its unit price

        Raises:
            ValidationError: quantity is not positive
            ProductNotFoundError: unknown product
            InsufficientStockError: stock < quantity
        """
        if quantity <= 0:
            raise ValidationError(
                f"Quantity for product {product_id} must be positive",
                product_id=product_id,
                quantity=quantity,
            )

        product = self._locked.get(product_id)
        if product is None:
            product = self.lock_products([product_id]).get(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)

        if product.stock < quantity:
            logger.warning(
                f"Insufficient stock for product {product_id}: requested {quantity}, available {product.stock}"
            )
            raise InsufficientStockError(
                product_id=product_id,
                requested=quantity,
                available=product.stock,
                product_name=product.name,
            )

        return Reservation(
            product_id=product.id,
            product_name=product.name,
            quantity=quantity,
            unit_price=product.price,
        )

    def decrement(self, product_id: int, quantity: int) -> None:
        """
        Lower stock with a conditional update

        Raises:
            StockConflictError: stock fell below quantity after validation
            ProductNotFoundError: product disappeared after validation
        """
        if self.products.decrement_if_available(product_id, quantity):
            return

        available = self.products.get_stock(product_id)
        if available is None:
            raise ProductNotFoundError(product_id)

        product = self._locked.get(product_id)
        logger.warning(
            f"Lost stock race on product {product_id}: requested {quantity}, available {available}"
        )
        raise StockConflictError(
            product_id=product_id,
            requested=quantity,
            available=available,
            product_name=product.name if product else None,
        )

    def restock(self, product_id: int, quantity: int) -> None:
        """Return units to stock (order cancellation policy)"""
        if quantity <= 0:
            raise ValidationError(
                f"Restock quantity for product {product_id} must be positive",
                product_id=product_id,
                quantity=quantity,
            )
        if not self.products.increment(product_id, quantity):
            raise ProductNotFoundError(product_id)

    def get_stock(self, product_id: int) -> StockLevel:
        """Read-only stock lookup"""
        product = self.products.find_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)

        return StockLevel(
            product_id=product.id,
            product_name=product.name,
            stock=product.stock,
            price=product.price,
        )
