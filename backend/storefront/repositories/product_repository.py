"""
Product Repository - Data Access Layer for Products

Handles all database queries for products and returns Product domain models.
Stock-moving statements live here so the inventory ledger never hand-writes
SQL; only the ledger is expected to call them.

Author: TM3
Date: 2026-10-19
"""
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session, joinedload

from storefront.core.clock import utcnow
from storefront.domain.product import Product
from storefront.models.catalog import Product as ProductRow


class ProductRepository:
    """
    Repository for Product data access

    Works on the caller's Session so reads and stock updates take part in
    the caller's transaction.
    """

    def __init__(self, session: Session):
        self.session = session

    @staticmethod
    def _map_row_to_product(row: ProductRow) -> Product:
        """Map ORM row to Product domain model"""
        return Product(
            id=row.id,
            name=row.name,
            description=row.description,
            price=row.price,
            stock=row.stock,
            min_stock=row.min_stock,
            category_id=row.category_id,
            category_name=row.category.name if row.category else None,
            is_active=row.is_active if row.is_active is not None else True,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def find_by_id(self, product_id: int) -> Optional[Product]:
        """
        Find product by ID

        Returns:
            Product or None if not found
        """
        row = self.session.execute(
            select(ProductRow)
            .options(joinedload(ProductRow.category))
            .where(ProductRow.id == product_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

        return self._map_row_to_product(row) if row else None

    def find_by_ids_for_update(self, product_ids: Iterable[int]) -> Dict[int, Product]:
        """
        Load products and lock their rows until the transaction ends

        Rows are locked in id order so two checkouts touching the same
        products cannot deadlock. SQLite ignores FOR UPDATE and serializes
        the whole transaction instead (see core.database.build_engine).

        Returns:
            Dict of product_id -> Product (missing ids are simply absent)
        """
        ids = sorted(set(product_ids))
        if not ids:
            return {}

        rows = self.session.execute(
            select(ProductRow)
            .where(ProductRow.id.in_(ids))
            .order_by(ProductRow.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalars().all()

        return {row.id: self._map_row_to_product(row) for row in rows}

    def find_all(
        self,
        category_id: Optional[int] = None,
        is_active: Optional[bool] = None,
    ) -> List[Product]:
        """
        Find products with filters, ordered by id

        Args:
            category_id: Filter by category
            is_active: Filter by active status
        """
        query = select(ProductRow).options(joinedload(ProductRow.category))

        if category_id is not None:
            query = query.where(ProductRow.category_id == category_id)

        if is_active is not None:
            query = query.where(ProductRow.is_active == is_active)

        rows = self.session.execute(
            query.order_by(ProductRow.id).execution_options(populate_existing=True)
        ).scalars().all()
        return [self._map_row_to_product(row) for row in rows]

    def decrement_if_available(self, product_id: int, quantity: int) -> bool:
        """
        Conditional stock decrement

            UPDATE products SET stock = stock - :qty
            WHERE id = :id AND stock >= :qty

        Returns:
            True if the row was updated, False if stock was insufficient
            (or the product vanished) at execution time
        """
        result = self.session.execute(
            update(ProductRow)
            .where(ProductRow.id == product_id)
            .where(ProductRow.stock >= quantity)
            .values(stock=ProductRow.stock - quantity, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def increment(self, product_id: int, quantity: int) -> bool:
        """Return stock to a product; True if the row exists"""
        result = self.session.execute(
            update(ProductRow)
            .where(ProductRow.id == product_id)
            .values(stock=ProductRow.stock + quantity, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def get_stock(self, product_id: int) -> Optional[int]:
        """Current stock for a product, or None if it doesn't exist"""
        return self.session.execute(
            select(ProductRow.stock).where(ProductRow.id == product_id)
        ).scalar_one_or_none()
