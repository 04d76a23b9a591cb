"""
Order Repository - Data Access Layer for Orders

Handles all database queries for orders and returns Order domain models.
Orders are append-only: the only UPDATE issued here touches status.

Author: TM3
Date: 2026-10-19
"""
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload, selectinload

from storefront.core.clock import utcnow
from storefront.domain.order import Order, OrderItem, OrderStatusChange
from storefront.domain.order_status import OrderStatus
from storefront.models.catalog import Product as ProductRow
from storefront.models.order import (
    Order as OrderRow,
    OrderItem as OrderItemRow,
    OrderStatusChange as OrderStatusChangeRow,
)


def _day_start(value: date) -> datetime:
    return datetime.combine(value, time.min)


class OrderRepository:
    """
    Repository for Order data access

    All queries for orders are centralized here.
    Returns Order domain models with related data (customer, items).
    """

    def __init__(self, session: Session):
        self.session = session

    @staticmethod
    def _map_row_to_order(row: OrderRow) -> Order:
        return Order(
            id=row.id,
            customer_id=row.customer_id,
            placed_by_id=row.placed_by_id,
            status=row.status,
            channel=row.channel,
            idempotency_key=row.idempotency_key,
            total=row.total,
            created_at=row.created_at,
            updated_at=row.updated_at,
            customer_name=row.customer.name if row.customer else None,
            customer_email=row.customer.email if row.customer else None,
            items=[OrderItem.model_validate(item) for item in row.items],
        )

    def _base_query(self):
        return select(OrderRow).options(
            joinedload(OrderRow.customer),
            selectinload(OrderRow.items),
        )

    def create(
        self,
        customer_id: int,
        placed_by_id: int,
        channel: str,
        total: Decimal,
        lines: Iterable[Dict[str, Any]],
        idempotency_key: Optional[str] = None,
        status: str = OrderStatus.PENDING.value,
    ) -> int:
        """
        Insert an order and its lines (no commit; caller owns the transaction)

        Args:
            lines: dicts with product_id, product_name, quantity, unit_price, subtotal

        Returns:
            New order ID
        """
        now = utcnow()
        order = OrderRow(
            customer_id=customer_id,
            placed_by_id=placed_by_id,
            status=status,
            channel=channel,
            idempotency_key=idempotency_key,
            total=total,
            created_at=now,
            updated_at=now,
        )
        order.items = [OrderItemRow(**line) for line in lines]

        self.session.add(order)
        self.session.flush()
        return order.id

    def find_by_id(self, order_id: int) -> Optional[Order]:
        """
        Find order by ID with customer and items

        Returns:
            Order or None if not found
        """
        row = self.session.execute(
            self._base_query()
            .where(OrderRow.id == order_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

        return self._map_row_to_order(row) if row else None

    def find_by_idempotency_key(self, customer_id: int, idempotency_key: str) -> Optional[Order]:
        row = self.session.execute(
            self._base_query()
            .where(OrderRow.customer_id == customer_id)
            .where(OrderRow.idempotency_key == idempotency_key)
        ).scalar_one_or_none()

        return self._map_row_to_order(row) if row else None

    def find_all(
        self,
        customer_id: Optional[int] = None,
        status: Optional[OrderStatus] = None,
        limit: int = 50,
        offset: int = 0
    ) -> Tuple[List[Order], int]:
        """
        Find orders with filters, newest first

        Args:
            customer_id: Only orders owned by this customer
            status: Filter by order status
            limit: Maximum results to return
            offset: Number of results to skip

        Returns:
            Tuple of (list of orders, total count)
        """
        conditions = []

        if customer_id is not None:
            conditions.append(OrderRow.customer_id == customer_id)

        if status is not None:
            conditions.append(OrderRow.status == OrderStatus(status).value)

        total = self.session.execute(
            select(func.count(OrderRow.id)).where(*conditions)
        ).scalar_one()

        rows = self.session.execute(
            self._base_query()
            .where(*conditions)
            .order_by(OrderRow.created_at.desc(), OrderRow.id.desc())
            .limit(limit)
            .offset(offset)
        ).scalars().all()

        return [self._map_row_to_order(row) for row in rows], total

    def get_status_for_update(self, order_id: int) -> Optional[OrderStatus]:
        """Lock the order row and return its current status (None if missing)"""
        status = self.session.execute(
            select(OrderRow.status)
            .where(OrderRow.id == order_id)
            .with_for_update()
        ).scalar_one_or_none()

        return OrderStatus(status) if status is not None else None

    def update_status(
        self,
        order_id: int,
        old_status: OrderStatus,
        new_status: OrderStatus,
        changed_by_id: int,
    ) -> None:
        """Set a new status and append the audit entry (no commit)"""
        now = utcnow()
        order = self.session.get(OrderRow, order_id)
        order.status = new_status.value
        order.updated_at = now

        self.session.add(OrderStatusChangeRow(
            order_id=order_id,
            old_status=old_status.value,
            new_status=new_status.value,
            changed_by_id=changed_by_id,
            changed_at=now,
        ))
        self.session.flush()

    def find_status_history(self, order_id: int) -> List[OrderStatusChange]:
        rows = self.session.execute(
            select(OrderStatusChangeRow)
            .where(OrderStatusChangeRow.order_id == order_id)
            .order_by(OrderStatusChangeRow.id)
        ).scalars().all()

        return [OrderStatusChange.model_validate(row) for row in rows]

    def find_items(self, order_id: int) -> List[OrderItem]:
        rows = self.session.execute(
            select(OrderItemRow)
            .where(OrderItemRow.order_id == order_id)
            .order_by(OrderItemRow.id)
        ).scalars().all()

        return [OrderItem.model_validate(row) for row in rows]

    def find_sales_lines(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        channel: Optional[str] = None,
        category_id: Optional[int] = None,
        customer_id: Optional[int] = None,
        exclude_statuses: Iterable[OrderStatus] = (OrderStatus.CANCELLED,),
    ) -> List[Dict[str, Any]]:
        """
        Flat order-line rows for reporting

        One row per order line with the order attributes reports group by.
        Dates are inclusive calendar days on created_at.

        Returns:
            List of dicts: order_id, customer_id, channel, status, created_at,
            product_id, category_id, quantity, subtotal
        """
        query = (
            select(
                OrderRow.id.label("order_id"),
                OrderRow.customer_id,
                OrderRow.channel,
                OrderRow.status,
                OrderRow.created_at,
                OrderItemRow.product_id,
                ProductRow.category_id,
                OrderItemRow.quantity,
                OrderItemRow.subtotal,
            )
            .join(OrderItemRow, OrderItemRow.order_id == OrderRow.id)
            .join(ProductRow, ProductRow.id == OrderItemRow.product_id)
        )

        excluded = [OrderStatus(s).value for s in exclude_statuses]
        if excluded:
            query = query.where(OrderRow.status.not_in(excluded))

        if start_date:
            query = query.where(OrderRow.created_at >= _day_start(start_date))

        if end_date == date.max:
            query = query.where(OrderRow.created_at <= datetime.combine(end_date, time.max))
        elif end_date:
            query = query.where(OrderRow.created_at < _day_start(end_date + timedelta(days=1)))

        if channel:
            query = query.where(OrderRow.channel == channel)

        if category_id is not None:
            query = query.where(ProductRow.category_id == category_id)

        if customer_id is not None:
            query = query.where(OrderRow.customer_id == customer_id)

        rows = self.session.execute(
            query.order_by(OrderRow.created_at, OrderRow.id, OrderItemRow.id)
        ).mappings().all()

        return [dict(row) for row in rows]
