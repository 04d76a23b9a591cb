"""
Order Domain Models

Represents order-related entities of the storefront core.
These are the single source of truth for order data structure.

Author: TM3
Date: 2026-10-19
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from enum import Enum

from storefront.domain.order_status import OrderStatus


class SalesChannel(str, Enum):
    """Sales-origin dimension recorded on every order"""
    STOREFRONT = "storefront"
    SELLER = "seller"
    PHONE = "phone"
    IN_PERSON = "in_person"


class CartItem(BaseModel):
    """One (product, quantity) pair submitted at checkout"""
    product_id: int = Field(..., description="Product ID")
    quantity: int = Field(..., description="Units requested")


class CheckoutRequest(BaseModel):
    """Schema for self-checkout"""
    items: List[CartItem] = Field(default_factory=list)
    channel: Optional[SalesChannel] = None


class AdminCheckoutRequest(CheckoutRequest):
    """Schema for an administrator placing an order on behalf of a customer"""
    customer_id: int


class OrderStatusUpdate(BaseModel):
    """Schema for updating an order's status"""
    status: OrderStatus


class OrderItem(BaseModel):
    """
    Order Item domain model - represents a line item in an order

    Fields:
        id: Internal order item ID
        order_id: Parent order ID
        product_id: Reference to product catalog
        product_name: Product name at time of order
        quantity: Number of units ordered
        unit_price: Price per unit at time of order (immutable snapshot)
        subtotal: quantity * unit_price
    """

    id: int = Field(..., description="Order item ID")
    order_id: int = Field(..., description="Parent order ID")
    product_id: int = Field(..., description="Product catalog ID")
    product_name: str = Field(..., description="Product name at order time")
    quantity: int = Field(..., description="Quantity ordered", ge=1)
    unit_price: Decimal = Field(..., description="Price per unit at order time", ge=0)
    subtotal: Decimal = Field(..., description="Line subtotal", ge=0)

    model_config = ConfigDict(from_attributes=True)

    def to_dict(self) -> dict:
        """Convert to dictionary with Decimal to float conversion"""
        data = self.model_dump()
        for field in ['unit_price', 'subtotal']:
            data[field] = float(data[field])
        return data


class Order(BaseModel):
    """
    Order domain model - represents a customer order

    Fields:
        id: Internal order ID (primary key)
        customer_id: Owning customer
        placed_by_id: User who submitted the checkout (customer or admin)
        status: Lifecycle status (see order_status)
        channel: Sales channel the order came through
        idempotency_key: Client token for safe checkout retries
        total: Sum of line subtotals
        created_at / updated_at: Timestamps
        customer_name / customer_email: From JOIN (optional)
        items: Order lines
    """

    id: int = Field(..., description="Internal order ID")
    customer_id: int = Field(..., description="Owning customer ID")
    placed_by_id: int = Field(..., description="Acting user ID")

    status: OrderStatus = Field(..., description="Order status")
    channel: SalesChannel = Field(SalesChannel.STOREFRONT, description="Sales channel")
    idempotency_key: Optional[str] = Field(None, description="Checkout idempotency token")

    total: Decimal = Field(..., description="Order total", ge=0)

    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    customer_name: Optional[str] = Field(None, description="Customer name (from JOIN)")
    customer_email: Optional[str] = Field(None, description="Customer email (from JOIN)")

    items: List[OrderItem] = Field(default_factory=list, description="Order items")

    model_config = ConfigDict(from_attributes=True)

    @property
    def item_count(self) -> int:
        """Number of lines in order"""
        return len(self.items)

    @property
    def total_quantity(self) -> int:
        """Total quantity of all items"""
        return sum(item.quantity for item in self.items)

    @property
    def placed_on_behalf(self) -> bool:
        return self.placed_by_id != self.customer_id

    def to_dict(self) -> dict:
        """
        Convert to dictionary with computed fields

        Returns dict with all fields plus computed properties
        """
        data = self.model_dump(mode='json')

        data['item_count'] = self.item_count
        data['total_quantity'] = self.total_quantity
        data['placed_on_behalf'] = self.placed_on_behalf

        data['total'] = float(self.total)
        data['items'] = [item.to_dict() for item in self.items]

        return data


class OrderStatusChange(BaseModel):
    """Audit entry for one status change"""

    id: int
    order_id: int
    old_status: OrderStatus
    new_status: OrderStatus
    changed_by_id: int
    changed_at: datetime

    model_config = ConfigDict(from_attributes=True)

    def to_dict(self) -> dict:
        return self.model_dump(mode='json')
