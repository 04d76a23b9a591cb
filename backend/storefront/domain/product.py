"""
Product Domain Model

Represents a catalog product as seen by the order and inventory core.
Price and stock baselines are maintained by catalog management; the core
only reads price and lets the inventory ledger move stock.

Author: TM3
Date: 2026-10-19
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime
from decimal import Decimal


class Category(BaseModel):
    """Category label for products and segment reports"""

    id: int = Field(..., description="Category ID")
    name: str = Field(..., description="Category name")

    model_config = ConfigDict(from_attributes=True)


class Product(BaseModel):
    """
    Product domain model

    Fields:
        id: Internal product ID (primary key)
        name: Product name
        description: Product description (optional)
        price: Current unit price (snapshotted into order lines at checkout)
        stock: Current stock level, never negative
        min_stock: Per-product minimum stock threshold (None = global default)
        category_id: Category reference
        category_name: Category name (from JOIN)
        is_active: Whether product is sellable
        created_at / updated_at: Timestamps
    """

    id: int = Field(..., description="Internal product ID")
    name: str = Field(..., description="Product name")
    description: Optional[str] = Field(None, description="Product description")

    price: Decimal = Field(..., description="Unit price", ge=0)
    stock: int = Field(0, description="Current stock level", ge=0)
    min_stock: Optional[int] = Field(None, description="Minimum stock threshold", ge=0)

    category_id: Optional[int] = Field(None, description="Category ID")
    category_name: Optional[str] = Field(None, description="Category name (from JOIN)")

    is_active: bool = Field(True, description="Whether product is active")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_out_of_stock(self) -> bool:
        return self.stock <= 0

    @property
    def inventory_value(self) -> Decimal:
        """Stock valued at current price"""
        return self.price * self.stock

    def to_dict(self) -> dict:
        data = self.model_dump()
        data['price'] = float(self.price)
        data['is_out_of_stock'] = self.is_out_of_stock
        data['inventory_value'] = float(self.inventory_value)
        if self.created_at:
            data['created_at'] = self.created_at.isoformat()
        if self.updated_at:
            data['updated_at'] = self.updated_at.isoformat()
        return data


class StockLevel(BaseModel):
    """Read-only view returned by the inventory ledger"""

    product_id: int
    product_name: str
    stock: int
    price: Decimal

    def to_dict(self) -> dict:
        return {
            'product_id': self.product_id,
            'product_name': self.product_name,
            'stock': self.stock,
            'price': float(self.price),
        }
