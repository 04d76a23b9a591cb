"""
Report Domain Models

Shapes returned by the reporting engine. All money values are Decimal with
two fractional digits; to_dict() converts them to float for JSON.

Author: TM3
Date: 2026-10-19
"""
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from storefront.domain.order import SalesChannel


MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


class ReportFilter(BaseModel):
    """Optional filters shared by every report"""
    start_date: Optional[date] = Field(None, description="Orders created on or after this date")
    end_date: Optional[date] = Field(None, description="Orders created on or before this date")
    channel: Optional[SalesChannel] = Field(None, description="Restrict to one sales channel")
    category_id: Optional[int] = Field(None, description="Restrict to lines/products in this category")
    customer_id: Optional[int] = Field(None, description="Restrict to one customer")


class MonthlySales(BaseModel):
    year: int
    month: int
    month_name: str
    order_count: int = 0
    total_items: int = 0
    revenue: Decimal = Decimal("0.00")
    average_order_value: Decimal = Decimal("0.00")

    def to_dict(self) -> dict:
        data = self.model_dump()
        data['revenue'] = float(self.revenue)
        data['average_order_value'] = float(self.average_order_value)
        return data


class MonthlySalesReport(BaseModel):
    year: int
    months: List[MonthlySales]
    order_count: int = 0
    total_items: int = 0
    revenue: Decimal = Decimal("0.00")

    def to_dict(self) -> dict:
        return {
            'year': self.year,
            'order_count': self.order_count,
            'total_items': self.total_items,
            'revenue': float(self.revenue),
            'months': [month.to_dict() for month in self.months],
        }


class CustomerSales(BaseModel):
    customer_id: int
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    order_count: int
    total_spent: Decimal
    average_order_value: Decimal
    last_order_date: datetime

    def to_dict(self) -> dict:
        data = self.model_dump()
        data['total_spent'] = float(self.total_spent)
        data['average_order_value'] = float(self.average_order_value)
        data['last_order_date'] = self.last_order_date.isoformat()
        return data


class ChannelSales(BaseModel):
    channel: SalesChannel
    order_count: int = 0
    item_count: int = 0
    revenue: Decimal = Decimal("0.00")
    percentage: float = 0.0

    def to_dict(self) -> dict:
        return {
            'channel': self.channel.value,
            'order_count': self.order_count,
            'item_count': self.item_count,
            'revenue': float(self.revenue),
            'percentage': self.percentage,
        }


class StockStatus(str, Enum):
    NORMAL = "normal"
    LOW = "low"
    CRITICAL = "critical"
    OUT_OF_STOCK = "out_of_stock"


class StockHealthItem(BaseModel):
    product_id: int
    product_name: str
    category_name: Optional[str] = None
    stock: int
    min_stock: int
    status: StockStatus
    unit_price: Decimal
    inventory_value: Decimal

    def to_dict(self) -> dict:
        data = self.model_dump()
        data['status'] = self.status.value
        data['unit_price'] = float(self.unit_price)
        data['inventory_value'] = float(self.inventory_value)
        return data


class StockHealthReport(BaseModel):
    items: List[StockHealthItem]
    total_value: Decimal = Decimal("0.00")
    total_units: int = 0
    status_counts: Dict[str, int] = Field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            'total_products': len(self.items),
            'total_units': self.total_units,
            'total_value': float(self.total_value),
            'status_counts': dict(self.status_counts),
            'items': [item.to_dict() for item in self.items],
        }
