"""
Domain Layer - Business Entities

This layer contains Pydantic models representing business entities.
These models enforce type safety and validation across the application.

Author: TM3
Date: 2026-10-19
"""
from storefront.domain.product import Product, Category, StockLevel
from storefront.domain.order import Order, OrderItem, OrderStatusChange, SalesChannel, CartItem
from storefront.domain.order_status import OrderStatus
from storefront.domain.user import Identity, Customer, UserRole

__all__ = [
    'Product', 'Category', 'StockLevel',
    'Order', 'OrderItem', 'OrderStatusChange', 'SalesChannel', 'CartItem',
    'OrderStatus',
    'Identity', 'Customer', 'UserRole',
]
