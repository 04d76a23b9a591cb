"""
Modelos de base de datos
"""
from .catalog import Category, Product
from .user import User
from .order import Order, OrderItem, OrderStatusChange

__all__ = [
    "Category",
    "Product",
    "User",
    "Order",
    "OrderItem",
    "OrderStatusChange",
]
