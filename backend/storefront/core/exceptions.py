"""
Domain errors for the order and inventory core

Services raise these; API modules translate them into HTTP responses using
`status_code` and `to_dict()`.
"""
from typing import Any, Dict, Optional


class StorefrontError(Exception):
    """Base class for every error the core surfaces to callers"""

    status_code = 500
    code = "storefront_error"

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, **self.context}


class ValidationError(StorefrontError):
    status_code = 400
    code = "validation_error"


class EmptyCartError(ValidationError):
    code = "empty_cart"

    def __init__(self, message: str = "Cart has no items"):
        super().__init__(message)


class NotFoundError(StorefrontError):
    status_code = 404
    code = "not_found"


class ProductNotFoundError(NotFoundError):
    code = "product_not_found"

    def __init__(self, product_id: int):
        super().__init__(f"Product {product_id} not found", product_id=product_id)
        self.product_id = product_id


class OrderNotFoundError(NotFoundError):
    code = "order_not_found"

    def __init__(self, order_id: int):
        super().__init__(f"Order {order_id} not found", order_id=order_id)
        self.order_id = order_id


class CustomerNotFoundError(NotFoundError):
    code = "customer_not_found"

    def __init__(self, customer_id: int):
        super().__init__(f"Customer {customer_id} not found", customer_id=customer_id)
        self.customer_id = customer_id


class AuthorizationError(StorefrontError):
    status_code = 403
    code = "forbidden"


class ConflictError(StorefrontError):
    status_code = 409
    code = "conflict"


class InsufficientStockError(StorefrontError):
    """Requested quantity exceeds the stock available for a product"""

    status_code = 409
    code = "insufficient_stock"

    def __init__(
        self,
        product_id: int,
        requested: int,
        available: int,
        product_name: Optional[str] = None,
        message: Optional[str] = None,
    ):
        label = product_name or f"product {product_id}"
        super().__init__(
            message or f"Insufficient stock for {label}: requested {requested}, available {available}",
            product_id=product_id,
            product_name=product_name,
            requested=requested,
            available=available,
        )
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available


class StockConflictError(ConflictError, InsufficientStockError):
    """
    Stock changed between validation and commit (lost race).

    The whole checkout transaction has been rolled back; callers may retry.
    """

    code = "stock_conflict"

    def __init__(self, product_id: int, requested: int, available: int, product_name: Optional[str] = None):
        label = product_name or f"product {product_id}"
        InsufficientStockError.__init__(
            self,
            product_id=product_id,
            requested=requested,
            available=available,
            product_name=product_name,
            message=f"Stock for {label} changed during checkout: requested {requested}, available {available}",
        )


class InvalidStatusTransitionError(ConflictError):
    code = "invalid_status_transition"

    def __init__(self, order_id: int, current: str, requested: str):
        super().__init__(
            f"Order {order_id} cannot move from {current} to {requested}",
            order_id=order_id,
            current_status=current,
            requested_status=requested,
        )
