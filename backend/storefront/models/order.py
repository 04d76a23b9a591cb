"""
Modelos relacionados con órdenes/pedidos
"""
from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import relationship

from storefront.core.clock import utcnow
from storefront.core.database import Base


class Order(Base):
    """
    Tabla principal de órdenes - append-only salvo el status
    """
    __tablename__ = "orders"
    __table_args__ = (
        UniqueConstraint("customer_id", "idempotency_key", name="uq_orders_customer_idempotency_key"),
    )

    id = Column(Integer, primary_key=True, index=True)

    # Relaciones
    customer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    placed_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    # Estado y canal
    status = Column(String(20), nullable=False, default="PENDING", index=True)
    channel = Column(String(20), nullable=False, default="storefront", index=True)
    idempotency_key = Column(String(100))

    # Montos
    total = Column(Numeric(12, 2), nullable=False)

    # Metadata
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    customer = relationship("User", foreign_keys=[customer_id])
    placed_by = relationship("User", foreign_keys=[placed_by_id])
    items = relationship("OrderItem", back_populates="order", order_by="OrderItem.id")
    status_changes = relationship("OrderStatusChange", back_populates="order", order_by="OrderStatusChange.id")


class OrderItem(Base):
    """
    Items/productos de cada orden (inmutables)
    """
    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), index=True, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), index=True, nullable=False)

    # Datos del producto al momento de venta
    product_name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    subtotal = Column(Numeric(12, 2), nullable=False)

    # Relationships
    order = relationship("Order", back_populates="items")
    product = relationship("Product", back_populates="order_items")


class OrderStatusChange(Base):
    """
    Auditoría de cambios de status
    """
    __tablename__ = "order_status_changes"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), index=True, nullable=False)

    old_status = Column(String(20), nullable=False)
    new_status = Column(String(20), nullable=False)

    changed_by_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    changed_at = Column(DateTime, nullable=False, default=utcnow, index=True)

    order = relationship("Order", back_populates="status_changes")
