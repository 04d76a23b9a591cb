"""
Usuarios (clientes y administradores)
"""
from sqlalchemy import Column, Integer, String, DateTime

from storefront.core.clock import utcnow
from storefront.core.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), nullable=False, unique=True)
    name = Column(String(255))
    role = Column(String(20), nullable=False, default="customer", index=True)

    created_at = Column(DateTime, default=utcnow)
