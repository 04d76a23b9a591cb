"""
User Domain Models

Identity of the actor behind a request. Authentication itself is handled by
the identity provider; the core only needs id and role.

Author: TM3
Date: 2026-10-19
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UserRole(str, Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


class Identity(BaseModel):
    """Acting identity (customer self-service or administrator)"""

    id: int = Field(..., description="User ID")
    role: UserRole = Field(UserRole.CUSTOMER, description="User role")
    email: Optional[str] = Field(None, description="User email")
    name: Optional[str] = Field(None, description="Display name")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class Customer(BaseModel):
    """
    Customer domain model (lightweight for order and report context)
    """

    id: int = Field(..., description="Customer ID")
    email: str = Field(..., description="Customer email")
    name: Optional[str] = Field(None, description="Customer name")
    role: UserRole = Field(UserRole.CUSTOMER, description="User role")

    model_config = ConfigDict(from_attributes=True)
