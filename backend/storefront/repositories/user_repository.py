"""
User Repository - Data Access Layer for customers and administrators

Author: TM3
Date: 2026-10-19
"""
from typing import Dict, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.domain.user import Customer
from storefront.models.user import User as UserRow


class UserRepository:
    """Read-only access to users (user CRUD belongs to the identity provider)"""

    def __init__(self, session: Session):
        self.session = session

    def find_by_id(self, user_id: int) -> Optional[Customer]:
        row = self.session.get(UserRow, user_id)
        return Customer.model_validate(row) if row else None

    def find_by_ids(self, user_ids: Iterable[int]) -> Dict[int, Customer]:
        ids = list(set(user_ids))
        if not ids:
            return {}

        rows = self.session.execute(
            select(UserRow).where(UserRow.id.in_(ids))
        ).scalars().all()

        return {row.id: Customer.model_validate(row) for row in rows}
