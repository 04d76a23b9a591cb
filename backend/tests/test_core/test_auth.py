"""
Unit tests for JWT authentication dependencies
"""
import asyncio

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt

from storefront.core.auth import (
    create_access_token,
    decode_token,
    get_current_user,
    require_admin,
)
from storefront.domain.user import UserRole


def _credentials(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestAuth:
    """Token decoding and role checks"""

    def test_round_trip_token(self):
        token = create_access_token(7, "ana@example.com", role="admin", name="Ana")

        user = asyncio.run(get_current_user(_credentials(token)))

        assert user.id == 7
        assert user.email == "ana@example.com"
        assert user.role == UserRole.ADMIN
        assert user.is_admin

    def test_missing_credentials(self):
        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(get_current_user(None))

        assert exc_info.value.status_code == 401

    def test_wrong_secret(self):
        token = jwt.encode({"id": 1, "email": "x@example.com"}, "other-secret", algorithm="HS256")

        with pytest.raises(HTTPException) as exc_info:
            decode_token(token)

        assert exc_info.value.status_code == 401

    def test_payload_without_email(self, auth_secret):
        token = jwt.encode({"id": 1}, auth_secret, algorithm="HS256")

        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(get_current_user(_credentials(token)))

        assert exc_info.value.status_code == 401

    def test_unknown_role_rejected(self, auth_secret):
        token = jwt.encode({"id": 1, "email": "x@example.com", "role": "root"}, auth_secret, algorithm="HS256")

        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(get_current_user(_credentials(token)))

        assert exc_info.value.status_code == 401

    def test_require_admin_rejects_customer(self):
        token = create_access_token(3, "bob@example.com")
        user = asyncio.run(get_current_user(_credentials(token)))

        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(require_admin(user))

        assert exc_info.value.status_code == 403

    def test_require_admin_accepts_admin(self):
        token = create_access_token(1, "root@example.com", role="admin")
        user = asyncio.run(get_current_user(_credentials(token)))

        assert asyncio.run(require_admin(user)) is user
