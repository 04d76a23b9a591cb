"""
Authentication dependencies for the Storefront API
Validates HS256 JWT bearer tokens issued by the identity provider and
provides the acting user to endpoints
"""
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from pydantic import ValidationError as PydanticValidationError

from storefront.core.config import settings
from storefront.domain.user import Identity, UserRole


# Security scheme for bearer tokens
security = HTTPBearer(auto_error=False)


class TokenUser(Identity):
    """User data extracted from JWT token"""
    email: str


class AuthConfig:
    """Authentication configuration"""

    @staticmethod
    def get_auth_secret() -> str:
        """Get the AUTH_SECRET from settings"""
        secret = settings.AUTH_SECRET
        if not secret:
            raise ValueError("AUTH_SECRET environment variable is not set")
        return secret

    @staticmethod
    def get_jwt_algorithm() -> str:
        return "HS256"


def decode_token(token: str) -> dict:
    """
    Decode and validate a JWT token.

    Expected payload:
    {
        "sub": "42",
        "id": 42,
        "email": "ana@example.com",
        "name": "Ana",
        "role": "customer",
        "exp": 1234567890
    }
    """
    try:
        return jwt.decode(
            token,
            AuthConfig.get_auth_secret(),
            algorithms=[AuthConfig.get_jwt_algorithm()],
            options={"verify_aud": False}
        )
    except JWTError as e:
        if "expired" in str(e).lower():
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token has expired",
                headers={"WWW-Authenticate": "Bearer"}
            )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"}
        )


def create_access_token(user_id: int, email: str, role: str = "customer", name: Optional[str] = None) -> str:
    """Issue a token with the payload shape decode_token expects (tests, local tooling)"""
    payload = {"sub": str(user_id), "id": user_id, "email": email, "role": role}
    if name:
        payload["name"] = name
    return jwt.encode(payload, AuthConfig.get_auth_secret(), algorithm=AuthConfig.get_jwt_algorithm())


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> TokenUser:
    """
    Dependency that extracts and validates the current user from JWT.

    Usage:
        @router.get("/protected")
        async def protected_route(user: TokenUser = Depends(get_current_user)):
            return {"message": f"Hello {user.email}"}
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"}
        )

    payload = decode_token(credentials.credentials)

    user_id = payload.get("id") or payload.get("sub")
    email = payload.get("email")

    if not user_id or not email:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload: missing user id or email",
            headers={"WWW-Authenticate": "Bearer"}
        )

    try:
        return TokenUser(
            id=user_id,
            email=email,
            name=payload.get("name"),
            role=payload.get("role", UserRole.CUSTOMER.value)
        )
    except PydanticValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token payload: {e.errors()[0]['msg']}",
            headers={"WWW-Authenticate": "Bearer"}
        )


def require_role(required_role: str):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.put("/orders/{order_id}/status")
        async def update_status(
            order_id: int,
            user: TokenUser = Depends(require_role("admin"))
        ):
            # Only admins can change order status
            pass
    """
    async def role_checker(
        user: TokenUser = Depends(get_current_user)
    ) -> TokenUser:
        # Role hierarchy: admin > customer
        role_hierarchy = {
            UserRole.ADMIN.value: 2,
            UserRole.CUSTOMER.value: 1,
        }

        user_level = role_hierarchy.get(user.role.value, 0)
        required_level = role_hierarchy.get(required_role, 0)

        if user_level < required_level:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required role: {required_role}, your role: {user.role.value}"
            )

        return user

    return role_checker


# Convenience dependencies for common role requirements
require_admin = require_role(UserRole.ADMIN.value)
