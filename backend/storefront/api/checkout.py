"""
Checkout API Endpoints
Turns a cart into an order (self-checkout and administrator checkout)

Both endpoints accept an optional Idempotency-Key header; repeating a request
with the same key returns the original order instead of creating a new one.

Author: TM3
Date: 2026-10-19
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.orm import Session

from storefront.api.errors import http_error
from storefront.core.auth import TokenUser, get_current_user, require_admin
from storefront.core.database import get_db
from storefront.core.exceptions import StorefrontError
from storefront.domain.order import AdminCheckoutRequest, CheckoutRequest
from storefront.services.checkout_service import CheckoutService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", status_code=201)
def checkout(
    request: CheckoutRequest,
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
    user: TokenUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Place an order for the authenticated customer

    Returns the created order with its lines and total.
    Errors: 400 (empty cart / bad quantity), 404 (unknown product),
    409 (insufficient stock or lost stock race), 403 (administrator caller)
    """
    try:
        service = CheckoutService(db)
        order = service.create_order(
            actor=user,
            items=request.items,
            channel=request.channel,
            idempotency_key=idempotency_key,
        )

        return {
            "status": "success",
            "data": order.to_dict()
        }

    except StorefrontError as e:
        raise http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected checkout error for user {user.id}: {e}")
        raise HTTPException(status_code=500, detail=f"Error creating order: {str(e)}")


@router.post("/admin", status_code=201)
def admin_checkout(
    request: AdminCheckoutRequest,
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
    user: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Place an order on behalf of a customer (administrators only)

    The order is owned by `customer_id`; the administrator is recorded as
    the user who placed it.
    """
    try:
        service = CheckoutService(db)
        order = service.create_order_for_customer(
            actor=user,
            customer_id=request.customer_id,
            items=request.items,
            channel=request.channel,
            idempotency_key=idempotency_key,
        )

        return {
            "status": "success",
            "data": order.to_dict()
        }

    except StorefrontError as e:
        raise http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected admin checkout error for user {user.id}: {e}")
        raise HTTPException(status_code=500, detail=f"Error creating order: {str(e)}")
