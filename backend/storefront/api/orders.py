"""
Orders API Endpoints
Handles order queries, status updates and the status audit trail

Customers see only their own orders; administrators see every order.
Order creation lives in api/checkout.py (mounted on this prefix as well).

Author: TM3
Date: 2026-10-19
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.api.errors import http_error
from storefront.core.auth import TokenUser, get_current_user, require_admin
from storefront.core.database import get_db
from storefront.core.exceptions import StorefrontError
from storefront.domain.order import OrderStatusUpdate
from storefront.domain.order_status import OrderStatus
from storefront.services.order_service import OrderService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
def get_orders(
    status: Optional[OrderStatus] = Query(None, description="Filter by order status"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    user: TokenUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    List orders visible to the caller, newest first

    Returns orders with customer and item information
    """
    try:
        service = OrderService(db)
        orders, total = service.list_orders(user, status=status, limit=limit, offset=offset)

        return {
            "status": "success",
            "total": total,
            "limit": limit,
            "offset": offset,
            "count": len(orders),
            "data": [order.to_dict() for order in orders]
        }

    except StorefrontError as e:
        raise http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching orders: {str(e)}")


@router.get("/{order_id}")
def get_order(
    order_id: int,
    user: TokenUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Get a single order with its lines

    404 if the order doesn't exist, 403 if it belongs to another customer
    """
    try:
        order = OrderService(db).get_order(user, order_id)

        return {
            "status": "success",
            "data": order.to_dict()
        }

    except StorefrontError as e:
        raise http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching order: {str(e)}")


@router.get("/{order_id}/history")
def get_order_history(
    order_id: int,
    user: TokenUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Status changes of an order, oldest first"""
    try:
        history = OrderService(db).get_order_history(user, order_id)

        return {
            "status": "success",
            "count": len(history),
            "data": [change.to_dict() for change in history]
        }

    except StorefrontError as e:
        raise http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching order history: {str(e)}")


@router.put("/{order_id}/status")
def update_order_status(
    order_id: int,
    update: OrderStatusUpdate,
    user: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Change an order's status (administrators only)

    409 when STRICT_STATUS_TRANSITIONS rejects the transition
    """
    try:
        order = OrderService(db).update_order_status(user, order_id, update.status)

        return {
            "status": "success",
            "data": order.to_dict()
        }

    except StorefrontError as e:
        raise http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating status of order {order_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Error updating order status: {str(e)}")
