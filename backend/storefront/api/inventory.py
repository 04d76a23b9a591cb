"""
API endpoints for inventory lookups.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storefront.api.errors import http_error
from storefront.core.auth import TokenUser, get_current_user
from storefront.core.database import get_db
from storefront.core.exceptions import StorefrontError
from storefront.services.inventory_ledger import InventoryLedger


router = APIRouter(prefix="/api/v1/inventory", tags=["inventory"])


@router.get("/{product_id}")
def get_stock(
    product_id: int,
    user: TokenUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Current stock and price of a product

    Returns:
        {product_id, product_name, stock, price}
    """
    try:
        level = InventoryLedger(db).get_stock(product_id)

        return {
            "status": "success",
            "data": level.to_dict()
        }

    except StorefrontError as e:
        raise http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching stock: {str(e)}")
