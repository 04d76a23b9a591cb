"""
Reports API Endpoints
Sales and stock analytics for administrators

Endpoints:
- GET /sales/monthly/{year}  12 monthly buckets for a year
- GET /customers/top         customers ranked by total spent
- GET /sales/channels        sales per channel with share
- GET /stock                 stock health per product
- GET /{name}/export         any of the above as CSV or XLSX

All endpoints accept start_date, end_date, channel, category_id and
customer_id filters.

Author: TM3
Date: 2026-10-19
"""
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response, StreamingResponse
from sqlalchemy.orm import Session

from storefront.api.errors import http_error
from storefront.core.auth import TokenUser, require_admin
from storefront.core.clock import utcnow
from storefront.core.database import get_db
from storefront.core.exceptions import StorefrontError, ValidationError
from storefront.domain.order import SalesChannel
from storefront.domain.report import ReportFilter, StockStatus
from storefront.services.report_export import ExportFormat, export_csv, export_xlsx, get_columns
from storefront.services.reporting_service import ReportingService

logger = logging.getLogger(__name__)

router = APIRouter()


def report_filter(
    start_date: Optional[date] = Query(None, description="Start date (YYYY-MM-DD)"),
    end_date: Optional[date] = Query(None, description="End date (YYYY-MM-DD)"),
    channel: Optional[SalesChannel] = Query(None, description="Sales channel"),
    category_id: Optional[int] = Query(None, description="Product category"),
    customer_id: Optional[int] = Query(None, description="Customer"),
) -> ReportFilter:
    return ReportFilter(
        start_date=start_date,
        end_date=end_date,
        channel=channel,
        category_id=category_id,
        customer_id=customer_id,
    )


@router.get("/sales/monthly/{year}")
def get_monthly_sales(
    year: int,
    filters: ReportFilter = Depends(report_filter),
    user: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Monthly sales for a year

    Returns all 12 months (zero buckets included) plus yearly totals
    """
    try:
        report = ReportingService(db).get_monthly_sales(year, filters)

        return {
            "status": "success",
            "data": report.to_dict()
        }

    except StorefrontError as e:
        raise http_error(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error generating monthly sales: {str(e)}")


@router.get("/customers/top")
def get_top_customers(
    limit: Optional[int] = Query(None, ge=1, le=1000, description="Max customers (default TOP_CUSTOMERS_LIMIT)"),
    filters: ReportFilter = Depends(report_filter),
    user: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Customers ranked by total spent"""
    try:
        customers = ReportingService(db).get_top_customers(filters, limit=limit)

        return {
            "status": "success",
            "count": len(customers),
            "data": [customer.to_dict() for customer in customers]
        }

    except StorefrontError as e:
        raise http_error(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error generating top customers: {str(e)}")


@router.get("/sales/channels")
def get_channel_sales(
    filters: ReportFilter = Depends(report_filter),
    user: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Sales per channel with percentage of revenue"""
    try:
        channels = ReportingService(db).get_channel_sales(filters)

        return {
            "status": "success",
            "data": [channel.to_dict() for channel in channels]
        }

    except StorefrontError as e:
        raise http_error(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error generating channel sales: {str(e)}")


@router.get("/stock")
def get_stock_health(
    stock_status: Optional[StockStatus] = Query(None, alias="status", description="Only products in this status"),
    filters: ReportFilter = Depends(report_filter),
    user: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Stock classification per product with inventory value"""
    try:
        report = ReportingService(db).get_stock_health(filters, status=stock_status)

        return {
            "status": "success",
            "data": report.to_dict()
        }

    except StorefrontError as e:
        raise http_error(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error generating stock report: {str(e)}")


@router.get("/{name}/export")
def export_report(
    name: str,
    format: ExportFormat = Query(ExportFormat.CSV, description="csv or xlsx"),
    year: Optional[int] = Query(None, description="Year (monthly-sales only, default current year)"),
    limit: Optional[int] = Query(None, ge=1, le=1000, description="Max customers (top-customers only)"),
    stock_status: Optional[StockStatus] = Query(None, alias="status", description="Stock status (stock-health only)"),
    filters: ReportFilter = Depends(report_filter),
    user: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Download a report as CSV or XLSX

    name: monthly-sales | top-customers | channel-sales | stock-health
    """
    try:
        get_columns(name)
        service = ReportingService(db)

        if name == "monthly-sales":
            rows = [m.to_dict() for m in service.get_monthly_sales(year or utcnow().year, filters).months]
        elif name == "top-customers":
            rows = [c.to_dict() for c in service.get_top_customers(filters, limit=limit)]
        elif name == "channel-sales":
            rows = [c.to_dict() for c in service.get_channel_sales(filters)]
        elif name == "stock-health":
            rows = [i.to_dict() for i in service.get_stock_health(filters, status=stock_status).items]
        else:
            raise ValidationError(f"Unknown report: {name}", report=name)

        # Generate filename with timestamp
        timestamp = utcnow().strftime("%Y%m%d_%H%M%S")
        filename = f"{name}_{timestamp}.{format.value}"

        if format == ExportFormat.XLSX:
            return StreamingResponse(
                export_xlsx(name, rows),
                media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
                headers={
                    "Content-Disposition": f"attachment; filename={filename}"
                }
            )

        return Response(
            content=export_csv(name, rows),
            media_type="text/csv",
            headers={
                "Content-Disposition": f"attachment; filename={filename}"
            }
        )

    except StorefrontError as e:
        raise http_error(e)
    except Exception as e:
        logger.error(f"Error exporting report {name}: {e}")
        raise HTTPException(status_code=500, detail=f"Error exporting report: {str(e)}")
