"""
Reporting Service

Read-only aggregations over order history and current stock:
- Monthly sales for a year (always 12 buckets)
- Top customers by total spent
- Sales by channel with percentage share
- Stock health (normal / low / critical / out_of_stock)

Every order-based report skips CANCELLED orders. Reports take no locks and
never write; running the same report twice over unchanged data returns the
same result.

Author: TM3
Date: 2026-10-19
"""
import logging
from collections import OrderedDict
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from storefront.core.config import settings
from storefront.core.exceptions import ValidationError
from storefront.domain.order import SalesChannel
from storefront.domain.report import (
    MONTH_NAMES,
    ChannelSales,
    CustomerSales,
    MonthlySales,
    MonthlySalesReport,
    ReportFilter,
    StockHealthItem,
    StockHealthReport,
    StockStatus,
)
from storefront.repositories.order_repository import OrderRepository
from storefront.repositories.product_repository import ProductRepository
from storefront.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")


def _money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def _average(total: Decimal, count: int) -> Decimal:
    return _money(total / count) if count else ZERO


def classify_stock(stock: int, min_stock: int, critical_ratio: float = 0.5) -> StockStatus:
    """
    Classify a stock level against its minimum

    out_of_stock: stock <= 0
    critical:     stock <= min_stock * critical_ratio
    low:          stock <= min_stock
    normal:       otherwise
    """
    if stock <= 0:
        return StockStatus.OUT_OF_STOCK
    if stock <= min_stock * critical_ratio:
        return StockStatus.CRITICAL
    if stock <= min_stock:
        return StockStatus.LOW
    return StockStatus.NORMAL


class ReportingService:
    """Analytics/Reporting Engine"""

    def __init__(
        self,
        session: Session,
        default_min_stock: Optional[int] = None,
        critical_ratio: Optional[float] = None,
    ):
        self.orders = OrderRepository(session)
        self.products = ProductRepository(session)
        self.users = UserRepository(session)
        self.default_min_stock = (
            settings.DEFAULT_MIN_STOCK if default_min_stock is None else default_min_stock
        )
        self.critical_ratio = (
            settings.CRITICAL_STOCK_RATIO if critical_ratio is None else critical_ratio
        )

    @staticmethod
    def _validate_filter(report_filter: Optional[ReportFilter]) -> ReportFilter:
        report_filter = report_filter or ReportFilter()
        if (
            report_filter.start_date
            and report_filter.end_date
            and report_filter.start_date > report_filter.end_date
        ):
            raise ValidationError(
                "start_date must be on or before end_date",
                start_date=report_filter.start_date.isoformat(),
                end_date=report_filter.end_date.isoformat(),
            )
        return report_filter

    def _sales_lines(self, report_filter: ReportFilter, start: Optional[date] = None, end: Optional[date] = None):
        return self.orders.find_sales_lines(
            start_date=start if start is not None else report_filter.start_date,
            end_date=end if end is not None else report_filter.end_date,
            channel=report_filter.channel.value if report_filter.channel else None,
            category_id=report_filter.category_id,
            customer_id=report_filter.customer_id,
        )

    # ========================================
    # Monthly sales
    # ========================================

    def get_monthly_sales(self, year: int, report_filter: Optional[ReportFilter] = None) -> MonthlySalesReport:
        """
        Sales per calendar month of `year`

        All 12 months are returned; months without orders are zero buckets.
        Filter dates narrow the year further.
        """
        if year < 1 or year > 9999:
            raise ValidationError(f"Invalid year: {year}", year=year)

        report_filter = self._validate_filter(report_filter)

        start = max(date(year, 1, 1), report_filter.start_date or date(year, 1, 1))
        end = min(date(year, 12, 31), report_filter.end_date or date(year, 12, 31))

        buckets = {
            month: {"orders": set(), "items": 0, "revenue": ZERO}
            for month in range(1, 13)
        }

        if start <= end:
            for line in self._sales_lines(report_filter, start, end):
                bucket = buckets[line["created_at"].month]
                bucket["orders"].add(line["order_id"])
                bucket["items"] += line["quantity"]
                bucket["revenue"] += Decimal(line["subtotal"])

        months = []
        for month in range(1, 13):
            bucket = buckets[month]
            order_count = len(bucket["orders"])
            revenue = _money(bucket["revenue"])
            months.append(MonthlySales(
                year=year,
                month=month,
                month_name=MONTH_NAMES[month - 1],
                order_count=order_count,
                total_items=bucket["items"],
                revenue=revenue,
                average_order_value=_average(revenue, order_count),
            ))

        return MonthlySalesReport(
            year=year,
            months=months,
            order_count=sum(m.order_count for m in months),
            total_items=sum(m.total_items for m in months),
            revenue=_money(sum((m.revenue for m in months), ZERO)),
        )

    # ========================================
    # Top customers
    # ========================================

    def get_top_customers(
        self,
        report_filter: Optional[ReportFilter] = None,
        limit: Optional[int] = None,
    ) -> List[CustomerSales]:
        """Customers ranked by total spent (ties broken by customer id)"""
        limit = settings.TOP_CUSTOMERS_LIMIT if limit is None else limit
        if limit < 1:
            raise ValidationError("limit must be at least 1", limit=limit)

        report_filter = self._validate_filter(report_filter)

        totals: Dict[int, dict] = {}
        for line in self._sales_lines(report_filter):
            entry = totals.setdefault(line["customer_id"], {
                "orders": set(),
                "spent": ZERO,
                "last": line["created_at"],
            })
            entry["orders"].add(line["order_id"])
            entry["spent"] += Decimal(line["subtotal"])
            if line["created_at"] > entry["last"]:
                entry["last"] = line["created_at"]

        ranked = sorted(totals.items(), key=lambda kv: (-kv[1]["spent"], kv[0]))[:limit]
        customers = self.users.find_by_ids(customer_id for customer_id, _ in ranked)

        result = []
        for customer_id, entry in ranked:
            customer = customers.get(customer_id)
            spent = _money(entry["spent"])
            order_count = len(entry["orders"])
            result.append(CustomerSales(
                customer_id=customer_id,
                customer_name=customer.name if customer else None,
                customer_email=customer.email if customer else None,
                order_count=order_count,
                total_spent=spent,
                average_order_value=_average(spent, order_count),
                last_order_date=entry["last"],
            ))
        return result

    # ========================================
    # Channel sales
    # ========================================

    def get_channel_sales(self, report_filter: Optional[ReportFilter] = None) -> List[ChannelSales]:
        """
        Sales grouped by the channel recorded on each order

        Every channel is listed in enum order; percentages are revenue shares
        rounded to 2 decimals (0 for all channels when there is no revenue).
        """
        report_filter = self._validate_filter(report_filter)

        buckets = OrderedDict(
            (channel, {"orders": set(), "items": 0, "revenue": ZERO})
            for channel in SalesChannel
        )

        for line in self._sales_lines(report_filter):
            bucket = buckets[SalesChannel(line["channel"])]
            bucket["orders"].add(line["order_id"])
            bucket["items"] += line["quantity"]
            bucket["revenue"] += Decimal(line["subtotal"])

        grand_total = sum((b["revenue"] for b in buckets.values()), ZERO)

        result = []
        for channel, bucket in buckets.items():
            share = ZERO
            if grand_total > 0:
                share = (bucket["revenue"] * 100 / grand_total).quantize(CENTS, rounding=ROUND_HALF_UP)
            result.append(ChannelSales(
                channel=channel,
                order_count=len(bucket["orders"]),
                item_count=bucket["items"],
                revenue=_money(bucket["revenue"]),
                percentage=float(share),
            ))
        return result

    # ========================================
    # Stock health
    # ========================================

    def get_stock_health(
        self,
        report_filter: Optional[ReportFilter] = None,
        status: Optional[StockStatus] = None,
    ) -> StockHealthReport:
        """
        Classify every product's stock

        Products without their own min_stock use the global default. Totals
        and per-status counts cover the returned items only.
        """
        report_filter = self._validate_filter(report_filter)
        status = StockStatus(status) if status is not None else None

        items = []
        for product in self.products.find_all(category_id=report_filter.category_id):
            min_stock = product.min_stock if product.min_stock is not None else self.default_min_stock
            product_status = classify_stock(product.stock, min_stock, self.critical_ratio)
            if status is not None and product_status != status:
                continue

            items.append(StockHealthItem(
                product_id=product.id,
                product_name=product.name,
                category_name=product.category_name,
                stock=product.stock,
                min_stock=min_stock,
                status=product_status,
                unit_price=_money(product.price),
                inventory_value=_money(product.price * product.stock),
            ))

        counts = {s.value: 0 for s in StockStatus}
        for item in items:
            counts[item.status.value] += 1

        logger.debug(f"Stock health: {len(items)} products, counts {counts}")

        return StockHealthReport(
            items=items,
            total_value=_money(sum((item.inventory_value for item in items), ZERO)),
            total_units=sum(item.stock for item in items),
            status_counts=counts,
        )
