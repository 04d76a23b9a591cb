"""
Report Export

Renders report rows (the dicts produced by the report models' to_dict())
as CSV text or an XLSX workbook with labelled columns.

Author: TM3
Date: 2026-10-19
"""
import csv
import io
from enum import Enum
from typing import Dict, Iterable, List, Tuple

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side
from openpyxl.utils import get_column_letter

from storefront.core.exceptions import ValidationError


class ExportFormat(str, Enum):
    CSV = "csv"
    XLSX = "xlsx"


# Column = (row key, header label, kind); kind drives XLSX number formats
Column = Tuple[str, str, str]

REPORT_COLUMNS: Dict[str, List[Column]] = {
    "monthly-sales": [
        ("year", "Year", "int"),
        ("month", "Month", "int"),
        ("month_name", "Month Name", "text"),
        ("order_count", "Orders", "int"),
        ("total_items", "Items Sold", "int"),
        ("revenue", "Revenue", "money"),
        ("average_order_value", "Average Order Value", "money"),
    ],
    "top-customers": [
        ("customer_id", "Customer ID", "int"),
        ("customer_name", "Customer", "text"),
        ("customer_email", "Email", "text"),
        ("order_count", "Orders", "int"),
        ("total_spent", "Total Spent", "money"),
        ("average_order_value", "Average Order Value", "money"),
        ("last_order_date", "Last Order", "text"),
    ],
    "channel-sales": [
        ("channel", "Channel", "text"),
        ("order_count", "Orders", "int"),
        ("item_count", "Items Sold", "int"),
        ("revenue", "Revenue", "money"),
        ("percentage", "Share (%)", "percent"),
    ],
    "stock-health": [
        ("product_id", "Product ID", "int"),
        ("product_name", "Product", "text"),
        ("category_name", "Category", "text"),
        ("stock", "Stock", "int"),
        ("min_stock", "Minimum Stock", "int"),
        ("status", "Status", "text"),
        ("unit_price", "Unit Price", "money"),
        ("inventory_value", "Inventory Value", "money"),
    ],
}

SHEET_TITLES = {
    "monthly-sales": "Monthly Sales",
    "top-customers": "Top Customers",
    "channel-sales": "Channel Sales",
    "stock-health": "Stock Health",
}

NUMBER_FORMATS = {
    "int": "#,##0",
    "money": "#,##0.00",
    "percent": "0.00",
}


def get_columns(report_name: str) -> List[Column]:
    columns = REPORT_COLUMNS.get(report_name)
    if columns is None:
        raise ValidationError(
            f"Unknown report: {report_name}",
            report=report_name,
            available=sorted(REPORT_COLUMNS),
        )
    return columns


def export_csv(report_name: str, rows: Iterable[dict]) -> str:
    """Render rows as CSV with a header line of column labels"""
    columns = get_columns(report_name)

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow([label for _, label, _ in columns])
    for row in rows:
        writer.writerow(["" if row.get(key) is None else row.get(key) for key, _, _ in columns])

    return output.getvalue()


def export_xlsx(report_name: str, rows: Iterable[dict]) -> io.BytesIO:
    """Render rows as a single-sheet workbook"""
    columns = get_columns(report_name)

    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLES[report_name]

    # Define styles
    header_fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
    header_font = Font(color="FFFFFF", bold=True, size=12)
    border = Border(
        left=Side(style='thin'),
        right=Side(style='thin'),
        top=Side(style='thin'),
        bottom=Side(style='thin')
    )

    # Write headers
    for col_num, (_, label, _) in enumerate(columns, 1):
        cell = ws.cell(row=1, column=col_num, value=label)
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = Alignment(horizontal='center', vertical='center')
        cell.border = border

    # Write data
    for row_num, row in enumerate(rows, 2):
        for col_num, (key, _, kind) in enumerate(columns, 1):
            cell = ws.cell(row=row_num, column=col_num, value=row.get(key))
            cell.border = border
            cell.alignment = Alignment(horizontal='left', vertical='center')

            if kind in NUMBER_FORMATS:
                cell.alignment = Alignment(horizontal='right', vertical='center')
                cell.number_format = NUMBER_FORMATS[kind]

    # Adjust column widths
    for col_num, (_, label, kind) in enumerate(columns, 1):
        ws.column_dimensions[get_column_letter(col_num)].width = max(len(label) + 4, 30 if kind == "text" else 15)

    # Freeze header row
    ws.freeze_panes = 'A2'

    excel_file = io.BytesIO()
    wb.save(excel_file)
    excel_file.seek(0)

    return excel_file
