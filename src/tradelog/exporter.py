#!/usr/bin/env python3
"""
Order export to a single-sheet Excel workbook.
"""

import logging
from pathlib import Path
from typing import Any, Optional, Union

from .clock import SystemClock
from .columns import EXPORT_HEADERS, ColumnMap
from .config import get_config
from .excel import build_workbook, workbook_bytes
from .models import Order

logger = logging.getLogger("tradelog")

SHEET_TITLE = "Orders"


def order_record(order: Order) -> dict[str, Any]:
    """Flatten an order into a field record (first contact only)"""
    contact = order.primary_contact
    return {
        "new_or_old": order.new_or_old,
        "country": order.country,
        "continent": order.continent,
        "source": order.source,
        "lead_number": order.lead_number,
        "payment_date": order.payment_date.isoformat() if order.payment_date else None,
        "company_name": order.company_name,
        "contact_name": contact.get("name"),
        "email": contact.get("email"),
        "phone": contact.get("phone"),
        "invoice_amount": order.invoice_amount,
        "payment_amount": order.payment_amount,
        "closed_product": order.closed_product,
        "customer_background_check": order.customer_background_check,
        "order_date": order.order_date.isoformat() if order.order_date else None,
        "customer_nature": order.customer_nature,
        "purchase_order_number": order.purchase_order_number,
    }


class OrderExporter:
    """Builds the order export workbook from the gateway's orders"""

    def __init__(self, gateway, clock=None, prefix: Optional[str] = None):
        self.gateway = gateway
        self.clock = clock or SystemClock()
        self.prefix = prefix if prefix is not None else get_config().EXPORT_PREFIX
        self.column_map = ColumnMap()

    def build_rows(self) -> list[list]:
        """Header row followed by one row per order, newest first"""
        orders = self.gateway.list_orders()
        rows = [list(EXPORT_HEADERS)]
        rows.extend(self.column_map.to_row(order_record(o)) for o in orders)
        logger.info(f"Exporting {len(orders)} order(s)")
        return rows

    def build_workbook(self):
        header, *data = self.build_rows()
        return build_workbook(SHEET_TITLE, header, data)

    def export_bytes(self) -> bytes:
        """Serialize the export workbook to .xlsx bytes"""
        return workbook_bytes(self.build_workbook())

    def export_file(self, filepath: Union[str, Path, None] = None) -> Path:
        """
        Write the export workbook to disk.

        Args:
            filepath: Target path; defaults to file_name() in the working directory

        Returns:
            Path of the written file
        """
        path = Path(filepath) if filepath else Path(self.file_name())
        self.build_workbook().save(path)
        logger.info(f"Exported orders to {path}")
        return path

    def file_name(self) -> str:
        """Timestamped export file name, e.g. orders_20240115_093000.xlsx"""
        return f"{self.prefix}{self.clock.now():%Y%m%d_%H%M%S}.xlsx"
