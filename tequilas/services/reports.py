"""
Sales Report Exporter with Concurrency Control

Writes an admin order summary to an Excel workbook:
- "Orders" sheet: one row per order
- "Items" sheet: one row per order line

The workbook is a single shared file under the data directory, so writers
are serialised with a FileLock.

Version: 1.0.0
"""

import io
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import pandas as pd
from filelock import FileLock, Timeout

from tequilas.core.config import get_settings
from tequilas.core.errors import ServiceUnavailable
from tequilas.schemas import OrderSummaryResponse

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class SalesReportExporter:
    """File-locked Excel writer for order summaries."""

    ORDER_COLUMNS = [
        "order_id",
        "order_date",
        "full_name",
        "address",
        "contact_number",
        "payment_method",
        "item_count",
        "total_amount",
        "exported_at",
    ]

    ITEM_COLUMNS = [
        "order_id",
        "product_id",
        "product_name",
        "quantity",
        "unit_price",
        "line_total",
    ]

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        filename: Optional[str] = None,
        lock_timeout: Optional[int] = None,
    ):
        settings = get_settings()
        self.data_dir = Path(data_dir or settings.data_directory)
        self.report_file = self.data_dir / (filename or settings.report_filename)
        self.lock_file = self.report_file.with_name(f"{self.report_file.name}.lock")
        self.lock_timeout = lock_timeout if lock_timeout is not None else settings.report_lock_timeout

    def _ensure_data_dir(self) -> None:
        """Create data directory if needed."""
        if not self.data_dir.exists():
            self.data_dir.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created data directory: {self.data_dir}")

    def build_frames(self, summary: OrderSummaryResponse) -> tuple[pd.DataFrame, pd.DataFrame]:
        """Flatten a summary into the Orders and Items sheets."""
        export_time = datetime.now().isoformat(timespec="seconds")

        order_rows = [
            {
                "order_id": order.order_id,
                "order_date": order.order_date,
                "full_name": order.full_name,
                "address": order.address,
                "contact_number": order.contact_number,
                "payment_method": order.payment_method,
                "item_count": sum(item.quantity for item in order.order_items),
                "total_amount": float(order.total_amount),
                "exported_at": export_time,
            }
            for order in summary.orders
        ]
        item_rows = [
            {
                "order_id": order.order_id,
                "product_id": item.product_id,
                "product_name": item.product_name,
                "quantity": item.quantity,
                "unit_price": float(item.unit_price),
                "line_total": float(item.line_total),
            }
            for order in summary.orders
            for item in order.order_items
        ]

        return (
            pd.DataFrame(order_rows, columns=self.ORDER_COLUMNS),
            pd.DataFrame(item_rows, columns=self.ITEM_COLUMNS),
        )

    def export(self, summary: OrderSummaryResponse) -> bytes:
        """
        Write the summary workbook and return its bytes.

        Blocking; call through a thread pool from async code.

        Raises:
            ServiceUnavailable: The report file stayed locked past the timeout
        """
        self._ensure_data_dir()
        orders_df, items_df = self.build_frames(summary)

        try:
            with FileLock(str(self.lock_file), timeout=self.lock_timeout):
                logger.debug(f"Lock acquired for {self.report_file.name}")

                with pd.ExcelWriter(self.report_file, engine="openpyxl") as writer:
                    orders_df.to_excel(writer, sheet_name="Orders", index=False)
                    items_df.to_excel(writer, sheet_name="Items", index=False)

                content = self.report_file.read_bytes()

            logger.debug(f"Lock released for {self.report_file.name}")

        except Timeout:
            logger.error(f"Lock timeout ({self.lock_timeout}s) for {self.report_file}")
            raise ServiceUnavailable("Sales report is being generated, try again shortly")

        logger.info(
            f"Sales report exported: {summary.total_orders} orders, "
            f"revenue {summary.total_revenue} ({summary.date_range.from_} - {summary.date_range.to})"
        )
        return content

    @staticmethod
    def read(content: bytes) -> dict[str, pd.DataFrame]:
        """Load an exported workbook back into DataFrames keyed by sheet name."""
        return pd.read_excel(io.BytesIO(content), sheet_name=None, engine="openpyxl")
