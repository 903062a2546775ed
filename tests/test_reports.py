from datetime import datetime
from decimal import Decimal

import pytest
from filelock import FileLock

from tequilas.core.errors import ServiceUnavailable
from tequilas.schemas import DateRange, OrderItemResponse, OrderResponse, OrderSummaryResponse
from tequilas.services.reports import XLSX_MEDIA_TYPE, SalesReportExporter


def summary_with_one_order() -> OrderSummaryResponse:
    return OrderSummaryResponse(
        total_orders=1,
        total_revenue=Decimal("21.97"),
        date_range=DateRange(from_="All time", to="All time"),
        orders=[
            OrderResponse(
                order_id=1,
                order_date=datetime(2024, 1, 15, 12, 30),
                total_amount=Decimal("21.97"),
                full_name="Jane Doe",
                address="1 Main St",
                contact_number="555-0100",
                payment_method="card",
                order_items=[
                    OrderItemResponse(
                        product_id=1,
                        product_name="Classic Cheese Pizza",
                        quantity=2,
                        unit_price=Decimal("9.99"),
                        line_total=Decimal("19.98"),
                    ),
                    OrderItemResponse(
                        product_id=3,
                        product_name="Coca Cola",
                        quantity=1,
                        unit_price=Decimal("1.99"),
                        line_total=Decimal("1.99"),
                    ),
                ],
            )
        ],
    )


def test_export_admin_order_range(client, user_headers, admin_headers, place_order, set_order_date):
    kept = place_order(user_headers, [(1, 2), (3, 1)])
    place_order(user_headers, [(4, 1)])
    dropped = place_order(user_headers, [(2, 1)])
    set_order_date(dropped["orderId"], datetime(2020, 5, 1, 9, 0))

    today = datetime.now().date().isoformat()
    response = client.get(
        "/api/orders/export",
        params={"fromDate": today, "toDate": today},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith(XLSX_MEDIA_TYPE)
    assert "attachment" in response.headers["content-disposition"]

    sheets = SalesReportExporter.read(response.content)
    orders, items = sheets["Orders"], sheets["Items"]
    assert len(orders) == 2
    assert dropped["orderId"] not in set(orders["order_id"])
    assert len(items) == 3

    row = orders[orders["order_id"] == kept["orderId"]].iloc[0]
    assert row["total_amount"] == pytest.approx(21.97)
    assert row["item_count"] == 3


def test_export_requires_admin(client, user_headers):
    assert client.get("/api/orders/export").status_code == 401
    assert client.get("/api/orders/export", headers=user_headers).status_code == 403


def test_exporter_writes_both_sheets(tmp_path):
    exporter = SalesReportExporter(data_dir=tmp_path / "reports", filename="report.xlsx", lock_timeout=5)

    content = exporter.export(summary_with_one_order())

    assert exporter.report_file.exists()
    sheets = SalesReportExporter.read(content)
    assert list(sheets["Orders"].columns) == SalesReportExporter.ORDER_COLUMNS
    assert list(sheets["Items"]["product_name"]) == ["Classic Cheese Pizza", "Coca Cola"]
    assert list(sheets["Items"]["line_total"]) == pytest.approx([19.98, 1.99])


def test_exporter_empty_summary_has_headers_only(tmp_path):
    exporter = SalesReportExporter(data_dir=tmp_path, lock_timeout=5)
    empty = OrderSummaryResponse(
        total_orders=0,
        total_revenue=Decimal("0.00"),
        date_range=DateRange(from_="2024-01-01", to="2024-01-01"),
        orders=[],
    )

    sheets = SalesReportExporter.read(exporter.export(empty))

    assert sheets["Orders"].empty
    assert list(sheets["Items"].columns) == SalesReportExporter.ITEM_COLUMNS


def test_exporter_reports_busy_lock(tmp_path):
    exporter = SalesReportExporter(data_dir=tmp_path, filename="busy.xlsx", lock_timeout=0)

    with FileLock(str(exporter.lock_file)):
        with pytest.raises(ServiceUnavailable):
            exporter.export(summary_with_one_order())
