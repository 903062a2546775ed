from decimal import Decimal

import pytest

from tequilas.core.errors import ValidationFailed
from tequilas.schemas import OrderItemRequest
from tequilas.services.catalog import ProductSnapshot
from tequilas.services.orders import find_missing_products, price_order_lines

CATALOG = {
    1: ProductSnapshot(id=1, name="Classic Cheese Pizza", price=Decimal("9.99")),
    3: ProductSnapshot(id=3, name="Coca Cola", price=Decimal("1.99")),
    7: ProductSnapshot(id=7, name="Mint", price=Decimal("0.10")),
}


def lines(*pairs):
    return [OrderItemRequest(product_id=pid, quantity=qty) for pid, qty in pairs]


def test_total_is_sum_of_line_totals():
    priced, total = price_order_lines(lines((1, 2), (3, 1)), CATALOG)

    assert [line.line_total for line in priced] == [Decimal("19.98"), Decimal("1.99")]
    assert total == Decimal("21.97")


def test_decimal_arithmetic_is_exact():
    _, total = price_order_lines(lines((7, 1), (7, 2)), CATALOG)

    assert total == Decimal("0.30")


def test_line_order_is_preserved():
    priced, _ = price_order_lines(lines((3, 1), (1, 4), (3, 2)), CATALOG)

    assert [(line.product_id, line.quantity) for line in priced] == [(3, 1), (1, 4), (3, 2)]
    assert all(line.unit_price == CATALOG[line.product_id].price for line in priced)


def test_missing_products_are_reported_once_in_request_order():
    assert find_missing_products([5, 1, 4, 5, 3], CATALOG) == [5, 4]


def test_pricing_rejects_unknown_products():
    with pytest.raises(ValidationFailed) as exc_info:
        price_order_lines(lines((1, 1), (42, 1), (43, 1)), CATALOG)

    assert exc_info.value.status_code == 400
    assert exc_info.value.extra == {"missingProductIds": [42, 43]}
