import asyncio
from decimal import Decimal

import httpx
import pytest

from tequilas.client import ApiError, Cart, TequilasClient
from tequilas.main import app


def run_with_client(flow):
    async def _run():
        transport = httpx.ASGITransport(app=app)
        async with TequilasClient("http://testserver", transport=transport) as api:
            return await flow(api)

    return asyncio.run(_run())


def test_checkout_flow(client):
    async def flow(api):
        await api.register("carol", "carol@example.com", "S3cret!pass")
        login = await api.login("carol@example.com", "S3cret!pass")

        products = {p["productId"]: p for p in await api.list_products()}
        cart = Cart()
        for product_id in (1, 1, 3):
            product = products[product_id]
            cart = cart.add(product_id, product["name"], Decimal(str(product["price"])))

        order = await api.place_order(cart, "Carol King", "9 Elm St", "555-0199", "cash")
        return login, cart, order, await api.my_orders()

    login, cart, order, history = run_with_client(flow)

    assert login["userName"] == "carol"
    assert Decimal(str(order["totalAmount"])) == cart.estimated_total == Decimal("21.97")
    assert [o["orderId"] for o in history] == [order["orderId"]]


def test_api_errors_carry_status_and_body(client):
    async def flow(api):
        return await api.place_order(Cart().add(1, "Classic Cheese Pizza", Decimal("9.99")), "A", "B", "C", "card")

    with pytest.raises(ApiError) as exc_info:
        run_with_client(flow)

    assert exc_info.value.status_code == 401
    assert exc_info.value.payload["success"] is False


def test_admin_summary(client):
    async def flow(api):
        await api.login("admin@site.com", "Admin123$")
        return await api.order_summary()

    summary = run_with_client(flow)

    assert summary["totalOrders"] == 0
    assert summary["dateRange"] == {"from": "All time", "to": "All time"}
