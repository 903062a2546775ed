"""
Tequilas API Client

Async client over httpx for the storefront flow: log in, browse the menu,
check out a Cart and read order history.

Usage:
    async with TequilasClient("http://localhost:8001") as client:
        await client.login("jane@example.com", "S3cret!x")
        products = await client.list_products()
        cart = Cart().add(products[0]["productId"], products[0]["name"], products[0]["price"])
        order = await client.place_order(cart, "Jane Doe", "1 Main St", "555-0100", "card")

Version: 1.0.0
"""

import logging
from typing import Any, Optional

import httpx

from tequilas.client.cart import Cart

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, payload: Any):
        self.status_code = status_code
        self.payload = payload
        detail = payload.get("detail") if isinstance(payload, dict) else payload
        super().__init__(f"HTTP {status_code}: {detail}")


class TequilasClient:
    """
    Thin async wrapper around the HTTP API.

    Args:
        base_url: Server root, e.g. "http://localhost:8001"
        token: Bearer token from an earlier login
        timeout: Per-request timeout in seconds
        transport: Custom httpx transport (e.g. httpx.ASGITransport(app) in tests)
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token = token
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "TequilasClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self._http.aclose()

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        response = await self._http.request(method, f"/api{path}", headers=self._headers(), **kwargs)
        if response.is_error:
            try:
                payload = response.json()
            except ValueError:
                payload = response.text
            logger.debug(f"{method} {path} failed: {response.status_code} {payload}")
            raise ApiError(response.status_code, payload)
        return response.json()

    async def register(self, user_name: str, email: str, password: str) -> dict[str, Any]:
        return await self._request(
            "POST",
            "/auth/register",
            json={"userName": user_name, "email": email, "password": password},
        )

    async def login(self, email: str, password: str) -> dict[str, Any]:
        """Log in and keep the token for subsequent calls."""
        data = await self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.token = data["token"]
        return data

    async def list_products(self) -> list[dict[str, Any]]:
        return await self._request("GET", "/products")

    async def place_order(
        self,
        cart: Cart,
        full_name: str,
        address: str,
        contact_number: str,
        payment_method: str,
    ) -> dict[str, Any]:
        """Submit the whole cart as one order."""
        return await self._request(
            "POST",
            "/orders",
            json={
                "fullName": full_name,
                "address": address,
                "contactNumber": contact_number,
                "paymentMethod": payment_method,
                "orderItems": cart.to_order_items(),
            },
        )

    async def my_orders(self) -> list[dict[str, Any]]:
        return await self._request("GET", "/orders/mine")

    async def order_summary(
        self,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
    ) -> dict[str, Any]:
        """Admin order list with count and revenue; dates are "YYYY-MM-DD"."""
        params = {k: v for k, v in (("fromDate", from_date), ("toDate", to_date)) if v}
        return await self._request("GET", "/orders", params=params)
