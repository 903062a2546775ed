"""
Client-Local Cart Store

The cart lives only on the client until checkout. Every operation returns a
new Cart snapshot and leaves the old one untouched:

    cart = Cart()
    cart = cart.add(1, "Classic Cheese Pizza", Decimal("9.99"))
    cart = cart.add(1, "Classic Cheese Pizza", Decimal("9.99"))   # quantity 2
    cart = cart.update_quantity(1, 5)
    payload = cart.to_order_items()

Prices held here are for display only; the server prices the order.

Version: 1.0.0
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any, Optional


@dataclass(frozen=True)
class CartLine:
    product_id: int
    name: str
    price: Decimal
    quantity: int = 1
    image_url: Optional[str] = None

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


@dataclass(frozen=True)
class Cart:
    lines: tuple[CartLine, ...] = ()

    def __len__(self) -> int:
        return len(self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def item_count(self) -> int:
        """Total units across all lines."""
        return sum(line.quantity for line in self.lines)

    @property
    def estimated_total(self) -> Decimal:
        return sum((line.line_total for line in self.lines), Decimal("0.00"))

    def get(self, product_id: int) -> Optional[CartLine]:
        return next((line for line in self.lines if line.product_id == product_id), None)

    def add(
        self,
        product_id: int,
        name: str,
        price: Decimal,
        image_url: Optional[str] = None,
    ) -> "Cart":
        """Add one unit; an existing line for the product is incremented instead."""
        if self.get(product_id) is None:
            line = CartLine(product_id=product_id, name=name, price=Decimal(price), image_url=image_url)
            return Cart(self.lines + (line,))

        return Cart(tuple(
            replace(line, quantity=line.quantity + 1) if line.product_id == product_id else line
            for line in self.lines
        ))

    def update_quantity(self, product_id: int, quantity: int) -> "Cart":
        """Set a line's quantity; values below 1 are raised to 1."""
        quantity = max(quantity, 1)
        return Cart(tuple(
            replace(line, quantity=quantity) if line.product_id == product_id else line
            for line in self.lines
        ))

    def remove(self, product_id: int) -> "Cart":
        return Cart(tuple(line for line in self.lines if line.product_id != product_id))

    def clear(self) -> "Cart":
        return Cart()

    def to_order_items(self) -> list[dict[str, Any]]:
        """The `orderItems` payload of a checkout request."""
        return [{"productId": line.product_id, "quantity": line.quantity} for line in self.lines]
