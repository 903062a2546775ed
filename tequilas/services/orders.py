"""
Order Service

Turns a submitted cart into a durable, correctly priced order and answers
order history queries with access control.

Order placement:
    1. Request fields are validated by the OrderCreateRequest schema
    2. The caller must carry verified claims
    3. Distinct product ids are fetched from the catalog in one query
    4. Any missing product rejects the whole order (all missing ids reported)
    5. Each line copies the product's current price (price snapshot)
    6. Order + items are committed as one unit of work

Money is decimal.Decimal end to end; the stored total is never recomputed.

Version: 1.0.0
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Iterable, Mapping, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tequilas.core.errors import NotFound, Unauthenticated, ValidationFailed
from tequilas.models import Order, OrderItem
from tequilas.repositories import OrderInclude, OrderRepository
from tequilas.schemas import (
    DateRange,
    OrderCreateRequest,
    OrderItemRequest,
    OrderItemResponse,
    OrderResponse,
    OrderSummaryResponse,
)
from tequilas.services.catalog import CatalogService, ProductSnapshot

logger = logging.getLogger(__name__)

UNKNOWN_PRODUCT = "Unknown Product"
ALL_TIME = "All time"
ZERO = Decimal("0.00")


# =============================================================================
# PRICING
# =============================================================================

@dataclass(frozen=True)
class PricedLine:
    """One cart line priced against the catalog."""
    product_id: int
    quantity: int
    unit_price: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


def find_missing_products(
    product_ids: Iterable[int],
    catalog: Mapping[int, ProductSnapshot],
) -> list[int]:
    """Distinct requested ids with no catalog entry, in request order."""
    missing: list[int] = []
    for product_id in product_ids:
        if product_id not in catalog and product_id not in missing:
            missing.append(product_id)
    return missing


def price_order_lines(
    lines: Sequence[OrderItemRequest],
    catalog: Mapping[int, ProductSnapshot],
) -> tuple[list[PricedLine], Decimal]:
    """
    Price every line at the product's current catalog price.

    Args:
        lines: Requested (product_id, quantity) lines
        catalog: Snapshots of every referenced product

    Returns:
        (priced lines, order total)

    Raises:
        ValidationFailed: If a line references a product missing from catalog
    """
    missing = find_missing_products((line.product_id for line in lines), catalog)
    if missing:
        raise ValidationFailed(
            f"Products with IDs [{', '.join(str(i) for i in missing)}] not found",
            extra={"missingProductIds": missing},
        )

    priced = [
        PricedLine(
            product_id=line.product_id,
            quantity=line.quantity,
            unit_price=catalog[line.product_id].price,
        )
        for line in lines
    ]
    total = sum((line.line_total for line in priced), ZERO)
    return priced, total


# =============================================================================
# PROJECTION
# =============================================================================

def to_order_response(order: Order, product_names: Mapping[int, str]) -> OrderResponse:
    """
    Render an order with its items.

    Args:
        order: Order with items loaded
        product_names: Current catalog names; absent ids render as "Unknown Product"
    """
    return OrderResponse(
        order_id=order.id,
        order_date=order.order_date,
        total_amount=order.total_amount,
        full_name=order.full_name,
        address=order.address,
        contact_number=order.contact_number,
        payment_method=order.payment_method,
        order_items=[
            OrderItemResponse(
                product_id=item.product_id,
                product_name=product_names.get(item.product_id, UNKNOWN_PRODUCT),
                quantity=item.quantity,
                unit_price=item.unit_price,
                line_total=item.unit_price * item.quantity,
            )
            for item in order.items
        ],
    )


# =============================================================================
# SERVICE
# =============================================================================

class OrderService:
    """
    Order placement and retrieval.

    Example:
        >>> service = OrderService(db)
        >>> order = await service.create_order(request, acting_user_id=claims.subject_id)
        >>> print(order.total_amount)
    """

    def __init__(self, db: AsyncSession, catalog: Optional[CatalogService] = None):
        self.db = db
        self.catalog = catalog or CatalogService(db)
        self.orders = OrderRepository(db)

    async def _product_names(self, orders: Iterable[Order]) -> dict[int, str]:
        """Resolve every product referenced by `orders` with one catalog lookup."""
        ids = {item.product_id for order in orders for item in order.items}
        snapshots = await self.catalog.find_products_by_ids(ids)
        return {product_id: snap.name for product_id, snap in snapshots.items()}

    async def _project(self, orders: list[Order]) -> list[OrderResponse]:
        names = await self._product_names(orders)
        return [to_order_response(order, names) for order in orders]

    async def create_order(
        self,
        request: OrderCreateRequest,
        acting_user_id: Optional[int],
    ) -> OrderResponse:
        """
        Place an order for the authenticated user.

        Args:
            request: Validated checkout request
            acting_user_id: Subject id from verified claims (None if unauthenticated)

        Returns:
            OrderResponse: The persisted order

        Raises:
            Unauthenticated: No verified caller
            ValidationFailed: One or more products do not exist
        """
        if acting_user_id is None:
            raise Unauthenticated("User not found")

        product_ids = list(dict.fromkeys(line.product_id for line in request.order_items))
        catalog = await self.catalog.find_products_by_ids(product_ids)

        try:
            priced, total = price_order_lines(request.order_items, catalog)
        except ValidationFailed:
            # Nothing was written; end the read-only transaction
            await self.db.rollback()
            raise

        order = Order(
            user_id=acting_user_id,
            order_date=datetime.now(),
            total_amount=total,
            full_name=request.full_name,
            address=request.address,
            contact_number=request.contact_number,
            payment_method=request.payment_method,
            items=[
                OrderItem(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                )
                for line in priced
            ],
        )

        try:
            self.db.add(order)
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            logger.exception(f"Failed to persist order for user #{acting_user_id}")
            raise

        logger.info(
            f"Order #{order.id} created for user #{acting_user_id}: "
            f"{len(priced)} line(s), total {total}"
        )

        names = {product_id: snap.name for product_id, snap in catalog.items()}
        return to_order_response(order, names)

    async def get_my_orders(self, acting_user_id: int) -> list[OrderResponse]:
        """All orders of the caller, newest first (empty list when none)."""
        orders = await self.orders.list_for_user(acting_user_id)
        return await self._project(orders)

    async def get_all_orders(
        self,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
    ) -> OrderSummaryResponse:
        """
        Every order, optionally limited to an inclusive calendar-date range,
        with count and revenue summary.

        Raises:
            ValidationFailed: from_date is after to_date
        """
        if from_date and to_date and from_date > to_date:
            raise ValidationFailed("fromDate must be on or before toDate")

        start = datetime.combine(from_date, time.min) if from_date else None
        end = datetime.combine(to_date + timedelta(days=1), time.min) if to_date else None

        orders = await self.orders.list_between(start, end)
        projected = await self._project(orders)

        return OrderSummaryResponse(
            total_orders=len(orders),
            total_revenue=sum((o.total_amount for o in orders), ZERO),
            date_range=DateRange(
                from_=from_date.isoformat() if from_date else ALL_TIME,
                to=to_date.isoformat() if to_date else ALL_TIME,
            ),
            orders=projected,
        )

    async def get_order_by_id(
        self,
        order_id: int,
        acting_user_id: int,
        is_admin: bool,
    ) -> OrderResponse:
        """
        One order, visible to its owner and to admins.

        Raises:
            NotFound: Order missing, or owned by someone else and caller is not admin
        """
        order = await self.orders.get_by_id(order_id, OrderInclude.ITEMS)
        if order is None or (not is_admin and order.user_id != acting_user_id):
            raise NotFound("Order not found")

        projected = await self._project([order])
        return projected[0]
