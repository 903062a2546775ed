"""
                        Services Module

Business logic, one service per area. Services are created per request
around the request's database session and own its transaction.

Services:
    - orders: order placement, pricing and history
    - catalog: products, categories and ingredients
    - identity: registration, login and admin seeding
    - reports: file-locked Excel sales report export
    - storage: product image storage
"""

from tequilas.services.catalog import CatalogService
from tequilas.services.identity import IdentityService
from tequilas.services.orders import OrderService, price_order_lines
from tequilas.services.reports import SalesReportExporter

__all__ = [
    "CatalogService",
    "IdentityService",
    "OrderService",
    "price_order_lines",
    "SalesReportExporter",
]
