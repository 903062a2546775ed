"""
HTTP API routers, all mounted under /api.
"""

from fastapi import APIRouter

from tequilas.api import auth, catalog, orders

api_router = APIRouter(prefix="/api")
api_router.include_router(auth.router)
api_router.include_router(orders.router)
api_router.include_router(catalog.storefront_router)
api_router.include_router(catalog.admin_router)

__all__ = ["api_router"]
