"""
Request Dependencies

Bearer-token verification, role gates and per-request service factories.

    get_current_claims   -> 401 when the token is missing or invalid
    get_optional_claims  -> None instead of 401
    require_admin        -> 403 when the verified caller lacks the admin role

Version: 1.0.0
"""

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from tequilas.core.errors import Forbidden, Unauthenticated
from tequilas.core.security import Claims, decode_token, is_admin, is_authenticated
from tequilas.database import get_db
from tequilas.services import CatalogService, IdentityService, OrderService, SalesReportExporter
from tequilas.services.storage import get_image_storage

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


# =============================================================================
# CLAIMS
# =============================================================================

async def get_optional_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[Claims]:
    """Verified claims, or None when no usable token accompanies the request."""
    if credentials is None:
        return None
    try:
        return decode_token(credentials.credentials)
    except Unauthenticated as e:
        logger.debug(f"Ignoring bearer token: {e.detail}")
        return None


async def get_current_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Claims:
    if credentials is None:
        raise Unauthenticated("Missing bearer token")

    claims = decode_token(credentials.credentials)
    if not is_authenticated(claims):
        raise Unauthenticated("Token has expired")
    return claims


async def require_admin(claims: Claims = Depends(get_current_claims)) -> Claims:
    if not is_admin(claims):
        logger.info(f"User #{claims.subject_id} denied admin access")
        raise Forbidden("Admin role required")
    return claims


# =============================================================================
# SERVICES
# =============================================================================

def get_catalog_service(db: AsyncSession = Depends(get_db)) -> CatalogService:
    return CatalogService(db, storage=get_image_storage())


def get_order_service(
    db: AsyncSession = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog_service),
) -> OrderService:
    return OrderService(db, catalog=catalog)


def get_identity_service(db: AsyncSession = Depends(get_db)) -> IdentityService:
    return IdentityService(db)


def get_report_exporter() -> SalesReportExporter:
    return SalesReportExporter()
