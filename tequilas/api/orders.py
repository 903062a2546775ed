"""
Order endpoints.

Customers place orders and read their own history; admins list every order
with a revenue summary and export it as an Excel workbook.
"""

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from starlette.concurrency import run_in_threadpool

from tequilas.api.deps import (
    get_current_claims,
    get_optional_claims,
    get_order_service,
    get_report_exporter,
    require_admin,
)
from tequilas.core.security import Claims, is_admin
from tequilas.schemas import ErrorResponse, OrderCreateRequest, OrderResponse, OrderSummaryResponse
from tequilas.services import OrderService, SalesReportExporter
from tequilas.services.reports import XLSX_MEDIA_TYPE

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.post(
    "",
    response_model=OrderResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Place an order",
)
async def create_order(
    request: OrderCreateRequest,
    claims: Optional[Claims] = Depends(get_optional_claims),
    service: OrderService = Depends(get_order_service),
) -> OrderResponse:
    """
    Submit the whole cart with delivery details.

    Prices come from the catalog at submission time; client-side prices are
    never trusted. Unknown products reject the whole order with
    `missingProductIds`.
    """
    return await service.create_order(request, claims.subject_id if claims else None)


@router.get(
    "/mine",
    response_model=List[OrderResponse],
    responses={401: {"model": ErrorResponse}},
    summary="My orders, newest first",
)
async def my_orders(
    claims: Claims = Depends(get_current_claims),
    service: OrderService = Depends(get_order_service),
) -> List[OrderResponse]:
    return await service.get_my_orders(claims.subject_id)


@router.get(
    "",
    response_model=OrderSummaryResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
    summary="All orders with revenue summary (admin)",
)
async def list_orders(
    from_date: Optional[date] = Query(None, alias="fromDate"),
    to_date: Optional[date] = Query(None, alias="toDate"),
    _: Claims = Depends(require_admin),
    service: OrderService = Depends(get_order_service),
) -> OrderSummaryResponse:
    """Both bounds are inclusive calendar dates; omitted bounds are open."""
    return await service.get_all_orders(from_date, to_date)


@router.get(
    "/export",
    response_class=Response,
    responses={
        200: {"content": {XLSX_MEDIA_TYPE: {}}},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
    summary="Download the sales report workbook (admin)",
)
async def export_orders(
    from_date: Optional[date] = Query(None, alias="fromDate"),
    to_date: Optional[date] = Query(None, alias="toDate"),
    claims: Claims = Depends(require_admin),
    service: OrderService = Depends(get_order_service),
    exporter: SalesReportExporter = Depends(get_report_exporter),
) -> Response:
    summary = await service.get_all_orders(from_date, to_date)
    content = await run_in_threadpool(exporter.export, summary)

    logger.info(f"Admin #{claims.subject_id} downloaded sales report ({summary.total_orders} orders)")

    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{exporter.report_file.name}"'},
    )


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="One order (owner or admin)",
)
async def get_order(
    order_id: int,
    claims: Claims = Depends(get_current_claims),
    service: OrderService = Depends(get_order_service),
) -> OrderResponse:
    return await service.get_order_by_id(order_id, claims.subject_id, is_admin(claims))
