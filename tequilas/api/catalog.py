"""
Catalog endpoints.

Storefront (public):
    - GET /products, GET /products/{id}, GET /categories
    - POST /products/{id}/ingredients (admin)

Back office (admin role):
    - /admin/products      multipart forms with optional image upload
    - /admin/ingredients   JSON CRUD, usage check, bulk create
    - /admin/categories    JSON CRUD
"""

import logging
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from tequilas.api.deps import get_catalog_service, require_admin
from tequilas.core.errors import ValidationFailed
from tequilas.schemas import (
    AssignIngredientsRequest,
    AssignIngredientsResponse,
    BulkIngredientResult,
    CategoryRequest,
    CategoryResponse,
    ErrorResponse,
    IngredientDetailResponse,
    IngredientRequest,
    IngredientResponse,
    IngredientUsageResponse,
    MessageResponse,
    ProductDetailResponse,
    ProductResponse,
)
from tequilas.services import CatalogService
from tequilas.services.catalog import ImageUpload, ProductInput

logger = logging.getLogger(__name__)

storefront_router = APIRouter(tags=["Catalog"])
admin_router = APIRouter(prefix="/admin", dependencies=[Depends(require_admin)])

ADMIN_ERRORS = {401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}}


# =============================================================================
# STOREFRONT
# =============================================================================

@storefront_router.get("/products", response_model=List[ProductResponse])
async def list_products(service: CatalogService = Depends(get_catalog_service)) -> List[ProductResponse]:
    return await service.list_products()


@storefront_router.get(
    "/products/{product_id}",
    response_model=ProductDetailResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_product(
    product_id: int,
    service: CatalogService = Depends(get_catalog_service),
) -> ProductDetailResponse:
    return await service.get_product(product_id)


@storefront_router.post(
    "/products/{product_id}/ingredients",
    response_model=AssignIngredientsResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, **ADMIN_ERRORS},
    dependencies=[Depends(require_admin)],
    summary="Attach ingredients to a product (admin)",
)
async def assign_ingredients(
    product_id: int,
    request: AssignIngredientsRequest,
    service: CatalogService = Depends(get_catalog_service),
) -> AssignIngredientsResponse:
    """Pairs that already exist are left as they are."""
    return await service.assign_ingredients(product_id, request.ingredient_ids)


@storefront_router.get("/categories", response_model=List[CategoryResponse])
async def list_categories(service: CatalogService = Depends(get_catalog_service)) -> List[CategoryResponse]:
    return await service.list_categories()


# =============================================================================
# ADMIN: PRODUCTS
# =============================================================================

async def product_form(
    name: str = Form(..., min_length=1, max_length=100),
    price: Decimal = Form(..., ge=0, max_digits=10, decimal_places=2),
    stock: int = Form(..., ge=0),
    category_id: int = Form(..., alias="categoryId"),
    description: Optional[str] = Form(None, max_length=2000),
    ingredient_ids: List[int] = Form([], alias="ingredientIds"),
    image: Optional[UploadFile] = File(None),
) -> ProductInput:
    """Collect the multipart product form into a ProductInput."""
    name = name.strip()
    if not name:
        raise ValidationFailed(
            "Product name must not be blank",
            extra={"errors": [{"field": "name", "message": "must not be blank"}]},
        )

    upload = None
    if image is not None and image.filename:
        upload = ImageUpload(filename=image.filename, content=await image.read())

    return ProductInput(
        name=name,
        price=price,
        stock=stock,
        category_id=category_id,
        description=description,
        ingredient_ids=ingredient_ids,
        image=upload,
    )


@admin_router.get("/products", response_model=List[ProductResponse], tags=["Admin Products"])
async def admin_list_products(service: CatalogService = Depends(get_catalog_service)) -> List[ProductResponse]:
    return await service.list_products()


@admin_router.get(
    "/products/{product_id}",
    response_model=ProductDetailResponse,
    responses={404: {"model": ErrorResponse}, **ADMIN_ERRORS},
    tags=["Admin Products"],
)
async def admin_get_product(
    product_id: int,
    service: CatalogService = Depends(get_catalog_service),
) -> ProductDetailResponse:
    return await service.get_product(product_id)


@admin_router.post(
    "/products",
    response_model=ProductDetailResponse,
    responses={400: {"model": ErrorResponse}, **ADMIN_ERRORS},
    tags=["Admin Products"],
)
async def admin_create_product(
    data: ProductInput = Depends(product_form),
    service: CatalogService = Depends(get_catalog_service),
) -> ProductDetailResponse:
    return await service.create_product(data)


@admin_router.put(
    "/products/{product_id}",
    response_model=ProductDetailResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, **ADMIN_ERRORS},
    tags=["Admin Products"],
)
async def admin_update_product(
    product_id: int,
    data: ProductInput = Depends(product_form),
    service: CatalogService = Depends(get_catalog_service),
) -> ProductDetailResponse:
    """Replaces fields and the ingredient set; the image changes only if a new file is sent."""
    return await service.update_product(product_id, data)


@admin_router.delete(
    "/products/{product_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}, **ADMIN_ERRORS},
    tags=["Admin Products"],
)
async def admin_delete_product(
    product_id: int,
    service: CatalogService = Depends(get_catalog_service),
) -> MessageResponse:
    return MessageResponse(message=await service.delete_product(product_id))


# =============================================================================
# ADMIN: INGREDIENTS
# =============================================================================

@admin_router.get("/ingredients", response_model=List[IngredientResponse], tags=["Admin Ingredients"])
async def admin_list_ingredients(
    service: CatalogService = Depends(get_catalog_service),
) -> List[IngredientResponse]:
    return await service.list_ingredients()


@admin_router.get(
    "/ingredients/check-usage/{ingredient_id}",
    response_model=IngredientUsageResponse,
    responses={404: {"model": ErrorResponse}, **ADMIN_ERRORS},
    tags=["Admin Ingredients"],
)
async def admin_check_ingredient_usage(
    ingredient_id: int,
    service: CatalogService = Depends(get_catalog_service),
) -> IngredientUsageResponse:
    return await service.check_ingredient_usage(ingredient_id)


@admin_router.post(
    "/ingredients/bulk-create",
    response_model=BulkIngredientResult,
    responses={400: {"model": ErrorResponse}, **ADMIN_ERRORS},
    tags=["Admin Ingredients"],
)
async def admin_bulk_create_ingredients(
    requests: List[IngredientRequest],
    service: CatalogService = Depends(get_catalog_service),
) -> BulkIngredientResult:
    """Creates every new name and reports duplicates per row instead of failing the batch."""
    return await service.bulk_create_ingredients(requests)


@admin_router.get(
    "/ingredients/{ingredient_id}",
    response_model=IngredientDetailResponse,
    responses={404: {"model": ErrorResponse}, **ADMIN_ERRORS},
    tags=["Admin Ingredients"],
)
async def admin_get_ingredient(
    ingredient_id: int,
    service: CatalogService = Depends(get_catalog_service),
) -> IngredientDetailResponse:
    return await service.get_ingredient(ingredient_id)


@admin_router.post(
    "/ingredients",
    response_model=IngredientResponse,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}, **ADMIN_ERRORS},
    tags=["Admin Ingredients"],
)
async def admin_create_ingredient(
    request: IngredientRequest,
    service: CatalogService = Depends(get_catalog_service),
) -> IngredientResponse:
    return await service.create_ingredient(request)


@admin_router.put(
    "/ingredients/{ingredient_id}",
    response_model=IngredientResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}, **ADMIN_ERRORS},
    tags=["Admin Ingredients"],
)
async def admin_update_ingredient(
    ingredient_id: int,
    request: IngredientRequest,
    service: CatalogService = Depends(get_catalog_service),
) -> IngredientResponse:
    return await service.update_ingredient(ingredient_id, request)


@admin_router.delete(
    "/ingredients/{ingredient_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}, **ADMIN_ERRORS},
    tags=["Admin Ingredients"],
)
async def admin_delete_ingredient(
    ingredient_id: int,
    service: CatalogService = Depends(get_catalog_service),
) -> MessageResponse:
    """Refused with 409 while any product still uses the ingredient."""
    return MessageResponse(message=await service.delete_ingredient(ingredient_id))


# =============================================================================
# ADMIN: CATEGORIES
# =============================================================================

@admin_router.get("/categories", response_model=List[CategoryResponse], tags=["Admin Categories"])
async def admin_list_categories(
    service: CatalogService = Depends(get_catalog_service),
) -> List[CategoryResponse]:
    return await service.list_categories()


@admin_router.get(
    "/categories/{category_id}",
    response_model=CategoryResponse,
    responses={404: {"model": ErrorResponse}, **ADMIN_ERRORS},
    tags=["Admin Categories"],
)
async def admin_get_category(
    category_id: int,
    service: CatalogService = Depends(get_catalog_service),
) -> CategoryResponse:
    return await service.get_category(category_id)


@admin_router.post(
    "/categories",
    response_model=CategoryResponse,
    responses={400: {"model": ErrorResponse}, **ADMIN_ERRORS},
    tags=["Admin Categories"],
)
async def admin_create_category(
    request: CategoryRequest,
    service: CatalogService = Depends(get_catalog_service),
) -> CategoryResponse:
    return await service.create_category(request)


@admin_router.put(
    "/categories/{category_id}",
    response_model=CategoryResponse,
    responses={404: {"model": ErrorResponse}, **ADMIN_ERRORS},
    tags=["Admin Categories"],
)
async def admin_update_category(
    category_id: int,
    request: CategoryRequest,
    service: CatalogService = Depends(get_catalog_service),
) -> CategoryResponse:
    return await service.update_category(category_id, request)


@admin_router.delete(
    "/categories/{category_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}, **ADMIN_ERRORS},
    tags=["Admin Categories"],
)
async def admin_delete_category(
    category_id: int,
    service: CatalogService = Depends(get_catalog_service),
) -> MessageResponse:
    return MessageResponse(message=await service.delete_category(category_id))
