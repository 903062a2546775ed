"""
Catalog Service

Products, ingredients and categories for the storefront and back office:
    - CRUD for all three entities
    - Product <-> ingredient association management (idempotent per pair)
    - Ingredient usage check and bulk create with per-row outcome
    - Product image storage side effects
    - Batch product lookup used by the order service for pricing

Version: 1.0.0
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tequilas.core.errors import Conflict, NotFound, ValidationFailed
from tequilas.models import Category, Ingredient, Product, ProductIngredient, ingredient_key
from tequilas.repositories import (
    CategoryRepository,
    IngredientInclude,
    IngredientRepository,
    ProductInclude,
    ProductRepository,
)
from tequilas.schemas import (
    AssignIngredientsResponse,
    BulkIngredientResult,
    CategoryRequest,
    CategoryResponse,
    IngredientDetailResponse,
    IngredientRequest,
    IngredientResponse,
    IngredientUsageResponse,
    ProductDetailResponse,
    ProductResponse,
    ProductUsage,
    SkippedIngredient,
)
from tequilas.services.storage import BaseImageStorage, get_image_storage

logger = logging.getLogger(__name__)

UNKNOWN_CATEGORY = "Unknown"
DUPLICATE_INGREDIENT = "An ingredient with this name already exists."


# =============================================================================
# DATA TRANSFER
# =============================================================================

@dataclass(frozen=True)
class ProductSnapshot:
    """Current catalog data of a product, as seen by the order service."""
    id: int
    name: str
    price: Decimal


@dataclass
class ImageUpload:
    filename: str
    content: bytes


@dataclass
class ProductInput:
    """Validated product form (create and update share it)."""
    name: str
    price: Decimal
    stock: int
    category_id: int
    description: Optional[str] = None
    ingredient_ids: list[int] = field(default_factory=list)
    image: Optional[ImageUpload] = None


# =============================================================================
# PROJECTIONS
# =============================================================================

def to_category_response(category: Category) -> CategoryResponse:
    return CategoryResponse(
        category_id=category.id,
        name=category.name,
        description=category.description,
    )


def to_ingredient_response(ingredient: Ingredient) -> IngredientResponse:
    return IngredientResponse(
        ingredient_id=ingredient.id,
        name=ingredient.name,
        description=ingredient.description,
    )


def to_product_response(product: Product) -> ProductResponse:
    """Requires product.category to be loaded."""
    return ProductResponse(
        product_id=product.id,
        name=product.name,
        description=product.description,
        price=product.price,
        stock=product.stock,
        image_url=product.image_url,
        category_id=product.category_id,
        category_name=product.category.name if product.category else UNKNOWN_CATEGORY,
    )


def to_product_detail(product: Product) -> ProductDetailResponse:
    """Requires product.category and product.product_ingredients[].ingredient to be loaded."""
    return ProductDetailResponse(
        **to_product_response(product).model_dump(),
        ingredients=[
            to_ingredient_response(pi.ingredient)
            for pi in sorted(product.product_ingredients, key=lambda pi: pi.ingredient_id)
            if pi.ingredient is not None
        ],
    )


# =============================================================================
# SERVICE
# =============================================================================

class CatalogService:
    """
    Catalog business rules on top of the catalog repositories.

    One instance per request; every mutating operation commits its own
    unit of work.
    """

    PRODUCT_DETAIL = ProductInclude.CATEGORY | ProductInclude.INGREDIENTS

    def __init__(self, db: AsyncSession, storage: Optional[BaseImageStorage] = None):
        self.db = db
        self.storage = storage or get_image_storage()
        self.products = ProductRepository(db)
        self.ingredients = IngredientRepository(db)
        self.categories = CategoryRepository(db)

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    # -------------------------------------------------------------------------
    # Lookup for the order service
    # -------------------------------------------------------------------------

    async def find_products_by_ids(self, ids: Iterable[int]) -> dict[int, ProductSnapshot]:
        """
        Batch lookup of products by id.

        Returns:
            Mapping of id -> snapshot for every id that exists; missing ids
            are simply absent.
        """
        products = await self.products.get_many(ids)
        return {
            p.id: ProductSnapshot(id=p.id, name=p.name, price=Decimal(p.price))
            for p in products
        }

    # -------------------------------------------------------------------------
    # Products
    # -------------------------------------------------------------------------

    async def list_products(self) -> list[ProductResponse]:
        products = await self.products.get_all(ProductInclude.CATEGORY)
        return [to_product_response(p) for p in products]

    async def _get_product_or_404(self, product_id: int, includes: ProductInclude, reload: bool = False) -> Product:
        product = await self.products.get_by_id(product_id, includes, reload=reload)
        if product is None:
            raise NotFound(f"Product with ID {product_id} not found.")
        return product

    async def get_product(self, product_id: int) -> ProductDetailResponse:
        product = await self._get_product_or_404(product_id, self.PRODUCT_DETAIL)
        return to_product_detail(product)

    async def _require_category(self, category_id: int) -> Category:
        if category_id <= 0:
            raise ValidationFailed("Please provide a valid category ID.")
        category = await self.categories.get_by_id(category_id)
        if category is None:
            raise ValidationFailed("Selected category does not exist.")
        return category

    async def _existing_ingredients(self, ingredient_ids: Iterable[int]) -> list[Ingredient]:
        """Resolve ids to ingredients, silently dropping unknown ids."""
        return await self.ingredients.get_many(ingredient_ids)

    async def _store_image(self, image: Optional[ImageUpload]) -> Optional[str]:
        if image is None:
            return None
        stored = await self.storage.save(image.filename, image.content)
        return stored.url

    async def create_product(self, data: ProductInput) -> ProductDetailResponse:
        """
        Create a product with its ingredient associations and optional image.

        Raises:
            ValidationFailed: Unknown category or unacceptable image
        """
        await self._require_category(data.category_id)
        ingredients = await self._existing_ingredients(data.ingredient_ids)
        image_url = await self._store_image(data.image)

        product = Product(
            name=data.name,
            description=data.description,
            price=data.price,
            stock=data.stock,
            category_id=data.category_id,
            image_url=image_url,
        )
        product.product_ingredients = [ProductIngredient(ingredient=i) for i in ingredients]

        try:
            await self.products.add(product)
            await self._commit()
        except SQLAlchemyError:
            await self.db.rollback()
            await self.storage.delete(image_url)
            logger.exception(f"Failed to create product '{data.name}'")
            raise

        logger.info(f"Product #{product.id} '{product.name}' created")
        created = await self._get_product_or_404(product.id, self.PRODUCT_DETAIL, reload=True)
        return to_product_detail(created)

    async def update_product(self, product_id: int, data: ProductInput) -> ProductDetailResponse:
        """
        Replace a product's fields and ingredient set; swap the image if a new one is sent.

        Raises:
            NotFound: Unknown product
            ValidationFailed: Unknown category or unacceptable image
        """
        product = await self._get_product_or_404(product_id, ProductInclude.INGREDIENTS)
        await self._require_category(data.category_id)
        ingredients = await self._existing_ingredients(data.ingredient_ids)
        new_image_url = await self._store_image(data.image)
        old_image_url = product.image_url

        product.name = data.name
        product.description = data.description
        product.price = data.price
        product.stock = data.stock
        product.category_id = data.category_id
        if new_image_url:
            product.image_url = new_image_url

        wanted = {i.id: i for i in ingredients}
        for pi in list(product.product_ingredients):
            if pi.ingredient_id not in wanted:
                product.product_ingredients.remove(pi)
        present = {pi.ingredient_id for pi in product.product_ingredients}
        for ingredient_id, ingredient in wanted.items():
            if ingredient_id not in present:
                product.product_ingredients.append(ProductIngredient(ingredient=ingredient))

        try:
            await self._commit()
        except SQLAlchemyError:
            await self.storage.delete(new_image_url)
            logger.exception(f"Failed to update product #{product_id}")
            raise

        if new_image_url and old_image_url:
            await self.storage.delete(old_image_url)

        logger.info(f"Product #{product_id} updated")
        updated = await self._get_product_or_404(product_id, self.PRODUCT_DETAIL, reload=True)
        return to_product_detail(updated)

    async def delete_product(self, product_id: int) -> str:
        """Delete a product and its image. Placed orders are untouched."""
        product = await self._get_product_or_404(product_id, ProductInclude.NONE)
        image_url = product.image_url

        await self.products.delete(product)
        await self._commit()
        await self.storage.delete(image_url)

        logger.info(f"Product #{product_id} deleted")
        return f"Product with ID {product_id} has been deleted successfully."

    async def assign_ingredients(self, product_id: int, ingredient_ids: list[int]) -> AssignIngredientsResponse:
        """
        Add ingredients to a product; pairs that already exist are left alone.

        Raises:
            NotFound: Unknown product
            ValidationFailed: Any unknown ingredient id (all of them are reported)
        """
        product = await self._get_product_or_404(product_id, ProductInclude.INGREDIENTS)
        ingredients = await self.ingredients.get_many(ingredient_ids)

        found = {i.id for i in ingredients}
        missing = sorted(set(ingredient_ids) - found)
        if missing:
            raise ValidationFailed(
                f"Ingredients with IDs [{', '.join(str(i) for i in missing)}] not found",
                extra={"missingIngredientIds": missing},
            )

        present = {pi.ingredient_id for pi in product.product_ingredients}
        added = 0
        for ingredient in ingredients:
            if ingredient.id not in present:
                product.product_ingredients.append(ProductIngredient(ingredient=ingredient))
                present.add(ingredient.id)
                added += 1

        await self._commit()
        logger.info(f"Assigned {added} new ingredient(s) to product #{product_id}")

        updated = await self._get_product_or_404(product_id, self.PRODUCT_DETAIL, reload=True)
        return AssignIngredientsResponse(
            message="Ingredients assigned successfully",
            added_count=added,
            product=to_product_detail(updated),
        )

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def list_categories(self) -> list[CategoryResponse]:
        return [to_category_response(c) for c in await self.categories.get_all()]

    async def _get_category_or_404(self, category_id: int) -> Category:
        category = await self.categories.get_by_id(category_id)
        if category is None:
            raise NotFound(f"Category with ID {category_id} not found.")
        return category

    async def get_category(self, category_id: int) -> CategoryResponse:
        return to_category_response(await self._get_category_or_404(category_id))

    async def create_category(self, request: CategoryRequest) -> CategoryResponse:
        category = Category(name=request.name, description=request.description)
        await self.categories.add(category)
        await self._commit()
        logger.info(f"Category #{category.id} '{category.name}' created")
        return to_category_response(category)

    async def update_category(self, category_id: int, request: CategoryRequest) -> CategoryResponse:
        category = await self._get_category_or_404(category_id)
        category.name = request.name
        category.description = request.description
        await self._commit()
        return to_category_response(category)

    async def delete_category(self, category_id: int) -> str:
        category = await self._get_category_or_404(category_id)
        product_count = await self.categories.count_products(category_id)
        if product_count:
            raise Conflict(
                f"Cannot delete category '{category.name}' because it is used by "
                f"{product_count} product(s).",
                extra={"productCount": product_count},
            )

        await self.categories.delete(category)
        await self._commit()
        logger.info(f"Category #{category_id} deleted")
        return f"Category '{category.name}' with ID {category_id} has been deleted successfully."

    # -------------------------------------------------------------------------
    # Ingredients
    # -------------------------------------------------------------------------

    async def list_ingredients(self) -> list[IngredientResponse]:
        return [to_ingredient_response(i) for i in await self.ingredients.get_all()]

    async def _get_ingredient_or_404(self, ingredient_id: int, includes: IngredientInclude) -> Ingredient:
        ingredient = await self.ingredients.get_by_id(ingredient_id, includes)
        if ingredient is None:
            raise NotFound(f"Ingredient with ID {ingredient_id} not found.")
        return ingredient

    async def get_ingredient(self, ingredient_id: int) -> IngredientDetailResponse:
        ingredient = await self._get_ingredient_or_404(ingredient_id, IngredientInclude.PRODUCTS)
        return IngredientDetailResponse(
            **to_ingredient_response(ingredient).model_dump(),
            products=[
                to_product_response(pi.product)
                for pi in sorted(ingredient.product_ingredients, key=lambda pi: pi.product_id)
            ],
        )

    async def create_ingredient(self, request: IngredientRequest) -> IngredientResponse:
        """
        Raises:
            Conflict: An ingredient with the same name (any casing) exists
        """
        if await self.ingredients.find_by_name(request.name) is not None:
            raise Conflict(DUPLICATE_INGREDIENT)

        ingredient = Ingredient(name=request.name, description=request.description)
        try:
            await self.ingredients.add(ingredient)
            await self._commit()
        except IntegrityError:
            await self.db.rollback()
            raise Conflict(DUPLICATE_INGREDIENT)

        logger.info(f"Ingredient #{ingredient.id} '{ingredient.name}' created")
        return to_ingredient_response(ingredient)

    async def update_ingredient(self, ingredient_id: int, request: IngredientRequest) -> IngredientResponse:
        ingredient = await self._get_ingredient_or_404(ingredient_id, IngredientInclude.NONE)
        if await self.ingredients.find_by_name(request.name, exclude_id=ingredient_id) is not None:
            raise Conflict(DUPLICATE_INGREDIENT)

        ingredient.name = request.name
        ingredient.description = request.description
        try:
            await self._commit()
        except IntegrityError:
            raise Conflict(DUPLICATE_INGREDIENT)
        return to_ingredient_response(ingredient)

    async def delete_ingredient(self, ingredient_id: int) -> str:
        """
        Raises:
            NotFound: Unknown ingredient
            Conflict: Still referenced by at least one product
        """
        ingredient = await self._get_ingredient_or_404(ingredient_id, IngredientInclude.PRODUCTS)
        product_count = len(ingredient.product_ingredients)
        if product_count:
            raise Conflict(
                f"Cannot delete ingredient '{ingredient.name}' because it is being used by "
                f"{product_count} product(s). Remove it from all products first.",
                extra={"productCount": product_count},
            )

        name = ingredient.name
        await self.ingredients.delete(ingredient)
        await self._commit()
        logger.info(f"Ingredient #{ingredient_id} deleted")
        return f"Ingredient '{name}' with ID {ingredient_id} has been deleted successfully."

    async def check_ingredient_usage(self, ingredient_id: int) -> IngredientUsageResponse:
        ingredient = await self._get_ingredient_or_404(ingredient_id, IngredientInclude.PRODUCTS)
        usages = sorted(ingredient.product_ingredients, key=lambda pi: pi.product_id)
        return IngredientUsageResponse(
            ingredient_id=ingredient.id,
            ingredient_name=ingredient.name,
            is_in_use=bool(usages),
            product_count=len(usages),
            products=[
                ProductUsage(product_id=pi.product.id, product_name=pi.product.name)
                for pi in usages
            ],
        )

    async def bulk_create_ingredients(self, requests: list[IngredientRequest]) -> BulkIngredientResult:
        """
        Create many ingredients, skipping duplicates instead of failing the batch.

        A name is a duplicate if it matches (case-insensitively) a stored
        ingredient or an earlier row of the same batch.
        """
        if not requests:
            raise ValidationFailed("No ingredients provided for creation.")

        known_names = await self.ingredients.existing_names()
        created: list[IngredientResponse] = []
        skipped: list[SkippedIngredient] = []

        for request in requests:
            key = ingredient_key(request.name)
            if key in known_names:
                skipped.append(SkippedIngredient(
                    name=request.name,
                    reason=f"Ingredient '{request.name}' already exists and was skipped.",
                ))
                continue

            ingredient = Ingredient(name=request.name, description=request.description)
            try:
                async with self.db.begin_nested():
                    await self.ingredients.add(ingredient)
            except IntegrityError as e:
                logger.warning(f"Bulk create skipped '{request.name}': {e.orig}")
                skipped.append(SkippedIngredient(
                    name=request.name,
                    reason=f"Failed to create ingredient '{request.name}': duplicate or invalid value.",
                ))
                continue

            known_names.add(key)
            created.append(to_ingredient_response(ingredient))

        await self._commit()
        logger.info(f"Bulk ingredient create: {len(created)} created, {len(skipped)} skipped")

        return BulkIngredientResult(
            total_processed=len(requests),
            success_count=len(created),
            skipped_count=len(skipped),
            created_ingredients=created,
            skipped_ingredients=skipped,
        )
