"""
Catalog repositories: categories, products, ingredients and their join.
"""

from enum import Flag, auto
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from tequilas.models import Category, Ingredient, Product, ProductIngredient, ingredient_key
from tequilas.repositories.base import Repository


class CategoryInclude(Flag):
    NONE = 0
    PRODUCTS = auto()


class ProductInclude(Flag):
    NONE = 0
    CATEGORY = auto()
    INGREDIENTS = auto()


class IngredientInclude(Flag):
    NONE = 0
    PRODUCTS = auto()


class CategoryRepository(Repository[Category, CategoryInclude]):
    model = Category
    include_type = CategoryInclude

    def _loader_options(self, includes: CategoryInclude) -> list[Any]:
        options = []
        if CategoryInclude.PRODUCTS in includes:
            options.append(selectinload(Category.products))
        return options

    async def count_products(self, category_id: int) -> int:
        result = await self.db.execute(
            select(func.count(Product.id)).where(Product.category_id == category_id)
        )
        return result.scalar() or 0


class ProductRepository(Repository[Product, ProductInclude]):
    model = Product
    include_type = ProductInclude

    def _loader_options(self, includes: ProductInclude) -> list[Any]:
        options = []
        if ProductInclude.CATEGORY in includes:
            options.append(selectinload(Product.category))
        if ProductInclude.INGREDIENTS in includes:
            options.append(
                selectinload(Product.product_ingredients).selectinload(ProductIngredient.ingredient)
            )
        return options


class IngredientRepository(Repository[Ingredient, IngredientInclude]):
    model = Ingredient
    include_type = IngredientInclude

    def _loader_options(self, includes: IngredientInclude) -> list[Any]:
        options = []
        if IngredientInclude.PRODUCTS in includes:
            options.append(
                selectinload(Ingredient.product_ingredients)
                .selectinload(ProductIngredient.product)
                .selectinload(Product.category)
            )
        return options

    async def find_by_name(self, name: str, exclude_id: Optional[int] = None) -> Optional[Ingredient]:
        """Case-insensitive lookup by name."""
        query = select(Ingredient).where(Ingredient.name_key == ingredient_key(name))
        if exclude_id is not None:
            query = query.where(Ingredient.id != exclude_id)
        result = await self.db.execute(query.limit(1))
        return result.scalars().first()

    async def existing_names(self) -> set[str]:
        """Normalised keys of every stored ingredient."""
        result = await self.db.execute(select(Ingredient.name_key))
        return set(result.scalars().all())
