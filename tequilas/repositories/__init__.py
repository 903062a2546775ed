"""
Repositories Module

Per-entity data access built on one generic Repository type.
"""

from tequilas.repositories.base import Repository
from tequilas.repositories.catalog import (
    CategoryInclude,
    CategoryRepository,
    IngredientInclude,
    IngredientRepository,
    ProductInclude,
    ProductRepository,
)
from tequilas.repositories.orders import (
    OrderInclude,
    OrderRepository,
    UserRepository,
)

__all__ = [
    "Repository",
    "CategoryInclude",
    "CategoryRepository",
    "IngredientInclude",
    "IngredientRepository",
    "ProductInclude",
    "ProductRepository",
    "OrderInclude",
    "OrderRepository",
    "UserRepository",
]
