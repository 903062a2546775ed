"""
Startup Seed Data

Inserts the starter menu when the catalog is empty:
- 5 categories
- 5 ingredients
- 5 products
- 6 product-ingredient pairs

On a fresh database the rows receive ids 1..5 in the order listed.

Version: 1.0.0
"""

import logging
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tequilas.models import Category, Ingredient, Product, ProductIngredient

logger = logging.getLogger(__name__)


CATEGORIES = [
    ("Veg", "Delicious vegetarian meals"),
    ("Non-Veg", "Tasty non-vegetarian dishes"),
    ("Fast Food", "Quick and satisfying fast food items"),
    ("Beverages", "Cold drinks, juices, and more"),
    ("Desserts", "Sweet treats to finish your meal"),
]

INGREDIENTS = [
    ("Mozzarella Cheese", "Creamy and melty cheese"),
    ("Tomato Sauce", "Rich and tangy sauce"),
    ("Beef Patty", "Grilled ground beef"),
    ("Lettuce", "Fresh green lettuce"),
    ("French Fries", "Crispy potato fries"),
]

# (name, description, price, stock, category position)
PRODUCTS = [
    ("Classic Cheese Pizza", "Cheesy goodness with tomato base", "9.99", 20, 0),
    ("Double Beef Burger", "Two juicy patties with cheese", "11.99", 15, 1),
    ("Coca Cola", "Chilled fizzy drink", "1.99", 50, 2),
    ("Chocolate Cake", "Rich and moist cake slice", "4.99", 10, 3),
    ("Loaded Fries", "Fries topped with cheese and jalapenos", "5.49", 25, 4),
]

# (product position, ingredient position)
PRODUCT_INGREDIENTS = [
    (0, 0),  # Pizza: Mozzarella Cheese
    (0, 1),  # Pizza: Tomato Sauce
    (0, 3),  # Pizza: Lettuce
    (1, 2),  # Burger: Beef Patty
    (1, 1),  # Burger: Tomato Sauce
    (1, 3),  # Burger: Lettuce
]


async def seed_catalog(db: AsyncSession) -> bool:
    """
    Insert the starter menu if no product, category or ingredient exists.

    Returns:
        bool: True if rows were inserted
    """
    for model in (Category, Ingredient, Product):
        count = await db.scalar(select(func.count()).select_from(model))
        if count:
            logger.info("Catalog already populated, skipping seed")
            return False

    categories = [Category(name=name, description=desc) for name, desc in CATEGORIES]
    ingredients = [Ingredient(name=name, description=desc) for name, desc in INGREDIENTS]

    # Flush in order so ids follow list position
    for row in categories + ingredients:
        db.add(row)
        await db.flush()

    products = []
    for name, desc, price, stock, category_pos in PRODUCTS:
        product = Product(
            name=name,
            description=desc,
            price=Decimal(price),
            stock=stock,
            category_id=categories[category_pos].id,
        )
        db.add(product)
        await db.flush()
        products.append(product)

    db.add_all(
        ProductIngredient(
            product_id=products[product_pos].id,
            ingredient_id=ingredients[ingredient_pos].id,
        )
        for product_pos, ingredient_pos in PRODUCT_INGREDIENTS
    )
    await db.commit()

    logger.info(
        f"🌱 Seeded catalog: {len(categories)} categories, {len(ingredients)} ingredients, "
        f"{len(products)} products"
    )
    return True
