"""
SQLAlchemy Database Models

Storefront and back-office tables:
- Users and roles (bearer-token identity)
- Catalog: categories, products, ingredients and the product-ingredient join
- Orders with their line items (price snapshots)

Version: 1.0.0
"""

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import relationship, validates

from tequilas.database import Base


def ingredient_key(name: str) -> str:
    """Normalised form of an ingredient name used for uniqueness checks."""
    return name.strip().casefold()


# =============================================================================
# IDENTITY
# =============================================================================

user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class Role(Base):
    """Named role (at minimum "Admin") attached to users."""
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(50), nullable=False, unique=True)

    def __repr__(self):
        return f"<Role {self.name}>"


class User(Base):
    """
    Registered account.

    Credentials are stored as a salted hash only; roles are loaded eagerly
    because every login needs them to build the token claims.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_name = Column(String(100), nullable=False, unique=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    roles = relationship("Role", secondary=user_roles, lazy="selectin")

    @property
    def role_names(self) -> list[str]:
        return sorted(role.name for role in self.roles)

    def __repr__(self):
        return f"<User #{self.id} - {self.email}>"


# =============================================================================
# CATALOG
# =============================================================================

class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)

    products = relationship("Product", back_populates="category", passive_deletes="all")

    def __repr__(self):
        return f"<Category #{self.id} - {self.name}>"


class Product(Base):
    """
    Menu item.

    The price here is the live catalog price; orders copy it onto their
    items at purchase time and never read it again.
    """
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    category_id = Column(
        Integer,
        ForeignKey("categories.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    image_url = Column(String(500), nullable=True)

    category = relationship("Category", back_populates="products")
    product_ingredients = relationship(
        "ProductIngredient",
        back_populates="product",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Product #{self.id} - {self.name} - {self.price}>"


class Ingredient(Base):
    __tablename__ = "ingredients"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    # Casefolded name; unique regardless of casing ("Basil" == "basil", "Ñora" == "ñora")
    name_key = Column(String(100), nullable=False, unique=True)
    description = Column(String(500), nullable=True)

    product_ingredients = relationship("ProductIngredient", back_populates="ingredient", passive_deletes="all")

    @validates("name")
    def _set_name_key(self, key, value):
        self.name_key = ingredient_key(value)
        return value

    def __repr__(self):
        return f"<Ingredient #{self.id} - {self.name}>"


class ProductIngredient(Base):
    """Join row between a product and an ingredient, unique per pair."""
    __tablename__ = "product_ingredients"

    product_id = Column(
        Integer,
        ForeignKey("products.id", ondelete="CASCADE"),
        primary_key=True,
    )
    ingredient_id = Column(
        Integer,
        ForeignKey("ingredients.id", ondelete="RESTRICT"),
        primary_key=True,
        index=True,
    )

    product = relationship("Product", back_populates="product_ingredients")
    ingredient = relationship("Ingredient", back_populates="product_ingredients")

    def __repr__(self):
        return f"<ProductIngredient {self.product_id}:{self.ingredient_id}>"


# =============================================================================
# ORDERS
# =============================================================================

class Order(Base):
    """
    Placed order, created together with its items in one transaction.

    Immutable once written: the total is computed at creation from the
    item price snapshots and stored.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    order_date = Column(DateTime, nullable=False, default=datetime.now, index=True)
    total_amount = Column(Numeric(10, 2), nullable=False)

    # Delivery details
    full_name = Column(String(100), nullable=False)
    address = Column(String(200), nullable=False)
    contact_number = Column(String(20), nullable=False)
    payment_method = Column(String(50), nullable=False)  # free text: card, cash, ...

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    def __repr__(self):
        return f"<Order #{self.id} - user {self.user_id} - {self.total_amount}>"


class OrderItem(Base):
    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_order_items_quantity_positive"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    # Not a foreign key: deleting a product must leave order history intact
    product_id = Column(Integer, nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)  # price snapshot at order time

    order = relationship("Order", back_populates="items")

    def __repr__(self):
        return f"<OrderItem product {self.product_id} x{self.quantity} @ {self.unit_price}>"
