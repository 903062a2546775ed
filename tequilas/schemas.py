"""
Pydantic Schemas for Request/Response Validation

Wire format is camelCase JSON (fullName, orderItems, ...) while Python code
uses snake_case attributes; CamelModel handles the translation in both
directions.

Money values are decimal.Decimal internally and rendered as JSON numbers.

Version: 1.0.0
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, PlainSerializer, field_validator
from pydantic.alias_generators import to_camel


Money = Annotated[
    Decimal,
    PlainSerializer(lambda v: float(v), return_type=float, when_used="json"),
]


class CamelModel(BaseModel):
    """Base schema: camelCase aliases on the wire, snake_case in Python."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _reject_blank(v: str) -> str:
    if not v.strip():
        raise ValueError("must not be blank")
    return v.strip()


# =============================================================================
# ERRORS & HEALTH
# =============================================================================

class FieldError(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[Any] = None
    # Request validation: FieldError entries; registration: policy messages
    errors: Optional[List[Union[FieldError, str]]] = None


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    image_storage: str
    timestamp: datetime


# =============================================================================
# AUTH
# =============================================================================

class RegisterRequest(CamelModel):
    user_name: str = Field(..., min_length=1, max_length=100, examples=["jane"])
    email: EmailStr = Field(..., examples=["jane@example.com"])
    password: str = Field(..., min_length=1, max_length=128, examples=["S3cret!x"])

    @field_validator("user_name")
    @classmethod
    def validate_user_name(cls, v: str) -> str:
        return _reject_blank(v)


class LoginRequest(CamelModel):
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class RegisterResponse(CamelModel):
    message: str
    user_id: int


class LoginResponse(CamelModel):
    token: str
    expiration: datetime
    email: str
    user_name: str
    roles: List[str]


# =============================================================================
# ORDERS
# =============================================================================

class OrderItemRequest(CamelModel):
    """Single cart line submitted at checkout."""
    product_id: int = Field(..., ge=1, examples=[1])
    quantity: int = Field(..., ge=1, examples=[2])


class OrderCreateRequest(CamelModel):
    """Request schema for placing an order. The owner comes from the token."""
    full_name: str = Field(..., min_length=1, max_length=100, examples=["Jane Doe"])
    address: str = Field(..., min_length=1, max_length=200, examples=["1 Main St"])
    contact_number: str = Field(..., min_length=1, max_length=20, examples=["555-0100"])
    payment_method: str = Field(..., min_length=1, max_length=50, examples=["card", "cash"])
    order_items: List[OrderItemRequest] = Field(..., min_length=1)

    @field_validator("full_name", "address", "contact_number", "payment_method")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        return _reject_blank(v)


class OrderItemResponse(CamelModel):
    product_id: int
    product_name: str
    quantity: int
    unit_price: Money
    line_total: Money


class OrderResponse(CamelModel):
    """Order projection returned to customers and admins."""
    order_id: int
    order_date: datetime
    total_amount: Money
    full_name: str
    address: str
    contact_number: str
    payment_method: str
    order_items: List[OrderItemResponse]


class DateRange(CamelModel):
    from_: str = Field(..., alias="from")
    to: str


class OrderSummaryResponse(CamelModel):
    """Admin order list with sales summary."""
    total_orders: int
    total_revenue: Money
    date_range: DateRange
    orders: List[OrderResponse]


# =============================================================================
# CATALOG
# =============================================================================

class CategoryRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=100, examples=["Desserts"])
    description: Optional[str] = Field(None, max_length=500)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _reject_blank(v)


class CategoryResponse(CamelModel):
    category_id: int
    name: str
    description: Optional[str] = None


class IngredientRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=100, examples=["Basil"])
    description: Optional[str] = Field(None, max_length=500)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _reject_blank(v)


class IngredientResponse(CamelModel):
    ingredient_id: int
    name: str
    description: Optional[str] = None


class ProductResponse(CamelModel):
    product_id: int
    name: str
    description: Optional[str] = None
    price: Money
    stock: int
    image_url: Optional[str] = None
    category_id: int
    category_name: str


class ProductDetailResponse(ProductResponse):
    ingredients: List[IngredientResponse] = Field(default_factory=list)


class IngredientDetailResponse(IngredientResponse):
    products: List[ProductResponse] = Field(default_factory=list)


class ProductUsage(CamelModel):
    product_id: int
    product_name: str


class IngredientUsageResponse(CamelModel):
    ingredient_id: int
    ingredient_name: str
    is_in_use: bool
    product_count: int
    products: List[ProductUsage]


class SkippedIngredient(CamelModel):
    name: str
    reason: str


class BulkIngredientResult(CamelModel):
    """Per-row outcome of a bulk ingredient create."""
    total_processed: int
    success_count: int
    skipped_count: int
    created_ingredients: List[IngredientResponse]
    skipped_ingredients: List[SkippedIngredient]


class AssignIngredientsRequest(CamelModel):
    ingredient_ids: List[int] = Field(..., min_length=1)


class AssignIngredientsResponse(CamelModel):
    message: str
    added_count: int
    product: ProductDetailResponse
