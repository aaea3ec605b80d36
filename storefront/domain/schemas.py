# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Generic, List, TypeVar
from decimal import Decimal
from datetime import datetime

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope: {success: true, data, message?}."""

    success: bool = True
    message: str | None = None
    data: T


class ErrorResponse(BaseModel):
    """Failure envelope: {success: false, message}."""

    success: bool = False
    message: str


# --- cart ---

class AddItemIn(BaseModel):
    """Schema for adding a product to the cart."""

    product_id: int = Field(..., gt=0, description="Product id (> 0)")
    quantity: int = Field(1, ge=1, description="Quantity to add (>= 1)")


class UpdateItemIn(BaseModel):
    quantity: int = Field(..., ge=1, description="New quantity (>= 1)")


class ShippingIn(BaseModel):
    shipping: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2, description="Shipping cost (>= 0)")


class CartItemOut(BaseModel):
    id: int
    product_id: int
    product_name: str | None = None
    quantity: int
    price: Decimal
    discount: Decimal
    line_total: Decimal


class CartOut(BaseModel):
    id: int | None = None
    user_id: int
    items: List[CartItemOut]
    subtotal: Decimal
    shipping: Decimal
    total: Decimal
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class CartCountOut(BaseModel):
    count: int


# --- orders ---

class CheckoutIn(BaseModel):
    """Schema for placing an order from the current cart (cash on delivery)."""

    delivery_address: str = Field(..., min_length=1, max_length=500)
    customer_phone: str = Field(..., min_length=3, max_length=32)
    customer_notes: str | None = Field(None, max_length=1000)


class StatusIn(BaseModel):
    # plain string: unknown values are rejected by the service with InvalidStatus
    status: str


class OrderItemOut(BaseModel):
    id: int
    product_id: int
    product_name: str | None = None
    quantity: int
    price: Decimal
    discount: Decimal
    line_total: Decimal


class OrderOut(BaseModel):
    id: int
    order_number: str
    user_id: int
    user_name: str | None = None
    user_email: str | None = None
    items: List[OrderItemOut]
    subtotal: Decimal
    shipping: Decimal
    total: Decimal
    delivery_address: str
    customer_phone: str
    customer_notes: str | None = None
    status: str
    estimated_delivery: datetime | None = None
    delivered_at: datetime | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderPageOut(BaseModel):
    orders: List[OrderOut]
    total: int
    page: int
    pages: int
