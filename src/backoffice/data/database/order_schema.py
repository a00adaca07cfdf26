"""Order schemas for API validation."""
from pydantic import BaseModel, Field
from typing import Optional, List
from decimal import Decimal
from datetime import datetime
from backoffice.data.database.connection import MAX_DB_INT
from backoffice.data.database.order_models import OrderStatus, OrderOrigin


class OrderItemRequest(BaseModel):
    """Requested order line."""
    product_id: int = Field(..., alias="productId", le=MAX_DB_INT, description="Product ID")
    quantity: int = Field(..., ge=1, le=MAX_DB_INT, description="Quantity to purchase")

    class Config:
        populate_by_name = True


class OrderCreate(BaseModel):
    """Schema for an in-store (staff-entered) sale."""
    items: List[OrderItemRequest] = Field(..., min_length=1, description="Order must contain at least one product")
    user_id: Optional[int] = Field(None, alias="userId", le=MAX_DB_INT, description="Customer the sale is attributed to")

    class Config:
        populate_by_name = True


class CheckoutCreate(BaseModel):
    """Schema for a self-service checkout."""
    items: List[OrderItemRequest] = Field(..., min_length=1, description="Order must contain at least one product")


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderItemResponse(BaseModel):
    """Order item response model."""
    id: int
    product_id: int
    product_name: str
    quantity: int
    price: Decimal
    subtotal: Decimal

    class Config:
        from_attributes = True


class OrderUserResponse(BaseModel):
    name: str
    email: str

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    """Order response model."""
    id: int
    user_id: Optional[int] = None
    user: Optional[OrderUserResponse] = None
    total: Decimal
    status: OrderStatus
    origin: OrderOrigin
    created_at: datetime
    items: List[OrderItemResponse]

    class Config:
        from_attributes = True
