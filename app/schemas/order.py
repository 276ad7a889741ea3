"""Order schemas for request/response models."""

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field

from app.models.order import OrderStatus
from .base import BaseSchema, Money


class ShippingInfo(BaseModel):
    """Checkout contact details; presence of the required ones is checked by the order service"""
    shipping_address: Optional[str] = Field(None, max_length=2000)
    customer_email: Optional[str] = Field(None, max_length=200)
    full_name: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=20)


class OrderCreated(BaseModel):
    order_id: int
    total_amount: Money


class OrderItemResponse(BaseSchema):
    id: int
    product_id: int
    product_name: str
    quantity: int
    unit_price: Money
    subtotal: Money


class OrderResponse(BaseSchema):
    id: int
    user_id: Optional[int] = None
    customer_name: str
    customer_email: str
    customer_phone: str
    shipping_address: str
    total_amount: Money
    status: OrderStatus
    created_at: Optional[datetime] = None
    items: List[OrderItemResponse] = Field(default_factory=list)
