"""
Cart schemas for request/response validation
"""

from pydantic import BaseModel, Field
from typing import Any, List, Literal, Optional
from datetime import datetime
from decimal import Decimal

from .base import Money


class CartItemCreate(BaseModel):
    """Schema for adding an item to the cart"""
    product_id: int = Field(..., gt=0, description="Product ID")
    # Coerced by the cart service: missing or non-numeric means 1
    quantity: Any = Field(1, description="Quantity to add")


class CartItemUpdate(BaseModel):
    """Schema for updating cart item"""
    quantity: Any = Field(None, description="New quantity")


class CartLineView(BaseModel):
    """One cart line joined with the live product it points at"""
    cart_id: int
    product_id: int
    product_name: str
    quantity: int
    price: Money
    discount_percentage: Money
    discounted_price: Money
    stock_quantity: int
    image_url: Optional[str] = None
    subtotal: Money
    discounted_subtotal: Money
    added_at: Optional[datetime] = None


class CartSummary(BaseModel):
    """Totals over the whole cart, rounded to cents"""
    total_items: int = 0
    subtotal: Money = Decimal("0.00")
    discount_amount: Money = Decimal("0.00")
    total_amount: Money = Decimal("0.00")


class CartResponse(BaseModel):
    """Schema for complete cart response"""
    items: List[CartLineView] = Field(default_factory=list)
    summary: CartSummary = Field(default_factory=CartSummary)


class AddToCartResult(BaseModel):
    cart_id: int
    product_id: int
    quantity: int
    action: Literal["added", "updated"]


class UpdateCartResult(BaseModel):
    cart_id: int
    quantity: int
    subtotal: Money


class CartIssue(BaseModel):
    """A cart line that would block checkout"""
    cart_id: int
    product_id: int
    product_name: str
    issue: str


class CartValidation(BaseModel):
    valid: bool
    issues: List[CartIssue] = Field(default_factory=list)


class MergeResult(BaseModel):
    """Outcome of folding a guest cart into a user cart at login"""
    merged: int = 0
    transferred: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.merged + self.transferred
