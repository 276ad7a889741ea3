"""Product Pydantic schemas"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal

from app.utils.validators import normalize_text, sanitize_html
from .base import Money


class ProductCreate(BaseModel):
    """Schema for creating a product"""
    name: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    price: Optional[Decimal] = None
    discount_percentage: Decimal = Field(Decimal("0"), ge=0, le=100)
    stock_quantity: int = Field(0, ge=0)
    category_id: Optional[int] = None
    image_url: Optional[str] = Field(None, max_length=500)
    is_featured: bool = False

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v):
        return normalize_text(v) if v else v

    @field_validator("description")
    @classmethod
    def sanitize_description(cls, v):
        return sanitize_html(v) if v else v


class ProductUpdate(BaseModel):
    """Schema for updating a product; omitted fields are left unchanged"""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    price: Optional[Decimal] = None
    discount_percentage: Optional[Decimal] = Field(None, ge=0, le=100)
    stock_quantity: Optional[int] = Field(None, ge=0)
    category_id: Optional[int] = None
    image_url: Optional[str] = Field(None, max_length=500)
    is_featured: Optional[bool] = None
    is_active: Optional[bool] = None

    @field_validator("description")
    @classmethod
    def sanitize_description(cls, v):
        return sanitize_html(v) if v else v


class PriceUpdate(BaseModel):
    price: Optional[Decimal] = None


class ProductRecord(BaseModel):
    """Schema for product response"""
    id: int
    name: str
    description: Optional[str] = None
    price: Money
    discount_percentage: Money
    discounted_price: Money
    stock_quantity: int
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    image_url: Optional[str] = None
    is_featured: bool
    is_active: bool
    created_at: Optional[datetime] = None


class PriceChange(BaseModel):
    old_price: Money
    new_price: Money
    product: ProductRecord


class CategoryResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
