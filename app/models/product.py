"""Catalog models"""

from sqlalchemy import Column, String, Text, Numeric, Integer, Boolean, ForeignKey, Index, CheckConstraint, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from decimal import Decimal

from .base import BaseModel, TimestampedModel

class Category(BaseModel):
    """Product category"""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    products = relationship("Product", back_populates="category")

class Product(BaseModel, TimestampedModel):
    """Sellable product with live price, discount and stock"""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=True)
    image_url = Column(String(500), nullable=True)

    # Categorization
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)

    # Pricing
    price = Column(Numeric(10, 2), nullable=False)
    discount_percentage = Column(Numeric(5, 2), nullable=False, default=0)

    # Inventory
    stock_quantity = Column(Integer, nullable=False, default=0)

    # Flags
    is_featured = Column(Boolean, nullable=False, default=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    # Relationships
    category = relationship("Category", back_populates="products")

    # Constraints
    __table_args__ = (
        CheckConstraint("price >= 0", name="check_non_negative_price"),
        CheckConstraint("stock_quantity >= 0", name="check_non_negative_stock"),
        CheckConstraint(
            "discount_percentage >= 0 AND discount_percentage <= 100",
            name="check_discount_range"
        ),
        Index("idx_products_category_active", "category_id", "is_active"),
    )

    @property
    def discounted_price(self) -> Decimal:
        """Calculate final price after discount"""
        return discounted_price(self.price, self.discount_percentage)

def discounted_price(price, discount_percentage) -> Decimal:
    """price - price * discount / 100, in full precision"""
    price = Decimal(str(price))
    discount = Decimal(str(discount_percentage or 0))
    if discount:
        return price - (price * discount / Decimal(100))
    return price
