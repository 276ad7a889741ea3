"""Order models"""

from sqlalchemy import Column, String, Numeric, Integer, Enum, ForeignKey, Index, Text
from sqlalchemy.orm import relationship
import enum

from .base import BaseModel, TimestampedModel

class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    SHIPPED = "shipped"
    CANCELLED = "cancelled"

class Order(BaseModel, TimestampedModel):
    """Order header"""

    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Registered buyer, if any; guest orders keep only the contact fields
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Customer contact
    customer_name = Column(String(200), nullable=False)
    customer_email = Column(String(200), nullable=False, index=True)
    customer_phone = Column(String(20), nullable=False, default="")
    shipping_address = Column(Text, nullable=False)

    total_amount = Column(Numeric(10, 2), nullable=False)
    status = Column(
        Enum(OrderStatus, values_callable=lambda e: [m.value for m in e], native_enum=False),
        default=OrderStatus.PENDING,
        nullable=False,
        index=True
    )

    # Relationships
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_orders_user_status", "user_id", "status"),
    )

class OrderItem(BaseModel):
    """Individual items within an order"""

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True)

    # Item details (snapshot at time of order)
    product_name = Column(String(200), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    subtotal = Column(Numeric(10, 2), nullable=False)

    order = relationship("Order", back_populates="items")
