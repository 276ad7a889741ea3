"""
Shopping cart model
Handles both authenticated and session-based carts
"""

from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Index, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .base import BaseModel

class CartItem(BaseModel):
    """Shopping cart line"""

    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # User or session, never both
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True)
    session_id = Column(String(255), nullable=True)

    # Product
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)

    quantity = Column(Integer, nullable=False, default=1)
    added_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    product = relationship("Product")

    # Constraints
    __table_args__ = (
        UniqueConstraint("user_id", "product_id", name="uq_cart_user_product"),
        UniqueConstraint("session_id", "product_id", name="uq_cart_session_product"),
        CheckConstraint("quantity > 0", name="check_positive_cart_quantity"),
        CheckConstraint(
            "(user_id IS NOT NULL AND session_id IS NULL) OR (user_id IS NULL AND session_id IS NOT NULL)",
            name="check_user_xor_session"
        ),
        Index("idx_cart_items_user", "user_id"),
        Index("idx_cart_items_session", "session_id"),
    )
