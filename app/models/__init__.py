"""Models package initialization"""

from .base import Base
from .user import User
from .product import Category, Product
from .cart import CartItem
from .order import Order, OrderItem, OrderStatus

# Export all models
__all__ = [
    "Base",
    "User",
    "Category",
    "Product",
    "CartItem",
    "Order",
    "OrderItem",
    "OrderStatus",
]
