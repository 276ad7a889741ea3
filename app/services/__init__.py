"""Services package"""

from .cart_service import CartService
from .order_service import OrderService
from .product_service import ProductService

__all__ = [
    "CartService",
    "OrderService",
    "ProductService",
]
