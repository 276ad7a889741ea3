"""
Custom exception classes and error handlers
Provides consistent error responses across the application
"""

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from typing import Any, Dict, Iterable, Optional
import logging

logger = logging.getLogger(__name__)

class StorefrontException(HTTPException):
    """Base exception class for the storefront application"""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": False,
            "message": self.detail,
            "error_code": self.error_code,
        }

class BadRequestException(StorefrontException):
    """400 Bad Request"""

    def __init__(self, detail: str, error_code: str = "BAD_REQUEST"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code=error_code
        )

class UnauthorizedException(StorefrontException):
    """401 Unauthorized"""

    def __init__(self, detail: str = "Authentication required", error_code: str = "UNAUTHORIZED"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code=error_code
        )

class NotFoundException(StorefrontException):
    """404 Not Found"""

    def __init__(self, detail: str = "Not found", error_code: str = "NOT_FOUND"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code=error_code
        )

class ConflictException(StorefrontException):
    """409 Conflict"""

    def __init__(self, detail: str, error_code: str = "CONFLICT"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code=error_code
        )

# Business logic exceptions
class InvalidQuantity(BadRequestException):
    """Quantity below 1 or not a number"""

    def __init__(self, detail: str = "Quantity must be at least 1"):
        super().__init__(detail=detail, error_code="INVALID_QUANTITY")

class ProductNotFound(NotFoundException):
    """Product id does not resolve to an active product"""

    def __init__(self, detail: str = "Product not found"):
        super().__init__(detail=detail, error_code="PRODUCT_NOT_FOUND")

class ProductInactive(ProductNotFound):
    """Product exists but has been withdrawn from sale"""

    def __init__(self, product_name: Optional[str] = None):
        super().__init__(detail="Product is not available")
        self.status_code = status.HTTP_400_BAD_REQUEST
        self.error_code = "PRODUCT_INACTIVE"
        self.product_name = product_name

class InsufficientStockException(BadRequestException):
    """Product stock insufficient"""

    def __init__(self, product_name: Optional[str], available: int):
        if product_name:
            detail = f"Insufficient stock for {product_name}. Only {available} available."
        else:
            detail = f"Only {available} items available in stock"
        super().__init__(detail=detail, error_code="INSUFFICIENT_STOCK")
        self.product_name = product_name
        self.available = available

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["available"] = self.available
        data["product_name"] = self.product_name
        return data

# Short alias used throughout the cart and order engines
InsufficientStock = InsufficientStockException

class CartItemNotFound(NotFoundException):
    """Cart line missing or owned by someone else"""

    def __init__(self, detail: str = "Cart item not found"):
        super().__init__(detail=detail, error_code="CART_ITEM_NOT_FOUND")

class EmptyCart(BadRequestException):
    def __init__(self, detail: str = "Cart is empty"):
        super().__init__(detail=detail, error_code="EMPTY_CART")

class MissingShippingInfo(BadRequestException):
    """Checkout attempted without the required contact fields"""

    def __init__(self, missing_fields: Iterable[str] = ()):
        self.missing_fields = list(missing_fields)
        detail = "Missing shipping details"
        if self.missing_fields:
            detail = f"{detail}: {', '.join(self.missing_fields)}"
        super().__init__(detail=detail, error_code="MISSING_SHIPPING_INFO")

class NoActiveSession(BadRequestException):
    def __init__(self, detail: str = "No active session"):
        super().__init__(detail=detail, error_code="NO_ACTIVE_SESSION")

class StoreError(StorefrontException):
    """Wraps a failure raised by the underlying database"""

    def __init__(self, detail: str = "Database operation failed", error_code: str = "STORE_ERROR"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code=error_code
        )

class DuplicateEntry(StoreError):
    """A write collided with a unique constraint"""

    def __init__(self, detail: str = "Record already exists"):
        super().__init__(detail=detail, error_code="DUPLICATE_ENTRY")

async def storefront_exception_handler(request: Request, exc: StorefrontException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc.error_code} on {request.method} {request.url.path}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=exc.headers
    )

async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": "An unexpected error occurred"}
    )

def register_exception_handlers(app: FastAPI) -> None:
    """Attach the JSON error handlers to the application"""
    app.add_exception_handler(StorefrontException, storefront_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
