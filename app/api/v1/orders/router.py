"""
Order API routes
"""

from fastapi import APIRouter, Depends, status
from typing import Optional

from app.api.v1.auth.dependencies import resolve_owner, require_user
from app.core.owner import Owner
from app.core.store import DataStore, get_store
from app.schemas.order import ShippingInfo
from app.services.order_service import OrderService

router = APIRouter()

@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create order",
    description="Create an order from the current cart, decrementing stock and clearing the cart"
)
async def create_order(
    shipping: ShippingInfo,
    owner: Optional[Owner] = Depends(resolve_owner),
    store: DataStore = Depends(get_store)
):
    """Checkout; open to guests and logged-in users"""
    created = await OrderService(store).create_order(owner, shipping)
    return {
        "success": True,
        "message": "Order placed successfully",
        **created.model_dump(),
    }

@router.get("", summary="Order history")
async def list_orders(
    user_id: int = Depends(require_user),
    store: DataStore = Depends(get_store)
):
    orders = await OrderService(store).list_orders(user_id)
    return {"success": True, "message": "Orders retrieved", "orders": orders}

@router.get("/{order_id}", summary="Get order details")
async def get_order(
    order_id: int,
    user_id: int = Depends(require_user),
    store: DataStore = Depends(get_store)
):
    order = await OrderService(store).get_order(order_id, user_id)
    return {"success": True, "message": "Order retrieved", "order": order}
