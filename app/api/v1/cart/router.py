"""Cart router with session handling for guests and logged-in users"""

from fastapi import APIRouter, Depends, Request
from typing import Optional

from app.api.v1.auth.dependencies import resolve_owner
from app.core.exceptions import NoActiveSession
from app.core.owner import Owner
from app.core.security import ensure_guest_session, get_session_user_id
from app.core.store import DataStore, get_store
from app.services.cart_service import CartService
from app.schemas.cart import CartItemCreate, CartItemUpdate

router = APIRouter()

@router.get("")
async def get_cart(
    owner: Optional[Owner] = Depends(resolve_owner),
    store: DataStore = Depends(get_store)
):
    """Get cart (supports both authenticated and session-based)"""
    cart = await CartService(store).get_cart(owner)
    return {"success": True, "message": "Cart retrieved", "items": cart.items, "summary": cart.summary}

@router.post("/add")
async def add_to_cart(
    item_data: CartItemCreate,
    request: Request,
    store: DataStore = Depends(get_store)
):
    """Add item to cart"""
    if not get_session_user_id(request):
        # First add from an anonymous visitor starts a guest cart
        ensure_guest_session(request)

    result = await CartService(store).add_to_cart(
        resolve_owner(request),
        product_id=item_data.product_id,
        quantity=item_data.quantity,
    )
    message = "Item added to cart" if result.action == "added" else "Cart updated"
    return {"success": True, "message": message, **result.model_dump()}

@router.put("/update/{cart_id}")
async def update_cart_item(
    cart_id: int,
    update_data: CartItemUpdate,
    owner: Optional[Owner] = Depends(resolve_owner),
    store: DataStore = Depends(get_store)
):
    """Update cart item quantity"""
    result = await CartService(store).update_cart_item(owner, cart_id, update_data.quantity)
    return {"success": True, "message": "Cart updated", **result.model_dump()}

@router.delete("/remove/{cart_id}")
async def remove_cart_item(
    cart_id: int,
    owner: Optional[Owner] = Depends(resolve_owner),
    store: DataStore = Depends(get_store)
):
    await CartService(store).remove_cart_item(owner, cart_id)
    return {"success": True, "message": "Item removed from cart"}

@router.delete("/clear")
async def clear_cart(
    owner: Optional[Owner] = Depends(resolve_owner),
    store: DataStore = Depends(get_store)
):
    if owner is None:
        raise NoActiveSession()
    removed = await CartService(store).clear_cart(owner)
    return {"success": True, "message": "Cart cleared", "removed": removed}

@router.get("/count")
async def get_cart_count(
    owner: Optional[Owner] = Depends(resolve_owner),
    store: DataStore = Depends(get_store)
):
    """Item count for the cart badge"""
    count = await CartService(store).get_cart_count(owner)
    return {"success": True, "message": "Cart count retrieved", "count": count}

@router.get("/validate")
async def validate_cart(
    owner: Optional[Owner] = Depends(resolve_owner),
    store: DataStore = Depends(get_store)
):
    """Pre-checkout check of every line against live stock"""
    validation = await CartService(store).validate_cart(owner)
    message = "Cart is ready for checkout" if validation.valid else "Some items in your cart need attention"
    return {"success": True, "message": message, "valid": validation.valid, "issues": validation.issues}
