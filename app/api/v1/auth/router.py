"""
Authentication API routes
"""

from fastapi import APIRouter, Depends, Request, status
from typing import Optional

from app.core.security import (
    SESSION_USER_KEY,
    SESSION_EMAIL_KEY,
    SESSION_GUEST_KEY,
    get_guest_session_id,
)
from app.core.store import DataStore, get_store
from .dependencies import get_current_user_id_optional, require_user
from .schemas import (
    RegisterRequest,
    LoginRequest,
    ProfileUpdateRequest,
    ChangePasswordRequest,
    AuthStatus,
)
from .services import AuthService

router = APIRouter()

@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    summary="Register new user",
)
async def register(
    data: RegisterRequest,
    store: DataStore = Depends(get_store)
):
    """Create an account; does not log the user in"""
    service = AuthService(store)
    user = await service.register(data)
    return {
        "success": True,
        "message": "Registration successful",
        "user": user,
    }

@router.post(
    "/login",
    summary="Login with email and password",
    description="Starts a session and moves any guest cart into the user's cart"
)
async def login(
    data: LoginRequest,
    request: Request,
    store: DataStore = Depends(get_store)
):
    service = AuthService(store)
    user = await service.authenticate(data.email, data.password)

    request.session[SESSION_USER_KEY] = user.id
    request.session[SESSION_EMAIL_KEY] = user.email

    merge = await service.merge_guest_cart(get_guest_session_id(request), user.id)
    request.session.pop(SESSION_GUEST_KEY, None)

    return {
        "success": True,
        "message": "Login successful",
        "user": user,
        "cart_merge": merge,
    }

@router.post("/logout", summary="Logout")
async def logout(request: Request):
    request.session.clear()
    return {"success": True, "message": "Logout successful"}

@router.get("/me", summary="Get current user")
async def get_me(
    user_id: int = Depends(require_user),
    store: DataStore = Depends(get_store)
):
    user = await AuthService(store).get_user(user_id)
    return {"success": True, "message": "User retrieved", "user": user}

@router.get("/status", response_model=AuthStatus, summary="Session status")
async def auth_status(
    request: Request,
    user_id: Optional[int] = Depends(get_current_user_id_optional)
):
    if not user_id:
        return AuthStatus(authenticated=False)
    return AuthStatus(
        authenticated=True,
        user_id=user_id,
        email=request.session.get(SESSION_EMAIL_KEY),
    )

@router.put("/profile", summary="Update profile")
async def update_profile(
    data: ProfileUpdateRequest,
    user_id: int = Depends(require_user),
    store: DataStore = Depends(get_store)
):
    user = await AuthService(store).update_profile(user_id, data)
    return {"success": True, "message": "Profile updated successfully", "user": user}

@router.put("/change-password", summary="Change password")
async def change_password(
    data: ChangePasswordRequest,
    user_id: int = Depends(require_user),
    store: DataStore = Depends(get_store)
):
    await AuthService(store).change_password(user_id, data.current_password, data.new_password)
    return {"success": True, "message": "Password changed successfully"}
