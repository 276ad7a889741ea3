"""
Authentication schemas for request/response validation
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime

from app.utils.validators import normalize_text

class RegisterRequest(BaseModel):
    """Request to register a new account"""
    email: str = Field(..., max_length=255, examples=["shopper@mail.com"])
    password: str = Field(..., max_length=128)
    full_name: str = Field(..., min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = Field(None, max_length=2000)

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, v):
        v = normalize_text(v)
        if not v:
            raise ValueError("Full name is required")
        return v

class LoginRequest(BaseModel):
    email: str = Field(..., max_length=255)
    password: str = Field(..., max_length=128)

class ProfileUpdateRequest(BaseModel):
    """Profile fields a user may change; omitted fields are kept"""
    full_name: Optional[str] = Field(None, min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = Field(None, max_length=2000)

class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str

class UserResponse(BaseModel):
    """User data in responses; never includes the password hash"""
    id: int
    email: str
    full_name: str
    phone: Optional[str] = None
    address: Optional[str] = None
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None

class AuthStatus(BaseModel):
    success: bool = True
    message: str = "Session status retrieved"
    authenticated: bool
    user_id: Optional[int] = None
    email: Optional[str] = None
