"""
User model
Registered shoppers who log in with email and password
"""

from sqlalchemy import Column, String, Boolean, Integer, Text, DateTime

from .base import BaseModel, TimestampedModel

class User(BaseModel, TimestampedModel):
    """Registered shopper"""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(200), nullable=False)
    phone = Column(String(20), nullable=True)
    address = Column(Text, nullable=True)

    # Status fields
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    last_login = Column(DateTime(timezone=True), nullable=True)
