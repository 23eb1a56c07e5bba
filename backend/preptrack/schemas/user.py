"""
User-related Pydantic schemas.
"""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime


# ============= Auth Schemas =============

class UserRegister(BaseModel):
    """Schema for user registration."""
    username: str = Field(..., min_length=3, max_length=50, pattern=r"^[a-zA-Z0-9_]+$")
    password: str = Field(..., min_length=6, max_length=100)
    email: Optional[EmailStr] = None
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)


class UserLogin(BaseModel):
    """Schema for user login."""
    username: str
    password: str


class Token(BaseModel):
    """JWT token response."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class TokenData(BaseModel):
    """Token payload data."""
    user_id: Optional[int] = None
    username: Optional[str] = None


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class PasswordChange(BaseModel):
    """Schema for password change."""
    current_password: str
    new_password: str = Field(..., min_length=6, max_length=100)


class PasswordReset(BaseModel):
    """Moderator-issued password reset."""
    new_password: str = Field(..., min_length=6, max_length=100)


class ProfileUpdate(BaseModel):
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)


# ============= User Response Schemas =============

class UserSummary(BaseModel):
    """Public user fields embedded in messages, feeds and profiles."""
    id: int
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    display_name: str

    class Config:
        from_attributes = True


class UserResponse(UserSummary):
    """User response schema."""
    email: Optional[str] = None
    is_active: bool
    is_admin: bool
    created_at: datetime

    class Config:
        from_attributes = True


class DirectoryEntry(UserSummary):
    """User directory row."""
    sheet_count: int
    is_online: bool
    created_at: datetime


class ModeratorUserEntry(DirectoryEntry):
    """Moderator view of a user; never carries credential material."""
    email: Optional[str] = None
    is_admin: bool
    last_seen: Optional[datetime] = None
    updated_at: Optional[datetime] = None
