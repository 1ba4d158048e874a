"""Authentication schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import EmailStr, Field

from questlog.schemas.base import BaseSchema
from questlog.schemas.user import UserRead


class RegisterRequest(BaseSchema):
    """Request schema for creating an account."""

    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)
    display_name: str = Field(..., min_length=1, max_length=255)


class RegisterResponse(BaseSchema):
    """Response schema for a new account."""

    success: bool = True
    user_id: UUID
    message: str = "User registered successfully"


class LoginRequest(BaseSchema):
    """Request schema for email/password login."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=72)


class TokenResponse(BaseSchema):
    """Response schema for successful authentication."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Token expiry in seconds")
    expires_at: datetime
    user: UserRead
