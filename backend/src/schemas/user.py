"""Account and token schemas."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    email: str
    password: str
    full_name: str = Field(..., alias="fullName")

    class Config:
        populate_by_name = True


class LoginRequest(BaseModel):
    email: str
    password: str


class UserResponse(BaseModel):
    id: str
    email: str
    full_name: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    """Issued on register and login."""

    message: str
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class IdentityResponse(BaseModel):
    user_id: str
    email: str
