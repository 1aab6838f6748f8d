"""Pydantic schemas for registration, login and the current principal."""

from datetime import datetime

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    full_name: str = Field(..., min_length=1, max_length=200)
    password: str = Field(..., min_length=8, max_length=255)


class LoginRequest(BaseModel):
    email: str
    password: str


class UserRead(BaseModel):
    id: str
    email: str
    full_name: str
    role: str
    created_at: datetime

    model_config = {"from_attributes": True}


class SessionResponse(BaseModel):
    """Returned by register and login.

    `id` mirrors user.id so the audit trail can resolve the resource id of
    a registration from the response payload.
    """

    id: str
    user: UserRead
    token: str


class PrincipalRead(BaseModel):
    user_id: str
    role: str
