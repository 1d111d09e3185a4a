"""
Pydantic schemas for authentication endpoints (register, login, set-pin).

Malformed bodies never reach the service layer: FastAPI validates them
against these models and the handler in exceptions.py turns the first
problem into a 400.
"""

import uuid

from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    """Request body for POST /auth/register."""
    email: EmailStr
    password: str = Field(min_length=8)
    name: str | None = Field(None, min_length=1, max_length=100)
    phone_number: str | None = Field(None, max_length=30)
    mobile_number: str | None = Field(None, max_length=30)


class LoginRequest(BaseModel):
    """Request body for POST /auth/login."""
    email: EmailStr
    password: str


class SetPinRequest(BaseModel):
    """Request body for POST /auth/set-pin."""
    pin: str = Field(pattern=r"^\d{4}$", description="Exactly four digits")


class TokenResponse(BaseModel):
    """Response body for successful login — contains the JWT."""
    token: str
    token_type: str = "bearer"


class RegisterResponse(BaseModel):
    """Response body for successful registration — public identifiers + JWT."""
    user_id: uuid.UUID
    email: str
    name: str
    customer_id: str
    public_url: str
    token: str
    token_type: str = "bearer"


class MessageResponse(BaseModel):
    message: str
