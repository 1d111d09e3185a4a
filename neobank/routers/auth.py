"""
Authentication router — registration, login, and the transaction PIN.

Endpoints:
  POST /auth/register  — Create a user and get a token (public)
  POST /auth/login     — Authenticate and get a token (public)
  POST /auth/set-pin   — Set or replace the 4-digit transaction PIN

Plaintext passwords and PINs exist only in memory while the request is
processed; they are hashed before any database write and never logged.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from neobank.database import get_db
from neobank.dependencies import get_current_user
from neobank.models.user import User
from neobank.schemas.auth import (
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    SetPinRequest,
    TokenResponse,
)
from neobank.services import identity_service

router = APIRouter()


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def register(
    request: RegisterRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Register a new user and log them in.

    The response carries the generated customer ID and profile URL, either
    of which other users can pay.
    """
    user, token = await identity_service.signup(
        db=db,
        email=request.email,
        password=request.password,
        name=request.name,
        phone_number=request.phone_number,
        mobile_number=request.mobile_number,
    )

    return RegisterResponse(
        user_id=user.id,
        email=user.email,
        name=user.name,
        customer_id=user.customer_id,
        public_url=user.public_url,
        token=token,
    )


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Authenticate and get a token",
)
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Authenticate with email and password.

    Send the token on every other request:

        Authorization: Bearer <token>
    """
    _, token = await identity_service.login(
        db=db,
        email=request.email,
        password=request.password,
    )
    return TokenResponse(token=token)


@router.post(
    "/set-pin",
    response_model=MessageResponse,
    summary="Set the transaction PIN",
)
async def set_pin(
    request: SetPinRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Transfers are refused until a PIN has been set."""
    await identity_service.set_pin(db, user.id, request.pin)
    return MessageResponse(message="PIN set successfully")
