"""
Identity service — registration, login, PIN management, and user lookups.

This is the identity provider the rest of the system leans on. The
transfer flow only needs three things from it: find a user by ID, and
verify a password or PIN against the stored hashes.

Registration flow:
  1. Reject an email that is already registered
  2. Generate the public identifiers (customer ID + profile URL)
  3. Hash the password with Argon2id and store the user
  4. Return a JWT so the user is immediately logged in

Security notes:
  - Login returns the same error for "wrong password" and "email not found"
    to prevent user enumeration attacks
  - PINs are hashed exactly like passwords; a missing PIN never verifies
"""

import logging
import random
import string
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from neobank.config import settings
from neobank.exceptions import DuplicateEmailError, InvalidCredentialsError, UserNotFoundError
from neobank.models.user import User
from neobank import security

logger = logging.getLogger(__name__)


def _random_base36(length: int) -> str:
    return "".join(random.choices(string.digits + string.ascii_lowercase, k=length))


def _generate_customer_id() -> str:
    return f"CUST_{_random_base36(9).upper()}"


def _generate_public_url() -> str:
    return f"{settings.PUBLIC_PROFILE_BASE_URL.rstrip('/')}/user/{_random_base36(9)}"


async def signup(
    db: AsyncSession,
    email: str,
    password: str,
    name: str | None = None,
    phone_number: str | None = None,
    mobile_number: str | None = None,
) -> tuple[User, str]:
    """
    Register a new user.

    Args:
        db: Database session.
        email: User's email (must be unique, stored lowercased).
        password: Plaintext password (hashed before storage).
        name: Display name; defaults to the local part of the email.
        phone_number: Optional landline/primary phone.
        mobile_number: Optional mobile number.

    Returns:
        Tuple of (User instance, JWT token string).

    Raises:
        DuplicateEmailError: If the email is already registered.
    """
    email = email.lower()
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none() is not None:
        raise DuplicateEmailError(email)

    user = User(
        email=email,
        name=name or email.split("@")[0],
        hashed_password=security.hash_password(password),
        customer_id=_generate_customer_id(),
        public_url=_generate_public_url(),
        phone_number=phone_number,
        mobile_number=mobile_number,
    )
    db.add(user)
    await db.flush()

    logger.info("Registered user %s (%s)", user.id, user.customer_id)
    token = security.create_access_token(user.id)
    return user, token


async def login(
    db: AsyncSession,
    email: str,
    password: str,
) -> tuple[User, str]:
    """
    Authenticate a user and return a JWT token.

    Raises:
        InvalidCredentialsError: If the email doesn't exist, the password is
            wrong, or the user has been deactivated.
    """
    result = await db.execute(select(User).where(User.email == email.lower()))
    user = result.scalar_one_or_none()

    # Same error for every case to prevent user enumeration
    if user is None or not verify_password(user, password) or not user.is_active:
        raise InvalidCredentialsError()

    token = security.create_access_token(user.id)
    return user, token


async def find_user_by_id(db: AsyncSession, user_id: uuid.UUID) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


def verify_password(user: User, password: str) -> bool:
    return security.verify_password(password, user.hashed_password)


def verify_pin(user: User, pin: str) -> bool:
    """Check a transaction PIN; False when the user never set one."""
    return security.verify_pin(pin, user.hashed_pin)


async def set_pin(db: AsyncSession, user_id: uuid.UUID, pin: str) -> User:
    """
    Set or replace the user's 4-digit transaction PIN.

    Raises:
        UserNotFoundError: If the user no longer exists.
    """
    user = await find_user_by_id(db, user_id)
    if user is None:
        raise UserNotFoundError()

    user.hashed_pin = security.hash_pin(pin)
    await db.flush()
    logger.info("Transaction PIN set for user %s", user.id)
    return user
