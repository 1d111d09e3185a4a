"""
Security utilities: password/PIN hashing, JWT tokens, and Fernet encryption.

This module centralizes all cryptographic operations so they're easy to
audit and update. Three concerns are handled here:

1. PASSWORD AND PIN HASHING (Argon2)
   - Neither passwords nor transaction PINs are ever stored in plaintext
   - passlib's CryptContext drives Argon2id; old hashes keep verifying if
     the scheme is ever rotated ("deprecated='auto'")
   - A 4-digit PIN has a tiny keyspace, so the memory-hard hash is what
     makes an offline guess of a leaked hash expensive

2. JWT TOKENS
   - After login the user receives a signed JWT whose "sub" is their user ID
   - Signed with SECRET_KEY using HS256; expires after
     ACCESS_TOKEN_EXPIRE_MINUTES

3. FERNET ENCRYPTION (AES-128-CBC + HMAC-SHA256)
   - Used for the optional security code attached to a transfer
   - Fernet provides authenticated encryption, so stored values are both
     confidential and tamper-evident
"""

import uuid
from datetime import datetime, timedelta, timezone

from cryptography.fernet import Fernet
from jose import jwt
from passlib.context import CryptContext

from neobank.config import settings


# ---------------------------------------------------------------------------
# 1. Password and PIN hashing (Argon2)
# ---------------------------------------------------------------------------

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(plain_password: str) -> str:
    """Hash a plaintext password using Argon2id."""
    return pwd_context.hash(plain_password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plaintext password against a stored Argon2 hash.

    This is a constant-time comparison to prevent timing attacks.
    """
    return pwd_context.verify(plain_password, hashed_password)


def hash_pin(pin: str) -> str:
    """Hash a 4-digit transaction PIN using Argon2id."""
    return pwd_context.hash(pin)


def verify_pin(pin: str, hashed_pin: str | None) -> bool:
    """
    Verify a transaction PIN against the stored hash.

    A user who never set a PIN has no hash; that always fails verification.
    """
    if not hashed_pin:
        return False
    return pwd_context.verify(pin, hashed_pin)


# ---------------------------------------------------------------------------
# 2. JWT Tokens
# ---------------------------------------------------------------------------


def create_access_token(user_id: uuid.UUID, expires_delta: timedelta | None = None) -> str:
    """Sign a bearer token whose "sub" claim is the user's ID."""
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {"sub": str(user_id), "exp": datetime.now(timezone.utc) + lifetime}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Decode and verify a JWT access token.

    Raises:
        JWTError: If the token is expired, tampered with, or invalid.
    """
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])


# ---------------------------------------------------------------------------
# 3. Fernet Encryption (for transfer security codes at rest)
# ---------------------------------------------------------------------------

_fernet = Fernet(settings.SECURITY_CODE_ENCRYPTION_KEY.encode())


def encrypt_value(plaintext: str) -> bytes:
    """Encrypt a string value; the result fits a LargeBinary column."""
    return _fernet.encrypt(plaintext.encode())


def decrypt_value(ciphertext: bytes) -> str:
    """
    Decrypt a Fernet-encrypted value back to plaintext.

    Raises:
        cryptography.fernet.InvalidToken: If the data is corrupted or
            the encryption key doesn't match.
    """
    return _fernet.decrypt(ciphertext).decode()
