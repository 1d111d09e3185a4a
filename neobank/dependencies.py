"""
FastAPI dependencies for authentication and the request clock.

Dependencies are reusable functions that FastAPI injects into route handlers:

  get_current_user (JWT -> User)   every endpoint except register/login,
                                   find-user and /health
  get_clock (-> datetime)          "now" for analytics and insights

Ownership:
  Every protected endpoint scopes its queries to the User returned by
  get_current_user, so one user can never read or move another user's
  money through the API.

get_clock exists so tests can pin "now" with app.dependency_overrides
instead of patching the datetime module.
"""

import uuid
from datetime import datetime, timezone

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from neobank.database import get_db
from neobank.models.user import User
from neobank.security import decode_access_token
from neobank.services import identity_service


# The tokenUrl points Swagger UI's "Authorize" button at the login endpoint
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Validate the bearer token and return the corresponding active User.

    Raises:
        HTTPException 401: If the token is missing, invalid, expired, or
            names a user that no longer exists or is inactive.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_access_token(token)
        user_id_str: str | None = payload.get("sub")
        if user_id_str is None:
            raise credentials_exception
        user_id = uuid.UUID(user_id_str)
    except (JWTError, ValueError):
        raise credentials_exception

    user = await identity_service.find_user_by_id(db, user_id)
    if user is None or not user.is_active:
        raise credentials_exception

    return user


def get_clock() -> datetime:
    return datetime.now(timezone.utc)
