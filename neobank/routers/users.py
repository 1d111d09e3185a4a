"""
Users router — public recipient lookup.

Endpoints:
  GET /find-user/{identifier}  — Find a user by customer ID, mobile number
                                 or account number (no token required)

Only the sanitized UserSummaryResponse is returned.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from neobank.database import get_db
from neobank.schemas.user import UserSummaryResponse
from neobank.services import recipient_resolver

router = APIRouter()


@router.get(
    "/find-user/{identifier}",
    response_model=UserSummaryResponse,
    summary="Look up a user to pay",
)
async def find_user(
    identifier: str,
    db: AsyncSession = Depends(get_db),
):
    user = await recipient_resolver.find_user(db, identifier)
    return UserSummaryResponse.model_validate(user)
