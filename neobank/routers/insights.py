"""
Insights router — monthly spending analysis.

Endpoints:
  GET /insights?account_id=  — Category spend, surplus, recurring expenses
                               and up to five ranked suggestions

This is a read endpoint with one side effect: stored entries that have no
category (or "Other") are re-categorized from their description first.
"""

import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from neobank.database import get_db
from neobank.dependencies import get_clock, get_current_user
from neobank.models.user import User
from neobank.schemas.insights import InsightsResponse
from neobank.services import insights_service

router = APIRouter()


@router.get(
    "/insights",
    response_model=InsightsResponse,
    summary="Spending insights for this month",
)
async def get_insights(
    account_id: uuid.UUID | None = Query(
        None, description="Only count spending from this account"
    ),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_clock),
):
    report = await insights_service.build_insights_report(
        db, user_id=user.id, now=now, account_id=account_id
    )
    return InsightsResponse(**report)
