"""
Transactions router — the authenticated user's ledger.

Endpoints:
  GET /transactions?page=&limit=  — Own entries, newest first

A transfer shows up here once for each party: as "sent" for the sender and
as "received" for the recipient.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from neobank.database import get_db
from neobank.dependencies import get_current_user
from neobank.models.user import User
from neobank.schemas.transaction import (
    Pagination,
    TransactionListResponse,
    TransactionResponse,
)
from neobank.services import transaction_service

router = APIRouter()


@router.get(
    "/transactions",
    response_model=TransactionListResponse,
    summary="List your transactions",
)
async def list_transactions(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    entries, total = await transaction_service.list_transactions(
        db, user_id=user.id, page=page, limit=limit
    )
    return TransactionListResponse(
        transactions=[TransactionResponse.model_validate(txn) for txn in entries],
        pagination=Pagination.build(page=page, limit=limit, total=total),
    )
