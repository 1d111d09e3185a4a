"""
Accounts router — linked bank accounts and balances.

Endpoints (all scoped to the authenticated user):
  POST /accounts/link  — Link a mock bank account
  GET  /accounts       — List active accounts, oldest first
  GET  /balance        — Total balance plus per-account breakdown
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from neobank.database import get_db
from neobank.dependencies import get_current_user
from neobank.models.user import User
from neobank.schemas.account import (
    AccountLinkRequest,
    AccountLinkResponse,
    AccountResponse,
    BalanceResponse,
)
from neobank.services import account_service

router = APIRouter()


@router.post(
    "/accounts/link",
    response_model=AccountLinkResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Link a bank account",
)
async def link_account(
    request: AccountLinkRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Link a (mock) bank account to the authenticated user.

    - **opening_balance_cents**: optional; when omitted the mock bank assigns
      a random whole-unit balance between 10,000 and 509,999
    """
    opening_balance = request.opening_balance_cents
    if opening_balance is None:
        opening_balance = account_service.mock_opening_balance_cents()

    account = await account_service.create_account(
        db=db,
        user_id=user.id,
        bank_name=request.bank_name,
        institution=request.institution,
        opening_balance_cents=opening_balance,
        account_type=request.account_type,
    )
    return AccountLinkResponse.model_validate(account)


@router.get(
    "/accounts",
    response_model=list[AccountResponse],
    summary="List your active accounts",
)
async def list_accounts(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    accounts = await account_service.list_active_accounts(db, user.id)
    return [AccountResponse.model_validate(account) for account in accounts]


@router.get(
    "/balance",
    response_model=BalanceResponse,
    summary="Get your total balance",
)
async def get_balance(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    summary = await account_service.get_balance_summary(db, user.id)
    return BalanceResponse(
        total_balance_cents=summary["total_balance_cents"],
        accounts=[AccountResponse.model_validate(account) for account in summary["accounts"]],
    )
