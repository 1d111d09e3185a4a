"""
Transfers router — peer-to-peer payments and related endpoints.

Endpoints (all scoped to the authenticated user):
  POST /transfer            — Send money to another user (PIN required)
  POST /simulate-credit     — Simulate an incoming payment
  GET  /transfer-analytics  — Sent/received totals for a recent period

A transfer writes two ledger entries (the sender's "sent" entry and the
recipient's "received" entry) and moves the balance, all in the request's
single database transaction. Only the sender's entry is returned.
"""

from datetime import datetime
from typing import Literal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from neobank.database import get_db
from neobank.dependencies import get_clock, get_current_user
from neobank.models.user import User
from neobank.schemas.transaction import (
    SimulateCreditRequest,
    SimulateCreditResponse,
    TransactionResponse,
    TransferAnalyticsResponse,
    TransferRequest,
    TransferResponse,
)
from neobank.services import transaction_service
from neobank.services.recipient_resolver import RecipientIdentifiers
from neobank.services.transfer_service import TransferCommand, execute_transfer

router = APIRouter()


@router.post(
    "/transfer",
    response_model=TransferResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Transfer money to another user",
)
async def create_transfer(
    request: TransferRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Send money to another user, identified by any of customer ID, account
    number, profile URL or mobile number.

    - **amount_cents**: Positive integer in cents
    - **pin**: The sender's 4-digit transaction PIN (checked before the
      recipient is looked up)
    - **priority**: "high" and "urgent" carry an informational processing
      fee; only the amount itself is debited

    Either both ledger entries and both balance changes are saved, or none are.
    """
    command = TransferCommand(
        recipient=RecipientIdentifiers(
            public_id=request.recipient_public_id,
            account_number=request.recipient_account_number,
            profile_url=request.recipient_profile_url,
            mobile_number=request.recipient_mobile_number,
        ),
        amount_cents=request.amount_cents,
        category=request.category,
        pin=request.pin,
        description=request.description,
        transfer_type=request.transfer_type,
        priority=request.priority,
        sender_account_id=request.sender_account_id,
        scheduled_date=request.scheduled_date,
        recurring_frequency=request.recurring_frequency,
        recurring_end_date=request.recurring_end_date,
        security_code=request.security_code,
    )
    sent = await execute_transfer(db, requester_id=user.id, command=command)

    return TransferResponse(
        transaction=TransactionResponse.model_validate(sent),
        message="Transfer completed successfully",
    )


@router.post(
    "/simulate-credit",
    response_model=SimulateCreditResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Simulate an incoming payment",
)
async def simulate_credit(
    request: SimulateCreditRequest | None = None,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Credit the first active account; a random 10.00-100.00 when no amount is sent."""
    request = request or SimulateCreditRequest()
    txn, new_balance = await transaction_service.record_deposit(
        db,
        user_id=user.id,
        amount_cents=request.amount_cents,
        description=request.description,
    )
    return SimulateCreditResponse(
        transaction=TransactionResponse.model_validate(txn),
        new_balance_cents=new_balance,
        message="Credit simulated successfully",
    )


@router.get(
    "/transfer-analytics",
    response_model=TransferAnalyticsResponse,
    summary="Transfer totals for a recent period",
)
async def transfer_analytics(
    period: Literal["week", "month", "year"] = Query("month"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_clock),
):
    analytics = await transaction_service.get_transfer_analytics(db, user.id, period, now)
    return TransferAnalyticsResponse(**analytics)
