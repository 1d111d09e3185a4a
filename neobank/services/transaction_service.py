"""
Transaction service — the per-user ledger store.

This module handles:
  - Generating transaction references ("TXN_" + 12 base-36 characters)
  - Writing ledger entries
  - Paginated history for one user (newest first)
  - Simulated incoming credits
  - Transfer analytics over a recent period

Ledger entries belong to exactly one user (user_id). Listing is always
scoped to the authenticated user's own entries: a transfer is visible to
the sender through their "sent" entry and to the recipient through their
separate "received" entry.
"""

import logging
import random
import string
import uuid
from datetime import datetime, timedelta

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from neobank.exceptions import InternalError, ValidationError
from neobank.models.transaction import Transaction
from neobank.services import account_service

logger = logging.getLogger(__name__)

TRANSACTION_ID_PREFIX = "TXN_"

ANALYTICS_PERIODS = ("week", "month", "year")


def new_transaction_id() -> str:
    suffix = "".join(random.choices(string.digits + string.ascii_uppercase, k=12))
    return f"{TRANSACTION_ID_PREFIX}{suffix}"


async def record_transaction(db: AsyncSession, **fields) -> Transaction:
    """
    Write one ledger entry and flush it so database defaults are populated.

    A transaction_id is generated unless one is supplied.
    """
    fields.setdefault("transaction_id", new_transaction_id())
    txn = Transaction(**fields)
    db.add(txn)
    await db.flush()
    return txn


async def list_transactions(
    db: AsyncSession,
    user_id: uuid.UUID,
    page: int = 1,
    limit: int = 20,
) -> tuple[list[Transaction], int]:
    """
    One page of a user's own ledger, newest first.

    Returns:
        Tuple of (entries on the requested page, total number of entries).
    """
    total = await db.scalar(
        select(func.count()).select_from(Transaction).where(Transaction.user_id == user_id)
    )

    result = await db.execute(
        select(Transaction)
        .where(Transaction.user_id == user_id)
        .order_by(Transaction.created_at.desc(), Transaction.id)
        .limit(limit)
        .offset((page - 1) * limit)
    )
    return list(result.scalars().all()), total or 0


async def record_deposit(
    db: AsyncSession,
    user_id: uuid.UUID,
    amount_cents: int | None = None,
    description: str | None = None,
) -> tuple[Transaction, int]:
    """
    Simulate an incoming credit into the user's first active account.

    When no amount is given a random one between 10.00 and 100.00 is used.

    Returns:
        Tuple of (the "received" deposit entry, new total active balance).

    Raises:
        ValidationError: If the user has no active account.
    """
    accounts = await account_service.list_active_accounts(db, user_id)
    if not accounts:
        raise ValidationError("No active bank accounts found")
    target = accounts[0]

    if amount_cents is None:
        amount_cents = random.randint(10_00, 100_00)

    if await account_service.adjust_balance(db, target.id, amount_cents) is None:
        raise InternalError(f"Could not credit account {target.id}")

    txn = await record_transaction(
        db,
        user_id=user_id,
        related_user_id=user_id,
        amount_cents=amount_cents,
        description=description or "Automated credit",
        status="completed",
        transaction_type="deposit",
        direction="received",
        priority="normal",
        processing_fee_cents=0,
        recipient_account_id=target.id,
    )
    logger.info("Simulated credit %s of %d cents for user %s", txn.transaction_id, amount_cents, user_id)

    summary = await account_service.get_balance_summary(db, user_id)
    return txn, summary["total_balance_cents"]


def _period_start(period: str, now: datetime) -> datetime:
    if period == "week":
        return now - timedelta(days=7)
    if period == "month":
        return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return now.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)


async def get_transfer_analytics(
    db: AsyncSession,
    user_id: uuid.UUID,
    period: str,
    now: datetime,
) -> dict:
    """
    Summarize the user's ledger over the last week, this month, or this year.

    Raises:
        ValidationError: If period is not one of week, month, year.
    """
    if period not in ANALYTICS_PERIODS:
        raise ValidationError("period must be one of: week, month, year")

    result = await db.execute(
        select(Transaction)
        .where(Transaction.user_id == user_id)
        .where(Transaction.created_at >= _period_start(period, now))
    )
    entries = list(result.scalars().all())

    total_amount = sum(t.amount_cents for t in entries)
    return {
        "period": period,
        "total_transfers": len(entries),
        "total_sent_cents": sum(t.amount_cents for t in entries if t.direction == "sent"),
        "total_received_cents": sum(t.amount_cents for t in entries if t.direction == "received"),
        "average_amount_cents": total_amount // len(entries) if entries else 0,
        "priority_breakdown": {
            priority: sum(1 for t in entries if t.priority == priority)
            for priority in ("low", "normal", "high", "urgent")
        },
        "transfer_types": {
            kind: sum(1 for t in entries if t.transaction_type == kind)
            for kind in ("instant", "scheduled", "recurring")
        },
    }
