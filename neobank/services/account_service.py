"""
Account service — the account directory.

This module handles:
  - Linking (creating) mock bank accounts, with unique account numbers
  - Listing a user's active accounts in a stable order (oldest first)
  - Atomic balance adjustments
  - The per-user balance summary

Atomic balance adjustments:
  adjust_balance() issues ONE statement:

      UPDATE bank_accounts
         SET balance_cents = balance_cents + :delta
       WHERE id = :id AND is_active AND balance_cents + :delta >= 0
   RETURNING balance_cents

  The arithmetic happens inside the database, so two requests racing on
  the same account each see the other's committed change instead of
  overwriting it. The WHERE guard makes an overdraft a no-op that the
  caller can detect (None is returned) rather than a negative balance.

Ownership enforcement:
  Every query takes the authenticated user's ID; there is no way to list
  or summarize another user's accounts through this service.
"""

import logging
import random
import string
import uuid
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from neobank.models.account import BankAccount

logger = logging.getLogger(__name__)

# Opening balance range for linked mock accounts, in cents
MOCK_MIN_OPENING_BALANCE_CENTS = 10_000 * 100
MOCK_MAX_OPENING_BALANCE_CENTS = 509_999 * 100


def _generate_account_number() -> str:
    """
    Generate a random 10-digit account number.

    A real bank would use a routing prefix and check digit; a random
    10-digit string is enough for the mock bank and avoids sequential guessing.
    """
    return "".join(random.choices(string.digits, k=10))


def mock_opening_balance_cents() -> int:
    """Whole-unit opening balance the mock bank assigns to a newly linked account."""
    units = random.randint(
        MOCK_MIN_OPENING_BALANCE_CENTS // 100,
        MOCK_MAX_OPENING_BALANCE_CENTS // 100,
    )
    return units * 100


async def create_account(
    db: AsyncSession,
    user_id: uuid.UUID,
    bank_name: str,
    institution: str,
    opening_balance_cents: int = 0,
    account_type: str = "checking",
) -> BankAccount:
    """
    Create (link) a new bank account for a user.

    Args:
        db: Database session.
        user_id: The owner's user ID.
        bank_name: Display name of the bank.
        institution: Institution the account is held at.
        opening_balance_cents: Starting balance in cents.
        account_type: "checking", "savings" or "credit".

    Returns:
        The newly created BankAccount instance.
    """
    # Retry on collision (extremely unlikely with 10 random digits)
    for _ in range(10):
        account_number = _generate_account_number()
        existing = await db.execute(
            select(BankAccount).where(BankAccount.account_number == account_number)
        )
        if existing.scalar_one_or_none() is None:
            break
    else:
        raise RuntimeError("Failed to generate a unique account number")

    account = BankAccount(
        user_id=user_id,
        bank_name=bank_name,
        institution=institution,
        account_number=account_number,
        account_type=account_type,
        balance_cents=opening_balance_cents,
    )
    db.add(account)
    await db.flush()
    logger.info("Linked account %s for user %s", account.id, user_id)
    return account


async def list_active_accounts(
    db: AsyncSession,
    user_id: uuid.UUID,
) -> list[BankAccount]:
    """
    List a user's active accounts, oldest first.

    populate_existing refreshes any instance already in the session, since
    adjust_balance() changes balances behind the identity map's back.
    """
    result = await db.execute(
        select(BankAccount)
        .where(BankAccount.user_id == user_id)
        .where(BankAccount.is_active.is_(True))
        .order_by(BankAccount.created_at, BankAccount.id)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def adjust_balance(
    db: AsyncSession,
    account_id: uuid.UUID,
    delta_cents: int,
) -> int | None:
    """
    Atomically add delta_cents (negative to debit) to an active account.

    Returns:
        The new balance in cents, or None when the account is missing,
        inactive, or the change would take it below zero.
    """
    result = await db.execute(
        update(BankAccount)
        .where(BankAccount.id == account_id)
        .where(BankAccount.is_active.is_(True))
        .where(BankAccount.balance_cents + delta_cents >= 0)
        .values(
            balance_cents=BankAccount.balance_cents + delta_cents,
            updated_at=datetime.now(timezone.utc),
        )
        .returning(BankAccount.balance_cents)
        .execution_options(synchronize_session=False)
    )
    return result.scalar_one_or_none()


async def get_balance_summary(
    db: AsyncSession,
    user_id: uuid.UUID,
) -> dict:
    """Total of the user's active balances plus the per-account breakdown."""
    accounts = await list_active_accounts(db, user_id)
    return {
        "total_balance_cents": sum(account.balance_cents for account in accounts),
        "accounts": accounts,
    }
