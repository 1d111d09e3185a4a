"""
Recipient resolver — turns whatever the sender typed into exactly one user.

A sender may identify the recipient by any mix of account number, profile
URL, customer ID and mobile number. Each identifier has a strategy; the
strategies form a priority-ordered chain and the first one that finds a
user wins:

  1. Account number  — exact match on an ACTIVE account, resolved to its owner
  2. Profile URL     — exact match, then a case-insensitive match on the
                       URL's last path segment
  3. Customer ID     — exact match, or a case-insensitive substring of the
                       stored profile URL
  4. Mobile number   — spaces, parentheses, dashes and "+" stripped, then a
                       case-insensitive substring of the stored phone or
                       mobile number

When several users match a fuzzy strategy, the earliest-registered one is
returned. The resolver is read-only and never decides whether a transfer to
the match is allowed (self-transfer is the orchestrator's call).

find_user() is the public lookup used by GET /find-user/{identifier}. It
feeds one identifier through customer ID, mobile number, then account
number — the order that endpoint has always used.
"""

import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from neobank.exceptions import RecipientNotFoundError, UserNotFoundError, ValidationError
from neobank.models.account import BankAccount
from neobank.models.user import User

_MOBILE_FORMATTING = re.compile(r"[\s\-()+]")


@dataclass(frozen=True)
class RecipientIdentifiers:
    public_id: str | None = None
    account_number: str | None = None
    profile_url: str | None = None
    mobile_number: str | None = None

    def is_empty(self) -> bool:
        return not any(
            (value or "").strip()
            for value in (self.public_id, self.account_number, self.profile_url, self.mobile_number)
        )


Strategy = Callable[[AsyncSession, str], Awaitable[User | None]]


async def _first_user(db: AsyncSession, *criteria) -> User | None:
    result = await db.execute(
        select(User).where(*criteria).order_by(User.created_at, User.id).limit(1)
    )
    return result.scalars().first()


async def by_account_number(db: AsyncSession, account_number: str) -> User | None:
    result = await db.execute(
        select(User)
        .join(BankAccount, BankAccount.user_id == User.id)
        .where(BankAccount.account_number == account_number)
        .where(BankAccount.is_active.is_(True))
        .limit(1)
    )
    return result.scalars().first()


async def by_profile_url(db: AsyncSession, profile_url: str) -> User | None:
    user = await _first_user(db, User.public_url == profile_url)
    if user is not None:
        return user

    segments = [segment for segment in profile_url.split("/") if segment]
    if not segments:
        return None
    return await _first_user(db, User.public_url.icontains(segments[-1], autoescape=True))


async def by_customer_id(db: AsyncSession, customer_id: str) -> User | None:
    return await _first_user(
        db,
        or_(
            User.customer_id == customer_id,
            User.public_url.icontains(customer_id, autoescape=True),
        ),
    )


def clean_mobile_number(mobile_number: str) -> str:
    return _MOBILE_FORMATTING.sub("", mobile_number)


async def by_mobile_number(db: AsyncSession, mobile_number: str) -> User | None:
    cleaned = clean_mobile_number(mobile_number)
    if not cleaned:
        return None
    return await _first_user(
        db,
        or_(
            User.phone_number.icontains(cleaned, autoescape=True),
            User.mobile_number.icontains(cleaned, autoescape=True),
        ),
    )


# Priority order for transfers: (identifier attribute, strategy)
TRANSFER_CHAIN: tuple[tuple[str, Strategy], ...] = (
    ("account_number", by_account_number),
    ("profile_url", by_profile_url),
    ("public_id", by_customer_id),
    ("mobile_number", by_mobile_number),
)

# Order used by the public lookup endpoint, which takes a single identifier
LOOKUP_CHAIN: tuple[Strategy, ...] = (
    by_customer_id,
    by_mobile_number,
    by_account_number,
)


async def resolve_recipient(
    db: AsyncSession,
    identifiers: RecipientIdentifiers,
) -> User:
    """
    Resolve transfer identifiers to a single user.

    Raises:
        ValidationError: If every identifier is empty.
        RecipientNotFoundError: If no strategy finds a user.
    """
    if identifiers.is_empty():
        raise ValidationError(
            "At least one recipient identifier is required "
            "(customer ID, account number, profile URL, or mobile number)"
        )

    for field, strategy in TRANSFER_CHAIN:
        value = (getattr(identifiers, field) or "").strip()
        if not value:
            continue
        user = await strategy(db, value)
        if user is not None:
            return user

    raise RecipientNotFoundError()


async def find_user(db: AsyncSession, identifier: str) -> User:
    """
    Public lookup of a user by a single identifier of any kind.

    Raises:
        UserNotFoundError: If nothing matches.
    """
    identifier = identifier.strip()
    if identifier:
        for strategy in LOOKUP_CHAIN:
            user = await strategy(db, identifier)
            if user is not None:
                return user
    raise UserNotFoundError()
