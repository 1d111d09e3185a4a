"""
BankAccount model — a linked (mock) bank account owned by a User.

Balance management:
  `balance_cents` is an integer amount in cents. It is only ever changed by
  a single conditional UPDATE that adds a delta in SQL (see
  account_service.adjust_balance), never by reading the value into Python,
  changing it, and writing it back. Two concurrent transfers therefore
  cannot both spend the same money.

  A CHECK constraint at the database level enforces that the balance can
  never go negative — the final safety net under the guarded UPDATE.

Lifecycle:
  Accounts are created when a user links one (or implicitly, when someone
  sends money to a user with no account). They are soft-deactivated via
  is_active and never hard-deleted while ledger entries reference them.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Boolean, Integer, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from neobank.database import Base


class BankAccount(Base):
    __tablename__ = "bank_accounts"

    __table_args__ = (
        CheckConstraint(
            "balance_cents >= 0",
            name="ck_bank_accounts_non_negative_balance",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    bank_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    institution: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    # Unique 10-digit account number (generated at creation time)
    account_number: Mapped[str] = mapped_column(
        String(20),
        unique=True,
        nullable=False,
    )

    # "checking", "savings" or "credit"
    account_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="checking",
    )

    balance_cents: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    currency: Mapped[str] = mapped_column(
        String(3),
        nullable=False,
        default="INR",
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    # Indexed: "first active account" means oldest by created_at
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    @property
    def masked_account_number(self) -> str:
        return f"****{self.account_number[-4:]}"
