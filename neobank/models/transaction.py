"""
Transaction model — one entry in one user's ledger.

Every user has their own ledger. A peer-to-peer transfer therefore writes
TWO rows:

  - a "sent" entry owned by the sender (user_id = sender,
    related_user_id = recipient)
  - a "received" entry owned by the recipient (user_id = recipient,
    related_user_id = sender)

The two rows have distinct transaction_ids. They carry the same
transfer_pair_id so reconciliation can find both legs, and they are written
in the same database transaction as the balance changes.

Key fields:
  - amount_cents: Always positive; the direction field says which way it went
  - category: spending category (see CATEGORIES); back-filled by the
    insights read path when missing or "Other"
  - status / transaction_type / priority: see the tuples below
  - processing_fee_cents: informational fee on the sender's entry; it is
    never debited from any balance
  - encrypted_security_code: optional Fernet-encrypted code supplied with
    the transfer; never returned by the API

Entries are immutable after creation except for the category back-fill.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, ForeignKey, CheckConstraint, LargeBinary
from sqlalchemy.orm import Mapped, mapped_column

from neobank.database import Base


CATEGORIES = (
    "Food", "Travel", "Bills", "Shopping", "Entertainment", "Health",
    "Transfers", "Education", "Grocery", "Rent", "EMI", "Utilities",
    "Income", "Other",
)
DEFAULT_CATEGORY = "Other"

STATUSES = (
    "pending", "completed", "failed", "cancelled", "scheduled",
    "recurring", "processing",
)
DIRECTIONS = ("sent", "received")
TRANSACTION_TYPES = ("instant", "scheduled", "recurring", "deposit", "withdrawal", "transfer")
PRIORITIES = ("low", "normal", "high", "urgent")
RECURRING_FREQUENCIES = ("daily", "weekly", "monthly", "yearly")


class Transaction(Base):
    __tablename__ = "transactions"

    __table_args__ = (
        CheckConstraint("amount_cents > 0", name="ck_transactions_positive_amount"),
        CheckConstraint("processing_fee_cents >= 0", name="ck_transactions_non_negative_fee"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    # Human-facing reference: "TXN_" + 12 uppercase base-36 characters
    transaction_id: Mapped[str] = mapped_column(
        String(20),
        unique=True,
        nullable=False,
    )

    # Whose ledger this entry belongs to
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    # The other party (recipient on a sent entry, sender on a received one)
    related_user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    amount_cents: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    category: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
        default=DEFAULT_CATEGORY,
    )

    description: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="completed",
    )

    direction: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
    )

    transaction_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="instant",
    )

    priority: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default="normal",
    )

    processing_fee_cents: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    # Deferred-transfer metadata; recorded only, nothing executes it later
    scheduled_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    recurring_frequency: Mapped[str | None] = mapped_column(
        String(10),
        nullable=True,
    )
    recurring_end_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    encrypted_security_code: Mapped[bytes | None] = mapped_column(
        LargeBinary,
        nullable=True,
    )

    sender_account_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("bank_accounts.id"),
        nullable=True,
        index=True,
    )
    recipient_account_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("bank_accounts.id"),
        nullable=True,
    )

    # Links the sent and received legs of one transfer
    transfer_pair_id: Mapped[uuid.UUID | None] = mapped_column(
        nullable=True,
        index=True,
    )

    # Indexed for the month-window queries behind insights
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
