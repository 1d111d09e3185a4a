"""
User model — the banking identity.

Each User is both a login credential (email + hashed password) and a
payable party: the fields below are what a sender can use to find them.

Public identifiers (all unique, generated at registration):
  - customer_id: "CUST_" followed by 9 uppercase base-36 characters
  - public_url:  a shareable profile link ending in a random slug

Contact numbers:
  phone_number and mobile_number are stored as entered. Recipient lookup
  strips formatting from the *search* value and matches it as a substring,
  so "(98765) 43210" finds a stored "9876543210".

Secrets:
  Both the password and the 4-digit transaction PIN are stored as Argon2id
  hashes. hashed_pin is NULL until the user sets a PIN; transfers are
  refused until then.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from neobank.database import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    # Email is the login identifier; unique and indexed
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # NULL until the user sets a transaction PIN
    hashed_pin: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    customer_id: Mapped[str] = mapped_column(
        String(20),
        unique=True,
        nullable=False,
        index=True,
    )

    public_url: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
    )

    phone_number: Mapped[str | None] = mapped_column(
        String(30),
        nullable=True,
    )

    mobile_number: Mapped[str | None] = mapped_column(
        String(30),
        nullable=True,
    )

    # Soft-disable: deactivated users can't log in but their data is preserved
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    # Audit timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
