"""
Pydantic schemas for Transaction and Transfer endpoints.

All monetary amounts are in integer cents (e.g., 1,250.50 = 125050).
"""

import math
import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, model_validator

TransactionCategory = Literal[
    "Food", "Travel", "Bills", "Shopping", "Entertainment", "Health",
    "Transfers", "Education", "Grocery", "Rent", "EMI", "Utilities",
    "Income", "Other",
]


class TransferRequest(BaseModel):
    """
    Request body for POST /transfer.

    At least one recipient identifier is required; when several are given
    the resolver tries account number, profile URL, customer ID, then
    mobile number.
    """
    recipient_public_id: str | None = None
    recipient_account_number: str | None = None
    recipient_profile_url: str | None = None
    recipient_mobile_number: str | None = None

    amount_cents: int = Field(gt=0, description="Amount in cents (must be positive)")
    category: TransactionCategory
    pin: str = Field(pattern=r"^\d{4}$", description="4-digit transaction PIN")
    description: str | None = Field(None, max_length=255)

    transfer_type: Literal["instant", "scheduled", "recurring"] = "instant"
    priority: Literal["low", "normal", "high", "urgent"] = "normal"
    sender_account_id: uuid.UUID | None = None
    scheduled_date: datetime | None = None
    recurring_frequency: Literal["daily", "weekly", "monthly", "yearly"] | None = None
    recurring_end_date: datetime | None = None
    security_code: str | None = Field(None, min_length=4, max_length=6)

    @model_validator(mode="after")
    def recipient_must_be_identified(self):
        """Reject a request that names no recipient at all."""
        identifiers = (
            self.recipient_public_id,
            self.recipient_account_number,
            self.recipient_profile_url,
            self.recipient_mobile_number,
        )
        if not any((value or "").strip() for value in identifiers):
            raise ValueError(
                "At least one recipient identifier is required "
                "(customer ID, account number, profile URL, or mobile number)"
            )
        return self


class TransactionResponse(BaseModel):
    """
    Public representation of a ledger entry.

    encrypted_security_code is intentionally absent.
    """
    id: uuid.UUID
    transaction_id: str
    user_id: uuid.UUID
    related_user_id: uuid.UUID | None
    amount_cents: int
    category: str | None
    description: str | None
    status: str
    direction: str
    transaction_type: str
    priority: str
    processing_fee_cents: int
    scheduled_date: datetime | None
    recurring_frequency: str | None
    recurring_end_date: datetime | None
    sender_account_id: uuid.UUID | None
    recipient_account_id: uuid.UUID | None
    transfer_pair_id: uuid.UUID | None
    created_at: datetime

    model_config = {"from_attributes": True}


class TransferResponse(BaseModel):
    """Response body for a successful transfer: the sender's entry."""
    transaction: TransactionResponse
    message: str


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=math.ceil(total / limit))


class TransactionListResponse(BaseModel):
    transactions: list[TransactionResponse]
    pagination: Pagination


class SimulateCreditRequest(BaseModel):
    """Request body for POST /simulate-credit (every field optional)."""
    amount_cents: int | None = Field(None, gt=0)
    description: str | None = Field(None, max_length=255)


class SimulateCreditResponse(BaseModel):
    transaction: TransactionResponse
    new_balance_cents: int
    message: str


class TransferAnalyticsResponse(BaseModel):
    period: Literal["week", "month", "year"]
    total_transfers: int
    total_sent_cents: int
    total_received_cents: int
    average_amount_cents: int
    priority_breakdown: dict[str, int]
    transfer_types: dict[str, int]
