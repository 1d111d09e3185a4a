"""
Pydantic schemas for Account endpoints.

All monetary amounts are expressed in integer cents.
"""

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class AccountLinkRequest(BaseModel):
    """Request body for POST /accounts/link."""
    bank_name: str = Field(min_length=1, max_length=100)
    institution: str = Field(min_length=1, max_length=100)
    account_type: Literal["checking", "savings", "credit"] = "checking"
    opening_balance_cents: int | None = Field(
        None,
        ge=0,
        description="Starting balance in cents; the mock bank picks one when omitted",
    )


class AccountResponse(BaseModel):
    """Representation of a linked account (full number is never returned)."""
    id: uuid.UUID
    bank_name: str
    institution: str
    masked_account_number: str
    account_type: str
    balance_cents: int
    currency: str
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class AccountLinkResponse(AccountResponse):
    """
    Returned once, when the account is linked.

    Includes the full account number so the owner can share it with people
    who want to pay them.
    """
    account_number: str


class BalanceResponse(BaseModel):
    """Total across active accounts plus the per-account breakdown."""
    total_balance_cents: int
    accounts: list[AccountResponse]
