"""
Pydantic schemas for user lookups.

GET /find-user/{identifier} is public, so its response is deliberately
small: enough for a sender to confirm who they are about to pay. Email,
contact numbers, hashes and balances are never included.
"""

import uuid

from pydantic import BaseModel


class UserSummaryResponse(BaseModel):
    """Sanitized public view of a user."""
    id: uuid.UUID
    name: str
    customer_id: str
    public_url: str

    model_config = {"from_attributes": True}
