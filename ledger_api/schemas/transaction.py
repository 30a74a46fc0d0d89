"""
Pydantic schemas for ledger entries.

All monetary amounts are in integer cents (e.g., $10.50 = 1050). On the wire
the field is called "amount"; the model and service call it amount_cents.
Requests may send either name.

amount is deliberately NOT constrained with Field(gt=0) here: a
non-positive amount is a ledger rule (InvalidAmountError -> 400), not a
request-shape problem (422).
"""

import uuid
from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field

from ledger_api.models.transaction import MAX_DESCRIPTION_LENGTH, TransactionKind


class TransactionCreateRequest(BaseModel):
    """Request body for POST /api/v1/statements/deposit and /withdraw."""
    amount: int = Field(
        validation_alias=AliasChoices("amount", "amount_cents"),
        description="Amount in cents (must be positive)",
    )
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)


class TransactionResponse(BaseModel):
    """Public representation of a ledger entry."""
    id: uuid.UUID
    user_id: uuid.UUID
    kind: TransactionKind
    amount: int = Field(validation_alias=AliasChoices("amount", "amount_cents"))
    description: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
