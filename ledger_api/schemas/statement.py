"""
Pydantic schema for the balance endpoint.

The balance sits at the top, followed by every transaction the user has
ever made, oldest first. The balance is always the sum of that list.
"""

from pydantic import AliasChoices, BaseModel, Field

from ledger_api.schemas.transaction import TransactionResponse


class BalanceResponse(BaseModel):
    """Current balance (in cents) plus the full statement it was computed from."""
    balance: int = Field(validation_alias=AliasChoices("balance", "balance_cents"))
    statement: list[TransactionResponse]
