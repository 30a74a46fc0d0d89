"""
Transaction model — one entry in a user's ledger (a "statement" entry).

Every deposit or withdrawal creates exactly one Transaction. Rows are
append-only: nothing in the codebase updates or deletes them, which is why
there is no updated_at column.

Key fields:
  - kind: "deposit" or "withdraw" — the direction of money flow
  - amount_cents: Always positive (the direction is implied by kind)
  - sequence: 1, 2, 3, ... per user, allocated under the user's ledger lock.
    Statements are ordered by it, so insertion order is stable even when two
    rows share a created_at timestamp.

Why there is no balance column anywhere:
  The balance is Σ deposits − Σ withdrawals over the user's rows, computed
  on read. Nothing can drift out of sync with the history.

Why amount_cents is an integer:
  Integer cents make all arithmetic exact; $10.50 is stored as 1050.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from ledger_api.database import Base

MAX_DESCRIPTION_LENGTH = 255


class TransactionKind(str, enum.Enum):
    """
    Direction of a ledger entry.

    Inherits from str so the value serializes naturally to JSON.
    """
    DEPOSIT = "deposit"     # Money in
    WITHDRAW = "withdraw"   # Money out


class Transaction(Base):
    __tablename__ = "transactions"

    __table_args__ = (
        # Amount must always be positive — direction is indicated by kind
        CheckConstraint("amount_cents > 0", name="ck_transactions_positive_amount"),
        UniqueConstraint("user_id", "sequence", name="uq_transactions_user_sequence"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    # Owning user — immutable
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    # Position in the user's ledger (1-based)
    sequence: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    kind: Mapped[TransactionKind] = mapped_column(
        Enum(TransactionKind),
        nullable=False,
    )

    amount_cents: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    description: Mapped[str | None] = mapped_column(
        String(MAX_DESCRIPTION_LENGTH),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    @property
    def signed_amount_cents(self) -> int:
        """Amount as it affects the balance: + for deposits, - for withdrawals."""
        if self.kind == TransactionKind.DEPOSIT:
            return self.amount_cents
        return -self.amount_cents
