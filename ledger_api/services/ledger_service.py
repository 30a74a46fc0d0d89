"""
Ledger service — the core financial business logic.

THIS IS THE MOST CRITICAL FILE IN THE PROJECT. It handles:
  - Deposits and withdrawals (append-only ledger entries)
  - Balance computation from the full transaction history
  - The overdraft rule: a withdrawal can never drive the balance below zero
  - Single-entry lookups with ownership scoping

Balance is derived, never stored:
  balance = Σ deposits − Σ withdrawals over ALL of the user's transactions.
  It is recomputed on every read and every withdrawal check. There is no
  cached column that could drift out of sync with the history.

Limits:
  Every amount must be in 1..MAX_AMOUNT_CENTS, and a deposit may not take
  the balance past MAX_BALANCE_CENTS (both in settings). Balances and the
  SQL sum over a user's history therefore stay inside a signed 64-bit
  integer. Descriptions are capped at MAX_DESCRIPTION_LENGTH characters
  here as well as in the request schema.

Serialization (per user):
  A withdrawal is "read balance, compare, insert". Two concurrent requests
  for the same user could both pass the comparison and jointly overdraw.
  To prevent that, every write for a user runs inside that user's critical
  section:

    1. acquire the user's asyncio.Lock (UserLocks)
    2. SELECT the user row FOR UPDATE (no-op on SQLite, row lock on PostgreSQL)
    3. compute balance + next sequence number
    4. insert the transaction
    5. COMMIT
    6. release the lock

  The commit happens BEFORE the lock is released, so the next writer for
  this user always sees the previous writer's row. Different users never
  share a lock and never wait on each other.

  Deposits take the same lock because they allocate the next per-user
  sequence number, which defines statement order.
"""

import asyncio
import uuid
import weakref
from contextlib import asynccontextmanager

import structlog
from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_api.config import settings
from ledger_api.exceptions import (
    InsufficientFundsError,
    InvalidAmountError,
    InvalidDescriptionError,
    StatementNotFoundError,
    UserNotFoundError,
)
from ledger_api.models.transaction import (
    MAX_DESCRIPTION_LENGTH,
    Transaction,
    TransactionKind,
)
from ledger_api.models.user import User

logger = structlog.get_logger(__name__)


class UserLocks:
    """
    One asyncio.Lock per user id, created on demand.

    Locks live in a WeakValueDictionary: while a request holds (or waits on)
    a user's lock it keeps a strong reference, and once nobody does the
    entry disappears on its own.
    """

    def __init__(self):
        self._locks: weakref.WeakValueDictionary[uuid.UUID, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, user_id: uuid.UUID) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock

    @asynccontextmanager
    async def hold(self, user_id: uuid.UUID):
        lock = self._lock_for(user_id)
        async with lock:
            yield


# Process-wide registry used by the API. Tests may pass their own.
user_locks = UserLocks()


async def _ledger_position(db: AsyncSession, user_id: uuid.UUID) -> tuple[int, int]:
    """Return (current balance in cents, highest sequence number) for a user."""
    signed_amount = case(
        (Transaction.kind == TransactionKind.DEPOSIT, Transaction.amount_cents),
        else_=-Transaction.amount_cents,
    )
    result = await db.execute(
        select(
            func.coalesce(func.sum(signed_amount), 0),
            func.coalesce(func.max(Transaction.sequence), 0),
        ).where(Transaction.user_id == user_id)
    )
    balance, last_sequence = result.one()
    return int(balance), int(last_sequence)


def _check_entry(amount_cents: int, description: str | None) -> None:
    if amount_cents <= 0:
        raise InvalidAmountError(amount_cents)
    if amount_cents > settings.MAX_AMOUNT_CENTS:
        raise InvalidAmountError(
            amount_cents,
            reason=f"must not exceed {settings.MAX_AMOUNT_CENTS} cents",
        )
    if description is not None and len(description) > MAX_DESCRIPTION_LENGTH:
        raise InvalidDescriptionError(MAX_DESCRIPTION_LENGTH)


async def _lock_user_row(db: AsyncSession, user_id: uuid.UUID) -> User:
    result = await db.execute(
        select(User)
        .where(User.id == user_id)
        .with_for_update()  # No-op on SQLite, locks row on PostgreSQL
    )
    user = result.scalar_one_or_none()
    if user is None:
        raise UserNotFoundError(user_id)
    return user


async def _append(
    db: AsyncSession,
    user_id: uuid.UUID,
    kind: TransactionKind,
    amount_cents: int,
    description: str | None,
    sequence: int,
) -> Transaction:
    txn = Transaction(
        user_id=user_id,
        sequence=sequence,
        kind=kind,
        amount_cents=amount_cents,
        description=description,
    )
    db.add(txn)
    await db.commit()
    return txn


async def get_balance(db: AsyncSession, user_id: uuid.UUID) -> dict:
    """
    Return the user's balance and full statement.

    The balance is summed from the statement that is returned, so the two
    are always consistent with each other.

    Returns:
        {"balance_cents": int, "statement": list[Transaction]} with the
        statement in insertion order (oldest first).
    """
    result = await db.execute(
        select(Transaction)
        .where(Transaction.user_id == user_id)
        .order_by(Transaction.sequence.asc())
    )
    statement = list(result.scalars().all())
    balance = sum(t.signed_amount_cents for t in statement)

    return {"balance_cents": balance, "statement": statement}


async def deposit(
    db: AsyncSession,
    user_id: uuid.UUID,
    amount_cents: int,
    description: str | None = None,
    locks: UserLocks = user_locks,
) -> Transaction:
    """
    Record a deposit.

    Raises:
        InvalidAmountError: If amount_cents <= 0, exceeds MAX_AMOUNT_CENTS,
            or would take the balance past MAX_BALANCE_CENTS.
        InvalidDescriptionError: If the description is too long.
        UserNotFoundError: If the user doesn't exist.
    """
    _check_entry(amount_cents, description)

    async with locks.hold(user_id):
        await _lock_user_row(db, user_id)
        balance, last_sequence = await _ledger_position(db, user_id)

        if balance + amount_cents > settings.MAX_BALANCE_CENTS:
            raise InvalidAmountError(
                amount_cents,
                reason=f"would take the balance past {settings.MAX_BALANCE_CENTS} cents",
            )

        txn = await _append(
            db, user_id, TransactionKind.DEPOSIT, amount_cents, description,
            sequence=last_sequence + 1,
        )

    logger.info(
        "deposit_recorded",
        user_id=str(user_id),
        transaction_id=str(txn.id),
        amount_cents=amount_cents,
    )
    return txn


async def withdraw(
    db: AsyncSession,
    user_id: uuid.UUID,
    amount_cents: int,
    description: str | None = None,
    locks: UserLocks = user_locks,
) -> Transaction:
    """
    Record a withdrawal if, and only if, the balance covers it.

    Withdrawing the exact balance is allowed (leaves zero). On rejection
    nothing is written.

    Raises:
        InvalidAmountError: If amount_cents <= 0 or exceeds MAX_AMOUNT_CENTS.
        InvalidDescriptionError: If the description is too long.
        InsufficientFundsError: If balance - amount_cents would be negative.
        UserNotFoundError: If the user doesn't exist.
    """
    _check_entry(amount_cents, description)

    async with locks.hold(user_id):
        await _lock_user_row(db, user_id)
        balance, last_sequence = await _ledger_position(db, user_id)

        if balance - amount_cents < 0:
            logger.info(
                "withdrawal_rejected",
                user_id=str(user_id),
                requested_cents=amount_cents,
                available_cents=balance,
            )
            raise InsufficientFundsError(
                user_id=user_id,
                requested_cents=amount_cents,
                available_cents=balance,
            )

        txn = await _append(
            db, user_id, TransactionKind.WITHDRAW, amount_cents, description,
            sequence=last_sequence + 1,
        )

    logger.info(
        "withdrawal_recorded",
        user_id=str(user_id),
        transaction_id=str(txn.id),
        amount_cents=amount_cents,
    )
    return txn


async def get_statement(
    db: AsyncSession,
    user_id: uuid.UUID,
    transaction_id: uuid.UUID,
) -> Transaction:
    """
    Get a single ledger entry owned by the user.

    Raises:
        StatementNotFoundError: If the transaction doesn't exist or belongs
            to a different user. Both cases are indistinguishable to the caller.
    """
    result = await db.execute(
        select(Transaction)
        .where(Transaction.id == transaction_id)
        .where(Transaction.user_id == user_id)
    )
    txn = result.scalar_one_or_none()

    if txn is None:
        raise StatementNotFoundError(transaction_id)

    return txn
