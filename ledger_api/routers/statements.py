"""
Statements router — the user's ledger.

Every endpoint is scoped to the user id carried by the bearer token; no
endpoint accepts a user id from the request body or path.

Endpoints:
  GET  /api/v1/statements/balance         — Balance + full statement
  POST /api/v1/statements/deposit         — Record a deposit
  POST /api/v1/statements/withdraw        — Record a withdrawal (no overdraft)
  GET  /api/v1/statements/{statement_id}  — A single ledger entry

/balance is declared before /{statement_id} so it isn't captured by the
path parameter.
"""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_api.database import get_db
from ledger_api.dependencies import get_current_user_id
from ledger_api.schemas.statement import BalanceResponse
from ledger_api.schemas.transaction import (
    TransactionCreateRequest,
    TransactionResponse,
)
from ledger_api.services import ledger_service

router = APIRouter()


@router.get(
    "/balance",
    response_model=BalanceResponse,
    summary="Get balance and statement",
)
async def get_balance(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Return the current balance and every transaction, oldest first.

    The balance is recomputed from the statement on every call.
    """
    return await ledger_service.get_balance(db=db, user_id=user_id)


@router.post(
    "/deposit",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a deposit",
)
async def create_deposit(
    request: TransactionCreateRequest,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Add money to the ledger.

    All amounts are in **integer cents** (e.g., $10.50 = 1050) and must be
    positive; zero or negative amounts are rejected with 400.
    """
    return await ledger_service.deposit(
        db=db,
        user_id=user_id,
        amount_cents=request.amount,
        description=request.description,
    )


@router.post(
    "/withdraw",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a withdrawal",
)
async def create_withdrawal(
    request: TransactionCreateRequest,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Take money out of the ledger.

    Rejected with 400 if the amount isn't positive or exceeds the current
    balance. A rejected withdrawal records nothing.
    """
    return await ledger_service.withdraw(
        db=db,
        user_id=user_id,
        amount_cents=request.amount,
        description=request.description,
    )


@router.get(
    "/{statement_id}",
    response_model=TransactionResponse,
    summary="Get a single statement entry",
)
async def get_statement(
    statement_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Get one of the user's own transactions; anyone else's is a 404."""
    return await ledger_service.get_statement(
        db=db,
        user_id=user_id,
        transaction_id=statement_id,
    )
