"""
Custom exception classes and FastAPI exception handlers.

The service layer raises domain-specific errors (like InsufficientFundsError)
without importing HTTP concepts. The handlers registered here translate them
into HTTP responses with a consistent body:

    {"detail": "<message>", "error_type": "<snake_case kind>"}

Exception hierarchy (the services raise only these):
    LedgerAPIError (base)
    ├── InvalidCredentialsError  — login failed (unknown email OR wrong password)  401
    ├── MalformedTokenError      — token undecodable, forged, or missing claims    401
    ├── ExpiredSessionError      — token signature fine but past its expiry        401
    ├── InvalidAmountError       — amount not positive or beyond the ledger limits  400
    ├── InvalidDescriptionError  — description longer than the column allows      400
    ├── InsufficientFundsError   — withdrawal would drive the balance below zero   400
    ├── StatementNotFoundError   — transaction missing or owned by another user    404
    ├── UserNotFoundError        — session resolves to a user that doesn't exist   404
    └── DuplicateEmailError      — registering an email that is already in use     409
"""

import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class LedgerAPIError(Exception):
    """Base exception for all Ledger API domain errors."""

    status_code = 400
    error_type = "ledger_error"

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(self.detail)


# ---------------------------------------------------------------------------
# Authentication / session exceptions
# ---------------------------------------------------------------------------

class InvalidCredentialsError(LedgerAPIError):
    """
    Raised when login credentials are incorrect.

    The message is identical whether the email is unknown or the password
    is wrong, so the response cannot be used to enumerate registered emails.
    """

    status_code = 401
    error_type = "invalid_credentials"

    def __init__(self):
        super().__init__("Invalid email or password")


class MalformedTokenError(LedgerAPIError):
    """Raised when a session token cannot be parsed or verified."""

    status_code = 401
    error_type = "malformed_token"

    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(detail)


class ExpiredSessionError(LedgerAPIError):
    """Raised when a correctly signed session token is past its expiry."""

    status_code = 401
    error_type = "expired_session"

    def __init__(self):
        super().__init__("Session has expired")


# ---------------------------------------------------------------------------
# Ledger exceptions
# ---------------------------------------------------------------------------

class InvalidAmountError(LedgerAPIError):
    """
    Raised when a deposit or withdrawal amount can't be recorded.

    That is: zero or negative, larger than MAX_AMOUNT_CENTS, or a deposit
    that would take the balance past MAX_BALANCE_CENTS.
    """

    status_code = 400
    error_type = "invalid_amount"

    def __init__(self, amount_cents: int, reason: str = "must be positive"):
        self.amount_cents = amount_cents
        super().__init__(f"Amount {reason}, got {amount_cents} cents")


class InvalidDescriptionError(LedgerAPIError):
    """Raised when a ledger entry description is longer than allowed."""

    status_code = 400
    error_type = "invalid_description"

    def __init__(self, max_length: int):
        self.max_length = max_length
        super().__init__(f"Description must be at most {max_length} characters")


class InsufficientFundsError(LedgerAPIError):
    """
    Raised when a withdrawal would cause a negative balance.

    Attributes:
        user_id: The ledger owner that lacks sufficient funds.
        requested_cents: The amount the user tried to withdraw.
        available_cents: The balance at the moment of the check.
    """

    status_code = 400
    error_type = "insufficient_funds"

    def __init__(
        self,
        user_id: uuid.UUID,
        requested_cents: int,
        available_cents: int,
    ):
        self.user_id = user_id
        self.requested_cents = requested_cents
        self.available_cents = available_cents
        super().__init__(
            f"Insufficient funds: requested {requested_cents} cents, "
            f"available {available_cents} cents"
        )


class StatementNotFoundError(LedgerAPIError):
    """
    Raised when a transaction doesn't exist OR belongs to another user.

    Both cases use the same message so a user can't probe for the
    existence of someone else's transactions.
    """

    status_code = 404
    error_type = "statement_not_found"

    def __init__(self, transaction_id: uuid.UUID):
        self.transaction_id = transaction_id
        super().__init__(f"Statement {transaction_id} not found")


# ---------------------------------------------------------------------------
# User exceptions
# ---------------------------------------------------------------------------

class UserNotFoundError(LedgerAPIError):
    """Raised when a (validly signed) session refers to a missing user."""

    status_code = 404
    error_type = "user_not_found"

    def __init__(self, user_id: uuid.UUID):
        self.user_id = user_id
        super().__init__(f"User {user_id} not found")


class DuplicateEmailError(LedgerAPIError):
    """Raised when attempting to register with an email that's already in use."""

    status_code = 409
    error_type = "duplicate_email"

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Email {email} is already registered")


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register custom exception handlers with the FastAPI application.

    Each handler maps a domain exception to its HTTP status code and
    the consistent JSON response format. Called once in main.py.
    """

    @app.exception_handler(InsufficientFundsError)
    async def insufficient_funds_handler(
        request: Request, exc: InsufficientFundsError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": exc.detail,
                "error_type": exc.error_type,
                "requested_cents": exc.requested_cents,
                "available_cents": exc.available_cents,
            },
        )

    @app.exception_handler(MalformedTokenError)
    @app.exception_handler(ExpiredSessionError)
    async def session_error_handler(
        request: Request, exc: LedgerAPIError
    ) -> JSONResponse:
        # RFC 6750: a 401 for a bearer-protected resource carries a challenge
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail, "error_type": exc.error_type},
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(LedgerAPIError)
    async def ledger_error_handler(
        request: Request, exc: LedgerAPIError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail, "error_type": exc.error_type},
        )
