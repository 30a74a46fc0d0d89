"""
Authentication service — registration and login business logic.

This module contains the core auth logic, separated from HTTP concerns.
The router calls these functions and translates the results into HTTP
responses.

Registration flow:
  1. Check if email is already registered
  2. Hash the password with Argon2id
  3. Insert the User (a concurrent insert of the same email loses on the
     unique index and is reported the same way)

Login flow:
  1. Look up user by email
  2. Verify password against stored hash
  3. Return a signed session token

Security notes:
  - Login returns the same error for "wrong password" and "email not found"
    to prevent user enumeration. The unknown-email path still runs a dummy
    Argon2 verification so the two paths take comparable time.
  - Session tokens are stateless — nothing is persisted at login.
"""

import uuid
from datetime import datetime

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_api.exceptions import (
    DuplicateEmailError,
    InvalidCredentialsError,
    UserNotFoundError,
)
from ledger_api.models.user import User
from ledger_api.security import (
    create_access_token,
    dummy_verify,
    hash_password,
    verify_password,
)

logger = structlog.get_logger(__name__)


async def register(
    db: AsyncSession,
    name: str,
    email: str,
    password: str,
) -> User:
    """
    Register a new user.

    Args:
        db: Database session.
        name: Display name.
        email: Login email (must be unique).
        password: Plaintext password (hashed before storage).

    Returns:
        The created User.

    Raises:
        DuplicateEmailError: If the email is already registered.
    """
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none() is not None:
        raise DuplicateEmailError(email)

    user = User(
        name=name,
        email=email,
        hashed_password=hash_password(password),
    )
    db.add(user)
    # Flush to get user.id assigned
    try:
        await db.flush()
    except IntegrityError as exc:
        logger.info("registration_conflict")
        raise DuplicateEmailError(email) from exc

    logger.info("user_registered", user_id=str(user.id))
    return user


async def authenticate(
    db: AsyncSession,
    email: str,
    password: str,
    now: datetime | None = None,
) -> tuple[User, str]:
    """
    Verify credentials and issue a session token.

    Args:
        db: Database session.
        email: User's email.
        password: Plaintext password to verify.
        now: Issuance time for the token (defaults to the current time).

    Returns:
        Tuple of (User instance, signed token string).

    Raises:
        InvalidCredentialsError: If the email doesn't exist or the password
            is wrong. Callers cannot tell which.
    """
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    if user is None:
        dummy_verify()
        logger.info("login_failed")
        raise InvalidCredentialsError()

    if not verify_password(password, user.hashed_password):
        logger.info("login_failed")
        raise InvalidCredentialsError()

    # "sub" (subject) is the standard claim for user identity
    token = create_access_token(data={"sub": str(user.id)}, now=now)
    logger.info("login_succeeded", user_id=str(user.id))
    return user, token


async def get_user(db: AsyncSession, user_id: uuid.UUID) -> User:
    """
    Load a user by id.

    Raises:
        UserNotFoundError: If no such user exists.
    """
    user = await db.get(User, user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return user
