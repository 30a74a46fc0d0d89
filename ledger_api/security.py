"""
Security utilities: password hashing, session token signing, and the clock.

This module centralizes all cryptographic operations so they're easy to
audit and update. It is the only place that imports passlib or jose; the
services depend on the small functions below instead.

1. PASSWORD HASHING (Argon2)
   - Passwords are never stored in plaintext
   - Argon2id is memory-hard and time-hard, which makes GPU cracking expensive
   - passlib's CryptContext provides hash / verify / dummy_verify

2. SESSION TOKENS (JWT, HS256)
   - After login, the user receives a signed JWT containing their user ID
     ("sub") and an expiry ("exp")
   - Tokens expire ACCESS_TOKEN_EXPIRE_MINUTES after issuance (default 24h)
   - The server is stateless: there is no session table and no revocation

3. CLOCK
   - utcnow() is the single source of "now" for issuing and validating
     tokens. Callers may pass an explicit `now` instead, which is how the
     tests exercise expiry without sleeping.
"""

from datetime import datetime, timedelta, timezone

from jose import jwt
from passlib.context import CryptContext

from ledger_api.config import settings


# ---------------------------------------------------------------------------
# 1. Password Hashing (Argon2)
# ---------------------------------------------------------------------------

# If we ever migrate off argon2, passlib verifies old hashes with the
# original scheme and hashes new passwords with the new one.
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(plain_password: str) -> str:
    """
    Hash a plaintext password using Argon2id.

    Returns:
        An Argon2 hash string (e.g., "$argon2id$v=19$m=65536,t=3,p=4$...").
    """
    return pwd_context.hash(plain_password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plaintext password against a stored Argon2 hash."""
    return pwd_context.verify(plain_password, hashed_password)


def dummy_verify() -> None:
    """
    Spend roughly the time of one real verify_password() call.

    Used on the "unknown email" login path so it is not measurably faster
    than the "wrong password" path.
    """
    pwd_context.dummy_verify()


# ---------------------------------------------------------------------------
# 2. Clock
# ---------------------------------------------------------------------------


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# 3. Session Tokens (JWT)
# ---------------------------------------------------------------------------


def create_access_token(
    data: dict,
    expires_delta: timedelta | None = None,
    now: datetime | None = None,
) -> str:
    """
    Create a signed JWT access token.

    The token payload contains:
      - "sub": The subject (user ID as string) — standard JWT claim
      - "iat": Issued-at timestamp
      - "exp": Expiration timestamp — at or after this, the token is rejected

    Args:
        data: Dictionary of claims to encode (must include "sub").
        expires_delta: Optional custom validity window. Defaults to
                       ACCESS_TOKEN_EXPIRE_MINUTES from settings.
        now: Issuance time. Defaults to utcnow().

    Returns:
        An encoded JWT string.
    """
    issued_at = now or utcnow()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = data.copy()
    to_encode.update({"iat": issued_at, "exp": issued_at + expires_delta})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Verify a JWT's signature and return its claims WITHOUT checking expiry.

    Expiry is checked by the session validator against its own clock, so
    that "expired" and "forged" stay distinguishable and testable.

    Raises:
        JWTError: If the token is tampered with, signed with another key,
                  or not a JWT at all.
    """
    return jwt.decode(
        token,
        settings.SECRET_KEY,
        algorithms=[settings.ALGORITHM],
        options={"verify_exp": False, "verify_iat": False},
    )
