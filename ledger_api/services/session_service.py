"""
Session service — turns a presented bearer token into a user id.

A session is nothing but a signed token: {"sub": <user id>, "exp": <expiry>}.
Validation is two separate checks, each with its own error:

  1. Is it ours?    Signature, algorithm, and claim shapes.  -> MalformedTokenError
  2. Is it current? now >= exp means the session is over.    -> ExpiredSessionError

The validator does NOT look the user up. A token for a user id that no
longer exists still validates here; endpoints that need the User row load
it themselves (see the profile route).
"""

import uuid
from datetime import datetime

from jose import JWTError

from ledger_api.exceptions import ExpiredSessionError, MalformedTokenError
from ledger_api.security import decode_access_token, utcnow


def validate_token(token: str, now: datetime | None = None) -> uuid.UUID:
    """
    Validate a session token and return the user id it carries.

    Args:
        token: The raw JWT from the Authorization header.
        now: The time to check expiry against. Defaults to utcnow().

    Returns:
        The user id embedded in the token's "sub" claim.

    Raises:
        MalformedTokenError: Bad signature, not a JWT, or missing/invalid
            "sub" or "exp" claims.
        ExpiredSessionError: The token is well formed but expired.
    """
    try:
        payload = decode_access_token(token)
    except JWTError:
        raise MalformedTokenError()

    subject = payload.get("sub")
    expires_at = payload.get("exp")

    if not isinstance(subject, str):
        raise MalformedTokenError()
    try:
        user_id = uuid.UUID(subject)
    except ValueError:
        raise MalformedTokenError()

    # bool is an int subclass; a literal true/false is not a timestamp
    if isinstance(expires_at, bool) or not isinstance(expires_at, (int, float)):
        raise MalformedTokenError()

    current = now or utcnow()
    if current.timestamp() >= expires_at:
        raise ExpiredSessionError()

    return user_id
