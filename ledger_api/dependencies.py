"""
FastAPI dependencies for authentication.

Dependencies are reusable functions that FastAPI injects into route handlers.
The chain is short:

  get_now                      (clock — overridden in tests)
  get_current_user_id          (bearer token -> user id, no DB access)
      └── get_current_user     (user id -> User row, for the profile endpoint)

Ledger endpoints only need the user id: every ledger query is scoped by it,
so there is no way to name another user's data.

If a dependency fails (missing, forged, or expired token), the request is
rejected with 401 before the route handler runs.
"""

import uuid
from datetime import datetime

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_api.database import get_db
from ledger_api.models.user import User
from ledger_api.security import utcnow
from ledger_api.services import auth_service, session_service


# Look for "Authorization: Bearer <token>". tokenUrl is what Swagger UI's
# "Authorize" button posts to.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/sessions")


def get_now() -> datetime:
    """The request's notion of "now"; tests override this to move time."""
    return utcnow()


async def get_current_user_id(
    token: str = Depends(oauth2_scheme),
    now: datetime = Depends(get_now),
) -> uuid.UUID:
    """
    Resolve the bearer token to the user id it was issued for.

    Raises:
        MalformedTokenError: Token forged, truncated, or missing claims (401).
        ExpiredSessionError: Token past its expiry (401).
    """
    return session_service.validate_token(token, now=now)


async def get_current_user(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Load the authenticated User row.

    Raises:
        UserNotFoundError: The token is valid but its user doesn't exist (404).
    """
    return await auth_service.get_user(db, user_id)
