"""
Authentication router — registration and login endpoints.

These are the only public (unauthenticated) endpoints in the API.
Everything else requires a valid bearer token.

Endpoints:
  POST /api/v1/users     — Register a new user
  POST /api/v1/sessions  — Authenticate and get a token

Security audit notes:
  - Plaintext passwords exist only in memory during request processing;
    they are hashed before any database operation and never logged.
  - Tokens appear only in response bodies, which are never logged.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_api.database import get_db
from ledger_api.schemas.auth import (
    SessionCreateRequest,
    SessionResponse,
    UserCreateRequest,
)
from ledger_api.schemas.user import UserResponse
from ledger_api.services import auth_service

router = APIRouter()


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def create_user(
    request: UserCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Register a new user.

    - **name**: Required, 1-100 characters
    - **email**: Must be a valid email format and not already registered
    - **password**: Minimum 6 characters
    """
    return await auth_service.register(
        db=db,
        name=request.name,
        email=request.email,
        password=request.password,
    )


@router.post(
    "/sessions",
    response_model=SessionResponse,
    summary="Authenticate and get a token",
)
async def create_session(
    request: SessionCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Authenticate with email and password.

    Returns a bearer token that must be included in the Authorization
    header for all subsequent requests:

        Authorization: Bearer <token>

    The token expires after ACCESS_TOKEN_EXPIRE_MINUTES (default: 24 hours).
    """
    user, token = await auth_service.authenticate(
        db=db,
        email=request.email,
        password=request.password,
    )

    return SessionResponse(user=UserResponse.model_validate(user), token=token)
