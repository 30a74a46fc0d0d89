"""
Profile router.

Endpoints:
  GET /api/v1/profile  — The authenticated user's own record
"""

from fastapi import APIRouter, Depends

from ledger_api.dependencies import get_current_user
from ledger_api.models.user import User
from ledger_api.schemas.user import UserResponse

router = APIRouter()


@router.get(
    "/profile",
    response_model=UserResponse,
    summary="Get current user's profile",
)
async def get_profile(user: User = Depends(get_current_user)):
    """Return the user the bearer token was issued for."""
    return user
