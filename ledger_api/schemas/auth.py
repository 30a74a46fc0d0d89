"""
Pydantic schemas for registration and login endpoints.

Pydantic validates incoming data automatically — if a required field is
missing or the wrong type, FastAPI returns a 422 error before our code
even runs.
"""

from pydantic import BaseModel, EmailStr, Field

from ledger_api.schemas.user import UserResponse


class UserCreateRequest(BaseModel):
    """Request body for POST /api/v1/users."""
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr                                # Validates email format
    password: str = Field(min_length=6)


class SessionCreateRequest(BaseModel):
    """Request body for POST /api/v1/sessions."""
    email: EmailStr
    password: str


class SessionResponse(BaseModel):
    """Response body for a successful login — the user plus a bearer token."""
    user: UserResponse
    token: str
    token_type: str = "bearer"
