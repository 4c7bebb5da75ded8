"""Pydantic schemas for authentication endpoints."""

from typing import Optional

from pydantic import BaseModel


class CredentialsRequest(BaseModel):
    """Request model for login and registration.

    Fields are optional so a missing value is reported as a 400 by the
    service instead of a schema error.
    """
    username: Optional[str] = None
    password: Optional[str] = None


class UserSummary(BaseModel):
    id: int
    username: str


class AuthResponse(BaseModel):
    """Response model for login and registration."""
    success: bool = True
    user: UserSummary
