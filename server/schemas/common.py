"""Common schemas used across multiple endpoints."""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Response model for errors."""
    success: bool = False
    error: str
    code: str


class HealthResponse(BaseModel):
    """Response model for the health check."""
    status: str
    message: str
    timestamp: str
