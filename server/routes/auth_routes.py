"""Authentication API routes."""

from fastapi import APIRouter, Depends

from server.dependencies import get_auth_service
from server.schemas.auth import AuthResponse, CredentialsRequest, UserSummary
from server.services.auth_service import AuthService

router = APIRouter(prefix="/api", tags=["Authentication"])


@router.post("/login", response_model=AuthResponse)
def login(request: CredentialsRequest, auth_service: AuthService = Depends(get_auth_service)):
    """
    Check a username and password.

    Returns:
        - success: true
        - user: {id, username}

    Raises:
        - 400: Username or password missing
        - 401: Invalid credentials
    """
    user = auth_service.login_user(request.username, request.password)
    return AuthResponse(user=UserSummary(id=user.id, username=user.username))


@router.post("/register", response_model=AuthResponse)
def register(request: CredentialsRequest, auth_service: AuthService = Depends(get_auth_service)):
    """
    Register a new user account.

    Returns:
        - success: true
        - user: {id, username}

    Raises:
        - 400: Missing or too short credentials, or username already exists
    """
    user = auth_service.register_user(request.username, request.password)
    return AuthResponse(user=UserSummary(id=user.id, username=user.username))
