"""
Authentication API Routes for Product Tracker.

Handles:
- User registration
- User login (token issuance)
"""

from fastapi import APIRouter, Depends, status

from producttracker.api.dependencies import get_auth_service
from producttracker.api.schemas import AuthResponse, Credentials, ErrorResponse
from producttracker.services.auth_service import AuthResult, AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


def _auth_response(message: str, result: AuthResult) -> AuthResponse:
    return AuthResponse(message=message, token=result.token, user=result.user_dict())


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Missing fields or email already registered"},
    },
)
async def register(
    credentials: Credentials,
    auth: AuthService = Depends(get_auth_service),
):
    """Register a new user and return a token for it."""
    result = await auth.register(credentials.email, credentials.password)
    return _auth_response("User successfully registered", result)


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing fields or invalid credentials"},
    },
)
async def login(
    credentials: Credentials,
    auth: AuthService = Depends(get_auth_service),
):
    """
    Login endpoint.
    Returns a token if credentials are valid.
    """
    result = await auth.login(credentials.email, credentials.password)
    return _auth_response("User successfully logged in", result)
