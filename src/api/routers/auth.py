"""
Authentication API router.

Issues and validates admin bearer tokens.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from src.core.auth import AuthService, CurrentUser, get_auth_service
from src.models.auth import LoginRequest, LoginResponse, ValidateResponse

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Log in",
    description="Exchange admin credentials for a bearer token.",
)
async def login(
    credentials: LoginRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> LoginResponse:
    """Authenticate the admin account and return a signed token."""
    issued = auth_service.authenticate(credentials.username, credentials.password)

    return LoginResponse(
        token=issued.token,
        username=issued.username,
        expires_at=issued.expires_at,
    )


@router.post(
    "/validate",
    response_model=ValidateResponse,
    summary="Validate token",
    description="Check the bearer token sent in the Authorization header.",
)
async def validate(user: CurrentUser) -> ValidateResponse:
    """Return the token's username when it is valid; 401 otherwise."""
    return ValidateResponse(valid=True, username=user.username)
