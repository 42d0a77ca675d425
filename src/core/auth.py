"""
Bearer token authentication for the admin API.

Tokens are HS256 JWTs issued to the single configured admin account.
"""

import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Annotated, Any

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from src.core.config import Settings, get_settings
from src.core.exceptions import (
    AuthenticationError,
    InvalidCredentialsError,
    InvalidTokenError,
)
from src.core.logging import get_logger

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class AuthenticatedUser:
    """Identity extracted from a validated access token."""

    username: str
    role: str
    token_id: str | None = None


@dataclass
class IssuedToken:
    """A freshly signed access token."""

    token: str
    username: str
    expires_at: datetime


class AuthService:
    """Issues and validates admin access tokens."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def authenticate(self, username: str, password: str) -> IssuedToken:
        """
        Check admin credentials and issue a token.

        Raises:
            InvalidCredentialsError: If username or password do not match.
        """
        username_ok = secrets.compare_digest(
            username.encode("utf-8"), self.settings.admin_username.encode("utf-8")
        )
        password_ok = secrets.compare_digest(
            password.encode("utf-8"), self.settings.admin_password.encode("utf-8")
        )
        if not (username_ok and password_ok):
            logger.info("login_rejected", username=username)
            raise InvalidCredentialsError()

        return self.create_access_token(username)

    def create_access_token(
        self,
        username: str,
        expires_delta: timedelta | None = None,
    ) -> IssuedToken:
        """Create a signed JWT for the given username."""
        if expires_delta is None:
            expires_delta = timedelta(minutes=self.settings.access_token_expire_minutes)
        expires_at = datetime.now(timezone.utc) + expires_delta

        claims: dict[str, Any] = {
            "sub": username,
            "name": username,
            "role": "Admin",
            "jti": str(uuid.uuid4()),
            "iss": self.settings.jwt_issuer,
            "aud": self.settings.jwt_audience,
            "exp": expires_at,
        }
        token = jwt.encode(
            claims,
            self.settings.jwt_secret_key,
            algorithm=self.settings.jwt_algorithm,
        )
        return IssuedToken(token=token, username=username, expires_at=expires_at)

    def validate_token(self, token: str) -> AuthenticatedUser:
        """
        Verify signature, expiry, issuer and audience of a token.

        Raises:
            InvalidTokenError: If the token cannot be trusted.
        """
        try:
            payload = jwt.decode(
                token,
                self.settings.jwt_secret_key,
                algorithms=[self.settings.jwt_algorithm],
                audience=self.settings.jwt_audience,
                issuer=self.settings.jwt_issuer,
                options={"require_exp": True, "require_sub": True},
            )
        except JWTError as e:
            raise InvalidTokenError(details={"reason": str(e)}) from e

        return AuthenticatedUser(
            username=payload.get("name") or payload["sub"],
            role=payload.get("role", ""),
            token_id=payload.get("jti"),
        )


def get_auth_service(
    settings: Annotated[Settings, Depends(get_settings)],
) -> AuthService:
    """Dependency returning an AuthService bound to current settings."""
    return AuthService(settings)


async def get_current_user(
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ] = None,
) -> AuthenticatedUser:
    """
    Resolve the caller from the Authorization header.

    Raises:
        AuthenticationError: If no bearer token is present.
        InvalidTokenError: If the token is invalid.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError(message="Missing bearer token")

    return auth_service.validate_token(credentials.credentials)


CurrentUser = Annotated[AuthenticatedUser, Depends(get_current_user)]
