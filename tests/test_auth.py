"""
Authentication tests: token issuance and validation.
"""

from datetime import timedelta

import pytest
from httpx import AsyncClient
from jose import jwt

from src.core.auth import AuthService
from src.core.config import Settings
from src.core.exceptions import InvalidCredentialsError, InvalidTokenError


@pytest.fixture
def auth_service(test_settings: Settings) -> AuthService:
    return AuthService(test_settings)


def test_authenticate_issues_token(auth_service: AuthService, test_settings: Settings):
    issued = auth_service.authenticate("admin", "admin123")

    claims = jwt.get_unverified_claims(issued.token)
    assert claims["sub"] == "admin"
    assert claims["name"] == "admin"
    assert claims["role"] == "Admin"
    assert claims["iss"] == test_settings.jwt_issuer
    assert claims["aud"] == test_settings.jwt_audience
    assert claims["jti"]
    assert issued.username == "admin"


@pytest.mark.parametrize("username,password", [("admin", "wrong"), ("root", "admin123"), ("", "")])
def test_authenticate_rejects_bad_credentials(auth_service: AuthService, username, password):
    with pytest.raises(InvalidCredentialsError):
        auth_service.authenticate(username, password)


def test_token_round_trip(auth_service: AuthService):
    issued = auth_service.create_access_token("admin")

    user = auth_service.validate_token(issued.token)

    assert user.username == "admin"
    assert user.role == "Admin"
    assert user.token_id


def test_expired_token_rejected(auth_service: AuthService):
    issued = auth_service.create_access_token("admin", expires_delta=timedelta(seconds=-10))

    with pytest.raises(InvalidTokenError):
        auth_service.validate_token(issued.token)


def test_token_from_other_key_rejected(auth_service: AuthService, test_settings: Settings):
    other = AuthService(test_settings.model_copy(update={"jwt_secret_key": "another-secret-key-0123456789abcdef"}))
    issued = other.create_access_token("admin")

    with pytest.raises(InvalidTokenError):
        auth_service.validate_token(issued.token)


def test_token_for_other_audience_rejected(auth_service: AuthService, test_settings: Settings):
    other = AuthService(test_settings.model_copy(update={"jwt_audience": "SomeoneElse"}))
    issued = other.create_access_token("admin")

    with pytest.raises(InvalidTokenError):
        auth_service.validate_token(issued.token)


def test_garbage_token_rejected(auth_service: AuthService):
    with pytest.raises(InvalidTokenError):
        auth_service.validate_token("not-a-jwt")


# =============================================================================
# Endpoints
# =============================================================================


@pytest.mark.asyncio
async def test_login_endpoint(client: AsyncClient):
    response = await client.post(
        "/api/auth/login",
        json={"username": "admin", "password": "admin123"},
    )
    assert response.status_code == 200

    data = response.json()
    assert data["token"]
    assert data["username"] == "admin"
    assert "expiresAt" in data


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient):
    response = await client.post(
        "/api/auth/login",
        json={"username": "admin", "password": "nope"},
    )
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_CREDENTIALS"


@pytest.mark.asyncio
async def test_validate_endpoint(client: AsyncClient, auth_headers: dict):
    response = await client.post("/api/auth/validate", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"valid": True, "username": "admin"}


@pytest.mark.asyncio
async def test_validate_without_token(client: AsyncClient):
    response = await client.post("/api/auth/validate")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_validate_with_invalid_token(client: AsyncClient):
    response = await client.post(
        "/api/auth/validate",
        headers={"Authorization": "Bearer invalid.token.value"},
    )
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_TOKEN"
