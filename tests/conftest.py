"""
Pytest configuration and fixtures.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.api.main import create_app
from src.core.auth import AuthService
from src.core.config import Settings, get_settings
from src.db.models import Base
from src.db.session import get_db
from src.services.storage.factory import reset_storage_provider
from src.services.storage.local import LocalStorageProvider
from src.services.storage.service import StorageService


# Test settings
@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Create test settings."""
    return Settings(
        app_env="development",
        app_debug=True,
        jwt_secret_key="test-secret-key-for-testing-only-0123456789",
        admin_username="admin",
        admin_password="admin123",
        database_url="sqlite+aiosqlite:///:memory:",
        storage_provider="local",
        storage_container="uploads",
        local_storage_path=str(tmp_path / "storage"),
        public_base_url="http://test",
    )


@pytest.fixture(autouse=True)
def reset_provider():
    """Each test builds its own storage provider."""
    reset_storage_provider()
    yield
    reset_storage_provider()


# In-memory database for tests
@pytest_asyncio.fixture
async def db_engine():
    """Create in-memory SQLite engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def session_maker(db_engine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for testing."""
    async with session_maker() as session:
        yield session


@pytest.fixture
def local_provider(test_settings: Settings) -> LocalStorageProvider:
    """Local provider writing under the test's tmp_path."""
    return LocalStorageProvider(
        base_path=test_settings.local_storage_path,
        public_base_url=test_settings.public_base_url,
    )


@pytest.fixture
def storage_service(local_provider: LocalStorageProvider) -> StorageService:
    """Storage service over the local provider with default policy."""
    return StorageService(local_provider, container="uploads")


# Test client
@pytest_asyncio.fixture
async def client(
    test_settings: Settings,
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """Create test client."""
    app = create_app(test_settings)

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers(test_settings: Settings) -> dict:
    """Return authorization headers with a valid admin token."""
    issued = AuthService(test_settings).create_access_token("admin")
    return {"Authorization": f"Bearer {issued.token}"}
