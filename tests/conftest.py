"""
Pytest configuration and fixtures for Product Tracker tests.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession

from producttracker.api.main import create_app
from producttracker.api.dependencies import (
    Settings,
    init_database,
    dispose_database,
    create_tables,
    init_services,
    session_scope,
)
from producttracker.storage.file_storage import LocalFileStorage


TEST_JWT_SECRET = "test-secret"


# =============================================================================
# Test Settings
# =============================================================================

@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Return settings configured for testing."""
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        database_echo=False,
        jwt_secret=TEST_JWT_SECRET,
        jwt_expires_minutes=60,
        bcrypt_rounds=4,
        upload_dir=str(tmp_path / "uploads"),
        max_upload_size_mb=5,
        environment="test",
        debug=True,
    )


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def database(test_settings):
    """Fresh in-memory database per test."""
    init_database(test_settings)
    await create_tables()

    yield

    await dispose_database()


@pytest_asyncio.fixture
async def db_session(database) -> AsyncGenerator[AsyncSession, None]:
    """Provide database session for tests."""
    async with session_scope() as session:
        yield session
        await session.rollback()


@pytest.fixture
def file_storage(tmp_path) -> LocalFileStorage:
    return LocalFileStorage(tmp_path / "storage")


# =============================================================================
# Application Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def app(test_settings, database):
    """Create FastAPI application for testing."""
    # ASGITransport does not run the lifespan, so wire up what it would
    services = init_services(test_settings)
    application = create_app(test_settings)
    application.state.services = services

    yield application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client for API tests."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def register(client: AsyncClient, email: str, password: str = "password123") -> dict:
    """Register a user and return its id, token and auth headers."""
    response = await client.post(
        "/api/auth/register",
        json={"email": email, "password": password},
    )
    assert response.status_code == 201, response.text
    body = response.json()
    return {
        "id": body["user"]["id"],
        "email": body["user"]["email"],
        "token": body["token"],
        "headers": {"x-auth-token": body["token"]},
    }


@pytest_asyncio.fixture
async def user1(client) -> dict:
    return await register(client, "user1@example.com", "password123")


@pytest_asyncio.fixture
async def user2(client) -> dict:
    return await register(client, "user2@example.com", "password456")


# =============================================================================
# Data Fixtures
# =============================================================================

@pytest.fixture
def sample_product_data() -> dict:
    """Sample product data for testing."""
    return {
        "name": "Smart TV",
        "category": "Electronics",
        "purchase_date": "2024-01-01",
        "purchase_price": 1200.00,
        "warranty_expiry_date": "2027-01-01",
        "model_number": "STV-55",
        "serial_number": "SN12345678901",
        "location_in_house": "Living Room",
    }


@pytest.fixture
def sample_pdf_bytes() -> bytes:
    """Minimal PDF payload."""
    return (
        b"%PDF-1.4\n1 0 obj << /Type /Catalog >> endobj\n"
        b"trailer << /Root 1 0 R >>\n%%EOF\n"
    )
