"""
Blog Backend — Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: AsyncMock session for service unit tests
    ├── temp_storage: Temporary directory for file operations
    ├── sample_image_bytes: Tiny PNG for upload tests
    ├── db_engine: In-memory SQLite engine with all tables created
    ├── test_client: HTTPX AsyncClient wired to the app and db_engine
    ├── register_author: Factory registering an author through the API
    └── auth_headers: Bearer header for a freshly registered "J Doe"
"""

import os
import tempfile

# Must run BEFORE any app import: app.config reads the environment at import
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-not-real"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="blog_test_")
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["API_PREFIX"] = "/api"

from typing import Any, AsyncGenerator, Dict
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.database import AFTER_COMMIT_KEY, Base, commit_session, get_db_session
from app.models import author as _author_model  # noqa: F401
from app.models import blog_post as _blog_post_model  # noqa: F401

DEFAULT_PASSWORD = "correct-horse-battery"


@pytest.fixture
def mock_db_session():
    """
    Mock async database session for service unit tests.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none = MagicMock(return_value=post)
        result = await post_service.get_post(mock_db_session, str(post.id))
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    session.info = {}
    return session


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def sample_image_bytes():
    """Smallest valid PNG: signature + IHDR + IDAT + IEND."""
    return (
        b"\x89PNG\r\n\x1a\n"
        b"\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00\x1f\x15\xc4\x89"
        b"\x00\x00\x00\rIDATx\x9cc\xf8\x0f\x00\x00\x01\x01\x00\x05\x18\xd8N"
        b"\x00\x00\x00\x00IEND\xaeB`\x82"
    )


@pytest_asyncio.fixture
async def db_engine():
    """
    Fresh in-memory database per test.

    StaticPool keeps the single connection alive, otherwise each new
    connection would see a different, empty in-memory database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def test_client(db_engine) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient talking to the FastAPI app through ASGITransport.

    get_db_session is overridden so requests use the per-test database.
    """
    from app.main import app

    session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await commit_session(session)
            except Exception:
                session.info.pop(AFTER_COMMIT_KEY, None)
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def register_author(test_client):
    """
    Factory: register through the API and return the TokenResponse body.

    The session cookie set by the response is dropped so that every test
    states its credentials explicitly.
    """

    async def _register(
        first_name: str = "J",
        last_name: str = "Doe",
        email: str = "j@x.com",
        password: str = DEFAULT_PASSWORD,
    ) -> Dict[str, Any]:
        response = await test_client.post(
            "/api/auth/register",
            json={
                "firstName": first_name,
                "lastName": last_name,
                "email": email,
                "password": password,
            },
        )
        assert response.status_code == 201, response.text
        test_client.cookies.clear()
        return response.json()

    return _register


@pytest_asyncio.fixture
async def auth_headers(register_author) -> Dict[str, str]:
    """Credentials of Author{name: "J Doe", email: "j@x.com"}."""
    body = await register_author()
    return {"Authorization": f"Bearer {body['accessToken']}"}
