"""
Pytest configuration and fixtures for BOM service tests.
"""

import os
from typing import Any, AsyncGenerator, Iterator

import pytest
from fastapi.testclient import TestClient

# Set up test environment variables before importing anything else
os.environ.setdefault("APP_NAME", "BOM Service Test")
os.environ.setdefault("APP_VERSION", "1.0.0")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SERVICE_NAME", "bom-service")
os.environ.setdefault("BOM_DATABASE_URL", "sqlite+aiosqlite:///bom_test.db")
os.environ.setdefault("TEST_DATABASE_URL", "sqlite+aiosqlite:///bom_test.db")
os.environ.setdefault("SESSION_COOKIE_NAME", "auth-session")
os.environ.setdefault("SESSION_COOKIE_SECURE", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("ENABLE_ACCESS_LOGS", "false")

from bom_service.app.core import database as db_module  # noqa: E402
from bom_service.app.core.database import BomServiceDatabaseManager  # noqa: E402
from bom_service.app.core.security import SecurityUtils  # noqa: E402
from bom_service.app.main import app  # noqa: E402
from bom_service.app.models.user import User  # noqa: E402


def _sqlite_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'bom.db'}"


@pytest.fixture
async def database_manager(tmp_path) -> AsyncGenerator[BomServiceDatabaseManager, None]:
    """A fresh SQLite database with every table and index created."""
    manager = BomServiceDatabaseManager(database_url=_sqlite_url(tmp_path))
    await manager.create_tables()
    yield manager
    await manager.close()


@pytest.fixture
async def db_session(
    database_manager: BomServiceDatabaseManager,
) -> AsyncGenerator[Any, None]:
    """Create a test database session with proper cleanup."""
    async with database_manager.async_session_maker() as session:
        yield session


async def _add_user(session, email: str, is_admin: bool = False) -> User:
    user = User(
        email=email,
        username=email.split("@")[0],
        password_hash=SecurityUtils.hash_password("password123"),
        is_admin=is_admin,
    )
    session.add(user)
    await session.commit()
    return user


@pytest.fixture
async def user(db_session) -> User:
    return await _add_user(db_session, "owner@example.com")


@pytest.fixture
async def other_user(db_session) -> User:
    return await _add_user(db_session, "other@example.com")


@pytest.fixture
async def admin(db_session) -> User:
    return await _add_user(db_session, "admin@example.com", is_admin=True)


@pytest.fixture
def client(tmp_path) -> Iterator[TestClient]:
    """FastAPI test client bound to a fresh SQLite database."""
    previous = db_module.get_database_manager()
    db_module.set_database_manager(
        BomServiceDatabaseManager(database_url=_sqlite_url(tmp_path))
    )
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        db_module.set_database_manager(previous)
