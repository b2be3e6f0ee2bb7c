"""Shared fixtures and utilities for tests."""

import os

# Settings are read at import time, so the environment is prepared first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["APP_ENV"] = "test"
os.environ["JSON_LOGS"] = "false"
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key-min-32-chars-long-for-security")
os.environ.setdefault("JWT_ALGORITHM", "HS256")
os.environ.setdefault("ACCESS_TOKEN_EXPIRE_MINUTES", "60")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import database.models  # noqa: F401  registers all tables
from database.engine import Base, get_db
from tests.factories import make_application, make_company, make_engineer, make_job


def build_test_engine():
    """In-memory SQLite engine shared by every session of one test."""
    return create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


async def create_tables(engine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
async def engine():
    engine = build_test_engine()
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def client():
    """
    Test client backed by its own in-memory database.

    The database work runs on the client's event loop; use
    ``client.portal.call`` with ``client.session_factory`` to seed rows.
    """
    from api.main import app

    test_engine = build_test_engine()
    factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app, raise_server_exceptions=False) as test_client:
        test_client.portal.call(create_tables, test_engine)
        test_client.session_factory = factory
        yield test_client
        test_client.portal.call(test_engine.dispose)
    app.dependency_overrides.clear()


# ==================== Scenario fixtures ==================== #

@pytest.fixture
async def company(db):
    return await make_company(db)


@pytest.fixture
async def engineer(db):
    return await make_engineer(db)


@pytest.fixture
async def job(db, company):
    return await make_job(db, company)


@pytest.fixture
async def application(db, engineer, job):
    return await make_application(db, engineer, job=job)
