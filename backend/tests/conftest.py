"""
Online Retail API - Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment overrides are applied BEFORE any retail_api import so the
       settings singleton never points at a real PostgreSQL instance.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session:     AsyncMock session for service unit tests
    ├── sample_product_data: The 85123A record used across tests
    ├── database:            Database on a throwaway SQLite file, tables created
    ├── empty_database:      Database on a SQLite file with NO tables (forces 500s)
    └── test_client:         HTTPX AsyncClient wired to an app using `database`
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DB_CREATE_TABLES"] = "false"

from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from retail_api.database import Database  # noqa: E402


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = product
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_product_data():
    """The first row of the UCI Online Retail dataset, as a create payload."""
    return {
        "invoice_no": "536365",
        "stock_code": "85123A",
        "description": "WHITE HANGING HEART T-LIGHT HOLDER",
        "quantity": 6,
        "invoice_date": None,
        "unit_price": 2.55,
        "customer_id": "17850",
        "country": "United Kingdom",
    }


@pytest_asyncio.fixture
async def database(tmp_path):
    """A Database bound to a fresh SQLite file with all tables created."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'retail.db'}")
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def empty_database(tmp_path):
    """A reachable Database without the online_retail_data table."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
    yield db
    await db.dispose()


async def _client_for(database: Database):
    from retail_api.main import create_app

    app = create_app(database=database, rate_limit=False)
    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url="http://test")


@pytest_asyncio.fixture
async def test_client(database):
    """
    Provides an async HTTP client talking to the app in-process.

    ASGITransport does not run the lifespan, so the app serves requests with
    the injected `database` fixture.
    """
    async with await _client_for(database) as client:
        yield client


@pytest_asyncio.fixture
async def broken_client(empty_database):
    """Client whose every product query fails with 'no such table'."""
    async with await _client_for(empty_database) as client:
        yield client
