"""Shared pytest fixtures for Tourney API tests.

Tests run against a temporary SQLite file by default. Set
``TEST_DATABASE_BACKEND=postgres`` to run them against a PostgreSQL
container instead.
"""

import os
import sys
from pathlib import Path

import pytest
import pytest_asyncio
from aiohttp.test_utils import TestClient, TestServer
from sqlalchemy import text
from testcontainers.postgres import PostgresContainer

# Add the parent directory to the path if not already there
# This ensures the tourney_api package can be imported in CI
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from tourney_api.config import Config
from tourney_api.adapters.database.manager import DatabaseManager
from tourney_api.adapters.http import create_app
from tourney_api.application import (
    AuthService,
    ProfileService,
    WalletService,
    TournamentService,
    AdminService,
    GameSessionService,
)

USE_POSTGRES = os.environ.get("TEST_DATABASE_BACKEND", "sqlite") == "postgres"

TABLES_IN_DELETE_ORDER = (
    "game_sessions",
    "tournament_participants",
    "tournaments",
    "transactions",
    "wallets",
    "profiles",
    "users",
)


@pytest.fixture(scope="session")
def postgres_container():
    """Create a PostgreSQL container for testing."""
    container = PostgresContainer("postgres:14-alpine")
    container.start()
    yield container
    container.stop()


@pytest.fixture
def test_config(monkeypatch, tmp_path, request):
    """Create test configuration."""
    if USE_POSTGRES:
        container = request.getfixturevalue("postgres_container")
        sync_url = container.get_connection_url()
        database_url = sync_url.replace("postgresql+psycopg2", "postgresql")
        monkeypatch.setenv("DATABASE_NAME", container.dbname)
    else:
        database_url = f"sqlite:///{tmp_path / 'tourney_test.db'}"

    # Set environment for Config.from_env()
    monkeypatch.setenv("DATABASE_URL", database_url)
    monkeypatch.setenv("ENVIRONMENT", "CI")
    monkeypatch.setenv("LOG_LEVEL", "INFO")
    monkeypatch.setenv("LOG_FORMAT", "text")
    monkeypatch.setenv("AUTO_CREATE_TABLES", "false")
    monkeypatch.setenv("OTEL_ENABLED", "false")
    monkeypatch.setenv("HTTP_PORT", "18080")

    return Config.from_env()


@pytest_asyncio.fixture
async def database_manager(test_config):
    """Initialize a database manager on an empty schema."""
    manager = DatabaseManager(test_config)
    await manager.initialize()
    await manager.create_tables()

    if USE_POSTGRES:
        # The container outlives a single test
        async with manager.get_session() as session:
            for table in TABLES_IN_DELETE_ORDER:
                await session.execute(text(f"DELETE FROM {table}"))
            await session.commit()

    yield manager

    await manager.close()


@pytest.fixture
def auth_service(database_manager):
    return AuthService(database_manager)


@pytest.fixture
def profile_service(database_manager):
    return ProfileService(database_manager)


@pytest.fixture
def wallet_service(database_manager):
    return WalletService(database_manager)


@pytest.fixture
def tournament_service(database_manager):
    return TournamentService(database_manager)


@pytest.fixture
def admin_service(database_manager):
    return AdminService(database_manager)


@pytest.fixture
def game_session_service(database_manager):
    return GameSessionService(database_manager)


@pytest_asyncio.fixture
async def api_client(database_manager):
    """aiohttp test client serving the full API."""
    client = TestClient(TestServer(create_app(database_manager)))
    await client.start_server()
    yield client
    await client.close()
