"""
Shared fixtures for integration tests.

Requires PostgreSQL (DATABASE_URL); the whole suite is skipped when the
database cannot be reached.
"""

from collections.abc import Generator

import pytest
from psycopg_pool import ConnectionPool, PoolTimeout

from src.adapters.repository.postgres import (
    PostgresAccountStore,
    PostgresPendingSignupStore,
    run_migrations,
)
from src.config.settings import get_settings


@pytest.fixture(scope="session")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create a migrated connection pool, or skip if PostgreSQL is down."""
    settings = get_settings()
    pool = ConnectionPool(conninfo=settings.database_url, min_size=1, max_size=10, open=False)
    try:
        pool.open(wait=True, timeout=3)
    except PoolTimeout:
        pool.close()
        pytest.skip(f"PostgreSQL not reachable at {settings.database_url}")
    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture(autouse=True)
def clean_database(pool: ConnectionPool) -> Generator[None, None, None]:
    """Clean both tables before each test."""
    with pool.connection() as conn:
        conn.execute("DELETE FROM pending_signups")
        conn.execute("DELETE FROM accounts")
        conn.commit()
    yield


@pytest.fixture
def pg_pending_store(pool: ConnectionPool) -> PostgresPendingSignupStore:
    return PostgresPendingSignupStore(pool)


@pytest.fixture
def pg_account_store(pool: ConnectionPool) -> PostgresAccountStore:
    return PostgresAccountStore(pool)
