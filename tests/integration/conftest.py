import os
import uuid
from collections.abc import Generator
from typing import Any

import psycopg
import pytest

from app.config.settings import Settings
from app.database.connection import close_pool, get_connection, init_pool
from app.database.schema import ensure_schema

_CLEANUP_QUERIES = {
    "transactions": "DELETE FROM transactions WHERE account_id = %s",
    "learned_merchants": "DELETE FROM learned_merchants WHERE id = %s",
    "category_corrections": "DELETE FROM category_corrections WHERE id = %s",
}


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "finimport_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        ensure_schema()
    except Exception as e:
        close_pool()
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. "
            "Set DB_* env to point at a scratch database"
        )
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def integration_cleanup(integration_pool: None) -> Generator[list[tuple[str, str]], None, None]:
    cleanup: list[tuple[str, str]] = []
    yield cleanup
    if not cleanup:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            for table, key in cleanup:
                cur.execute(_CLEANUP_QUERIES[table], (key,))
        conn.commit()


@pytest.fixture
def account_id(integration_cleanup: list[tuple[str, str]]) -> str:
    account = f"test-{uuid.uuid4()}"
    integration_cleanup.append(("transactions", account))
    return account
