import os
import uuid
from collections.abc import Generator

import psycopg
import pytest

from docexplain.config.settings import Settings
from docexplain.database.connection import build_conninfo, close_pool, get_connection, init_pool

REQUIRED_TABLES = ("saved_responses", "usage_events", "user_profiles")


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "docexplain_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        with psycopg.connect(build_conninfo(test_settings), connect_timeout=3) as conn:
            with conn.cursor() as cur:
                for table in REQUIRED_TABLES:
                    cur.execute("SELECT to_regclass(%s)", (table,))
                    row = cur.fetchone()
                    if row is None or row[0] is None:
                        pytest.skip(f"Table {table} missing in test DB")
    except psycopg.OperationalError as e:
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run integration tests")
    init_pool(test_settings)
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def user_id(integration_pool: None) -> Generator[str, None, None]:
    """A throwaway user id; every row it owns is removed afterwards."""
    value = str(uuid.uuid4())
    yield value
    with get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute("DELETE FROM saved_responses WHERE user_id = %s", (value,))
            cur.execute("DELETE FROM usage_events WHERE user_id = %s", (value,))
        conn.commit()
