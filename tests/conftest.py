"""
Shared fixtures: stores over every embedded engine.

PostgreSQL stores are only built when QUADSTORE_POSTGRES_DSN points at a
database the tests may freely clear.
"""

import os

import pytest

from rdf_quadstore import DuckDBStore, PostgreSQLStore, SQLiteStore

POSTGRES_DSN = os.environ.get("QUADSTORE_POSTGRES_DSN")

FILE_ENGINES = {
    "sqlite": (SQLiteStore, ".db"),
    "duckdb": (DuckDBStore, ".duckdb"),
}


@pytest.fixture(params=sorted(FILE_ENGINES))
def engine(request):
    return request.param


@pytest.fixture
def store_factory(engine, tmp_path):
    """Build stores of the current engine; all are closed at teardown."""
    store_cls, suffix = FILE_ENGINES[engine]
    stores = []

    def make(name="quads", options=None):
        store = store_cls(str(tmp_path / f"{name}{suffix}"), options)
        stores.append(store)
        return store

    yield make
    for store in stores:
        store.close()


@pytest.fixture
def store(store_factory):
    return store_factory()


@pytest.fixture
def pg_store():
    if not POSTGRES_DSN:
        pytest.skip("QUADSTORE_POSTGRES_DSN not set")
    store = PostgreSQLStore(POSTGRES_DSN)
    store.clear()
    yield store
    store.clear()
    store.close()
