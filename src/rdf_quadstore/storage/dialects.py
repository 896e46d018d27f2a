"""
SQL dialects for the relational engines backing a quad store.

A dialect captures everything engine-specific about the single
quadruples table:
- how to open a DB-API connection to a target
- the parameter placeholder convention
- the catalog probe that tells whether the table exists
- the DDL (table plus seven indexes)
- the insert-if-absent statement
- the maintenance command run by optimize()
- how to interrupt a running statement

Only static identifiers are ever concatenated into SQL text; every value
travels as a named parameter.
"""

from __future__ import annotations

import os
import sqlite3
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlparse

try:
    import duckdb
    DUCKDB_AVAILABLE = True
except ImportError:
    DUCKDB_AVAILABLE = False

from rdf_quadstore.exceptions import ConfigurationError, UnreachableStoreError
from rdf_quadstore.storage.planner import TABLE_NAME

# Index name -> indexed columns. Together they give an index prefix match
# for every one-, two- and three-slot pattern signature.
INDEXES: dict[str, tuple[str, ...]] = {
    "idx_context_id": ("context_id",),
    "idx_subject_id": ("subject_id",),
    "idx_predicate_id": ("predicate_id",),
    "idx_object_id": ("object_id", "triple_flavor"),
    "idx_subject_id_predicate_id": ("subject_id", "predicate_id"),
    "idx_subject_id_object_id": ("subject_id", "object_id", "triple_flavor"),
    "idx_predicate_id_object_id": ("predicate_id", "object_id", "triple_flavor"),
}

INSERT_COLUMNS = (
    "quadruple_id, triple_flavor, context, context_id, subject, subject_id, "
    "predicate, predicate_id, object, object_id"
)
INSERT_PARAMS = ("qid", "tfv", "ctx", "ctxid", "subj", "subjid", "pred", "predid", "obj", "objid")

_MEMORY_TARGETS = {":memory:", ""}


class SQLDialect:
    """
    Base dialect with the ANSI parts shared by all engines.

    Subclasses set store_type and the type names, and implement connect()
    and placeholder().
    """

    store_type: str = ""
    bigint_type: str = "BIGINT"
    int_type: str = "INTEGER"
    text_type: str = "VARCHAR(1000)"

    def connect(self, target: str, timeout: float) -> Any:
        """Open a new DB-API connection to the target."""
        raise NotImplementedError

    def placeholder(self, name: str) -> str:
        """Render the named parameter `name` in this engine's convention."""
        raise NotImplementedError

    def validate_target(self, target: Optional[str]) -> str:
        """Reject empty and in-memory targets."""
        if target is None or not str(target).strip():
            raise ConfigurationError(
                f"Cannot connect to {self.store_type} store: connection target is empty"
            )
        target = str(target)
        if target.strip() in _MEMORY_TARGETS:
            raise ConfigurationError(
                f"Cannot connect to {self.store_type} store: in-memory databases are not supported"
            )
        return target

    def describe(self, target: str) -> tuple[str, str]:
        """(server, database) shown in the store's string form."""
        return ("localhost", target)

    # -- statements -------------------------------------------------------

    def probe_sql(self) -> str:
        return (
            "SELECT COUNT(*) FROM information_schema.tables "
            f"WHERE table_name = '{TABLE_NAME}'"
        )

    def create_statements(self) -> list[str]:
        statements = [
            f"CREATE TABLE {TABLE_NAME} ("
            f"quadruple_id {self.bigint_type} NOT NULL PRIMARY KEY, "
            f"triple_flavor {self.int_type} NOT NULL, "
            f"context {self.text_type} NOT NULL, "
            f"context_id {self.bigint_type} NOT NULL, "
            f"subject {self.text_type} NOT NULL, "
            f"subject_id {self.bigint_type} NOT NULL, "
            f"predicate {self.text_type} NOT NULL, "
            f"predicate_id {self.bigint_type} NOT NULL, "
            f"object {self.text_type} NOT NULL, "
            f"object_id {self.bigint_type} NOT NULL)"
        ]
        for name, columns in INDEXES.items():
            statements.append(f"CREATE INDEX {name} ON {TABLE_NAME} ({', '.join(columns)})")
        return statements

    def _values_clause(self) -> str:
        return ", ".join(self.placeholder(p) for p in INSERT_PARAMS)

    def insert_sql(self) -> str:
        """Single conditional insert: the engine enforces key uniqueness atomically."""
        return (
            f"INSERT INTO {TABLE_NAME} ({INSERT_COLUMNS}) "
            f"VALUES ({self._values_clause()}) ON CONFLICT (quadruple_id) DO NOTHING"
        )

    def delete_by_key_sql(self) -> str:
        return f"DELETE FROM {TABLE_NAME} WHERE quadruple_id = {self.placeholder('qid')}"

    def clear_sql(self) -> str:
        return f"DELETE FROM {TABLE_NAME}"

    def exists_sql(self) -> str:
        return (
            f"SELECT EXISTS(SELECT 1 FROM {TABLE_NAME} "
            f"WHERE quadruple_id = {self.placeholder('qid')})"
        )

    def count_sql(self) -> str:
        return f"SELECT COUNT(*) FROM {TABLE_NAME}"

    def optimize_statements(self) -> list[str]:
        return []

    # -- transaction control ------------------------------------------------

    def begin(self, conn: Any) -> None:
        conn.execute("BEGIN TRANSACTION")

    def commit(self, conn: Any) -> None:
        conn.execute("COMMIT")

    def rollback(self, conn: Any) -> None:
        conn.execute("ROLLBACK")

    def interrupt(self, conn: Any) -> None:
        """Abort the statement currently running on conn (called from another thread)."""
        conn.interrupt()

    def close(self, conn: Any) -> None:
        conn.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class SQLiteDialect(SQLDialect):
    """SQLite through the standard library sqlite3 driver."""

    store_type = "SQLITE"
    bigint_type = "INTEGER"

    def connect(self, target: str, timeout: float) -> sqlite3.Connection:
        # isolation_level=None: transactions are driven explicitly with BEGIN/COMMIT
        return sqlite3.connect(target, timeout=timeout, isolation_level=None)

    def placeholder(self, name: str) -> str:
        return f":{name}"

    def describe(self, target: str) -> tuple[str, str]:
        return (str(Path(target).resolve()), "main")

    def probe_sql(self) -> str:
        return f"SELECT COUNT(*) FROM sqlite_master WHERE type = 'table' AND name = '{TABLE_NAME}'"

    def insert_sql(self) -> str:
        return f"INSERT OR IGNORE INTO {TABLE_NAME} ({INSERT_COLUMNS}) VALUES ({self._values_clause()})"

    def optimize_statements(self) -> list[str]:
        return ["VACUUM"]


class DuckDBDialect(SQLDialect):
    """DuckDB embedded database files."""

    store_type = "DUCKDB"

    def connect(self, target: str, timeout: float) -> Any:
        if not DUCKDB_AVAILABLE:
            raise UnreachableStoreError(
                "DuckDB is required for DuckDB stores. "
                "Install with: pip install duckdb"
            )
        return duckdb.connect(target)

    def placeholder(self, name: str) -> str:
        return f"${name}"

    def describe(self, target: str) -> tuple[str, str]:
        return (str(Path(target).resolve()), Path(target).stem)

    def probe_sql(self) -> str:
        return (
            "SELECT COUNT(*) FROM information_schema.tables "
            f"WHERE table_schema = 'main' AND table_name = '{TABLE_NAME}'"
        )

    def optimize_statements(self) -> list[str]:
        return ["CHECKPOINT"]


class PostgreSQLDialect(SQLDialect):
    """PostgreSQL through psycopg (install the 'postgres' extra)."""

    store_type = "POSTGRESQL"

    def connect(self, target: str, timeout: float) -> Any:
        try:
            import psycopg
        except ImportError as e:
            raise UnreachableStoreError(
                "psycopg is required for PostgreSQL stores. "
                "Install with: pip install 'rdf-quadstore[postgres]'"
            ) from e
        return psycopg.connect(target, autocommit=True, connect_timeout=max(1, int(timeout)))

    def placeholder(self, name: str) -> str:
        return f"%({name})s"

    def describe(self, target: str) -> tuple[str, str]:
        # Accepts both URI ("postgresql://host/db") and key=value conninfo strings
        if "://" in target:
            url = urlparse(target)
            return (url.hostname or "localhost", url.path.lstrip("/"))
        params = dict(
            part.split("=", 1) for part in target.split() if "=" in part
        )
        return (
            params.get("host", os.environ.get("PGHOST", "localhost")),
            params.get("dbname", os.environ.get("PGDATABASE", "")),
        )

    def probe_sql(self) -> str:
        return (
            "SELECT COUNT(*) FROM information_schema.tables "
            f"WHERE table_schema = current_schema() AND table_name = '{TABLE_NAME}'"
        )

    def optimize_statements(self) -> list[str]:
        return [f"VACUUM ANALYZE {TABLE_NAME}"]

    def interrupt(self, conn: Any) -> None:
        conn.cancel()


DIALECTS: dict[str, type[SQLDialect]] = {
    "sqlite": SQLiteDialect,
    "duckdb": DuckDBDialect,
    "postgresql": PostgreSQLDialect,
}


def get_dialect(name: str) -> SQLDialect:
    """Look up a dialect by engine name ("sqlite", "duckdb", "postgresql")."""
    try:
        return DIALECTS[name.lower()]()
    except KeyError:
        raise ConfigurationError(
            f"Unknown dialect {name!r}; expected one of {sorted(DIALECTS)}"
        ) from None
