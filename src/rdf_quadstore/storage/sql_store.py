"""
Relational quad store engine.

One SQLQuadStore drives one database through a SQLDialect. Every
operation opens its own connection, runs inside a timeout watchdog and,
for writes, inside an explicit transaction:

    connect -> BEGIN -> statements -> COMMIT -> close
                      \\-> failure -> ROLLBACK -> close -> OperationError

so a failed or interrupted write never leaves partial effects behind.

Construction probes the catalog first and creates the quadruples table and
its indexes only when missing; an existing table is reused as-is.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Any, Callable, Generator, Iterable, Optional, Union

from rdf_quadstore.exceptions import (
    OperationError,
    QueryTimeoutError,
    SchemaError,
    UnreachableStoreError,
)
from rdf_quadstore.store import QuadStore
from rdf_quadstore.storage.dialects import (
    DuckDBDialect,
    PostgreSQLDialect,
    SQLDialect,
    SQLiteDialect,
    get_dialect,
)
from rdf_quadstore.storage.planner import QueryPlan, plan
from rdf_quadstore.storage.quadruples import Quadruple, QuadrupleId, Triple
from rdf_quadstore.storage.query_context import QueryStats, query_timeout
from rdf_quadstore.storage.results import QuadrupleSet
from rdf_quadstore.storage.store_config import DEFAULT_TIMEOUT_SECONDS, StoreOptions

logger = logging.getLogger(__name__)


class StoreDiagnostics(Enum):
    """Outcome of probing the database behind a store."""
    UNPROBED = "unprobed"
    READY = "ready"                    # quadruples table found
    MISSING_SCHEMA = "missing_schema"  # reachable, table absent
    UNREACHABLE = "unreachable"        # cannot connect or probe


def _execute(conn: Any, sql: str, params: Optional[dict] = None) -> Any:
    # DuckDB rejects an empty parameter mapping for a statement without placeholders
    if params:
        return conn.execute(sql, params)
    return conn.execute(sql)


class SQLQuadStore(QuadStore):
    """
    Quad store persisted in a single relational table.

    Args:
        target: File path (SQLite, DuckDB) or connection string (PostgreSQL)
        dialect: SQLDialect instance or engine name
        options: Timeouts and slow query threshold

    Raises:
        ConfigurationError: Empty or in-memory target, invalid options
        UnreachableStoreError: The database cannot be opened or probed
        SchemaError: The quadruples table cannot be created
    """

    def __init__(
        self,
        target: str,
        dialect: Union[SQLDialect, str],
        options: Optional[StoreOptions] = None,
    ):
        if isinstance(dialect, str):
            dialect = get_dialect(dialect)
        self._dialect = dialect
        self._target = dialect.validate_target(target)
        self._options = options or StoreOptions()
        self._closed = False
        self._last_stats: Optional[QueryStats] = None
        self.diagnostics = StoreDiagnostics.UNPROBED

        self._initialize()
        logger.info(f"Opened {self}")

    # ========== Bootstrap ==========

    def _initialize(self) -> None:
        self.diagnostics = self._diagnose()
        if self.diagnostics == StoreDiagnostics.MISSING_SCHEMA:
            self._create_schema()
            self.diagnostics = StoreDiagnostics.READY

    def _diagnose(self) -> StoreDiagnostics:
        """Probe the catalog for the quadruples table."""
        try:
            conn = self._dialect.connect(self._target, self._options.select_timeout)
        except UnreachableStoreError:
            self.diagnostics = StoreDiagnostics.UNREACHABLE
            raise
        except Exception as e:
            self.diagnostics = StoreDiagnostics.UNREACHABLE
            raise UnreachableStoreError(
                f"Cannot open {self.store_type} store because: {e}"
            ) from e
        try:
            found = _execute(conn, self._dialect.probe_sql()).fetchone()[0]
        except Exception as e:
            self.diagnostics = StoreDiagnostics.UNREACHABLE
            raise UnreachableStoreError(
                f"Cannot probe {self.store_type} store because: {e}"
            ) from e
        finally:
            self._dialect.close(conn)
        return StoreDiagnostics.READY if found else StoreDiagnostics.MISSING_SCHEMA

    def _create_schema(self) -> None:
        try:
            conn = self._dialect.connect(self._target, self._options.insert_timeout)
        except Exception as e:
            self.diagnostics = StoreDiagnostics.UNREACHABLE
            raise UnreachableStoreError(
                f"Cannot open {self.store_type} store because: {e}"
            ) from e
        try:
            self._dialect.begin(conn)
            for statement in self._dialect.create_statements():
                _execute(conn, statement)
            self._dialect.commit(conn)
        except Exception as e:
            self._rollback(conn)
            self._dialect.close(conn)
            # Another process may have created the table in the meantime
            if self._diagnose() == StoreDiagnostics.READY:
                logger.info(f"Quadruples table appeared concurrently in {self}")
                return
            raise SchemaError(
                f"Cannot create quadruples table in {self.store_type} store because: {e}"
            ) from e
        self._dialect.close(conn)
        logger.info(f"Created quadruples table and indexes in {self}")

    # ========== Execution plumbing ==========

    def _check_open(self) -> None:
        if self._closed:
            raise OperationError(f"{self.store_type} store is closed")

    @contextmanager
    def _session(self, timeout: float) -> Generator[Any, None, None]:
        """Open a connection for one operation; `timeout` bounds lock waits."""
        self._check_open()
        try:
            conn = self._dialect.connect(self._target, timeout)
        except Exception as e:
            raise OperationError(
                f"Cannot connect to {self.store_type} store because: {e}"
            ) from e
        try:
            yield conn
        finally:
            self._dialect.close(conn)

    def _rollback(self, conn: Any) -> None:
        try:
            self._dialect.rollback(conn)
        except Exception as e:
            # The engine may already have aborted the transaction
            logger.debug(f"Rollback on {self.store_type} store reported: {e}")

    def _write(
        self,
        operation: str,
        timeout: float,
        work: Callable[[Any], None],
        signature: str = "",
    ) -> None:
        """Run `work(conn)` inside one transaction; roll back on any failure."""
        with self._session(timeout) as conn:
            stats = None
            try:
                with query_timeout(
                    timeout, lambda: self._dialect.interrupt(conn), operation
                ) as ctx:
                    stats = ctx.stats
                    stats.signature = signature
                    self._dialect.begin(conn)
                    work(conn)
                    self._dialect.commit(conn)
            except QueryTimeoutError:
                self._rollback(conn)
                raise
            except Exception as e:
                self._rollback(conn)
                raise OperationError(
                    f"Cannot {operation} on {self.store_type} store because: {e}"
                ) from e
            finally:
                self._record(stats)

    def _read(
        self,
        operation: str,
        sql: str,
        params: Optional[dict],
        consume: Callable[[Any], Any],
        signature: str = "",
    ) -> Any:
        """Run one query and hand its cursor to `consume`."""
        with self._session(self._options.select_timeout) as conn:
            stats = None
            try:
                with query_timeout(
                    self._options.select_timeout,
                    lambda: self._dialect.interrupt(conn),
                    operation,
                ) as ctx:
                    stats = ctx.stats
                    stats.signature = signature
                    result = consume(_execute(conn, sql, params))
                    ctx.complete(len(result) if hasattr(result, "__len__") else 1)
                    return result
            except QueryTimeoutError:
                raise
            except Exception as e:
                raise OperationError(
                    f"Cannot {operation} on {self.store_type} store because: {e}"
                ) from e
            finally:
                self._record(stats)

    def _record(self, stats: Optional[QueryStats]) -> None:
        if stats is None:
            return
        self._last_stats = stats
        seconds = stats.duration_ms / 1000
        if seconds > self._options.slow_query_threshold:
            logger.warning(
                f"Slow {stats.operation} on {self.store_type} store "
                f"[{stats.signature or '*'}]: {stats.duration_ms:.1f}ms"
            )
        else:
            logger.debug(
                f"{stats.operation} [{stats.signature or '*'}] "
                f"{stats.state.name} in {stats.duration_ms:.1f}ms"
            )

    # ========== Mutations ==========

    def add_quadruple(self, quadruple: Optional[Quadruple]) -> "SQLQuadStore":
        if quadruple is None:
            return self
        sql = self._dialect.insert_sql()
        row = quadruple.to_row()
        self._write(
            "add quadruple",
            self._options.insert_timeout,
            lambda conn: _execute(conn, sql, row),
        )
        return self

    def merge_graph(
        self,
        context: Any,
        triples: Optional[Iterable[Union[Triple, tuple]]],
    ) -> "SQLQuadStore":
        """
        Insert every triple under `context` in a single transaction.

        Triples may be Triple objects or (subject, predicate, object) tuples.
        Already-stored statements are skipped; on failure nothing is kept.
        """
        if context is None or triples is None:
            return self

        batch: dict[QuadrupleId, dict] = {}
        for triple in triples:
            if triple is None:
                raise ValueError(f"Cannot merge a None statement into {context}")
            if isinstance(triple, Triple):
                quadruple = Quadruple.from_triple(context, triple)
            else:
                quadruple = Quadruple(context, *triple)
            batch.setdefault(quadruple.key, quadruple.to_row())
        if not batch:
            return self

        sql = self._dialect.insert_sql()

        def insert_all(conn: Any) -> None:
            for row in batch.values():
                _execute(conn, sql, row)

        self._write("merge graph", self._options.insert_timeout, insert_all)
        logger.debug(f"Merged {len(batch)} statements into {context}")
        return self

    def remove_by_key(self, key: Optional[QuadrupleId]) -> "SQLQuadStore":
        if key is None:
            return self
        sql = self._dialect.delete_by_key_sql()
        self._write(
            "remove quadruple",
            self._options.delete_timeout,
            lambda conn: _execute(conn, sql, {"qid": key}),
        )
        return self

    def remove_quadruples(
        self,
        context: Any = None,
        subject: Any = None,
        predicate: Any = None,
        obj: Any = None,
        literal: Any = None,
    ) -> "SQLQuadStore":
        query_plan = plan(context, subject, predicate, obj, literal)
        if query_plan.is_full_scan:
            return self
        sql = query_plan.delete_sql(self._dialect)
        self._write(
            "remove quadruples",
            self._options.delete_timeout,
            lambda conn: _execute(conn, sql, query_plan.parameters),
            signature=query_plan.signature,
        )
        return self

    def clear(self) -> "SQLQuadStore":
        sql = self._dialect.clear_sql()
        self._write(
            "clear", self._options.delete_timeout, lambda conn: _execute(conn, sql)
        )
        return self

    # ========== Queries ==========

    def contains_key(self, key: Optional[QuadrupleId]) -> bool:
        if key is None:
            return False
        return self._read(
            "contains quadruple",
            self._dialect.exists_sql(),
            {"qid": key},
            lambda cursor: bool(cursor.fetchone()[0]),
        )

    def select_quadruples(
        self,
        context: Any = None,
        subject: Any = None,
        predicate: Any = None,
        obj: Any = None,
        literal: Any = None,
    ) -> QuadrupleSet:
        query_plan = plan(context, subject, predicate, obj, literal)
        return self.execute_plan(query_plan)

    def execute_plan(self, query_plan: QueryPlan) -> QuadrupleSet:
        """Materialize the rows selected by a plan."""
        return self._read(
            "select quadruples",
            query_plan.select_sql(self._dialect),
            query_plan.parameters,
            lambda cursor: QuadrupleSet(
                Quadruple.from_row(*row) for row in cursor.fetchall()
            ),
            signature=query_plan.signature,
        )

    @property
    def quadruples_count(self) -> int:
        try:
            return int(
                self._read(
                    "count quadruples",
                    self._dialect.count_sql(),
                    None,
                    lambda cursor: cursor.fetchone()[0],
                )
            )
        except OperationError as e:
            logger.warning(f"Cannot count quadruples in {self}: {e}")
            return -1

    # ========== Maintenance ==========

    def optimize(self) -> "SQLQuadStore":
        """Run the engine's maintenance command (outside any transaction)."""
        with self._session(DEFAULT_TIMEOUT_SECONDS) as conn:
            stats = None
            try:
                with query_timeout(
                    DEFAULT_TIMEOUT_SECONDS,
                    lambda: self._dialect.interrupt(conn),
                    "optimize",
                ) as ctx:
                    stats = ctx.stats
                    for statement in self._dialect.optimize_statements():
                        _execute(conn, statement)
            except QueryTimeoutError:
                raise
            except Exception as e:
                raise OperationError(
                    f"Cannot optimize {self.store_type} store because: {e}"
                ) from e
            finally:
                self._record(stats)
        return self

    # ========== Identity & lifetime ==========

    @property
    def store_type(self) -> str:
        return self._dialect.store_type

    @property
    def dialect(self) -> SQLDialect:
        return self._dialect

    @property
    def options(self) -> StoreOptions:
        return self._options

    @property
    def last_query_stats(self) -> Optional[QueryStats]:
        """Statistics of the most recent operation, if any."""
        return self._last_stats

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        logger.debug(f"Closed {self}")

    def __str__(self) -> str:
        server, database = self._dialect.describe(self._target)
        return f"{self.store_type}|SERVER={server};DATABASE={database}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._target!r})"


class SQLiteStore(SQLQuadStore):
    """Quad store in a SQLite database file."""

    def __init__(self, path: str, options: Optional[StoreOptions] = None):
        super().__init__(path, SQLiteDialect(), options)


class DuckDBStore(SQLQuadStore):
    """Quad store in a DuckDB database file."""

    def __init__(self, path: str, options: Optional[StoreOptions] = None):
        super().__init__(path, DuckDBDialect(), options)


class PostgreSQLStore(SQLQuadStore):
    """Quad store in a PostgreSQL database (requires psycopg)."""

    def __init__(self, conninfo: str, options: Optional[StoreOptions] = None):
        super().__init__(conninfo, PostgreSQLDialect(), options)
