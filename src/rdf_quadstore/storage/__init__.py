"""
RDF Quad Store storage layer.

Content-addressed quadruples persisted in one wide relational table,
with a static pattern planner and per-engine SQL dialects.
"""

from rdf_quadstore.storage.terms import (
    TermKind,
    TermId,
    Term,
    create_hash,
)
from rdf_quadstore.storage.quadruples import (
    TripleFlavor,
    QuadrupleId,
    Triple,
    Quadruple,
    statement_key,
)
from rdf_quadstore.storage.planner import (
    PLAN_TABLE,
    QueryPlan,
    plan,
)
from rdf_quadstore.storage.results import QuadrupleSet
from rdf_quadstore.storage.query_context import (
    QueryState,
    QueryStats,
    QueryContext,
    query_timeout,
)
from rdf_quadstore.storage.store_config import StoreOptions
from rdf_quadstore.storage.dialects import (
    SQLDialect,
    SQLiteDialect,
    DuckDBDialect,
    PostgreSQLDialect,
    get_dialect,
)
from rdf_quadstore.storage.sql_store import (
    StoreDiagnostics,
    SQLQuadStore,
    SQLiteStore,
    DuckDBStore,
    PostgreSQLStore,
)

__all__ = [
    # Terms
    "TermKind",
    "TermId",
    "Term",
    "create_hash",
    # Quadruples
    "TripleFlavor",
    "QuadrupleId",
    "Triple",
    "Quadruple",
    "statement_key",
    # Planner
    "PLAN_TABLE",
    "QueryPlan",
    "plan",
    "QuadrupleSet",
    # Execution
    "QueryState",
    "QueryStats",
    "QueryContext",
    "query_timeout",
    "StoreOptions",
    # Dialects
    "SQLDialect",
    "SQLiteDialect",
    "DuckDBDialect",
    "PostgreSQLDialect",
    "get_dialect",
    # Stores
    "StoreDiagnostics",
    "SQLQuadStore",
    "SQLiteStore",
    "DuckDBStore",
    "PostgreSQLStore",
]
