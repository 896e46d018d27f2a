"""
rdf-quadstore: context-aware RDF quadruple storage over relational engines.

Persists quadruples in SQLite, DuckDB or PostgreSQL behind one store API.
"""

__version__ = "0.1.0"

from rdf_quadstore.exceptions import (
    QuadStoreError,
    ConfigurationError,
    UnreachableStoreError,
    SchemaError,
    OperationError,
    QueryTimeoutError,
)
from rdf_quadstore.storage import (
    Term,
    TermKind,
    Triple,
    TripleFlavor,
    Quadruple,
    QuadrupleSet,
    StoreOptions,
    StoreDiagnostics,
    SQLQuadStore,
    SQLiteStore,
    DuckDBStore,
    PostgreSQLStore,
)
from rdf_quadstore.store import QuadStore

__all__ = [
    "QuadStore",
    "Term",
    "TermKind",
    "Triple",
    "TripleFlavor",
    "Quadruple",
    "QuadrupleSet",
    "StoreOptions",
    "StoreDiagnostics",
    "SQLQuadStore",
    "SQLiteStore",
    "DuckDBStore",
    "PostgreSQLStore",
    # Errors
    "QuadStoreError",
    "ConfigurationError",
    "UnreachableStoreError",
    "SchemaError",
    "OperationError",
    "QueryTimeoutError",
]
