"""
Exceptions raised by quad stores.

Construction-time errors (ConfigurationError, UnreachableStoreError,
SchemaError) mean no store object exists. OperationError is raised per call
on a constructed store, always after the connection used by the call has
been rolled back and closed.
"""


class QuadStoreError(Exception):
    """Base class for all quad store errors."""
    pass


class ConfigurationError(QuadStoreError):
    """Raised when the connection target or the store options are invalid."""
    pass


class UnreachableStoreError(QuadStoreError):
    """Raised when the database cannot be opened or probed."""
    pass


class SchemaError(QuadStoreError):
    """Raised when the quadruples table or its indexes cannot be created."""
    pass


class OperationError(QuadStoreError):
    """Raised when a read or write fails on a constructed store."""
    pass


class QueryTimeoutError(OperationError):
    """Raised when an operation exceeds its configured timeout."""
    pass
