"""
Execution context with timeout support for store operations.

Provides:
- Per-operation timeout enforced by interrupting the database connection
- Operation statistics (duration, rows, final state)

Relational drivers block inside a single call while a statement runs, so
the timeout cannot be checked cooperatively. Instead a watchdog timer calls
the driver's interrupt hook once the deadline passes; the driver then
raises from the blocked call and the store reports a QueryTimeoutError.
"""

from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import IntEnum, auto
from threading import Lock, Timer
from typing import Callable, Generator, Optional
import time

from rdf_quadstore.exceptions import QueryTimeoutError


class QueryState(IntEnum):
    """Operation execution states."""
    PENDING = auto()     # Created but not started
    RUNNING = auto()     # Currently executing
    COMPLETED = auto()   # Finished successfully
    TIMEOUT = auto()     # Exceeded timeout
    FAILED = auto()      # Failed with error


@dataclass
class QueryStats:
    """Statistics for one store operation."""
    operation: str = ""
    signature: str = ""
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    state: QueryState = QueryState.PENDING
    rows_returned: int = 0
    error: Optional[str] = None

    @property
    def duration_ms(self) -> float:
        """Operation duration in milliseconds."""
        if self.start_time is None:
            return 0.0
        end = self.end_time or time.time()
        return (end - self.start_time) * 1000

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "operation": self.operation,
            "signature": self.signature,
            "duration_ms": self.duration_ms,
            "state": self.state.name,
            "rows_returned": self.rows_returned,
            "error": self.error,
        }


@dataclass
class QueryContext:
    """
    Execution context for one operation.

    Arms a watchdog on start() that calls `interrupt` after
    `timeout_seconds`; disarms it on complete() or fail().
    """
    timeout_seconds: Optional[float] = None
    interrupt: Optional[Callable[[], None]] = None
    stats: QueryStats = field(default_factory=QueryStats)

    _timer: Optional[Timer] = None
    _fired: bool = False
    _lock: Lock = field(default_factory=Lock)

    @property
    def timed_out(self) -> bool:
        """Whether the watchdog fired during the operation."""
        return self._fired

    def start(self):
        """Mark operation as started and arm the watchdog."""
        self.stats.start_time = time.time()
        self.stats.state = QueryState.RUNNING
        if self.timeout_seconds is not None and self.interrupt is not None:
            self._timer = Timer(self.timeout_seconds, self._on_timeout)
            self._timer.daemon = True
            self._timer.start()

    def _on_timeout(self):
        with self._lock:
            if self.stats.state != QueryState.RUNNING:
                return
            self._fired = True
        self.interrupt()

    def _disarm(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def complete(self, rows_returned: int = 0):
        """Mark operation as completed."""
        with self._lock:
            self._disarm()
            self.stats.end_time = time.time()
            self.stats.state = QueryState.COMPLETED
            self.stats.rows_returned = rows_returned

    def fail(self, error: str):
        """Mark operation as failed (or timed out, if the watchdog fired)."""
        with self._lock:
            self._disarm()
            self.stats.end_time = time.time()
            self.stats.state = QueryState.TIMEOUT if self._fired else QueryState.FAILED
            self.stats.error = error


@contextmanager
def query_timeout(
    seconds: Optional[float],
    interrupt: Optional[Callable[[], None]] = None,
    operation: str = "",
) -> Generator[QueryContext, None, None]:
    """
    Context manager for operation timeout.

    Usage:
        with query_timeout(5.0, conn.interrupt, "select") as ctx:
            rows = conn.execute(sql).fetchall()
            ctx.complete(len(rows))

    Raises QueryTimeoutError (chained to the driver error) when the
    watchdog interrupted the operation; other errors propagate unchanged.
    """
    ctx = QueryContext(
        timeout_seconds=seconds,
        interrupt=interrupt,
        stats=QueryStats(operation=operation),
    )
    ctx.start()
    try:
        yield ctx
        if ctx.stats.state == QueryState.RUNNING:
            ctx.complete()
    except Exception as e:
        ctx.fail(str(e))
        if ctx.timed_out:
            raise QueryTimeoutError(
                f"Operation exceeded timeout of {seconds}s"
            ) from e
        raise
