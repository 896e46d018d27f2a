"""
QuadStore: the public surface shared by every quad store backend.

Backends implement a handful of primitives (insert-if-absent, batch merge,
delete by key, delete by pattern, clear, existence probe, pattern select,
count). Everything else (the per-slot select/remove helpers, quadruple-level
convenience methods, store identity, scoped lifetime) is built here once
on top of them.

Conventions:
- Mutations return the store itself, so calls can be chained
- A None primary argument is a no-op, never an error
- Strings are accepted wherever a resource term is expected
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional

from rdf_quadstore.storage.quadruples import Quadruple, QuadrupleId, Triple
from rdf_quadstore.storage.results import QuadrupleSet
from rdf_quadstore.storage.terms import create_hash


class QuadStore(ABC):
    """
    Abstract context-aware RDF store.

    Example:
        with SQLiteStore("quads.db") as store:
            store.add_quadruple(Quadruple("ex:ctx", "ex:subj", "ex:pred", "ex:obj"))
            result = store.select_by_context("ex:ctx")
    """

    store_type: str = ""

    # ========== Primitives ==========

    @abstractmethod
    def add_quadruple(self, quadruple: Optional[Quadruple]) -> "QuadStore":
        """Insert the quadruple unless a quadruple with the same key exists."""

    @abstractmethod
    def merge_graph(
        self,
        context: Any,
        triples: Optional[Iterable[Any]],
    ) -> "QuadStore":
        """Insert all triples under one context, all or nothing."""

    @abstractmethod
    def remove_by_key(self, key: Optional[QuadrupleId]) -> "QuadStore":
        """Remove the quadruple with the given key, if any."""

    @abstractmethod
    def remove_quadruples(
        self,
        context: Any = None,
        subject: Any = None,
        predicate: Any = None,
        obj: Any = None,
        literal: Any = None,
    ) -> "QuadStore":
        """Remove every quadruple matching the pattern (no-op when nothing is bound)."""

    @abstractmethod
    def clear(self) -> "QuadStore":
        """Remove every quadruple."""

    @abstractmethod
    def contains_key(self, key: Optional[QuadrupleId]) -> bool:
        """Check whether a quadruple with the given key is stored."""

    @abstractmethod
    def select_quadruples(
        self,
        context: Any = None,
        subject: Any = None,
        predicate: Any = None,
        obj: Any = None,
        literal: Any = None,
    ) -> QuadrupleSet:
        """Materialize the quadruples matching the pattern."""

    @property
    @abstractmethod
    def quadruples_count(self) -> int:
        """Number of stored quadruples (-1 when it cannot be determined)."""

    @abstractmethod
    def close(self) -> None:
        """Release the store's resources. Idempotent."""

    # ========== Quadruple-level helpers ==========

    def remove_quadruple(self, quadruple: Optional[Quadruple]) -> "QuadStore":
        if quadruple is None:
            return self
        return self.remove_by_key(quadruple.key)

    def contains_quadruple(self, quadruple: Optional[Quadruple]) -> bool:
        if quadruple is None:
            return False
        return self.contains_key(quadruple.key)

    def add_triple(self, context: Any, triple: Optional[Triple]) -> "QuadStore":
        if context is None or triple is None:
            return self
        return self.add_quadruple(Quadruple.from_triple(context, triple))

    # ========== Select helpers ==========

    def select_all_quadruples(self) -> QuadrupleSet:
        return self.select_quadruples()

    def select_by_context(self, context: Any) -> QuadrupleSet:
        if context is None:
            return QuadrupleSet()
        return self.select_quadruples(context=context)

    def select_by_subject(self, subject: Any) -> QuadrupleSet:
        if subject is None:
            return QuadrupleSet()
        return self.select_quadruples(subject=subject)

    def select_by_predicate(self, predicate: Any) -> QuadrupleSet:
        if predicate is None:
            return QuadrupleSet()
        return self.select_quadruples(predicate=predicate)

    def select_by_object(self, obj: Any) -> QuadrupleSet:
        if obj is None:
            return QuadrupleSet()
        return self.select_quadruples(obj=obj)

    def select_by_literal(self, literal: Any) -> QuadrupleSet:
        if literal is None:
            return QuadrupleSet()
        return self.select_quadruples(literal=literal)

    # ========== Remove helpers ==========

    def remove_by_context(self, context: Any) -> "QuadStore":
        return self.remove_quadruples(context=context)

    def remove_by_subject(self, subject: Any) -> "QuadStore":
        return self.remove_quadruples(subject=subject)

    def remove_by_predicate(self, predicate: Any) -> "QuadStore":
        return self.remove_quadruples(predicate=predicate)

    def remove_by_object(self, obj: Any) -> "QuadStore":
        return self.remove_quadruples(obj=obj)

    def remove_by_literal(self, literal: Any) -> "QuadStore":
        return self.remove_quadruples(literal=literal)

    # ========== Identity & lifetime ==========

    @property
    def store_id(self) -> int:
        """Stable identifier derived from the store's string form."""
        return create_hash(str(self))

    def __enter__(self) -> "QuadStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

