"""
Materialized result sets of pattern selections.
"""

from __future__ import annotations

from typing import Iterable, Iterator, Optional

import polars as pl

from rdf_quadstore.storage.quadruples import Quadruple, QuadrupleId


class QuadrupleSet:
    """
    Ordered, duplicate-free collection of quadruples.

    Keeps the order in which rows were read; a quadruple whose key is
    already present is not added twice.
    """

    def __init__(self, quadruples: Optional[Iterable[Quadruple]] = None):
        self._by_key: dict[QuadrupleId, Quadruple] = {}
        if quadruples is not None:
            for quadruple in quadruples:
                self.add(quadruple)

    def add(self, quadruple: Quadruple) -> "QuadrupleSet":
        if quadruple is not None:
            self._by_key.setdefault(quadruple.key, quadruple)
        return self

    def __iter__(self) -> Iterator[Quadruple]:
        return iter(self._by_key.values())

    def __len__(self) -> int:
        return len(self._by_key)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Quadruple):
            return item.key in self._by_key
        return item in self._by_key

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, QuadrupleSet):
            return NotImplemented
        return self._by_key.keys() == other._by_key.keys()

    def __repr__(self) -> str:
        return f"QuadrupleSet(count={len(self)})"

    @property
    def quadruples_count(self) -> int:
        return len(self._by_key)

    def keys(self) -> list[QuadrupleId]:
        return list(self._by_key)

    def single(self) -> Quadruple:
        """Return the only quadruple of the set."""
        if len(self._by_key) != 1:
            raise ValueError(f"Expected exactly one quadruple, found {len(self._by_key)}")
        return next(iter(self._by_key.values()))

    def to_dicts(self) -> list[dict]:
        return [q.to_dict() for q in self]

    def to_polars(self) -> pl.DataFrame:
        """Convert the result to a Polars DataFrame."""
        if not self._by_key:
            return pl.DataFrame(
                {
                    "context": pl.Series([], dtype=pl.Utf8),
                    "subject": pl.Series([], dtype=pl.Utf8),
                    "predicate": pl.Series([], dtype=pl.Utf8),
                    "object": pl.Series([], dtype=pl.Utf8),
                    "flavor": pl.Series([], dtype=pl.Utf8),
                }
            )
        return pl.DataFrame(self.to_dicts())
