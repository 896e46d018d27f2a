"""
Pattern planner for the quadruples table.

Turns any combination of bound context/subject/predicate/object/literal
into the WHERE clause and named parameters of a single statement against
the quadruples table.

Every bound slot becomes an equality filter on an integer key column.
Text columns are never filtered: they exist only to rebuild terms on read.
Whenever the object slot is bound (as resource or as literal) the plan also
filters on triple_flavor, because a resource and a literal may share the
same object key.

The plans live in PLAN_TABLE, one hand-written entry per signature.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from rdf_quadstore.storage.quadruples import TripleFlavor
from rdf_quadstore.storage.terms import Term, as_term

if TYPE_CHECKING:
    from rdf_quadstore.storage.dialects import SQLDialect


TABLE_NAME = "quadruples"

SELECT_COLUMNS = "triple_flavor, context, subject, predicate, object"

# Filter name -> (column, parameter name)
FILTER_COLUMNS: dict[str, tuple[str, str]] = {
    "C": ("context_id", "ctxid"),
    "S": ("subject_id", "subjid"),
    "P": ("predicate_id", "predid"),
    "O": ("object_id", "objid"),
    "F": ("triple_flavor", "tfv"),
}

# Signature -> filters applied, in index-friendly order.
# "F" is the flavor filter: it must accompany every O/L signature.
# L binds the same object_id column as O, with flavor SPL instead of SPO.
PLAN_TABLE: dict[str, tuple[str, ...]] = {
    "": (),
    "C": ("C",),
    "S": ("S",),
    "P": ("P",),
    "O": ("O", "F"),
    "L": ("O", "F"),
    "CS": ("C", "S"),
    "CP": ("C", "P"),
    "CO": ("C", "O", "F"),
    "CL": ("C", "O", "F"),
    "SP": ("S", "P"),
    "SO": ("S", "O", "F"),
    "SL": ("S", "O", "F"),
    "PO": ("P", "O", "F"),
    "PL": ("P", "O", "F"),
    "CSP": ("C", "S", "P"),
    "CSO": ("C", "S", "O", "F"),
    "CSL": ("C", "S", "O", "F"),
    "CPO": ("C", "P", "O", "F"),
    "CPL": ("C", "P", "O", "F"),
    "SPO": ("S", "P", "O", "F"),
    "SPL": ("S", "P", "O", "F"),
    "CSPO": ("C", "S", "P", "O", "F"),
    "CSPL": ("C", "S", "P", "O", "F"),
}


@dataclass(frozen=True)
class QueryPlan:
    """
    A planned access to the quadruples table.

    Attributes:
        signature: Ordered subset of "CSPOL" naming the bound slots
        filters: Filter names from FILTER_COLUMNS, as listed in PLAN_TABLE
        parameters: Named parameter values, one per filter
        flavor: Flavor filter value, when the object slot is bound
    """
    signature: str
    filters: tuple[str, ...]
    parameters: dict[str, Any] = field(default_factory=dict)
    flavor: Optional[TripleFlavor] = None

    @property
    def is_full_scan(self) -> bool:
        return not self.filters

    def where_clause(self, dialect: "SQLDialect") -> str:
        """Render the filters as " WHERE a = ? AND b = ?" (empty for a full scan)."""
        if not self.filters:
            return ""
        terms = []
        for name in self.filters:
            column, param = FILTER_COLUMNS[name]
            terms.append(f"{column} = {dialect.placeholder(param)}")
        return " WHERE " + " AND ".join(terms)

    def select_sql(self, dialect: "SQLDialect") -> str:
        return f"SELECT {SELECT_COLUMNS} FROM {TABLE_NAME}{self.where_clause(dialect)}"

    def delete_sql(self, dialect: "SQLDialect") -> str:
        return f"DELETE FROM {TABLE_NAME}{self.where_clause(dialect)}"

    def describe(self) -> dict[str, Any]:
        return {
            "signature": self.signature or "*",
            "filters": [FILTER_COLUMNS[name][0] for name in self.filters],
            "flavor": self.flavor.name if self.flavor is not None else None,
        }


def signature_of(
    context: Optional[Term],
    subject: Optional[Term],
    predicate: Optional[Term],
    obj: Optional[Term],
    literal: Optional[Term],
) -> str:
    """Build the filter signature (insertion order C, S, P, O, L)."""
    signature = ""
    if context is not None:
        signature += "C"
    if subject is not None:
        signature += "S"
    if predicate is not None:
        signature += "P"
    if obj is not None:
        signature += "O"
    if literal is not None:
        signature += "L"
    return signature


def plan(
    context: Any = None,
    subject: Any = None,
    predicate: Any = None,
    obj: Any = None,
    literal: Any = None,
) -> QueryPlan:
    """
    Plan a pattern access to the quadruples table.

    Args:
        context: Context term (or IRI string) to match
        subject: Subject resource to match
        predicate: Predicate resource to match
        obj: Resource object to match (SPO flavor)
        literal: Literal object to match (SPL flavor)

    Returns:
        QueryPlan with filters and bound parameters

    Raises:
        ValueError: If both obj and literal are bound, or a slot is given
            a term of the wrong kind (a literal outside the literal slot,
            a resource in it)
    """
    if obj is not None and literal is not None:
        raise ValueError("A pattern cannot bind both a resource object and a literal object")

    context = as_term(context)
    subject = as_term(subject)
    predicate = as_term(predicate)
    obj = as_term(obj)
    literal = as_term(literal, literal=True)
    for slot, term in (("context", context), ("subject", subject), ("predicate", predicate), ("obj", obj)):
        if term is not None and term.is_literal:
            raise ValueError(f"Pattern {slot} must be a resource, got literal {term}; bind literals with literal=")
    if literal is not None and not literal.is_literal:
        raise ValueError(f"Pattern literal must be a literal, got resource {literal}; bind resources with obj=")

    signature = signature_of(context, subject, predicate, obj, literal)
    filters = PLAN_TABLE[signature]

    values: dict[str, Any] = {}
    flavor: Optional[TripleFlavor] = None
    if context is not None:
        values["C"] = context.key
    if subject is not None:
        values["S"] = subject.key
    if predicate is not None:
        values["P"] = predicate.key
    if obj is not None:
        values["O"] = obj.key
        flavor = TripleFlavor.SPO
    if literal is not None:
        values["O"] = literal.key
        flavor = TripleFlavor.SPL
    if flavor is not None:
        values["F"] = int(flavor)

    parameters = {FILTER_COLUMNS[name][1]: values[name] for name in filters}
    return QueryPlan(signature=signature, filters=filters, parameters=parameters, flavor=flavor)
