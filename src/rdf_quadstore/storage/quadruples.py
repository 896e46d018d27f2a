"""
Quadruples and their content-derived identifiers.

A quadruple is a context-tagged triple. Its key is the hash of the
canonical strings of context, subject, predicate and object joined by
single spaces, in that fixed order. Two quadruples with the same key are
treated as the same statement.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Union

from rdf_quadstore.storage.terms import Term, TermKind, as_term, create_hash


class TripleFlavor(IntEnum):
    """
    Discriminant of the object slot.

    Stored explicitly: a resource and a literal can share the same
    canonical text (and therefore the same object key).
    """
    SPO = 1  # object is a resource
    SPL = 2  # object is a literal


QuadrupleId = int

TermLike = Union[Term, str]


def statement_key(context: Any, subject: Any, predicate: Any, obj: Any) -> QuadrupleId:
    """Compute the 64-bit key of a statement from its four terms."""
    return create_hash(f"{context} {subject} {predicate} {obj}")


def _resource(value: TermLike, slot: str, allow_bnode: bool = True) -> Term:
    term = as_term(value)
    if term is None:
        raise ValueError(f"Quadruple {slot} cannot be None")
    if term.kind == TermKind.LITERAL:
        raise ValueError(f"Quadruple {slot} must be a resource, got literal {term}")
    if not allow_bnode and term.kind == TermKind.BNODE:
        raise ValueError(f"Quadruple {slot} cannot be a blank node")
    return term


@dataclass(frozen=True)
class Triple:
    """A subject-predicate-object statement without context."""
    subject: Term
    predicate: Term
    object: Term

    def __init__(self, subject: TermLike, predicate: TermLike, obj: TermLike):
        object.__setattr__(self, "subject", _resource(subject, "subject"))
        object.__setattr__(self, "predicate", _resource(predicate, "predicate", allow_bnode=False))
        term = as_term(obj)
        if term is None:
            raise ValueError("Triple object cannot be None")
        object.__setattr__(self, "object", term)

    @property
    def flavor(self) -> TripleFlavor:
        return TripleFlavor.SPL if self.object.is_literal else TripleFlavor.SPO

    def __str__(self) -> str:
        return f"{self.subject} {self.predicate} {self.object}"


@dataclass(frozen=True)
class Quadruple:
    """
    A context-tagged RDF triple.

    Strings are accepted for every slot and read as resources; pass a
    Term.literal(...) as object for literal-flavored statements.
    Malformed statements (missing slot, literal subject/predicate,
    blank-node context or predicate) raise ValueError at construction.
    """
    context: Term
    subject: Term
    predicate: Term
    object: Term
    flavor: TripleFlavor = field(init=False)
    key: QuadrupleId = field(init=False)

    def __init__(
        self,
        context: TermLike,
        subject: TermLike,
        predicate: TermLike,
        obj: TermLike,
    ):
        object.__setattr__(self, "context", _resource(context, "context", allow_bnode=False))
        object.__setattr__(self, "subject", _resource(subject, "subject"))
        object.__setattr__(self, "predicate", _resource(predicate, "predicate", allow_bnode=False))
        term = as_term(obj)
        if term is None:
            raise ValueError("Quadruple object cannot be None")
        object.__setattr__(self, "object", term)
        object.__setattr__(
            self, "flavor", TripleFlavor.SPL if term.is_literal else TripleFlavor.SPO
        )
        object.__setattr__(
            self, "key", statement_key(self.context, self.subject, self.predicate, term)
        )

    @classmethod
    def from_triple(cls, context: TermLike, triple: Triple) -> "Quadruple":
        return cls(context, triple.subject, triple.predicate, triple.object)

    @classmethod
    def from_row(
        cls,
        flavor: int,
        context: str,
        subject: str,
        predicate: str,
        obj: str,
    ) -> "Quadruple":
        """
        Rebuild a quadruple from its persisted text columns.

        The stored flavor decides how the object text is parsed; it is
        never re-derived from the text itself.
        """
        flavor = TripleFlavor(flavor)
        obj_term = Term.parse_literal(obj) if flavor == TripleFlavor.SPL else Term.resource(obj)
        return cls(Term.iri(context), Term.resource(subject), Term.iri(predicate), obj_term)

    def to_row(self) -> dict[str, Any]:
        """Named parameters for the insert statement."""
        return {
            "qid": self.key,
            "tfv": int(self.flavor),
            "ctx": self.context.canonical(),
            "ctxid": self.context.key,
            "subj": self.subject.canonical(),
            "subjid": self.subject.key,
            "pred": self.predicate.canonical(),
            "predid": self.predicate.key,
            "obj": self.object.canonical(),
            "objid": self.object.key,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "context": str(self.context),
            "subject": str(self.subject),
            "predicate": str(self.predicate),
            "object": str(self.object),
            "flavor": self.flavor.name,
        }

    def __str__(self) -> str:
        return f"{self.context} {self.subject} {self.predicate} {self.object}"
