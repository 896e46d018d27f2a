"""
RDF Term Model with content-derived 64-bit keys.

Every term (context IRI, resource, blank node, literal) has:
- a canonical string form, which is what gets persisted in the text columns
- a stable signed 64-bit key derived from that string

Key design decisions:
- Keys are MD5-based so they are identical across processes and sessions
  (Python's built-in hash() is salted per process and cannot be persisted)
- Canonical strings are bounded and free of control characters so every
  relational engine can store them in a VARCHAR(1000) column
- Terms are parsed back from their canonical string on read; the caller
  decides whether the text denotes a resource or a literal
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional
import hashlib
import re


# =============================================================================
# Term Identity and Encoding
# =============================================================================

class TermKind(IntEnum):
    """RDF term kind enumeration."""
    IRI = 0
    LITERAL = 1
    BNODE = 2


# Type alias for term identifiers (signed 64-bit)
TermId = int

MAX_TERM_LENGTH = 1000
BNODE_PREFIX = "bnode:"

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_LANG_TAG = re.compile(r"@([a-zA-Z]{1,8}(?:-[a-zA-Z0-9]{1,8})*)$")
_DATATYPE_SEPARATOR = "^^"


def create_hash(text: str) -> TermId:
    """
    Derive a stable signed 64-bit key from a string.

    Takes the first 8 bytes of the MD5 digest of the UTF-8 encoding,
    read as a little-endian signed integer, so the value always fits
    a BIGINT/INTEGER primary key column.
    """
    digest = hashlib.md5(text.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "little", signed=True)


def _check_canonical(text: str) -> str:
    if len(text) > MAX_TERM_LENGTH:
        raise ValueError(
            f"Term exceeds {MAX_TERM_LENGTH} characters: {text[:40]!r}..."
        )
    if _CONTROL_CHARS.search(text):
        raise ValueError(f"Term contains control characters: {text!r}")
    return text


# =============================================================================
# Term Representation
# =============================================================================

@dataclass(frozen=True)
class Term:
    """
    Internal representation of an RDF term.

    Attributes:
        kind: The type of term (IRI, LITERAL, BNODE)
        lex: Lexical form (IRI string, literal value, bnode label)
        datatype: Datatype IRI (for typed literals)
        lang: Language tag (for language-tagged literals)
    """
    kind: TermKind
    lex: str
    datatype: Optional[str] = None
    lang: Optional[str] = None

    def __post_init__(self):
        if self.lex is None:
            raise ValueError("Term lexical form cannot be None")
        if self.kind != TermKind.LITERAL and (self.datatype or self.lang):
            raise ValueError("Only literals can carry a datatype or language")
        if self.datatype is not None and self.lang is not None:
            raise ValueError("A literal cannot have both datatype and language")
        if self.kind != TermKind.LITERAL and not self.lex.strip():
            raise ValueError("IRIs and blank nodes cannot be empty")
        _check_canonical(self.canonical())

    def canonical(self) -> str:
        """
        Canonical string form.

        IRIs are the IRI itself, blank nodes are prefixed with "bnode:",
        literals are "value", "value@lang" or "value^^datatype".
        """
        if self.kind == TermKind.IRI:
            return self.lex
        if self.kind == TermKind.BNODE:
            return f"{BNODE_PREFIX}{self.lex}"
        if self.lang:
            return f"{self.lex}@{self.lang}"
        if self.datatype:
            return f"{self.lex}{_DATATYPE_SEPARATOR}{self.datatype}"
        return self.lex

    def __str__(self) -> str:
        return self.canonical()

    @property
    def key(self) -> TermId:
        """Stable 64-bit key of this term."""
        return create_hash(self.canonical())

    @property
    def is_literal(self) -> bool:
        return self.kind == TermKind.LITERAL

    @classmethod
    def iri(cls, value: str) -> "Term":
        """Create an IRI term."""
        return cls(kind=TermKind.IRI, lex=value)

    @classmethod
    def literal(
        cls,
        value: str,
        datatype: Optional[str] = None,
        lang: Optional[str] = None,
    ) -> "Term":
        """Create a literal term."""
        return cls(
            kind=TermKind.LITERAL,
            lex=value,
            datatype=datatype,
            lang=lang.lower() if lang else None,
        )

    @classmethod
    def bnode(cls, label: str) -> "Term":
        """Create a blank node term."""
        if label.startswith(BNODE_PREFIX):
            label = label[len(BNODE_PREFIX):]
        elif label.startswith("_:"):
            label = label[2:]
        return cls(kind=TermKind.BNODE, lex=label)

    @classmethod
    def resource(cls, text: str) -> "Term":
        """Parse a resource (IRI or blank node) from its canonical string."""
        if text.startswith(BNODE_PREFIX) or text.startswith("_:"):
            return cls.bnode(text)
        return cls.iri(text)

    @classmethod
    def parse_literal(cls, text: str) -> "Term":
        """
        Parse a literal from its canonical string.

        The last "^^" marks a typed literal when what follows looks like an
        IRI; a trailing "@tag" marks a language-tagged literal; anything
        else is a plain literal.
        """
        if _DATATYPE_SEPARATOR in text:
            value, _, datatype = text.rpartition(_DATATYPE_SEPARATOR)
            if ":" in datatype and not any(ch.isspace() for ch in datatype):
                return cls.literal(value, datatype=datatype)
        match = _LANG_TAG.search(text)
        if match:
            return cls.literal(text[:match.start()], lang=match.group(1))
        return cls.literal(text)


def as_term(value, literal: bool = False) -> Optional[Term]:
    """
    Coerce a user value to a Term.

    Strings are read as resources unless literal=True; Terms pass through.
    None stays None so callers can keep their "unbound" semantics.
    """
    if value is None or isinstance(value, Term):
        return value
    if not isinstance(value, str):
        value = str(value)
    return Term.parse_literal(value) if literal else Term.resource(value)
