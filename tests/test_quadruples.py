"""Tests for quadruples, flavors and statement keys."""
import pytest

from rdf_quadstore.storage.quadruples import (
    Quadruple,
    Triple,
    TripleFlavor,
    statement_key,
)
from rdf_quadstore.storage.terms import Term, create_hash


# ========== Statement key Tests ==========

class TestStatementKey:
    def test_space_joined_hash(self):
        q = Quadruple("ex:ctx", "ex:s", "ex:p", "ex:o")
        assert q.key == create_hash("ex:ctx ex:s ex:p ex:o")
        assert q.key == statement_key("ex:ctx", "ex:s", "ex:p", "ex:o")

    def test_equal_statements_share_key(self):
        a = Quadruple("ex:ctx", "ex:s", "ex:p", Term.literal("v", lang="en"))
        b = Quadruple(Term.iri("ex:ctx"), Term.iri("ex:s"), Term.iri("ex:p"), Term.literal("v", lang="EN"))
        assert a.key == b.key

    def test_context_changes_key(self):
        a = Quadruple("ex:c1", "ex:s", "ex:p", "ex:o")
        b = Quadruple("ex:c2", "ex:s", "ex:p", "ex:o")
        assert a.key != b.key

    def test_slot_order_matters(self):
        a = Quadruple("ex:c", "ex:a", "ex:p", "ex:b")
        b = Quadruple("ex:c", "ex:b", "ex:p", "ex:a")
        assert a.key != b.key


# ========== Flavor Tests ==========

class TestFlavor:
    def test_resource_object(self):
        assert Quadruple("ex:c", "ex:s", "ex:p", "ex:o").flavor == TripleFlavor.SPO

    def test_literal_object(self):
        q = Quadruple("ex:c", "ex:s", "ex:p", Term.literal("hello"))
        assert q.flavor == TripleFlavor.SPL

    def test_flavor_values(self):
        assert int(TripleFlavor.SPO) == 1
        assert int(TripleFlavor.SPL) == 2

    def test_same_text_different_flavor(self):
        """A resource and a plain literal can share the object key."""
        res = Quadruple("ex:c", "ex:s", "ex:p", "ex:thing")
        lit = Quadruple("ex:c", "ex:s", "ex:p", Term.literal("ex:thing"))
        assert res.object.key == lit.object.key
        assert res.flavor != lit.flavor


# ========== Validation Tests ==========

class TestValidation:
    def test_none_slot(self):
        with pytest.raises(ValueError):
            Quadruple(None, "ex:s", "ex:p", "ex:o")
        with pytest.raises(ValueError):
            Quadruple("ex:c", "ex:s", "ex:p", None)

    def test_literal_subject(self):
        with pytest.raises(ValueError):
            Quadruple("ex:c", Term.literal("s"), "ex:p", "ex:o")

    def test_literal_predicate(self):
        with pytest.raises(ValueError):
            Quadruple("ex:c", "ex:s", Term.literal("p"), "ex:o")

    def test_bnode_context(self):
        with pytest.raises(ValueError):
            Quadruple("bnode:c", "ex:s", "ex:p", "ex:o")

    def test_bnode_predicate(self):
        with pytest.raises(ValueError):
            Quadruple("ex:c", "ex:s", Term.bnode("p"), "ex:o")

    def test_bnode_subject_and_object(self):
        q = Quadruple("ex:c", "_:s", "ex:p", "bnode:o")
        assert str(q.subject) == "bnode:s"
        assert str(q.object) == "bnode:o"

    def test_immutable(self):
        q = Quadruple("ex:c", "ex:s", "ex:p", "ex:o")
        with pytest.raises(AttributeError):
            q.subject = Term.iri("ex:other")


# ========== Triple Tests ==========

class TestTriple:
    def test_from_triple(self):
        t = Triple("ex:s", "ex:p", Term.literal("v"))
        q = Quadruple.from_triple("ex:c", t)
        assert q == Quadruple("ex:c", "ex:s", "ex:p", Term.literal("v"))
        assert q.flavor == t.flavor == TripleFlavor.SPL

    def test_triple_rejects_literal_subject(self):
        with pytest.raises(ValueError):
            Triple(Term.literal("s"), "ex:p", "ex:o")


# ========== Row mapping Tests ==========

class TestRows:
    def test_to_row(self):
        q = Quadruple("ex:c", "ex:s", "ex:p", Term.literal("v", lang="en"))
        row = q.to_row()
        assert row == {
            "qid": q.key,
            "tfv": 2,
            "ctx": "ex:c",
            "ctxid": create_hash("ex:c"),
            "subj": "ex:s",
            "subjid": create_hash("ex:s"),
            "pred": "ex:p",
            "predid": create_hash("ex:p"),
            "obj": "v@en",
            "objid": create_hash("v@en"),
        }

    def test_from_row_uses_stored_flavor(self):
        spo = Quadruple.from_row(1, "ex:c", "ex:s", "ex:p", "ex:o")
        spl = Quadruple.from_row(2, "ex:c", "ex:s", "ex:p", "ex:o")
        assert not spo.object.is_literal
        assert spl.object.is_literal
        assert spo.flavor == TripleFlavor.SPO
        assert spl.flavor == TripleFlavor.SPL

    def test_from_row_roundtrip(self):
        for q in [
            Quadruple("ex:c", "bnode:s", "ex:p", "ex:o"),
            Quadruple("ex:c", "ex:s", "ex:p", Term.literal("42", datatype="http://www.w3.org/2001/XMLSchema#int")),
            Quadruple("ex:c", "ex:s", "ex:p", Term.literal("hi", lang="en")),
        ]:
            row = q.to_row()
            back = Quadruple.from_row(row["tfv"], row["ctx"], row["subj"], row["pred"], row["obj"])
            assert back == q
            assert back.key == q.key

    def test_to_dict(self):
        q = Quadruple("ex:c", "ex:s", "ex:p", "ex:o")
        assert q.to_dict()["flavor"] == "SPO"
