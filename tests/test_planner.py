"""
Tests for the pattern planner.
"""

import itertools

import pytest

from rdf_quadstore.storage.dialects import DuckDBDialect, PostgreSQLDialect, SQLiteDialect
from rdf_quadstore.storage.planner import PLAN_TABLE, plan, signature_of
from rdf_quadstore.storage.quadruples import TripleFlavor
from rdf_quadstore.storage.terms import Term


def _all_patterns():
    """Every combination of bound slots, with at most one of O/L bound."""
    for c, s, p in itertools.product([None, "ex:c"], [None, "ex:s"], [None, "ex:p"]):
        yield dict(context=c, subject=s, predicate=p)
        yield dict(context=c, subject=s, predicate=p, obj="ex:o")
        yield dict(context=c, subject=s, predicate=p, literal=Term.literal("v"))


class TestPlanTable:
    """Test the signature lookup table."""

    def test_covers_every_signature(self):
        """Empty signature plus 23 bound signatures."""
        assert len(PLAN_TABLE) == 24
        for pattern in _all_patterns():
            assert plan(**pattern).signature in PLAN_TABLE

    def test_object_signatures_filter_flavor(self):
        for signature, filters in PLAN_TABLE.items():
            has_object = "O" in signature or "L" in signature
            assert ("F" in filters) == has_object, signature

    def test_filters_match_bound_slots(self):
        for signature, filters in PLAN_TABLE.items():
            expected = {slot if slot != "L" else "O" for slot in signature}
            assert set(filters) - {"F"} == expected, signature


class TestPlan:
    """Test planning of individual patterns."""

    def test_empty_is_full_scan(self):
        query_plan = plan()
        assert query_plan.is_full_scan
        assert query_plan.signature == ""
        assert query_plan.parameters == {}
        assert query_plan.where_clause(SQLiteDialect()) == ""

    def test_signature_order(self):
        query_plan = plan(context="ex:c", predicate="ex:p", literal="v")
        assert query_plan.signature == "CPL"

    def test_signature_of(self):
        t = Term.iri("ex:x")
        assert signature_of(t, None, t, None, None) == "CP"
        assert signature_of(None, None, None, None, None) == ""

    def test_resource_object_flavor(self):
        query_plan = plan(obj="ex:o")
        assert query_plan.flavor == TripleFlavor.SPO
        assert query_plan.parameters == {
            "objid": Term.iri("ex:o").key,
            "tfv": 1,
        }

    def test_literal_object_flavor(self):
        query_plan = plan(literal=Term.literal("v", lang="en"))
        assert query_plan.flavor == TripleFlavor.SPL
        assert query_plan.parameters["objid"] == Term.literal("v", lang="en").key
        assert query_plan.parameters["tfv"] == 2

    def test_literal_string_parsed_as_literal(self):
        query_plan = plan(literal="v@en")
        assert query_plan.parameters["objid"] == Term.literal("v", lang="en").key

    def test_parameters_only_for_filters(self):
        for pattern in _all_patterns():
            query_plan = plan(**pattern)
            assert len(query_plan.parameters) == len(query_plan.filters)

    def test_both_objects_rejected(self):
        with pytest.raises(ValueError):
            plan(obj="ex:o", literal="v")

    def test_literal_term_as_object_rejected(self):
        with pytest.raises(ValueError):
            plan(obj=Term.literal("42"))

    def test_resource_term_as_literal_rejected(self):
        with pytest.raises(ValueError):
            plan(literal=Term.iri("ex:o"))
        with pytest.raises(ValueError):
            plan(literal=Term.bnode("b1"))

    @pytest.mark.parametrize("slot", ["context", "subject", "predicate"])
    def test_literal_term_in_resource_slot_rejected(self, slot):
        with pytest.raises(ValueError):
            plan(**{slot: Term.literal("x")})

    def test_describe(self):
        info = plan(subject="ex:s", obj="ex:o").describe()
        assert info["signature"] == "SO"
        assert info["filters"] == ["subject_id", "object_id", "triple_flavor"]
        assert info["flavor"] == "SPO"


class TestRendering:
    """Test SQL rendering per dialect."""

    def test_sqlite_placeholders(self):
        sql = plan(context="ex:c", obj="ex:o").select_sql(SQLiteDialect())
        assert sql == (
            "SELECT triple_flavor, context, subject, predicate, object FROM quadruples "
            "WHERE context_id = :ctxid AND object_id = :objid AND triple_flavor = :tfv"
        )

    def test_duckdb_placeholders(self):
        sql = plan(subject="ex:s").delete_sql(DuckDBDialect())
        assert sql == "DELETE FROM quadruples WHERE subject_id = $subjid"

    def test_postgres_placeholders(self):
        sql = plan(predicate="ex:p").where_clause(PostgreSQLDialect())
        assert sql == " WHERE predicate_id = %(predid)s"

    def test_text_columns_never_filtered(self):
        for pattern in _all_patterns():
            where = plan(**pattern).where_clause(SQLiteDialect())
            for column in ("context =", "subject =", "predicate =", "object ="):
                assert column not in where
