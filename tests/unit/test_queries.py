"""
Unit tests for InfluxQL query construction.
"""

import pytest

from influx_span_store.errors import InvalidIdentifierError
from influx_span_store.sources.queries import quote_name, select_children, select_spans


class TestSelectSpans:
    """Test cases for exact-match lookups."""

    def test_trace_lookup(self):
        query = select_spans("spans", trace_id=1)

        assert query.text == 'SELECT * FROM "spans" WHERE trace_id=$trace_id GROUP BY *'
        assert query.params == {"trace_id": "0000000000000001"}

    def test_full_identity_lookup(self):
        query = select_spans("spans", trace_id=1, span_id=2, parent_id=0)

        assert query.text == (
            'SELECT * FROM "spans" WHERE trace_id=$trace_id AND span_id=$span_id '
            "AND parent_id=$parent_id GROUP BY *"
        )
        assert query.params == {
            "trace_id": "0000000000000001",
            "span_id": "0000000000000002",
            "parent_id": "0000000000000000",
        }

    def test_limit_applies_to_row_groups(self):
        query = select_spans("spans", parent_id=0, limit=10)

        assert query.text.endswith("GROUP BY * SLIMIT 10")

    def test_canonical_string_identifiers_are_accepted(self):
        query = select_spans("spans", trace_id="00000000000000ff")

        assert query.params == {"trace_id": "00000000000000ff"}

    @pytest.mark.parametrize("value", ["ff", "00000000000000FF", "' OR 1=1 --", "0000000000000001'"])
    def test_non_canonical_identifiers_are_rejected(self, value):
        with pytest.raises(InvalidIdentifierError):
            select_spans("spans", trace_id=value)

    def test_predicate_required(self):
        with pytest.raises(ValueError):
            select_spans("spans")

    def test_non_positive_limit_rejected(self):
        with pytest.raises(ValueError):
            select_spans("spans", parent_id=0, limit=0)


class TestSelectChildren:
    """Test cases for OR-composite child lookups."""

    def test_one_clause_per_trace(self):
        query = select_children("spans", [1, 2])

        assert query.text == (
            'SELECT * FROM "spans" WHERE '
            "(trace_id=$trace_id_0 AND parent_id!=$root_id) OR "
            "(trace_id=$trace_id_1 AND parent_id!=$root_id) GROUP BY *"
        )
        assert query.params == {
            "root_id": "0000000000000000",
            "trace_id_0": "0000000000000001",
            "trace_id_1": "0000000000000002",
        }

    def test_single_trace_has_no_or(self):
        query = select_children("spans", [1])

        assert " OR " not in query.text

    def test_requires_a_trace(self):
        with pytest.raises(ValueError):
            select_children("spans", [])


def test_quote_name_escapes_quotes_and_backslashes():
    assert quote_name("spans") == '"spans"'
    assert quote_name('sp"an\\s') == '"sp\\"an\\\\s"'
