# tests/core/test_filters.py
"""Tests for structured equality filters."""

import pytest

from tokentable.contracts import RecordField, StoredRecord


def _record(owner: str, issuer: str) -> StoredRecord:
    return StoredRecord(
        partition_id="p", row_key="k", issuer_id=issuer, owner_id=owner, payload="{}"
    )


class TestEqualityFilter:
    """Conjunction of equality constraints."""

    def test_where_builds_conditions_in_order(self) -> None:
        from tokentable.core.filters import EqualityFilter

        query_filter = EqualityFilter.where(owner_id="u1", issuer_id="c1")

        assert query_filter.conditions == (
            (RecordField.OWNER_ID, "u1"),
            (RecordField.ISSUER_ID, "c1"),
        )

    def test_unknown_field_rejected(self) -> None:
        from tokentable.core.filters import EqualityFilter

        with pytest.raises(ValueError):
            EqualityFilter.where(colour="blue")

    def test_empty_filter_rejected(self) -> None:
        from tokentable.core.filters import EqualityFilter

        with pytest.raises(ValueError, match="at least one"):
            EqualityFilter(conditions=())

    def test_duplicate_field_rejected(self) -> None:
        from tokentable.core.filters import EqualityFilter

        with pytest.raises(ValueError, match="Duplicate"):
            EqualityFilter(
                conditions=((RecordField.OWNER_ID, "a"), (RecordField.OWNER_ID, "b"))
            )

    def test_matches_requires_every_condition(self) -> None:
        from tokentable.core.filters import EqualityFilter

        query_filter = EqualityFilter.where(owner_id="u1", issuer_id="c1")

        assert query_filter.matches(_record("u1", "c1"))
        assert not query_filter.matches(_record("u1", "c2"))
        assert not query_filter.matches(_record("u2", "c1"))

    def test_to_odata_is_parameterized(self) -> None:
        from tokentable.core.filters import EqualityFilter

        columns = {RecordField.OWNER_ID: "SubjectId", RecordField.ISSUER_ID: "ClientId"}
        text, parameters = EqualityFilter.where(
            owner_id="o' or 'a' eq 'a", issuer_id="c1"
        ).to_odata(columns)

        assert text == "SubjectId eq @p0 and ClientId eq @p1"
        assert parameters == {"p0": "o' or 'a' eq 'a", "p1": "c1"}
