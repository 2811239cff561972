"""Structured equality predicates for range queries.

Filters are kept as (field, value) pairs until a gateway renders them.
The Azure gateway renders parameterized OData so values are never spliced
into the filter text.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from tokentable.contracts.enums import RecordField
from tokentable.contracts.records import StoredRecord


@dataclass(frozen=True)
class EqualityFilter:
    """Conjunction of equality constraints over named record fields.

    Example:
        EqualityFilter.where(owner_id="alice", issuer_id="web")
        # owner_id == "alice" AND issuer_id == "web"
    """

    conditions: tuple[tuple[RecordField, str], ...]

    def __post_init__(self) -> None:
        if not self.conditions:
            raise ValueError("EqualityFilter requires at least one condition")
        fields = [f for f, _ in self.conditions]
        if len(set(fields)) != len(fields):
            raise ValueError(f"Duplicate fields in filter: {fields}")

    @classmethod
    def where(cls, **constraints: str) -> "EqualityFilter":
        """Build a filter from keyword constraints named after RecordField values."""
        return cls(
            conditions=tuple(
                (RecordField(name), value) for name, value in constraints.items()
            )
        )

    def matches(self, record: StoredRecord) -> bool:
        """Evaluate the predicate against a record."""
        return all(
            getattr(record, field.value) == value for field, value in self.conditions
        )

    def to_odata(
        self, column_names: Mapping[RecordField, str]
    ) -> tuple[str, dict[str, Any]]:
        """Render as a parameterized OData filter.

        Args:
            column_names: Physical property name for each logical field

        Returns:
            Tuple of (filter text, parameters), e.g.
            ("SubjectId eq @p0 and ClientId eq @p1", {"p0": ..., "p1": ...})
        """
        clauses = []
        parameters: dict[str, Any] = {}
        for index, (field, value) in enumerate(self.conditions):
            name = f"p{index}"
            clauses.append(f"{column_names[field]} eq @{name}")
            parameters[name] = value
        return " and ".join(clauses), parameters
