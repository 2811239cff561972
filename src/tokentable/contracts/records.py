"""Physical record layout and query/revoke result types."""

from dataclasses import dataclass, field
from typing import Any

# Concurrency token meaning "ignore the current version"
WILDCARD_ETAG = "*"

# Opaque cursor handed back by a segmented query.
# Shaped like Azure's {"PartitionKey": ..., "RowKey": ...} marker.
ContinuationToken = dict[str, Any]


@dataclass(frozen=True)
class StoredRecord:
    """One persisted token.

    (partition_id, row_key) is the primary key. issuer_id and owner_id are
    copied from the domain value at write time and used only as filter
    predicates; they are never re-derived from the payload on read.
    """

    partition_id: str
    row_key: str
    issuer_id: str
    owner_id: str
    payload: str
    etag: str | None = None


@dataclass(frozen=True)
class QueryPage:
    """One segment of a filtered range query."""

    records: list[StoredRecord]
    continuation: ContinuationToken | None = None

    @property
    def has_more(self) -> bool:
        """Whether the service reported another segment."""
        return self.continuation is not None


@dataclass
class RevokeResult:
    """Outcome of a bulk revoke.

    deleted_keys and failed_keys together cover every matched record.
    """

    owner_id: str
    issuer_id: str
    matched_count: int
    deleted_keys: list[str] = field(default_factory=list)
    failed_keys: list[str] = field(default_factory=list)
    errors: list[BaseException] = field(default_factory=list)
    pages_read: int = 0
    duration_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        """True when every matched record was deleted."""
        return not self.failed_keys
