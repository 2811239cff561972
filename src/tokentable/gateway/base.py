# src/tokentable/gateway/base.py
"""Table gateway protocol.

Thin async adapter over a partitioned table service. Every method is a
single remote round trip; pagination and fan-out belong to the store.
"""

from typing import Any, Protocol, runtime_checkable

from tokentable.contracts.records import (
    WILDCARD_ETAG,
    ContinuationToken,
    QueryPage,
    StoredRecord,
)
from tokentable.core.filters import EqualityFilter


@runtime_checkable
class TableGateway(Protocol):
    """Protocol for table service backends.

    Handles are whatever the backend needs to address one table; the
    store treats them as opaque.
    """

    async def ensure_collection(self, name: str) -> Any:
        """Create the table if absent and return a handle to it.

        Idempotent: calling it for an existing table returns a handle
        without error.
        """
        ...

    async def upsert(self, handle: Any, record: StoredRecord) -> None:
        """Insert or fully replace the record at (partition_id, row_key)."""
        ...

    async def point_get(
        self, handle: Any, partition_id: str, row_key: str
    ) -> StoredRecord | None:
        """Fetch one record.

        Returns:
            The record with its etag, or None if it does not exist
        """
        ...

    async def delete(
        self,
        handle: Any,
        partition_id: str,
        row_key: str,
        etag: str = WILDCARD_ETAG,
    ) -> None:
        """Delete one record.

        Args:
            etag: Concurrency token; WILDCARD_ETAG deletes regardless of version

        A missing record is not an error.
        """
        ...

    async def query_page(
        self,
        handle: Any,
        query_filter: EqualityFilter,
        continuation: ContinuationToken | None = None,
        page_size: int | None = None,
    ) -> QueryPage:
        """Fetch one segment of records matching the filter.

        Args:
            continuation: Marker from the previous page, None for the first
            page_size: Maximum records in this segment

        Returns:
            QueryPage whose continuation is None once the scan is exhausted
        """
        ...

    async def close(self) -> None:
        """Release network resources."""
        ...
