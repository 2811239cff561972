"""In-process table gateway.

Behaves like the remote service where the store can observe it:
ordered segmented scans with continuation markers, fresh etags on every
write, conditional deletes, and a yield to the event loop on each call so
concurrent callers interleave. Used for tests and local development.
"""

from __future__ import annotations

import asyncio
import itertools
from collections import Counter
from dataclasses import dataclass, field, replace

from tokentable.contracts.errors import TableGatewayError
from tokentable.contracts.records import (
    WILDCARD_ETAG,
    ContinuationToken,
    QueryPage,
    StoredRecord,
)
from tokentable.core.filters import EqualityFilter


@dataclass
class MemoryTable:
    """Handle for one in-memory table."""

    name: str
    rows: dict[tuple[str, str], StoredRecord] = field(default_factory=dict)


class InMemoryTableGateway:
    """Dict-backed TableGateway.

    Attributes:
        page_size: Default maximum records per query segment
        fail_deletes_for: Row keys whose delete raises TableGatewayError
        operation_counts: Calls per gateway operation
        tables_created: Number of tables actually created
    """

    def __init__(self, page_size: int = 1000) -> None:
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self.page_size = page_size
        self.fail_deletes_for: set[str] = set()
        self.operation_counts: Counter[str] = Counter()
        self.tables_created = 0
        self._tables: dict[str, MemoryTable] = {}
        self._etags = itertools.count(1)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def table(self, name: str) -> MemoryTable:
        """Direct access to a table for assertions."""
        return self._tables[name]

    async def _round_trip(self, operation: str) -> None:
        if self._closed:
            raise TableGatewayError(operation, "gateway is closed")
        self.operation_counts[operation] += 1
        await asyncio.sleep(0)

    async def ensure_collection(self, name: str) -> MemoryTable:
        await self._round_trip("ensure_collection")
        if name not in self._tables:
            self._tables[name] = MemoryTable(name=name)
            self.tables_created += 1
        return self._tables[name]

    async def upsert(self, handle: MemoryTable, record: StoredRecord) -> None:
        await self._round_trip("upsert")
        etag = f'W/"{next(self._etags)}"'
        handle.rows[(record.partition_id, record.row_key)] = replace(record, etag=etag)

    async def point_get(
        self, handle: MemoryTable, partition_id: str, row_key: str
    ) -> StoredRecord | None:
        await self._round_trip("point_get")
        return handle.rows.get((partition_id, row_key))

    async def delete(
        self,
        handle: MemoryTable,
        partition_id: str,
        row_key: str,
        etag: str = WILDCARD_ETAG,
    ) -> None:
        await self._round_trip("delete")
        if row_key in self.fail_deletes_for:
            raise TableGatewayError(
                "delete", f"injected failure for {row_key}", status_code=503
            )
        current = handle.rows.get((partition_id, row_key))
        if current is None:
            return
        if etag != WILDCARD_ETAG and current.etag != etag:
            raise TableGatewayError(
                "delete",
                f"etag mismatch for ({partition_id}, {row_key})",
                status_code=412,
            )
        del handle.rows[(partition_id, row_key)]

    async def query_page(
        self,
        handle: MemoryTable,
        query_filter: EqualityFilter,
        continuation: ContinuationToken | None = None,
        page_size: int | None = None,
    ) -> QueryPage:
        await self._round_trip("query_page")
        limit = page_size or self.page_size
        keys = sorted(handle.rows)
        if continuation is not None:
            start = (continuation["PartitionKey"], continuation["RowKey"])
            keys = [k for k in keys if k >= start]

        matched: list[StoredRecord] = []
        for index, key in enumerate(keys):
            record = handle.rows[key]
            if query_filter.matches(record):
                matched.append(record)
            if len(matched) == limit:
                remaining = keys[index + 1 :]
                if remaining:
                    next_pk, next_rk = remaining[0]
                    return QueryPage(
                        records=matched,
                        continuation={"PartitionKey": next_pk, "RowKey": next_rk},
                    )
                break
        return QueryPage(records=matched, continuation=None)

    async def close(self) -> None:
        self._closed = True
