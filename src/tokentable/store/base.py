# src/tokentable/store/base.py
"""Generic table-backed token store.

Records are addressed by (partition(key), key). Enumeration and revoke do
not use key addressing: they drive the gateway's filtered range query,
page by page, then act on every matched record.

Consistency notes:
- Pagination is sequential. Page N+1 is requested only once page N's
  continuation marker is known.
- Enumeration is not a snapshot. Records written or deleted by other
  callers during a scan may or may not appear.
- Revoke is best-effort and NOT atomic. Deletes for all matched records
  are dispatched concurrently; if any fails, PartialRevokeError is raised
  after every delete has finished, and some records may already be gone.
  Re-invoking the revoke is safe.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from time import perf_counter
from types import TracebackType
from typing import Any, Generic, Self, TypeVar

from tokentable.contracts.errors import PartialRevokeError
from tokentable.contracts.records import WILDCARD_ETAG, RevokeResult, StoredRecord
from tokentable.core.codec import RecordCodec
from tokentable.core.filters import EqualityFilter
from tokentable.core.lazy import AsyncOnce
from tokentable.core.logging import get_logger
from tokentable.core.partition import HashPartitionStrategy, PartitionStrategy
from tokentable.gateway.base import TableGateway

T = TypeVar("T")

logger = get_logger(__name__)


class TableTokenStore(ABC, Generic[T]):
    """Token persistence over a partitioned table service.

    Subclasses bind the domain type and say which of its fields are the
    issuer and owner ids.

    The table handle is created lazily on first use and shared by every
    concurrent operation on this instance. Concurrent first callers
    converge on a single ensure-table call.
    """

    def __init__(
        self,
        gateway: TableGateway,
        codec: RecordCodec[T],
        table_name: str,
        *,
        partition_strategy: PartitionStrategy | None = None,
        page_size: int | None = None,
        max_concurrent_deletes: int | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            gateway: Table service adapter
            codec: Payload codec for the domain type
            table_name: Backing table, created if absent
            partition_strategy: Key to partition mapping (hash prefix by default)
            page_size: Records per query segment (gateway default if None)
            max_concurrent_deletes: Cap on in-flight revoke deletes (None = unbounded)
        """
        if max_concurrent_deletes is not None and max_concurrent_deletes <= 0:
            raise ValueError("max_concurrent_deletes must be positive")
        if page_size is not None and page_size <= 0:
            raise ValueError("page_size must be positive")

        self._gateway = gateway
        self._codec = codec
        self.table_name = table_name
        self._partition_strategy = partition_strategy or HashPartitionStrategy()
        self._page_size = page_size
        self._max_concurrent_deletes = max_concurrent_deletes
        self._table = AsyncOnce(lambda: self._gateway.ensure_collection(self.table_name))
        self._log = logger.bind(table=table_name)

    @abstractmethod
    def issuer_of(self, value: T) -> str:
        """Issuer (client) id of a domain value."""
        ...

    @abstractmethod
    def owner_of(self, value: T) -> str:
        """Owner (subject) id of a domain value."""
        ...

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the gateway and drop the cached table handle."""
        await self._gateway.close()
        self._table.reset()

    async def ensure_table(self) -> Any:
        """Create the backing table if needed and return its handle."""
        return await self._table.get()

    def _locate(self, key: str) -> str:
        if not key:
            raise ValueError("key cannot be empty")
        return self._partition_strategy.partition(key)

    async def store(self, key: str, value: T) -> None:
        """Insert or fully replace the token stored under key.

        Idempotent for equal values. No retry is performed here.

        Raises:
            ValueError: If key is empty
            TableGatewayError: If the remote upsert fails
        """
        partition_id = self._locate(key)
        record = StoredRecord(
            partition_id=partition_id,
            row_key=key,
            issuer_id=self.issuer_of(value),
            owner_id=self.owner_of(value),
            payload=self._codec.encode(value),
        )
        await self._gateway.upsert(await self._table.get(), record)
        self._log.debug("Stored token", partition_id=partition_id, row_key=key)

    async def fetch(self, key: str) -> T | None:
        """Return the token stored under key, or None.

        Never-stored and already-removed keys are indistinguishable.
        """
        partition_id = self._locate(key)
        record = await self._gateway.point_get(
            await self._table.get(), partition_id, key
        )
        if record is None:
            self._log.debug("Token not found", partition_id=partition_id, row_key=key)
            return None
        return self._codec.decode(record.payload)

    async def remove(self, key: str) -> None:
        """Delete the token stored under key, whatever its version.

        Removing a key with no record succeeds.
        """
        partition_id = self._locate(key)
        await self._gateway.delete(
            await self._table.get(), partition_id, key, WILDCARD_ETAG
        )
        self._log.debug("Removed token", partition_id=partition_id, row_key=key)

    async def list_by_owner(self, owner_id: str) -> list[T]:
        """Return every token issued to owner_id.

        Pages through the whole result set before returning. Order is the
        service's scan order.
        """
        records, pages_read = await self._scan(EqualityFilter.where(owner_id=owner_id))
        self._log.debug(
            "Listed tokens by owner",
            owner_id=owner_id,
            count=len(records),
            pages_read=pages_read,
        )
        return [self._codec.decode(record.payload) for record in records]

    async def revoke_by_owner_and_issuer(
        self, owner_id: str, issuer_id: str
    ) -> RevokeResult:
        """Delete every token issued to owner_id by issuer_id.

        Returns:
            RevokeResult listing the deleted keys

        Raises:
            PartialRevokeError: If any individual delete failed. Its result
                lists which keys were deleted and which remain.
            TableGatewayError: If the scan itself failed (nothing deleted)
        """
        start_time = perf_counter()
        records, pages_read = await self._scan(
            EqualityFilter.where(owner_id=owner_id, issuer_id=issuer_id)
        )
        table = await self._table.get()
        semaphore = (
            asyncio.Semaphore(self._max_concurrent_deletes)
            if self._max_concurrent_deletes is not None
            else None
        )

        async def delete_one(record: StoredRecord) -> None:
            if semaphore is None:
                await self._gateway.delete(
                    table, record.partition_id, record.row_key, WILDCARD_ETAG
                )
                return
            async with semaphore:
                await self._gateway.delete(
                    table, record.partition_id, record.row_key, WILDCARD_ETAG
                )

        outcomes = await asyncio.gather(
            *(delete_one(record) for record in records), return_exceptions=True
        )

        result = RevokeResult(
            owner_id=owner_id,
            issuer_id=issuer_id,
            matched_count=len(records),
            pages_read=pages_read,
        )
        for record, outcome in zip(records, outcomes, strict=True):
            if outcome is None:
                result.deleted_keys.append(record.row_key)
                continue
            if not isinstance(outcome, Exception):
                # Cancellation and interpreter exits are not delete failures
                raise outcome
            result.failed_keys.append(record.row_key)
            result.errors.append(outcome)
            self._log.warning(
                "Revoke delete failed",
                partition_id=record.partition_id,
                row_key=record.row_key,
                error=str(outcome),
            )
        result.duration_seconds = perf_counter() - start_time

        self._log.info(
            "Revoke completed",
            owner_id=owner_id,
            issuer_id=issuer_id,
            matched=result.matched_count,
            deleted=len(result.deleted_keys),
            failed=len(result.failed_keys),
            pages_read=pages_read,
        )
        if not result.succeeded:
            raise PartialRevokeError(result)
        return result

    async def _scan(self, query_filter: EqualityFilter) -> tuple[list[StoredRecord], int]:
        """Collect every record matching the filter across all pages.

        Returns:
            Tuple of (records, pages_read)
        """
        table = await self._table.get()
        records: list[StoredRecord] = []
        continuation = None
        pages_read = 0
        while True:
            page = await self._gateway.query_page(
                table, query_filter, continuation, self._page_size
            )
            pages_read += 1
            records.extend(page.records)
            continuation = page.continuation
            if continuation is None:
                return records, pages_read
