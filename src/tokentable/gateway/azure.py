"""Azure Table Storage gateway.

Wraps azure.data.tables.aio. Physical property names match tables
written by existing identity server deployments:

    PartitionKey | RowKey | ClientId | SubjectId | Json

Filters are rendered as parameterized OData; values are bound by the SDK
and never concatenated into the filter text.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from azure.core import MatchConditions
from azure.core.exceptions import AzureError, HttpResponseError, ResourceNotFoundError
from azure.data.tables import UpdateMode

from tokentable.contracts.enums import RecordField
from tokentable.contracts.errors import TableGatewayError
from tokentable.contracts.records import (
    WILDCARD_ETAG,
    ContinuationToken,
    QueryPage,
    StoredRecord,
)
from tokentable.core.filters import EqualityFilter
from tokentable.core.logging import get_logger

if TYPE_CHECKING:
    from azure.core.credentials_async import AsyncTokenCredential
    from azure.data.tables.aio import TableClient, TableServiceClient

    from tokentable.core.config import RetrySettings, TableStorageSettings

logger = get_logger(__name__)

COLUMN_NAMES: dict[RecordField, str] = {
    RecordField.PARTITION_ID: "PartitionKey",
    RecordField.ROW_KEY: "RowKey",
    RecordField.ISSUER_ID: "ClientId",
    RecordField.OWNER_ID: "SubjectId",
    RecordField.PAYLOAD: "Json",
}


def _gateway_error(operation: str, error: AzureError) -> TableGatewayError:
    """Translate an SDK exception, keeping the HTTP status when there is one."""
    status_code = error.status_code if isinstance(error, HttpResponseError) else None
    return TableGatewayError(operation, str(error.message or error), status_code=status_code)


class AzureTableGateway:
    """TableGateway backed by an async Azure TableServiceClient.

    The gateway owns the service client (and the token credential, if one
    is given) and closes both in close().

    Example:
        gateway = AzureTableGateway.from_settings(settings.storage, settings.retry)
        table = await gateway.ensure_collection("AuthorizationCodes")
        await gateway.upsert(table, record)
        await gateway.close()
    """

    def __init__(
        self,
        service_client: TableServiceClient,
        credential: AsyncTokenCredential | None = None,
    ) -> None:
        self._service = service_client
        self._credential = credential

    @classmethod
    def from_settings(
        cls,
        storage: TableStorageSettings,
        retry: RetrySettings | None = None,
    ) -> AzureTableGateway:
        """Build a gateway from validated storage settings."""
        logger.debug(
            "Creating table service client", auth_method=storage.auth_method.value
        )
        credential = storage.create_credential()
        return cls(
            storage.create_table_service_client(retry, credential=credential),
            credential=credential,
        )

    async def ensure_collection(self, name: str) -> TableClient:
        try:
            return await self._service.create_table_if_not_exists(table_name=name)
        except AzureError as e:
            raise _gateway_error("ensure_collection", e) from e

    async def upsert(self, handle: TableClient, record: StoredRecord) -> None:
        try:
            await handle.upsert_entity(
                entity=self._to_entity(record), mode=UpdateMode.REPLACE
            )
        except AzureError as e:
            raise _gateway_error("upsert", e) from e

    async def point_get(
        self, handle: TableClient, partition_id: str, row_key: str
    ) -> StoredRecord | None:
        try:
            entity = await handle.get_entity(partition_key=partition_id, row_key=row_key)
        except ResourceNotFoundError:
            return None
        except AzureError as e:
            raise _gateway_error("point_get", e) from e
        return self._from_entity(entity)

    async def delete(
        self,
        handle: TableClient,
        partition_id: str,
        row_key: str,
        etag: str = WILDCARD_ETAG,
    ) -> None:
        kwargs: dict[str, Any] = {}
        if etag != WILDCARD_ETAG:
            kwargs = {"etag": etag, "match_condition": MatchConditions.IfNotModified}
        try:
            await handle.delete_entity(
                partition_key=partition_id, row_key=row_key, **kwargs
            )
        except ResourceNotFoundError:
            # Deleting a missing row counts as success
            return
        except AzureError as e:
            raise _gateway_error("delete", e) from e

    async def query_page(
        self,
        handle: TableClient,
        query_filter: EqualityFilter,
        continuation: ContinuationToken | None = None,
        page_size: int | None = None,
    ) -> QueryPage:
        filter_text, parameters = query_filter.to_odata(COLUMN_NAMES)
        try:
            pages = handle.query_entities(
                filter_text, parameters=parameters, results_per_page=page_size
            ).by_page(continuation_token=continuation)
            try:
                page = await pages.__anext__()
            except StopAsyncIteration:
                return QueryPage(records=[], continuation=None)
            records = [self._from_entity(entity) async for entity in page]
        except AzureError as e:
            raise _gateway_error("query_page", e) from e
        return QueryPage(records=records, continuation=pages.continuation_token or None)

    async def close(self) -> None:
        await self._service.close()
        if self._credential is not None:
            await self._credential.close()

    @staticmethod
    def _to_entity(record: StoredRecord) -> dict[str, str]:
        return {
            COLUMN_NAMES[RecordField.PARTITION_ID]: record.partition_id,
            COLUMN_NAMES[RecordField.ROW_KEY]: record.row_key,
            COLUMN_NAMES[RecordField.ISSUER_ID]: record.issuer_id,
            COLUMN_NAMES[RecordField.OWNER_ID]: record.owner_id,
            COLUMN_NAMES[RecordField.PAYLOAD]: record.payload,
        }

    @staticmethod
    def _from_entity(entity: Any) -> StoredRecord:
        metadata = getattr(entity, "metadata", None) or {}
        return StoredRecord(
            partition_id=entity[COLUMN_NAMES[RecordField.PARTITION_ID]],
            row_key=entity[COLUMN_NAMES[RecordField.ROW_KEY]],
            issuer_id=entity.get(COLUMN_NAMES[RecordField.ISSUER_ID], ""),
            owner_id=entity.get(COLUMN_NAMES[RecordField.OWNER_ID], ""),
            payload=entity.get(COLUMN_NAMES[RecordField.PAYLOAD], ""),
            etag=metadata.get("etag"),
        )
