"""Authorization code store backed by Azure Table Storage."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tokentable.contracts.tokens import AuthorizationCode
from tokentable.core.codec import PydanticJsonCodec, RecordCodec
from tokentable.core.config import DEFAULT_TABLE_NAME
from tokentable.core.partition import HashPartitionStrategy, PartitionStrategy
from tokentable.gateway.azure import AzureTableGateway
from tokentable.gateway.base import TableGateway
from tokentable.store.base import TableTokenStore

if TYPE_CHECKING:
    from tokentable.core.config import TokenTableSettings


class AuthorizationCodeStore(TableTokenStore[AuthorizationCode]):
    """Stores authorization codes keyed by code handle.

    The issuer is the code's client_id and the owner its subject_id.

    Example:
        async with AuthorizationCodeStore.from_settings(settings) as store:
            await store.store(code.code, code)
            await store.revoke_by_owner_and_issuer("alice", "web-app")
    """

    def __init__(
        self,
        gateway: TableGateway,
        table_name: str = DEFAULT_TABLE_NAME,
        *,
        codec: RecordCodec[AuthorizationCode] | None = None,
        partition_strategy: PartitionStrategy | None = None,
        page_size: int | None = None,
        max_concurrent_deletes: int | None = None,
    ) -> None:
        super().__init__(
            gateway,
            codec or PydanticJsonCodec(AuthorizationCode),
            table_name,
            partition_strategy=partition_strategy,
            page_size=page_size,
            max_concurrent_deletes=max_concurrent_deletes,
        )

    @classmethod
    def from_settings(cls, settings: TokenTableSettings) -> AuthorizationCodeStore:
        """Build a store talking to the Azure table described by settings."""
        gateway = AzureTableGateway.from_settings(settings.storage, settings.retry)
        return cls(
            gateway,
            settings.storage.table_name,
            partition_strategy=HashPartitionStrategy(settings.partition.prefix_length),
            page_size=settings.revoke.page_size,
            max_concurrent_deletes=settings.revoke.max_concurrent_deletes,
        )

    def issuer_of(self, value: AuthorizationCode) -> str:
        return value.client_id

    def owner_of(self, value: AuthorizationCode) -> str:
        return value.subject_id
