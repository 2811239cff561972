"""Core infrastructure: codec, partitioning, filters, configuration, logging."""

from tokentable.core.canonical import canonical_json
from tokentable.core.codec import (
    PydanticJsonCodec,
    RecordCodec,
)
from tokentable.core.config import (
    DEFAULT_TABLE_NAME,
    LoggingSettings,
    PartitionSettings,
    RetrySettings,
    RevokeSettings,
    TableStorageSettings,
    TokenTableSettings,
    load_settings,
)
from tokentable.core.filters import EqualityFilter
from tokentable.core.lazy import AsyncOnce
from tokentable.core.logging import (
    configure_logging,
    get_logger,
)
from tokentable.core.partition import (
    HashPartitionStrategy,
    PartitionStrategy,
)

__all__ = [
    "DEFAULT_TABLE_NAME",
    "AsyncOnce",
    "EqualityFilter",
    "HashPartitionStrategy",
    "LoggingSettings",
    "PartitionSettings",
    "PartitionStrategy",
    "PydanticJsonCodec",
    "RecordCodec",
    "RetrySettings",
    "RevokeSettings",
    "TableStorageSettings",
    "TokenTableSettings",
    "canonical_json",
    "configure_logging",
    "get_logger",
    "load_settings",
]
