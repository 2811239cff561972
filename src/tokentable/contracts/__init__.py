"""Shared contracts for cross-boundary data types.

Import pattern:
    from tokentable.contracts import AuthorizationCode, StoredRecord, TokenStoreError
"""

from tokentable.contracts.enums import AuthMethod, RecordField
from tokentable.contracts.errors import (
    CodecError,
    ConfigurationError,
    PartialRevokeError,
    TableGatewayError,
    TokenStoreError,
)
from tokentable.contracts.records import (
    WILDCARD_ETAG,
    ContinuationToken,
    QueryPage,
    RevokeResult,
    StoredRecord,
)
from tokentable.contracts.tokens import AuthorizationCode

__all__ = [
    "WILDCARD_ETAG",
    "AuthMethod",
    "AuthorizationCode",
    "CodecError",
    "ConfigurationError",
    "ContinuationToken",
    "PartialRevokeError",
    "QueryPage",
    "RecordField",
    "RevokeResult",
    "StoredRecord",
    "TableGatewayError",
    "TokenStoreError",
]
