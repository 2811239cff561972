"""tokentable: revocable authorization code persistence on Azure Table Storage."""

__version__ = "0.1.0"

from tokentable.contracts import (  # noqa: E402
    AuthorizationCode,
    PartialRevokeError,
    RevokeResult,
    TableGatewayError,
    TokenStoreError,
)
from tokentable.store import AuthorizationCodeStore, TableTokenStore  # noqa: E402

__all__ = [
    "AuthorizationCode",
    "AuthorizationCodeStore",
    "PartialRevokeError",
    "RevokeResult",
    "TableGatewayError",
    "TableTokenStore",
    "TokenStoreError",
    "__version__",
]
