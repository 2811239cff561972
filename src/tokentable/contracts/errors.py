"""Exception hierarchy for token persistence.

Not-found is never an exception here: point lookups return None and
deletes of missing rows succeed. Everything below represents a genuine
failure the caller has to handle.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pydantic import ValidationError

    from tokentable.contracts.records import RevokeResult


class TokenStoreError(Exception):
    """Base class for all token store failures."""

    pass


class ConfigurationError(TokenStoreError):
    """Raised when a settings file fails validation.

    Attributes:
        errors: One "field.path: message" line per validation failure
    """

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def from_validation_error(cls, error: ValidationError) -> ConfigurationError:
        """Flatten a pydantic ValidationError into readable lines."""
        lines = [
            f"{'.'.join(str(x) for x in detail['loc'])}: {detail['msg']}"
            for detail in error.errors()
        ]
        return cls(f"Invalid configuration ({len(lines)} errors)", lines)


class CodecError(TokenStoreError):
    """Raised when a payload cannot be encoded or decoded."""

    pass


class TableGatewayError(TokenStoreError):
    """A remote table operation failed (connectivity, throttling, bad request).

    Attributes:
        operation: Gateway operation that failed (upsert, point_get, ...)
        status_code: HTTP status reported by the service, if any
    """

    def __init__(
        self,
        operation: str,
        message: str,
        *,
        status_code: int | None = None,
    ) -> None:
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation
        self.status_code = status_code


class PartialRevokeError(TokenStoreError):
    """One or more deletes in a bulk revoke failed.

    Some matched records may already be gone while others remain. The
    revoke can be re-invoked safely: each delete is independently
    idempotent.

    Attributes:
        result: Outcome of the revoke, including failed keys and errors
    """

    def __init__(self, result: RevokeResult) -> None:
        super().__init__(
            f"Revoke for owner '{result.owner_id}' and issuer '{result.issuer_id}' "
            f"failed for {len(result.failed_keys)} of {result.matched_count} records"
        )
        self.result = result
