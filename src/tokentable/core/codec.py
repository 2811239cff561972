# src/tokentable/core/codec.py
"""Record codecs converting domain values to and from storable strings.

A codec must be lossless (decode(encode(v)) == v) and deterministic
(equal values encode to identical strings).
"""

from typing import Generic, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel, ValidationError

from tokentable.contracts.errors import CodecError
from tokentable.core.canonical import canonical_json

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


@runtime_checkable
class RecordCodec(Protocol[T]):
    """Protocol for payload codecs."""

    def encode(self, value: T) -> str:
        """Serialize a domain value.

        Args:
            value: Value to serialize

        Returns:
            String suitable for the payload column
        """
        ...

    def decode(self, text: str) -> T:
        """Reconstruct a domain value.

        Args:
            text: String previously produced by encode()

        Returns:
            The original value

        Raises:
            CodecError: If text is not a valid encoding
        """
        ...


class PydanticJsonCodec(Generic[M]):
    """Codec for pydantic models using canonical JSON.

    Encoding goes through model_dump(mode="json") and RFC 8785, so field
    order and whitespace never vary between processes.
    """

    def __init__(self, model_type: type[M]) -> None:
        self.model_type = model_type

    def encode(self, value: M) -> str:
        """Serialize a model instance to canonical JSON."""
        if not isinstance(value, self.model_type):
            raise CodecError(
                f"Expected {self.model_type.__name__}, got {type(value).__name__}"
            )
        try:
            return canonical_json(value.model_dump(mode="json"))
        except (TypeError, ValueError) as e:
            raise CodecError(f"Cannot encode {self.model_type.__name__}: {e}") from e

    def decode(self, text: str) -> M:
        """Validate JSON text back into a model instance."""
        try:
            return self.model_type.model_validate_json(text)
        except ValidationError as e:
            raise CodecError(
                f"Stored payload is not a valid {self.model_type.__name__}: {e}"
            ) from e
