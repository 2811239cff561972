"""
Canonical JSON serialization for deterministic payloads.

Two-phase approach:
1. Normalize: Check that a JSON-mode dump holds only JSON primitives
2. Serialize: Produce deterministic JSON per RFC 8785/JCS (rfc8785 package)

IMPORTANT: NaN and Infinity are strictly REJECTED, not silently converted.
"""

import math
from collections.abc import Mapping
from typing import Any

import rfc8785


def _normalize_value(obj: Any) -> Any:
    """Validate a JSON-mode value, rebuilding containers with string keys.

    Args:
        obj: Any Python value

    Returns:
        JSON-serializable primitive

    Raises:
        ValueError: If value contains NaN or Infinity
        TypeError: If value has no JSON representation
    """
    if isinstance(obj, float):
        if math.isnan(obj) or math.isinf(obj):
            raise ValueError(
                f"Cannot canonicalize non-finite float: {obj}. "
                "Use None for missing values, not NaN."
            )
        return obj

    if obj is None or isinstance(obj, (str, int, bool)):
        return obj

    if isinstance(obj, Mapping):
        return {str(k): _normalize_value(v) for k, v in obj.items()}

    if isinstance(obj, (list, tuple)):
        return [_normalize_value(x) for x in obj]

    raise TypeError(f"Cannot canonicalize value of type {type(obj).__name__}")


def canonical_json(obj: Any) -> str:
    """Serialize a value to canonical (RFC 8785) JSON text.

    Equal inputs always produce byte-identical output, regardless of
    dict insertion order.
    """
    return rfc8785.dumps(_normalize_value(obj)).decode("utf-8")
