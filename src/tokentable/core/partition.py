# src/tokentable/core/partition.py
"""Partition key derivation.

A point lookup must never search more than one partition, so the
strategy has to be a pure function of the key: same key, same partition,
in every process and across restarts. Python's built-in hash() is salted
per process and therefore unusable here.
"""

import hashlib
from typing import Protocol, runtime_checkable


@runtime_checkable
class PartitionStrategy(Protocol):
    """Protocol for deriving a partition id from a logical key."""

    def partition(self, key: str) -> str:
        """Return the partition id for a key.

        Args:
            key: Non-empty logical key

        Returns:
            Partition id
        """
        ...


class HashPartitionStrategy:
    """Spread keys across 16**prefix_length partitions.

    Uses the first prefix_length hex chars of the SHA-256 digest of the key,
    so sequential or prefix-sharing keys still land in different partitions.

    Example:
        >>> strategy = HashPartitionStrategy(prefix_length=2)
        >>> strategy.partition("abc")
        'ba'
    """

    MAX_PREFIX_LENGTH = 16

    def __init__(self, prefix_length: int = 2) -> None:
        if not 1 <= prefix_length <= self.MAX_PREFIX_LENGTH:
            raise ValueError(
                f"prefix_length must be between 1 and {self.MAX_PREFIX_LENGTH}, "
                f"got {prefix_length}"
            )
        self.prefix_length = prefix_length

    @property
    def partition_count(self) -> int:
        """Number of distinct partitions this strategy can produce."""
        return 16**self.prefix_length

    def partition(self, key: str) -> str:
        if not key:
            raise ValueError("key cannot be empty")
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return digest[: self.prefix_length]
