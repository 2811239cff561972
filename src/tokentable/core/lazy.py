"""Construct-once cell for lazily created async resources."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

T = TypeVar("T")


class AsyncOnce(Generic[T]):
    """Compute a value at most once, on first await.

    Concurrent first callers wait on the same lock, so the factory runs a
    single time and every caller receives the same value. If the factory
    raises, nothing is cached and the next caller runs it again.

    Example:
        handle = AsyncOnce(lambda: gateway.ensure_collection("AuthorizationCodes"))
        table = await handle.get()
    """

    def __init__(self, factory: Callable[[], Awaitable[T]]) -> None:
        self._factory = factory
        self._lock = asyncio.Lock()
        self._value: T | None = None
        self._ready = False

    @property
    def is_initialized(self) -> bool:
        """Whether the value has been computed."""
        return self._ready

    async def get(self) -> T:
        """Return the value, computing it on first call."""
        if self._ready:
            return self._value  # type: ignore[return-value]
        async with self._lock:
            # Another waiter may have finished while we queued
            if not self._ready:
                self._value = await self._factory()
                self._ready = True
        return self._value  # type: ignore[return-value]

    def reset(self) -> None:
        """Forget the cached value so the next get() recomputes it."""
        self._value = None
        self._ready = False
