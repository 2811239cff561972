# tests/core/test_lazy.py
"""Tests for the construct-once async cell."""

import asyncio

import pytest


class TestAsyncOnce:
    """Compute-if-absent semantics under concurrency."""

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_computation(self) -> None:
        from tokentable.core.lazy import AsyncOnce

        calls = 0

        async def factory() -> object:
            nonlocal calls
            calls += 1
            await asyncio.sleep(0)
            return object()

        once = AsyncOnce(factory)
        values = await asyncio.gather(*(once.get() for _ in range(20)))

        assert calls == 1
        assert all(value is values[0] for value in values)
        assert once.is_initialized

    @pytest.mark.asyncio
    async def test_failure_is_not_cached(self) -> None:
        from tokentable.core.lazy import AsyncOnce

        attempts = 0

        async def factory() -> str:
            nonlocal attempts
            attempts += 1
            if attempts == 1:
                raise ConnectionError("first attempt fails")
            return "handle"

        once = AsyncOnce(factory)
        with pytest.raises(ConnectionError):
            await once.get()
        assert not once.is_initialized

        assert await once.get() == "handle"
        assert attempts == 2

    @pytest.mark.asyncio
    async def test_reset_recomputes(self) -> None:
        from tokentable.core.lazy import AsyncOnce

        counter = iter(range(10))

        async def factory() -> int:
            return next(counter)

        once = AsyncOnce(factory)
        assert await once.get() == 0
        assert await once.get() == 0
        once.reset()
        assert await once.get() == 1
