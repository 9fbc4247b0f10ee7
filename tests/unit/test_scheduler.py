"""Unit tests for the cache prune scheduler in schedulers.py.

The loop is driven by patching asyncio.sleep: each test lets it run a fixed
number of iterations, then raises CancelledError the way task cancellation
at shutdown would.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from llmsdocs.config import Settings
from llmsdocs.models.cache import PruneResult
from llmsdocs.schedulers import run_cache_prune_scheduler
from llmsdocs.state import AppState


def _make_state(transport: str = "http", prune: AsyncMock | None = None) -> AppState:
    settings = Settings(server={"transport": transport}, cache={"prune_interval_hours": 2})
    cache = AsyncMock()
    cache.prune = prune or AsyncMock(return_value=PruneResult())
    return AppState(settings=settings, cache=cache)


def _sleep_then_cancel(iterations: int) -> AsyncMock:
    """A fake asyncio.sleep that returns ``iterations`` times, then cancels."""
    effects: list[object] = [None] * iterations
    effects.append(asyncio.CancelledError())
    return AsyncMock(side_effect=effects)


class TestStdioMode:
    async def test_prunes_once_and_returns(self) -> None:
        state = _make_state(transport="stdio")
        mock_sleep = AsyncMock()

        with patch("llmsdocs.schedulers.asyncio.sleep", mock_sleep):
            await run_cache_prune_scheduler(state)

        state.cache.prune.assert_awaited_once()
        mock_sleep.assert_not_awaited()

    async def test_prune_failure_is_swallowed(self) -> None:
        state = _make_state(transport="stdio", prune=AsyncMock(side_effect=OSError("disk gone")))
        await run_cache_prune_scheduler(state)
        state.cache.prune.assert_awaited_once()

    async def test_no_cache_is_a_no_op(self) -> None:
        state = AppState(settings=Settings(server={"transport": "stdio"}))
        await run_cache_prune_scheduler(state)


class TestHttpMode:
    async def test_repeats_on_interval(self) -> None:
        state = _make_state(transport="http")
        mock_sleep = _sleep_then_cancel(iterations=2)

        with (
            patch("llmsdocs.schedulers.asyncio.sleep", mock_sleep),
            pytest.raises(asyncio.CancelledError),
        ):
            await run_cache_prune_scheduler(state)

        # Startup prune plus one per completed sleep
        assert state.cache.prune.await_count == 3
        assert all(call.args == (2 * 3600,) for call in mock_sleep.await_args_list)

    async def test_loop_survives_prune_errors(self) -> None:
        prune = AsyncMock(side_effect=[RuntimeError("boom"), PruneResult(), RuntimeError("again")])
        state = _make_state(transport="http", prune=prune)

        with (
            patch("llmsdocs.schedulers.asyncio.sleep", _sleep_then_cancel(iterations=2)),
            pytest.raises(asyncio.CancelledError),
        ):
            await run_cache_prune_scheduler(state)

        assert prune.await_count == 3
