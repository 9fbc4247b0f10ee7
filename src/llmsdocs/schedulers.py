"""Background scheduler coroutine for cache pruning."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from llmsdocs.state import AppState

log = structlog.get_logger()


async def run_cache_prune_scheduler(state: AppState) -> None:
    """Prune the cache at startup and (HTTP mode) on the configured interval."""
    interval_hours = state.settings.cache.prune_interval_hours

    # Both transports: prune once at startup.
    await _prune_once(state)

    if state.settings.server.transport != "http":
        return

    # HTTP long-running mode: repeat on the configured interval.
    while True:
        await asyncio.sleep(interval_hours * 3600)
        await _prune_once(state)


async def _prune_once(state: AppState) -> None:
    if state.cache is None:
        return
    try:
        await state.cache.prune()
    except Exception:
        log.warning("cache_prune_scheduler_error", exc_info=True)
