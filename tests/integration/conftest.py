"""Integration test fixtures.

Provides a fully wired AppState: two-tier cache on an in-memory filesystem,
a real DocsFetcher and CompletionClient sharing one httpx client, and a
respx router standing in for the documentation site and completion endpoint.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import httpx
import pytest
import respx

from llmsdocs.cache import DocumentCache
from llmsdocs.completion import CompletionClient
from llmsdocs.config import CacheSettings, CompletionSettings, DocsSettings, Settings
from llmsdocs.fetcher import DocsFetcher
from llmsdocs.service import DocumentationService
from llmsdocs.state import AppState

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Callable, Iterator
    from datetime import datetime
    from pathlib import Path

    from llmsdocs.storage import MemoryFileSystem

DOCS_URL = "https://docs.example.com"
COMPLETION_URL = "https://llm.example.com/v1/chat/completions"
CACHE_DIR = "/cache/llmsdocs"


@pytest.fixture()
def subprocess_env(tmp_path: Path) -> dict[str, str]:
    """Baseline env dict for subprocess-based MCP integration tests.

    Overrides any local llmsdocs.yaml by forcing stdio transport, an isolated
    cache directory and an unreachable documentation site.
    """
    env = os.environ.copy()
    env["LLMSDOCS__SERVER__TRANSPORT"] = "stdio"
    env["LLMSDOCS__CACHE__CACHE_DIR"] = str(tmp_path / "cache")
    env["LLMSDOCS__DOCS__BASE_URL"] = "http://127.0.0.1:1"
    return env


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        docs=DocsSettings(base_url=DOCS_URL, product_name="Enso"),
        cache=CacheSettings(backend="memory", cache_dir=CACHE_DIR),
        completion=CompletionSettings(api_key="sk-test", endpoint=COMPLETION_URL, max_retries=1),
    )


@pytest.fixture()
def docs_site(sample_index: str, sample_full: str) -> Iterator[respx.MockRouter]:
    """Mocked documentation site serving the sample llms.txt and llms-full.txt."""
    with respx.mock(assert_all_called=False) as router:
        router.get(f"{DOCS_URL}/llms.txt", name="index").mock(
            return_value=httpx.Response(200, text=sample_index, headers={"ETag": '"idx-1"'})
        )
        router.get(f"{DOCS_URL}/llms-full.txt", name="full").mock(
            return_value=httpx.Response(200, text=sample_full)
        )
        yield router


@pytest.fixture()
async def app_state(
    settings: Settings,
    memory_fs: MemoryFileSystem,
    clock: Callable[[], datetime],
) -> AsyncGenerator[AppState, None]:
    """Full AppState wired the way the server lifespan builds it."""
    async with httpx.AsyncClient() as client:
        cache = DocumentCache(memory_fs, settings.cache.cache_dir, clock=clock)
        docs = DocumentationService(
            cache,
            DocsFetcher(client, settings.docs.base_url),
            min_section_length=settings.search.min_section_length,
        )
        yield AppState(
            settings=settings,
            http_client=client,
            cache=cache,
            docs=docs,
            completion=CompletionClient(client, settings.completion, settings.docs.product_name),
        )
