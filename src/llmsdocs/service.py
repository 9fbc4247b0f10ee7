"""Documentation retrieval service.

The single entry point tool handlers use for documentation. Every read goes
cache first; on a miss the fetcher is called and the result is written
through the cache before it is returned. Search and context requests run the
full corpus through the splitter and the relevance scorer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from llmsdocs.fetcher import FULL_FILENAME, INDEX_FILENAME, normalise_page_path
from llmsdocs.index_parser import parse_index
from llmsdocs.models.docs import InitResult
from llmsdocs.relevance import search_sections, select_context
from llmsdocs.splitter import MIN_SECTION_LENGTH, split_into_sections

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from llmsdocs.models.cache import CacheStats, PruneResult
    from llmsdocs.models.docs import DocIndexStructure, FetchedDocument, SearchResult
    from llmsdocs.protocols import CacheProtocol, FetcherProtocol

log = structlog.get_logger()

INDEX_CACHE_KEY = INDEX_FILENAME
FULL_CACHE_KEY = FULL_FILENAME


def page_cache_key(path: str) -> str:
    return f"page:{normalise_page_path(path)}"


class DocumentationService:
    """Cached access to one documentation site plus lexical search over it."""

    def __init__(
        self,
        cache: CacheProtocol,
        fetcher: FetcherProtocol,
        *,
        min_section_length: int = MIN_SECTION_LENGTH,
    ) -> None:
        self._cache = cache
        self._fetcher = fetcher
        self._min_section_length = min_section_length
        self._structure: DocIndexStructure | None = None

    @property
    def structure(self) -> DocIndexStructure | None:
        """Parsed llms.txt, or None until ``initialize`` has succeeded."""
        return self._structure

    async def initialize(self) -> InitResult:
        """Load and parse the documentation index.

        Best-effort: any failure is logged and reported as ``degraded``,
        leaving ``structure`` unset. Never raises.
        """
        try:
            content = await self.get_documentation_index()
            self._structure = parse_index(content)
        except Exception as exc:
            log.warning("docs_index_load_failed", exc_info=True)
            return InitResult(status="degraded", reason=str(exc) or type(exc).__name__)

        log.info(
            "docs_index_loaded",
            title=self._structure.title,
            sections=len(self._structure.sections),
        )
        return InitResult(status="ready")

    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------

    async def get_documentation_index(self) -> str:
        return await self._get_or_fetch(INDEX_CACHE_KEY, self._fetcher.fetch_index)

    async def get_full_documentation(self) -> str:
        return await self._get_or_fetch(FULL_CACHE_KEY, self._fetcher.fetch_full)

    async def get_documentation_page(self, path: str) -> str:
        path = normalise_page_path(path)
        return await self._get_or_fetch(
            page_cache_key(path), lambda: self._fetcher.fetch_page(path)
        )

    async def _get_or_fetch(
        self,
        key: str,
        fetch: Callable[[], Awaitable[FetchedDocument]],
    ) -> str:
        cached = await self._cache.get(key)
        if cached is not None:
            log.debug("cache_hit", key=key)
            return cached

        log.info("cache_miss_fetching", key=key)
        document = await fetch()
        await self._cache.set(key, document.content, etag=document.etag)
        return document.content

    # ------------------------------------------------------------------
    # Search and context
    # ------------------------------------------------------------------

    async def search_documentation(self, query: str, limit: int = 5) -> list[SearchResult]:
        sections = split_into_sections(
            await self.get_full_documentation(), self._min_section_length
        )
        results = search_sections(sections, query, limit)
        log.info("search_complete", query=query, sections=len(sections), results=len(results))
        return results

    async def get_relevant_context(self, question: str, max_sections: int = 3) -> str:
        sections = split_into_sections(
            await self.get_full_documentation(), self._min_section_length
        )
        context = select_context(sections, question, max_sections)
        log.info("context_selected", sections=len(sections), context_length=len(context))
        return context

    # ------------------------------------------------------------------
    # Cache maintenance
    # ------------------------------------------------------------------

    async def get_cache_stats(self) -> CacheStats:
        return await self._cache.get_stats()

    async def prune_cache(self) -> PruneResult:
        return await self._cache.prune()
