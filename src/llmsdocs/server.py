"""MCP server entrypoint.

Responsibilities (and nothing more):
- Configure structlog
- Create AppState via the FastMCP lifespan context manager
- Register tools and resources
- Start the correct transport (stdio or HTTP)
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from contextlib import asynccontextmanager, suppress
from datetime import timedelta
from typing import TYPE_CHECKING

import structlog
from mcp.server.fastmcp import Context, FastMCP
from mcp.types import CallToolResult, TextContent

import llmsdocs.tools.ask_docs as t_ask
import llmsdocs.tools.get_documentation as t_get_docs
import llmsdocs.tools.search_documentation as t_search
from llmsdocs import __version__
from llmsdocs.cache import DocumentCache
from llmsdocs.completion import CompletionClient
from llmsdocs.config import Settings
from llmsdocs.errors import DocsError
from llmsdocs.fetcher import DocsFetcher, build_http_client
from llmsdocs.models.docs import InitResult
from llmsdocs.schedulers import run_cache_prune_scheduler
from llmsdocs.service import DocumentationService
from llmsdocs.state import AppState
from llmsdocs.storage import build_filesystem
from llmsdocs.transport import run_http_server

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(settings: Settings) -> None:
    """Configure structlog. Called once at startup before any log statements."""
    log_level = logging.getLevelNamesMapping()[settings.logging.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        processors = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        # Logs go to stderr; stdout is reserved for the MCP JSON-RPC stream
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

INDEX_WARMUP_TIMEOUT_SECONDS = 10.0


async def _warm_documentation_index(state: AppState) -> InitResult:
    """Load the llms.txt structure before serving, bounded by a timeout.

    A slow or unreachable docs site leaves the server usable: every tool
    fetches on demand, only the structure resource stays empty.
    """
    if state.docs is None:
        return InitResult(status="degraded", reason="documentation service not initialized")
    try:
        result = await asyncio.wait_for(
            state.docs.initialize(),
            timeout=INDEX_WARMUP_TIMEOUT_SECONDS,
        )
    except TimeoutError:
        log.warning("docs_index_warmup_timeout", timeout=INDEX_WARMUP_TIMEOUT_SECONDS)
        result = InitResult(status="degraded", reason="timed out loading documentation index")

    if not result.ok:
        log.warning("docs_index_degraded", reason=result.reason)
    return result


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncGenerator[AppState, None]:
    """Create and tear down all shared resources for the server's lifetime."""
    settings = Settings()
    _setup_logging(settings)

    log.info(
        "server_starting",
        version=__version__,
        transport=settings.server.transport,
        base_url=settings.docs.base_url,
    )

    http_client = build_http_client(settings.fetcher)

    cache = DocumentCache(
        build_filesystem(settings.cache),
        settings.cache.cache_dir,
        memory_ttl=timedelta(seconds=settings.cache.memory_ttl_seconds),
        disk_ttl=timedelta(seconds=settings.cache.disk_ttl_seconds),
    )
    docs = DocumentationService(
        cache,
        DocsFetcher(http_client, settings.docs.base_url),
        min_section_length=settings.search.min_section_length,
    )
    completion = CompletionClient(http_client, settings.completion, settings.docs.product_name)

    state = AppState(
        settings=settings,
        http_client=http_client,
        cache=cache,
        docs=docs,
        completion=completion,
    )
    state.init_result = await _warm_documentation_index(state)

    cache_prune_task = asyncio.create_task(run_cache_prune_scheduler(state))

    log.info(
        "server_started",
        version=__version__,
        transport=settings.server.transport,
        cache_backend=settings.cache.backend,
        index_status=state.init_result.status,
    )

    try:
        yield state
    finally:
        cache_prune_task.cancel()
        with suppress(asyncio.CancelledError):
            await cache_prune_task
        await http_client.aclose()
        log.info("server_stopping")


# ---------------------------------------------------------------------------
# FastMCP instance, tools and resources
# ---------------------------------------------------------------------------

mcp = FastMCP("llmsdocs", lifespan=lifespan)
# FastMCP doesn't expose a version kwarg, so set it on the underlying Server
# so the MCP initialize handshake reports our version, not the SDK's.
mcp._mcp_server.version = __version__  # pyright: ignore[reportPrivateUsage]


def _serialise_tool_error(error: DocsError) -> CallToolResult:
    """Convert a DocsError to the MCP tool error result envelope."""
    return CallToolResult(
        content=[TextContent(type="text", text=json.dumps(error.to_dict()))],
        isError=True,
    )


def _log_tool_error(tool: str, exc: DocsError) -> None:
    log.warning(
        "tool_error",
        tool=tool,
        code=exc.code,
        message=exc.message,
        recoverable=exc.recoverable,
    )


def _current_state() -> AppState:
    return mcp.get_context().request_context.lifespan_context


@mcp.tool()
async def get_documentation(path: str, ctx: Context, format: str = "markdown") -> object:
    """Fetch a specific documentation page or section.

    ``path`` is relative to the documentation site, e.g.
    'api-reference/introduction'. ``format`` is 'markdown' for the raw page or
    'structured' for JSON with the source URL and fetch time.
    """
    state: AppState = ctx.request_context.lifespan_context
    try:
        return await t_get_docs.handle(path, format, state)
    except DocsError as exc:
        _log_tool_error("get_documentation", exc)
        return _serialise_tool_error(exc)
    except Exception:
        log.error("tool_unexpected_error", tool="get_documentation", exc_info=True)
        raise


@mcp.tool()
async def search_documentation(query: str, ctx: Context, limit: int | None = None) -> object:
    """Search the documentation and return the best-matching sections.

    Each result has a title, an excerpt, a relevance score and a guessed
    page path. The path is a hint only and may not be fetchable.
    """
    state: AppState = ctx.request_context.lifespan_context
    try:
        return await t_search.handle(query, limit, state)
    except DocsError as exc:
        _log_tool_error("search_documentation", exc)
        return _serialise_tool_error(exc)
    except Exception:
        log.error("tool_unexpected_error", tool="search_documentation", exc_info=True)
        raise


@mcp.tool()
async def ask_docs(question: str, ctx: Context, include_context: bool = True) -> object:
    """Ask a question about the product, answered by a language model.

    With ``include_context`` the most relevant documentation sections are sent
    along with the question.
    """
    state: AppState = ctx.request_context.lifespan_context
    try:
        return await t_ask.handle(question, include_context, state)
    except DocsError as exc:
        _log_tool_error("ask_docs", exc)
        return _serialise_tool_error(exc)
    except Exception:
        log.error("tool_unexpected_error", tool="ask_docs", exc_info=True)
        raise


@mcp.resource(
    "llmsdocs://docs/index",
    name="Documentation Index",
    description="Documentation structure and navigation (llms.txt)",
    mime_type="text/markdown",
)
async def docs_index_resource() -> str:
    state = _current_state()
    if state.docs is None:
        raise RuntimeError("Documentation service not initialized")
    return await state.docs.get_documentation_index()


@mcp.resource(
    "llmsdocs://docs/full",
    name="Complete Documentation",
    description="All documentation in one file (llms-full.txt)",
    mime_type="text/markdown",
)
async def docs_full_resource() -> str:
    state = _current_state()
    if state.docs is None:
        raise RuntimeError("Documentation service not initialized")
    return await state.docs.get_full_documentation()


@mcp.resource(
    "llmsdocs://docs/structure",
    name="Documentation Structure",
    description="Parsed documentation index: title, summary and linked sections",
    mime_type="application/json",
)
async def docs_structure_resource() -> str:
    state = _current_state()
    if state.docs is None:
        raise RuntimeError("Documentation service not initialized")
    if state.docs.structure is None:
        # Warm-up failed at startup; retry now that someone is asking.
        state.init_result = await state.docs.initialize()
    structure = state.docs.structure
    payload = {
        "status": state.init_result.status if state.init_result else "degraded",
        "structure": structure.model_dump(mode="json") if structure is not None else None,
    }
    return json.dumps(payload)


@mcp.resource(
    "llmsdocs://cache/stats",
    name="Cache Statistics",
    description="Entry counts and sizes for the memory and disk cache layers",
    mime_type="application/json",
)
async def cache_stats_resource() -> str:
    state = _current_state()
    if state.docs is None:
        raise RuntimeError("Documentation service not initialized")
    stats = await state.docs.get_cache_stats()
    return stats.model_dump_json()


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def main() -> None:
    settings = Settings()

    if settings.server.transport == "http":
        _setup_logging(settings)
        run_http_server(mcp, settings)
        return

    mcp.run()


if __name__ == "__main__":
    main()
