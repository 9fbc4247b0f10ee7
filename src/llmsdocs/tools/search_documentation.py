"""Tool handler for search_documentation.

Receives AppState, runs lexical search over the full corpus, and returns
a structured dict. No MCP or FastMCP imports; server.py handles the MCP
wiring.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from llmsdocs.errors import DocsError, ErrorCode
from llmsdocs.models.tools import SearchDocumentationInput, SearchDocumentationOutput

if TYPE_CHECKING:
    from llmsdocs.state import AppState


async def handle(query: str, limit: int | None, state: AppState) -> dict:
    """Handle a search_documentation tool call."""
    log = structlog.get_logger().bind(tool="search_documentation", query=query)
    log.info("handler_called")

    if limit is None:
        limit = state.settings.search.default_limit

    # Validate input
    try:
        validated = SearchDocumentationInput(query=query, limit=limit)
    except ValueError as exc:
        raise DocsError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion="Provide a non-empty query (max 500 chars) and a limit between 1 and 50.",
            recoverable=False,
        ) from exc

    if state.docs is None:
        raise RuntimeError("Documentation service not initialized")

    results = await state.docs.search_documentation(validated.query, validated.limit)
    log.info("search_complete", result_count=len(results))

    output = SearchDocumentationOutput(query=validated.query, results=results)
    return output.model_dump(mode="json")
