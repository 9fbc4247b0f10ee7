"""Tool handler for get_documentation.

Receives AppState, fetches a single documentation page through the cached
service, and returns either the raw Markdown or a structured dict.
No MCP or FastMCP imports; server.py handles the MCP wiring.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog

from llmsdocs.errors import DocsError, ErrorCode
from llmsdocs.models.tools import GetDocumentationInput, GetDocumentationOutput

if TYPE_CHECKING:
    from llmsdocs.state import AppState


async def handle(path: str, format: str, state: AppState) -> str | dict:
    """Handle a get_documentation tool call."""
    log = structlog.get_logger().bind(tool="get_documentation", path=path)
    log.info("handler_called")

    # Validate input
    try:
        validated = GetDocumentationInput(path=path, format=format)
    except ValueError as exc:
        raise DocsError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion=(
                "Provide a documentation path relative to the site root "
                "(e.g. 'api-reference/introduction') and format 'markdown' or 'structured'."
            ),
            recoverable=False,
        ) from exc

    if state.docs is None:
        raise RuntimeError("Documentation service not initialized")

    content = await state.docs.get_documentation_page(validated.path)
    log.info("page_ready", content_length=len(content))

    if validated.format == "markdown":
        return content

    output = GetDocumentationOutput(
        path=validated.path,
        content=content,
        source=f"{state.settings.docs.base_url.rstrip('/')}/{validated.path.lstrip('/')}",
        fetched_at=datetime.now(UTC),
    )
    return output.model_dump(mode="json")
