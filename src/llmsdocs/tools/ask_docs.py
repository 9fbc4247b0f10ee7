"""Tool handler for ask_docs.

Receives AppState, assembles documentation context for the question, asks
the completion client, and returns a structured dict. No MCP or FastMCP
imports; server.py handles the MCP wiring.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from llmsdocs.errors import DocsError, ErrorCode
from llmsdocs.models.tools import AskDocsInput, AskDocsOutput

if TYPE_CHECKING:
    from llmsdocs.state import AppState


async def handle(question: str, include_context: bool, state: AppState) -> dict:
    """Handle an ask_docs tool call."""
    log = structlog.get_logger().bind(tool="ask_docs")
    log.info("handler_called", include_context=include_context)

    # Validate input
    try:
        validated = AskDocsInput(question=question, include_context=include_context)
    except ValueError as exc:
        raise DocsError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion="Provide a non-empty question (max 2000 chars).",
            recoverable=False,
        ) from exc

    if state.docs is None or state.completion is None:
        raise RuntimeError("Documentation service or completion client not initialized")

    context = ""
    if validated.include_context:
        context = await state.docs.get_relevant_context(
            validated.question,
            state.settings.search.context_max_sections,
        )

    answer = await state.completion.ask(validated.question, context)
    log.info("answer_ready", context_length=len(context), answer_length=len(answer))

    output = AskDocsOutput(
        question=validated.question,
        answer=answer,
        context_used=bool(context),
    )
    return output.model_dump(mode="json")
