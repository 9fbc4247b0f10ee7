"""Application state container.

AppState is created once at server startup (inside the FastMCP lifespan context
manager) and injected into every tool handler via the MCP Context object.
The cache is owned here and nowhere else; tests build disposable instances.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx

    from llmsdocs.config import Settings
    from llmsdocs.models.docs import InitResult
    from llmsdocs.protocols import CacheProtocol, CompletionProtocol
    from llmsdocs.service import DocumentationService


@dataclass
class AppState:
    """Holds all shared runtime state. Passed to every tool handler."""

    settings: Settings
    http_client: httpx.AsyncClient | None = None
    cache: CacheProtocol | None = None
    docs: DocumentationService | None = None
    completion: CompletionProtocol | None = None
    init_result: InitResult | None = None
