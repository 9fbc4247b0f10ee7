from __future__ import annotations

from llmsdocs.models.cache import CacheEntry, CacheStats, FileStat, PruneResult
from llmsdocs.models.docs import (
    DocIndexLink,
    DocIndexSection,
    DocIndexStructure,
    FetchedDocument,
    InitResult,
    SearchResult,
)
from llmsdocs.models.tools import (
    AskDocsInput,
    AskDocsOutput,
    GetDocumentationInput,
    GetDocumentationOutput,
    SearchDocumentationInput,
    SearchDocumentationOutput,
)

__all__ = [
    # cache
    "CacheEntry",
    "CacheStats",
    "FileStat",
    "PruneResult",
    # docs
    "FetchedDocument",
    "SearchResult",
    "DocIndexLink",
    "DocIndexSection",
    "DocIndexStructure",
    "InitResult",
    # tools
    "GetDocumentationInput",
    "GetDocumentationOutput",
    "SearchDocumentationInput",
    "SearchDocumentationOutput",
    "AskDocsInput",
    "AskDocsOutput",
]
