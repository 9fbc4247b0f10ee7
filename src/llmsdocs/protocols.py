"""Protocol interfaces for swappable components.

Tool handlers, the documentation service and AppState reference these
protocols, not the concrete implementations. This allows:
- Tests to use lightweight in-memory implementations
- The disk cache to run on either the local filesystem or process memory
  without changing cache code
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from pathlib import Path

    from llmsdocs.models.cache import CacheStats, FileStat, PruneResult
    from llmsdocs.models.docs import FetchedDocument


class FileSystemProtocol(Protocol):
    """Interface for the storage backend underneath the disk cache layer."""

    async def read_text(self, path: Path) -> str: ...

    async def write_text(self, path: Path, content: str) -> None: ...

    async def stat(self, path: Path) -> FileStat | None: ...

    async def mkdir(self, path: Path) -> None: ...

    async def remove(self, path: Path) -> None: ...

    async def rmtree(self, path: Path) -> None: ...

    async def list_files(self, directory: Path, pattern: str) -> list[Path]: ...


class CacheProtocol(Protocol):
    """Interface for the two-tier documentation cache."""

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, content: str, etag: str | None = None) -> None: ...

    async def has(self, key: str) -> bool: ...

    async def get_etag(self, key: str) -> str | None: ...

    async def clear(self) -> None: ...

    async def prune(self) -> PruneResult: ...

    async def get_stats(self) -> CacheStats: ...


class FetcherProtocol(Protocol):
    """Interface for the HTTP documentation fetcher."""

    async def fetch_index(self) -> FetchedDocument: ...

    async def fetch_full(self) -> FetchedDocument: ...

    async def fetch_page(self, path: str) -> FetchedDocument: ...


class CompletionProtocol(Protocol):
    """Interface for the language-model completion client."""

    async def ask(self, question: str, context: str = "") -> str: ...
