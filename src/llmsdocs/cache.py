"""Two-tier documentation cache.

A short-lived in-memory layer sits in front of a longer-lived disk layer.
Both TTLs are checked at read time: an entry is live while
``now - stored_at < ttl``; an age equal to the TTL is expired.

Reads degrade gracefully: disk read failures are logged and treated as a
cache miss so the caller refetches. Writes do not: a failed disk write raises
``DocsError(CACHE_WRITE_FAILED)``, since silently dropping a successful fetch
would cause repeated refetching with no visible cause.

The cache never fetches. It holds no lock; concurrent misses on one key each
fetch and ``set`` independently and the last write wins.
"""

from __future__ import annotations

import hashlib
from collections.abc import Callable
from datetime import datetime, timedelta
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from llmsdocs.errors import DocsError, ErrorCode
from llmsdocs.models.cache import CacheEntry, CacheStats, PruneResult
from llmsdocs.storage import utc_now

if TYPE_CHECKING:
    from llmsdocs.protocols import FileSystemProtocol

log = structlog.get_logger()

CACHE_FILE_SUFFIX = ".cache"
_CACHE_FILE_PATTERN = f"*{CACHE_FILE_SUFFIX}"

DEFAULT_MEMORY_TTL = timedelta(hours=1)
DEFAULT_DISK_TTL = timedelta(hours=24)


class DocumentCache:
    """Memory + disk cache implementing CacheProtocol."""

    def __init__(
        self,
        fs: FileSystemProtocol,
        cache_dir: Path | str,
        *,
        memory_ttl: timedelta = DEFAULT_MEMORY_TTL,
        disk_ttl: timedelta = DEFAULT_DISK_TTL,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._fs = fs
        self._cache_dir = Path(cache_dir).expanduser()
        self._memory_ttl = memory_ttl
        self._disk_ttl = disk_ttl
        self._clock = clock
        self._memory: dict[str, CacheEntry] = {}

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def disk_path(self, key: str) -> Path:
        """Fixed-width file name derived from the key, independent of its characters."""
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self._cache_dir / f"{digest}{CACHE_FILE_SUFFIX}"

    # ------------------------------------------------------------------
    # Read / write
    # ------------------------------------------------------------------

    async def get(self, key: str) -> str | None:
        """Return live content for ``key`` or ``None`` on miss or expiry."""
        now = self._clock()

        entry = self._memory.get(key)
        if entry is not None and now - entry.stored_at < self._memory_ttl:
            return entry.content

        path = self.disk_path(key)
        try:
            stat = await self._fs.stat(path)
            if stat is None or now - stat.mtime >= self._disk_ttl:
                return None
            content = await self._fs.read_text(path)
        except (OSError, UnicodeDecodeError):
            log.warning("cache_read_error", key=key, path=str(path), exc_info=True)
            return None

        self._memory[key] = CacheEntry(content=content, stored_at=self._clock())
        log.debug("cache_promoted", key=key)
        return content

    async def set(self, key: str, content: str, etag: str | None = None) -> None:
        """Store ``content`` in memory and on disk before returning."""
        self._memory[key] = CacheEntry(content=content, stored_at=self._clock(), etag=etag)

        path = self.disk_path(key)
        try:
            await self._fs.mkdir(self._cache_dir)
            await self._fs.write_text(path, content)
        except OSError as exc:
            log.error("cache_write_error", key=key, path=str(path), exc_info=True)
            raise DocsError(
                code=ErrorCode.CACHE_WRITE_FAILED,
                message=f"Failed to write cache entry '{key}' to {path}: {exc}",
                suggestion="Check that the cache directory is writable and the disk is not full.",
                recoverable=False,
            ) from exc

    async def has(self, key: str) -> bool:
        return await self.get(key) is not None

    async def get_etag(self, key: str) -> str | None:
        """Memory-only lookup; entries promoted from disk carry no etag."""
        entry = self._memory.get(key)
        return entry.etag if entry is not None else None

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    async def clear(self) -> None:
        """Drop every memory entry and delete the cache directory."""
        self._memory.clear()
        try:
            await self._fs.rmtree(self._cache_dir)
        except OSError:
            log.debug("cache_clear_skipped", reason="cache_dir_missing", path=str(self._cache_dir))
        log.info("cache_cleared", path=str(self._cache_dir))

    async def prune(self) -> PruneResult:
        """Delete memory entries and disk files whose age has reached their TTL."""
        now = self._clock()

        expired = [
            key for key, entry in self._memory.items() if now - entry.stored_at >= self._memory_ttl
        ]
        for key in expired:
            del self._memory[key]

        disk_removed = 0
        try:
            paths = await self._fs.list_files(self._cache_dir, _CACHE_FILE_PATTERN)
        except OSError:
            log.debug("cache_prune_disk_skipped", path=str(self._cache_dir), exc_info=True)
            paths = []

        for path in paths:
            try:
                stat = await self._fs.stat(path)
                if stat is None or now - stat.mtime < self._disk_ttl:
                    continue
                await self._fs.remove(path)
            except OSError:
                log.warning("cache_prune_file_error", path=str(path), exc_info=True)
                continue
            disk_removed += 1

        result = PruneResult(memory_removed=len(expired), disk_removed=disk_removed)
        log.info(
            "cache_prune_complete",
            memory_removed=result.memory_removed,
            disk_removed=result.disk_removed,
        )
        return result

    async def get_stats(self) -> CacheStats:
        memory_size = sum(len(key) + len(entry.content) for key, entry in self._memory.items())

        disk_entries = 0
        disk_size = 0
        try:
            for path in await self._fs.list_files(self._cache_dir, _CACHE_FILE_PATTERN):
                stat = await self._fs.stat(path)
                if stat is None:
                    continue
                disk_entries += 1
                disk_size += stat.size
        except OSError:
            log.debug("cache_stats_disk_skipped", path=str(self._cache_dir), exc_info=True)

        return CacheStats(
            memory_entries=len(self._memory),
            memory_size=memory_size,
            disk_entries=disk_entries,
            disk_size=disk_size,
        )
