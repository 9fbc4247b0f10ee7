from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class CacheEntry(BaseModel):
    """In-memory copy of a cached document."""

    content: str
    stored_at: datetime
    etag: str | None = None  # Memory only; disk copies carry content alone


class FileStat(BaseModel):
    """Subset of file metadata the cache needs from the filesystem backend."""

    mtime: datetime
    size: int


class CacheStats(BaseModel):
    memory_entries: int
    memory_size: int  # Sum of key length + content length
    disk_entries: int
    disk_size: int  # Bytes on disk


class PruneResult(BaseModel):
    memory_removed: int = 0
    disk_removed: int = 0
