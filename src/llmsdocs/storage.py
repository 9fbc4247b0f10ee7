"""Filesystem backends for the disk layer of the documentation cache.

Two interchangeable implementations of ``FileSystemProtocol``:

- ``LocalFileSystem`` persists cache files on local disk using ``anyio.Path``
  so file I/O never blocks the event loop.
- ``MemoryFileSystem`` keeps files in a dict for the lifetime of the process.
  Intended for hosts without a writable, persistent disk and for tests.

The backend is chosen once at construction (see ``build_filesystem``); the
cache never branches on which one it holds.
"""

from __future__ import annotations

import fnmatch
import shutil
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

import anyio
import anyio.to_thread

from llmsdocs.models.cache import FileStat

if TYPE_CHECKING:
    from llmsdocs.config import CacheSettings
    from llmsdocs.protocols import FileSystemProtocol


def utc_now() -> datetime:
    return datetime.now(UTC)


class LocalFileSystem:
    """Local disk backend implementing FileSystemProtocol."""

    async def read_text(self, path: Path) -> str:
        return await anyio.Path(path).read_text(encoding="utf-8")

    async def write_text(self, path: Path, content: str) -> None:
        await anyio.Path(path).write_text(content, encoding="utf-8")

    async def stat(self, path: Path) -> FileStat | None:
        try:
            result = await anyio.Path(path).stat()
        except FileNotFoundError:
            return None
        return FileStat(
            mtime=datetime.fromtimestamp(result.st_mtime, UTC),
            size=result.st_size,
        )

    async def mkdir(self, path: Path) -> None:
        await anyio.Path(path).mkdir(parents=True, exist_ok=True)

    async def remove(self, path: Path) -> None:
        await anyio.Path(path).unlink()

    async def rmtree(self, path: Path) -> None:
        await anyio.to_thread.run_sync(shutil.rmtree, path)

    async def list_files(self, directory: Path, pattern: str) -> list[Path]:
        root = anyio.Path(directory)
        if not await root.is_dir():
            return []
        return sorted([Path(entry) async for entry in root.glob(pattern)])


class MemoryFileSystem:
    """Process-local backend implementing FileSystemProtocol.

    Files are keyed by path; each records its content and modification time
    taken from ``clock`` so TTL behaviour can be driven deterministically.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock
        self._files: dict[Path, tuple[str, datetime]] = {}
        self._dirs: set[Path] = set()

    async def read_text(self, path: Path) -> str:
        try:
            return self._files[path][0]
        except KeyError:
            raise FileNotFoundError(str(path)) from None

    async def write_text(self, path: Path, content: str) -> None:
        if path.parent not in self._dirs:
            raise FileNotFoundError(str(path.parent))
        self._files[path] = (content, self._clock())

    async def stat(self, path: Path) -> FileStat | None:
        record = self._files.get(path)
        if record is None:
            return None
        content, mtime = record
        return FileStat(mtime=mtime, size=len(content.encode("utf-8")))

    async def mkdir(self, path: Path) -> None:
        self._dirs.add(path)
        self._dirs.update(path.parents)

    async def remove(self, path: Path) -> None:
        if self._files.pop(path, None) is None:
            raise FileNotFoundError(str(path))

    async def rmtree(self, path: Path) -> None:
        if path not in self._dirs:
            raise FileNotFoundError(str(path))
        self._files = {
            p: record
            for p, record in self._files.items()
            if p != path and path not in p.parents
        }
        self._dirs = {d for d in self._dirs if d != path and path not in d.parents}

    async def list_files(self, directory: Path, pattern: str) -> list[Path]:
        return sorted(
            p for p in self._files if p.parent == directory and fnmatch.fnmatch(p.name, pattern)
        )

    def set_mtime(self, path: Path, mtime: datetime) -> None:
        """Rewrite a file's modification time. Mirrors ``os.utime`` for tests."""
        content, _ = self._files[path]
        self._files[path] = (content, mtime)


def build_filesystem(
    settings: CacheSettings,
    clock: Callable[[], datetime] = utc_now,
) -> FileSystemProtocol:
    """Select the cache storage backend. Called once at startup."""
    if settings.backend == "memory":
        return MemoryFileSystem(clock=clock)
    return LocalFileSystem()
