"""Unit tests for the filesystem backends in llmsdocs.storage."""

from __future__ import annotations

from pathlib import Path

import pytest

from llmsdocs.config import CacheSettings
from llmsdocs.storage import LocalFileSystem, MemoryFileSystem, build_filesystem


@pytest.fixture(params=["local", "memory"])
def fs_and_root(request: pytest.FixtureRequest, tmp_path: Path):
    if request.param == "local":
        return LocalFileSystem(), tmp_path / "store"
    return MemoryFileSystem(), Path("/virtual/store")


class TestFileSystemContract:
    """Both backends must behave the same from the cache's point of view."""

    async def test_write_requires_mkdir_then_reads_back(self, fs_and_root) -> None:
        fs, root = fs_and_root
        await fs.mkdir(root)
        await fs.write_text(root / "a.cache", "alpha")
        assert await fs.read_text(root / "a.cache") == "alpha"

    async def test_write_into_missing_dir_raises(self, fs_and_root) -> None:
        fs, root = fs_and_root
        with pytest.raises(OSError):
            await fs.write_text(root / "a.cache", "alpha")

    async def test_read_missing_raises_file_not_found(self, fs_and_root) -> None:
        fs, root = fs_and_root
        await fs.mkdir(root)
        with pytest.raises(FileNotFoundError):
            await fs.read_text(root / "missing.cache")

    async def test_stat_missing_returns_none(self, fs_and_root) -> None:
        fs, root = fs_and_root
        assert await fs.stat(root / "missing.cache") is None

    async def test_stat_reports_byte_size(self, fs_and_root) -> None:
        fs, root = fs_and_root
        await fs.mkdir(root)
        await fs.write_text(root / "a.cache", "añb")
        stat = await fs.stat(root / "a.cache")
        assert stat is not None
        assert stat.size == 4
        assert stat.mtime.tzinfo is not None

    async def test_list_files_filters_by_pattern(self, fs_and_root) -> None:
        fs, root = fs_and_root
        await fs.mkdir(root)
        await fs.write_text(root / "b.cache", "b")
        await fs.write_text(root / "a.cache", "a")
        await fs.write_text(root / "readme.txt", "x")
        assert await fs.list_files(root, "*.cache") == [root / "a.cache", root / "b.cache"]

    async def test_list_files_missing_dir_is_empty(self, fs_and_root) -> None:
        fs, root = fs_and_root
        assert await fs.list_files(root, "*.cache") == []

    async def test_remove(self, fs_and_root) -> None:
        fs, root = fs_and_root
        await fs.mkdir(root)
        await fs.write_text(root / "a.cache", "a")
        await fs.remove(root / "a.cache")
        assert await fs.stat(root / "a.cache") is None
        with pytest.raises(FileNotFoundError):
            await fs.remove(root / "a.cache")

    async def test_rmtree(self, fs_and_root) -> None:
        fs, root = fs_and_root
        await fs.mkdir(root)
        await fs.write_text(root / "a.cache", "a")
        await fs.rmtree(root)
        assert await fs.list_files(root, "*") == []
        with pytest.raises(FileNotFoundError):
            await fs.rmtree(root)


class TestBuildFilesystem:
    def test_disk_backend(self) -> None:
        assert isinstance(build_filesystem(CacheSettings(backend="disk")), LocalFileSystem)

    def test_memory_backend(self) -> None:
        assert isinstance(build_filesystem(CacheSettings(backend="memory")), MemoryFileSystem)
