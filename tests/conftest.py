"""
Pytest fixtures for projectmap tests.
"""

import asyncio
import os
import sys
import tempfile
from collections import Counter
from pathlib import Path
from typing import Generator

import pytest

# Add project root to path for projectmap imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from projectmap.filesystem import FileKind, FileStat  # noqa: E402


def whitespace_encode(text):
    """Stand-in tokenizer: one token per whitespace-separated word."""
    return text.split()


class MemoryFilesystem:
    """In-memory Filesystem that records every call it receives."""

    def __init__(self):
        self.files = {}
        self.dirs = {}
        self.mtimes = {}
        self.calls = Counter()
        self.stat_paths = []
        self.fail_reads = set()

    def _register(self, path):
        parent = os.path.dirname(path)
        if parent == path:
            return
        if parent not in self.dirs:
            self.add_dir(parent)
        name = os.path.basename(path)
        if name not in self.dirs[parent]:
            self.dirs[parent].append(name)

    def add_dir(self, path, mtime_ns=1):
        if path not in self.dirs:
            self.dirs[path] = []
            self.mtimes[path] = mtime_ns
            self._register(path)

    def add_file(self, path, data=b"", mtime_ns=1):
        if isinstance(data, str):
            data = data.encode("utf-8")
        self.files[path] = data
        self.mtimes[path] = mtime_ns
        self._register(path)

    def touch(self, path, mtime_ns):
        self.mtimes[path] = mtime_ns

    async def stat(self, path):
        self.calls["stat"] += 1
        self.stat_paths.append(path)
        await asyncio.sleep(0)
        if path in self.dirs:
            return FileStat(FileKind.DIRECTORY, self.mtimes[path], 0)
        if path in self.files:
            return FileStat(FileKind.FILE, self.mtimes[path], len(self.files[path]))
        raise FileNotFoundError(path)

    async def list_directory(self, path):
        self.calls["list_directory"] += 1
        await asyncio.sleep(0)
        if path not in self.dirs:
            raise NotADirectoryError(path)
        return [
            (name, FileKind.DIRECTORY if os.path.join(path, name) in self.dirs else FileKind.FILE)
            for name in self.dirs[path]
        ]

    async def read_file(self, path):
        self.calls["read_file"] += 1
        await asyncio.sleep(0)
        if path in self.fail_reads:
            raise PermissionError(path)
        if path not in self.files:
            raise FileNotFoundError(path)
        return self.files[path]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def make_tree(temp_dir: Path):
    """Write ``{relative_path: content}`` under temp_dir and return the root."""

    def _make(spec: dict) -> Path:
        for rel, content in spec.items():
            target = temp_dir / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                target.write_bytes(content)
            else:
                target.write_text(content, encoding="utf-8")
        return temp_dir

    return _make


@pytest.fixture
def memory_fs() -> MemoryFilesystem:
    return MemoryFilesystem()
