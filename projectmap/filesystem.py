# projectmap/filesystem.py
"""Narrow filesystem capability used by the scanner, plus the local adapter.

The core only ever talks to a ``Filesystem``: ``stat``, ``list_directory``,
``read_file`` and, where available, ``read_prefix``. Every method may raise
``OSError``; callers inside the core catch it and degrade.
"""

import asyncio
import enum
import os
import stat as stat_lib
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from projectmap.constants import WATCHER_IGNORED_DIRS


class FileKind(enum.Enum):
    FILE = "file"
    DIRECTORY = "directory"
    OTHER = "other"


@dataclass(frozen=True)
class FileStat:
    """Metadata observed for one path."""

    kind: FileKind
    mtime_ns: int
    size: int
    # (st_dev, st_ino) when the platform provides it
    identity: Optional[tuple] = None

    @property
    def is_dir(self) -> bool:
        return self.kind is FileKind.DIRECTORY

    @property
    def is_file(self) -> bool:
        return self.kind is FileKind.FILE


@runtime_checkable
class Filesystem(Protocol):
    async def stat(self, path: str) -> FileStat: ...

    async def list_directory(self, path: str) -> list[tuple[str, FileKind]]: ...

    async def read_file(self, path: str) -> bytes: ...


def _kind_from_mode(mode: int) -> FileKind:
    if stat_lib.S_ISDIR(mode):
        return FileKind.DIRECTORY
    if stat_lib.S_ISREG(mode):
        return FileKind.FILE
    return FileKind.OTHER


def _stat_sync(path: str) -> FileStat:
    st = os.stat(path)
    identity = (st.st_dev, st.st_ino) if st.st_ino else None
    return FileStat(
        kind=_kind_from_mode(st.st_mode),
        mtime_ns=st.st_mtime_ns,
        size=st.st_size,
        identity=identity,
    )


def _list_directory_sync(path: str) -> list[tuple[str, FileKind]]:
    children = []
    with os.scandir(path) as entries:
        for entry in entries:
            try:
                if entry.is_dir():
                    kind = FileKind.DIRECTORY
                elif entry.is_file():
                    kind = FileKind.FILE
                else:
                    kind = FileKind.OTHER
            except OSError:
                kind = FileKind.OTHER
            children.append((entry.name, kind))
    return children


def _read_file_sync(path: str) -> bytes:
    with open(path, 'rb') as f:
        return f.read()


def _read_prefix_sync(path: str, limit: int) -> bytes:
    with open(path, 'rb') as f:
        return f.read(limit)


class LocalFilesystem:
    """Filesystem adapter for the local disk.

    Blocking ``os`` calls run in a worker thread so the event loop stays the
    only place where caches and counters are touched.
    """

    async def stat(self, path: str) -> FileStat:
        return await asyncio.to_thread(_stat_sync, path)

    async def list_directory(self, path: str) -> list[tuple[str, FileKind]]:
        return await asyncio.to_thread(_list_directory_sync, path)

    async def read_file(self, path: str) -> bytes:
        return await asyncio.to_thread(_read_file_sync, path)

    async def read_prefix(self, path: str, limit: int) -> bytes:
        return await asyncio.to_thread(_read_prefix_sync, path, limit)


def should_ignore_watcher_event(path) -> bool:
    """True when a change notification comes from a noisy directory (.git, node_modules, ...)."""
    return any(part in WATCHER_IGNORED_DIRS for part in Path(path).parts)
