# projectmap/session.py
"""Scan session: owns the caches and limiters for one workspace context.

Nothing here is module-global, so two sessions never share cache state.
"""

import os
import time
from dataclasses import dataclass
from typing import Optional

from projectmap.cancellation import is_cancelled
from projectmap.collector import TraversalState, collect_files, resolve_selected_files
from projectmap.config import ScanLimits
from projectmap.file_map_section import FileMapResult, generate_file_map_section
from projectmap.file_processing import ContentClassifier, TokenAccountant
from projectmap.filesystem import LocalFilesystem
from projectmap.ignore_rules import IgnoreRuleEngine
from projectmap.limiter import ConcurrencyLimiter
from projectmap.logging_config import get_logger

logger = get_logger("session")


@dataclass(frozen=True)
class SelectionSummary:
    files: tuple = ()
    file_tokens: int = 0
    file_map_tokens: int = 0
    file_map: str = ""
    cancelled: bool = False

    @property
    def total_tokens(self) -> int:
        return self.file_tokens + self.file_map_tokens


class ScanSession:
    """Entry point used by the embedding application."""

    def __init__(self, roots=(), limits: Optional[ScanLimits] = None, fs=None, encode=None):
        self.roots = [os.fspath(r) for r in roots]
        self.limits = limits or ScanLimits()
        self.fs = fs if fs is not None else LocalFilesystem()
        self.fs_limiter = ConcurrencyLimiter(self.limits.fs_concurrency, name="fs")
        self.token_limiter = ConcurrencyLimiter(self.limits.tokenize_concurrency, name="tokenize")
        self.ignore_engine = IgnoreRuleEngine(
            self.fs, self.fs_limiter, ignore_file_name=self.limits.ignore_file_name
        )
        self.classifier = ContentClassifier(self.fs, capacity=self.limits.binary_cache_size)
        self.accountant = TokenAccountant(
            self.fs,
            self.classifier,
            self.token_limiter,
            max_preview_bytes=self.limits.max_preview_bytes,
            capacity=self.limits.token_cache_size,
            encoding_name=self.limits.encoding_name,
            encode=encode,
        )

    async def get_matcher(self, root):
        return await self.ignore_engine.get_matcher(root)

    async def collect(self, path, root, token=None, matcher=None, state: Optional[TraversalState] = None) -> list:
        """Collect one path under ``root`` with the root's matcher unless one is given."""
        if matcher is None:
            matcher = await self.ignore_engine.get_matcher(root)
        return await collect_files(
            self.fs, self.fs_limiter, path, matcher, root, token,
            self.limits.max_collected_files, state or TraversalState(),
        )

    async def collect_roots(self, token=None, show_ignored: bool = False) -> list:
        """All files under every root, deduplicated; each root has its own cap counter."""
        return await resolve_selected_files(
            self.fs, self.fs_limiter, self.ignore_engine, self.roots, self.roots,
            token, self.limits.max_collected_files, show_ignored,
        )

    async def resolve_selected_files(self, selections, token=None, show_ignored: bool = False) -> list:
        return await resolve_selected_files(
            self.fs, self.fs_limiter, self.ignore_engine, selections, self.roots,
            token, self.limits.max_collected_files, show_ignored,
        )

    async def is_binary(self, path) -> bool:
        return await self.classifier.is_binary(path)

    async def count_tokens(self, paths, token=None) -> int:
        return await self.accountant.count_tokens(paths, token)

    def count_tokens_from_text(self, text: str) -> int:
        return self.accountant.count_tokens_from_text(text)

    async def generate_file_map_section(
        self, selected_files, include_all_files: bool = False, show_ignored: bool = False, token=None
    ) -> FileMapResult:
        return await generate_file_map_section(
            self.fs, self.fs_limiter, self.ignore_engine, self.roots, selected_files,
            include_all_files=include_all_files, show_ignored=show_ignored,
            token=token, cap=self.limits.max_collected_files,
        )

    async def measure_selection(
        self,
        selections,
        token=None,
        include_file_map: bool = False,
        include_all_files: bool = False,
        show_ignored: bool = False,
    ) -> SelectionSummary:
        """Resolve selections, count their tokens and, optionally, the file map's."""
        start = time.monotonic()
        files = tuple(await self.resolve_selected_files(selections, token, show_ignored))
        if is_cancelled(token):
            return SelectionSummary(files=files, cancelled=True)

        file_tokens = await self.count_tokens(files, token)
        if is_cancelled(token):
            return SelectionSummary(files=files, file_tokens=file_tokens, cancelled=True)

        file_map = ""
        file_map_tokens = 0
        if include_file_map and (files or include_all_files):
            result = await self.generate_file_map_section(
                files, include_all_files=include_all_files, show_ignored=show_ignored, token=token
            )
            if is_cancelled(token):
                return SelectionSummary(files=files, file_tokens=file_tokens, cancelled=True)
            file_map = result.section
            if file_map:
                file_map_tokens = self.count_tokens_from_text(file_map)

        elapsed_ms = (time.monotonic() - start) * 1000
        logger.debug(
            f"measure_selection files={len(files)} tokens={file_tokens + file_map_tokens} "
            f"(files={file_tokens}, file_map={file_map_tokens}) in {elapsed_ms:.0f}ms"
        )
        return SelectionSummary(
            files=files,
            file_tokens=file_tokens,
            file_map_tokens=file_map_tokens,
            file_map=file_map,
        )

    def invalidate_path(self, path) -> None:
        """Drop cached state for a path reported as created/changed/deleted."""
        path = os.path.normpath(os.fspath(path))
        self.classifier.invalidate(path)
        self.accountant.invalidate(path)
        for root in self.ignore_engine.cached_roots():
            if path == os.path.normpath(root) or path == os.path.normpath(self.ignore_engine.ignore_file_path(root)):
                self.ignore_engine.invalidate(root)

    def clear_caches(self) -> None:
        self.ignore_engine.clear()
        self.classifier.clear()
        self.accountant.clear()
