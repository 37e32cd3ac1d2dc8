# projectmap/ignore_rules.py
"""Per-root ignore matchers built from the root's ignore file plus defaults.

Matchers are cached per root and rebuilt only when the ignore file's mtime
changes. A root without an ignore file gets a default-only matcher, cached
under the same key; a missing file is not an error.
"""

import os
from dataclasses import dataclass
from typing import Iterable, Optional

import pathspec

from projectmap.bounded_cache import BoundedCache
from projectmap.constants import DEFAULT_IGNORE_PATTERNS, IGNORE_FILE_NAME
from projectmap.logging_config import get_logger

logger = get_logger("ignore")

IGNORE_MATCHER_CACHE_MAX = 64


def relative_posix(path, root) -> str:
    """Path of ``path`` relative to ``root`` with forward slashes ('' for the root itself)."""
    rel = os.path.relpath(os.fspath(path), os.fspath(root))
    if rel == os.curdir:
        return ""
    return rel.replace(os.sep, "/")


class IgnoreMatcher:
    """Gitignore-style predicate over root-relative, slash-separated paths.

    Directory candidates should be passed with a trailing slash so
    directory-only rules (``dist/``) apply to them.
    """

    def __init__(self, patterns: Iterable[str] = ()):
        self.patterns = tuple(DEFAULT_IGNORE_PATTERNS) + tuple(patterns)
        self._spec = pathspec.GitIgnoreSpec.from_lines(self.patterns)

    @classmethod
    def from_text(cls, text: str) -> "IgnoreMatcher":
        return cls(text.splitlines())

    def ignores(self, rel_path: str) -> bool:
        if not rel_path or rel_path in (".", "./"):
            return False
        return self._spec.match_file(rel_path)

    __call__ = ignores

    def __repr__(self):
        return f"IgnoreMatcher(patterns={len(self.patterns)})"


@dataclass(frozen=True)
class _MatcherCacheEntry:
    """Cached matcher plus the ignore file mtime (None when the file is absent)."""

    matcher: IgnoreMatcher
    mtime_ns: Optional[int]


class IgnoreRuleEngine:
    """Builds and caches one IgnoreMatcher per traversal root."""

    def __init__(self, fs, limiter=None, ignore_file_name: str = IGNORE_FILE_NAME):
        self.fs = fs
        self.limiter = limiter
        self.ignore_file_name = ignore_file_name
        self._cache = BoundedCache(IGNORE_MATCHER_CACHE_MAX)

    async def _call(self, func, *args):
        if self.limiter is None:
            return await func(*args)
        return await self.limiter.run(func, *args)

    def default_matcher(self) -> IgnoreMatcher:
        """Matcher with only the built-in patterns (used when ignored files are shown)."""
        return IgnoreMatcher()

    def ignore_file_path(self, root) -> str:
        return os.path.join(os.fspath(root), self.ignore_file_name)

    async def get_matcher(self, root) -> IgnoreMatcher:
        key = os.fspath(root)
        ignore_path = self.ignore_file_path(key)
        cached = self._cache.get(key)

        try:
            ignore_stat = await self._call(self.fs.stat, ignore_path)
        except OSError:
            ignore_stat = None

        if ignore_stat is None or not ignore_stat.is_file:
            if cached is not None and cached.mtime_ns is None:
                return cached.matcher
            logger.debug(f"No {self.ignore_file_name} for {key}; using default patterns")
            matcher = self.default_matcher()
            self._cache.set(key, _MatcherCacheEntry(matcher, None))
            return matcher

        if cached is not None and cached.mtime_ns == ignore_stat.mtime_ns:
            logger.debug(f"Ignore matcher cache hit for {key}")
            return cached.matcher

        try:
            raw = await self._call(self.fs.read_file, ignore_path)
        except OSError as e:
            logger.warning(f"Could not read {ignore_path}: {e}; using default patterns")
            return self.default_matcher()

        matcher = IgnoreMatcher.from_text(raw.decode("utf-8", errors="replace"))
        self._cache.set(key, _MatcherCacheEntry(matcher, ignore_stat.mtime_ns))
        logger.debug(f"Loaded {ignore_path} ({len(matcher.patterns)} patterns)")
        return matcher

    def invalidate(self, root) -> None:
        self._cache.pop(os.fspath(root))

    def clear(self) -> None:
        self._cache.clear()

    def cached_roots(self) -> list:
        return self._cache.keys()
