# projectmap/file_processing.py
import asyncio
import math
import os
import threading
import time

import tiktoken

from projectmap.bounded_cache import BoundedCache, CacheEntry
from projectmap.cancellation import is_cancelled
from projectmap.constants import (
    BINARY_CACHE_SIZE, BINARY_SNIFF_BYTES, ENCODING_NAME, MAX_PREVIEW_BYTES,
    TOKEN_CACHE_SIZE
)
from projectmap.logging_config import get_logger

logger = get_logger("tokens")


def format_token_count(tokens: int) -> str:
    """'500 tokens' for small counts, '~10k tokens' / '~14.65k tokens' otherwise."""
    if tokens < 1000:
        return f"{tokens} tokens"
    rounded = math.floor(tokens / 10 + 0.5) / 100
    formatted = f"{rounded:.2f}".rstrip("0").rstrip(".")
    return f"~{formatted}k tokens"


class ContentClassifier:
    """Binary/text verdicts cached per path and keyed on mtime.

    A file is binary when its first 512 bytes contain a NUL byte. Unreadable
    files are reported as binary so they stay out of text processing.
    """

    def __init__(self, fs, capacity: int = BINARY_CACHE_SIZE):
        self.fs = fs
        self._cache = BoundedCache(capacity)

    async def _read_prefix(self, path: str) -> bytes:
        read_prefix = getattr(self.fs, "read_prefix", None)
        if callable(read_prefix):
            return await read_prefix(path, BINARY_SNIFF_BYTES)
        data = await self.fs.read_file(path)
        return data[:BINARY_SNIFF_BYTES]

    async def is_binary(self, path) -> bool:
        path = os.fspath(path)
        try:
            st = await self.fs.stat(path)
        except OSError:
            # Fall through to the content check without the cache
            st = None
        else:
            cached = self._cache.get(path)
            if cached is not None and cached.matches(st.mtime_ns):
                return cached.value

        try:
            prefix = await self._read_prefix(path)
        except OSError as e:
            logger.debug(f"Could not read {path} for binary check: {e}")
            result = True
        else:
            result = b"\x00" in prefix[:BINARY_SNIFF_BYTES]

        if st is not None:
            self._cache.set(path, CacheEntry(result, st.mtime_ns))
        return result

    def invalidate(self, path) -> None:
        self._cache.pop(os.fspath(path))

    def clear(self) -> None:
        self._cache.clear()

    def __len__(self):
        return len(self._cache)


class TokenAccountant:
    """Token counts for files, cached per path on (mtime, size).

    Files above ``max_preview_bytes`` and binary files count as zero. Any
    failure for one file counts as zero for that file only.
    """

    def __init__(
        self,
        fs,
        classifier: ContentClassifier,
        limiter,
        max_preview_bytes: int = MAX_PREVIEW_BYTES,
        capacity: int = TOKEN_CACHE_SIZE,
        encoding_name: str = ENCODING_NAME,
        encode=None,
    ):
        self.fs = fs
        self.classifier = classifier
        self.limiter = limiter
        self.max_preview_bytes = max_preview_bytes
        self.encoding_name = encoding_name
        self._encode = encode
        self._init_error = None
        self._init_lock = threading.Lock()
        self._cache = BoundedCache(capacity)

    @property
    def tokenizer_initialization_error(self):
        return self._init_error

    def _encoder(self):
        """Load the encoding once; a failed load is remembered and returns None."""
        if self._encode is None and self._init_error is None:
            with self._init_lock:
                if self._encode is None and self._init_error is None:
                    try:
                        encoding = tiktoken.get_encoding(self.encoding_name)
                    except Exception as e:
                        self._init_error = e
                        logger.error(f"Tokenizer '{self.encoding_name}' failed to initialize: {e}")
                        return None
                    logger.debug(f"Tokenizer '{self.encoding_name}' initialized")
                    # Count special-token text in files instead of rejecting it
                    self._encode = lambda text: encoding.encode(text, disallowed_special=())
        return self._encode

    async def _load_encoder(self):
        # The first load may download the encoding, so keep it off the event loop
        if self._encode is None and self._init_error is None:
            await asyncio.to_thread(self._encoder)
        return self._encode

    def _tokenize(self, text: str) -> int:
        if not text:
            return 0
        encode = self._encoder()
        if encode is None:
            return 0
        return len(encode(text))

    def count_tokens_from_text(self, text: str) -> int:
        """Uncached count for small generated strings such as the file map."""
        try:
            return self._tokenize(text)
        except Exception as e:
            logger.error(f"Tokenizing text failed: {e}")
            return 0

    async def _count_file(self, path, token) -> int:
        if is_cancelled(token):
            return 0
        path = os.fspath(path)
        try:
            st = await self.fs.stat(path)
            if not st.is_file or st.size > self.max_preview_bytes:
                return 0

            cached = self._cache.get(path)
            if cached is not None and cached.matches(st.mtime_ns, st.size):
                return cached.value

            if await self._load_encoder() is None:
                return 0
            if is_cancelled(token):
                return 0
            if await self.classifier.is_binary(path):
                return 0
            if is_cancelled(token):
                return 0

            raw = await self.fs.read_file(path)
            tokens = self._tokenize(raw.decode("utf-8", errors="replace"))
            self._cache.set(path, CacheEntry(tokens, st.mtime_ns, st.size))
            return tokens
        except OSError as e:
            logger.debug(f"Skipping {path} for token count: {e}")
            return 0
        except Exception as e:
            logger.error(f"Error processing file {path} for token count: {e}")
            return 0

    async def count_tokens(self, paths, token=None) -> int:
        if is_cancelled(token):
            return 0
        paths = list(paths)
        start = time.monotonic()
        logger.debug(f"count_tokens start files={len(paths)}")
        counts = await asyncio.gather(
            *(self.limiter.run(self._count_file, p, token) for p in paths)
        )
        total = sum(counts)
        elapsed_ms = (time.monotonic() - start) * 1000
        logger.debug(f"count_tokens done total_tokens={total} in {elapsed_ms:.0f}ms")
        return total

    def invalidate(self, path) -> None:
        self._cache.pop(os.fspath(path))

    def clear(self) -> None:
        self._cache.clear()

    def __len__(self):
        return len(self._cache)
