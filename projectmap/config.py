"""
ProjectMap Configuration

Limits supplied by the embedding application. Defaults come from
projectmap/constants.py and can be overridden through environment variables.
"""

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from projectmap import constants
from projectmap.exceptions import ConfigurationError

# env var -> ScanLimits field
_INT_ENV_OVERRIDES = {
    "PROJECTMAP_MAX_FILES": "max_collected_files",
    "PROJECTMAP_MAX_PREVIEW_BYTES": "max_preview_bytes",
    "PROJECTMAP_FS_CONCURRENCY": "fs_concurrency",
    "PROJECTMAP_TOKENIZE_CONCURRENCY": "tokenize_concurrency",
}


@dataclass(frozen=True)
class ScanLimits:
    """Caps, cache capacities and concurrency values for one session."""

    max_collected_files: int = constants.MAX_COLLECTED_FILES
    max_preview_bytes: int = constants.MAX_PREVIEW_BYTES
    binary_cache_size: int = constants.BINARY_CACHE_SIZE
    token_cache_size: int = constants.TOKEN_CACHE_SIZE
    fs_concurrency: int = constants.FS_CONCURRENCY
    tokenize_concurrency: int = constants.TOKENIZE_CONCURRENCY
    ignore_file_name: str = constants.IGNORE_FILE_NAME
    encoding_name: str = constants.ENCODING_NAME

    def __post_init__(self):
        for field_name in (
            "max_collected_files", "max_preview_bytes", "binary_cache_size",
            "token_cache_size", "fs_concurrency", "tokenize_concurrency",
        ):
            value = getattr(self, field_name)
            if not isinstance(value, int) or value < 1:
                raise ConfigurationError(
                    f"{field_name} must be a positive integer",
                    {field_name: value},
                )
        if not self.ignore_file_name:
            raise ConfigurationError("ignore_file_name must not be empty")


def _parse_positive_int(name: str, raw: str) -> int:
    try:
        value = int(raw.strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer", {name: raw}) from None
    if value < 1:
        raise ConfigurationError(f"{name} must be positive", {name: raw})
    return value


def load_limits(
    environ: Optional[Mapping[str, str]] = None,
    base: Optional[ScanLimits] = None,
) -> ScanLimits:
    """
    Build ScanLimits from defaults plus environment overrides.

    Priority:
    1. PROJECTMAP_* environment variables
    2. ``base`` (or the built-in defaults)

    Raises:
        ConfigurationError: An override is not a positive integer.
    """
    env = os.environ if environ is None else environ
    limits = base or ScanLimits()
    overrides: dict = {}

    for env_name, field_name in _INT_ENV_OVERRIDES.items():
        raw = env.get(env_name)
        if raw:
            overrides[field_name] = _parse_positive_int(env_name, raw)

    cache_size = env.get("PROJECTMAP_CACHE_SIZE")
    if cache_size:
        size = _parse_positive_int("PROJECTMAP_CACHE_SIZE", cache_size)
        overrides["binary_cache_size"] = size
        overrides["token_cache_size"] = size

    ignore_file = env.get("PROJECTMAP_IGNORE_FILE")
    if ignore_file:
        overrides["ignore_file_name"] = ignore_file.strip()

    if not overrides:
        return limits
    return replace(limits, **overrides)
