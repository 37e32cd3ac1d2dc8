"""Tests for limit configuration."""

import pytest

from projectmap.config import ScanLimits, load_limits
from projectmap.exceptions import ConfigurationError


def test_defaults():
    limits = load_limits({})
    assert limits == ScanLimits()
    assert limits.binary_cache_size == 5000
    assert limits.token_cache_size == 5000
    assert limits.fs_concurrency == 24
    assert limits.tokenize_concurrency == 8
    assert limits.ignore_file_name == ".gitignore"


def test_environment_overrides():
    limits = load_limits({
        "PROJECTMAP_MAX_FILES": "200",
        "PROJECTMAP_MAX_PREVIEW_BYTES": "4096",
        "PROJECTMAP_FS_CONCURRENCY": "4",
        "PROJECTMAP_TOKENIZE_CONCURRENCY": "2",
        "PROJECTMAP_CACHE_SIZE": "10",
        "PROJECTMAP_IGNORE_FILE": ".contextignore",
    })

    assert limits.max_collected_files == 200
    assert limits.max_preview_bytes == 4096
    assert limits.fs_concurrency == 4
    assert limits.tokenize_concurrency == 2
    assert limits.binary_cache_size == 10
    assert limits.token_cache_size == 10
    assert limits.ignore_file_name == ".contextignore"


@pytest.mark.parametrize("value", ["abc", "0", "-3"])
def test_invalid_override_rejected(value):
    with pytest.raises(ConfigurationError) as exc_info:
        load_limits({"PROJECTMAP_MAX_FILES": value})
    assert "PROJECTMAP_MAX_FILES" in str(exc_info.value)


def test_invalid_direct_limits_rejected():
    with pytest.raises(ConfigurationError):
        ScanLimits(fs_concurrency=0)
