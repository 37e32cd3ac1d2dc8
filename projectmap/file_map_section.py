# projectmap/file_map_section.py
"""Assembles the <file_map> section for a selection across one or more roots."""

import asyncio
import os
from dataclasses import dataclass
from typing import Optional

from projectmap.collector import TraversalState, collect_files, find_owning_root
from projectmap.logging_config import get_logger
from projectmap.project_structure_utils import (
    generate_file_map, generate_file_map_multi_root
)

logger = get_logger("file_map")


@dataclass(frozen=True)
class FileMapResult:
    section: str = ""
    files: tuple = ()


async def generate_file_map_section(
    fs,
    limiter,
    ignore_engine,
    roots,
    selected_files,
    include_all_files: bool = False,
    show_ignored: bool = False,
    token=None,
    cap: Optional[int] = None,
) -> FileMapResult:
    """
    Build the file map for ``selected_files``.

    With ``include_all_files`` every root is collected (each with its own
    matcher and cap counter) and merged with the selection, so selected
    ignored files still show up; only selected files get the marker.
    Otherwise the map holds exactly the selection, all marked.
    """
    roots = [os.fspath(r) for r in roots]
    selected_files = [os.fspath(p) for p in selected_files]
    if not roots:
        return FileMapResult()

    if include_all_files:
        async def collect_root(root):
            if show_ignored:
                matcher = ignore_engine.default_matcher()
            else:
                matcher = await ignore_engine.get_matcher(root)
            return await collect_files(fs, limiter, root, matcher, root, token, cap, TraversalState())

        per_root = await asyncio.gather(*(collect_root(r) for r in roots))
        merged = {p for files in per_root for p in files}
        merged.update(selected_files)
        map_files = sorted(merged)
        marked = selected_files
    else:
        map_files = selected_files
        marked = None

    if not map_files:
        return FileMapResult()

    if len(roots) > 1:
        files_by_root = {}
        for file_path in map_files:
            owner = find_owning_root(file_path, roots) or os.path.normpath(roots[0])
            files_by_root.setdefault(owner, []).append(file_path)
        section = generate_file_map_multi_root(files_by_root, marked)
    else:
        section = generate_file_map(map_files, roots[0], marked)

    logger.debug(f"file map generated files={len(map_files)} roots={len(roots)}")
    return FileMapResult(section=section, files=tuple(map_files))
