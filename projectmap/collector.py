# projectmap/collector.py
"""Ignore-aware, capped, cancellable directory walk.

Each stat/listing goes through the filesystem limiter; the recursion itself
does not (see projectmap/limiter.py).
"""

import asyncio
import os
from dataclasses import dataclass
from typing import Optional

from projectmap.cancellation import is_cancelled
from projectmap.ignore_rules import relative_posix
from projectmap.logging_config import get_logger

logger = get_logger("collector")


@dataclass
class TraversalState:
    """Files collected so far by one top-level traversal call."""

    count: int = 0
    cap_logged: bool = False

    def cap_reached(self, cap: Optional[int]) -> bool:
        return cap is not None and self.count >= cap


async def collect_files(
    fs,
    limiter,
    path,
    matcher,
    root,
    token=None,
    cap: Optional[int] = None,
    state: Optional[TraversalState] = None,
    _ancestors: frozenset = frozenset(),
) -> list:
    """Return absolute paths of non-ignored files at or under ``path``.

    Ignored directories are pruned without being listed. Once ``state.count``
    reaches ``cap`` no more files are added. Cancellation and I/O failures
    end the walk quietly with whatever was gathered.
    """
    if is_cancelled(token):
        return []
    if state is None:
        state = TraversalState()

    path = os.fspath(path)
    rel = relative_posix(path, root)

    try:
        st = await limiter.run(fs.stat, path)
    except OSError as e:
        logger.debug(f"stat failed for {path}: {e}")
        return []

    if st.is_dir:
        # The root itself is never ignore-tested
        if rel and matcher.ignores(rel + "/"):
            return []
        if st.identity is not None and st.identity in _ancestors:
            logger.debug(f"Skipping {path}: directory cycle")
            return []
        if is_cancelled(token):
            return []

        try:
            children = await limiter.run(fs.list_directory, path)
        except OSError as e:
            logger.debug(f"listing failed for {path}: {e}")
            return []

        descent = _ancestors | {st.identity} if st.identity is not None else _ancestors
        out = []
        for name, _kind in children:
            if is_cancelled(token):
                break
            if state.cap_reached(cap):
                if not state.cap_logged:
                    state.cap_logged = True
                    logger.warning(f"collect_files hit cap max_files={cap}; stopping traversal")
                break
            nested = await collect_files(
                fs, limiter, os.path.join(path, name), matcher, root,
                token, cap, state, descent,
            )
            out.extend(nested)
        return out

    if not st.is_file:
        return []
    if rel and matcher.ignores(rel):
        return []
    if cap is not None:
        if state.count >= cap:
            return []
        state.count += 1
    return [path]


def find_owning_root(path, roots) -> Optional[str]:
    """Longest root that is ``path`` or one of its ancestors."""
    path = os.path.normpath(os.fspath(path))
    best = None
    for root in roots:
        root = os.path.normpath(os.fspath(root))
        prefix = root if root.endswith(os.sep) else root + os.sep
        if path == root or path.startswith(prefix):
            if best is None or len(root) > len(best):
                best = root
    return best


async def resolve_selected_files(
    fs,
    limiter,
    ignore_engine,
    selections,
    roots,
    token=None,
    cap: Optional[int] = None,
    show_ignored: bool = False,
) -> list:
    """Expand selected files/directories into a deduplicated file list.

    Selections are grouped by owning root. Each root gets its own matcher
    (default-only when ``show_ignored``) and its own cap counter shared by
    all selections under it.
    """
    groups: dict = {}
    for selection in selections:
        owner = find_owning_root(selection, roots)
        if owner is None:
            logger.debug(f"Selection outside workspace roots: {selection}")
            continue
        groups.setdefault(owner, []).append(os.fspath(selection))

    logger.debug(f"resolve_selected_files selections={len(selections)} roots={len(groups)}")

    async def collect_root(root, paths):
        if show_ignored:
            matcher = ignore_engine.default_matcher()
        else:
            matcher = await ignore_engine.get_matcher(root)
        state = TraversalState()

        async def collect_one(selected):
            try:
                return await collect_files(fs, limiter, selected, matcher, root, token, cap, state)
            except Exception as e:
                logger.error(f"collect_files failed for selection {selected}: {e}")
                return []

        nested = await asyncio.gather(*(collect_one(p) for p in paths))
        return [p for files in nested for p in files]

    per_root = await asyncio.gather(*(collect_root(r, ps) for r, ps in groups.items()))
    return list(dict.fromkeys(p for files in per_root for p in files))
