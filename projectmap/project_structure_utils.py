# projectmap/project_structure_utils.py
"""Builds a tree from a flat file list and renders it as a <file_map> text diagram."""

import os
from dataclasses import dataclass, field
from typing import Optional

from projectmap.constants import (
    FILE_MAP_LEGEND, LINE_CORNER, LINE_EMPTY, LINE_INTERSECTION, LINE_VERTICAL,
    SELECTED_MARKER
)
from projectmap.ignore_rules import relative_posix


@dataclass
class TreeNode:
    name: str
    is_directory: bool
    is_selected: bool = False
    # insertion-ordered: name -> TreeNode
    children: dict = field(default_factory=dict)


def build_tree(files, root, selected_files: Optional[set] = None) -> TreeNode:
    """Insert each file as a chain of directory nodes ending in a leaf.

    With ``selected_files`` None every leaf is marked selected; otherwise only
    members are. Re-inserting a leaf can turn selection on, never off.
    """
    tree = TreeNode(os.path.basename(os.path.normpath(os.fspath(root))), True)

    for file_path in files:
        file_path = os.fspath(file_path)
        parts = [part for part in relative_posix(file_path, root).split("/") if part]
        current = tree
        for i, part in enumerate(parts):
            is_last = i == len(parts) - 1
            is_selected = is_last and (selected_files is None or file_path in selected_files)
            child = current.children.get(part)
            if child is None:
                child = TreeNode(part, not is_last, is_selected)
                current.children[part] = child
            elif is_last and is_selected:
                child.is_selected = True
            current = child

    return tree


def sort_children(node: TreeNode) -> list:
    """Directories first, then files, each alphabetically."""
    return sorted(
        node.children.values(),
        key=lambda child: (not child.is_directory, child.name.lower(), child.name),
    )


def _render_children(node: TreeNode, prefix: str, lines: list) -> None:
    children = sort_children(node)
    for i, child in enumerate(children):
        is_last = i == len(children) - 1
        connector = LINE_CORNER if is_last else LINE_INTERSECTION
        marker = SELECTED_MARKER if child.is_selected else ""
        lines.append(prefix + connector + child.name + marker)
        if child.children:
            _render_children(child, prefix + (LINE_EMPTY if is_last else LINE_VERTICAL), lines)


def render_tree(tree: TreeNode) -> list:
    """Lines for everything below the root node (the root itself is not drawn)."""
    lines = []
    _render_children(tree, "", lines)
    return lines


def _as_selected_set(selected_files) -> Optional[set]:
    if selected_files is None:
        return None
    return {os.fspath(p) for p in selected_files}


def generate_file_map(files, root, selected_files=None) -> str:
    """Single-root map, with the selection legend."""
    files = list(files)
    if not files:
        return ""

    tree = build_tree(files, root, _as_selected_set(selected_files))
    lines = [os.fspath(root)]
    lines.extend(render_tree(tree))
    return "<file_map>\n" + "\n".join(lines) + "\n\n" + FILE_MAP_LEGEND + "\n</file_map>"


def generate_file_map_multi_root(files_by_root, selected_files=None) -> str:
    """One block per root (header = root path), blank line between blocks, no legend.

    ``files_by_root`` maps root path -> files, in display order. Roots with no
    files are skipped.
    """
    selected_set = _as_selected_set(selected_files)
    all_lines = []

    for root, files in files_by_root.items():
        files = list(files)
        if not files:
            continue
        tree = build_tree(files, root, selected_set)
        all_lines.append(os.fspath(root))
        all_lines.extend(render_tree(tree))
        all_lines.append("")

    if all_lines and all_lines[-1] == "":
        all_lines.pop()
    if not all_lines:
        return ""

    return "<file_map>\n" + "\n".join(all_lines) + "\n</file_map>"
