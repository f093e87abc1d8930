"""Flat-snapshot to tree reconstruction.

Every refresh rebuilds the forest from scratch; nodes never outlive the
snapshot they were built from.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..file_tree_model.fs import entry_sort_key
from ..file_tree_model.types import DirectoryEntry, TreeNode
from ..paths import normalize_path

logger = logging.getLogger(__name__)


def node_sort_key(node: TreeNode) -> tuple[bool, str, str, str]:
    """Sort directories before files, then by lowercase name."""
    return entry_sort_key(node.entry)


def build_tree(entries: Iterable[DirectoryEntry], root_path: str) -> list[TreeNode]:
    """Build a sorted forest from a flat snapshot rooted at ``root_path``.

    Entries whose ``parent_path`` is ``root_path`` or ``None`` become roots.
    Entries whose parent is missing from the snapshot (a truncated walk) are
    dropped together with their descendants.
    """
    root = normalize_path(root_path)
    by_path: dict[str, DirectoryEntry] = {}
    for entry in entries:
        by_path.setdefault(entry.path, entry)

    roots: list[DirectoryEntry] = []
    children_by_parent: dict[str, list[DirectoryEntry]] = {}
    orphans = 0
    for entry in by_path.values():
        parent = entry.parent_path
        if parent is None or parent == root:
            roots.append(entry)
            continue
        parent_entry = by_path.get(parent)
        if parent_entry is None or not parent_entry.is_dir or parent == entry.path:
            orphans += 1
            continue
        children_by_parent.setdefault(parent, []).append(entry)

    if orphans:
        logger.debug("Dropped %d entries without a parent under %s", orphans, root)

    def make_node(entry: DirectoryEntry) -> TreeNode:
        """Build ``entry`` bottom-up so children are sorted before the parent."""
        if not entry.is_dir:
            return TreeNode(entry=entry, children=None)
        children = [make_node(child) for child in children_by_parent.get(entry.path, [])]
        children.sort(key=node_sort_key)
        return TreeNode(entry=entry, children=tuple(children))

    forest = [make_node(entry) for entry in roots]
    forest.sort(key=node_sort_key)
    return forest


def iter_nodes(nodes: Iterable[TreeNode]):
    """Yield every node of a forest in display (pre-)order."""
    for node in nodes:
        yield node
        if node.children:
            yield from iter_nodes(node.children)


__all__ = [
    "node_sort_key",
    "build_tree",
    "iter_nodes",
]
