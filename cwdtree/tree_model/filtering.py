"""Filtered tree projections and search-driven auto-expansion."""

from __future__ import annotations

from collections.abc import Collection, Iterable
from dataclasses import dataclass

from ..file_tree_model.types import TreeNode
from ..paths import ancestors_of


@dataclass(frozen=True)
class VisibleRow:
    """One displayed row of a forest under the current expansion state."""

    node: TreeNode
    depth: int
    expanded: bool = False


def filter_tree(nodes: list[TreeNode], matching_paths: Collection[str] | None) -> list[TreeNode]:
    """Prune ``nodes`` to matches plus their ancestor chain.

    Child order is preserved. A matching directory keeps only its matching
    descendants. ``None`` or empty ``matching_paths`` means no filter and
    returns ``nodes`` unchanged.
    """
    if not matching_paths:
        return nodes
    matches = matching_paths if isinstance(matching_paths, (set, frozenset)) else set(matching_paths)

    def prune(node: TreeNode) -> TreeNode | None:
        """Return the pruned node or ``None`` when nothing below it matches."""
        if node.children is None:
            return node if node.path in matches else None
        kept = tuple(child for child in (prune(child) for child in node.children) if child is not None)
        if kept or node.path in matches:
            return TreeNode(entry=node.entry, children=kept)
        return None

    return [pruned for pruned in (prune(node) for node in nodes) if pruned is not None]


def expansion_for_matches(
    matching_paths: Iterable[str],
    directory_paths: Collection[str],
    root: str,
) -> frozenset[str]:
    """Return the expansion set that reveals every match.

    The result is the union of each match's ancestor chain plus every
    matching directory itself.
    """
    expanded: set[str] = set()
    for path in matching_paths:
        if path in directory_paths:
            expanded.add(path)
        expanded.update(ancestors_of(path, root))
    return frozenset(expanded)


def visible_rows(nodes: Iterable[TreeNode], expanded: Collection[str], depth: int = 0) -> list[VisibleRow]:
    """Flatten a forest into rows, descending only into expanded directories."""
    rows: list[VisibleRow] = []
    for node in nodes:
        is_open = node.children is not None and node.path in expanded
        rows.append(VisibleRow(node=node, depth=depth, expanded=is_open))
        if is_open and node.children:
            rows.extend(visible_rows(node.children, expanded, depth + 1))
    return rows


__all__ = [
    "VisibleRow",
    "filter_tree",
    "expansion_for_matches",
    "visible_rows",
]
