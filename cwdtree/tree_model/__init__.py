"""Tree construction, filtering, and row formatting.

Builds ``TreeNode`` forests from flat snapshots, prunes them to search
matches, and flattens them into display rows.
"""

from __future__ import annotations

from .build import build_tree, iter_nodes, node_sort_key
from .filtering import VisibleRow, expansion_for_matches, filter_tree, visible_rows
from .rendering import format_row, format_rows

__all__ = [
    "build_tree",
    "iter_nodes",
    "node_sort_key",
    "VisibleRow",
    "expansion_for_matches",
    "filter_tree",
    "visible_rows",
    "format_row",
    "format_rows",
]
