"""Domain model for flat directory snapshots.

This package contains non-UI primitives:
- directory entry and tree node datatypes
- local filesystem scanning helpers
- async snapshot fetching through the session capability
"""

from __future__ import annotations

from .types import DirectoryEntry, TreeNode
from .fs import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_ENTRIES,
    IGNORED_DIRECTORY_NAMES,
    entry_sort_key,
    list_directory_entries,
    walk_directory_entries,
)
from .snapshot import DirectorySnapshot, DirectorySnapshotSource

__all__ = [
    "DirectoryEntry",
    "TreeNode",
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_MAX_ENTRIES",
    "IGNORED_DIRECTORY_NAMES",
    "entry_sort_key",
    "list_directory_entries",
    "walk_directory_entries",
    "DirectorySnapshot",
    "DirectorySnapshotSource",
]
