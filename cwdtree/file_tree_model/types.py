"""Domain datatypes for directory snapshots and the trees built from them."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DirectoryEntry:
    """One row of a flat directory snapshot.

    ``path`` is absolute and unique within a snapshot. ``parent_path`` and
    ``depth`` are reported relative to the listed root so a tree can be
    rebuilt without re-deriving paths.
    """

    path: str
    name: str
    is_dir: bool
    parent_path: str | None = None
    depth: int = 0


@dataclass(frozen=True)
class TreeNode:
    """Tree node owning its children.

    Files carry ``children=None``; directories always carry a tuple, which
    is empty for an empty (or fully filtered) directory.
    """

    entry: DirectoryEntry
    children: tuple["TreeNode", ...] | None = None

    @property
    def path(self) -> str:
        return self.entry.path

    @property
    def name(self) -> str:
        return self.entry.name

    @property
    def is_dir(self) -> bool:
        return self.entry.is_dir


__all__ = [
    "DirectoryEntry",
    "TreeNode",
]
