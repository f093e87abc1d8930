"""In-memory search index over a flat directory snapshot."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from ..file_tree_model.types import DirectoryEntry
from ..paths import relative_path
from .fuzzy import rank_candidates

DEFAULT_SEARCH_LIMIT = 200


@dataclass(frozen=True)
class SearchMatch:
    """One ranked query result."""

    entry: DirectoryEntry
    label: str
    score: int

    @property
    def path(self) -> str:
        return self.entry.path


class SearchIndex:
    """Read-only index rebuilt wholesale whenever the backing list changes.

    The index covers every entry of the snapshot, including files inside
    collapsed folders.
    """

    def __init__(self, limit: int = DEFAULT_SEARCH_LIMIT) -> None:
        self.limit = limit
        self._root: str | None = None
        self._entries: tuple[DirectoryEntry, ...] = ()
        self._labels: list[str] = []
        self._labels_folded: list[str] = []
        self._names_folded: list[str] = []

    @classmethod
    def from_entries(
        cls,
        entries: Iterable[DirectoryEntry],
        root: str | None = None,
        limit: int = DEFAULT_SEARCH_LIMIT,
    ) -> SearchIndex:
        index = cls(limit=limit)
        index.initialize(entries, root)
        return index

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def root(self) -> str | None:
        return self._root

    def initialize(self, entries: Iterable[DirectoryEntry], root: str | None = None) -> None:
        """Index ``entries``; labels are relative to ``root`` when given."""
        snapshot = tuple(entries)
        labels = [relative_path(entry.path, root) if root else entry.path for entry in snapshot]
        # Tables are replaced together, never patched.
        self._root = root
        self._entries = snapshot
        self._labels = labels
        self._labels_folded = [label.casefold() for label in labels]
        self._names_folded = [entry.name.casefold() for entry in snapshot]

    def query(self, text: str, limit: int | None = None) -> list[SearchMatch] | None:
        """Return ranked matches for ``text`` or ``None`` for an empty query."""
        query = text.strip()
        if not query:
            return None
        ranked = rank_candidates(
            query,
            self._names_folded,
            self._labels,
            self._labels_folded,
            limit=self.limit if limit is None else limit,
        )
        return [
            SearchMatch(entry=self._entries[idx], label=self._labels[idx], score=score)
            for idx, score in ranked
        ]


__all__ = [
    "DEFAULT_SEARCH_LIMIT",
    "SearchMatch",
    "SearchIndex",
]
