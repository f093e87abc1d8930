"""Directory snapshots fetched through the session capability.

``DirectorySnapshotSource`` owns no state beyond the request in flight; it
normalizes capability results into immutable ``DirectorySnapshot`` values.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..errors import TruncationNotice
from ..paths import base_name, normalize_path
from .fs import DEFAULT_MAX_DEPTH, DEFAULT_MAX_ENTRIES, entry_sort_key
from .types import DirectoryEntry

if TYPE_CHECKING:
    from ..host import SessionBackend

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirectorySnapshot:
    """One complete flat listing fetched at a point in time."""

    root: str
    entries: tuple[DirectoryEntry, ...]
    recursive: bool = False
    max_depth: int = 1
    max_entries: int | None = None

    @property
    def truncated(self) -> bool:
        """Whether the listing may be incomplete because it hit ``max_entries``."""
        return self.max_entries is not None and len(self.entries) >= self.max_entries

    def truncation_notice(self) -> TruncationNotice | None:
        if not self.truncated:
            return None
        assert self.max_entries is not None
        return TruncationNotice(root=self.root, max_entries=self.max_entries, max_depth=self.max_depth)


def _normalize_entry(entry: DirectoryEntry, fallback_parent: str, fallback_depth: int) -> DirectoryEntry:
    """Normalize path strings and fill metadata the capability left blank."""
    path = normalize_path(entry.path)
    parent = normalize_path(entry.parent_path) if entry.parent_path else fallback_parent
    return DirectoryEntry(
        path=path,
        name=entry.name or base_name(path),
        is_dir=bool(entry.is_dir),
        parent_path=parent,
        depth=entry.depth if entry.depth > 0 else fallback_depth,
    )


class DirectorySnapshotSource:
    """Fetch flat directory listings through a ``SessionBackend``."""

    def __init__(
        self,
        backend: SessionBackend,
        max_depth: int = DEFAULT_MAX_DEPTH,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ) -> None:
        self._backend = backend
        self.max_depth = max_depth
        self.max_entries = max_entries
        self.in_flight: str | None = None

    async def list_one_level(self, path: str) -> DirectorySnapshot:
        """List entries directly inside ``path``.

        Raises ``OSError`` when ``path`` is unreadable.
        """
        root = normalize_path(path)
        self.in_flight = root
        try:
            raw_entries = await self._backend.list_directory(root)
        finally:
            if self.in_flight == root:
                self.in_flight = None

        entries = [_normalize_entry(entry, root, 1) for entry in raw_entries]
        entries.sort(key=entry_sort_key)
        return DirectorySnapshot(root=root, entries=tuple(entries))

    async def list_recursive(
        self,
        path: str,
        max_depth: int | None = None,
        max_entries: int | None = None,
    ) -> DirectorySnapshot:
        """Walk ``path`` up to the depth and entry bounds.

        Truncation is silent; check ``snapshot.truncated`` before assuming the
        listing is complete. Raises ``OSError`` when ``path`` is unreadable.
        """
        root = normalize_path(path)
        depth_limit = self.max_depth if max_depth is None else max_depth
        entry_limit = self.max_entries if max_entries is None else max_entries
        self.in_flight = root
        try:
            raw_entries = await self._backend.list_directory_recursive(root, depth_limit, entry_limit)
        finally:
            if self.in_flight == root:
                self.in_flight = None

        entries = tuple(_normalize_entry(entry, root, 1) for entry in raw_entries[:entry_limit])
        snapshot = DirectorySnapshot(
            root=root,
            entries=entries,
            recursive=True,
            max_depth=depth_limit,
            max_entries=entry_limit,
        )
        if snapshot.truncated:
            logger.warning("Recursive listing of %s hit the %d entry limit", root, entry_limit)
        else:
            logger.debug("Recursive listing of %s returned %d entries", root, len(entries))
        return snapshot


__all__ = [
    "DirectorySnapshot",
    "DirectorySnapshotSource",
]
