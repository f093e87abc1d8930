"""Sidebar view state exposed to renderers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .errors import TruncationNotice
from .file_tree_model.types import DirectoryEntry, TreeNode
from .search.index import SearchMatch
from .tree_model.filtering import VisibleRow

ERROR_PATH_LABEL = "Error loading directory"
UNKNOWN_PATH_LABEL = "~"
NO_SESSION_LABEL = "No session"
SESSION_LABEL_CHARS = 8


class ViewMode(str, Enum):
    FLAT = "flat"
    TREE = "tree"

    @property
    def label(self) -> str:
        return "NAVIGATION MODE" if self is ViewMode.FLAT else "AGENT MODE"

    def toggled(self) -> ViewMode:
        return ViewMode.TREE if self is ViewMode.FLAT else ViewMode.FLAT


class SidebarStatus(str, Enum):
    CLOSED = "closed"
    LOADING = "loading"
    READY = "ready"
    NO_SESSION = "no-session"
    ERROR = "error"


def session_label(session_id: str | None) -> str:
    if not session_id:
        return NO_SESSION_LABEL
    return f"Session: {session_id[:SESSION_LABEL_CHARS]}"


@dataclass(frozen=True)
class SidebarSnapshot:
    """Read-only copy of everything a renderer needs for one frame.

    ``tree`` is the displayed forest after search and git filtering;
    ``rows`` flattens it under ``expanded``. In flat mode every entry is a
    depth-zero row.
    """

    mode: ViewMode
    status: SidebarStatus
    session_id: str | None = None
    current_path: str | None = None
    entries: tuple[DirectoryEntry, ...] = ()
    tree: tuple[TreeNode, ...] = ()
    rows: tuple[VisibleRow, ...] = ()
    query: str = ""
    matches: tuple[SearchMatch, ...] | None = None
    expanded: frozenset[str] = frozenset()
    truncation: TruncationNotice | None = None
    git_changes_only: bool = False
    git_status_overlay: dict[str, int] = field(default_factory=dict)
    error: str | None = None

    @property
    def session_label(self) -> str:
        return session_label(self.session_id)

    @property
    def path_label(self) -> str:
        if self.status is SidebarStatus.ERROR:
            return ERROR_PATH_LABEL
        return self.current_path or UNKNOWN_PATH_LABEL

    @property
    def mode_label(self) -> str:
        return self.mode.label


__all__ = [
    "ERROR_PATH_LABEL",
    "UNKNOWN_PATH_LABEL",
    "NO_SESSION_LABEL",
    "ViewMode",
    "SidebarStatus",
    "SidebarSnapshot",
    "session_label",
]
