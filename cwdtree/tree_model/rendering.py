"""Plain-text formatting for tree and flat listing rows."""

from __future__ import annotations

from collections.abc import Collection

from ..git_status import GIT_STATUS_CHANGED, GIT_STATUS_UNTRACKED
from .filtering import VisibleRow

SELECTION_MARKERS = {
    "modify": "M",
    "do-not-modify": "D",
    "use-as-example": "E",
}


def format_git_status_badges(path: str, git_status_overlay: dict[str, int] | None) -> str:
    """Return ``[M]``/``[?]`` badges for ``path``."""
    if not git_status_overlay:
        return ""
    flags = git_status_overlay.get(path, 0)
    badges = ""
    if flags & GIT_STATUS_CHANGED:
        badges += "[M]"
    if flags & GIT_STATUS_UNTRACKED:
        badges += "[?]"
    return f" {badges}" if badges else ""


def highlight_substring(text: str, query: str) -> str:
    """Bracket the first case-insensitive occurrence of ``query`` in ``text``."""
    if not query:
        return text
    idx = text.casefold().find(query.casefold())
    if idx < 0:
        return text
    end = idx + len(query)
    return f"{text[:idx]}[{text[idx:end]}]{text[end:]}"


def format_row(
    row: VisibleRow,
    git_status_overlay: dict[str, int] | None = None,
    search_query: str = "",
    selection: dict[str, str] | None = None,
) -> str:
    """Render one row with indentation, disclosure marker, and badges."""
    node = row.node
    indent = "  " * row.depth
    if node.children is not None:
        marker = "▾ " if row.expanded else "▸ "
        name = node.name + "/"
    else:
        marker = "  "
        name = node.name
    tag = ""
    if selection is not None and node.path in selection:
        tag = f"[{SELECTION_MARKERS.get(selection[node.path], '?')}] "
    label = highlight_substring(name, search_query.strip())
    return f"{indent}{marker}{tag}{label}{format_git_status_badges(node.path, git_status_overlay)}"


def format_rows(
    rows: Collection[VisibleRow],
    git_status_overlay: dict[str, int] | None = None,
    search_query: str = "",
    selection: dict[str, str] | None = None,
) -> list[str]:
    return [format_row(row, git_status_overlay, search_query, selection) for row in rows]


__all__ = [
    "SELECTION_MARKERS",
    "format_git_status_badges",
    "highlight_substring",
    "format_row",
    "format_rows",
]
