"""Pure path arithmetic for remote POSIX paths.

Paths here belong to the terminal session's host, so they are handled as
plain strings with ``posixpath`` instead of local ``Path`` objects.
"""

from __future__ import annotations

import posixpath
import shlex


def normalize_path(path: str) -> str:
    """Collapse duplicate separators and strip a trailing slash (except ``/``)."""
    if not path:
        return path
    normalized = posixpath.normpath(path)
    # normpath keeps a leading "//" per POSIX; treat it as "/".
    if normalized.startswith("//"):
        normalized = "/" + normalized.lstrip("/")
    return normalized


def parent_path(path: str) -> str | None:
    """Return the immediate parent by trimming the last segment.

    Returns ``None`` at the filesystem root.
    """
    normalized = normalize_path(path)
    if normalized in ("", "/"):
        return None
    parent = posixpath.dirname(normalized)
    return parent or "/"


def is_descendant(path: str, root: str) -> bool:
    """Return whether ``path`` is ``root`` or lies beneath it."""
    path = normalize_path(path)
    root = normalize_path(root)
    if path == root:
        return True
    prefix = root if root.endswith("/") else root + "/"
    return path.startswith(prefix)


def ancestors_of(path: str, root: str) -> list[str]:
    """Return ancestor paths of ``path`` nearest first, ending with ``root``.

    ``ancestors_of("/a/b/c", "/a")`` is ``["/a/b", "/a"]``. ``root`` itself
    and paths outside ``root`` have no ancestors.
    """
    path = normalize_path(path)
    root = normalize_path(root)
    if path == root or not is_descendant(path, root):
        return []

    ancestors: list[str] = []
    current = parent_path(path)
    while current is not None:
        ancestors.append(current)
        if current == root:
            break
        current = parent_path(current)
    return ancestors


def relative_path(path: str, cwd: str) -> str:
    """Return ``path`` relative to ``cwd``.

    Equal paths give ``"."``; paths outside ``cwd`` stay absolute.
    """
    path = normalize_path(path)
    cwd = normalize_path(cwd)
    if path == cwd:
        return "."
    if not is_descendant(path, cwd):
        return path
    prefix = cwd if cwd.endswith("/") else cwd + "/"
    return path[len(prefix):]


def shell_quote(text: str) -> str:
    """Quote ``text`` for a POSIX shell command line.

    Shell-safe words pass through unchanged. Anything else is single-quoted
    with embedded quotes closed, escaped, and reopened: ``it's`` becomes
    ``'it'"'"'s'``.
    """
    return shlex.quote(text)


def base_name(path: str) -> str:
    """Return the last segment of ``path`` (``"/"`` for the root)."""
    normalized = normalize_path(path)
    if normalized == "/":
        return "/"
    return posixpath.basename(normalized)


__all__ = [
    "normalize_path",
    "parent_path",
    "is_descendant",
    "ancestors_of",
    "relative_path",
    "shell_quote",
    "base_name",
]
