"""Local filesystem scanning into flat ``DirectoryEntry`` lists.

These helpers back ``LocalBackend``. They are blocking; the backend runs
them in a worker thread.
"""

from __future__ import annotations

import logging
import os

from ..paths import normalize_path
from .types import DirectoryEntry

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 10
DEFAULT_MAX_ENTRIES = 10_000
IGNORED_DIRECTORY_NAMES = frozenset(
    {
        ".git",
        "node_modules",
        "target",
        "dist",
        "build",
        ".cache",
        ".next",
        ".nuxt",
        "__pycache__",
        ".venv",
        "venv",
    }
)


def entry_sort_key(entry: DirectoryEntry) -> tuple[bool, str, str, str]:
    """Sort directories before files, then by lowercase name."""
    return (not entry.is_dir, entry.name.lower(), entry.name, entry.path)


def _scan_children(directory: str) -> list[tuple[str, str, bool, bool]]:
    """Return ``(name, path, is_dir, is_symlink)`` rows for ``directory``.

    Raises ``OSError`` when the directory itself cannot be read.
    """
    rows: list[tuple[str, str, bool, bool]] = []
    with os.scandir(directory) as entries:
        for child in entries:
            try:
                is_symlink = child.is_symlink()
            except OSError:
                is_symlink = False
            try:
                is_dir = child.is_dir(follow_symlinks=True)
            except OSError:
                is_dir = False
            rows.append((child.name, child.path, is_dir, is_symlink))
    return rows


def list_directory_entries(directory: str) -> list[DirectoryEntry]:
    """List entries directly inside ``directory``, directories first.

    Symlinks are listed with the type of their target. Raises ``OSError``
    when ``directory`` is unreadable; an empty list means an empty directory.
    """
    root = normalize_path(directory)
    entries = [
        DirectoryEntry(
            path=normalize_path(path),
            name=name,
            is_dir=is_dir,
            parent_path=root,
            depth=1,
        )
        for name, path, is_dir, _is_symlink in _scan_children(root)
    ]
    entries.sort(key=entry_sort_key)
    return entries


def walk_directory_entries(
    directory: str,
    max_depth: int = DEFAULT_MAX_DEPTH,
    max_entries: int = DEFAULT_MAX_ENTRIES,
    ignored_names: frozenset[str] = IGNORED_DIRECTORY_NAMES,
) -> list[DirectoryEntry]:
    """Walk ``directory`` depth-first up to ``max_depth`` levels.

    Stops silently once ``max_entries`` rows are collected. Symlinks are
    skipped and ignored directory names are neither listed nor descended.
    Unreadable subdirectories are skipped; an unreadable root raises
    ``OSError``.
    """
    root = normalize_path(directory)
    entries: list[DirectoryEntry] = []
    if max_entries <= 0 or max_depth <= 0:
        _scan_children(root)
        return entries

    def walk(current: str, depth: int) -> bool:
        """Append children of ``current``; return ``False`` once truncated."""
        try:
            rows = _scan_children(current)
        except OSError:
            if current == root:
                raise
            logger.warning("Skipping unreadable directory %s", current)
            return True

        children: list[DirectoryEntry] = []
        for name, path, is_dir, is_symlink in rows:
            if is_symlink:
                continue
            if is_dir and name in ignored_names:
                continue
            children.append(
                DirectoryEntry(
                    path=normalize_path(path),
                    name=name,
                    is_dir=is_dir,
                    parent_path=current,
                    depth=depth,
                )
            )
        children.sort(key=entry_sort_key)

        for child in children:
            if len(entries) >= max_entries:
                logger.warning("Reached max entry limit of %d under %s", max_entries, root)
                return False
            entries.append(child)
            if child.is_dir and depth < max_depth:
                if not walk(child.path, depth + 1):
                    return False
        return True

    walk(root, 1)
    return entries


__all__ = [
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_MAX_ENTRIES",
    "IGNORED_DIRECTORY_NAMES",
    "entry_sort_key",
    "list_directory_entries",
    "walk_directory_entries",
]
