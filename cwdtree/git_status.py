"""Git status overlay for the git-changes-only tree filter.

Collects changed/untracked flags for files and their ancestor directories,
with a small per-root TTL cache so repeated refreshes do not re-run git.
"""

from __future__ import annotations

import logging
import os
import subprocess
import time
from collections.abc import Callable
from dataclasses import dataclass

from .paths import is_descendant, normalize_path, parent_path

logger = logging.getLogger(__name__)

GIT_STATUS_CHANGED = 1
GIT_STATUS_UNTRACKED = 2
GIT_STATUS_CACHE_TTL_SECONDS = 5.0


def _merge_flags(overlay: dict[str, int], target: str, flags: int) -> None:
    overlay[target] = overlay.get(target, 0) | flags


def _run_git(cwd: str, args: list[str], timeout_seconds: float) -> subprocess.CompletedProcess[str] | None:
    try:
        return subprocess.run(
            ["git", "-C", cwd, *args],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            timeout=timeout_seconds,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logger.debug("git %s failed in %s: %s", args[0], cwd, exc)
        return None


def resolve_repo_root(path: str, timeout_seconds: float = 0.25) -> str | None:
    """Return the repository top-level for ``path`` or ``None`` outside git."""
    proc = _run_git(path, ["rev-parse", "--show-toplevel"], timeout_seconds)
    if proc is None or proc.returncode != 0:
        return None
    top = proc.stdout.strip()
    return normalize_path(os.path.realpath(top)) if top else None


def _iter_porcelain_records(output: str) -> list[tuple[str, str]]:
    records: list[tuple[str, str]] = []
    tokens = output.split("\0")
    index = 0
    while index < len(tokens):
        token = tokens[index]
        index += 1
        if not token:
            continue
        if len(token) < 4 or token[2] != " ":
            continue

        status = token[:2]
        path_text = token[3:]
        records.append((status, path_text))

        # Renamed/copied entries carry an extra source-path token.
        if "R" in status or "C" in status:
            index += 1

    return records


def collect_git_status_overlay(tree_root: str, timeout_seconds: float = 0.25) -> dict[str, int]:
    """Return ``path -> flags`` for changed files under ``tree_root``.

    Ancestor directories up to ``tree_root`` inherit their descendants' flags.
    Returns an empty overlay outside a repository or when git fails.
    """
    tree_root = normalize_path(os.path.realpath(tree_root))
    repo_root = resolve_repo_root(tree_root, timeout_seconds)
    if repo_root is None:
        return {}

    status_proc = _run_git(
        repo_root,
        ["status", "--porcelain=v1", "-z", "--untracked-files=normal"],
        timeout_seconds,
    )
    if status_proc is None or status_proc.returncode != 0:
        return {}

    overlay: dict[str, int] = {}
    for status, rel_path in _iter_porcelain_records(status_proc.stdout):
        if not rel_path or status == "!!":
            continue

        flags = GIT_STATUS_UNTRACKED if status == "??" else GIT_STATUS_CHANGED
        target = normalize_path(f"{repo_root}/{rel_path}")
        if not is_descendant(target, tree_root):
            continue

        _merge_flags(overlay, target, flags)
        parent = parent_path(target)
        while parent is not None and is_descendant(parent, tree_root):
            _merge_flags(overlay, parent, flags)
            if parent == tree_root:
                break
            parent = parent_path(parent)

    return overlay


@dataclass
class _CacheEntry:
    overlay: dict[str, int]
    cached_at: float


class GitStatusCache:
    """Per-root git overlay cache with a fixed time-to-live."""

    def __init__(
        self,
        ttl_seconds: float = GIT_STATUS_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, _CacheEntry] = {}

    def get(self, root: str) -> dict[str, int] | None:
        """Return the cached overlay for ``root`` or ``None`` when missing or expired."""
        cached = self._entries.get(normalize_path(root))
        if cached is None:
            return None
        if self._clock() - cached.cached_at > self._ttl_seconds:
            return None
        return dict(cached.overlay)

    def set(self, root: str, overlay: dict[str, int]) -> None:
        self._entries[normalize_path(root)] = _CacheEntry(overlay=dict(overlay), cached_at=self._clock())

    def invalidate(self, root: str) -> None:
        self._entries.pop(normalize_path(root), None)

    def clear(self) -> None:
        self._entries.clear()


__all__ = [
    "GIT_STATUS_CHANGED",
    "GIT_STATUS_UNTRACKED",
    "GIT_STATUS_CACHE_TTL_SECONDS",
    "GitStatusCache",
    "collect_git_status_overlay",
    "resolve_repo_root",
]
