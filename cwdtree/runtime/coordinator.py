"""Sidebar orchestration: modes, refreshes, search, and hand-off.

``ViewCoordinator`` owns every piece of mutable view state. Each refresh
takes a fresh ``RefreshToken``; replies carrying an older token are dropped
so a slow listing can never overwrite a newer one.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..analysis.cache import AnalysisCache, Analyzer
from ..analysis.symbols import analyze_source
from ..errors import SessionError, TruncationNotice
from ..file_tree_model.snapshot import DirectorySnapshot, DirectorySnapshotSource
from ..file_tree_model.types import DirectoryEntry, TreeNode
from ..git_status import GitStatusCache
from ..paths import normalize_path, parent_path
from ..search.debounce import QueryDebouncer
from ..search.index import SearchIndex, SearchMatch
from ..selection import SelectionStore
from ..state import SidebarSnapshot, SidebarStatus, ViewMode
from ..tree_model.build import build_tree
from ..tree_model.filtering import expansion_for_matches, filter_tree, visible_rows
from .config import SidebarSettings, save_default_mode
from .cwd_monitor import CwdMonitor

if TYPE_CHECKING:
    from ..host import SessionBackend

logger = logging.getLogger(__name__)

UpdateCallback = Callable[[SidebarSnapshot], None]


@dataclass(frozen=True)
class RefreshToken:
    session_id: str | None
    path: str | None
    counter: int


class ViewCoordinator:
    """Drive the flat and tree views of one terminal session's directory.

    Flat mode lists one directory level and supports explicit navigation.
    Tree mode lists the whole subtree under the session's CWD and adds
    search, expansion, and the git-changes-only filter.
    """

    def __init__(
        self,
        backend: SessionBackend,
        settings: SidebarSettings | None = None,
        analyzer: Analyzer = analyze_source,
        on_update: UpdateCallback | None = None,
        persist_mode: bool = False,
    ) -> None:
        settings = settings or SidebarSettings()
        self._backend = backend
        self._settings = settings
        self.on_update = on_update
        self._persist_mode = persist_mode

        self._source = DirectorySnapshotSource(backend, settings.max_depth, settings.max_entries)
        self._index = SearchIndex(settings.search_limit)
        self._debouncer = QueryDebouncer(self.apply_search, settings.search_debounce)
        self._git_cache = GitStatusCache(settings.git_status_ttl)
        self.analysis = AnalysisCache(backend, analyzer)
        self.selection = SelectionStore()
        self.monitor = CwdMonitor(backend, self._on_cwd_change, settings.poll_interval)

        self._open = False
        self._mode = ViewMode(settings.default_mode)
        self._status = SidebarStatus.CLOSED
        self._session_id: str | None = None
        self._last_cwd: str | None = None
        self._current_path: str | None = None
        self._loaded: tuple[str, ViewMode] | None = None
        self._entries: tuple[DirectoryEntry, ...] = ()
        self._directory_paths: frozenset[str] = frozenset()
        self._tree: tuple[TreeNode, ...] = ()
        self._query = ""
        self._matches: tuple[SearchMatch, ...] | None = None
        self._expanded: frozenset[str] = frozenset()
        self._truncation: TruncationNotice | None = None
        self._git_changes_only = False
        self._git_overlay: dict[str, int] = {}
        self._error: str | None = None
        self._counter = 0
        self._token: RefreshToken | None = None

    @property
    def mode(self) -> ViewMode:
        return self._mode

    @property
    def status(self) -> SidebarStatus:
        return self._status

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def session_id(self) -> str | None:
        return self._session_id

    @property
    def current_path(self) -> str | None:
        return self._current_path

    @property
    def query(self) -> str:
        return self._query

    @property
    def expanded(self) -> frozenset[str]:
        return self._expanded

    @property
    def debouncer(self) -> QueryDebouncer:
        return self._debouncer

    def displayed_tree(self) -> list[TreeNode]:
        """Return the forest after the git filter and the active search."""
        nodes = list(self._tree)
        if self._mode is not ViewMode.TREE:
            return nodes
        if self._git_changes_only:
            changed = {path for path, flags in self._git_overlay.items() if flags}
            nodes = filter_tree(nodes, changed) if changed else []
        if self._matches is not None:
            # A query with no hits shows nothing rather than the unfiltered tree.
            nodes = filter_tree(nodes, {match.path for match in self._matches}) if self._matches else []
        return nodes

    @property
    def snapshot(self) -> SidebarSnapshot:
        tree = self.displayed_tree()
        if self._mode is ViewMode.TREE:
            rows = visible_rows(tree, self._expanded)
        else:
            rows = visible_rows(tree, frozenset())
        return SidebarSnapshot(
            mode=self._mode,
            status=self._status,
            session_id=self._session_id,
            current_path=self._current_path,
            entries=self._entries,
            tree=tuple(tree),
            rows=tuple(rows),
            query=self._query,
            matches=self._matches,
            expanded=self._expanded,
            truncation=self._truncation,
            git_changes_only=self._git_changes_only,
            git_status_overlay=dict(self._git_overlay),
            error=self._error,
        )

    def _notify(self) -> None:
        if self.on_update is not None:
            self.on_update(self.snapshot)

    def _next_token(self, path: str | None) -> RefreshToken:
        self._counter += 1
        self._token = RefreshToken(self._session_id, path, self._counter)
        return self._token

    def _is_current(self, token: RefreshToken) -> bool:
        return token == self._token

    async def open_sidebar(self) -> None:
        """Show the sidebar, loading the view when nothing is loaded yet."""
        if self._open:
            return
        self._open = True
        if self._status in (SidebarStatus.CLOSED, SidebarStatus.NO_SESSION):
            await self.refresh()
        self.monitor.set_active(True)

    def close_sidebar(self) -> None:
        """Hide the sidebar, stop polling, and drop search and expansion state."""
        self._open = False
        self.monitor.set_active(False)
        self._debouncer.cancel()
        self._counter += 1
        self._token = None
        self._last_cwd = None
        self._clear_view()
        self._status = SidebarStatus.CLOSED
        self._notify()

    async def set_session(self, session_id: str | None) -> None:
        """Bind to another session; analysis and selection are kept."""
        self._session_id = session_id
        self._last_cwd = None
        self.monitor.set_session(session_id)
        if self._open:
            await self._load(None, reset_search=True)

    async def refresh(self) -> None:
        """Reload the view for the session's current directory while open."""
        if not self._open:
            return
        await self._load(None, reset_search=False)

    async def switch_mode(self, mode: ViewMode | str | None = None) -> ViewMode:
        """Toggle between flat and tree mode, or switch to ``mode``."""
        target = self._mode.toggled() if mode is None else ViewMode(mode)
        if target is self._mode:
            return target
        self._mode = target
        self._debouncer.cancel()
        if self._persist_mode:
            save_default_mode(target.value)
        logger.debug("Switched to %s", target.label)
        if self._open:
            await self._load(None, reset_search=True)
        else:
            self._notify()
        return target

    async def navigate_to_parent(self) -> None:
        """Load the parent of the current path; no-op at the filesystem root."""
        current = self._current_path
        if current is None:
            return
        parent = parent_path(current)
        if parent is None:
            return
        await self._load(parent, reset_search=True)

    async def navigate_into(self, path: str) -> None:
        """Open directory ``path`` in flat mode; tree mode expands instead."""
        if self._mode is not ViewMode.FLAT:
            return
        await self._load(normalize_path(path), reset_search=True)

    async def _on_cwd_change(self, path: str) -> None:
        if path == self._last_cwd:
            return
        self._last_cwd = path
        if not self._open:
            return
        await self._load(path, reset_search=True)

    async def _load(self, path: str | None, reset_search: bool) -> None:
        token = self._next_token(path)
        session_id = self._session_id
        if session_id is None:
            self._show_no_session()
            return

        mode = self._mode
        target = path
        self._status = SidebarStatus.LOADING
        self._notify()
        try:
            if target is None:
                target = normalize_path(await self._backend.get_working_directory(session_id))
                if self._is_current(token):
                    self._last_cwd = target
            if not self._is_current(token):
                logger.debug("Dropping superseded refresh for session %s", session_id)
                return
            snapshot = await self._fetch_snapshot(mode, target)
            overlay: dict[str, int] = {}
            if mode is ViewMode.TREE and self._git_changes_only and self._is_current(token):
                overlay = await self._git_overlay_for(snapshot.root)
        except SessionError as exc:
            if self._is_current(token):
                logger.warning("Session %s is not available: %s", session_id, exc)
                self._show_no_session()
            else:
                logger.debug("Ignoring failure of superseded refresh: %s", exc)
            return
        except OSError as exc:
            if self._is_current(token):
                self._show_error(target, exc)
            else:
                logger.debug("Ignoring failure of superseded refresh: %s", exc)
            return

        if not self._is_current(token):
            logger.debug("Discarding stale listing of %s", snapshot.root)
            return
        self._apply_snapshot(snapshot, mode, overlay, reset_search)

    async def _fetch_snapshot(self, mode: ViewMode, path: str) -> DirectorySnapshot:
        if mode is ViewMode.TREE:
            return await self._source.list_recursive(path)
        return await self._source.list_one_level(path)

    def _apply_snapshot(
        self,
        snapshot: DirectorySnapshot,
        mode: ViewMode,
        overlay: dict[str, int],
        reset_search: bool,
    ) -> None:
        reset = reset_search or self._loaded != (snapshot.root, mode)
        self._current_path = snapshot.root
        self._entries = snapshot.entries
        self._directory_paths = frozenset(entry.path for entry in snapshot.entries if entry.is_dir)
        self._tree = tuple(build_tree(snapshot.entries, snapshot.root))
        self._error = None

        if mode is ViewMode.TREE:
            self._index.initialize(snapshot.entries, snapshot.root)
            self._truncation = snapshot.truncation_notice()
            self._git_overlay = overlay
            if reset:
                self._reset_search()
            elif self._query.strip():
                self._run_search(self._query)
        else:
            self._index.initialize((), None)
            self._truncation = None
            self._git_overlay = {}
            self._reset_search()

        self._loaded = (snapshot.root, mode)
        self._status = SidebarStatus.READY
        logger.debug("Loaded %d entries for %s (%s)", len(snapshot.entries), snapshot.root, mode.value)
        self._notify()

    def _clear_view(self) -> None:
        self._current_path = None
        self._loaded = None
        self._entries = ()
        self._directory_paths = frozenset()
        self._tree = ()
        self._index.initialize((), None)
        self._truncation = None
        self._git_overlay = {}
        self._error = None
        self._reset_search()

    def _reset_search(self) -> None:
        self._debouncer.cancel()
        self._query = ""
        self._matches = None
        self._expanded = frozenset()

    def _show_no_session(self) -> None:
        self._clear_view()
        self._status = SidebarStatus.NO_SESSION
        self._notify()

    def _show_error(self, path: str | None, exc: Exception) -> None:
        logger.warning("Failed to load directory %s: %s", path or "<cwd>", exc)
        self._clear_view()
        # The failed path stays current for parent navigation.
        self._current_path = path
        self._error = str(exc)
        self._status = SidebarStatus.ERROR
        self._notify()

    def set_search_query(self, text: str) -> None:
        """Record query text and schedule a debounced search (tree mode only)."""
        if self._mode is not ViewMode.TREE:
            return
        self._query = text
        if not text.strip():
            self._debouncer.cancel()
            self._matches = None
        else:
            self._debouncer.submit(text)
        self._notify()

    def apply_search(self, text: str) -> tuple[SearchMatch, ...] | None:
        """Run ``text`` against the index now and auto-expand to the results."""
        if self._mode is not ViewMode.TREE:
            return None
        self._query = text
        self._run_search(text)
        self._notify()
        return self._matches

    def _run_search(self, text: str) -> None:
        matches = self._index.query(text)
        if matches is None:
            self._matches = None
            return
        self._matches = tuple(matches)
        if matches and self._current_path is not None:
            self._expanded = expansion_for_matches(
                (match.path for match in matches),
                self._directory_paths,
                self._current_path,
            )

    def clear_search(self) -> None:
        self._debouncer.cancel()
        self._query = ""
        self._matches = None
        self._notify()

    def toggle_expanded(self, path: str) -> bool:
        """Expand or collapse directory ``path``; return whether it is now expanded."""
        if self._mode is not ViewMode.TREE or path not in self._directory_paths:
            return False
        if path in self._expanded:
            self._expanded = self._expanded - {path}
        else:
            self._expanded = self._expanded | {path}
        self._notify()
        return path in self._expanded

    def expand_all(self) -> None:
        if self._mode is not ViewMode.TREE:
            return
        self._expanded = self._directory_paths
        self._notify()

    async def toggle_git_changes_only(self) -> bool:
        """Flip the git-changes-only filter and fetch the overlay when enabling it."""
        self._git_changes_only = not self._git_changes_only
        if not self._git_changes_only:
            self._git_overlay = {}
        elif self._mode is ViewMode.TREE and self._status is SidebarStatus.READY and self._current_path:
            counter = self._counter
            overlay = await self._git_overlay_for(self._current_path)
            if counter == self._counter and self._git_changes_only:
                self._git_overlay = overlay
        self._notify()
        return self._git_changes_only

    async def _git_overlay_for(self, root: str) -> dict[str, int]:
        cached = self._git_cache.get(root)
        if cached is not None:
            return cached
        fetch = getattr(self._backend, "git_status", None)
        if fetch is None:
            return {}
        try:
            overlay = await fetch(root)
        except OSError as exc:
            logger.warning("Failed to read git status for %s: %s", root, exc)
            return {}
        self._git_cache.set(root, overlay)
        return overlay

    async def send_to_session(self, message: str = "") -> str | None:
        """Send ``message`` plus the tagged selection to the session, then clear it.

        Returns the text that was sent, or ``None`` when there was nothing to
        send. Raises ``SessionError`` when there is no session or the write fails.
        """
        if not message.strip() and not len(self.selection):
            return None
        session_id = self._session_id
        if session_id is None:
            raise SessionError("No session to send to")
        try:
            cwd = normalize_path(await self._backend.get_working_directory(session_id))
            text = self.selection.compose_handoff(message, cwd)
            await self._backend.send_input(session_id, text + "\n")
        except SessionError as exc:
            logger.error("Failed to send input to session %s: %s", session_id, exc)
            raise
        logger.debug("Sent %d selected files to session %s", len(self.selection), session_id)
        self.selection.clear_all()
        self._notify()
        return text


__all__ = [
    "RefreshToken",
    "UpdateCallback",
    "ViewCoordinator",
]
