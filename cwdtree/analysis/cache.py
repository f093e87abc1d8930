"""Per-path cache of file analysis reports.

Entries are created once per path and never invalidated; later
``analyze`` calls for the same path only toggle its expansion flag.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from .symbols import analyze_source

if TYPE_CHECKING:
    from ..host import SessionBackend

logger = logging.getLogger(__name__)

Analyzer = Callable[[str, str], Any]


@dataclass(frozen=True)
class AnalysisError:
    """Marker stored in place of a report when fetching or analysis failed."""

    path: str
    message: str


@dataclass(frozen=True)
class AnalysisEntry:
    """Cached outcome for one path plus its UI expansion flag."""

    path: str
    report: Any = None
    error: AnalysisError | None = None
    expanded: bool = True

    @property
    def failed(self) -> bool:
        return self.error is not None


class AnalysisCache:
    """Fetch, analyze, and remember file reports keyed by path."""

    def __init__(self, backend: SessionBackend, analyzer: Analyzer = analyze_source) -> None:
        self._backend = backend
        self._analyzer = analyzer
        self._entries: dict[str, AnalysisEntry] = {}
        self._in_flight: frozenset[str] = frozenset()

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, path: str) -> AnalysisEntry | None:
        return self._entries.get(path)

    def entries(self) -> dict[str, AnalysisEntry]:
        """Return a read-only copy of the cache contents."""
        return dict(self._entries)

    def is_expanded(self, path: str) -> bool:
        entry = self._entries.get(path)
        return entry is not None and entry.expanded

    def is_pending(self, path: str) -> bool:
        return path in self._in_flight

    def _store(self, entry: AnalysisEntry) -> None:
        self._entries = {**self._entries, entry.path: entry}

    async def analyze(self, path: str) -> AnalysisEntry | None:
        """Analyze ``path`` once, or toggle expansion of its cached entry.

        Returns ``None`` when an analysis of ``path`` is already running.
        """
        cached = self._entries.get(path)
        if cached is not None:
            toggled = replace(cached, expanded=not cached.expanded)
            self._store(toggled)
            return toggled
        if path in self._in_flight:
            return None

        self._in_flight = self._in_flight | {path}
        try:
            entry = await self._fetch_and_analyze(path)
        finally:
            self._in_flight = self._in_flight - {path}
        self._store(entry)
        return entry

    async def _fetch_and_analyze(self, path: str) -> AnalysisEntry:
        try:
            text = await self._backend.read_file_content(path)
        except OSError as exc:
            logger.warning("Failed to read %s for analysis: %s", path, exc)
            return AnalysisEntry(path=path, error=AnalysisError(path, f"Failed to read file: {exc}"))

        try:
            report = self._analyzer(text, path)
        except Exception as exc:
            logger.warning("Analysis of %s failed: %s", path, exc)
            return AnalysisEntry(path=path, error=AnalysisError(path, f"Analysis failed: {exc}"))
        return AnalysisEntry(path=path, report=report)


__all__ = [
    "Analyzer",
    "AnalysisCache",
    "AnalysisEntry",
    "AnalysisError",
]
