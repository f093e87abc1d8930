"""Error taxonomy shared by the capability backend and the sidebar runtime.

Directory and file read failures use the built-in ``OSError`` family.
"""

from __future__ import annotations

from dataclasses import dataclass


class CwdTreeError(Exception):
    """Base class for cwdtree-specific failures."""


class SessionError(CwdTreeError):
    """Raised when a terminal session id is missing, unknown, or unusable."""

    def __init__(self, message: str, session_id: str | None = None) -> None:
        super().__init__(message)
        self.session_id = session_id


@dataclass(frozen=True)
class TruncationNotice:
    """Non-fatal signal that a recursive listing hit its entry bound."""

    root: str
    max_entries: int
    max_depth: int

    def message(self) -> str:
        return f"Listing of {self.root} truncated at {self.max_entries} entries"


__all__ = [
    "CwdTreeError",
    "SessionError",
    "TruncationNotice",
]
