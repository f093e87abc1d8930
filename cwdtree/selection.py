"""Selected files, their per-file tags, and the hand-off text built from them."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from .paths import relative_path, shell_quote


class FileState(str, Enum):
    """How the receiving process should treat a selected file."""

    MODIFY = "modify"
    DO_NOT_MODIFY = "do-not-modify"
    USE_AS_EXAMPLE = "use-as-example"


DEFAULT_FILE_STATE = FileState.MODIFY
HANDOFF_SECTIONS: tuple[tuple[FileState, str], ...] = (
    (FileState.MODIFY, "Modify"),
    (FileState.DO_NOT_MODIFY, "Do not modify"),
    (FileState.USE_AS_EXAMPLE, "Use as example"),
)


def format_for_handoff(paths: Iterable[str], cwd: str) -> list[str]:
    """Return shell-safe references to ``paths`` relative to ``cwd``.

    ``cwd`` itself becomes ``.``; paths outside ``cwd`` stay absolute.
    """
    return [shell_quote(relative_path(path, cwd)) for path in paths]


class SelectionStore:
    """Insertion-ordered mapping of selected paths to their ``FileState``.

    Removing a path forgets its tag, so re-selecting starts from ``MODIFY``.
    """

    def __init__(self) -> None:
        self._states: dict[str, FileState] = {}

    def __contains__(self, path: object) -> bool:
        return path in self._states

    def __len__(self) -> int:
        return len(self._states)

    def paths(self) -> list[str]:
        return list(self._states)

    def items(self) -> list[tuple[str, FileState]]:
        return list(self._states.items())

    def state_of(self, path: str) -> FileState | None:
        return self._states.get(path)

    def select(self, path: str) -> None:
        if path not in self._states:
            self._states = {**self._states, path: DEFAULT_FILE_STATE}

    def toggle_select(self, path: str) -> bool:
        """Select or deselect ``path``; return whether it is now selected."""
        if path in self._states:
            self.remove(path)
            return False
        self.select(path)
        return True

    def set_state(self, path: str, state: FileState | str) -> None:
        """Tag ``path``, selecting it first when needed."""
        self._states = {**self._states, path: FileState(state)}

    def remove(self, path: str) -> None:
        if path in self._states:
            self._states = {key: value for key, value in self._states.items() if key != path}

    def clear_all(self) -> None:
        self._states = {}

    def compose_handoff(self, message: str, cwd: str) -> str:
        """Build the text sent to the session: message plus tagged file references.

        Each non-empty tag group becomes one ``"<Label>: ref ref"`` line.
        """
        lines: list[str] = []
        if message.strip():
            lines.append(message.rstrip())
        for state, label in HANDOFF_SECTIONS:
            tagged = [path for path, path_state in self._states.items() if path_state is state]
            if tagged:
                lines.append(f"{label}: {' '.join(format_for_handoff(tagged, cwd))}")
        return "\n".join(lines)


__all__ = [
    "FileState",
    "DEFAULT_FILE_STATE",
    "HANDOFF_SECTIONS",
    "format_for_handoff",
    "SelectionStore",
]
