"""In-memory ``SessionBackend`` used by runtime tests."""

from __future__ import annotations

import asyncio
import posixpath

from cwdtree.errors import SessionError
from cwdtree.file_tree_model.types import DirectoryEntry


def entry(path: str, is_dir: bool = False, parent: str | None = None, depth: int = 1) -> DirectoryEntry:
    return DirectoryEntry(
        path=path,
        name=posixpath.basename(path),
        is_dir=is_dir,
        parent_path=parent if parent is not None else posixpath.dirname(path),
        depth=depth,
    )


class FakeBackend:
    """Directories and files described by absolute paths; dirs end with ``/``."""

    def __init__(self, paths: list[str] = (), cwd: str = "/", session_id: str = "session-1") -> None:
        self.cwds: dict[str, str] = {session_id: cwd}
        self.dirs: set[str] = {"/"}
        self.files: dict[str, str] = {}
        self.failing: set[str] = set()
        self.gates: dict[str, asyncio.Event] = {}
        self.git_overlays: dict[str, dict[str, int]] = {}
        self.sent: list[tuple[str, str]] = []
        self.calls: list[tuple[str, str]] = []
        for path in paths:
            self.add(path)

    def add(self, path: str, content: str = "") -> None:
        is_dir = path.endswith("/") and path != "/"
        path = path.rstrip("/") or "/"
        parent = posixpath.dirname(path)
        while parent not in self.dirs:
            self.dirs.add(parent)
            parent = posixpath.dirname(parent)
        if is_dir:
            self.dirs.add(path)
        else:
            self.files[path] = content

    def block(self, path: str) -> asyncio.Event:
        gate = asyncio.Event()
        self.gates[path] = gate
        return gate

    async def _wait_gate(self, path: str) -> None:
        gate = self.gates.get(path)
        if gate is not None:
            await gate.wait()

    def _children(self, path: str) -> list[tuple[str, bool]]:
        rows = [(child, True) for child in self.dirs if child != "/" and posixpath.dirname(child) == path]
        rows += [(child, False) for child in self.files if posixpath.dirname(child) == path]
        rows.sort(key=lambda row: (not row[1], posixpath.basename(row[0]).lower()))
        return rows

    async def get_working_directory(self, session_id: str) -> str:
        self.calls.append(("cwd", session_id))
        await self._wait_gate(f"cwd:{session_id}")
        if session_id not in self.cwds:
            raise SessionError(f"Session not found: {session_id}", session_id)
        return self.cwds[session_id]

    async def list_directory(self, path: str) -> list[DirectoryEntry]:
        self.calls.append(("list", path))
        await self._wait_gate(path)
        if path in self.failing or path not in self.dirs:
            raise OSError(f"cannot read {path}")
        return [entry(child, is_dir, parent=path) for child, is_dir in self._children(path)]

    async def list_directory_recursive(self, path: str, max_depth: int, max_entries: int) -> list[DirectoryEntry]:
        self.calls.append(("walk", path))
        await self._wait_gate(path)
        if path in self.failing or path not in self.dirs:
            raise OSError(f"cannot read {path}")
        out: list[DirectoryEntry] = []

        def walk(current: str, depth: int) -> None:
            for child, is_dir in self._children(current):
                if len(out) >= max_entries:
                    return
                out.append(entry(child, is_dir, parent=current, depth=depth))
                if is_dir and depth < max_depth:
                    walk(child, depth + 1)

        walk(path, 1)
        return out

    async def read_file_content(self, path: str) -> str:
        self.calls.append(("read", path))
        await self._wait_gate(path)
        if path not in self.files:
            raise FileNotFoundError(path)
        return self.files[path]

    async def send_input(self, session_id: str, text: str) -> None:
        if session_id not in self.cwds:
            raise SessionError(f"Session not found: {session_id}", session_id)
        self.sent.append((session_id, text))

    async def git_status(self, path: str) -> dict[str, int]:
        self.calls.append(("git", path))
        return dict(self.git_overlays.get(path, {}))
