"""Terminal-session capability consumed by the sidebar runtime.

``SessionBackend`` is the async interface the runtime depends on.
``LocalBackend`` implements it for processes on this machine: it lists the
local filesystem and reads a process's working directory from ``/proc``.
"""

from __future__ import annotations

import asyncio
import logging
import os
import subprocess
import sys
import uuid
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from .errors import SessionError
from .file_tree_model.fs import list_directory_entries, walk_directory_entries
from .file_tree_model.types import DirectoryEntry
from .git_status import collect_git_status_overlay
from .paths import normalize_path

logger = logging.getLogger(__name__)


@runtime_checkable
class SessionBackend(Protocol):
    """Async capability surface provided by the terminal host."""

    async def get_working_directory(self, session_id: str) -> str: ...

    async def list_directory(self, path: str) -> list[DirectoryEntry]: ...

    async def list_directory_recursive(
        self,
        path: str,
        max_depth: int,
        max_entries: int,
    ) -> list[DirectoryEntry]: ...

    async def read_file_content(self, path: str) -> str: ...

    async def send_input(self, session_id: str, text: str) -> None: ...


@dataclass
class LocalSession:
    """A process whose working directory the sidebar follows."""

    session_id: str
    pid: int
    process: subprocess.Popen[str] | None = None

    @property
    def accepts_input(self) -> bool:
        return self.process is not None and self.process.stdin is not None


def read_process_cwd(pid: int) -> str:
    """Return the current directory of process ``pid`` via ``/proc``.

    Raises ``SessionError`` when the process is gone or ``/proc`` is not
    available on this platform.
    """
    if not sys.platform.startswith("linux"):
        raise SessionError("Reading a process working directory is only supported on Linux")
    try:
        return normalize_path(os.readlink(f"/proc/{pid}/cwd"))
    except OSError as exc:
        raise SessionError(f"Failed to read cwd of process {pid}: {exc}") from exc


class LocalBackend:
    """``SessionBackend`` for local processes and the local filesystem."""

    def __init__(self) -> None:
        self._sessions: dict[str, LocalSession] = {}

    def attach(self, pid: int) -> str:
        """Follow an existing process; input cannot be sent to it."""
        session_id = str(uuid.uuid4())
        self._sessions[session_id] = LocalSession(session_id=session_id, pid=pid)
        logger.debug("Attached session %s to pid %d", session_id, pid)
        return session_id

    def spawn_shell(self, shell: str | None = None, cwd: str | None = None) -> str:
        """Start a shell with a stdin pipe and register it as a session."""
        command = shell or os.environ.get("SHELL") or "/bin/sh"
        process = subprocess.Popen(
            [command],
            stdin=subprocess.PIPE,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            cwd=cwd,
            text=True,
        )
        session_id = str(uuid.uuid4())
        self._sessions[session_id] = LocalSession(
            session_id=session_id,
            pid=process.pid,
            process=process,
        )
        logger.debug("Spawned %s as session %s (pid %d)", command, session_id, process.pid)
        return session_id

    def close(self, session_id: str) -> None:
        """Forget a session, terminating it when it was spawned here."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            raise SessionError(f"Session not found: {session_id}", session_id)
        if session.process is not None and session.process.poll() is None:
            if session.process.stdin is not None:
                session.process.stdin.close()
            session.process.terminate()
            session.process.wait(timeout=5)

    def _session(self, session_id: str) -> LocalSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionError(f"Session not found: {session_id}", session_id)
        return session

    async def get_working_directory(self, session_id: str) -> str:
        session = self._session(session_id)
        return await asyncio.to_thread(read_process_cwd, session.pid)

    async def list_directory(self, path: str) -> list[DirectoryEntry]:
        return await asyncio.to_thread(list_directory_entries, path)

    async def list_directory_recursive(
        self,
        path: str,
        max_depth: int,
        max_entries: int,
    ) -> list[DirectoryEntry]:
        return await asyncio.to_thread(walk_directory_entries, path, max_depth, max_entries)

    async def read_file_content(self, path: str) -> str:
        def read() -> str:
            with open(path, "rb") as handle:
                data = handle.read()
            try:
                return data.decode("utf-8-sig")
            except UnicodeDecodeError:
                return data.decode("latin-1")

        return await asyncio.to_thread(read)

    async def send_input(self, session_id: str, text: str) -> None:
        session = self._session(session_id)
        if not session.accepts_input:
            raise SessionError(f"Session {session_id} does not accept input", session_id)
        assert session.process is not None and session.process.stdin is not None
        stdin = session.process.stdin

        def write() -> None:
            stdin.write(text)
            stdin.flush()

        try:
            await asyncio.to_thread(write)
        except (BrokenPipeError, ValueError) as exc:
            raise SessionError(f"Session {session_id} closed its input: {exc}", session_id) from exc

    async def git_status(self, path: str) -> dict[str, int]:
        return await asyncio.to_thread(collect_git_status_overlay, path)


__all__ = [
    "SessionBackend",
    "LocalSession",
    "LocalBackend",
    "read_process_cwd",
]
