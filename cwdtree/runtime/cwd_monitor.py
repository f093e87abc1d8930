"""Polling watcher for a terminal session's working directory.

The monitor only reports changes; it never touches tree state.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from ..errors import SessionError
from ..paths import normalize_path
from .config import DEFAULT_POLL_INTERVAL_SECONDS

if TYPE_CHECKING:
    from ..host import SessionBackend

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[str], Awaitable[None]]


class CwdMonitor:
    """Emit ``on_change(path)`` whenever the bound session's CWD moves.

    The first observation after ``set_session`` counts as a change. Nothing
    is emitted while inactive or without a session, and a reply that lands
    after the session was switched is discarded.
    """

    def __init__(
        self,
        backend: SessionBackend,
        on_change: ChangeCallback,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
    ) -> None:
        self._backend = backend
        self._on_change = on_change
        self.poll_interval = poll_interval
        self._session_id: str | None = None
        self._last_cwd: str | None = None
        self._epoch = 0
        self._active = False
        self._task: asyncio.Task[None] | None = None

    @property
    def session_id(self) -> str | None:
        return self._session_id

    @property
    def active(self) -> bool:
        return self._active

    @property
    def last_cwd(self) -> str | None:
        return self._last_cwd

    def set_session(self, session_id: str | None) -> None:
        """Bind to ``session_id`` and forget the last observed directory."""
        self._session_id = session_id
        self._last_cwd = None
        self._epoch += 1
        self._cancel_task()
        if self._active:
            self._start_task()

    def set_active(self, active: bool) -> None:
        """Start or cancel background polling."""
        self._active = active
        if active:
            self._start_task()
        else:
            self._cancel_task()

    def stop(self) -> None:
        self.set_active(False)

    async def poll_once(self) -> str | None:
        """Query the session once; return the new CWD when a change was emitted."""
        session_id = self._session_id
        if not self._active or session_id is None:
            return None
        epoch = self._epoch
        try:
            cwd = await self._backend.get_working_directory(session_id)
        except SessionError as exc:
            logger.warning("Failed to read working directory of session %s: %s", session_id, exc)
            return None

        if epoch != self._epoch or not self._active:
            logger.debug("Discarding working directory reply for replaced session %s", session_id)
            return None

        cwd = normalize_path(cwd)
        if cwd == self._last_cwd:
            return None
        self._last_cwd = cwd
        logger.debug("Session %s moved to %s", session_id, cwd)
        await self._on_change(cwd)
        return cwd

    async def _poll_loop(self) -> None:
        while True:
            try:
                await self.poll_once()
            except Exception:
                logger.exception("Working directory poll failed for session %s", self._session_id)
            await asyncio.sleep(self.poll_interval)

    def _start_task(self) -> None:
        if self._session_id is None:
            return
        if self._task is not None and not self._task.done():
            return
        self._task = asyncio.get_running_loop().create_task(self._poll_loop())

    def _cancel_task(self) -> None:
        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()


__all__ = [
    "ChangeCallback",
    "CwdMonitor",
]
