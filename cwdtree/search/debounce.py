"""Latest-wins debouncing of search queries on the running event loop."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.2


class QueryDebouncer:
    """Run ``execute(text)`` once input has been quiet for ``delay`` seconds.

    Every ``submit`` cancels the pending run, so a burst of keystrokes only
    executes the last text. A run that has already started is not cancelled.
    """

    def __init__(
        self,
        execute: Callable[[str], Awaitable[None] | None],
        delay: float = DEFAULT_DEBOUNCE_SECONDS,
    ) -> None:
        self._execute = execute
        self.delay = delay
        self._task: asyncio.Task[None] | None = None
        self._running: asyncio.Task[None] | None = None
        self._pending_text: str | None = None

    @property
    def pending(self) -> str | None:
        """Text scheduled to run, or ``None`` when idle."""
        return self._pending_text

    def submit(self, text: str) -> None:
        """Schedule ``text``, superseding any pending query."""
        self.cancel()
        self._pending_text = text
        self._task = asyncio.get_running_loop().create_task(self._run_later(text))

    def cancel(self) -> None:
        """Drop the pending query without running it."""
        task = self._task
        self._task = None
        self._pending_text = None
        if task is not None and not task.done():
            task.cancel()

    async def flush(self) -> None:
        """Run the pending query now instead of waiting out the quiet period."""
        text = self._pending_text
        if text is None:
            return
        self.cancel()
        await self._run(text)

    async def wait(self) -> None:
        """Wait until the scheduled or running query has finished."""
        while True:
            task = self._task or self._running
            if task is None:
                return
            try:
                await asyncio.shield(task)
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise

    async def _run_later(self, text: str) -> None:
        await asyncio.sleep(self.delay)
        current = asyncio.current_task()
        # Past the quiet period the run is no longer pending and cannot be superseded.
        self._task = None
        self._pending_text = None
        self._running = current
        try:
            await self._run(text)
        finally:
            if self._running is current:
                self._running = None

    async def _run(self, text: str) -> None:
        logger.debug("Running debounced query %r", text)
        result = self._execute(text)
        if inspect.isawaitable(result):
            await result


__all__ = [
    "DEFAULT_DEBOUNCE_SECONDS",
    "QueryDebouncer",
]
