# tool_state_sync/scheduler.py
"""
DebounceScheduler - keyed, cancellable deferred actions on the event loop.

Scheduling an action under a key replaces whatever was pending for that
key, so a burst of edits collapses into one call after the last edit.
Once a timer fires its action runs as a task; cancelling afterwards only
affects timers that have not fired yet.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

Action = Callable[[], Awaitable[None]]


class DebounceScheduler:
    """Per-key debounce timers backed by ``loop.call_later``."""

    def __init__(self) -> None:
        self._timers: dict[str, asyncio.TimerHandle] = {}
        self._actions: dict[str, Action] = {}
        self._running: set[asyncio.Task[None]] = set()
        self._closed = False

    def schedule(self, key: str, delay: float, action: Action) -> None:
        """
        Run ``action`` after ``delay`` seconds unless rescheduled or cancelled.

        Must be called from within a running event loop.
        """
        if self._closed:
            logger.debug(f"Scheduler closed, dropping action for {key}")
            return
        self.cancel(key)
        loop = asyncio.get_running_loop()
        self._actions[key] = action
        self._timers[key] = loop.call_later(max(delay, 0.0), self._fire, key)

    def cancel(self, key: str) -> bool:
        """Cancel the pending timer for ``key``. True if one was pending."""
        handle = self._timers.pop(key, None)
        self._actions.pop(key, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def cancel_all(self) -> None:
        for key in list(self._timers):
            self.cancel(key)

    def is_pending(self, key: str) -> bool:
        return key in self._timers

    @property
    def pending_keys(self) -> list[str]:
        return list(self._timers)

    def _fire(self, key: str) -> None:
        self._timers.pop(key, None)
        action = self._actions.pop(key, None)
        if action is None:
            return
        task = asyncio.ensure_future(self._run(key, action))
        self._running.add(task)
        task.add_done_callback(self._running.discard)

    async def _run(self, key: str, action: Action) -> None:
        try:
            await action()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception(f"Deferred action for {key} failed")

    async def flush(self, key: str | None = None) -> None:
        """Fire pending actions now (one key, or all) and wait for them."""
        keys = [key] if key is not None else list(self._timers)
        for k in keys:
            handle = self._timers.pop(k, None)
            action = self._actions.pop(k, None)
            if handle is not None:
                handle.cancel()
            if action is not None:
                await self._run(k, action)
        await self.wait_idle()

    async def wait_idle(self) -> None:
        """Wait for actions whose timers already fired."""
        while self._running:
            await asyncio.gather(*list(self._running), return_exceptions=True)

    async def aclose(self) -> None:
        """Cancel every pending timer and let in-flight actions finish."""
        self._closed = True
        self.cancel_all()
        await self.wait_idle()
