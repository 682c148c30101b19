"""ActivityMonitor: idle/active detection from user input.

Any recognised activity event refreshes the last-activity timestamp. A
poller running at a fixed cadence flips the monitor to idle once the
timeout has elapsed. Both transitions are edge-triggered: ``on_idle`` and
``on_active`` fire once per state change, never per event or per tick.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from interaction_engine.constants import (
    ACTIVITY_EVENT_TYPES,
    IDLE_POLL_INTERVAL_MS,
    IDLE_TIMEOUT_MS,
)
from interaction_engine.events import EventSource, InputEvent, invoke_callback
from interaction_engine.events.source import Callback

logger = logging.getLogger(__name__)


@dataclass
class ActivityState:
    last_activity: float
    idle: bool = False


class ActivityMonitor:
    """Tracks whether the user has gone quiet for ``timeout_ms``.

    Parameters
    ----------
    source : EventSource
        Where activity events arrive.
    timeout_ms : int
        Inactivity (ms) before the monitor reports idle.
    poll_interval_ms : int
        Cadence of the idle check.
    clock : Callable[[], float]
        Monotonic clock in seconds; injectable for tests.
    """

    def __init__(
        self,
        source: EventSource,
        *,
        timeout_ms: int = IDLE_TIMEOUT_MS,
        poll_interval_ms: int = IDLE_POLL_INTERVAL_MS,
        on_idle: Callback | None = None,
        on_active: Callback | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._source = source
        self._timeout = timeout_ms / 1000.0
        self._poll_interval = poll_interval_ms / 1000.0
        self._clock = clock

        self.state = ActivityState(last_activity=clock())
        self._poll_task: asyncio.Task | None = None
        self._attached = False

        self.on_idle = on_idle
        self.on_active = on_active

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def is_idle(self) -> bool:
        return self.state.idle

    @property
    def last_activity(self) -> float:
        return self.state.last_activity

    def start(self) -> None:
        """Attach activity listeners and start the idle poller."""
        if not self._attached:
            for event_type in ACTIVITY_EVENT_TYPES:
                self._source.add_listener(event_type, self.handle_activity)
            self._attached = True
        if self._poll_task is None:
            self._poll_task = asyncio.create_task(self._poll())
            logger.debug("[Activity] Poller started (timeout=%.1fs)", self._timeout)

    def close(self) -> None:
        """Detach listeners and cancel the poller."""
        if self._attached:
            for event_type in ACTIVITY_EVENT_TYPES:
                self._source.remove_listener(event_type, self.handle_activity)
            self._attached = False
        if self._poll_task is not None:
            self._poll_task.cancel()
            self._poll_task = None
            logger.debug("[Activity] Poller stopped.")

    async def handle_activity(self, event: InputEvent | None = None) -> None:
        """Record activity; wakes the monitor if it was idle."""
        self.state.last_activity = self._clock()
        if not self.state.idle:
            return
        self.state.idle = False
        logger.info("[Activity] idle → active")
        await invoke_callback(self.on_active)

    async def check(self) -> bool:
        """Run one idle check. Returns True if this call entered idle."""
        if self.state.idle:
            return False
        if self._clock() - self.state.last_activity < self._timeout:
            return False
        self.state.idle = True
        logger.info("[Activity] active → idle")
        await invoke_callback(self.on_idle)
        return True

    def reset_idle(self) -> None:
        """Force the active state without firing ``on_active``."""
        self.state.last_activity = self._clock()
        self.state.idle = False

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _poll(self) -> None:
        while True:
            await asyncio.sleep(self._poll_interval)
            try:
                await self.check()
            except Exception as exc:
                logger.error("[Activity] on_idle callback failed: %s", exc, exc_info=True)
