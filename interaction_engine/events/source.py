"""EventSource: the in-process stand-in for the browser window.

Components register listeners per event type and must remove them on
teardown. The host feeds every client event through ``dispatch``.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Union

from interaction_engine.events.models import InputEvent

logger = logging.getLogger(__name__)

Listener = Callable[[InputEvent], Awaitable[None]]
Callback = Callable[..., Union[Awaitable[None], None]]


async def invoke_callback(callback: Callback | None, *args: Any) -> None:
    """Invoke an optional host callback, awaiting it when it is a coroutine."""
    if callback is None:
        return
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


class EventSource:
    """Ordered listener registry keyed on event type."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def add_listener(self, event_type: str, listener: Listener) -> None:
        """Register *listener*; registering the same one twice is a no-op."""
        listeners = self._listeners.setdefault(event_type, [])
        if listener not in listeners:
            listeners.append(listener)

    def remove_listener(self, event_type: str, listener: Listener) -> None:
        listeners = self._listeners.get(event_type)
        if not listeners or listener not in listeners:
            return
        listeners.remove(listener)
        if not listeners:
            del self._listeners[event_type]

    def listener_count(self, event_type: str | None = None) -> int:
        if event_type is not None:
            return len(self._listeners.get(event_type, ()))
        return sum(len(v) for v in self._listeners.values())

    async def dispatch(self, event: InputEvent) -> InputEvent:
        """Deliver *event* to every listener registered for its type.

        Listeners run in registration order against a copy of the list, so a
        listener may detach itself (or others) mid-dispatch.
        """
        for listener in list(self._listeners.get(event.type, ())):
            await listener(event)
        if event.default_prevented:
            logger.debug("[EventSource] Default prevented for %s %r", event.type, event.key)
        return event

    def clear(self) -> None:
        self._listeners.clear()
