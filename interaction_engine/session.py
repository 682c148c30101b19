"""InteractionSession: per-session interaction state for one session view.

Replaces the hook-local state of the meeting room view with a single,
explicit container that owns one event source and one instance of each
component. ``close()`` is the teardown path: it removes every listener and
cancels the idle poller so nothing fires against a dead session.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from interaction_engine.config import EngineSettings
from interaction_engine.events import EventSource, InputEvent
from interaction_engine.events.source import Callback
from interaction_engine.interaction import (
    ActivityMonitor,
    BreakoutRoomAssigner,
    Participant,
    PushToTalkController,
    ShortcutAction,
    ShortcutRouter,
    WhiteboardHistory,
)
from interaction_engine.utils import generate_session_id

logger = logging.getLogger(__name__)


@dataclass
class InteractionSession:
    """All interaction state for a single session view."""

    session_id: str
    source: EventSource
    activity: ActivityMonitor
    push_to_talk: PushToTalkController
    shortcuts: ShortcutRouter
    breakout: BreakoutRoomAssigner
    whiteboard: WhiteboardHistory
    started: bool = False
    closed: bool = False
    metrics: dict[str, int] = field(default_factory=lambda: {
        "event_count": 0,
        "default_prevented_count": 0,
    })

    @classmethod
    def create(
        cls,
        participants: Iterable[Participant],
        settings: EngineSettings | None = None,
        *,
        session_id: str | None = None,
        mic_enabled: bool = True,
        on_idle: Callback | None = None,
        on_active: Callback | None = None,
        on_ptt_activate: Callback | None = None,
        on_ptt_deactivate: Callback | None = None,
        shortcut_handlers: dict[ShortcutAction | str, Callback] | None = None,
        **activity_kwargs: Any,
    ) -> "InteractionSession":
        settings = settings or EngineSettings()
        source = EventSource()
        return cls(
            session_id=session_id or generate_session_id(),
            source=source,
            activity=ActivityMonitor(
                source,
                timeout_ms=settings.idle_timeout_ms,
                poll_interval_ms=settings.idle_poll_interval_ms,
                on_idle=on_idle,
                on_active=on_active,
                **activity_kwargs,
            ),
            push_to_talk=PushToTalkController(
                source,
                is_enabled=mic_enabled,
                key=settings.ptt_key,
                on_activate=on_ptt_activate,
                on_deactivate=on_ptt_deactivate,
            ),
            shortcuts=ShortcutRouter(source, shortcut_handlers),
            breakout=BreakoutRoomAssigner(participants),
            whiteboard=WhiteboardHistory(),
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Attach listeners and start the idle poller (needs a running loop)."""
        if self.started or self.closed:
            return
        self.activity.start()
        self.shortcuts.start()
        self.started = True
        logger.info("[Session] %s started", self.session_id)

    def close(self) -> None:
        if self.closed:
            return
        self.activity.close()
        self.push_to_talk.close()
        self.shortcuts.close()
        self.source.clear()
        self.closed = True
        logger.info("[Session] %s closed", self.session_id)

    # ------------------------------------------------------------------
    # Events and rendering
    # ------------------------------------------------------------------

    async def dispatch(self, event: InputEvent) -> InputEvent:
        if self.closed:
            logger.debug("[Session] %s closed, dropping %s", self.session_id, event.type)
            return event
        self.metrics["event_count"] += 1
        await self.source.dispatch(event)
        if event.default_prevented:
            self.metrics["default_prevented_count"] += 1
        return event

    @property
    def controls_visible(self) -> bool:
        """Meeting controls auto-hide while idle, unless PTT mode pins them."""
        return not self.activity.is_idle or self.push_to_talk.is_ptt_mode

    def snapshot(self) -> dict[str, Any]:
        breakout = self.breakout.to_dict()
        return {
            "session_id": self.session_id,
            "rooms": breakout["rooms"],
            "unassigned_participants": breakout["unassigned"],
            "assignments": breakout["assignments"],
            "annotations": self.whiteboard.to_dict()["annotations"],
            "can_undo": self.whiteboard.can_undo,
            "is_idle": self.activity.is_idle,
            "ptt_mode": self.push_to_talk.is_ptt_mode,
            "ptt_pressed": self.push_to_talk.is_pressed,
            "controls_visible": self.controls_visible,
        }
