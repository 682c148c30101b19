"""ShortcutRouter: single-key meeting shortcuts.

Keys are matched case-insensitively. Typing into an input, a textarea or
a content-editable region never triggers a shortcut.
"""

from __future__ import annotations

import enum
import logging
from typing import Optional

from interaction_engine.events import EventSource, InputEvent, invoke_callback
from interaction_engine.events.source import Callback

logger = logging.getLogger(__name__)


class ShortcutAction(str, enum.Enum):
    TOGGLE_MUTE = "toggle_mute"
    TOGGLE_VIDEO = "toggle_video"
    TOGGLE_SCREEN_SHARE = "toggle_screen_share"
    TOGGLE_RAISE_HAND = "toggle_raise_hand"
    TOGGLE_AI = "toggle_ai"
    TOGGLE_RECORDING = "toggle_recording"
    TOGGLE_CHAT = "toggle_chat"
    TOGGLE_PARTICIPANTS = "toggle_participants"
    END_CALL = "end_call"


KEY_BINDINGS: dict[str, ShortcutAction] = {
    "m": ShortcutAction.TOGGLE_MUTE,
    "v": ShortcutAction.TOGGLE_VIDEO,
    "s": ShortcutAction.TOGGLE_SCREEN_SHARE,
    "h": ShortcutAction.TOGGLE_RAISE_HAND,
    "a": ShortcutAction.TOGGLE_AI,
    "r": ShortcutAction.TOGGLE_RECORDING,
    "c": ShortcutAction.TOGGLE_CHAT,
    "p": ShortcutAction.TOGGLE_PARTICIPANTS,
}

# Requires the meta (Cmd) or ctrl modifier
MODIFIED_BINDINGS: dict[str, ShortcutAction] = {
    "escape": ShortcutAction.END_CALL,
}

# Hint table shown next to the meeting controls
SHORTCUT_HELP: tuple[tuple[str, str], ...] = (
    ("M", "Toggle mute"),
    ("V", "Toggle video"),
    ("S", "Screen share"),
    ("H", "Raise hand"),
    ("A", "AI assistant"),
    ("R", "Recording"),
    ("C", "Toggle chat"),
    ("P", "Participants"),
    ("Space", "Push-to-talk"),
    ("Ctrl/Cmd+Esc", "End call"),
)


def resolve_action(event: InputEvent) -> Optional[ShortcutAction]:
    """Map a keydown event to its shortcut action, if any."""
    if event.target.is_editable:
        return None
    key = event.key.lower()
    if key in KEY_BINDINGS:
        return KEY_BINDINGS[key]
    if key in MODIFIED_BINDINGS and (event.meta_key or event.ctrl_key):
        return MODIFIED_BINDINGS[key]
    return None


class ShortcutRouter:
    """Routes keydown events to host-bound handlers."""

    def __init__(
        self,
        source: EventSource,
        handlers: dict[ShortcutAction | str, Callback] | None = None,
    ) -> None:
        self._source = source
        self._handlers: dict[ShortcutAction, Callback] = {}
        self._attached = False
        for action, handler in (handlers or {}).items():
            self.bind(action, handler)

    def bind(self, action: ShortcutAction | str, handler: Callback) -> None:
        self._handlers[ShortcutAction(action)] = handler

    def unbind(self, action: ShortcutAction | str) -> None:
        self._handlers.pop(ShortcutAction(action), None)

    def shortcut_help(self) -> list[dict[str, str]]:
        return [{"key": key, "label": label} for key, label in SHORTCUT_HELP]

    def start(self) -> None:
        if not self._attached:
            self._source.add_listener("keydown", self.handle_keydown)
            self._attached = True

    def close(self) -> None:
        if self._attached:
            self._source.remove_listener("keydown", self.handle_keydown)
            self._attached = False

    async def handle_keydown(self, event: InputEvent) -> Optional[ShortcutAction]:
        action = resolve_action(event)
        if action is None:
            return None
        event.prevent_default()
        handler = self._handlers.get(action)
        if handler is None:
            logger.debug("[Shortcuts] %s has no handler bound", action.value)
            return action
        logger.debug("[Shortcuts] %r → %s", event.key, action.value)
        await invoke_callback(handler)
        return action
