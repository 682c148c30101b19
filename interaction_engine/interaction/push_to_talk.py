"""PushToTalkController: hold-to-transmit key state machine.

Listeners are attached only while both the external gate (``is_enabled``,
e.g. microphone permission) and PTT mode are on. A latch makes key-repeat
keydowns idempotent, so ``on_activate`` fires once per physical press.
"""

from __future__ import annotations

import logging

from interaction_engine.constants import PTT_DEFAULT_KEY
from interaction_engine.events import EventSource, InputEvent, invoke_callback
from interaction_engine.events.source import Callback

logger = logging.getLogger(__name__)


class PushToTalkController:
    """Edge-triggered press/release tracking for one key.

    ``pressed`` is only ever True while PTT mode is on: disabling the mode or
    dropping the gate resets it directly, without calling ``on_deactivate``.
    """

    def __init__(
        self,
        source: EventSource,
        *,
        is_enabled: bool = False,
        key: str = PTT_DEFAULT_KEY,
        on_activate: Callback | None = None,
        on_deactivate: Callback | None = None,
    ) -> None:
        self._source = source
        self.key = key
        self._is_enabled = is_enabled
        self._ptt_mode = False
        self._pressed = False
        self._latched = False
        self._attached = False

        self.on_activate = on_activate
        self.on_deactivate = on_deactivate

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_pressed(self) -> bool:
        return self._pressed

    @property
    def is_ptt_mode(self) -> bool:
        return self._ptt_mode

    @property
    def is_enabled(self) -> bool:
        return self._is_enabled

    @property
    def is_listening(self) -> bool:
        return self._attached

    # ------------------------------------------------------------------
    # Mode and gate
    # ------------------------------------------------------------------

    def set_enabled(self, enabled: bool) -> None:
        self._is_enabled = enabled
        if not enabled:
            self._release_silently()
        self._sync_listeners()

    def enable_ptt_mode(self) -> None:
        self._ptt_mode = True
        logger.info("[PTT] Mode on")
        self._sync_listeners()

    def disable_ptt_mode(self) -> None:
        self._ptt_mode = False
        self._release_silently()
        logger.info("[PTT] Mode off")
        self._sync_listeners()

    def toggle_ptt_mode(self) -> None:
        if self._ptt_mode:
            self.disable_ptt_mode()
        else:
            self.enable_ptt_mode()

    def close(self) -> None:
        self._detach()

    # ------------------------------------------------------------------
    # Key handlers
    # ------------------------------------------------------------------

    async def handle_keydown(self, event: InputEvent) -> None:
        if event.target.is_text_entry or event.key != self.key or self._latched:
            return
        event.prevent_default()
        self._latched = True
        self._pressed = True
        logger.debug("[PTT] Pressed")
        await invoke_callback(self.on_activate)

    async def handle_keyup(self, event: InputEvent) -> None:
        if event.target.is_text_entry or event.key != self.key or not self._latched:
            return
        event.prevent_default()
        self._latched = False
        self._pressed = False
        logger.debug("[PTT] Released")
        await invoke_callback(self.on_deactivate)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _release_silently(self) -> None:
        if self._pressed:
            logger.info("[PTT] Press dropped without deactivation callback")
        self._pressed = False
        self._latched = False

    def _sync_listeners(self) -> None:
        if self._is_enabled and self._ptt_mode:
            self._attach()
        else:
            self._detach()

    def _attach(self) -> None:
        if self._attached:
            return
        self._source.add_listener("keydown", self.handle_keydown)
        self._source.add_listener("keyup", self.handle_keyup)
        self._attached = True

    def _detach(self) -> None:
        if not self._attached:
            return
        self._source.remove_listener("keydown", self.handle_keydown)
        self._source.remove_listener("keyup", self.handle_keyup)
        self._attached = False
