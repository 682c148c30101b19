"""Input event models delivered by the host's event source."""

from __future__ import annotations

from pydantic import BaseModel, Field

from interaction_engine.constants import TEXT_ENTRY_TAGS


class EventTarget(BaseModel):
    """The element an input event was dispatched to."""

    tag_name: str = "BODY"
    is_content_editable: bool = False

    @property
    def is_text_entry(self) -> bool:
        """True for ``<input>`` and ``<textarea>`` elements."""
        return self.tag_name.upper() in TEXT_ENTRY_TAGS

    @property
    def is_editable(self) -> bool:
        """True for text entry elements and content-editable regions."""
        return self.is_text_entry or self.is_content_editable


class InputEvent(BaseModel):
    """A keyboard, pointer, touch or scroll event.

    Handlers call ``prevent_default()`` to suppress the browser's default
    action; the host reads ``default_prevented`` back after dispatch.
    """

    type: str
    key: str = ""
    target: EventTarget = Field(default_factory=EventTarget)
    meta_key: bool = False
    ctrl_key: bool = False
    default_prevented: bool = False

    def prevent_default(self) -> None:
        self.default_prevented = True
