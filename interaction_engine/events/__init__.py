"""Input event models and the listener registry that delivers them."""

from interaction_engine.events.models import EventTarget, InputEvent
from interaction_engine.events.source import EventSource, invoke_callback

__all__ = ["EventSource", "EventTarget", "InputEvent", "invoke_callback"]
