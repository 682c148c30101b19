"""Shared fixtures: the meeting directory and a controllable clock."""

import pytest

from interaction_engine.events import EventSource, EventTarget, InputEvent
from interaction_engine.interaction import Participant, RoleCard


class FakeClock:
    """Monotonic clock in seconds that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def participants() -> list[Participant]:
    return [
        Participant(
            id="1",
            name="Sarah Chen",
            role=RoleCard(title="Engineering Lead", department="Product Engineering", authority_level="lead"),
            is_host=True,
        ),
        Participant(id="2", name="Marcus Johnson"),
        Participant(id="3", name="Emily Rodriguez"),
        Participant(id="4", name="David Kim"),
        Participant(id="ai", name="Nova AI", is_ai=True),
    ]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def source() -> EventSource:
    return EventSource()


def _key_event(event_type: str, key: str, tag: str = "BODY", editable: bool = False, **mods) -> InputEvent:
    return InputEvent(
        type=event_type,
        key=key,
        target=EventTarget(tag_name=tag, is_content_editable=editable),
        **mods,
    )


@pytest.fixture
def key_event():
    """Factory for keyboard events: key_event("keydown", "m", tag="INPUT")."""
    return _key_event
