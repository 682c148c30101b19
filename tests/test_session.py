"""Tests for InteractionSession: composition, snapshot and teardown.

Run:
    pytest tests/test_session.py -v
"""

from unittest.mock import AsyncMock

import pytest

from interaction_engine.config import EngineSettings
from interaction_engine.events import InputEvent
from interaction_engine.interaction import ShortcutAction
from interaction_engine.session import InteractionSession


@pytest.fixture
def session(participants, clock):
    s = InteractionSession.create(
        participants,
        EngineSettings(idle_timeout_ms=1000),
        session_id="session-test",
        clock=clock,
    )
    yield s
    s.close()


class TestComposition:
    def test_create_wires_settings(self, participants):
        s = InteractionSession.create(participants, EngineSettings(ptt_key="t"))
        assert s.session_id.startswith("session-")
        assert s.push_to_talk.key == "t"
        assert s.push_to_talk.is_enabled is True
        assert len(s.breakout.available_participants) == 4

    @pytest.mark.asyncio
    async def test_components_share_one_event_source(self, participants, key_event):
        mute = AsyncMock()
        activate = AsyncMock()
        s = InteractionSession.create(
            participants,
            on_ptt_activate=activate,
            shortcut_handlers={ShortcutAction.TOGGLE_MUTE: mute},
        )
        s.start()
        s.push_to_talk.enable_ptt_mode()
        try:
            await s.dispatch(key_event("keydown", "m"))
            await s.dispatch(key_event("keydown", " "))
        finally:
            s.close()

        mute.assert_awaited_once()
        activate.assert_awaited_once()
        assert s.metrics == {"event_count": 2, "default_prevented_count": 2}


class TestSnapshot:
    def test_initial_snapshot(self, session):
        snap = session.snapshot()
        assert snap["session_id"] == "session-test"
        assert snap["rooms"] == []
        assert [p["id"] for p in snap["unassigned_participants"]] == ["1", "2", "3", "4"]
        assert snap["annotations"] == []
        assert snap["is_idle"] is False
        assert snap["ptt_pressed"] is False
        assert snap["controls_visible"] is True

    def test_snapshot_reflects_component_state(self, session):
        room_id = session.breakout.create_room("Room A")
        session.breakout.assign("2", room_id)
        session.whiteboard.add_annotation("rectangle", "#333", 3, [(0, 0), (4, 4)])

        snap = session.snapshot()
        assert snap["rooms"][0]["id"] == room_id
        assert snap["assignments"] == {"2": room_id}
        assert len(snap["annotations"]) == 1
        assert snap["can_undo"] is True

    @pytest.mark.asyncio
    async def test_controls_hide_when_idle_unless_ptt_mode(self, session, clock):
        clock.advance(2)
        await session.activity.check()
        assert session.controls_visible is False

        session.push_to_talk.enable_ptt_mode()
        assert session.controls_visible is True


class TestTeardown:
    @pytest.mark.asyncio
    async def test_close_removes_every_listener(self, session):
        session.start()
        session.push_to_talk.enable_ptt_mode()
        assert session.source.listener_count() > 0

        session.close()

        assert session.source.listener_count() == 0
        assert session.closed is True

    @pytest.mark.asyncio
    async def test_events_after_close_are_dropped(self, session):
        session.start()
        session.close()
        event = await session.dispatch(InputEvent(type="keydown", key="m"))
        assert event.default_prevented is False
        assert session.metrics["event_count"] == 0

    def test_close_is_idempotent(self, session):
        session.close()
        session.close()
        assert session.closed is True

    @pytest.mark.asyncio
    async def test_start_after_close_is_noop(self, session):
        session.close()
        session.start()
        assert session.started is False
        assert session.source.listener_count() == 0
