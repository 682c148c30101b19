"""WebSocket host tests: drive /ws/interaction end to end.

Run:
    pytest tests/test_ws_host.py -v
"""

from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from interaction_engine.main import app


@pytest.fixture
def directory_file(tmp_path):
    path = tmp_path / "participants.json"
    path.write_text(json.dumps([
        {"id": "1", "name": "Sarah Chen", "isHost": True},
        {"id": "2", "name": "Marcus Johnson"},
        {"id": "ai", "name": "Nova AI", "isAI": True},
    ]))
    return str(path)


@pytest.fixture
def client(monkeypatch, directory_file):
    monkeypatch.setenv("PARTICIPANTS_FILE", directory_file)
    monkeypatch.setenv("IDLE_TIMEOUT_MS", "600000")
    monkeypatch.delenv("PTT_KEY", raising=False)
    with TestClient(app) as c:
        yield c


def _command(conn, action: str, **args) -> tuple[dict, dict]:
    conn.send_text(json.dumps({"type": "command", "action": action, "args": args}))
    return conn.receive_json(), conn.receive_json()


def _key(conn, event_type: str, key: str, **extra) -> None:
    conn.send_text(json.dumps({"type": "input_event", "event": {"type": event_type, "key": key, **extra}}))


# ---------------------------------------------------------------------------
# 1. Health + session init
# ---------------------------------------------------------------------------


class TestHealthAndInit:
    def test_health_returns_ok(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    def test_session_init_and_initial_state(self, client):
        with client.websocket_connect("/ws/interaction") as conn:
            init = conn.receive_json()
            assert init["type"] == "session_init"
            assert init["session_id"].startswith("session-")

            state = conn.receive_json()
            assert state["type"] == "state"
            payload = state["payload"]
            assert [p["id"] for p in payload["unassigned_participants"]] == ["1", "2"]
            assert payload["controls_visible"] is True


# ---------------------------------------------------------------------------
# 2. Commands
# ---------------------------------------------------------------------------


class TestCommands:
    def test_breakout_move_scenario(self, client):
        with client.websocket_connect("/ws/interaction") as conn:
            conn.receive_json()
            conn.receive_json()

            result, _ = _command(conn, "create_room", name="Room A")
            room_a = result["result"]["room_id"]
            result, _ = _command(conn, "create_room", name="Room B")
            room_b = result["result"]["room_id"]

            _command(conn, "assign", participant_id="1", room_id=room_a)
            result, state = _command(conn, "assign", participant_id="1", room_id=room_b)

            assert result == {"type": "command_result", "action": "assign", "result": None}
            rooms = {r["id"]: [p["id"] for p in r["participants"]] for r in state["payload"]["rooms"]}
            assert rooms == {room_a: [], room_b: ["1"]}
            assert state["payload"]["assignments"] == {"1": room_b}

    def test_unknown_participant_reports_error(self, client):
        with client.websocket_connect("/ws/interaction") as conn:
            conn.receive_json()
            conn.receive_json()
            result, _ = _command(conn, "create_room", name="Room A")

            conn.send_text(json.dumps({
                "type": "command",
                "action": "assign",
                "args": {"participant_id": "ai", "room_id": result["result"]["room_id"]},
            }))
            err = conn.receive_json()

            assert err["type"] == "error"
            assert err["code"] == "E_PARTICIPANT_NOT_FOUND"
            assert err["recoverable"] is True

    def test_unknown_room_reports_error(self, client):
        with client.websocket_connect("/ws/interaction") as conn:
            conn.receive_json()
            conn.receive_json()
            conn.send_text(json.dumps({"type": "command", "action": "delete_room", "args": {"room_id": "room-x"}}))
            err = conn.receive_json()
            assert err["code"] == "E_ROOM_NOT_FOUND"
            assert err["details"] == {"room_id": "room-x"}

    def test_whiteboard_add_undo_clear(self, client):
        with client.websocket_connect("/ws/interaction") as conn:
            conn.receive_json()
            conn.receive_json()

            _, state = _command(
                conn, "add_annotation", tool="pen", color="#f00", stroke_width=2, points=[[0, 0], [1, 1]]
            )
            assert len(state["payload"]["annotations"]) == 1

            _, state = _command(conn, "clear")
            assert state["payload"]["annotations"] == []

            result, state = _command(conn, "undo")
            assert result["result"] == {"changed": True}
            assert len(state["payload"]["annotations"]) == 1

    def test_invalid_annotation_is_bad_message(self, client):
        with client.websocket_connect("/ws/interaction") as conn:
            conn.receive_json()
            conn.receive_json()
            conn.send_text(json.dumps({
                "type": "command",
                "action": "add_annotation",
                "args": {"tool": "spray", "color": "#000", "stroke_width": 1},
            }))
            err = conn.receive_json()
            assert err["code"] == "E_BAD_MESSAGE"

    @pytest.mark.parametrize(
        "action,args",
        [
            ("add_annotation", {"tool": "pen", "color": "#000", "stroke_width": 1, "points": [[1]]}),
            ("add_annotation", {"tool": "pen", "color": "#000", "stroke_width": 1, "points": 5}),
            ("assign", {"participant_id": "1", "room_id": ["x"]}),
            ("create_room", {"name": {"nested": True}}),
            ("set_mic_enabled", {}),
        ],
    )
    def test_malformed_arguments_keep_session_alive(self, client, action, args):
        with client.websocket_connect("/ws/interaction") as conn:
            conn.receive_json()
            conn.receive_json()

            conn.send_text(json.dumps({"type": "command", "action": action, "args": args}))
            err = conn.receive_json()
            assert err["type"] == "error"
            assert err["code"] == "E_BAD_MESSAGE"
            assert err["recoverable"] is True

            result, state = _command(conn, "undo")
            assert result == {"type": "command_result", "action": "undo", "result": {"changed": False}}
            assert state["payload"]["annotations"] == []

    def test_unknown_action(self, client):
        with client.websocket_connect("/ws/interaction") as conn:
            conn.receive_json()
            conn.receive_json()
            conn.send_text(json.dumps({"type": "command", "action": "teleport"}))
            err = conn.receive_json()
            assert err["code"] == "E_UNKNOWN_ACTION"
            assert err["details"] == {"action": "teleport"}

    def test_non_json_frame(self, client):
        with client.websocket_connect("/ws/interaction") as conn:
            conn.receive_json()
            conn.receive_json()
            conn.send_text("not json")
            err = conn.receive_json()
            assert err["code"] == "E_BAD_MESSAGE"


# ---------------------------------------------------------------------------
# 3. Input events
# ---------------------------------------------------------------------------


class TestInputEvents:
    def test_shortcut_emits_signal(self, client):
        with client.websocket_connect("/ws/interaction") as conn:
            conn.receive_json()
            conn.receive_json()

            _key(conn, "keydown", "M")
            assert conn.receive_json() == {"type": "signal", "name": "toggle_mute"}
            assert conn.receive_json()["type"] == "default_prevented"
            assert conn.receive_json()["type"] == "state"

    def test_shortcut_ignored_in_text_field(self, client):
        with client.websocket_connect("/ws/interaction") as conn:
            conn.receive_json()
            conn.receive_json()

            _key(conn, "keydown", "m", target={"tag_name": "INPUT"})
            assert conn.receive_json()["type"] == "state"

    def test_push_to_talk_round_trip(self, client):
        with client.websocket_connect("/ws/interaction") as conn:
            conn.receive_json()
            conn.receive_json()
            _command(conn, "enable_ptt")

            _key(conn, "keydown", " ")
            assert conn.receive_json() == {"type": "signal", "name": "ptt_activate"}
            conn.receive_json()
            state = conn.receive_json()
            assert state["payload"]["ptt_pressed"] is True

            _key(conn, "keyup", " ")
            assert conn.receive_json() == {"type": "signal", "name": "ptt_deactivate"}
            conn.receive_json()
            state = conn.receive_json()
            assert state["payload"]["ptt_pressed"] is False

    def test_invalid_event_is_bad_message(self, client):
        with client.websocket_connect("/ws/interaction") as conn:
            conn.receive_json()
            conn.receive_json()
            conn.send_text(json.dumps({"type": "input_event", "event": {"key": "m"}}))
            assert conn.receive_json()["code"] == "E_BAD_MESSAGE"


# ---------------------------------------------------------------------------
# 4. Idle signal
# ---------------------------------------------------------------------------


def test_idle_signal_pushed_by_poller(monkeypatch, directory_file):
    monkeypatch.setenv("PARTICIPANTS_FILE", directory_file)
    monkeypatch.setenv("IDLE_TIMEOUT_MS", "50")
    monkeypatch.setenv("IDLE_POLL_INTERVAL_MS", "10")
    with TestClient(app) as client:
        with client.websocket_connect("/ws/interaction") as conn:
            conn.receive_json()
            conn.receive_json()

            assert conn.receive_json() == {"type": "signal", "name": "idle"}
            state = conn.receive_json()
            assert state["payload"]["is_idle"] is True
            assert state["payload"]["controls_visible"] is False

            _key(conn, "mousemove", "")
            assert conn.receive_json() == {"type": "signal", "name": "active"}
            assert conn.receive_json()["payload"]["is_idle"] is False


def test_rejected_frames_show_up_in_debug_log(client):
    with client.websocket_connect("/ws/interaction") as conn:
        session_id = conn.receive_json()["session_id"]
        conn.receive_json()
        conn.send_text("[1, 2]")
        conn.receive_json()

    events = client.get("/debug/events").json()["events"]
    rejected = [e for e in events if e["type"] == "rejected_frame" and e["session_id"] == session_id]
    assert rejected and rejected[0]["reason"] == "Frame must be a JSON object"
