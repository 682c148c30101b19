"""FastAPI app: health check + WebSocket host for interaction sessions.

Data flow:
  1. The meeting UI opens ``/ws/interaction``, one socket per session view.
  2. Raw keyboard / pointer / touch / scroll events arrive as ``input_event``
     frames and are dispatched through the session's EventSource.
  3. Breakout, whiteboard and PTT-mode operations arrive as ``command`` frames.
  4. Engine callbacks (idle, PTT press, shortcuts) go back as ``signal`` frames,
     and every frame is answered with the session's render ``state``.
  5. Disconnect tears the session down: listeners removed, poller cancelled.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, Field, ValidationError

from interaction_engine.config import EngineSettings, load_participants, load_settings
from interaction_engine.constants import WEBSOCKET_RECEIVE_TIMEOUT
from interaction_engine.debug import debug_logger
from interaction_engine.errors import (
    ErrorCode,
    InteractionEngineError,
    InteractionError,
    RoomNotFound,
    send_error,
)
from interaction_engine.events import InputEvent
from interaction_engine.interaction import Point, ShortcutAction, Tool
from interaction_engine.session import InteractionSession
from interaction_engine.telemetry import frame_span, init_telemetry, mark_frame_error

load_dotenv()
logger = logging.getLogger(__name__)


class InputEventFrame(BaseModel):
    type: str = "input_event"
    event: InputEvent


class CommandFrame(BaseModel):
    type: str = "command"
    action: str
    args: dict[str, Any] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Command arguments
# ---------------------------------------------------------------------------


class NoArgs(BaseModel):
    pass


class CreateRoomArgs(BaseModel):
    name: str = ""


class RoomArgs(BaseModel):
    room_id: str


class AssignArgs(BaseModel):
    participant_id: str
    room_id: Optional[str] = None


class AddAnnotationArgs(BaseModel):
    tool: Tool
    color: str
    stroke_width: float
    points: list[Point] = Field(default_factory=list)
    text: Optional[str] = None


class MicArgs(BaseModel):
    enabled: bool


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _create_room(session: InteractionSession, args: CreateRoomArgs) -> Any:
    return {"room_id": session.breakout.create_room(args.name)}


def _delete_room(session: InteractionSession, args: RoomArgs) -> Any:
    if not session.breakout.delete_room(args.room_id):
        raise RoomNotFound(args.room_id)
    return None


def _assign(session: InteractionSession, args: AssignArgs) -> Any:
    if not session.breakout.assign(args.participant_id, args.room_id):
        raise RoomNotFound(str(args.room_id))
    return None


def _add_annotation(session: InteractionSession, args: AddAnnotationArgs) -> Any:
    annotation = session.whiteboard.add_annotation(
        tool=args.tool,
        color=args.color,
        stroke_width=args.stroke_width,
        points=args.points,
        text=args.text,
    )
    return {"annotation_id": annotation.id}


def _undo(session: InteractionSession, args: NoArgs) -> Any:
    return {"changed": session.whiteboard.undo()}


def _clear(session: InteractionSession, args: NoArgs) -> Any:
    session.whiteboard.clear()
    return None


def _set_mic_enabled(session: InteractionSession, args: MicArgs) -> Any:
    session.push_to_talk.set_enabled(args.enabled)
    return None


Command = tuple[type[BaseModel], Callable[[InteractionSession, Any], Any]]

COMMANDS: dict[str, Command] = {
    "create_room": (CreateRoomArgs, _create_room),
    "delete_room": (RoomArgs, _delete_room),
    "assign": (AssignArgs, _assign),
    "add_annotation": (AddAnnotationArgs, _add_annotation),
    "undo": (NoArgs, _undo),
    "clear": (NoArgs, _clear),
    "enable_ptt": (NoArgs, lambda s, a: s.push_to_talk.enable_ptt_mode()),
    "disable_ptt": (NoArgs, lambda s, a: s.push_to_talk.disable_ptt_mode()),
    "toggle_ptt": (NoArgs, lambda s, a: s.push_to_talk.toggle_ptt_mode()),
    "set_mic_enabled": (MicArgs, _set_mic_enabled),
    "reset_idle": (NoArgs, lambda s, a: s.activity.reset_idle()),
}


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Load settings and the participant directory once at startup."""
    settings = load_settings()
    init_telemetry(settings.otel_exporter)
    app.state.settings = settings
    app.state.participants = load_participants(settings.participants_file)
    logger.info("Interaction engine ready, %d participants.", len(app.state.participants))
    yield


app = FastAPI(title="Meeting Interaction Engine", version="0.1.0", lifespan=lifespan)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@app.get("/debug/events")
async def debug_events(limit: int = 100) -> dict:
    return {"events": debug_logger.get_recent_events(limit)}


@app.websocket("/ws/interaction")
async def interaction_stream(websocket: WebSocket) -> None:
    await websocket.accept()

    settings: EngineSettings = getattr(websocket.app.state, "settings", None) or load_settings()
    participants = getattr(websocket.app.state, "participants", None)
    if participants is None:
        participants = load_participants(settings.participants_file)

    def _signal(name: str) -> Callable[[], Awaitable[None]]:
        async def _send() -> None:
            await websocket.send_json({"type": "signal", "name": name})
        return _send

    async def _on_idle_change(name: str) -> None:
        await _signal(name)()
        await _send_state()

    session = InteractionSession.create(
        participants,
        settings,
        on_idle=lambda: _on_idle_change("idle"),
        on_active=_signal("active"),
        on_ptt_activate=_signal("ptt_activate"),
        on_ptt_deactivate=_signal("ptt_deactivate"),
        shortcut_handlers={action: _signal(action.value) for action in ShortcutAction},
    )
    session_id = session.session_id

    async def _send_state() -> None:
        await websocket.send_json({"type": "state", "payload": session.snapshot()})

    async def _report(exc: InteractionEngineError) -> None:
        mark_frame_error(exc.code.value)
        await send_error(websocket, InteractionError.from_exception(exc, session_id=session_id))

    async def _bad_message(reason: str, exc: Exception | None = None) -> None:
        debug_logger.log_rejected_frame(session_id, reason, exc)
        mark_frame_error(ErrorCode.E_BAD_MESSAGE.value)
        await send_error(
            websocket,
            InteractionError(
                code=ErrorCode.E_BAD_MESSAGE.value,
                message=f"{reason}: {exc}" if exc else reason,
                session_id=session_id,
            ),
        )

    async def _handle_frame(raw: str) -> None:
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            await _bad_message("Non-JSON frame", exc)
            return
        if not isinstance(payload, dict):
            await _bad_message("Frame must be a JSON object")
            return

        msg_type = payload.get("type", "")
        with frame_span(str(msg_type), session_id) as span:
            if msg_type == "input_event":
                try:
                    frame = InputEventFrame.model_validate(payload)
                except ValidationError as exc:
                    await _bad_message("Invalid input_event", exc)
                    return
                event = await session.dispatch(frame.event)
                if event.default_prevented:
                    await websocket.send_json(
                        {"type": "default_prevented", "event_type": event.type, "key": event.key}
                    )
            elif msg_type == "command":
                try:
                    frame = CommandFrame.model_validate(payload)
                except ValidationError as exc:
                    await _bad_message("Invalid command", exc)
                    return
                span.set_attribute("frame.action", frame.action)
                command = COMMANDS.get(frame.action)
                if command is None:
                    mark_frame_error(ErrorCode.E_UNKNOWN_ACTION.value)
                    await send_error(
                        websocket,
                        InteractionError(
                            code=ErrorCode.E_UNKNOWN_ACTION.value,
                            message=f"Unknown action {frame.action!r}",
                            session_id=session_id,
                            details={"action": frame.action},
                        ),
                    )
                    return
                debug_logger.log_ws_event("command", session_id, {"action": frame.action})
                args_model, handler = command
                try:
                    result = handler(session, args_model.model_validate(frame.args))
                except InteractionEngineError as exc:
                    await _report(exc)
                    return
                except ValidationError as exc:
                    await _bad_message(f"Invalid arguments for {frame.action}", exc)
                    return
                await websocket.send_json(
                    {"type": "command_result", "action": frame.action, "result": result}
                )
            else:
                logger.debug("[WS] Ignoring frame type %r", msg_type)
                return

            await _send_state()

    debug_logger.log_ws_event("connect", session_id, {"participants": len(participants)})
    await websocket.send_json({"type": "session_init", "session_id": session_id})
    session.start()
    await _send_state()

    try:
        while True:
            try:
                raw = await asyncio.wait_for(websocket.receive_text(), timeout=WEBSOCKET_RECEIVE_TIMEOUT)
            except asyncio.TimeoutError:
                logger.debug("[WS] Receive timeout, continuing")
                continue
            await _handle_frame(raw)
    except WebSocketDisconnect:
        logger.info("[WS] Client disconnected (session=%s)", session_id)
    finally:
        session.close()
        debug_logger.log_ws_event("disconnect", session_id, dict(session.metrics))
