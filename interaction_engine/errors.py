"""InteractionError envelope: structured error reporting over WebSocket.

Every error sent to the client follows a consistent JSON shape so the
meeting UI can surface toasts and the host logs remain machine-parseable.

Error codes
-----------
E_PARTICIPANT_NOT_FOUND  assign() targeted an id outside the available set.
E_ROOM_NOT_FOUND         A command referenced a breakout room that does not exist.
E_BAD_MESSAGE            Frame was not JSON or failed validation.
E_UNKNOWN_ACTION         Command name is not part of the protocol.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ErrorCode(str, enum.Enum):
    E_PARTICIPANT_NOT_FOUND = "E_PARTICIPANT_NOT_FOUND"
    E_ROOM_NOT_FOUND = "E_ROOM_NOT_FOUND"
    E_BAD_MESSAGE = "E_BAD_MESSAGE"
    E_UNKNOWN_ACTION = "E_UNKNOWN_ACTION"


class InteractionEngineError(Exception):
    """Base class for errors raised by the interaction-state components."""

    code: ErrorCode = ErrorCode.E_BAD_MESSAGE


class ParticipantNotFound(InteractionEngineError):
    code = ErrorCode.E_PARTICIPANT_NOT_FOUND

    def __init__(self, participant_id: str) -> None:
        super().__init__(f"Participant {participant_id!r} is not available for assignment")
        self.participant_id = participant_id


class RoomNotFound(InteractionEngineError):
    code = ErrorCode.E_ROOM_NOT_FOUND

    def __init__(self, room_id: str) -> None:
        super().__init__(f"Breakout room {room_id!r} does not exist")
        self.room_id = room_id


@dataclass
class InteractionError:
    code: str
    message: str
    recoverable: bool = True
    session_id: str = ""
    details: dict[str, Any] | None = field(default=None)

    @classmethod
    def from_exception(cls, exc: InteractionEngineError, session_id: str = "") -> "InteractionError":
        details: dict[str, Any] = {}
        if isinstance(exc, ParticipantNotFound):
            details["participant_id"] = exc.participant_id
        elif isinstance(exc, RoomNotFound):
            details["room_id"] = exc.room_id
        return cls(
            code=exc.code.value,
            message=str(exc),
            session_id=session_id,
            details=details or None,
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "type": "error",
            "code": self.code,
            "message": self.message,
            "recoverable": self.recoverable,
            "session_id": self.session_id,
        }
        if self.details:
            d["details"] = self.details
        return d


async def send_error(websocket: WebSocket, error: InteractionError) -> None:
    """Serialize *error* and send it as a JSON message on *websocket*.

    Silently catches send failures (the socket may already be closed).
    """
    try:
        await websocket.send_json(error.to_dict())
        logger.warning(
            "[InteractionError] Sent %s to client: %s (session=%s)",
            error.code,
            error.message,
            error.session_id,
        )
    except Exception as exc:
        logger.debug("[InteractionError] Failed to send error to client: %s", exc)
