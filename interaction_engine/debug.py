import json
import logging
from collections import deque
from datetime import datetime, timezone

_MAX_EVENTS = 500


class InteractionDebugLogger:
    """Centralized debugging for WebSocket sessions and rejected input."""

    def __init__(self, max_events: int = _MAX_EVENTS):
        self.logger = logging.getLogger("interaction.debug")
        self.events: deque = deque(maxlen=max_events)  # In-memory event log

    def log_ws_event(self, event_type: str, session_id: str, details: dict):
        """Log WebSocket events (connect, disconnect, command)."""
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "type": event_type,
            "session_id": session_id,
            "details": details,
        }
        self.events.append(entry)
        self.logger.info("[WS] %s: %s", event_type, json.dumps(entry, default=str))

    def log_rejected_frame(self, session_id: str, reason: str, error: Exception = None):
        """Log frames the host could not apply."""
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "type": "rejected_frame",
            "session_id": session_id,
            "reason": reason,
            "error": str(error) if error else None,
        }
        self.events.append(entry)
        self.logger.warning("[WS] Rejected frame (%s): %s", reason, error)

    def get_recent_events(self, limit: int = 100) -> list:
        """Return recent debug events."""
        if limit <= 0:
            return []
        return list(self.events)[-limit:]


debug_logger = InteractionDebugLogger()
