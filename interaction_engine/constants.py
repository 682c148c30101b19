"""Centralized constants for the meeting interaction engine.

All magic numbers and default timings should be defined here for easy maintenance.
"""

# Idle detection (milliseconds)
IDLE_TIMEOUT_MS: int = 4000  # Inactivity before controls auto-hide
IDLE_POLL_INTERVAL_MS: int = 500  # Fixed cadence of the idle check

# Browser event types that count as user activity
ACTIVITY_EVENT_TYPES: tuple[str, ...] = (
    "mousemove",
    "mousedown",
    "keydown",
    "touchstart",
    "scroll",
)

# Push-to-talk
PTT_DEFAULT_KEY: str = " "  # Space

# Elements whose focus suppresses keyboard handling
TEXT_ENTRY_TAGS: frozenset[str] = frozenset({"INPUT", "TEXTAREA"})

# WebSocket host
WEBSOCKET_RECEIVE_TIMEOUT: float = 30.0  # Main receive loop timeout (seconds)
