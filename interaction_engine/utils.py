"""Centralized ID generation utilities for the interaction engine."""

import uuid
from collections.abc import Container


def generate_id(prefix: str = "", taken: Container[str] = ()) -> str:
    """Generate a short unique ID, retrying on collision with *taken*.

    Args:
        prefix: Optional prefix for the ID (e.g., 'room', 'annotation')
        taken: IDs already in use within the session

    Returns:
        An 8-character hex string, optionally prefixed with hyphen separator.
    """
    while True:
        unique_part = uuid.uuid4().hex[:8]
        candidate = f"{prefix}-{unique_part}" if prefix else unique_part
        if candidate not in taken:
            return candidate


def generate_room_id(taken: Container[str] = ()) -> str:
    return generate_id("room", taken)


def generate_annotation_id(taken: Container[str] = ()) -> str:
    return generate_id("annotation", taken)


def generate_session_id() -> str:
    """Generate a unique session ID for one WebSocket session view.

    Returns:
        ``session-`` followed by a 16-character hex string.
    """
    return f"session-{uuid.uuid4().hex[:16]}"
