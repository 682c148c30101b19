"""Session interaction-state components.

Each module owns one independent slice of state; ``session.py`` composes
them for a single session view.
"""

from interaction_engine.interaction.activity import ActivityMonitor, ActivityState
from interaction_engine.interaction.breakout import BreakoutRoomAssigner
from interaction_engine.interaction.models import (
    Annotation,
    BreakoutRoom,
    Participant,
    Point,
    RoleCard,
    Tool,
)
from interaction_engine.interaction.push_to_talk import PushToTalkController
from interaction_engine.interaction.shortcuts import ShortcutAction, ShortcutRouter
from interaction_engine.interaction.whiteboard import WhiteboardHistory

__all__ = [
    "ActivityMonitor",
    "ActivityState",
    "Annotation",
    "BreakoutRoom",
    "BreakoutRoomAssigner",
    "Participant",
    "Point",
    "PushToTalkController",
    "RoleCard",
    "ShortcutAction",
    "ShortcutRouter",
    "Tool",
    "WhiteboardHistory",
]
