"""Domain models shared by the interaction-state components."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RoleCard(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = ""
    department: str = ""
    skills: tuple[str, ...] = ()
    authority_level: Literal["executive", "lead", "senior", "member", "guest"] = Field(
        default="member", alias="authorityLevel"
    )
    availability: Literal["available", "busy", "away"] = "available"


class Participant(BaseModel):
    """A meeting participant from the read-only directory."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    avatar: str = ""
    role: Optional[RoleCard] = None
    is_host: bool = Field(default=False, alias="isHost")
    is_ai: bool = Field(default=False, alias="isAI")


class Tool(str, enum.Enum):
    SELECT = "select"
    PEN = "pen"
    ERASER = "eraser"
    RECTANGLE = "rectangle"
    CIRCLE = "circle"
    LINE = "line"
    TEXT = "text"


class Point(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float

    @model_validator(mode="before")
    @classmethod
    def _from_pair(cls, value):
        """Accept ``[x, y]`` pairs as well as ``{"x": .., "y": ..}``."""
        if isinstance(value, (list, tuple)) and len(value) == 2:
            return {"x": value[0], "y": value[1]}
        return value


class Annotation(BaseModel):
    """A single stroke, shape or text element on the whiteboard."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    id: str
    tool: Tool
    color: str
    stroke_width: float = Field(gt=0)
    points: tuple[Point, ...] = ()
    text: Optional[str] = None


@dataclass
class BreakoutRoom:
    id: str
    name: str
    participants: list[Participant] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "participants": [p.model_dump() for p in self.participants],
        }
