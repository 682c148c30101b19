"""WhiteboardHistory: annotation log with linear undo.

History is an append-only list of snapshots plus a cursor; the visible
annotations are ``snapshots[cursor]``. Every edit drops the snapshots past
the cursor before appending, so undo-then-edit discards the undone states
and there is no redo.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Optional, Union

from interaction_engine.interaction.models import Annotation, Point, Tool
from interaction_engine.utils import generate_annotation_id

logger = logging.getLogger(__name__)

PointLike = Union[Point, Sequence[float], dict]


class WhiteboardHistory:
    """Per-session whiteboard state."""

    def __init__(self) -> None:
        self._snapshots: list[tuple[Annotation, ...]] = [()]
        self._cursor: int = 0
        self._ids: set[str] = set()

    @property
    def annotations(self) -> list[Annotation]:
        return list(self._snapshots[self._cursor])

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def history_length(self) -> int:
        return len(self._snapshots)

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    def add_annotation(
        self,
        tool: Union[Tool, str],
        color: str,
        stroke_width: float,
        points: Iterable[PointLike] = (),
        text: Optional[str] = None,
    ) -> Annotation:
        """Append a new annotation to the visible set and commit a snapshot."""
        annotation = Annotation(
            id=generate_annotation_id(taken=self._ids),
            tool=tool,
            color=color,
            stroke_width=stroke_width,
            points=tuple(points),
            text=text,
        )
        self._ids.add(annotation.id)
        self._commit(self._snapshots[self._cursor] + (annotation,))
        logger.debug("[Whiteboard] Added %s (%s)", annotation.id, annotation.tool)
        return annotation

    def undo(self) -> bool:
        """Step the cursor back one snapshot. No-op (False) at the start."""
        if self._cursor == 0:
            logger.debug("[Whiteboard] Undo at start of history; ignored.")
            return False
        self._cursor -= 1
        logger.debug("[Whiteboard] Undo → cursor %d", self._cursor)
        return True

    def clear(self) -> None:
        """Commit an empty snapshot; the clear itself can be undone."""
        self._commit(())
        logger.info("[Whiteboard] Cleared (cursor %d)", self._cursor)

    def to_dict(self) -> dict:
        return {
            "annotations": [a.model_dump(mode="json") for a in self.annotations],
            "can_undo": self.can_undo,
        }

    def _commit(self, snapshot: tuple[Annotation, ...]) -> None:
        del self._snapshots[self._cursor + 1:]
        self._snapshots.append(snapshot)
        self._cursor = len(self._snapshots) - 1
