"""Environment-driven settings for the interaction engine host.

``.env`` values are loaded by the host at import time; this module only
reads ``os.environ`` so tests can patch the environment directly.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from interaction_engine.constants import (
    IDLE_POLL_INTERVAL_MS,
    IDLE_TIMEOUT_MS,
    PTT_DEFAULT_KEY,
)
from interaction_engine.interaction.models import Participant

logger = logging.getLogger(__name__)

_DIRECTORY = TypeAdapter(list[Participant])


class EngineSettings(BaseModel):
    idle_timeout_ms: int = Field(default=IDLE_TIMEOUT_MS, gt=0)
    idle_poll_interval_ms: int = Field(default=IDLE_POLL_INTERVAL_MS, gt=0)
    ptt_key: str = PTT_DEFAULT_KEY
    participants_file: Optional[str] = None
    otel_exporter: str = "console"


def load_settings() -> EngineSettings:
    """Build settings from ``os.environ``, falling back to defaults.

    Invalid values are logged and replaced by the default for that field.
    """
    raw = {
        "idle_timeout_ms": os.environ.get("IDLE_TIMEOUT_MS"),
        "idle_poll_interval_ms": os.environ.get("IDLE_POLL_INTERVAL_MS"),
        "ptt_key": os.environ.get("PTT_KEY"),
        "participants_file": os.environ.get("PARTICIPANTS_FILE") or None,
        "otel_exporter": os.environ.get("OTEL_EXPORTER"),
    }
    values = {k: v for k, v in raw.items() if v is not None}

    try:
        return EngineSettings(**values)
    except ValidationError as exc:
        bad = {str(err["loc"][0]) for err in exc.errors() if err.get("loc")}
        logger.warning("[Config] Ignoring invalid settings %s: %s", sorted(bad), exc)
        return EngineSettings(**{k: v for k, v in values.items() if k not in bad})


def load_participants(path: Optional[str]) -> list[Participant]:
    """Read the participant directory from a JSON array on disk.

    Returns an empty directory when there is no path, no file or a file
    that does not parse, so the host can still serve whiteboard, idle and
    keyboard state.
    """
    if not path:
        return []

    file_path = Path(path)
    if not file_path.exists():
        logger.warning("[Config] Participants file %s not found; using an empty directory.", file_path)
        return []

    try:
        participants = _DIRECTORY.validate_python(json.loads(file_path.read_text(encoding="utf-8")))
    except (OSError, json.JSONDecodeError, ValidationError) as exc:
        logger.warning("[Config] Failed to parse participants file %s: %s", file_path, exc)
        return []

    logger.info("[Config] Loaded %d participants from %s", len(participants), file_path)
    return participants
