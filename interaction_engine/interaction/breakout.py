"""BreakoutRoomAssigner: one-room-or-none assignment of participants.

Rooms are created and deleted only here. The assignment index (participant
id → room id) and each room's ordered membership are kept in agreement
after every mutation: a participant id is indexed iff exactly one room
lists it, and the index names that room.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from collections.abc import Iterable
from typing import Optional

from interaction_engine.errors import ParticipantNotFound
from interaction_engine.interaction.models import BreakoutRoom, Participant
from interaction_engine.utils import generate_room_id

logger = logging.getLogger(__name__)


def _copy(room: BreakoutRoom) -> BreakoutRoom:
    return replace(room, participants=list(room.participants))


class BreakoutRoomAssigner:
    """Owns the breakout rooms of one session.

    Parameters
    ----------
    participants : Iterable[Participant]
        The meeting directory. AI participants are dropped from the
        available set and can never be assigned.
    """

    def __init__(self, participants: Iterable[Participant]) -> None:
        self._available: tuple[Participant, ...] = tuple(p for p in participants if not p.is_ai)
        self._by_id: dict[str, Participant] = {p.id: p for p in self._available}
        self._rooms: dict[str, BreakoutRoom] = {}
        self._index: dict[str, str] = {}
        self._issued_ids: set[str] = set()

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def available_participants(self) -> list[Participant]:
        return list(self._available)

    @property
    def rooms(self) -> list[BreakoutRoom]:
        """Copies of the rooms, in creation order."""
        return [_copy(room) for room in self._rooms.values()]

    @property
    def assignments(self) -> dict[str, str]:
        """A copy of the participant id → room id index."""
        return dict(self._index)

    @property
    def unassigned_participants(self) -> list[Participant]:
        """Available participants with no room, in directory order."""
        return [p for p in self._available if p.id not in self._index]

    def get_room(self, room_id: str) -> Optional[BreakoutRoom]:
        room = self._rooms.get(room_id)
        return _copy(room) if room is not None else None

    def room_of(self, participant_id: str) -> Optional[str]:
        return self._index.get(participant_id)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_room(self, name: str) -> str:
        """Create an empty room and return its id.

        Ids are never reissued, even after the room is deleted.
        """
        room_id = generate_room_id(taken=self._issued_ids)
        self._issued_ids.add(room_id)
        self._rooms[room_id] = BreakoutRoom(id=room_id, name=name)
        logger.info("[Breakout] Created room %s (%s)", room_id, name)
        return room_id

    def delete_room(self, room_id: str) -> bool:
        """Delete *room_id* and unassign everyone in it.

        Returns False (and changes nothing) when the room does not exist.
        """
        room = self._rooms.pop(room_id, None)
        if room is None:
            logger.debug("[Breakout] delete_room: unknown room %s; ignored.", room_id)
            return False

        for participant in room.participants:
            self._index.pop(participant.id, None)

        logger.info(
            "[Breakout] Deleted room %s; %d participant(s) unassigned",
            room_id,
            len(room.participants),
        )
        return True

    def assign(self, participant_id: str, room_id: Optional[str]) -> bool:
        """Move *participant_id* into *room_id*, or unassign it when None.

        Raises ParticipantNotFound for ids outside the available set. An
        unknown *room_id* leaves every room and the index untouched and
        returns False.
        """
        participant = self._by_id.get(participant_id)
        if participant is None:
            raise ParticipantNotFound(participant_id)

        target: Optional[BreakoutRoom] = None
        if room_id is not None:
            target = self._rooms.get(room_id)
            if target is None:
                logger.warning(
                    "[Breakout] assign(%s): unknown room %s; ignored.", participant_id, room_id
                )
                return False

        self._detach(participant_id)

        if target is None:
            logger.info("[Breakout] Unassigned %s", participant_id)
            return True

        target.participants.append(participant)
        self._index[participant_id] = target.id
        logger.info("[Breakout] Assigned %s → %s", participant_id, target.id)
        return True

    def to_dict(self) -> dict:
        return {
            "rooms": [room.to_dict() for room in self._rooms.values()],
            "unassigned": [p.model_dump() for p in self.unassigned_participants],
            "assignments": self.assignments,
        }

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _detach(self, participant_id: str) -> None:
        current = self._index.pop(participant_id, None)
        if current is None:
            return
        room = self._rooms[current]
        room.participants = [p for p in room.participants if p.id != participant_id]
