# Area: Room State
"""Room snapshot value types.

RoomSnapshot is the immutable view of a room produced from one server
event. Participant references are normalized to a single identifier field
regardless of which legacy key the server used.
"""
from dataclasses import dataclass
from typing import Any, Optional, Tuple

MAX_ROOM_PARTICIPANTS = 2

# Legacy identifier keys, checked in this order
CONNECTION_ID_KEYS = ("socketId", "id", "playerId")


def extract_connection_id(data: Any) -> Optional[str]:
    """Return the connection identifier from a participant or event payload."""
    if not isinstance(data, dict):
        return None
    for key in CONNECTION_ID_KEYS:
        value = data.get(key)
        if value:
            return str(value)
    return None


@dataclass(frozen=True)
class ParticipantRef:
    """One participant slot in a room."""
    connection_id: Optional[str]  # None when the entry carried no identifier


@dataclass(frozen=True)
class RoomSnapshot:
    """Full replacement view of the current room.

    participant_count normally equals len(participants). When the payload
    had no usable participant list it is inferred instead, and
    participants is empty.
    """
    participants: Tuple[ParticipantRef, ...]
    room_id: Optional[str]
    participant_count: int

    @property
    def is_full(self) -> bool:
        return self.participant_count >= MAX_ROOM_PARTICIPANTS

    def index_of(self, connection_id: Optional[str]) -> Optional[int]:
        """Return the slot index holding connection_id, or None."""
        if not connection_id:
            return None
        for index, participant in enumerate(self.participants):
            if participant.connection_id == connection_id:
                return index
        return None

    def connection_ids(self) -> Tuple[Optional[str], ...]:
        return tuple(p.connection_id for p in self.participants)
