"""Room package.

Holds the canonical room snapshot and resolves the local participant's
position inside it.
"""
from matchsession.room.identity import (
    ExactMatchStrategy,
    IdentityResolver,
    JoinOrderStrategy,
    Position,
)
from matchsession.room.models import (
    MAX_ROOM_PARTICIPANTS,
    ParticipantRef,
    RoomSnapshot,
    extract_connection_id,
)
from matchsession.room.store import RoomStateStore

__all__ = [
    "MAX_ROOM_PARTICIPANTS", "ParticipantRef", "RoomSnapshot",
    "extract_connection_id", "RoomStateStore",
    "Position", "IdentityResolver", "ExactMatchStrategy", "JoinOrderStrategy",
]
