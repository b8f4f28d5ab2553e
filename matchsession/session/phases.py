# Area: Session Lifecycle
"""Session phases and the immutable records the controller hands out.

Provides SessionPhase for explicit phase tracking, MatchRequest for the
outbound match request, SessionView as the read-only state consumers
render from, and HandOff as the one-shot record passed to gameplay.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from matchsession.room.identity import Position
from matchsession.room.models import RoomSnapshot


class SessionPhase(Enum):
    """Phases of one matchmaking session."""
    IDLE = "IDLE"
    MATCHMAKING = "MATCHMAKING"
    ROOM_JOINED = "ROOM_JOINED"
    WAITING_FOR_PLAYERS = "WAITING_FOR_PLAYERS"
    BOTH_READY = "BOTH_READY"
    GAME_STARTING = "GAME_STARTING"

    @property
    def in_room(self) -> bool:
        return self in IN_ROOM_PHASES


IN_ROOM_PHASES = frozenset({
    SessionPhase.ROOM_JOINED,
    SessionPhase.WAITING_FOR_PLAYERS,
    SessionPhase.BOTH_READY,
    SessionPhase.GAME_STARTING,
})

HAND_OFF_MODE = "online"


@dataclass(frozen=True)
class MatchRequest:
    """Parameters of one request-match call, replayed verbatim on retry."""
    session_id: int
    connection_id: Optional[str]
    selected_variant: Any

    def to_payload(self) -> Dict[str, Any]:
        """Convert to the find-match wire payload."""
        return {
            "playerId": self.connection_id,
            "selectedPlayer": self.selected_variant,
            "sessionId": self.session_id,
        }


@dataclass(frozen=True)
class SessionView:
    """Read-only snapshot of session state for downstream consumers."""
    phase: SessionPhase = SessionPhase.IDLE
    session_id: Optional[int] = None
    local_connection_id: Optional[str] = None
    room: Optional[RoomSnapshot] = None
    position: Position = Position.UNASSIGNED
    ready_ids: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def participant_count(self) -> int:
        return self.room.participant_count if self.room else 0


@dataclass(frozen=True)
class HandOff:
    """Everything gameplay needs when an online match starts."""
    session_id: int
    position: Position
    room: Optional[RoomSnapshot]
    trigger: str                 # "population" or "readiness"
    mode: str = HAND_OFF_MODE
