# Area: Room State
"""Room State Store - owns the canonical RoomSnapshot."""
import logging
from typing import Any, Optional

from matchsession.room.models import (
    MAX_ROOM_PARTICIPANTS,
    ParticipantRef,
    RoomSnapshot,
    extract_connection_id,
)

logger = logging.getLogger(__name__)


class RoomStateStore:
    """Derives and holds the latest room snapshot.

    Every room event produces a brand new snapshot which replaces the
    stored one in a single assignment, so readers see either the old or
    the new snapshot and never a mix.
    """

    def __init__(self) -> None:
        self._snapshot: Optional[RoomSnapshot] = None

    @property
    def snapshot(self) -> Optional[RoomSnapshot]:
        return self._snapshot

    @property
    def participant_count(self) -> int:
        """Currently known participant count, 0 when no room is known."""
        if self._snapshot is None:
            return 0
        return self._snapshot.participant_count

    def apply_room_event(
        self,
        payload: Any,
        fallback_count: Optional[int] = None,
    ) -> RoomSnapshot:
        """Build a snapshot from a raw room event and store it.

        Args:
            payload: Raw event payload, expected to carry a "players" list.
            fallback_count: Count to assume when the participant list is
                missing. Defaults to the previously known count, or 1.

        Returns:
            The newly stored RoomSnapshot.
        """
        data = payload if isinstance(payload, dict) else {}
        players = data.get("players")

        if isinstance(players, list):
            participants = tuple(
                ParticipantRef(connection_id=extract_connection_id(p))
                for p in players
            )
            if len(participants) > MAX_ROOM_PARTICIPANTS:
                logger.warning(
                    "Room event listed %d players, keeping first %d",
                    len(participants), MAX_ROOM_PARTICIPANTS,
                )
                participants = participants[:MAX_ROOM_PARTICIPANTS]
            count = len(participants)
        else:
            participants = ()
            count = self._inferred_count(fallback_count)
            logger.warning(
                "Room event without a player list, assuming %d participant(s)",
                count,
            )

        room_id = data.get("roomId") or data.get("room_id")
        if room_id is None and self._snapshot is not None:
            room_id = self._snapshot.room_id

        snapshot = RoomSnapshot(
            participants=participants,
            room_id=str(room_id) if room_id is not None else None,
            participant_count=count,
        )
        self._snapshot = snapshot
        return snapshot

    def clear(self) -> None:
        self._snapshot = None

    def _inferred_count(self, fallback_count: Optional[int]) -> int:
        if fallback_count is not None:
            return min(max(fallback_count, 0), MAX_ROOM_PARTICIPANTS)
        if self._snapshot is not None and self._snapshot.participant_count:
            return self._snapshot.participant_count
        return 1
