# Area: Session Lifecycle
"""Readiness Tracker - accumulates ready signals for the current session."""
import logging
from typing import FrozenSet, Optional, Set

from matchsession.room.models import MAX_ROOM_PARTICIPANTS

logger = logging.getLogger(__name__)


class ReadinessTracker:
    """Set of connection ids that signalled ready.

    Completion is reached when expected_count distinct ids are ready, or
    when the server declared everyone ready regardless of the local count.
    """

    def __init__(self) -> None:
        self._ready: Set[str] = set()
        self._all_ready_declared = False

    @property
    def ready_ids(self) -> FrozenSet[str]:
        return frozenset(self._ready)

    @property
    def all_ready_declared(self) -> bool:
        return self._all_ready_declared

    def mark_ready(self, connection_id: Optional[str]) -> FrozenSet[str]:
        """Record a ready signal. Repeats of the same id are no-ops."""
        if not connection_id:
            logger.warning("Ready signal without a connection id - ignored")
            return self.ready_ids
        if (
            connection_id not in self._ready
            and len(self._ready) >= MAX_ROOM_PARTICIPANTS
        ):
            logger.warning(
                "Ready signal from %s but %d players already ready - ignored",
                connection_id, len(self._ready),
            )
            return self.ready_ids
        self._ready.add(connection_id)
        return self.ready_ids

    def declare_all_ready(self) -> None:
        """Apply the server's authoritative all-ready flag."""
        self._all_ready_declared = True

    def is_complete(self, expected_count: int = MAX_ROOM_PARTICIPANTS) -> bool:
        if self._all_ready_declared:
            return True
        return len(self._ready) >= expected_count

    def reset(self) -> None:
        self._ready.clear()
        self._all_ready_declared = False
