# Area: Room State
"""Identity Resolver - works out which player slot the local client holds.

Resolution runs a ranked list of strategies. The first strategy that
returns a position wins. A position already resolved for the session is
never revisited, even when a later snapshot would compute differently.
"""
import logging
from enum import Enum
from typing import Optional, Protocol, Sequence

from matchsession.room.models import RoomSnapshot

logger = logging.getLogger(__name__)


class Position(Enum):
    """Local participant's slot in a two-player room."""
    PLAYER1 = "player1"
    PLAYER2 = "player2"
    UNASSIGNED = "unassigned"

    @property
    def is_resolved(self) -> bool:
        return self is not Position.UNASSIGNED


class ResolutionStrategy(Protocol):
    """One ranked step of identity resolution."""

    name: str

    def resolve(
        self, snapshot: RoomSnapshot, local_connection_id: Optional[str]
    ) -> Optional[Position]: ...


class ExactMatchStrategy:
    """Find the local connection id in the participant list."""

    name = "exact-match"

    def resolve(
        self, snapshot: RoomSnapshot, local_connection_id: Optional[str]
    ) -> Optional[Position]:
        index = snapshot.index_of(local_connection_id)
        if index is None:
            return None
        return Position.PLAYER1 if index == 0 else Position.PLAYER2


class JoinOrderStrategy:
    """Guess from the participant count: alone means first to join."""

    name = "join-order"

    def resolve(
        self, snapshot: RoomSnapshot, local_connection_id: Optional[str]
    ) -> Optional[Position]:
        if snapshot.participant_count == 1:
            return Position.PLAYER1
        return Position.PLAYER2


DEFAULT_STRATEGIES: Sequence[ResolutionStrategy] = (
    ExactMatchStrategy(),
    JoinOrderStrategy(),
)


class IdentityResolver:
    """Pure function object mapping (snapshot, local id, previous) to a Position."""

    def __init__(
        self, strategies: Optional[Sequence[ResolutionStrategy]] = None
    ) -> None:
        self._strategies = tuple(strategies or DEFAULT_STRATEGIES)

    @property
    def strategies(self) -> Sequence[ResolutionStrategy]:
        return self._strategies

    def resolve(
        self,
        snapshot: Optional[RoomSnapshot],
        local_connection_id: Optional[str],
        previous_position: Position = Position.UNASSIGNED,
    ) -> Position:
        """Resolve the local position.

        Args:
            snapshot: Latest room snapshot, or None if no room is known.
            local_connection_id: Transport identifier of this client.
            previous_position: Position already resolved this session.

        Returns:
            previous_position if already resolved, otherwise the answer of
            the first strategy that produces one, otherwise UNASSIGNED.
        """
        if previous_position.is_resolved:
            return previous_position
        if snapshot is None:
            return Position.UNASSIGNED

        for strategy in self._strategies:
            position = strategy.resolve(snapshot, local_connection_id)
            if position is not None:
                logger.debug(
                    "Resolved %s via %s (count=%d)",
                    position.value, strategy.name, snapshot.participant_count,
                )
                return position
        return Position.UNASSIGNED
