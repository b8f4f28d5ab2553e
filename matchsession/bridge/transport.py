# Area: Bridge (Transport to Session Integration)
"""Transport contract the session controller talks to.

The transport delivers named server events to registered listeners and
carries the outbound matchmaking operations. Every subscription returns
a disposer.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Optional, Protocol

if TYPE_CHECKING:
    from matchsession.session.phases import MatchRequest

EventHandler = Callable[[Any], None]
Disposer = Callable[[], None]


class TransportError(Exception):
    """Raised when the transport cannot connect or deliver an operation."""


class EventNames:
    """Inbound server event names."""
    PARTICIPANT_CREATED = "player-created"
    ROOM_JOINED = "room-joined"
    PARTICIPANT_JOINED_ROOM = "player-joined-room"
    PARTICIPANT_READY = "player-ready"
    LEFT_ROOM = "left-room"
    ERROR = "error"

    ALL = (
        PARTICIPANT_CREATED,
        ROOM_JOINED,
        PARTICIPANT_JOINED_ROOM,
        PARTICIPANT_READY,
        LEFT_ROOM,
        ERROR,
    )


class TransportProtocol(Protocol):
    """Interface every transport adapter implements."""

    def on(self, event: str, handler: EventHandler) -> Disposer: ...
    def is_connected(self) -> bool: ...
    def connection_id(self) -> Optional[str]: ...
    async def request_match(self, request: MatchRequest) -> None: ...
    async def cancel_match(self) -> None: ...
    async def force_reconnect(self) -> None: ...
