# Area: Bridge (Transport to Session Integration)
"""Loopback transport - in-memory adapter with no network.

Records every outbound operation and lets the caller push server events
with deliver(). Listeners for one event run in registration order.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

from matchsession.bridge.transport import Disposer, EventHandler, TransportError

if TYPE_CHECKING:
    from matchsession.session.phases import MatchRequest


class LoopbackTransport:
    """In-memory TransportProtocol implementation."""

    def __init__(
        self, connection_id: Optional[str] = "local", connected: bool = True
    ) -> None:
        self._connection_id = connection_id
        self._connected = connected
        self._handlers: Dict[str, List[EventHandler]] = {}
        self.requests: List[MatchRequest] = []
        self.cancel_count = 0
        self.reconnect_count = 0
        self.reconnect_ids: List[str] = []
        self.fail_reconnect = False

    def on(self, event: str, handler: EventHandler) -> Disposer:
        self._handlers.setdefault(event, []).append(handler)

        def dispose() -> None:
            handlers = self._handlers.get(event, [])
            if handler in handlers:
                handlers.remove(handler)

        return dispose

    def listener_count(self, event: str) -> int:
        return len(self._handlers.get(event, []))

    def deliver(self, event: str, payload: Any = None) -> None:
        """Simulate the server pushing event to this client."""
        for handler in list(self._handlers.get(event, [])):
            handler(payload if payload is not None else {})

    def is_connected(self) -> bool:
        return self._connected

    def connection_id(self) -> Optional[str]:
        return self._connection_id if self._connected else None

    async def request_match(self, request: MatchRequest) -> None:
        if not self._connected:
            raise TransportError("not connected")
        self.requests.append(request)

    async def cancel_match(self) -> None:
        self.cancel_count += 1

    async def force_reconnect(self) -> None:
        self.reconnect_count += 1
        if self.fail_reconnect:
            self._connected = False
            raise TransportError("reconnect failed")
        if self.reconnect_ids:
            self._connection_id = self.reconnect_ids.pop(0)
        self._connected = True

    def disconnect(self) -> None:
        self._connected = False
