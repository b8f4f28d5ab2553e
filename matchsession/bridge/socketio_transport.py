# Area: Bridge (Transport to Session Integration)
"""Socket.IO transport - wires a python-socketio AsyncClient to the session.

socket.io keeps one handler per event, so this adapter registers a single
dispatcher per event and fans out to its own listener lists.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import socketio
from socketio.exceptions import ConnectionError as SocketIOConnectionError
from socketio.exceptions import SocketIOError

from matchsession.bridge.transport import Disposer, EventHandler, TransportError
from matchsession.shared.logging.protocol_logger import log_sent

if TYPE_CHECKING:
    from matchsession.session.phases import MatchRequest

logger = logging.getLogger(__name__)

FIND_MATCH_EVENT = "find-match"
CANCEL_MATCH_EVENT = "cancel-matchmaking"


class SocketIOTransport:
    """TransportProtocol over socket.io."""

    def __init__(
        self,
        server_url: str,
        socketio_path: str = "socket.io",
        find_match_event: str = FIND_MATCH_EVENT,
        cancel_match_event: str = CANCEL_MATCH_EVENT,
        client: Optional[socketio.AsyncClient] = None,
    ) -> None:
        self._server_url = server_url
        self._socketio_path = socketio_path
        self._find_match_event = find_match_event
        self._cancel_match_event = cancel_match_event
        self._sio = client if client is not None else socketio.AsyncClient()
        self._handlers: Dict[str, List[EventHandler]] = {}

    @property
    def server_url(self) -> str:
        return self._server_url

    def on(self, event: str, handler: EventHandler) -> Disposer:
        if event not in self._handlers:
            self._handlers[event] = []
            self._sio.on(event, self._make_dispatcher(event))
        self._handlers[event].append(handler)

        def dispose() -> None:
            handlers = self._handlers.get(event, [])
            if handler in handlers:
                handlers.remove(handler)

        return dispose

    def _make_dispatcher(self, event: str):
        def dispatch(*args: Any) -> None:
            payload = args[0] if args else None
            for handler in list(self._handlers.get(event, [])):
                handler(payload)
        return dispatch

    def is_connected(self) -> bool:
        return bool(self._sio.connected)

    def connection_id(self) -> Optional[str]:
        if not self._sio.connected:
            return None
        return self._sio.get_sid()

    async def connect(self) -> None:
        try:
            await self._sio.connect(
                self._server_url, socketio_path=self._socketio_path
            )
        except SocketIOConnectionError as e:
            raise TransportError(f"Failed to connect to {self._server_url}: {e}") from e
        logger.info("Connected to %s as %s", self._server_url, self.connection_id())

    async def disconnect(self) -> None:
        await self._sio.disconnect()

    async def wait(self) -> None:
        await self._sio.wait()

    async def request_match(self, request: MatchRequest) -> None:
        await self._emit(self._find_match_event, request.to_payload())

    async def cancel_match(self) -> None:
        await self._emit(self._cancel_match_event, {})

    async def force_reconnect(self) -> None:
        """Drop the current connection and open a fresh one."""
        if self._sio.connected:
            await self._sio.disconnect()
        await self.connect()

    async def _emit(self, event: str, payload: dict) -> None:
        try:
            await self._sio.emit(event, payload)
        except SocketIOError as e:
            raise TransportError(f"Failed to emit {event}: {e}") from e
        log_sent(event, self._server_url)
