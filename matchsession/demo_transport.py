"""Demo transport for trying the client without a server.

Plays the part of a matchmaking server on the running asyncio loop:
- connect: player-created
- find-match: room-joined with only us, then an opponent joins
- optional ready signals from both sides
- cancel: drops anything still scheduled
"""
from __future__ import annotations

import asyncio
import itertools
from typing import TYPE_CHECKING, Any, Dict, Optional

from matchsession.bridge.loopback import LoopbackTransport
from matchsession.bridge.transport import EventNames

if TYPE_CHECKING:
    from matchsession.session.phases import MatchRequest

DEMO_ROOM_ID = "demo-room"
DEMO_OPPONENT_ID = "demo-opponent"


class DemoTransport(LoopbackTransport):
    """Loopback transport with a scripted server on the other end."""

    def __init__(
        self,
        connection_id: str = "demo-local",
        join_delay: float = 0.3,
        opponent_delay: float = 1.0,
        send_ready: bool = False,
    ) -> None:
        super().__init__(connection_id=connection_id, connected=False)
        self._join_delay = join_delay
        self._opponent_delay = opponent_delay
        self._send_ready = send_ready
        self._pending: Dict[int, asyncio.TimerHandle] = {}
        self._keys = itertools.count()

    async def connect(self) -> None:
        self._connected = True
        self._later(0.0, EventNames.PARTICIPANT_CREATED, {})

    async def request_match(self, request: MatchRequest) -> None:
        await super().request_match(request)
        me = {"socketId": self.connection_id()}
        opponent = {"socketId": DEMO_OPPONENT_ID}
        self._later(self._join_delay, EventNames.ROOM_JOINED, {
            "roomId": DEMO_ROOM_ID, "players": [me],
        })
        joined_at = self._join_delay + self._opponent_delay
        self._later(joined_at, EventNames.PARTICIPANT_JOINED_ROOM, {
            "roomId": DEMO_ROOM_ID, "players": [me, opponent],
        })
        if self._send_ready:
            self._later(joined_at + 0.1, EventNames.PARTICIPANT_READY, opponent)
            self._later(joined_at + 0.2, EventNames.PARTICIPANT_READY, {
                **me, "allPlayersReady": True,
            })

    async def cancel_match(self) -> None:
        await super().cancel_match()
        self._cancel_pending()

    async def disconnect_all(self) -> None:
        self._cancel_pending()
        self.disconnect()

    def pending_count(self) -> int:
        """Scripted events not yet delivered."""
        return len(self._pending)

    def _later(self, delay: float, event: str, payload: Optional[Any]) -> None:
        key = next(self._keys)

        def fire() -> None:
            self._pending.pop(key, None)
            self.deliver(event, payload)

        self._pending[key] = asyncio.get_running_loop().call_later(delay, fire)

    def _cancel_pending(self) -> None:
        for handle in self._pending.values():
            handle.cancel()
        self._pending.clear()
