# Area: Bridge (Transport to Session Integration)
"""Event parser - normalizes raw server payloads into InboundEvent."""
from dataclasses import dataclass
from typing import Any, Optional

from matchsession.room.models import extract_connection_id

ROOM_CONFLICT_MESSAGE = "already in a room"
ALL_READY_KEYS = ("allReady", "allPlayersReady")


@dataclass(frozen=True)
class InboundEvent:
    """One server event, stamped with the session it belongs to."""
    name: str
    payload: dict
    session_id: Optional[int]
    connection_id: Optional[str] = None
    all_ready: bool = False
    error_type: str = ""
    error_message: str = ""

    @property
    def is_room_conflict(self) -> bool:
        return ROOM_CONFLICT_MESSAGE in self.error_message.lower()


def _echoed_session_id(payload: dict) -> Optional[int]:
    value = payload.get("sessionId")
    if isinstance(value, bool):
        return None
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def parse_event(
    name: str,
    raw_payload: Any,
    live_session_id: Optional[int] = None,
) -> InboundEvent:
    """Parse a raw payload. Never raises on malformed input.

    The session id is taken from an echoed "sessionId" when the server
    provides one, otherwise the event is stamped with the session that is
    live at delivery time.
    """
    payload = raw_payload if isinstance(raw_payload, dict) else {}

    session_id = _echoed_session_id(payload)
    if session_id is None:
        session_id = live_session_id

    return InboundEvent(
        name=name,
        payload=payload,
        session_id=session_id,
        connection_id=extract_connection_id(payload),
        all_ready=any(payload.get(key) is True for key in ALL_READY_KEYS),
        error_type=str(payload.get("type") or ""),
        error_message=str(payload.get("message") or ""),
    )
