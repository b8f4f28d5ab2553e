# Area: Bridge (Transport to Session Integration)
"""Bridge package - connects a server transport to the session controller."""
from matchsession.bridge.event_parser import InboundEvent, parse_event
from matchsession.bridge.loopback import LoopbackTransport
from matchsession.bridge.socketio_transport import SocketIOTransport
from matchsession.bridge.subscriptions import SubscriptionRegistry
from matchsession.bridge.transport import (
    EventNames,
    TransportError,
    TransportProtocol,
)

__all__ = [
    "InboundEvent", "parse_event",
    "EventNames", "TransportError", "TransportProtocol",
    "SubscriptionRegistry", "LoopbackTransport", "SocketIOTransport",
]
