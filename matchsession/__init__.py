"""Online match session client.

Turns the asynchronous event stream of a matchmaking server into one
consistent session view and hands off to gameplay exactly once per
session.

Main entry point:
    EventRouter - routes every server event to the session controller

Components:
    TransitionController - owns the session phase and the hand-off
    RoomStateStore - canonical room snapshot
    IdentityResolver - local player position
    ReadinessTracker - ready signals per session
    SocketIOTransport - socket.io transport adapter
    DemoTransport - scripted server for trying the client offline
"""
from matchsession.bridge import (
    EventNames,
    InboundEvent,
    LoopbackTransport,
    SocketIOTransport,
    SubscriptionRegistry,
    TransportError,
    TransportProtocol,
    parse_event,
)
from matchsession.config import ClientConfig, load_config, load_env
from matchsession.demo_transport import DemoTransport
from matchsession.room import (
    IdentityResolver,
    ParticipantRef,
    Position,
    RoomSnapshot,
    RoomStateStore,
)
from matchsession.router import EventRouter, RoutingResult
from matchsession.session import (
    HandOff,
    MatchRequest,
    ReadinessTracker,
    RetryPolicy,
    SessionPhase,
    SessionView,
    TransitionController,
)

__version__ = "0.3.0"

__all__ = [
    # Main router
    "EventRouter",
    "RoutingResult",
    # Session components
    "TransitionController",
    "ReadinessTracker",
    "SessionPhase",
    "SessionView",
    "MatchRequest",
    "HandOff",
    "RetryPolicy",
    # Room components
    "RoomStateStore",
    "RoomSnapshot",
    "ParticipantRef",
    "IdentityResolver",
    "Position",
    # Transport
    "TransportProtocol",
    "TransportError",
    "EventNames",
    "InboundEvent",
    "parse_event",
    "SubscriptionRegistry",
    "LoopbackTransport",
    "SocketIOTransport",
    "DemoTransport",
    # Configuration
    "ClientConfig",
    "load_config",
    "load_env",
]
