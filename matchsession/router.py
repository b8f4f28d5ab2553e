"""Event Router - unified routing for all server-pushed session events.

Provides a single entry point that parses each transport event, stamps it
with the live session and hands it to the matching TransitionController
handler.
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from matchsession.bridge.event_parser import InboundEvent, parse_event
from matchsession.bridge.subscriptions import SubscriptionRegistry
from matchsession.bridge.transport import EventNames, TransportProtocol
from matchsession.session.controller import TransitionController
from matchsession.session.phases import SessionPhase
from matchsession.shared.logging.protocol_logger import log_received


@dataclass
class RoutingResult:
    """Result of routing one event."""
    event: Optional[InboundEvent]  # Parsed event, or None if unknown
    phase_before: SessionPhase
    phase_after: SessionPhase
    handled: bool  # Whether a handler exists for the event name

    @property
    def transitioned(self) -> bool:
        return self.phase_before is not self.phase_after


class EventRouter:
    """Routes transport events to the TransitionController.

    Event name -> handler:
    - player-created -> on_participant_created
    - room-joined -> on_room_joined
    - player-joined-room -> on_participant_joined_room
    - player-ready -> on_participant_ready
    - left-room -> on_left_room
    - error -> on_error
    """

    def __init__(self, controller: TransitionController, source: str = "server") -> None:
        """Initialize the EventRouter.

        Args:
            controller: Session controller receiving the events.
            source: Label used in protocol log lines.
        """
        self._controller = controller
        self._source = source
        self._subscriptions = SubscriptionRegistry()
        self._handlers: Dict[str, Callable[[InboundEvent], None]] = {
            EventNames.PARTICIPANT_CREATED: controller.on_participant_created,
            EventNames.ROOM_JOINED: controller.on_room_joined,
            EventNames.PARTICIPANT_JOINED_ROOM: controller.on_participant_joined_room,
            EventNames.PARTICIPANT_READY: controller.on_participant_ready,
            EventNames.LEFT_ROOM: controller.on_left_room,
            EventNames.ERROR: controller.on_error,
        }

    @property
    def controller(self) -> TransitionController:
        return self._controller

    def attach(self, transport: TransportProtocol) -> None:
        """Subscribe one listener per event name on transport.

        Attaching again replaces the earlier subscriptions instead of
        stacking a second listener.
        """
        for event_name in self._handlers:
            self._subscriptions.bind(transport, event_name, self._make_listener(event_name))

    def detach(self) -> None:
        """Dispose every subscription made by attach()."""
        self._subscriptions.dispose_all()

    def subscribed_events(self) -> list:
        return self._subscriptions.active_events()

    def route_event(self, event_name: str, payload: Any) -> RoutingResult:
        """Route one event to its handler.

        Args:
            event_name: Wire event name.
            payload: Raw event payload.

        Returns:
            RoutingResult describing the phase change, if any.
        """
        phase_before = self._controller.phase
        handler = self._handlers.get(event_name)
        if handler is None:
            return RoutingResult(
                event=None,
                phase_before=phase_before,
                phase_after=phase_before,
                handled=False,
            )

        event = parse_event(event_name, payload, self._controller.live_session_id)
        log_received(event_name, self._source)
        handler(event)
        return RoutingResult(
            event=event,
            phase_before=phase_before,
            phase_after=self._controller.phase,
            handled=True,
        )

    def _make_listener(self, event_name: str) -> Callable[[Any], None]:
        def listener(payload: Any) -> None:
            self.route_event(event_name, payload)
        return listener
