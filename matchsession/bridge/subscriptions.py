# Area: Bridge (Transport to Session Integration)
"""Subscription registry - at most one live listener per event name."""
import logging
from typing import Dict, List

from matchsession.bridge.transport import Disposer, EventHandler, TransportProtocol

logger = logging.getLogger(__name__)


class SubscriptionRegistry:
    """Tracks disposers for listeners registered on a transport."""

    def __init__(self) -> None:
        self._disposers: Dict[str, Disposer] = {}

    def bind(
        self, transport: TransportProtocol, event: str, handler: EventHandler
    ) -> None:
        """Subscribe handler, replacing any earlier handler for event."""
        previous = self._disposers.pop(event, None)
        if previous is not None:
            logger.debug("Replacing existing subscription for %s", event)
            previous()
        self._disposers[event] = transport.on(event, handler)

    def unbind(self, event: str) -> bool:
        disposer = self._disposers.pop(event, None)
        if disposer is None:
            return False
        disposer()
        return True

    def dispose_all(self) -> None:
        for event in list(self._disposers):
            self.unbind(event)

    def active_events(self) -> List[str]:
        return list(self._disposers.keys())
