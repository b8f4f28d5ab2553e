# Area: Session Lifecycle
"""Transition Controller - drives one matchmaking session to gameplay.

Owns SessionPhase and the session context. Room events go through the
RoomStateStore and IdentityResolver, ready events through the
ReadinessTracker. The gameplay hand-off fires at most once per session:
GAME_STARTING latches it, and every timer callback re-checks the live
session id before acting.
"""
import asyncio
import itertools
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Set

from matchsession.bridge.event_parser import InboundEvent
from matchsession.bridge.transport import Disposer, TransportError, TransportProtocol
from matchsession.room.identity import IdentityResolver, Position
from matchsession.room.models import RoomSnapshot
from matchsession.room.store import RoomStateStore
from matchsession.session.phases import (
    IN_ROOM_PHASES,
    HandOff,
    MatchRequest,
    SessionPhase,
    SessionView,
)
from matchsession.session.readiness import ReadinessTracker
from matchsession.session.scheduling import (
    AsyncioScheduler,
    RetryPolicy,
    Scheduler,
    TimerHandle,
)
from matchsession.shared.logging.protocol_logger import (
    log_error,
    log_hand_off,
    log_rejected,
    log_transition,
    set_session_context,
)

logger = logging.getLogger(__name__)

POPULATION_START_DELAY = 2.0
READINESS_START_DELAY = 1.0

ROOM_EVENT_PHASES = frozenset({SessionPhase.MATCHMAKING}) | IN_ROOM_PHASES

HandOffTarget = Callable[[HandOff], None]
ViewListener = Callable[[SessionView], None]


@dataclass
class SessionContext:
    """Mutable per-session state, only touched by the controller."""
    session_id: int
    request: MatchRequest
    local_connection_id: Optional[str]
    position: Position = Position.UNASSIGNED
    timer: Optional[TimerHandle] = None
    hand_off_fired: bool = False
    recovery_attempts: int = 0
    recovering: bool = False


def _spawn_task(coro: Awaitable[Any]) -> "asyncio.Future[Any]":
    return asyncio.ensure_future(coro)


class TransitionController:
    """Session state machine.

    IDLE -> MATCHMAKING -> ROOM_JOINED -> WAITING_FOR_PLAYERS -> BOTH_READY
    -> GAME_STARTING -> IDLE, with cancel and left-room returning to IDLE.
    """

    def __init__(
        self,
        transport: TransportProtocol,
        hand_off: Optional[HandOffTarget] = None,
        scheduler: Optional[Scheduler] = None,
        room_store: Optional[RoomStateStore] = None,
        resolver: Optional[IdentityResolver] = None,
        readiness: Optional[ReadinessTracker] = None,
        retry_policy: Optional[RetryPolicy] = None,
        population_start_delay: float = POPULATION_START_DELAY,
        readiness_start_delay: float = READINESS_START_DELAY,
        task_factory: Optional[Callable[[Awaitable[Any]], Any]] = None,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
    ) -> None:
        self._transport = transport
        self._hand_off = hand_off
        self._scheduler = scheduler or AsyncioScheduler()
        self._room_store = room_store or RoomStateStore()
        self._resolver = resolver or IdentityResolver()
        self._readiness = readiness or ReadinessTracker()
        self._retry_policy = retry_policy or RetryPolicy()
        self._population_start_delay = population_start_delay
        self._readiness_start_delay = readiness_start_delay
        self._task_factory = task_factory or _spawn_task
        self._sleep = sleep or asyncio.sleep

        self._phase = SessionPhase.IDLE
        self._session: Optional[SessionContext] = None
        self._session_ids = itertools.count(1)
        self._participant_created = False
        self._listeners: List[ViewListener] = []
        self._tasks: Set[Any] = set()

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def live_session_id(self) -> Optional[int]:
        return self._session.session_id if self._session else None

    @property
    def participant_created(self) -> bool:
        return self._participant_created

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry_policy

    def view(self) -> SessionView:
        """Current read-only state. Empty apart from the phase when idle."""
        session = self._session
        if session is None:
            return SessionView(phase=self._phase)
        return SessionView(
            phase=self._phase,
            session_id=session.session_id,
            local_connection_id=session.local_connection_id,
            room=self._room_store.snapshot,
            position=session.position,
            ready_ids=self._readiness.ready_ids,
        )

    def add_listener(self, listener: ViewListener) -> Disposer:
        """Call listener with a fresh SessionView after every state change."""
        self._listeners.append(listener)

        def dispose() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return dispose

    def set_hand_off(self, target: Optional[HandOffTarget]) -> None:
        """Replace the hand-off target. Pending timers use the new one."""
        self._hand_off = target

    # ------------------------------------------------------------------
    # Outbound operations
    # ------------------------------------------------------------------

    async def request_match(self, selected_variant: Any) -> Optional[int]:
        """Start a new session and ask the server for a match.

        Returns:
            The new session id, or None when the request was not allowed
            or the transport refused it.
        """
        if self._phase is not SessionPhase.IDLE:
            logger.warning(
                "Matchmaking already in progress (%s), ignoring request",
                self._phase.value,
            )
            return None
        if not self._transport.is_connected() or not self._participant_created:
            logger.warning(
                "Cannot start matchmaking: connected=%s participant_created=%s",
                self._transport.is_connected(), self._participant_created,
            )
            return None

        session = self._start_session(selected_variant)
        try:
            await self._transport.request_match(session.request)
        except TransportError as e:
            log_error(f"Match request failed: {e}")
            if self._is_live(session.session_id):
                self._end_session("request failed")
            return None
        return session.session_id

    async def cancel(self) -> bool:
        """Cancel matchmaking. Only valid while MATCHMAKING."""
        if self._phase is not SessionPhase.MATCHMAKING:
            logger.warning("Cancel ignored in phase %s", self._phase.value)
            return False
        self._end_session("cancelled")
        try:
            await self._transport.cancel_match()
        except TransportError as e:
            log_error(f"Cancel request failed: {e}")
        return True

    # ------------------------------------------------------------------
    # Inbound events
    # ------------------------------------------------------------------

    def on_participant_created(self, event: InboundEvent) -> None:
        self._participant_created = True
        logger.info("Participant created, matchmaking available")

    def on_room_joined(self, event: InboundEvent) -> None:
        # The event itself proves at least one participant
        self._apply_room_event(event, fallback_count=1)

    def on_participant_joined_room(self, event: InboundEvent) -> None:
        self._apply_room_event(event, fallback_count=None)

    def on_participant_ready(self, event: InboundEvent) -> None:
        if not self._accept(event, IN_ROOM_PHASES):
            return
        if event.connection_id is not None or not event.all_ready:
            self._readiness.mark_ready(event.connection_id)
        if event.all_ready:
            self._readiness.declare_all_ready()
        self._notify()

        if self._phase is SessionPhase.GAME_STARTING:
            logger.debug("Game already starting, ready signal recorded only")
            return
        if self._readiness.is_complete():
            self._latch_game_start()

    def on_left_room(self, event: InboundEvent) -> None:
        if self._session is None:
            logger.debug("left-room while idle - nothing to reset")
            return
        if event.session_id != self._session.session_id:
            log_rejected(event.name, f"stale session {event.session_id}")
            return
        self._end_session("left room")

    def on_error(self, event: InboundEvent) -> None:
        session = self._session
        if (
            event.is_room_conflict
            and session is not None
            and self._phase is SessionPhase.MATCHMAKING
            and event.session_id == session.session_id
        ):
            if session.recovering:
                logger.info("Room conflict recovery already running")
                return
            session.recovering = True
            self._spawn(self.recover_from_room_conflict(session.session_id))
            return

        message = (
            f"Server error {event.error_type or 'UNKNOWN'}: "
            f"{event.error_message or '(no message)'}"
        )
        log_error(message)
        logger.error(message)

    # ------------------------------------------------------------------
    # Recovery
    # ------------------------------------------------------------------

    async def recover_from_room_conflict(self, session_id: int) -> bool:
        """Reconnect and replay the original match request.

        Returns:
            True if the request was re-issued, False if the session went
            away meanwhile or the retry budget was exhausted.
        """
        session = self._matchmaking_session(session_id)
        if session is None:
            return False
        session.recovering = True
        session.recovery_attempts += 1
        attempt = session.recovery_attempts
        try:
            if not self._retry_policy.allows(attempt):
                await self._give_up(
                    session_id,
                    f"still in a room after {attempt - 1} reconnect attempts",
                )
                return False

            delay = self._retry_policy.delay_for(attempt)
            if delay:
                await self._sleep(delay)
            if self._matchmaking_session(session_id) is None:
                return False

            logger.info(
                "Room conflict, reconnecting (attempt %d/%d)",
                attempt, self._retry_policy.max_attempts,
            )
            try:
                await self._transport.force_reconnect()
            except TransportError as e:
                await self._give_up(session_id, f"reconnect failed: {e}")
                return False

            if self._matchmaking_session(session_id) is None:
                logger.info("Session %d ended during reconnect", session_id)
                return False
            session.local_connection_id = (
                self._transport.connection_id() or session.local_connection_id
            )
            try:
                await self._transport.request_match(session.request)
            except TransportError as e:
                await self._give_up(session_id, f"retry request failed: {e}")
                return False
            return True
        finally:
            session.recovering = False

    async def _give_up(self, session_id: int, reason: str) -> None:
        if not self._is_live(session_id):
            return
        log_error(f"Matchmaking abandoned: {reason}")
        self._end_session(reason)
        try:
            await self._transport.cancel_match()
        except TransportError as e:
            logger.warning("Cancel after failed recovery also failed: %s", e)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _start_session(self, selected_variant: Any) -> SessionContext:
        self._readiness.reset()
        self._room_store.clear()
        session_id = next(self._session_ids)
        local_id = self._transport.connection_id()
        session = SessionContext(
            session_id=session_id,
            request=MatchRequest(
                session_id=session_id,
                connection_id=local_id,
                selected_variant=selected_variant,
            ),
            local_connection_id=local_id,
        )
        self._session = session
        set_session_context(session_id)
        self._set_phase(SessionPhase.MATCHMAKING)
        return session

    def _end_session(self, reason: str) -> None:
        session = self._session
        if session is not None:
            self._cancel_timer(session)
            logger.info("Session %d ended: %s", session.session_id, reason)
        self._session = None
        self._readiness.reset()
        self._room_store.clear()
        set_session_context(None)
        self._set_phase(SessionPhase.IDLE)

    def _is_live(self, session_id: int) -> bool:
        return self._session is not None and self._session.session_id == session_id

    def _matchmaking_session(self, session_id: int) -> Optional[SessionContext]:
        if self._is_live(session_id) and self._phase is SessionPhase.MATCHMAKING:
            return self._session
        return None

    def _accept(self, event: InboundEvent, phases: frozenset) -> bool:
        """Gate an event on the live session and the current phase."""
        session = self._session
        if session is None or event.session_id != session.session_id:
            log_rejected(event.name, f"no live session {event.session_id}")
            logger.warning(
                "Discarding %s for session %s (live: %s)",
                event.name, event.session_id, self.live_session_id,
            )
            return False
        if self._phase not in phases:
            log_rejected(event.name, f"not expected in {self._phase.value}")
            return False
        return True

    def _apply_room_event(
        self, event: InboundEvent, fallback_count: Optional[int]
    ) -> None:
        if not self._accept(event, ROOM_EVENT_PHASES):
            return
        session = self._session
        entering = self._phase is SessionPhase.MATCHMAKING
        if entering:
            self._readiness.reset()

        snapshot = self._room_store.apply_room_event(event.payload, fallback_count)
        session.position = self._resolver.resolve(
            snapshot, session.local_connection_id, session.position
        )
        set_session_context(session.session_id, session.position.value)

        if entering:
            self._set_phase(SessionPhase.ROOM_JOINED)
        self._evaluate_population(snapshot)
        self._notify()

    def _evaluate_population(self, snapshot: RoomSnapshot) -> None:
        if self._phase is SessionPhase.ROOM_JOINED:
            if snapshot.is_full:
                self._enter_both_ready_by_population()
            else:
                self._set_phase(SessionPhase.WAITING_FOR_PLAYERS)
        elif self._phase is SessionPhase.WAITING_FOR_PLAYERS and snapshot.is_full:
            self._enter_both_ready_by_population()

    def _enter_both_ready_by_population(self) -> None:
        session = self._session
        self._set_phase(SessionPhase.BOTH_READY)
        self._cancel_timer(session)
        session.timer = self._scheduler.call_later(
            self._population_start_delay,
            self._on_population_timer,
            session.session_id,
        )

    def _latch_game_start(self) -> None:
        session = self._session
        if self._phase is not SessionPhase.BOTH_READY:
            self._set_phase(SessionPhase.BOTH_READY)
        self._cancel_timer(session)
        self._set_phase(SessionPhase.GAME_STARTING)
        session.timer = self._scheduler.call_later(
            self._readiness_start_delay,
            self._on_readiness_timer,
            session.session_id,
        )

    def _on_population_timer(self, session_id: int) -> None:
        if not self._is_live(session_id):
            logger.debug("Population timer for ended session %d ignored", session_id)
            return
        if self._phase is not SessionPhase.BOTH_READY:
            return
        self._session.timer = None
        self._set_phase(SessionPhase.GAME_STARTING)
        self._fire_hand_off("population")

    def _on_readiness_timer(self, session_id: int) -> None:
        if not self._is_live(session_id):
            logger.debug("Readiness timer for ended session %d ignored", session_id)
            return
        if self._phase is not SessionPhase.GAME_STARTING:
            return
        self._session.timer = None
        self._fire_hand_off("readiness")

    def _fire_hand_off(self, trigger: str) -> None:
        session = self._session
        if session is None or session.hand_off_fired:
            return
        session.hand_off_fired = True
        hand_off = HandOff(
            session_id=session.session_id,
            position=session.position,
            room=self._room_store.snapshot,
            trigger=trigger,
        )
        log_hand_off(hand_off.mode, trigger)
        self._end_session("handed off to gameplay")

        target = self._hand_off
        if target is None:
            logger.warning("No hand-off target set for session %d", hand_off.session_id)
            return
        try:
            target(hand_off)
        except Exception:
            logger.exception("Hand-off target failed for session %d", hand_off.session_id)

    def _cancel_timer(self, session: Optional[SessionContext]) -> None:
        if session is not None and session.timer is not None:
            session.timer.cancel()
            session.timer = None

    def _set_phase(self, phase: SessionPhase) -> None:
        if phase is self._phase:
            return
        old = self._phase
        self._phase = phase
        log_transition(old.value, phase.value)
        logger.info("Phase %s -> %s", old.value, phase.value)
        self._notify()

    def _notify(self) -> None:
        view = self.view()
        for listener in list(self._listeners):
            try:
                listener(view)
            except Exception:
                logger.exception("Session view listener failed")

    def _spawn(self, coro: Awaitable[Any]) -> None:
        task = self._task_factory(coro)
        if isinstance(task, asyncio.Future):
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
