"""Shared fixtures: a manual clock scheduler and a wired controller."""
import asyncio

import pytest

from matchsession.bridge.loopback import LoopbackTransport
from matchsession.bridge.transport import EventNames
from matchsession.router import EventRouter
from matchsession.session.controller import TransitionController


class ManualHandle:
    def __init__(self, when, callback, args):
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True

    def fire(self):
        """Run the callback regardless of cancellation, like a stale closure."""
        self.fired = True
        self.callback(*self.args)


class ManualScheduler:
    """Scheduler driven by advance() instead of wall-clock time."""

    def __init__(self):
        self.now = 0.0
        self.handles = []

    def call_later(self, delay, callback, *args):
        handle = ManualHandle(self.now + delay, callback, args)
        self.handles.append(handle)
        return handle

    def pending(self):
        return [h for h in self.handles if not h.cancelled and not h.fired]

    def advance(self, seconds):
        target = self.now + seconds
        while True:
            due = sorted(
                (h for h in self.pending() if h.when <= target),
                key=lambda h: h.when,
            )
            if not due:
                break
            handle = due[0]
            self.now = handle.when
            handle.fire()
        self.now = target


class Harness:
    """Controller wired to a loopback transport through the router."""

    def __init__(self, connection_id="A", transport=None, **controller_kwargs):
        self.transport = transport or LoopbackTransport(connection_id=connection_id)
        self.scheduler = ManualScheduler()
        self.hand_offs = []
        self.spawned = []
        self.sleeps = []

        async def fake_sleep(delay):
            self.sleeps.append(delay)

        self.controller = TransitionController(
            self.transport,
            hand_off=self.hand_offs.append,
            scheduler=self.scheduler,
            task_factory=self.spawned.append,
            sleep=fake_sleep,
            **controller_kwargs,
        )
        self.router = EventRouter(self.controller)
        self.router.attach(self.transport)

    def deliver(self, event, payload=None):
        self.transport.deliver(event, payload)

    def start_matchmaking(self, variant=0):
        self.deliver(EventNames.PARTICIPANT_CREATED, {})
        return asyncio.run(self.controller.request_match(variant))

    def run_spawned(self):
        """Run every spawned coroutine, oldest first. Returns their results."""
        results = []
        while self.spawned:
            results.append(asyncio.run(self.spawned.pop(0)))
        return results


@pytest.fixture
def harness():
    return Harness()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def make_harness():
    return Harness
