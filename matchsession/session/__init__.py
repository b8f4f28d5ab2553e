"""Session package.

Tracks readiness and drives the matchmaking session state machine up to
the hand-off into gameplay.
"""
from matchsession.session.controller import TransitionController
from matchsession.session.phases import (
    HandOff,
    MatchRequest,
    SessionPhase,
    SessionView,
)
from matchsession.session.readiness import ReadinessTracker
from matchsession.session.scheduling import AsyncioScheduler, RetryPolicy

__all__ = [
    "TransitionController", "ReadinessTracker",
    "SessionPhase", "SessionView", "MatchRequest", "HandOff",
    "AsyncioScheduler", "RetryPolicy",
]
