# Area: Session Lifecycle
"""Timer scheduling and reconnect backoff for the session controller."""
import asyncio
from dataclasses import dataclass
from typing import Any, Callable, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Anything that can run a callback after a delay and cancel it."""

    def call_later(
        self, delay: float, callback: Callable[..., Any], *args: Any
    ) -> TimerHandle: ...


class AsyncioScheduler:
    """Schedules on the running asyncio loop."""

    def call_later(
        self, delay: float, callback: Callable[..., Any], *args: Any
    ) -> asyncio.TimerHandle:
        return asyncio.get_running_loop().call_later(delay, callback, *args)


@dataclass(frozen=True)
class RetryPolicy:
    """Bounds the already-in-a-room recovery loop.

    Attempt 1 reconnects immediately. Later attempts back off
    exponentially from base_delay, capped at max_delay.
    """
    max_attempts: int = 3
    base_delay: float = 0.5
    max_delay: float = 4.0

    def delay_for(self, attempt: int) -> float:
        if attempt <= 1:
            return 0.0
        return min(self.base_delay * (2 ** (attempt - 2)), self.max_delay)

    def allows(self, attempt: int) -> bool:
        return attempt <= self.max_attempts
