from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Optional


class SchedulerState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    RUNNING = "running"


class EvaluationScheduler:
    """Debounces trigger events into evaluations, never running two at once.

    Every trigger cancels the armed timer and arms a new one. When a timer
    fires during a running evaluation, nothing starts concurrently; instead one
    follow-up is armed once the running evaluation completes, so the last DOM
    state is always the one evaluated.
    """

    def __init__(
        self,
        evaluate: Callable[[str], Awaitable[Any]],
        debounce_s: float,
        logger: Optional[logging.Logger] = None,
    ):
        self._evaluate = evaluate
        self.debounce_s = debounce_s
        self.logger = logger or logging.getLogger(__name__)

        self._timer: Optional[asyncio.TimerHandle] = None
        self._running = False
        self._follow_up: Optional[str] = None
        self._task: Optional[asyncio.Task] = None
        self._closed = False

        self.completed = 0
        self.dropped = 0

    @property
    def state(self) -> SchedulerState:
        if self._running:
            return SchedulerState.RUNNING
        if self._timer is not None:
            return SchedulerState.PENDING
        return SchedulerState.IDLE

    def trigger(self, reason: str = "mutation") -> None:
        """Arm (or re-arm) the debounce timer. Safe to call in any state."""
        if self._closed:
            return
        if self._timer is not None:
            self._timer.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.debounce_s, self._fire, reason)

    def _fire(self, reason: str) -> None:
        self._timer = None
        if self._running:
            self.dropped += 1
            self._follow_up = reason
            self.logger.debug(f"Evaluation busy, deferring '{reason}'")
            return
        self._running = True
        self._task = asyncio.get_running_loop().create_task(self._run(reason))

    async def run_now(self, reason: str) -> bool:
        """Evaluate immediately under the same guard. False if one was already running."""
        if self._running:
            self.dropped += 1
            self._follow_up = reason
            return False
        self._running = True
        await self._run(reason)
        return True

    async def _run(self, reason: str) -> None:
        try:
            await self._evaluate(reason)
        except Exception:
            self.logger.error(f"Evaluation '{reason}' failed", exc_info=True)
        finally:
            self._running = False
            self.completed += 1

        follow_up, self._follow_up = self._follow_up, None
        if follow_up is not None and self._timer is None:
            self.trigger(follow_up)

    async def wait_idle(self, poll_s: float = 0.01) -> None:
        while self.state is not SchedulerState.IDLE:
            task = self._task
            if task is not None and not task.done():
                await task
            else:
                await asyncio.sleep(poll_s)

    def close(self) -> None:
        """Cancel the armed timer and refuse new triggers. An in-flight evaluation runs to completion."""
        self._closed = True
        self._follow_up = None
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
