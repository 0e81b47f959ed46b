"""Cancellable delayed callbacks for the pause between cooking steps."""
from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple


@dataclass(order=True)
class TimerHandle:
    due: float
    sequence: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)
    fired: bool = field(default=False, compare=False)


class ManualScheduler:
    """Scheduler driven by explicit clock ticks.

    Nothing fires until :meth:`advance` moves the clock past a handle's due
    time, which makes the dwell between steps easy to test and to drive from
    a game loop.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: List[TimerHandle] = []
        self._counter = itertools.count()

    def schedule(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        if delay < 0:
            raise ValueError("delay cannot be negative")
        handle = TimerHandle(self.now + float(delay), next(self._counter), callback)
        heapq.heappush(self._queue, handle)
        return handle

    def cancel(self, handle: Optional[TimerHandle]) -> None:
        if handle is not None:
            handle.cancelled = True

    def pending(self) -> int:
        return sum(1 for handle in self._queue if not handle.cancelled)

    def advance(self, seconds: float) -> int:
        """Move the clock forward and fire every callback now due."""

        target = self.now + float(seconds)
        fired = 0
        while self._queue and self._queue[0].due <= target:
            handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self.now = handle.due
            handle.fired = True
            handle.callback()
            fired += 1
        self.now = target
        return fired


class TkScheduler:
    """Adapter over a Tk widget's ``after``/``after_cancel`` pair."""

    def __init__(self, widget: Any) -> None:
        self.widget = widget
        self._jobs: Dict[int, Tuple[str, TimerHandle]] = {}
        self._counter = itertools.count()

    def schedule(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        if delay < 0:
            raise ValueError("delay cannot be negative")
        handle = TimerHandle(float(delay), next(self._counter), callback)

        def run() -> None:
            self._jobs.pop(handle.sequence, None)
            if handle.cancelled:
                return
            handle.fired = True
            callback()

        job_id = self.widget.after(int(round(delay * 1000)), run)
        self._jobs[handle.sequence] = (job_id, handle)
        return handle

    def cancel(self, handle: Optional[TimerHandle]) -> None:
        if handle is None:
            return
        handle.cancelled = True
        entry = self._jobs.pop(handle.sequence, None)
        if entry is not None:
            self.widget.after_cancel(entry[0])
