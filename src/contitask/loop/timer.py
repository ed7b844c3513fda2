"""
Timer Loop

A minimal external driver for suspended continuations: a min-heap of
(deadline, sequence, continuation) entries. ``run()`` resumes every expired
entry in deadline order and reports how long the caller may sleep before
the next one is due.
"""

import heapq
import itertools
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Generator, List, Optional

from ..core.awaiters import Awaiter
from ..core.continuation import Continuation
from ..core.tracing import TraceEvent, TracingMixin
from ..utils.logging import get_logger

logger = get_logger(__name__)

Clock = Callable[[], float]


@dataclass(order=True)
class TimerEntry:
    """A scheduled resumption"""

    deadline: float
    seq: int
    continuation: Continuation = field(compare=False)
    cancelled: bool = field(default=False, compare=False)
    fired: bool = field(default=False, compare=False)


class TimerLoop(TracingMixin):
    """
    Timer loop

    Holds strong references to the continuations it will resume; a timer
    whose awaiting frame is destroyed is cancelled and skipped.
    """

    def __init__(self, clock: Clock = time.monotonic):
        self._clock = clock
        self._heap: List[TimerEntry] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._clock()

    def add_timer(self, deadline: float, continuation: Continuation) -> TimerEntry:
        """Schedule ``continuation`` to be resumed at ``deadline``"""
        entry = TimerEntry(deadline, next(self._seq), continuation)
        heapq.heappush(self._heap, entry)
        logger.debug("timer added", task=continuation.name, deadline=deadline)
        return entry

    def cancel(self, entry: TimerEntry) -> None:
        """Cancel a pending timer; no-op once it fired"""
        if not entry.fired:
            entry.cancelled = True

    def pending(self) -> int:
        """Number of timers that are still due to fire"""
        return sum(1 for entry in self._heap if not entry.cancelled)

    def __len__(self) -> int:
        return self.pending()

    def __copy__(self) -> "TimerLoop":
        # a copied task argument must still park on the loop that is driven
        return self

    def __deepcopy__(self, memo) -> "TimerLoop":
        return self

    def run(self) -> Optional[float]:
        """
        Resume every expired timer

        Returns:
            Seconds until the next deadline, or None when no timers remain
        """
        while self._heap:
            entry = self._heap[0]
            if entry.cancelled:
                heapq.heappop(self._heap)
                continue

            now = self._clock()
            if entry.deadline > now:
                return entry.deadline - now

            heapq.heappop(self._heap)
            entry.fired = True
            continuation = entry.continuation
            self.trace_event(
                TraceEvent.TIMER,
                continuation.handle,
                continuation.name,
                metadata={"deadline": entry.deadline},
            )
            continuation.resume()
        return None

    def sleep_until(self, deadline: float) -> "TimerAwaiter":
        """Suspend the awaiting task until ``deadline`` (clock time)"""
        return TimerAwaiter(self, deadline)

    def sleep_for(self, seconds: float) -> "TimerAwaiter":
        """Suspend the awaiting task for ``seconds``"""
        return TimerAwaiter(self, self._clock() + seconds)


class TimerAwaiter(Awaiter):
    """
    Awaiter that parks its caller in a TimerLoop

    If the awaiting frame is destroyed while parked, the timer entry is
    cancelled so the loop never resumes a dead continuation.
    """

    def __init__(self, loop: TimerLoop, deadline: float):
        self._loop = loop
        self.deadline = deadline
        self._entry: Optional[TimerEntry] = None

    def await_suspend(self, caller: Continuation) -> Optional[Continuation]:
        self._entry = self._loop.add_timer(self.deadline, caller)
        return None

    def await_resume(self) -> None:
        self._entry = None

    def cancel(self) -> None:
        if self._entry is not None:
            self._loop.cancel(self._entry)
            self._entry = None

    def __await__(self) -> Generator[Awaiter, None, Any]:
        try:
            yield self
        except GeneratorExit:
            self.cancel()
            raise
        return self.await_resume()
