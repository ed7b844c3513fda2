"""Drivers for root tasks"""

from .timer import TimerLoop, TimerAwaiter, TimerEntry
from .driver import sync_wait, run_until_complete

__all__ = [
    "TimerLoop",
    "TimerAwaiter",
    "TimerEntry",
    "sync_wait",
    "run_until_complete",
]
