"""
Drivers

Root tasks have no awaiting caller; something outside the task core has to
perform their first resume and keep resuming whatever they park on until
they finish. These helpers are that outer loop.
"""

import time
from typing import Any, Callable, Optional

from ..core.errors import TaskNotFinished
from ..core.status import ContinuationState
from ..core.task import Task
from ..utils.logging import get_logger
from .timer import TimerLoop

logger = get_logger(__name__)


def _start(root: Task) -> None:
    handle = root.handle
    assert handle is not None, "driving an empty task"
    if handle.state is ContinuationState.CREATED:
        handle.resume()


def sync_wait(root: Task) -> Any:
    """
    Resume a root task once and return its result

    Raises:
        TaskNotFinished: The task suspended on something this driver cannot resume
    """
    _start(root)
    handle = root.handle
    if not handle.done():
        raise TaskNotFinished(
            f"Task {handle.name} is suspended and nothing is driving it",
            {"handle": handle.handle, "state": handle.state.value},
        )
    return root.result()


def run_until_complete(
    root: Task,
    loop: Optional[TimerLoop] = None,
    *,
    max_idle_sleep: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Any:
    """
    Drive a root task to completion with a timer loop

    Args:
        root: The root task
        loop: Timer loop the task's frames park on
        max_idle_sleep: Upper bound for a single idle sleep, in seconds
        sleep: Sleep function (injectable for tests)

    Returns:
        The root task's result; a captured error is re-raised here
    """
    _start(root)
    handle = root.handle
    iterations = 0

    while not handle.done():
        if loop is None:
            raise TaskNotFinished(
                f"Task {handle.name} suspended and no loop was given",
                {"handle": handle.handle},
            )
        delay = loop.run()
        iterations += 1
        if handle.done():
            break
        if delay is None:
            raise TaskNotFinished(
                f"Task {handle.name} is suspended with no pending timers",
                {"handle": handle.handle, "state": handle.state.value},
            )
        if max_idle_sleep is not None:
            delay = min(delay, max_idle_sleep)
        sleep(delay)

    logger.debug("root task finished", task=handle.name, loop_iterations=iterations)
    return root.result()
