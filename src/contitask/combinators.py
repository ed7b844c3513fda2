"""
组合器

- when_any: 等待多个任务中第一个完成的那个
- repeat: 以显式的参数复制语义多次调用同一个任务生成函数
"""

import copy
import weakref
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Sequence, Tuple, Union

from .core.awaiters import Awaiter
from .core.continuation import Continuation
from .core.task import Task, task


class _WhenAnyBlock:
    """when_any 控制块：第一个完成者及等待中的调用方"""

    def __init__(self):
        self.previous: Optional["weakref.ref[Continuation]"] = None
        self.winner: Optional[Tuple[int, Any, Optional[Exception]]] = None


class _WakeAwaiter(Awaiter):
    """胜出的观察任务挂起在此处，并把控制权转移给等待中的调用方"""

    def __init__(self, block: _WhenAnyBlock):
        self._block = block

    def await_suspend(self, caller: Continuation) -> Optional[Continuation]:
        previous, self._block.previous = self._block.previous, None
        if previous is None:
            return None
        target = previous()
        if target is None or target.destroyed:
            return None
        return target


class _WhenAnyAwaiter(Awaiter):
    """依次启动观察任务；已有胜出者时不再启动新的"""

    def __init__(self, block: _WhenAnyBlock, watchers: Sequence[Task]):
        self._block = block
        self._watchers = watchers

    def await_suspend(self, caller: Continuation) -> Optional[Continuation]:
        for watcher in self._watchers:
            if self._block.winner is not None:
                break
            watcher.handle.resume()
        if self._block.winner is not None:
            return caller
        self._block.previous = weakref.ref(caller)
        return None


@task
async def _watch(index: int, awaitable: Awaitable[Any], block: _WhenAnyBlock) -> None:
    try:
        value = await awaitable
    except Exception as exc:
        outcome = (index, None, exc)
    else:
        outcome = (index, value, None)
    if block.winner is None:
        block.winner = outcome
        await _WakeAwaiter(block)


@task
async def when_any(*awaitables: Awaitable[Any]) -> Tuple[int, Any]:
    """
    等待第一个完成的任务

    Returns:
        (index, value)：胜出者在参数中的位置及其结果；胜出者的异常在此重新抛出

    未胜出的观察任务随 when_any 返回一起销毁；调用方仍持有引用的子任务不受影响
    """
    if not awaitables:
        raise ValueError("when_any() requires at least one awaitable")

    block = _WhenAnyBlock()
    watchers = [_watch(i, awaitable, block) for i, awaitable in enumerate(awaitables)]
    try:
        await _WhenAnyAwaiter(block, watchers)
    finally:
        for watcher in watchers:
            watcher.destroy()

    index, value, error = block.winner
    if error is not None:
        raise error
    return index, value


@task
async def repeat(
    factory: Callable[..., Task],
    times: int,
    *args: Any,
    copy_args: Union[bool, Iterable[int]] = True,
) -> List[Any]:
    """
    依次 await factory(*args) times 次，返回结果列表

    copy_args 决定每次调用前哪些位置参数被深拷贝：
    - True: 全部参数，各次调用互不影响
    - False: 不拷贝，所有调用共享同一批参数对象
    - 位置下标的集合: 只拷贝这些参数，其余共享

    TimerLoop 的拷贝即其自身；Task 只可移动，作为参数时必须共享传入
    """
    if times < 0:
        raise ValueError(f"times must be non-negative, got {times}")

    if isinstance(copy_args, bool):
        copied = set(range(len(args))) if copy_args else set()
    else:
        copied = set(copy_args)
        invalid = sorted(i for i in copied if not 0 <= i < len(args))
        if invalid:
            raise ValueError(f"copy_args positions out of range: {invalid}")

    results = []
    for _ in range(times):
        memo: dict = {}
        call_args = tuple(
            copy.deepcopy(arg, memo) if i in copied else arg for i, arg in enumerate(args)
        )
        results.append(await factory(*call_args))
    return results
