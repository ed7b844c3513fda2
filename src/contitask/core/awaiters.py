"""
等待器 (Awaiters)

所有等待器遵循同一协议：
- await_ready(): 返回 True 则不挂起，直接 await_resume()
- await_suspend(caller): 挂起 caller 后调用，返回下一个要恢复的续体；
  返回 None 表示把控制权交还给恢复这条链的一方，返回 caller 表示立即继续
- await_resume(): 恢复后 await 表达式的值

__await__ 只在需要挂起时把等待器本身 yield 给蹦床 (trampoline)，
因此嵌套 await 不会叠加 Python 栈帧
"""

import weakref
from typing import TYPE_CHECKING, Any, Generator, Optional

from .status import ContinuationState, StartPolicy

if TYPE_CHECKING:
    from .continuation import Continuation
    from .task import Task


class Awaiter:
    """等待器基类"""

    # caller 挂起在此等待器上时所处的状态
    suspended_state = ContinuationState.SUSPENDED

    def await_ready(self) -> bool:
        return False

    def await_suspend(self, caller: "Continuation") -> Optional["Continuation"]:
        return None

    def await_resume(self) -> Any:
        return None

    def __await__(self) -> Generator["Awaiter", None, Any]:
        if not self.await_ready():
            yield self
        return self.await_resume()


class StopAwaiter(Awaiter):
    """
    停止点

    suspend=True 时真正挂起，False 时直接继续；用于初始挂起策略
    """

    def __init__(self, suspend: bool = True):
        self.suspend = suspend

    def await_ready(self) -> bool:
        return not self.suspend

    @classmethod
    def for_start(cls, start: StartPolicy) -> "StopAwaiter":
        return suspend_always if start is StartPolicy.LAZY else suspend_never

    def __repr__(self) -> str:
        return f"StopAwaiter(suspend={self.suspend})"


suspend_always = StopAwaiter(True)
suspend_never = StopAwaiter(False)


class PreviousAwaiter(Awaiter):
    """
    最终挂起等待器

    总是挂起；若 previous 仍然存活则直接转移到它，否则保持挂起（分离的根任务）
    """

    suspended_state = ContinuationState.FINAL_SUSPENDED

    def __init__(self, previous: Optional["weakref.ref[Continuation]"]):
        self._previous = previous

    def await_suspend(self, caller: "Continuation") -> Optional["Continuation"]:
        if self._previous is None:
            return None
        previous = self._previous()
        if previous is None or previous.destroyed:
            return None
        return previous


class ExitAwaiter(Awaiter):
    """
    await 集成等待器

    挂起时把 caller 记录为被等待任务 Promise 的 previous，
    并把被等待任务的续体指定为下一个恢复对象（转移而非嵌套调用）；
    恢复时读取被等待任务的结果，捕获的异常在此处重新抛出

    被等待任务停在 co_yield 上（YIELDED）时没有任何一方会继续驱动它，
    这种等待被拒绝：AssertionError 在 await 处抛回调用方的任务体
    """

    def __init__(self, task: "Task"):
        # 持有 Task 本身，保证 `await make_task()` 的临时对象在等待期间存活
        self._task = task

    def await_ready(self) -> bool:
        handle = self._task.handle
        assert handle is not None, "awaiting an empty task"
        return handle.done()

    def await_suspend(self, caller: "Continuation") -> Optional["Continuation"]:
        handle = self._task.handle
        assert handle.state is not ContinuationState.YIELDED, "awaiting a task parked on co_yield"
        handle.promise.set_previous(caller)
        if handle.state is ContinuationState.CREATED:
            return handle
        # 已启动（eager）且挂起在别处的任务：完成时会通过 previous 恢复 caller
        return None

    def await_resume(self) -> Any:
        return self._task.handle.promise.result()


class YieldAwaiter(Awaiter):
    """生成器模式的 yield：写入中间值后挂起，交还控制权"""

    suspended_state = ContinuationState.YIELDED

    def __init__(self, value: Any):
        self._value = value

    def await_suspend(self, caller: "Continuation") -> Optional["Continuation"]:
        stop = caller.promise.yield_value(self._value)
        return None if stop.suspend else caller


def co_yield(value: Any) -> YieldAwaiter:
    """在任务体中产出一个中间值：``await co_yield(v)``"""
    return YieldAwaiter(value)
