"""
Promise

每次任务调用的控制对象：结果槽 + 指向 "完成后应恢复谁" 的弱引用 previous
"""

import weakref
from typing import TYPE_CHECKING, Any, Optional

from .awaiters import PreviousAwaiter, StopAwaiter, suspend_always
from .result import ResultSlot, SlotState
from .status import StartPolicy

if TYPE_CHECKING:
    from .continuation import Continuation


class Promise:
    """
    Promise

    只由任务体自身的完成、yield、异常事件修改；
    任务体中的异常不会同步穿过帧边界，只在读取结果时出现
    """

    def __init__(self, start: StartPolicy = StartPolicy.LAZY):
        self.start = start
        self.previous: Optional["weakref.ref[Continuation]"] = None
        self._slot = ResultSlot()

    @property
    def slot_state(self) -> SlotState:
        return self._slot.state

    @property
    def error(self) -> Optional[BaseException]:
        return self._slot.error

    def ready(self) -> bool:
        """是否有可读取的结果"""
        return self._slot.is_ready()

    def initial_suspend(self) -> StopAwaiter:
        return StopAwaiter.for_start(self.start)

    def final_suspend(self) -> PreviousAwaiter:
        return PreviousAwaiter(self.previous)

    def set_previous(self, caller: "Continuation") -> None:
        """记录 await 本任务的续体，每个等待关系只设置一次"""
        assert self.previous is None, "task is already being awaited"
        self.previous = weakref.ref(caller)

    def return_value(self, value: Any) -> None:
        self._slot.set_value(value)

    def yield_value(self, value: Any) -> StopAwaiter:
        self._slot.put(value)
        return suspend_always

    def unhandled_exception(self, error: Exception) -> None:
        self._slot.set_error(error)

    def result(self) -> Any:
        """
        读取结果

        记录了异常则重新抛出，否则移出存储的值；每次完成只应调用一次
        """
        return self._slot.take()

    def __repr__(self) -> str:
        return f"Promise(start={self.start.value}, slot={self._slot.state.value})"
