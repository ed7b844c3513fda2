"""
结果槽 (Result Slot)

单次写入的带标签存储：{PENDING | VALUE | ERROR}
生成器模式下允许多次写入中间值 (YIELDED)
"""

from enum import Enum
from typing import Any, Optional

from .errors import DoubleCompletionError, ResultUnavailable


class SlotState(str, Enum):
    """结果槽状态"""

    PENDING = "pending"
    YIELDED = "yielded"
    VALUE = "value"
    ERROR = "error"
    CONSUMED = "consumed"


class ResultSlot:
    """
    结果槽

    - set_value / set_error: 最终结果，只能二选一写入一次
    - put: 生成器模式的中间值，可被后续 put 或 set_value 覆盖
    - take: 取走结果（错误则重新抛出），之后槽变为 CONSUMED
    """

    def __init__(self) -> None:
        self._state = SlotState.PENDING
        self._value: Any = None
        self._error: Optional[BaseException] = None

    @property
    def state(self) -> SlotState:
        return self._state

    @property
    def error(self) -> Optional[BaseException]:
        return self._error

    def has_error(self) -> bool:
        return self._state is SlotState.ERROR

    def is_ready(self) -> bool:
        """是否有可读取的结果（中间值或最终结果）"""
        return self._state in (SlotState.YIELDED, SlotState.VALUE, SlotState.ERROR)

    def set_value(self, value: Any) -> None:
        """写入最终返回值"""
        if self._state is SlotState.ERROR:
            raise DoubleCompletionError(
                "Task already completed with an error",
                {"error": repr(self._error)},
            ) from self._error
        if self._state is SlotState.VALUE:
            raise DoubleCompletionError("Task already completed with a value")
        self._value = value
        self._state = SlotState.VALUE

    def set_error(self, error: BaseException) -> None:
        """记录任务体抛出的异常"""
        if self._state in (SlotState.VALUE, SlotState.ERROR):
            raise DoubleCompletionError(
                f"Task already completed ({self._state.value})",
                {"error": repr(error)},
            ) from error
        self._value = None
        self._error = error
        self._state = SlotState.ERROR

    def put(self, value: Any) -> None:
        """写入生成器中间值"""
        if self._state in (SlotState.VALUE, SlotState.ERROR):
            raise DoubleCompletionError("Cannot yield after the task completed")
        self._value = value
        self._state = SlotState.YIELDED

    def take(self) -> Any:
        """
        取走结果

        记录了异常则重新抛出（只抛出一次），否则移出存储的值

        Raises:
            ResultUnavailable: 尚未产生结果或结果已被取走
        """
        state = self._state
        if state is SlotState.ERROR:
            error = self._error
            self._error = None
            self._state = SlotState.CONSUMED
            raise error
        if state is SlotState.VALUE or state is SlotState.YIELDED:
            value = self._value
            self._value = None
            self._state = SlotState.CONSUMED if state is SlotState.VALUE else SlotState.PENDING
            return value
        raise ResultUnavailable(f"No result to read (slot is {state.value})")

    def __repr__(self) -> str:
        return f"ResultSlot(state={self._state.value})"
