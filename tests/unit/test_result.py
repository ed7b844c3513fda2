"""
结果槽测试

测试 ResultSlot 的单次写入与单次读取语义
"""

import pytest

from contitask.core.errors import DoubleCompletionError, ResultUnavailable
from contitask.core.result import ResultSlot, SlotState


class TestResultSlotWrite:
    """测试写入"""

    def test_new_slot_is_pending(self):
        """测试新建的槽处于 PENDING"""
        slot = ResultSlot()
        assert slot.state is SlotState.PENDING
        assert not slot.is_ready()
        assert not slot.has_error()

    def test_set_value(self):
        """测试写入返回值"""
        slot = ResultSlot()
        slot.set_value(42)
        assert slot.state is SlotState.VALUE
        assert slot.is_ready()

    def test_set_value_after_error_is_rejected(self):
        """测试异常之后写入返回值属于重复完成"""
        slot = ResultSlot()
        cause = ValueError("first")
        slot.set_error(cause)
        with pytest.raises(DoubleCompletionError) as exc_info:
            slot.set_value(1)
        assert exc_info.value.__cause__ is cause

    def test_set_error_after_value_is_rejected(self):
        """测试返回值之后记录异常属于重复完成"""
        slot = ResultSlot()
        slot.set_value(1)
        with pytest.raises(DoubleCompletionError):
            slot.set_error(RuntimeError("late"))

    def test_put_overwrites_previous_yield(self):
        """测试中间值可以被后续中间值覆盖"""
        slot = ResultSlot()
        slot.put(1)
        slot.put(2)
        assert slot.state is SlotState.YIELDED
        assert slot.take() == 2

    def test_put_after_completion_is_rejected(self):
        """测试完成后不能再产出中间值"""
        slot = ResultSlot()
        slot.set_value(1)
        with pytest.raises(DoubleCompletionError):
            slot.put(2)


class TestResultSlotTake:
    """测试读取"""

    def test_take_moves_value_out(self):
        """测试读取返回同一个对象并清空存储"""
        payload = {"key": [1, 2, 3]}
        slot = ResultSlot()
        slot.set_value(payload)
        assert slot.take() is payload
        assert slot.state is SlotState.CONSUMED

    def test_second_take_raises(self):
        """测试第二次读取抛出 ResultUnavailable"""
        slot = ResultSlot()
        slot.set_value(1)
        slot.take()
        with pytest.raises(ResultUnavailable):
            slot.take()

    def test_take_pending_raises(self):
        """测试尚未完成时读取"""
        with pytest.raises(ResultUnavailable):
            ResultSlot().take()

    def test_take_rethrows_error_once(self):
        """测试记录的异常只重新抛出一次"""
        slot = ResultSlot()
        error = KeyError("missing")
        slot.set_error(error)
        assert slot.has_error()
        assert slot.error is error

        with pytest.raises(KeyError) as exc_info:
            slot.take()
        assert exc_info.value is error

        with pytest.raises(ResultUnavailable):
            slot.take()

    def test_take_yielded_resets_to_pending(self):
        """测试读取中间值后槽回到 PENDING"""
        slot = ResultSlot()
        slot.put("a")
        assert slot.take() == "a"
        assert slot.state is SlotState.PENDING
        slot.set_value("done")
        assert slot.take() == "done"
