"""
Promise 测试
"""

import gc

import pytest

from contitask.core.awaiters import PreviousAwaiter, StopAwaiter
from contitask.core.continuation import Continuation
from contitask.core.errors import DoubleCompletionError
from contitask.core.promise import Promise
from contitask.core.result import SlotState
from contitask.core.status import StartPolicy


async def _noop():
    return None


@pytest.fixture
def caller():
    continuation = Continuation(_noop(), name="caller")
    yield continuation
    continuation.destroy()


class TestPromiseSuspendPoints:
    """测试初始挂起与最终挂起"""

    def test_lazy_initial_suspend(self):
        """测试惰性启动在初始点挂起"""
        awaiter = Promise(StartPolicy.LAZY).initial_suspend()
        assert isinstance(awaiter, StopAwaiter)
        assert not awaiter.await_ready()

    def test_eager_initial_suspend(self):
        """测试立即启动不在初始点挂起"""
        awaiter = Promise(StartPolicy.EAGER).initial_suspend()
        assert awaiter.await_ready()

    def test_final_suspend_without_previous(self, caller):
        """测试根任务的最终挂起不转移"""
        awaiter = Promise().final_suspend()
        assert isinstance(awaiter, PreviousAwaiter)
        assert awaiter.await_suspend(caller) is None

    def test_final_suspend_transfers_to_previous(self, caller):
        """测试最终挂起转移到 previous"""
        promise = Promise()
        promise.set_previous(caller)
        awaiter = promise.final_suspend()
        assert awaiter.await_suspend(caller) is caller


class TestPromisePrevious:
    """测试 previous 引用"""

    def test_previous_is_weak(self):
        """测试 previous 不延长调用方的生命周期"""
        promise = Promise()
        continuation = Continuation(_noop(), name="short-lived")
        promise.set_previous(continuation)
        continuation.destroy()
        del continuation
        gc.collect()
        assert promise.previous() is None
        assert promise.final_suspend().await_suspend(None) is None

    def test_previous_set_once(self, caller):
        """测试同一个任务不能被两个调用方等待"""
        promise = Promise()
        promise.set_previous(caller)
        with pytest.raises(AssertionError):
            promise.set_previous(caller)


class TestPromiseCompletion:
    """测试完成事件"""

    def test_return_value_then_result(self):
        """测试正常返回"""
        promise = Promise()
        promise.return_value("ok")
        assert promise.ready()
        assert promise.result() == "ok"

    def test_unhandled_exception_is_deferred(self):
        """测试异常只在读取结果时出现"""
        promise = Promise()
        promise.unhandled_exception(RuntimeError("boom"))
        assert promise.slot_state is SlotState.ERROR
        with pytest.raises(RuntimeError, match="boom"):
            promise.result()

    def test_double_completion(self):
        """测试记录异常后再返回值"""
        promise = Promise()
        promise.unhandled_exception(ValueError("x"))
        with pytest.raises(DoubleCompletionError):
            promise.return_value(1)

    def test_yield_value_suspends(self):
        """测试 yield 写入中间值并挂起"""
        promise = Promise()
        stop = promise.yield_value(7)
        assert stop.suspend
        assert promise.slot_state is SlotState.YIELDED
        assert promise.result() == 7
