"""
续体测试

测试续体状态转换、蹦床步进与销毁
"""

import pytest
from pydantic import ValidationError

from contitask.core.awaiters import Awaiter, suspend_always
from contitask.core.continuation import Continuation, ContinuationInfo
from contitask.core.result import SlotState
from contitask.core.status import ContinuationState, DestroyPolicy
from contitask.core.task import DetachedTask, task


@task
async def add_one():
    return 1 + 1


async def _parked(events):
    try:
        await suspend_always
        events.append("resumed")
        return "finished"
    finally:
        events.append("cleanup")


parked = task(_parked)


class RefusingAwaiter(Awaiter):
    """挂起时失败的等待器"""

    def await_suspend(self, caller):
        raise ValueError("cannot park")


class TestContinuationState:
    """测试状态转换"""

    def test_created(self):
        """测试新建的续体"""
        t = add_one()
        assert t.handle.state is ContinuationState.CREATED
        assert not t.done()

    def test_completed(self):
        """测试运行完成后到达最终挂起点"""
        t = add_one()
        t.handle.resume()
        assert t.handle.state is ContinuationState.FINAL_SUSPENDED
        assert t.done()

    def test_suspended_then_resumed(self):
        """测试挂起后再次恢复"""
        events = []
        t = parked(events)
        t.handle.resume()
        assert t.handle.state is ContinuationState.SUSPENDED
        assert events == []

        t.handle.resume()
        assert t.done()
        assert events == ["resumed", "cleanup"]
        assert t.result() == "finished"

    def test_resume_finished_is_rejected(self):
        """测试恢复已完成的续体"""
        t = add_one()
        t.handle.resume()
        with pytest.raises(AssertionError):
            t.handle.resume()


class TestContinuationDestroy:
    """测试销毁"""

    def test_destroy_runs_finally(self):
        """测试销毁挂起中的帧会执行 finally"""
        events = []
        t = parked(events)
        t.handle.resume()
        handle = t.handle
        t.destroy()
        assert events == ["cleanup"]
        assert handle.destroyed
        assert handle.state is ContinuationState.DESTROYED

    def test_destroy_is_idempotent(self):
        """测试重复销毁为空操作"""
        t = add_one()
        handle = t.handle
        handle.destroy()
        handle.destroy()
        assert handle.destroyed

    def test_resume_destroyed_is_rejected(self):
        """测试恢复已销毁的续体"""
        t = add_one()
        handle = t.handle
        handle.destroy()
        with pytest.raises(AssertionError):
            handle.resume()


class TestAwaitSuspendErrors:
    """测试 await_suspend 抛出的异常"""

    def test_error_is_thrown_into_body(self):
        """测试异常在 await 处抛回任务体"""

        @task
        async def body():
            try:
                await RefusingAwaiter()
            except ValueError as e:
                return str(e)

        t = body()
        t.handle.resume()
        assert t.result() == "cannot park"

    def test_uncaught_error_completes_frame(self):
        """测试未捕获的异常使任务以错误完成，而不是从 resume 抛出"""

        @task
        async def body():
            await RefusingAwaiter()

        t = body()
        t.handle.resume()
        assert t.done()
        assert t.handle.state is ContinuationState.FINAL_SUSPENDED
        with pytest.raises(ValueError, match="cannot park"):
            t.result()


class TestContinuationBaseExceptions:
    """测试不进入结果槽的异常"""

    def test_keyboard_interrupt_propagates(self):
        """测试 KeyboardInterrupt 直接穿过 resume"""

        @task
        async def interrupted():
            raise KeyboardInterrupt

        t = interrupted()
        handle = t.handle
        with pytest.raises(KeyboardInterrupt):
            handle.resume()
        assert handle.destroyed
        assert handle.promise.slot_state is SlotState.PENDING


class TestContinuationInfo:
    """测试快照"""

    def test_info_snapshot(self):
        """测试快照内容"""
        t = add_one()
        t.handle.resume()
        info = t.info()
        assert isinstance(info, ContinuationInfo)
        assert info.name == "add_one"
        assert info.state is ContinuationState.FINAL_SUSPENDED
        assert info.result_state is SlotState.VALUE
        assert info.destroy_policy is DestroyPolicy.OWN
        assert not info.has_previous

    def test_info_is_serializable(self):
        """测试快照可序列化"""
        data = add_one().info().model_dump(mode="json")
        assert data["state"] == "created"
        assert data["result_state"] == "pending"

    def test_info_is_frozen(self):
        """测试快照不可修改"""
        info = add_one().info()
        with pytest.raises(ValidationError):
            info.name = "other"


class TestDetachedRegistry:
    """测试分离续体登记"""

    def test_detached_count(self):
        """测试分离未完成的续体会被登记"""
        events = []
        t = DetachedTask.from_coroutine(_parked(events))
        t.handle.resume()
        handle = t.handle
        t.destroy()
        assert t.is_empty()
        assert Continuation.detached_count() == 1

        handle.resume()
        assert Continuation.detached_count() == 0
        assert events == ["resumed", "cleanup"]
