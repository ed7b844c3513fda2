"""
续体 (Continuation)

对一个挂起中的协程帧的不透明、只可移动的引用：resume / destroy / done
resume() 即蹦床：每一步只对一个协程调用 send()，
控制权转移通过返回 "下一个续体" 完成，链的深度不影响 Python 栈深度
"""

import logging
import uuid
from typing import Any, ClassVar, Coroutine, Optional, Set

from pydantic import BaseModel, ConfigDict

from .awaiters import Awaiter
from .errors import InvalidAwaitable
from .promise import Promise
from .result import SlotState
from .status import ContinuationState, DestroyPolicy
from .tracing import TraceEvent, TracingMixin

logger = logging.getLogger(__name__)


class ContinuationInfo(BaseModel):
    """续体的可序列化快照"""

    model_config = ConfigDict(frozen=True)

    handle: str
    name: str
    state: ContinuationState
    result_state: SlotState
    destroy_policy: DestroyPolicy
    has_previous: bool = False


class Continuation(TracingMixin):
    """
    续体

    由 Task 独占持有；DETACH 策略下包装器释放后登记到 _detached，
    保证帧在运行完成前保持存活
    """

    _detached: ClassVar[Set["Continuation"]] = set()

    def __init__(
        self,
        coro: Coroutine[Any, Any, Any],
        promise: Optional[Promise] = None,
        destroy_policy: DestroyPolicy = DestroyPolicy.OWN,
        name: Optional[str] = None,
    ):
        self.handle = str(uuid.uuid4())
        self.name = name or getattr(coro, "__qualname__", type(coro).__name__)
        self.promise = promise if promise is not None else Promise()
        self.destroy_policy = destroy_policy
        self._coro: Optional[Coroutine[Any, Any, Any]] = coro
        self._state = ContinuationState.CREATED
        self._finished = False
        self._throw_next: Optional[BaseException] = None

    @property
    def state(self) -> ContinuationState:
        return self._state

    @property
    def destroyed(self) -> bool:
        return self._coro is None

    def done(self) -> bool:
        """是否已到达最终挂起点"""
        return self._finished

    def resume(self) -> None:
        """
        从本续体开始运行蹦床，直到整条链挂起或把控制权交还

        同一时刻只能有一条路径恢复某个续体
        """
        self.trace_event(TraceEvent.RESUME, self.handle, self.name)
        steps = 0
        current: Optional[Continuation] = self
        while current is not None:
            current = current._step()
            steps += 1
        tracer = self.get_tracer()
        if tracer is not None:
            tracer.record_run(self.handle, steps)

    def _step(self) -> Optional["Continuation"]:
        """运行本帧到下一个挂起点，返回下一个要恢复的续体"""
        coro = self._coro
        assert coro is not None, "resuming a destroyed continuation"
        assert self._state is not ContinuationState.RUNNING, "continuation is already running"
        assert not self._finished, "resuming a finished continuation"

        self._state = ContinuationState.RUNNING
        try:
            if self._throw_next is not None:
                error, self._throw_next = self._throw_next, None
                awaiter = coro.throw(error)
            else:
                awaiter = coro.send(None)
        except StopIteration as stop:
            return self._complete(stop.value)
        except Exception as exc:
            return self._fail(exc)
        except BaseException:
            # KeyboardInterrupt / SystemExit 等不进入结果槽，帧已结束
            self._state = ContinuationState.DESTROYED
            self._coro = None
            Continuation._detached.discard(self)
            raise

        if not isinstance(awaiter, Awaiter):
            self._throw_next = InvalidAwaitable(
                f"Task {self.name} awaited an unsupported object: {awaiter!r}",
                {"handle": self.handle, "type": type(awaiter).__name__},
            )
            self._state = ContinuationState.SUSPENDED
            return self

        self._state = awaiter.suspended_state
        try:
            next_cont = awaiter.await_suspend(self)
        except Exception as exc:
            # 在 await 处抛回任务体
            self._throw_next = exc
            self._state = ContinuationState.SUSPENDED
            return self

        if next_cont is None:
            event = (
                TraceEvent.YIELD
                if self._state is ContinuationState.YIELDED
                else TraceEvent.SUSPEND
            )
            self.trace_event(event, self.handle, self.name)
        elif next_cont is not self:
            self.trace_event(TraceEvent.TRANSFER, self.handle, self.name, target=next_cont.handle)
            logger.debug("Transfer %s -> %s", self.name, next_cont.name)
        return next_cont

    def _complete(self, value: Any) -> Optional["Continuation"]:
        self.promise.return_value(value)
        self.trace_event(TraceEvent.COMPLETE, self.handle, self.name)
        return self._final_suspend()

    def _fail(self, error: Exception) -> Optional["Continuation"]:
        self.promise.unhandled_exception(error)
        self.trace_event(
            TraceEvent.FAIL,
            self.handle,
            self.name,
            metadata={"type": type(error).__name__, "message": str(error)},
        )
        logger.debug("Task %s captured %s: %s", self.name, type(error).__name__, error)
        return self._final_suspend()

    def _final_suspend(self) -> Optional["Continuation"]:
        self._finished = True
        awaiter = self.promise.final_suspend()
        self._state = awaiter.suspended_state
        next_cont = awaiter.await_suspend(self)
        if self in Continuation._detached:
            self._release_detached()
        if next_cont is not None:
            self.trace_event(TraceEvent.TRANSFER, self.handle, self.name, target=next_cont.handle)
        return next_cont

    def detach(self) -> None:
        """
        包装器已释放：未完成的帧登记为自管理，完成时自行释放

        尚未启动的帧没有任何一方能执行首次恢复，直接销毁
        """
        if self._state is ContinuationState.CREATED:
            self.destroy()
            return
        if self._finished:
            self._release_detached()
            return
        if self._coro is not None:
            Continuation._detached.add(self)

    def _release_detached(self) -> None:
        Continuation._detached.discard(self)
        if self.promise.previous is None and self.promise.slot_state is SlotState.ERROR:
            error = self.promise.error
            logger.warning(
                "Detached task %s finished with an unretrieved error: %s: %s",
                self.name,
                type(error).__name__,
                error,
            )

    def destroy(self) -> None:
        """
        销毁帧

        对挂起中的协程调用 close()，在挂起点抛出 GeneratorExit，
        帧内的 finally / with 块随之执行
        """
        coro = self._coro
        if coro is None:
            return
        assert self._state is not ContinuationState.RUNNING, "destroying a running continuation"
        self._coro = None
        self._state = ContinuationState.DESTROYED
        Continuation._detached.discard(self)
        self.trace_event(TraceEvent.DESTROY, self.handle, self.name)
        coro.close()

    def info(self) -> ContinuationInfo:
        return ContinuationInfo(
            handle=self.handle,
            name=self.name,
            state=self._state,
            result_state=self.promise.slot_state,
            destroy_policy=self.destroy_policy,
            has_previous=self.promise.previous is not None,
        )

    @classmethod
    def detached_count(cls) -> int:
        """当前仍在自管理运行的分离续体数量"""
        return len(cls._detached)

    def __repr__(self) -> str:
        return f"Continuation(name={self.name!r}, state={self._state.value})"
