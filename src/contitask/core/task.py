"""
任务 (Task)

续体的独占所有者：只可移动、不可复制，释放时按销毁策略处理续体
- Task: OWN 策略，释放时销毁帧
- DetachedTask: DETACH 策略，释放后帧自行运行至完成
"""

import functools
import inspect
from typing import (
    Any,
    Callable,
    ClassVar,
    Coroutine,
    Generator,
    Iterator,
    Optional,
    Type,
    TypeVar,
)

from .awaiters import ExitAwaiter
from .continuation import Continuation, ContinuationInfo
from .errors import TaskNotFinished
from .promise import Promise
from .result import SlotState
from .status import DestroyPolicy, StartPolicy

T = TypeVar("T", bound="Task")


class Task:
    """
    任务

    由 @task 装饰的 async 函数返回；在被 await 或被外部驱动前保持惰性
    """

    destroy_policy: ClassVar[DestroyPolicy] = DestroyPolicy.OWN

    def __init__(self, handle: Optional[Continuation] = None):
        self._handle = handle

    @classmethod
    def from_coroutine(
        cls: Type[T],
        coro: Coroutine[Any, Any, Any],
        start: StartPolicy = StartPolicy.LAZY,
        name: Optional[str] = None,
    ) -> T:
        """由协程对象创建任务；EAGER 策略下立即运行到第一个挂起点"""
        promise = Promise(start)
        handle = Continuation(coro, promise, destroy_policy=cls.destroy_policy, name=name)
        instance = cls(handle)
        if promise.initial_suspend().await_ready():
            handle.resume()
        return instance

    @property
    def handle(self) -> Optional[Continuation]:
        return self._handle

    def is_empty(self) -> bool:
        return self._handle is None

    def done(self) -> bool:
        handle = self._handle
        assert handle is not None, "querying an empty task"
        return handle.done()

    def info(self) -> ContinuationInfo:
        handle = self._handle
        assert handle is not None, "querying an empty task"
        return handle.info()

    def take(self: T) -> T:
        """移动：返回持有续体的新任务，原任务变为空"""
        handle, self._handle = self._handle, None
        return type(self)(handle)

    def swap(self, other: "Task") -> None:
        self._handle, other._handle = other._handle, self._handle

    def __copy__(self):
        raise TypeError(f"{type(self).__name__} is move-only; use take()")

    def __deepcopy__(self, memo):
        raise TypeError(f"{type(self).__name__} is move-only; use take()")

    def destroy(self) -> None:
        """按销毁策略释放续体；空任务上为空操作"""
        handle, self._handle = self._handle, None
        if handle is not None:
            self._release(handle)

    def _release(self, handle: Continuation) -> None:
        handle.destroy()

    def __enter__(self: T) -> T:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.destroy()

    def __del__(self):
        if getattr(self, "_handle", None) is not None:
            self.destroy()

    def __await__(self) -> Generator[Any, None, Any]:
        assert self._handle is not None, "awaiting an empty task"
        return ExitAwaiter(self).__await__()

    def result(self) -> Any:
        """
        读取已完成任务的结果

        Raises:
            ResultUnavailable: 任务尚未产生结果，或结果已被读取
        """
        handle = self._handle
        assert handle is not None, "reading the result of an empty task"
        return handle.promise.result()

    def __call__(self) -> Any:
        """
        恢复一次并返回产出的值

        已完成时返回 None；任务挂起在其他等待器上（没有产出）时同样返回 None
        """
        handle = self._handle
        assert handle is not None, "resuming an empty task"
        if handle.done():
            return None
        handle.resume()
        if handle.promise.ready():
            return handle.promise.result()
        return None

    def __iter__(self) -> Iterator[Any]:
        """
        逐个产出 co_yield 的值，直到任务完成

        最终返回值留在结果槽中，可通过 result() 读取；任务体的异常从迭代器抛出
        """
        handle = self._handle
        assert handle is not None, "iterating an empty task"
        while not handle.done():
            handle.resume()
            state = handle.promise.slot_state
            if state is SlotState.YIELDED:
                yield handle.promise.result()
            elif state is SlotState.ERROR:
                handle.promise.result()
            elif not handle.done():
                raise TaskNotFinished(
                    f"Task {handle.name} suspended without producing a value",
                    {"handle": handle.handle, "state": handle.state.value},
                )

    def __repr__(self) -> str:
        if self._handle is None:
            return f"<{type(self).__name__} empty>"
        return f"<{type(self).__name__} {self._handle.name} {self._handle.state.value}>"


class DetachedTask(Task):
    """DETACH 策略任务：释放包装器不会销毁帧"""

    destroy_policy: ClassVar[DestroyPolicy] = DestroyPolicy.DETACH

    def _release(self, handle: Continuation) -> None:
        handle.detach()


def task(
    fn: Optional[Callable[..., Coroutine[Any, Any, Any]]] = None,
    *,
    start: StartPolicy = StartPolicy.LAZY,
    task_cls: Type[Task] = Task,
) -> Any:
    """
    把 async 函数变为任务生成函数

    用法::

        @task
        async def add_one():
            return 1 + 1

        @task(start=StartPolicy.EAGER, task_cls=DetachedTask)
        async def background():
            ...
    """

    def decorate(func: Callable[..., Coroutine[Any, Any, Any]]) -> Callable[..., Task]:
        if not inspect.iscoroutinefunction(func):
            raise TypeError(f"@task requires an async function, got {func!r}")

        @functools.wraps(func)
        def factory(*args: Any, **kwargs: Any) -> Task:
            return task_cls.from_coroutine(
                func(*args, **kwargs), start=start, name=func.__qualname__
            )

        return factory

    if fn is not None:
        return decorate(fn)
    return decorate


def detached(
    fn: Optional[Callable[..., Coroutine[Any, Any, Any]]] = None,
    *,
    start: StartPolicy = StartPolicy.EAGER,
) -> Any:
    """@task 的分离版本，默认立即启动"""
    return task(fn, start=start, task_cls=DetachedTask)
