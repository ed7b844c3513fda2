"""
ContiTask - 单线程协作式任务原语

支持：
- 对称转移：await 链的深度不增加调用栈
- 结果/异常恰好传播一次
- 只可移动的续体所有权，可配置的销毁策略
"""

__version__ = "0.1.0"

from .core import (
    # Errors
    ContiTaskError,
    DoubleCompletionError,
    ResultUnavailable,
    InvalidAwaitable,
    TaskNotFinished,
    # States
    ContinuationState,
    StartPolicy,
    DestroyPolicy,
    SlotState,
    # Core classes
    Awaiter,
    StopAwaiter,
    PreviousAwaiter,
    ExitAwaiter,
    YieldAwaiter,
    Promise,
    Continuation,
    ContinuationInfo,
    Task,
    DetachedTask,
    task,
    detached,
    co_yield,
    suspend_always,
    suspend_never,
    # Tracing
    DiagnosticTracer,
    install_tracer,
)
from .loop import TimerLoop, sync_wait, run_until_complete
from .combinators import when_any, repeat

__all__ = [
    "__version__",
    # Errors
    "ContiTaskError",
    "DoubleCompletionError",
    "ResultUnavailable",
    "InvalidAwaitable",
    "TaskNotFinished",
    # States
    "ContinuationState",
    "StartPolicy",
    "DestroyPolicy",
    "SlotState",
    # Core
    "Awaiter",
    "StopAwaiter",
    "PreviousAwaiter",
    "ExitAwaiter",
    "YieldAwaiter",
    "Promise",
    "Continuation",
    "ContinuationInfo",
    "Task",
    "DetachedTask",
    "task",
    "detached",
    "co_yield",
    "suspend_always",
    "suspend_never",
    # Tracing
    "DiagnosticTracer",
    "install_tracer",
    # Drivers
    "TimerLoop",
    "sync_wait",
    "run_until_complete",
    # Combinators
    "when_any",
    "repeat",
]
