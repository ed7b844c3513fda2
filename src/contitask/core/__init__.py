"""ContiTask 核心：续体、Promise、等待器与任务"""

from .errors import (
    ContiTaskError,
    DoubleCompletionError,
    ResultUnavailable,
    InvalidAwaitable,
    TaskNotFinished,
)
from .status import ContinuationState, StartPolicy, DestroyPolicy
from .result import ResultSlot, SlotState
from .awaiters import (
    Awaiter,
    StopAwaiter,
    PreviousAwaiter,
    ExitAwaiter,
    YieldAwaiter,
    co_yield,
    suspend_always,
    suspend_never,
)
from .promise import Promise
from .continuation import Continuation, ContinuationInfo
from .task import Task, DetachedTask, task, detached
from .tracing import (
    DiagnosticTracer,
    TraceEntry,
    TraceEvent,
    TracingMixin,
    install_tracer,
    current_tracer,
)

__all__ = [
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
    "ResultSlot",
    "SlotState",
    # Awaiters
    "Awaiter",
    "StopAwaiter",
    "PreviousAwaiter",
    "ExitAwaiter",
    "YieldAwaiter",
    "co_yield",
    "suspend_always",
    "suspend_never",
    # Core
    "Promise",
    "Continuation",
    "ContinuationInfo",
    "Task",
    "DetachedTask",
    "task",
    "detached",
    # Tracing
    "DiagnosticTracer",
    "TraceEntry",
    "TraceEvent",
    "TracingMixin",
    "install_tracer",
    "current_tracer",
]
