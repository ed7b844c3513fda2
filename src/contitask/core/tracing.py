"""
诊断追踪系统

记录续体控制权转移的事件：
- 恢复 / 转移 / 挂起 / yield
- 完成 / 失败 / 销毁
- 每次蹦床运行的步数
"""

import time
import logging
from collections import deque
from enum import Enum
from typing import Any, Deque, Dict, List, Optional


class TraceEvent(str, Enum):
    """追踪事件类型"""

    RESUME = "resume"
    TRANSFER = "transfer"
    SUSPEND = "suspend"
    YIELD = "yield"
    COMPLETE = "complete"
    FAIL = "fail"
    DESTROY = "destroy"
    TIMER = "timer"


class TraceEntry:
    """追踪条目"""

    def __init__(
        self,
        event: TraceEvent,
        handle: str,
        name: str,
        target: Optional[str] = None,
        ts_ms: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        self.event = event
        self.handle = handle
        self.name = name
        self.target = target
        self.ts_ms = ts_ms or int(time.time() * 1000)
        self.metadata = metadata or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.event.value,
            "handle": self.handle,
            "name": self.name,
            "target": self.target,
            "ts_ms": self.ts_ms,
            "metadata": self.metadata,
        }


class PerformanceMetrics:
    """蹦床运行指标"""

    def __init__(self):
        self.total_runs = 0
        self.total_steps = 0
        self.longest_run = 0

    def add_run(self, steps: int) -> None:
        self.total_runs += 1
        self.total_steps += steps
        if steps > self.longest_run:
            self.longest_run = steps

    def average_steps(self) -> float:
        if self.total_runs == 0:
            return 0.0
        return self.total_steps / self.total_runs


class DiagnosticTracer:
    """
    诊断追踪器

    条目保存在有界队列中，超过 limit 的旧条目被丢弃，计数不受影响
    """

    def __init__(self, enable_detailed_logging: bool = False, limit: int = 10000):
        self.enable_detailed_logging = enable_detailed_logging
        self._traces: Deque[TraceEntry] = deque(maxlen=limit)
        self._counts: Dict[str, int] = {}
        self._performance_metrics = PerformanceMetrics()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def record(
        self,
        event: TraceEvent,
        handle: str,
        name: str,
        target: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> TraceEntry:
        """记录一个事件"""
        entry = TraceEntry(event, handle, name, target=target, metadata=metadata)
        self._traces.append(entry)
        self._counts[event.value] = self._counts.get(event.value, 0) + 1

        if self.enable_detailed_logging:
            if target:
                self.logger.debug("%s %s (%s) -> %s", event.value, name, handle, target)
            else:
                self.logger.debug("%s %s (%s)", event.value, name, handle)

        return entry

    def record_run(self, handle: str, steps: int) -> None:
        """记录一次蹦床运行（一次外部 resume 调用）"""
        self._performance_metrics.add_run(steps)

    def count(self, event: TraceEvent) -> int:
        return self._counts.get(event.value, 0)

    def get_recent_traces(self, limit: int = 50) -> List[TraceEntry]:
        """获取最近的追踪记录"""
        return list(self._traces)[-limit:]

    def get_trace_summary(self) -> Dict[str, Any]:
        """获取追踪摘要"""
        metrics = self._performance_metrics
        return {
            "total_events": sum(self._counts.values()),
            "event_distribution": dict(self._counts),
            "retained_events": len(self._traces),
            "performance_metrics": {
                "total_runs": metrics.total_runs,
                "total_steps": metrics.total_steps,
                "longest_run": metrics.longest_run,
                "average_steps_per_run": metrics.average_steps(),
            },
        }

    def export(self) -> Dict[str, Any]:
        """导出全部追踪信息"""
        return {
            "events": [entry.to_dict() for entry in self._traces],
            "summary": self.get_trace_summary(),
            "export_timestamp": int(time.time() * 1000),
        }

    def clear_traces(self) -> None:
        """清除所有追踪记录"""
        self._traces.clear()
        self._counts.clear()
        self._performance_metrics = PerformanceMetrics()


class TracingMixin:
    """
    追踪混入类

    未设置追踪器时回退到进程级追踪器 (install_tracer)
    """

    tracer: Optional[DiagnosticTracer] = None

    def set_tracer(self, tracer: Optional[DiagnosticTracer]) -> None:
        """设置追踪器"""
        self.tracer = tracer

    def get_tracer(self) -> Optional[DiagnosticTracer]:
        return self.tracer or _installed_tracer

    def trace_event(
        self,
        event: TraceEvent,
        handle: str,
        name: str,
        target: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """记录事件（如果有可用的追踪器）"""
        tracer = self.get_tracer()
        if tracer is not None:
            tracer.record(event, handle, name, target=target, metadata=metadata)


_installed_tracer: Optional[DiagnosticTracer] = None


def install_tracer(tracer: Optional[DiagnosticTracer]) -> Optional[DiagnosticTracer]:
    """安装进程级追踪器，返回之前的追踪器"""
    global _installed_tracer
    previous = _installed_tracer
    _installed_tracer = tracer
    return previous


def current_tracer() -> Optional[DiagnosticTracer]:
    return _installed_tracer
