"""测试公共夹具"""

import pytest

from contitask.core.continuation import Continuation
from contitask.core.tracing import DiagnosticTracer, install_tracer
from contitask.loop.timer import TimerLoop


class FakeClock:
    """可手动推进的时钟"""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def sleep(self, seconds: float) -> None:
        self.advance(seconds)


@pytest.fixture(autouse=True)
def isolated_runtime():
    """每个测试使用独立的进程级追踪器和分离续体登记表"""
    previous = install_tracer(None)
    yield
    install_tracer(previous)
    Continuation._detached.clear()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def loop(clock) -> TimerLoop:
    return TimerLoop(clock=clock)


@pytest.fixture
def tracer() -> DiagnosticTracer:
    tracer = DiagnosticTracer()
    install_tracer(tracer)
    return tracer
