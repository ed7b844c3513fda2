"""
示例任务

命令行 demo 子命令及集成测试共用
"""

from typing import Any, Tuple

from .combinators import when_any
from .core.awaiters import co_yield
from .core.task import task
from .loop.timer import TimerLoop


@task
async def add_one() -> int:
    return 1 + 1


@task
async def outer() -> int:
    a = await add_one()
    b = await add_one()
    return a + b


@task
async def chain(depth: int) -> int:
    """深度为 depth 的嵌套 await 链，返回 depth"""
    if depth == 0:
        return 0
    return await chain(depth - 1) + 1


@task
async def counter(count: int) -> int:
    """依次产出 0..count-1，最后返回产出的个数"""
    for i in range(count):
        await co_yield(i)
    return count


@task
async def sleeper(loop: TimerLoop, delay: float, label: Any) -> Any:
    await loop.sleep_for(delay)
    return label


@task
async def race(loop: TimerLoop, delay: float) -> Tuple[int, Any]:
    """两个不同延迟的 sleeper 竞争，快者胜出"""
    return await when_any(sleeper(loop, delay * 2, "slow"), sleeper(loop, delay, "fast"))
