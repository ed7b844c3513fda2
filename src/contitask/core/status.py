"""续体状态与任务策略枚举"""

from enum import Enum


class ContinuationState(str, Enum):
    """
    续体状态

    CREATED -> RUNNING -> {SUSPENDED | YIELDED} -> ... -> FINAL_SUSPENDED -> DESTROYED
    """

    CREATED = "created"
    RUNNING = "running"
    SUSPENDED = "suspended"
    YIELDED = "yielded"
    FINAL_SUSPENDED = "final_suspended"
    DESTROYED = "destroyed"


class StartPolicy(str, Enum):
    """初始挂起策略"""

    LAZY = "lazy"  # 创建后挂起，等待显式恢复
    EAGER = "eager"  # 创建时立即运行到第一个挂起点


class DestroyPolicy(str, Enum):
    """包装器释放时的续体处理策略"""

    OWN = "own"  # 销毁续体
    DETACH = "detach"  # 续体自行运行至完成
