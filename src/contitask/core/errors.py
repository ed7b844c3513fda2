"""
ContiTask 异常定义

任务体内部的错误会被捕获进结果槽，在读取结果时才重新抛出；
这里定义的是运行时自身的错误类型
"""

from typing import Any, Dict, Optional


class ContiTaskError(Exception):
    """ContiTask 基础异常"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class DoubleCompletionError(ContiTaskError):
    """
    重复完成错误

    任务体只能通过一种途径完成：正常返回或抛出异常。
    在已记录异常之后再写入返回值（或反之）属于编程错误
    """

    pass


class ResultUnavailable(ContiTaskError):
    """
    结果不可用错误

    结果尚未产生（任务仍在挂起）或已经被取走时读取结果
    """

    pass


class InvalidAwaitable(ContiTaskError):
    """
    非法等待对象

    任务体 await 了不属于本运行时的对象（例如 asyncio.Future），
    该错误会在挂起点抛回任务体
    """

    pass


class TaskNotFinished(ContiTaskError):
    """
    任务未完成错误

    驱动器返回时根任务仍处于挂起状态，且没有其他来源可以恢复它
    """

    pass
