"""
异步工具函数

提供在异步上下文中安全执行同步代码的工具。
"""

import asyncio
from typing import TypeVar, Callable

T = TypeVar("T")


async def run_sync(func: Callable[..., T], *args, **kwargs) -> T:
    """
    在线程池中执行同步函数，避免阻塞 event loop。

    NoteStore 的每次修改都会同步写回持久化介质，因此路由中统一用它包装。

    Example:
        note = await run_sync(service.create_note, title="A", content="hello")
    """
    return await asyncio.to_thread(func, *args, **kwargs)
