"""并发执行器模块。

提供有界并发的异步任务执行功能：最多同时运行 max_workers 个任务，
按提交顺序依次获得执行许可，结果按提交顺序返回。
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class ConcurrentExecutor:
    """通用并发执行器

    用 asyncio.Semaphore 限制同时运行的任务数。等待者按先进先出获得许可，
    任务按提交顺序创建，因此准入顺序与提交顺序一致。
    不做取消和超时：卡住的任务会一直占用它的并发槽位。
    """

    def __init__(self, max_workers: int = 6):
        """初始化并发执行器

        Args:
            max_workers: 最大并发数
        """
        if max_workers < 1:
            raise ValueError(f"并发数必须大于 0，当前值: {max_workers}")
        self.max_workers = max_workers

    async def execute_tasks(
        self,
        items: Sequence[T],
        task_function: Callable[[T], Awaitable[R]],
        on_error: Callable[[Exception, T], R],
    ) -> list[R]:
        """执行并发任务

        Args:
            items: 任务输入列表
            task_function: 对单个输入执行的协程函数
            on_error: 任务抛出异常时，将异常转换为结果

        Returns:
            list: 与 items 顺序一致的结果列表
        """
        if not items:
            return []

        semaphore = asyncio.Semaphore(self.max_workers)
        results: list[R | None] = [None] * len(items)

        async def run(index: int, item: T) -> None:
            async with semaphore:
                try:
                    results[index] = await task_function(item)
                except Exception as e:
                    # 单个任务失败不影响其他任务
                    results[index] = on_error(e, item)

        logger.debug(f"并发执行 {len(items)} 个任务，最大并发数 {self.max_workers}")
        await asyncio.gather(*(run(i, item) for i, item in enumerate(items)))

        return results  # type: ignore[return-value]
