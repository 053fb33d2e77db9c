"""清理工具模块。

提供暂存文件回滚、过期文件定期清理等资源管理功能。
"""

import asyncio
import contextlib
import os
import time
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from typing import Any

from .logging_helpers import get_logger
from .message_formatter import MessageFormatter


logger = get_logger()


def safe_unlink(file_path: Path) -> bool:
    """删除文件，文件已不存在时静默忽略

    Returns:
        bool: 是否确实删除了文件
    """
    try:
        file_path.unlink()
        return True
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.warning(MessageFormatter.operation_failed("删除文件", file_path, e))
        return False


def discard_files(paths: Iterable[Path]) -> int:
    """批量删除文件，返回实际删除的数量"""
    return sum(1 for path in paths if safe_unlink(path))


class TempFileManager:
    """暂存文件管理器

    在上下文内登记的文件会在异常退出时全部删除；
    调用 keep() 后正常退出则保留文件。
    """

    def __init__(self):
        self.temp_files: list[Path] = []
        self._keep = False

    def register_temp_file(self, file_path: Path) -> None:
        """登记暂存文件"""
        self.temp_files.append(file_path)

    def keep(self) -> None:
        """保留所有已登记的文件"""
        self._keep = True

    def cleanup_temp_files(self) -> int:
        """删除所有登记的文件"""
        cleaned_count = discard_files(self.temp_files)
        if cleaned_count:
            logger.debug(f"已回滚 {cleaned_count} 个暂存文件")
        self.temp_files.clear()
        return cleaned_count

    def __enter__(self):
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        del exc_val, exc_tb
        if exc_type is not None or not self._keep:
            self.cleanup_temp_files()


class LifecycleJanitor:
    """过期文件清理器

    定期扫描各存储目录，删除修改时间早于保留期限的普通文件。
    各目录相互独立，一个目录出错不影响其他目录。
    """

    def __init__(
        self,
        directories: Sequence[Path],
        retention_seconds: float = 5 * 60,
        sweep_interval_seconds: float = 60,
        clock: Callable[[], float] = time.time,
    ):
        """初始化清理器

        Args:
            directories: 需要清理的目录列表
            retention_seconds: 文件保留时长（秒）
            sweep_interval_seconds: 扫描间隔（秒）
            clock: 时间来源（测试时可替换）
        """
        self.directories = [Path(d) for d in directories]
        self.retention_seconds = retention_seconds
        self.sweep_interval_seconds = sweep_interval_seconds
        self.clock = clock
        self._task: asyncio.Task[None] | None = None
        self._shutdown_event: asyncio.Event | None = None

    def sweep_directory(self, directory: Path, now: float) -> list[Path]:
        """清理单个目录

        Args:
            directory: 目录路径
            now: 当前时间戳（秒）

        Returns:
            list[Path]: 被删除的文件
        """
        removed: list[Path] = []

        try:
            entries = list(os.scandir(directory))
        except FileNotFoundError:
            logger.warning(MessageFormatter.directory_not_found(directory))
            return removed
        except OSError as e:
            logger.warning(MessageFormatter.operation_failed("扫描目录", directory, e))
            return removed

        for entry in entries:
            try:
                if not entry.is_file(follow_symlinks=False):
                    continue
                age = now - entry.stat(follow_symlinks=False).st_mtime
            except FileNotFoundError:
                # 扫描期间被其他请求删除
                continue
            except OSError as e:
                logger.warning(
                    MessageFormatter.operation_failed("读取文件信息", entry.path, e)
                )
                continue

            if age > self.retention_seconds:
                path = Path(entry.path)
                if safe_unlink(path):
                    removed.append(path)
                    logger.info(f"已清理过期文件: {path}")

        return removed

    def sweep(self, now: float | None = None) -> dict[Path, list[Path]]:
        """清理所有目录

        Returns:
            dict: 每个目录被删除的文件列表
        """
        now = self.clock() if now is None else now
        report: dict[Path, list[Path]] = {}

        for directory in self.directories:
            try:
                report[directory] = self.sweep_directory(directory, now)
            except Exception as e:
                logger.error(MessageFormatter.operation_failed("清理目录", directory, e))
                report[directory] = []

        return report

    async def run_forever(self, shutdown_event: asyncio.Event) -> None:
        """按固定间隔清理，直到 shutdown_event 被设置"""
        interval = max(0.01, float(self.sweep_interval_seconds))
        while not shutdown_event.is_set():
            try:
                await asyncio.wait_for(shutdown_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass
            else:
                break

            report = await asyncio.to_thread(self.sweep)
            removed = sum(len(paths) for paths in report.values())
            if removed:
                logger.info(f"本轮清理删除 {removed} 个过期文件")

    async def start(self) -> None:
        """启动后台清理任务"""
        if self._task is not None:
            return
        self._shutdown_event = asyncio.Event()
        self._task = asyncio.create_task(
            self.run_forever(self._shutdown_event), name="lifecycle-janitor"
        )
        logger.info(
            f"过期文件清理已启用（保留 {self.retention_seconds:g} 秒，"
            f"间隔 {self.sweep_interval_seconds:g} 秒）"
        )

    async def stop(self) -> None:
        """停止后台清理任务"""
        if self._task is None:
            return
        if self._shutdown_event is not None:
            self._shutdown_event.set()
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        self._shutdown_event = None
        logger.info("过期文件清理已停止")

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()
