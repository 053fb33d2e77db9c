"""图像优化处理引擎模块。

包含入口校验、批量优化、并发执行和归档打包等核心处理逻辑。
"""

from .archive import ArchiveBuilder
from .batch import BatchOptimizer, OptimizationJob, default_format_options
from .concurrent_executor import ConcurrentExecutor
from .intake import IntakeGuard, LocalPart, UploadPart


__all__ = [
    "ArchiveBuilder",
    "BatchOptimizer",
    "ConcurrentExecutor",
    "IntakeGuard",
    "LocalPart",
    "OptimizationJob",
    "UploadPart",
    "default_format_options",
]
