"""批量图像优化服务。

接收 PNG/JPEG 图片批次，有界并发地重新压缩，多文件时打包为 ZIP，
并定期清理过期的暂存和输出文件。
"""

__version__ = "0.1.0"
__description__ = "批量图像优化服务，基于 Pillow 11 和 FastAPI"

# 核心功能导出
from .core.codec import compress
from .models import BatchOutcome, OptimizationResult, OptimizeResponse
from .pipeline import OptimizationPipeline


__all__ = [
    "BatchOutcome",
    "OptimizationPipeline",
    "OptimizationResult",
    "OptimizeResponse",
    "compress",
    "get_version",
]


def get_version() -> str:
    """获取版本号。"""
    return __version__
