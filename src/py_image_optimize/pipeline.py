"""图像优化流水线。

把入口校验、批量优化和归档打包串成一次完整的请求处理，
供 HTTP 和 MCP 两个入口共用。
"""

import asyncio
from collections.abc import Sequence
from pathlib import Path

from .config import AppConfig, get_config
from .core.codec import Codec, compress
from .engine.archive import ArchiveBuilder
from .engine.batch import BatchOptimizer
from .engine.intake import IntakeGuard, UploadPart
from .exceptions import ArchiveIOError, ProcessingError
from .models import (
    Archive,
    BatchOutcome,
    FailedFileInfo,
    OptimizedFileInfo,
    OptimizeResponse,
    ZipInfo,
)
from .utils.cleanup_helpers import LifecycleJanitor, discard_files
from .utils.logging_helpers import get_logger
from .utils.naming_helpers import PathResolver


logger = get_logger()

DOWNLOAD_ROUTE = "/download"
UPLOAD_ROUTE = "/upload"


class OptimizationPipeline:
    """图像优化流水线

    处理顺序：入口校验 → 有界并发优化 → 失败升级或报告 → 多文件时打包归档。
    """

    def __init__(self, config: AppConfig | None = None, codec: Codec | None = None):
        """初始化流水线

        Args:
            config: 应用配置（默认使用全局配置）
            codec: 编解码函数（默认使用 Pillow 实现）
        """
        self.config = config or get_config()
        self.upload_dir = Path(self.config.storage.UPLOAD_DIR)
        self.optimized_dir = Path(self.config.storage.OPTIMIZED_DIR)

        limits = self.config.limits
        compression = self.config.compression

        self.intake = IntakeGuard(
            self.upload_dir,
            max_files=limits.MAX_FILES,
            max_total_size=limits.MAX_TOTAL_SIZE,
            max_file_size=limits.MAX_FILE_SIZE,
        )
        self.optimizer = BatchOptimizer(
            self.optimized_dir,
            concurrency_limit=compression.CONCURRENCY,
            codec=codec or compress,
            options={
                name: compression.get_format_options(name) for name in ("PNG", "JPEG")
            },
        )
        self.archiver = ArchiveBuilder(self.optimized_dir)
        self.fail_fast = compression.FAIL_FAST

    def create_janitor(self) -> LifecycleJanitor:
        """创建覆盖暂存和输出两个目录的过期文件清理器"""
        lifecycle = self.config.lifecycle
        return LifecycleJanitor(
            [self.upload_dir, self.optimized_dir],
            retention_seconds=lifecycle.RETENTION_SECONDS,
            sweep_interval_seconds=lifecycle.SWEEP_INTERVAL_SECONDS,
        )

    async def process(self, parts: Sequence[UploadPart]) -> OptimizeResponse:
        """处理一次上传

        Args:
            parts: 按提交顺序排列的上传部分

        Returns:
            OptimizeResponse: 各文件的下载信息，以及多文件时的归档地址

        Raises:
            ValidationError: 批次不符合限制（没有暂存任何文件）
            ProcessingError: 处理失败（暂存的原始文件已删除）
        """
        batch = await asyncio.to_thread(self.intake.admit, parts)

        try:
            outcome = await self.optimizer.optimize(batch)
        except Exception:
            discard_files(batch.paths)
            raise

        if outcome.get_failure_count() and self.fail_fast:
            self._discard_batch(batch.paths, outcome)
            failure = outcome.get_failures()[0]
            raise ProcessingError(
                failure.error or "图片处理失败", failure.uploaded.path
            )

        results = outcome.get_results()
        archive: Archive | None = None
        if len(results) > 1:
            try:
                archive = await asyncio.to_thread(
                    self.archiver.bundle, [r.output_path for r in results]
                )
            except ArchiveIOError as e:
                # 已优化的文件保留，交给过期清理
                discard_files(batch.paths)
                raise ProcessingError(e.message, e.path) from e

        return self._build_response(outcome, archive)

    def _discard_batch(self, originals: list[Path], outcome: BatchOutcome) -> None:
        """删除整个批次的原始文件和已写出的输出文件"""
        removed = discard_files(originals)
        removed += discard_files(r.output_path for r in outcome.get_results())
        logger.warning(
            f"批次处理失败（{outcome.get_summary()}），已删除 {removed} 个文件"
        )

    @staticmethod
    def _build_response(
        outcome: BatchOutcome, archive: Archive | None
    ) -> OptimizeResponse:
        files = [
            OptimizedFileInfo(
                original_name=r.original_name,
                optimized_name=r.optimized_name,
                download_url=f"{DOWNLOAD_ROUTE}/{r.optimized_name}",
                upload_url=f"{UPLOAD_ROUTE}/{r.stored_name}",
                size_before=r.size_before,
                size_after=r.size_after,
            )
            for r in outcome.get_results()
        ]
        failed = [
            FailedFileInfo(
                original_name=o.uploaded.original_name, error=o.error or "处理失败"
            )
            for o in outcome.get_failures()
        ]
        zip_info = (
            ZipInfo(url=f"{DOWNLOAD_ROUTE}/{archive.filename}") if archive else None
        )
        return OptimizeResponse(files=files, zip=zip_info, failed=failed)

    def resolve_download(self, filename: str) -> Path:
        """解析输出目录中的文件（优化后的图片或归档）

        Raises:
            PathTraversalError: 文件名非法
            FileNotFoundError: 文件不存在
        """
        return self._resolve_existing(self.optimized_dir, filename)

    def resolve_upload(self, filename: str) -> Path:
        """解析暂存目录中的原始文件"""
        return self._resolve_existing(self.upload_dir, filename)

    @staticmethod
    def _resolve_existing(directory: Path, filename: str) -> Path:
        path = PathResolver.resolve(directory, filename)
        if not path.is_file():
            raise FileNotFoundError(path)
        return path
