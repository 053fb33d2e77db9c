"""批量优化器模块。

把一个已暂存的批次通过编解码器压缩到输出目录，
控制并发数，每个文件独立成败，结果按提交顺序返回。
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path

from ..core.codec import Codec, compress
from ..core.formats import detect_format
from ..exceptions import ErrorHandler, ProcessingError, UnsupportedFormatError
from ..models.codec_options import CodecOptions
from ..models.optimization_result import BatchOutcome, FileOutcome, OptimizationResult
from ..models.upload import Batch, UploadedFile
from ..utils.cleanup_helpers import discard_files, safe_unlink
from ..utils.file_helpers import is_writable_directory
from ..utils.logging_helpers import get_logger
from ..utils.naming_helpers import FileNamingStrategy, PathResolver
from .concurrent_executor import ConcurrentExecutor


logger = get_logger()


def default_format_options() -> dict[str, CodecOptions]:
    """默认的格式参数：PNG 质量区间 0.6-0.8，JPEG 质量 75"""
    from ..config import CompressionDefaults

    defaults = CompressionDefaults()
    return {name: defaults.get_format_options(name) for name in ("PNG", "JPEG")}


@dataclass(frozen=True)
class OptimizationJob:
    """单个文件的优化任务"""

    uploaded: UploadedFile
    format_name: str
    options: CodecOptions
    output_path: Path


class BatchOptimizer:
    """批量图像优化器

    每个文件一个处理单元：读取 → 压缩 → 写入输出目录 → 记录大小。
    文件读写和编解码调用都在线程中执行，不阻塞事件循环。
    """

    def __init__(
        self,
        output_dir: str | Path,
        concurrency_limit: int = 6,
        codec: Codec = compress,
        options: dict[str, CodecOptions] | None = None,
    ):
        """初始化批量优化器

        Args:
            output_dir: 输出目录
            concurrency_limit: 默认最大并发数
            codec: 编解码函数
            options: 格式到压缩参数的映射
        """
        self.output_dir = Path(output_dir)
        self.concurrency_limit = concurrency_limit
        self.codec = codec
        self.options = options or default_format_options()

    async def optimize(
        self, batch: Batch, concurrency_limit: int | None = None
    ) -> BatchOutcome:
        """优化整个批次

        Args:
            batch: 已暂存的批次
            concurrency_limit: 本次调用的最大并发数（默认使用实例配置）

        Returns:
            BatchOutcome: 与批次顺序一致的处理结果

        Raises:
            ProcessingError: 输出目录不可用或批次中存在不支持的格式
        """
        if not is_writable_directory(self.output_dir):
            raise ProcessingError(
                f"输出目录不可用: {self.output_dir}", self.output_dir
            )

        jobs = self._build_jobs(batch)
        executor = ConcurrentExecutor(concurrency_limit or self.concurrency_limit)

        logger.info(f"开始优化: {batch.get_summary()}")
        outcomes = await executor.execute_tasks(
            jobs, self._run_job, self._handle_job_failure
        )

        batch_outcome = BatchOutcome(
            outcomes=outcomes,
            success=all(o.success for o in outcomes),
            error=None,
        )
        logger.info(batch_outcome.get_summary())
        return batch_outcome

    def _build_jobs(self, batch: Batch) -> list[OptimizationJob]:
        """为每个文件确定格式，并在输出目录中占用唯一的输出路径"""
        jobs: list[OptimizationJob] = []

        try:
            for uploaded in batch.files:
                try:
                    format_name = detect_format(uploaded.path)
                except UnsupportedFormatError as e:
                    # 入口校验已保证扩展名合法，这里出现说明状态被破坏
                    raise ProcessingError(e.message, uploaded.path) from e

                output_name = FileNamingStrategy.generate_optimized_name(
                    uploaded.original_name
                )
                output_path = PathResolver.claim_unique_path(
                    self.output_dir / output_name
                )

                jobs.append(
                    OptimizationJob(
                        uploaded=uploaded,
                        format_name=format_name,
                        options=self.options[format_name],
                        output_path=output_path,
                    )
                )
        except (ProcessingError, OSError):
            discard_files(job.output_path for job in jobs)
            raise

        return jobs

    async def _run_job(self, job: OptimizationJob) -> FileOutcome:
        """执行单个处理单元，失败时删除占用的输出文件"""
        try:
            data = await asyncio.to_thread(job.uploaded.path.read_bytes)
            optimized = await asyncio.to_thread(
                self.codec, data, job.format_name, job.options
            )
            await asyncio.to_thread(job.output_path.write_bytes, optimized)
        except Exception:
            safe_unlink(job.output_path)
            raise

        result = OptimizationResult(
            stored_name=job.uploaded.stored_name,
            original_name=job.uploaded.original_name,
            output_path=job.output_path,
            size_before=len(data),
            size_after=len(optimized),
            format_used=job.format_name,
        )
        logger.debug(f"已优化 {job.uploaded.original_name}: {result.get_summary()}")
        return FileOutcome(uploaded=job.uploaded, result=result, success=True)

    @staticmethod
    def _handle_job_failure(error: Exception, job: OptimizationJob) -> FileOutcome:
        return ErrorHandler.handle_file_failure(error, job.uploaded)
