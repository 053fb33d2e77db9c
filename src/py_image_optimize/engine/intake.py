"""上传入口校验模块。

在任何处理开始之前校验整个批次：文件数、文件类型、单文件和总大小。
批次要么全部暂存成功，要么一个文件也不留下。
"""

import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Protocol

from humanize import naturalsize

from ..exceptions import ValidationError
from ..models.constants import (
    get_format_for_extension,
    get_mime_type,
    is_supported_filename,
)
from ..models.upload import Batch, UploadedFile
from ..utils.cleanup_helpers import TempFileManager
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter
from ..utils.naming_helpers import FileNamingStrategy


logger = get_logger()

CHUNK_SIZE = 1024 * 1024


class UploadPart(Protocol):
    """一个上传部分：Starlette 的 UploadFile 和 LocalPart 都满足"""

    filename: str | None
    content_type: str | None
    file: BinaryIO
    size: int | None


@dataclass
class LocalPart:
    """包装本地文件，使其可以走与 HTTP 上传相同的入口"""

    filename: str
    content_type: str | None
    file: BinaryIO
    size: int | None = None

    @classmethod
    def open(cls, path: str | Path) -> "LocalPart":
        """打开本地文件（调用方负责关闭 part.file）"""
        path = Path(path)
        format_name = get_format_for_extension(path)
        return cls(
            filename=path.name,
            content_type=get_mime_type(format_name) if format_name else None,
            file=path.open("rb"),
            size=path.stat().st_size,
        )


class IntakeGuard:
    """上传入口校验器"""

    def __init__(
        self,
        upload_dir: str | Path,
        max_files: int = 20,
        max_total_size: int = 100 * 1024 * 1024,
        max_file_size: int = 100 * 1024 * 1024,
        clock: Callable[[], float] = time.time,
    ):
        """初始化入口校验器

        Args:
            upload_dir: 暂存目录
            max_files: 单批次最多文件数
            max_total_size: 批次总大小上限（字节）
            max_file_size: 单个文件大小上限（字节）
            clock: 时间来源，用于生成暂存文件名
        """
        self.upload_dir = Path(upload_dir)
        self.max_files = max_files
        self.max_total_size = max_total_size
        self.max_file_size = max_file_size
        self.clock = clock

    def admit(self, parts: Sequence[UploadPart]) -> Batch:
        """校验并暂存一个批次

        Args:
            parts: 按提交顺序排列的上传部分

        Returns:
            Batch: 已暂存的批次

        Raises:
            ValidationError: 批次不符合限制，此时不会留下任何暂存文件
        """
        self._check_declared(parts)

        batch_files: list[UploadedFile] = []
        total_size = 0

        with TempFileManager() as staged:
            for part in parts:
                uploaded = self._stage(part, staged, self.max_total_size - total_size)
                total_size += uploaded.size
                batch_files.append(uploaded)
            staged.keep()

        batch = Batch(files=batch_files)
        logger.info(f"已接收上传: {batch.get_summary()}")
        return batch

    def _check_declared(self, parts: Sequence[UploadPart]) -> None:
        """在写入任何文件之前，按声明的信息校验批次"""
        if not parts:
            raise ValidationError(MessageFormatter.empty_batch())

        if len(parts) > self.max_files:
            raise ValidationError(MessageFormatter.too_many_files(self.max_files))

        for part in parts:
            filename = FileNamingStrategy.basename(part.filename or "")
            if not is_supported_filename(filename):
                raise ValidationError(MessageFormatter.unsupported_file_type(filename))

        declared_total = 0
        for part in parts:
            if part.size is None:
                continue
            if part.size > self.max_file_size:
                raise ValidationError(
                    MessageFormatter.file_size_exceeded(
                        part.filename or "", self._format_limit(self.max_file_size)
                    )
                )
            declared_total += part.size

        if declared_total > self.max_total_size:
            raise ValidationError(
                MessageFormatter.total_size_exceeded(
                    self._format_limit(self.max_total_size)
                )
            )

    def _stage(
        self, part: UploadPart, staged: TempFileManager, remaining_total: int
    ) -> UploadedFile:
        """把一个部分流式写入暂存目录，同时检查单文件和剩余总量"""
        original_name = FileNamingStrategy.basename(part.filename or "")
        stored_name = FileNamingStrategy.generate_stored_name(original_name, self.clock)
        path = self.upload_dir / stored_name

        written = 0
        with path.open("xb") as out:
            staged.register_temp_file(path)
            while chunk := part.file.read(CHUNK_SIZE):
                written += len(chunk)
                if written > self.max_file_size:
                    raise ValidationError(
                        MessageFormatter.file_size_exceeded(
                            original_name, self._format_limit(self.max_file_size)
                        )
                    )
                if written > remaining_total:
                    raise ValidationError(
                        MessageFormatter.total_size_exceeded(
                            self._format_limit(self.max_total_size)
                        )
                    )
                out.write(chunk)

        logger.debug(f"已暂存 {original_name} → {stored_name}")
        return UploadedFile(
            original_name=original_name,
            stored_name=stored_name,
            path=path,
            size=written,
            media_type=part.content_type or "application/octet-stream",
        )

    @staticmethod
    def _format_limit(size: int) -> str:
        return naturalsize(size, binary=True)
