"""归档打包模块。

把一组已优化的文件打包成一个 ZIP。归档先写入同目录下的隐藏临时文件，
完整写完后再原子替换为正式文件名，读者不会看到写了一半的归档。
"""

import os
import tempfile
import zipfile
from collections.abc import Sequence
from pathlib import Path

from ..exceptions import ArchiveIOError
from ..models.constants import ArchiveDefaults
from ..models.optimization_result import Archive
from ..utils.cleanup_helpers import safe_unlink
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter
from ..utils.naming_helpers import FileNamingStrategy, PathResolver


logger = get_logger()


class ArchiveBuilder:
    """ZIP 归档构建器"""

    def __init__(
        self,
        output_dir: str | Path,
        compress_level: int = ArchiveDefaults.COMPRESS_LEVEL,
    ):
        self.output_dir = Path(output_dir)
        self.compress_level = compress_level

    def bundle(self, paths: Sequence[Path]) -> Archive:
        """打包文件

        条目名只保留文件名，重复的文件名追加 _1、_2 后缀。

        Args:
            paths: 需要打包的文件

        Returns:
            Archive: 归档信息

        Raises:
            ArchiveIOError: 任意读写失败；此时不会留下任何归档文件
        """
        archive_id = FileNamingStrategy.generate_archive_id()
        filename = FileNamingStrategy.archive_filename(archive_id)
        final_path = self.output_dir / filename

        try:
            fd, temp_name = tempfile.mkstemp(
                dir=self.output_dir,
                prefix=f".{ArchiveDefaults.NAME_PREFIX}",
                suffix=".part",
            )
        except OSError as e:
            raise ArchiveIOError(
                MessageFormatter.operation_failed("创建归档", final_path, e), final_path
            ) from e

        temp_path = Path(temp_name)
        members: list[str] = []

        try:
            with os.fdopen(fd, "wb") as raw, zipfile.ZipFile(
                raw,
                mode="w",
                compression=zipfile.ZIP_DEFLATED,
                compresslevel=self.compress_level,
            ) as zf:
                for path in paths:
                    arcname = PathResolver.ensure_unique_name(
                        FileNamingStrategy.basename(str(path)), members
                    )
                    zf.write(path, arcname=arcname)
                    members.append(arcname)

            os.replace(temp_path, final_path)
        except (OSError, zipfile.BadZipFile, ValueError) as e:
            safe_unlink(temp_path)
            raise ArchiveIOError(
                MessageFormatter.operation_failed("创建归档", final_path, e), final_path
            ) from e

        logger.info(f"已创建归档 {filename}（{len(members)} 个文件）")
        return Archive(
            archive_id=archive_id,
            filename=filename,
            path=final_path,
            members=members,
        )
