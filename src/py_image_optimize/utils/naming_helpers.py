"""文件命名工具模块。

提供统一的文件命名策略和受限目录内的路径解析。
"""

import itertools
import re
import secrets
import time
from collections.abc import Callable, Container
from pathlib import Path, PurePosixPath, PureWindowsPath

from ..models.constants import ArchiveDefaults, NamingDefaults


_WHITESPACE = re.compile(r"\s+")


class FileNamingStrategy:
    """文件命名策略类"""

    @staticmethod
    def basename(filename: str) -> str:
        """只保留最后一段路径，兼容 / 和 \\ 分隔符"""
        return PureWindowsPath(PurePosixPath(filename).name).name

    @staticmethod
    def sanitize_stem(filename: str) -> str:
        """生成安全的文件名主干：去掉目录和扩展名，空白替换为下划线"""
        stem = Path(FileNamingStrategy.basename(filename)).stem
        stem = _WHITESPACE.sub("_", stem).lstrip(".")
        return stem or NamingDefaults.FALLBACK_STEM

    @staticmethod
    def generate_stored_name(
        original_name: str,
        clock: Callable[[], float] = time.time,
    ) -> str:
        """生成暂存文件名：<主干>-<毫秒时间戳>-<随机数><扩展名>

        Args:
            original_name: 客户端提供的文件名
            clock: 时间来源（测试时可替换）

        Returns:
            str: 唯一的暂存文件名（不含路径）
        """
        stem = FileNamingStrategy.sanitize_stem(original_name)
        ext = Path(FileNamingStrategy.basename(original_name)).suffix
        millis = int(clock() * 1000)
        nonce = secrets.randbelow(NamingDefaults.RANDOM_UPPER_BOUND)
        return f"{stem}-{millis}-{nonce}{ext}"

    @staticmethod
    def generate_optimized_name(original_name: str) -> str:
        """生成优化后文件名：<原始主干>-opt<小写扩展名>"""
        stem = FileNamingStrategy.sanitize_stem(original_name)
        ext = Path(FileNamingStrategy.basename(original_name)).suffix.lower()
        return f"{stem}{NamingDefaults.OPTIMIZED_SUFFIX}{ext}"

    @staticmethod
    def generate_archive_id() -> str:
        """生成 16 位十六进制归档标识"""
        return secrets.token_hex(ArchiveDefaults.ID_BYTES)

    @staticmethod
    def archive_filename(archive_id: str) -> str:
        return f"{ArchiveDefaults.NAME_PREFIX}{archive_id}{ArchiveDefaults.EXTENSION}"


class PathResolver:
    """路径解析器"""

    @staticmethod
    def resolve(directory: str | Path, requested_name: str) -> Path:
        """把请求的文件名解析为目录内的安全路径

        只保留最后一段路径再与目录拼接，拼接结果必须仍位于目录之内。

        Args:
            directory: 限定目录
            requested_name: 请求的文件名

        Returns:
            Path: 目录内的绝对路径（不保证文件存在）

        Raises:
            PathTraversalError: 文件名为空、隐藏文件、含空字节或解析到目录之外
        """
        from ..exceptions import PathTraversalError

        base_dir = Path(directory).resolve()
        safe_name = FileNamingStrategy.basename(requested_name or "")

        if (
            safe_name in ("", ".", "..")
            or safe_name.startswith(".")
            or "\x00" in safe_name
        ):
            raise PathTraversalError(f"非法文件名: {requested_name!r}")

        candidate = (base_dir / safe_name).resolve()
        if not candidate.is_relative_to(base_dir) or candidate == base_dir:
            raise PathTraversalError(
                f"路径超出目录范围: {requested_name!r}", candidate
            )

        return candidate

    @staticmethod
    def claim_unique_path(path: Path) -> Path:
        """在磁盘上占用一个唯一路径，已存在时添加数字后缀

        以独占方式创建空文件，并发请求不会拿到同一个路径。

        Args:
            path: 期望的路径

        Returns:
            Path: 已创建的空文件路径，调用方负责写入或删除
        """
        candidates = itertools.chain(
            [path],
            (
                path.parent / f"{path.stem}_{counter}{path.suffix}"
                for counter in itertools.count(1)
            ),
        )
        for candidate in candidates:
            try:
                with open(candidate, "xb"):
                    return candidate
            except FileExistsError:
                continue

        return path  # pragma: no cover

    @staticmethod
    def ensure_unique_name(name: str, taken: Container[str]) -> str:
        """确保名称在集合中唯一，冲突时添加数字后缀"""
        if name not in taken:
            return name

        stem, suffix = Path(name).stem, Path(name).suffix
        for counter in itertools.count(1):
            candidate = f"{stem}_{counter}{suffix}"
            if candidate not in taken:
                return candidate

        return name  # pragma: no cover
