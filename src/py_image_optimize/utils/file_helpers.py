"""工具函数模块。

提供存储目录相关的实用工具函数。
"""

import os
from pathlib import Path

from ..models.constants import get_format_for_extension, get_mime_type
from .logging_helpers import get_logger
from .message_formatter import MessageFormatter


logger = get_logger()


def ensure_directories(*directories: str | Path) -> None:
    """创建所需目录（已存在时忽略）"""
    for directory in directories:
        Path(directory).mkdir(parents=True, exist_ok=True)


def is_writable_directory(directory: str | Path) -> bool:
    """检查目录存在且可写"""
    directory = Path(directory)
    if not directory.is_dir():
        logger.warning(MessageFormatter.directory_not_found(directory))
        return False
    if not os.access(directory, os.W_OK | os.X_OK):
        logger.warning(MessageFormatter.permission_error(directory, "写入"))
        return False
    return True


def get_image_mime_type(file_path: str | Path) -> str:
    """根据扩展名获取下载时使用的 MIME 类型"""
    path = Path(file_path)
    if path.suffix.lower() == ".zip":
        return "application/zip"
    format_name = get_format_for_extension(path)
    return get_mime_type(format_name) if format_name else "application/octet-stream"
