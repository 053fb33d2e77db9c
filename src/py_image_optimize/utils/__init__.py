"""工具模块包。

提供纯工具函数，不包含业务逻辑。
"""

from .cleanup_helpers import (
    LifecycleJanitor,
    TempFileManager,
    discard_files,
    safe_unlink,
)
from .file_helpers import (
    ensure_directories,
    get_image_mime_type,
    is_writable_directory,
)
from .logging_helpers import configure_logging, get_logger
from .message_formatter import MessageFormatter
from .naming_helpers import FileNamingStrategy, PathResolver


__all__ = [
    "FileNamingStrategy",
    "LifecycleJanitor",
    "MessageFormatter",
    "PathResolver",
    "TempFileManager",
    "configure_logging",
    "discard_files",
    "ensure_directories",
    "get_image_mime_type",
    "get_logger",
    "is_writable_directory",
    "safe_unlink",
]
