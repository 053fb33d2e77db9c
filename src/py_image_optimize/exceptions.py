"""图像优化异常处理模块。

定义统一的异常类和错误处理机制，包含编解码异常转换装饰器。
"""

import zlib
from collections.abc import Callable
from functools import wraps
from pathlib import Path
from typing import TypeVar

from PIL.Image import DecompressionBombError, UnidentifiedImageError

from .models.optimization_result import FileOutcome
from .models.upload import UploadedFile
from .utils.logging_helpers import get_logger
from .utils.message_formatter import MessageFormatter


logger = get_logger()
T = TypeVar("T")


# 统一的异常类型
class OptimizeError(Exception):
    """图像优化相关错误基类"""

    def __init__(self, message: str, path: Path | None = None):
        super().__init__(message)
        self.message = message
        self.path = path


class ValidationError(OptimizeError):
    """批次校验错误，整个批次被拒绝，消息可直接返回给客户端"""

    pass


class CodecError(OptimizeError):
    """单个文件无法压缩（损坏或无法解码）"""

    pass


class UnsupportedFormatError(OptimizeError):
    """不支持的格式错误"""

    pass


class ArchiveIOError(OptimizeError):
    """归档打包失败"""

    pass


class PathTraversalError(OptimizeError):
    """请求的文件名解析到了目标目录之外"""

    pass


class ProcessingError(OptimizeError):
    """处理过程错误，整个请求失败"""

    pass


def handle_codec_errors(operation_name: str = "图像压缩"):
    """编解码异常转换装饰器

    将 Pillow 和 IO 异常统一转换为 CodecError，自定义异常原样抛出。

    Args:
        operation_name: 操作名称，用于日志记录
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except OptimizeError:
                raise
            except UnidentifiedImageError as e:
                logger.debug(f"{operation_name} - 无法识别图像: {e}")
                raise CodecError(f"无法识别的图像数据: {e}") from e
            except DecompressionBombError as e:
                logger.debug(f"{operation_name} - 图像过大: {e}")
                raise CodecError(f"图像像素过多，可能存在安全风险: {e}") from e
            except (OSError, SyntaxError, zlib.error) as e:
                # Pillow 对截断或损坏的数据可能抛出 OSError/SyntaxError
                logger.debug(f"{operation_name} - 解码失败: {e}")
                raise CodecError(f"图像解码失败: {e}") from e
            except (ValueError, TypeError) as e:
                logger.debug(f"{operation_name} - 参数错误: {e}")
                raise CodecError(f"压缩参数错误: {e}") from e

        return wrapper

    return decorator


class ErrorHandler:
    """统一错误处理器

    提供标准化的错误处理和日志记录功能。
    """

    @staticmethod
    def _log_error(
        operation: str, path: Path, error: Exception, level: str = "error"
    ) -> None:
        """标准化的错误日志记录

        Args:
            operation: 操作名称（如"图像压缩"、"文件读取"等）
            path: 相关文件路径
            error: 异常对象
            level: 日志级别 ("error", "warning", "debug")
        """
        log_msg = MessageFormatter.format_error(operation, path, error)
        getattr(logger, level, logger.error)(log_msg)

    @staticmethod
    def handle_file_failure(
        error: Exception, uploaded: UploadedFile, operation: str = "图像压缩"
    ) -> FileOutcome:
        """将单个文件的失败转换为 FileOutcome，不影响同批次其他文件"""
        match error:
            case CodecError() | UnsupportedFormatError():
                level = "warning"
            case FileNotFoundError():
                level = "warning"
            case PermissionError():
                operation = f"{operation} - 权限错误"
                level = "error"
            case OSError():
                operation = f"{operation} - 系统错误"
                level = "error"
            case _:
                level = "error"

        ErrorHandler._log_error(operation, uploaded.path, error, level)
        message = error.message if isinstance(error, OptimizeError) else str(error)
        return FileOutcome(
            uploaded=uploaded,
            result=None,
            success=False,
            error=f"{operation}: {message}",
        )
