"""消息格式化工具模块。

提供统一的错误消息、成功消息格式化功能。
"""

from pathlib import Path


class MessageFormatter:
    """统一的消息格式化器"""

    @staticmethod
    def file_not_found(file_path: str | Path) -> str:
        """文件不存在错误消息"""
        return f"文件不存在: {file_path}"

    @staticmethod
    def directory_not_found(directory: str | Path) -> str:
        """目录不存在错误消息"""
        return f"目录不存在: {directory}"

    @staticmethod
    def permission_error(path: str | Path, operation: str = "访问") -> str:
        """权限错误消息"""
        return f"权限错误，无法{operation}: {path}"

    @staticmethod
    def operation_failed(
        operation: str, target: str | Path, error: Exception | None = None
    ) -> str:
        """操作失败消息"""
        msg = f"{operation}失败: {target}"
        if error:
            msg += f" - {error}"
        return msg

    @staticmethod
    def format_error(operation: str, path: str | Path, error: Exception) -> str:
        """格式化通用错误消息"""
        return f"{operation}失败 [{path}]: {error}"

    @staticmethod
    def too_many_files(limit: int) -> str:
        return f"单次最多上传 {limit} 个文件"

    @staticmethod
    def unsupported_file_type(filename: str) -> str:
        return f"只允许上传 .jpg、.jpeg 和 .png 文件: {filename}"

    @staticmethod
    def total_size_exceeded(limit_text: str) -> str:
        return f"上传总大小超过 {limit_text}"

    @staticmethod
    def file_size_exceeded(filename: str, limit_text: str) -> str:
        return f"文件 {filename} 超过 {limit_text}"

    @staticmethod
    def empty_batch() -> str:
        return "未选择任何图片"

