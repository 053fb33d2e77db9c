"""图像处理相关常量定义。

服务只处理两种有损可压缩的栅格格式：PNG 与 JPEG。
"""

from pathlib import PurePath
from typing import Final


class ImageFormats:
    """支持的图像格式"""

    # 扩展名到格式的映射（小写）
    EXTENSIONS: Final[dict[str, str]] = {
        ".png": "PNG",
        ".jpg": "JPEG",
        ".jpeg": "JPEG",
    }

    MIME_TYPES: Final[dict[str, str]] = {
        "PNG": "image/png",
        "JPEG": "image/jpeg",
    }

    SUPPORTED_FORMATS: Final[frozenset[str]] = frozenset({"PNG", "JPEG"})

    @classmethod
    def get_mime_type(cls, format_name: str) -> str:
        """获取格式的 MIME 类型"""
        return cls.MIME_TYPES.get(format_name.upper(), "application/octet-stream")


class ArchiveDefaults:
    """归档相关默认值"""

    NAME_PREFIX: Final[str] = "bundle-"
    EXTENSION: Final[str] = ".zip"
    ID_BYTES: Final[int] = 8  # 16 个十六进制字符
    COMPRESS_LEVEL: Final[int] = 9


class NamingDefaults:
    """文件命名相关默认值"""

    OPTIMIZED_SUFFIX: Final[str] = "-opt"
    FALLBACK_STEM: Final[str] = "image"
    RANDOM_UPPER_BOUND: Final[int] = 10**9


# 便捷访问函数
def get_format_for_extension(filename: str | PurePath) -> str | None:
    """根据文件扩展名获取格式，不支持时返回 None"""
    suffix = PurePath(filename).suffix.lower()
    return ImageFormats.EXTENSIONS.get(suffix)


def is_supported_filename(filename: str | PurePath) -> bool:
    """检查文件名扩展名是否受支持（大小写不敏感）"""
    return get_format_for_extension(filename) is not None


def get_mime_type(format_str: str) -> str:
    """获取格式的MIME类型"""
    return ImageFormats.get_mime_type(format_str)
