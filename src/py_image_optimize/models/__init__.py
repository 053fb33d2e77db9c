"""数据模型包。

定义上传、优化结果和响应相关的数据结构。
"""

from .codec_options import CodecOptions, QualityRange
from .constants import (
    ArchiveDefaults,
    ImageFormats,
    NamingDefaults,
    get_format_for_extension,
    get_mime_type,
    is_supported_filename,
)
from .optimization_result import (
    Archive,
    BatchOutcome,
    FailedFileInfo,
    FileOutcome,
    OptimizationResult,
    OptimizedFileInfo,
    OptimizeResponse,
    ZipInfo,
)
from .upload import Batch, UploadedFile


__all__ = [
    "Archive",
    "ArchiveDefaults",
    "Batch",
    "BatchOutcome",
    "CodecOptions",
    "FailedFileInfo",
    "FileOutcome",
    "ImageFormats",
    "NamingDefaults",
    "OptimizationResult",
    "OptimizeResponse",
    "OptimizedFileInfo",
    "QualityRange",
    "UploadedFile",
    "ZipInfo",
    "get_format_for_extension",
    "get_mime_type",
    "is_supported_filename",
]
