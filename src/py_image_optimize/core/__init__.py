"""核心模块包。

包含编解码适配和格式处理。
"""

from .codec import Codec, compress, estimate_quality, palette_size
from .formats import FormatProcessor, detect_format, has_transparency


__all__ = [
    "Codec",
    "FormatProcessor",
    "compress",
    "detect_format",
    "estimate_quality",
    "has_transparency",
    "palette_size",
]
