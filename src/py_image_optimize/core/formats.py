"""格式处理器模块。

根据扩展名识别目标格式，并为目标格式准备合适的色彩模式。
"""

import logging
from pathlib import PurePath

from PIL import Image

from ..models.constants import ImageFormats, get_format_for_extension


logger = logging.getLogger(__name__)


def detect_format(filename: str | PurePath) -> str:
    """根据扩展名识别目标格式

    Raises:
        UnsupportedFormatError: 扩展名不是 .png/.jpg/.jpeg
    """
    format_name = get_format_for_extension(filename)
    if format_name is None:
        from ..exceptions import UnsupportedFormatError

        raise UnsupportedFormatError(f"不支持的文件类型: {filename}")
    return format_name


def has_transparency(img: Image.Image) -> bool:
    """检查图片是否带透明通道"""
    return img.mode in ("RGBA", "LA", "PA") or "transparency" in img.info


class FormatProcessor:
    """格式处理器 - 为 JPEG/PNG 输出准备图片"""

    def prepare_for_format(self, img: Image.Image, target_format: str) -> Image.Image:
        """为目标格式准备图片

        Args:
            img: PIL图片对象
            target_format: 目标格式

        Returns:
            Image.Image: 处理后的图片对象
        """
        if target_format not in ImageFormats.SUPPORTED_FORMATS:
            from ..exceptions import UnsupportedFormatError

            raise UnsupportedFormatError(f"不支持的格式: {target_format}")

        match target_format:
            case "JPEG":
                return self._prepare_for_jpeg(img)
            case "PNG":
                return self._prepare_for_png(img)
            case _:
                return img

    def _prepare_for_jpeg(self, img: Image.Image) -> Image.Image:
        """为JPEG格式准备图片，JPEG不支持透明度，需要合成到背景上"""
        if img.mode == "P":
            if "transparency" not in img.info:
                return img.convert("RGB")
            img = img.convert("RGBA")

        if img.mode in ("RGBA", "LA", "PA"):
            img = img.convert("RGBA")
            background = Image.new("RGB", img.size, (255, 255, 255))
            background.paste(img, mask=img.split()[-1])
            return background

        if img.mode not in ("RGB", "L"):
            # CMYK、二值等模式统一转换为RGB，灰度保持单通道
            return img.convert("RGB")

        return img

    def _prepare_for_png(self, img: Image.Image) -> Image.Image:
        """为PNG量化准备图片：统一为 RGB 或 RGBA"""
        if has_transparency(img):
            return img.convert("RGBA")

        if img.mode != "RGB":
            return img.convert("RGB")

        return img
