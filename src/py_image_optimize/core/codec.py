"""编解码适配模块。

对单个文件的字节进行有损重新编码：
JPEG 按固定质量渐进式编码，PNG 按质量区间做调色板量化。
同样的输入和参数总是得到同样的输出。
"""

import io
from collections.abc import Callable

from PIL import Image, ImageChops, ImageOps, ImageStat

from ..exceptions import CodecError, UnsupportedFormatError, handle_codec_errors
from ..models.codec_options import CodecOptions
from ..models.constants import ImageFormats
from ..utils.logging_helpers import get_logger
from .formats import FormatProcessor


logger = get_logger()

# 编解码函数签名：(原始字节, 格式名, 参数) -> 压缩后字节
Codec = Callable[[bytes, str, CodecOptions], bytes]

_FORMAT_ALIASES = {"JPG": "JPEG"}


def normalize_format(format_name: str) -> str:
    """统一格式名称（大写，JPG 视为 JPEG）

    Raises:
        UnsupportedFormatError: 格式不是 PNG/JPEG
    """
    name = format_name.upper()
    name = _FORMAT_ALIASES.get(name, name)
    if name not in ImageFormats.SUPPORTED_FORMATS:
        raise UnsupportedFormatError(f"不支持的格式: {format_name}")
    return name


def palette_size(quality_max: float) -> int:
    """根据质量上限计算调色板颜色数（2-256）"""
    return max(2, min(256, round(256 * quality_max)))


def estimate_quality(reference: Image.Image, candidate: Image.Image) -> float:
    """估算量化后图片的质量：1 - 平均绝对误差 / 255"""
    if candidate.mode != reference.mode:
        candidate = candidate.convert(reference.mode)

    diff = ImageChops.difference(reference, candidate)
    band_means = ImageStat.Stat(diff).mean
    mean_error = sum(band_means) / len(band_means)
    return 1.0 - mean_error / 255.0


@handle_codec_errors("图像压缩")
def compress(data: bytes, format_name: str, options: CodecOptions) -> bytes:
    """压缩单个图片的字节数据

    Args:
        data: 原始文件字节
        format_name: 目标格式（PNG 或 JPEG，与输入一致）
        options: 压缩参数

    Returns:
        bytes: 压缩后的字节；若重新编码后反而变大，返回原始字节

    Raises:
        UnsupportedFormatError: 格式不受支持
        CodecError: 数据损坏、无法解码或量化质量低于下限
    """
    format_name = normalize_format(format_name)

    with Image.open(io.BytesIO(data)) as img:
        img.load()
        match format_name:
            case "JPEG":
                optimized = _encode_jpeg(img, options)
            case "PNG":
                optimized = _encode_png(img, options)

    if len(optimized) >= len(data):
        logger.debug(
            f"重新编码未减小体积（{len(data)} → {len(optimized)} 字节），保留原始数据"
        )
        return data

    return optimized


def _encode_jpeg(img: Image.Image, options: CodecOptions) -> bytes:
    """JPEG：应用 EXIF 方向后按固定质量渐进式编码"""
    icc_profile = img.info.get("icc_profile")
    img = ImageOps.exif_transpose(img)
    prepared = FormatProcessor().prepare_for_format(img, "JPEG")

    save_params = {
        "format": "JPEG",
        "quality": options.as_int(),
        "optimize": True,
        "progressive": True,
    }
    if icc_profile:
        save_params["icc_profile"] = icc_profile

    buffer = io.BytesIO()
    prepared.save(buffer, **save_params)
    return buffer.getvalue()


def _encode_png(img: Image.Image, options: CodecOptions) -> bytes:
    """PNG：调色板量化，质量低于下限时放弃"""
    quality_min, quality_max = options.as_range()
    prepared = FormatProcessor().prepare_for_format(img, "PNG")

    # RGBA 只能使用八叉树量化
    method = (
        Image.Quantize.FASTOCTREE
        if prepared.mode == "RGBA"
        else Image.Quantize.MEDIANCUT
    )
    quantized = prepared.quantize(
        colors=palette_size(quality_max),
        method=method,
        dither=Image.Dither.FLOYDSTEINBERG,
    )

    quality = estimate_quality(prepared, quantized)
    if quality < quality_min:
        raise CodecError(
            f"量化后质量 {quality:.2f} 低于下限 {quality_min:.2f}"
        )

    save_params = {"format": "PNG", "optimize": True}
    if icc_profile := img.info.get("icc_profile"):
        save_params["icc_profile"] = icc_profile

    buffer = io.BytesIO()
    quantized.save(buffer, **save_params)
    return buffer.getvalue()

