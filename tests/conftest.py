"""测试配置文件。

提供测试所需的fixtures和配置。
"""

import dataclasses
import io
import random
import tempfile
from pathlib import Path

import pytest
from PIL import Image, ImageDraw

from py_image_optimize.config import AppConfig
from py_image_optimize.engine.intake import LocalPart


def _draw_shapes(img: Image.Image) -> Image.Image:
    """在图片上绘制一些色块，使其具备可压缩的内容"""
    draw = ImageDraw.Draw(img)
    width, height = img.size
    for i in range(30):
        x, y = (i * 23) % width, (i * 17) % height
        color = (i * 5 % 256, i * 7 % 256, i * 11 % 256)
        draw.rectangle([x, y, x + width // 5, y + height // 6], fill=color)
    return img


def _gradient(size: tuple[int, int]) -> Image.Image:
    """生成带渐变的照片风格图片"""
    width, height = size
    img = Image.new("RGB", size)
    img.putdata(
        [
            (
                (x * 255) // width,
                (y * 255) // height,
                ((x + y) * 127) // (width + height),
            )
            for y in range(height)
            for x in range(width)
        ]
    )
    return img


def make_png_bytes(
    size: tuple[int, int] = (200, 160), transparent: bool = False
) -> bytes:
    """生成 PNG 图片字节"""
    if transparent:
        img = Image.new("RGBA", size, color=(0, 0, 0, 0))
        draw = ImageDraw.Draw(img)
        for i in range(8):
            x, y = i * 20, i * 15
            color = (255 - i * 20, 100 + i * 15, i * 25, 180)
            draw.ellipse([x, y, x + 60, y + 60], fill=color)
    else:
        img = _draw_shapes(_gradient(size))

    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def make_jpeg_bytes(size: tuple[int, int] = (200, 160), quality: int = 95) -> bytes:
    """生成高质量 JPEG 图片字节"""
    img = _draw_shapes(_gradient(size))
    buffer = io.BytesIO()
    img.save(buffer, format="JPEG", quality=quality)
    return buffer.getvalue()


def make_noise_png_bytes(size: tuple[int, int] = (64, 64), seed: int = 0) -> bytes:
    """生成随机噪声 PNG（颜色极多，量化误差大）"""
    rng = random.Random(seed)
    img = Image.new("RGB", size)
    img.putdata(
        [
            (rng.randrange(256), rng.randrange(256), rng.randrange(256))
            for _ in range(size[0] * size[1])
        ]
    )
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def make_part(
    filename: str,
    data: bytes,
    content_type: str = "image/png",
    declare_size: bool = True,
) -> LocalPart:
    """构造一个内存中的上传部分"""
    return LocalPart(
        filename=filename,
        content_type=content_type,
        file=io.BytesIO(data),
        size=len(data) if declare_size else None,
    )


@pytest.fixture
def temp_dir():
    """临时目录fixture"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def upload_dir(temp_dir: Path) -> Path:
    path = temp_dir / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def optimized_dir(temp_dir: Path) -> Path:
    path = temp_dir / "optimized"
    path.mkdir()
    return path


@pytest.fixture
def app_config(upload_dir: Path, optimized_dir: Path, monkeypatch) -> AppConfig:
    """指向临时目录、关闭后台清理的配置"""
    for name in ("PORT", "PIO_UPLOAD_DIR", "PIO_OPTIMIZED_DIR", "PIO_FAIL_FAST"):
        monkeypatch.delenv(name, raising=False)

    config = AppConfig()
    config.storage = dataclasses.replace(
        config.storage, UPLOAD_DIR=upload_dir, OPTIMIZED_DIR=optimized_dir
    )
    config.lifecycle = dataclasses.replace(config.lifecycle, CLEANUP_ENABLED=False)
    return config


@pytest.fixture
def png_bytes() -> bytes:
    return make_png_bytes()


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_jpeg_bytes()
