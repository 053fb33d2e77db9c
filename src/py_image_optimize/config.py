"""统一配置管理模块。

提供应用程序的全局配置管理，包括默认值、环境变量支持等。
所有配置在进程启动时确定，运行期间不再修改。
"""

import os
from dataclasses import dataclass
from pathlib import Path

from .models.codec_options import CodecOptions


MIB = 1024 * 1024


@dataclass(frozen=True)
class IntakeLimits:
    """上传批次限制"""

    MAX_FILES: int = 20
    MAX_TOTAL_SIZE: int = 100 * MIB  # 整个批次的总大小
    MAX_FILE_SIZE: int = 100 * MIB  # 单个文件上限，与总大小一致


@dataclass(frozen=True)
class CompressionDefaults:
    """压缩相关的默认配置"""

    JPEG_QUALITY: int = 75
    PNG_QUALITY_MIN: float = 0.6
    PNG_QUALITY_MAX: float = 0.8

    # 并发设置
    CONCURRENCY: int = 6

    # 任意文件压缩失败时是否中止整个批次
    FAIL_FAST: bool = True

    def get_format_options(self, format_name: str) -> CodecOptions:
        """获取格式对应的压缩参数"""
        match format_name:
            case "JPEG":
                return CodecOptions(quality=self.JPEG_QUALITY)
            case "PNG":
                return CodecOptions(
                    quality=(self.PNG_QUALITY_MIN, self.PNG_QUALITY_MAX)
                )
            case _:
                raise KeyError(format_name)


@dataclass(frozen=True)
class LifecycleDefaults:
    """临时文件生命周期配置"""

    CLEANUP_ENABLED: bool = True
    RETENTION_SECONDS: float = 5 * 60
    SWEEP_INTERVAL_SECONDS: float = 60


@dataclass(frozen=True)
class StorageDefaults:
    """存储目录配置"""

    UPLOAD_DIR: Path = Path("uploads")
    OPTIMIZED_DIR: Path = Path("optimized")
    STATIC_DIR: Path | None = None


@dataclass(frozen=True)
class ServerDefaults:
    """HTTP 服务配置"""

    HOST: str = "0.0.0.0"
    PORT: int = 7841
    CORS_ORIGINS: tuple[str, ...] = ("*",)


@dataclass(frozen=True)
class LoggingDefaults:
    """日志相关的默认配置"""

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"

    # 文件日志
    ENABLE_FILE_LOGGING: bool = False
    LOG_FILE_PATH: str = "py_image_optimize.log"
    LOG_FILE_MAX_SIZE: int = 10 * MIB
    LOG_FILE_BACKUP_COUNT: int = 5


def _env_flag(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


class AppConfig:
    """应用程序配置管理器

    支持环境变量覆盖默认配置（前缀 PIO_）
    """

    def __init__(self):
        self.limits = IntakeLimits()
        self.compression = CompressionDefaults()
        self.lifecycle = LifecycleDefaults()
        self.storage = StorageDefaults()
        self.server = ServerDefaults()
        self.logging = LoggingDefaults()

        # 从环境变量加载配置
        self._load_from_env()

    def _load_from_env(self):
        """从环境变量加载配置"""
        # 批次限制
        if max_files := os.getenv("PIO_MAX_FILES"):
            object.__setattr__(self.limits, "MAX_FILES", int(max_files))

        if max_total := os.getenv("PIO_MAX_TOTAL_SIZE"):
            object.__setattr__(self.limits, "MAX_TOTAL_SIZE", int(max_total))
            object.__setattr__(self.limits, "MAX_FILE_SIZE", int(max_total))

        # 压缩配置
        if jpeg_quality := os.getenv("PIO_JPEG_QUALITY"):
            object.__setattr__(self.compression, "JPEG_QUALITY", int(jpeg_quality))

        if png_quality := os.getenv("PIO_PNG_QUALITY"):
            # 形如 "0.6-0.8"
            low, _, high = png_quality.partition("-")
            object.__setattr__(self.compression, "PNG_QUALITY_MIN", float(low))
            object.__setattr__(
                self.compression, "PNG_QUALITY_MAX", float(high or low)
            )

        if concurrency := os.getenv("PIO_CONCURRENCY"):
            object.__setattr__(self.compression, "CONCURRENCY", int(concurrency))

        if fail_fast := os.getenv("PIO_FAIL_FAST"):
            object.__setattr__(self.compression, "FAIL_FAST", _env_flag(fail_fast))

        # 生命周期
        if cleanup := os.getenv("PIO_CLEANUP_ENABLED"):
            object.__setattr__(self.lifecycle, "CLEANUP_ENABLED", _env_flag(cleanup))

        if retention := os.getenv("PIO_RETENTION_SECONDS"):
            object.__setattr__(self.lifecycle, "RETENTION_SECONDS", float(retention))

        if interval := os.getenv("PIO_SWEEP_INTERVAL_SECONDS"):
            object.__setattr__(
                self.lifecycle, "SWEEP_INTERVAL_SECONDS", float(interval)
            )

        # 存储目录
        if upload_dir := os.getenv("PIO_UPLOAD_DIR"):
            object.__setattr__(self.storage, "UPLOAD_DIR", Path(upload_dir))

        if optimized_dir := os.getenv("PIO_OPTIMIZED_DIR"):
            object.__setattr__(self.storage, "OPTIMIZED_DIR", Path(optimized_dir))

        if static_dir := os.getenv("PIO_STATIC_DIR"):
            object.__setattr__(self.storage, "STATIC_DIR", Path(static_dir))

        # 服务配置
        if host := os.getenv("PIO_HOST"):
            object.__setattr__(self.server, "HOST", host)

        if port := os.getenv("PORT") or os.getenv("PIO_PORT"):
            object.__setattr__(self.server, "PORT", int(port))

        # 日志配置
        if log_level := os.getenv("PIO_LOG_LEVEL"):
            object.__setattr__(self.logging, "LOG_LEVEL", log_level.upper())

        if enable_file_log := os.getenv("PIO_ENABLE_FILE_LOGGING"):
            object.__setattr__(
                self.logging, "ENABLE_FILE_LOGGING", _env_flag(enable_file_log)
            )


# 全局配置实例
config = AppConfig()


def get_config() -> AppConfig:
    """获取全局配置实例"""
    return config


def reset_config():
    """重置配置（主要用于测试）"""
    global config
    config = AppConfig()
