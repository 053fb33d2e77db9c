"""图像优化 HTTP 服务。

基于 FastAPI 提供上传、下载接口，并在应用生命周期内运行过期文件清理。
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI, File, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from .config import AppConfig, get_config
from .exceptions import PathTraversalError, ValidationError
from .models import OptimizeResponse
from .pipeline import DOWNLOAD_ROUTE, UPLOAD_ROUTE, OptimizationPipeline
from .utils.file_helpers import ensure_directories, get_image_mime_type
from .utils.logging_helpers import get_logger
from .utils.message_formatter import MessageFormatter


logger = get_logger()

PROCESSING_FAILED = "图片处理失败"
INTERNAL_ERROR = "服务器内部错误"
FILE_NOT_FOUND = "文件不存在"

CONTENT_SECURITY_POLICY = "; ".join(
    [
        "default-src 'self'",
        "script-src 'self' 'unsafe-inline'",
        "style-src 'self' https: 'unsafe-inline'",
        "img-src 'self' data: blob:",
        "font-src 'self' https: data:",
        "object-src 'none'",
        "upgrade-insecure-requests",
    ]
)

SECURITY_HEADERS = {
    "Content-Security-Policy": CONTENT_SECURITY_POLICY,
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
}


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _file_response(path: Path) -> FileResponse:
    """以附件形式返回文件"""
    return FileResponse(path, media_type=get_image_mime_type(path), filename=path.name)


def create_app(
    config: AppConfig | None = None, pipeline: OptimizationPipeline | None = None
) -> FastAPI:
    """创建 FastAPI 应用

    Args:
        config: 应用配置（默认使用全局配置）
        pipeline: 优化流水线（默认按配置创建）

    Returns:
        FastAPI: 应用实例
    """
    config = config or get_config()
    pipeline = pipeline or OptimizationPipeline(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # 启动
        ensure_directories(pipeline.upload_dir, pipeline.optimized_dir)
        janitor = None
        if config.lifecycle.CLEANUP_ENABLED:
            janitor = pipeline.create_janitor()
            await janitor.start()
        else:
            logger.info("过期文件清理已关闭")
        app.state.janitor = janitor

        yield

        # 关闭
        if janitor is not None:
            await janitor.stop()

    app = FastAPI(title="py-image-optimize", lifespan=lifespan)
    app.state.pipeline = pipeline

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.server.CORS_ORIGINS),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next: Any):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            MessageFormatter.operation_failed("处理请求", request.url.path, exc),
            exc_info=exc,
        )
        return _error_response(500, INTERNAL_ERROR)

    @app.post(UPLOAD_ROUTE, response_model=OptimizeResponse)
    async def upload_images(
        images: list[UploadFile] | None = File(None),
    ):
        """接收一批图片，返回优化后的下载信息"""
        try:
            return await pipeline.process(images or [])
        except ValidationError as e:
            logger.info(f"拒绝上传: {e.message}")
            return _error_response(400, e.message)
        except Exception as e:
            logger.error(MessageFormatter.operation_failed("图片处理", UPLOAD_ROUTE, e))
            return _error_response(500, PROCESSING_FAILED)

    @app.get(f"{DOWNLOAD_ROUTE}/{{filename}}")
    async def download_optimized(filename: str):
        """下载优化后的图片或归档"""
        try:
            return _file_response(pipeline.resolve_download(filename))
        except (PathTraversalError, FileNotFoundError):
            return _error_response(404, FILE_NOT_FOUND)

    @app.get(f"{UPLOAD_ROUTE}/{{filename}}")
    async def download_original(filename: str):
        """下载原始上传文件"""
        try:
            return _file_response(pipeline.resolve_upload(filename))
        except (PathTraversalError, FileNotFoundError):
            return _error_response(404, FILE_NOT_FOUND)

    static_dir = config.storage.STATIC_DIR
    if static_dir is not None and Path(static_dir).is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")

    return app
