"""图像优化 MCP 服务器。

把本地文件送入与 HTTP 上传相同的优化流水线，并提供手动清理过期文件的工具。
"""

from contextlib import ExitStack
from pathlib import Path
from typing import Any

from fastmcp import FastMCP

from .engine.intake import LocalPart
from .exceptions import OptimizeError, ValidationError
from .pipeline import OptimizationPipeline
from .utils.file_helpers import ensure_directories
from .utils.logging_helpers import get_logger
from .utils.message_formatter import MessageFormatter


# MCP 服务器响应类型定义
MCPOptimizeResponse = dict[str, Any]
MCPSweepResponse = dict[str, Any]

logger = get_logger()

# 创建MCP应用
mcp: FastMCP[Any] = FastMCP("图像批量优化服务")

_pipeline: OptimizationPipeline | None = None


def get_pipeline() -> OptimizationPipeline:
    """获取（首次调用时创建）全局流水线实例"""
    global _pipeline
    if _pipeline is None:
        _pipeline = OptimizationPipeline()
        ensure_directories(_pipeline.upload_dir, _pipeline.optimized_dir)
    return _pipeline


def set_pipeline(pipeline: OptimizationPipeline | None) -> None:
    """替换全局流水线实例（主要用于测试）"""
    global _pipeline
    _pipeline = pipeline


def _error(message: str, error_type: str) -> dict[str, Any]:
    return {"success": False, "error": message, "error_type": error_type}


@mcp.tool()
async def optimize_images(input_paths: list[str]) -> MCPOptimizeResponse:
    """批量优化本地 PNG/JPEG 图片

    图片会先按上传规则校验并暂存，然后压缩到输出目录；
    多于一个文件时额外生成 ZIP 归档。

    Args:
        input_paths: 本地图片路径列表（最多 20 个，.png/.jpg/.jpeg）

    Returns:
        dict: 各文件的压缩结果、输出文件的绝对路径以及归档路径
    """
    pipeline = get_pipeline()

    missing = [p for p in input_paths if not Path(p).is_file()]
    if missing:
        return _error(MessageFormatter.file_not_found(missing[0]), "file")

    try:
        with ExitStack() as stack:
            parts = []
            for input_path in input_paths:
                part = LocalPart.open(input_path)
                stack.callback(part.file.close)
                parts.append(part)

            response = await pipeline.process(parts)

    except ValidationError as e:
        return _error(e.message, "validation")
    except OptimizeError as e:
        logger.error(MessageFormatter.operation_failed("批量优化", "MCP", e))
        return _error(e.message, "processing")
    except OSError as e:
        logger.error(MessageFormatter.operation_failed("读取文件", "MCP", e))
        return _error(str(e), "file")

    files = []
    for info in response.files:
        entry = info.model_dump(by_alias=True)
        output_path = pipeline.optimized_dir.resolve() / info.optimized_name
        entry["outputPath"] = str(output_path)
        files.append(entry)

    result: dict[str, Any] = {
        "success": True,
        "files": files,
        "failed": [f.model_dump(by_alias=True) for f in response.failed],
        "zip": None,
    }
    if response.zip is not None:
        zip_name = Path(response.zip.url).name
        result["zip"] = {
            "url": response.zip.url,
            "path": str(pipeline.optimized_dir.resolve() / zip_name),
        }

    return result


@mcp.tool()
def sweep_expired() -> MCPSweepResponse:
    """立即清理一次暂存和输出目录中的过期文件

    Returns:
        dict: 每个目录被删除的文件
    """
    janitor = get_pipeline().create_janitor()
    report = janitor.sweep()
    return {
        "success": True,
        "removed": {
            str(directory): [path.name for path in paths]
            for directory, paths in report.items()
        },
        "total_removed": sum(len(paths) for paths in report.values()),
    }


# ============================================================================
# 应用入口
# ============================================================================


def main() -> None:
    """启动 MCP 服务器"""
    logger.info("启动图像批量优化 MCP 服务器")
    mcp.run()


if __name__ == "__main__":
    main()
