"""MCP 服务器测试。"""

import asyncio
import os
from pathlib import Path

import pytest

from py_image_optimize import mcp_server
from py_image_optimize.config import AppConfig
from py_image_optimize.pipeline import OptimizationPipeline


@pytest.fixture
def pipeline(app_config: AppConfig):
    pipeline = OptimizationPipeline(app_config)
    mcp_server.set_pipeline(pipeline)
    yield pipeline
    mcp_server.set_pipeline(None)


class TestMCPServer:
    """MCP服务器功能测试"""

    def test_mcp_server_imports(self):
        """测试MCP服务器模块导入"""
        assert mcp_server.mcp is not None

    def test_mcp_core_tools(self):
        """测试 MCP 工具名称"""
        assert mcp_server.optimize_images.name == "optimize_images"
        assert mcp_server.sweep_expired.name == "sweep_expired"

    def test_optimize_images(self, pipeline, temp_dir: Path, png_bytes, jpeg_bytes):
        """测试本地文件经过同一流水线优化"""
        first = temp_dir / "first.png"
        second = temp_dir / "second.jpg"
        first.write_bytes(png_bytes)
        second.write_bytes(jpeg_bytes)

        result = asyncio.run(
            mcp_server.optimize_images.fn([str(first), str(second)])
        )

        assert result["success"]
        assert [f["optimizedName"] for f in result["files"]] == [
            "first-opt.png",
            "second-opt.jpg",
        ]
        assert all(Path(f["outputPath"]).is_file() for f in result["files"])
        assert Path(result["zip"]["path"]).is_file()
        # 原始文件不受影响
        assert first.read_bytes() == png_bytes

    def test_optimize_images_missing_file(self, pipeline, temp_dir: Path):
        result = asyncio.run(
            mcp_server.optimize_images.fn([str(temp_dir / "missing.png")])
        )

        assert not result["success"]
        assert result["error_type"] == "file"

    def test_optimize_images_validation_error(self, pipeline, temp_dir: Path):
        path = temp_dir / "doc.txt"
        path.write_text("hello")

        result = asyncio.run(mcp_server.optimize_images.fn([str(path)]))

        assert not result["success"]
        assert result["error_type"] == "validation"

    def test_sweep_expired(self, pipeline, upload_dir: Path):
        old = upload_dir / "old.png"
        old.write_bytes(b"x")
        os.utime(old, (0, 0))

        result = mcp_server.sweep_expired.fn()

        assert result["success"]
        assert result["total_removed"] == 1
        assert result["removed"][str(upload_dir)] == ["old.png"]
