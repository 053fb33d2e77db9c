"""HTTP 服务测试。"""

import dataclasses
import io
import zipfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from py_image_optimize.config import AppConfig
from py_image_optimize.server import create_app


def _upload(client: TestClient, files: list[tuple[str, bytes, str]]):
    return client.post(
        "/upload",
        files=[("images", (name, data, mime)) for name, data, mime in files],
    )


@pytest.fixture
def client(app_config: AppConfig):
    with TestClient(create_app(app_config)) as test_client:
        yield test_client


class TestUploadRoute:
    """POST /upload 测试"""

    def test_single_upload(self, client: TestClient, png_bytes):
        response = _upload(client, [("cat.png", png_bytes, "image/png")])

        assert response.status_code == 200
        body = response.json()
        assert body["zip"] is None
        assert len(body["files"]) == 1
        info = body["files"][0]
        assert info["originalName"] == "cat.png"
        assert info["optimizedName"] == "cat-opt.png"
        assert info["downloadUrl"] == "/download/cat-opt.png"
        assert info["sizeAfter"] <= info["sizeBefore"]

    def test_batch_upload_returns_zip(self, client: TestClient, png_bytes, jpeg_bytes):
        """测试多文件上传返回归档地址，归档可下载"""
        response = _upload(
            client,
            [
                ("a.png", png_bytes, "image/png"),
                ("b.jpeg", jpeg_bytes, "image/jpeg"),
            ],
        )

        assert response.status_code == 200
        body = response.json()
        assert len(body["files"]) == 2
        zip_response = client.get(body["zip"]["url"])
        assert zip_response.status_code == 200
        assert zip_response.headers["content-type"] == "application/zip"
        with zipfile.ZipFile(io.BytesIO(zip_response.content)) as zf:
            assert zf.namelist() == ["a-opt.png", "b-opt.jpeg"]

    def test_download_optimized_and_original(self, client: TestClient, png_bytes):
        body = _upload(client, [("dog.png", png_bytes, "image/png")]).json()
        info = body["files"][0]

        optimized = client.get(info["downloadUrl"])
        original = client.get(info["uploadUrl"])

        assert optimized.status_code == 200
        assert len(optimized.content) == info["sizeAfter"]
        assert "attachment" in optimized.headers["content-disposition"]
        assert original.status_code == 200
        assert original.content == png_bytes

    def test_too_many_files_is_400(
        self, client: TestClient, upload_dir: Path, png_bytes
    ):
        files = [(f"{i}.png", png_bytes, "image/png") for i in range(21)]

        response = _upload(client, files)

        assert response.status_code == 400
        assert "error" in response.json()
        assert list(upload_dir.iterdir()) == []

    def test_unsupported_type_is_400(self, client: TestClient, upload_dir: Path):
        response = _upload(client, [("notes.txt", b"hello", "text/plain")])

        assert response.status_code == 400
        assert list(upload_dir.iterdir()) == []

    def test_oversized_batch_is_400_and_leaves_nothing(
        self, app_config: AppConfig, upload_dir: Path
    ):
        """测试超过总大小限制的批次被拒绝，暂存目录为空"""
        app_config.limits = dataclasses.replace(
            app_config.limits, MAX_TOTAL_SIZE=1000, MAX_FILE_SIZE=1000
        )
        files = [(f"{i}.png", b"x" * 600, "image/png") for i in range(2)]

        with TestClient(create_app(app_config)) as client:
            response = _upload(client, files)

        assert response.status_code == 400
        assert list(upload_dir.iterdir()) == []

    def test_empty_upload_is_400(self, client: TestClient):
        response = client.post("/upload", data={"other": "value"})

        assert response.status_code == 400

    def test_processing_failure_is_500(
        self, client: TestClient, upload_dir: Path, png_bytes
    ):
        """测试压缩失败时返回 500，原始文件被删除"""
        response = _upload(
            client,
            [("ok.png", png_bytes, "image/png"), ("bad.png", b"garbage", "image/png")],
        )

        assert response.status_code == 500
        assert response.json() == {"error": "图片处理失败"}
        assert list(upload_dir.iterdir()) == []


class TestDownloadRoutes:
    """GET /download 与 GET /upload 测试"""

    def test_missing_file_is_404(self, client: TestClient):
        assert client.get("/download/nothing-opt.png").status_code == 404
        assert client.get("/upload/nothing.png").status_code == 404

    @pytest.mark.parametrize(
        "path",
        [
            "/download/..%2F..%2Fetc%2Fpasswd",
            "/upload/..%2F..%2Fetc%2Fpasswd",
            "/download/%2E%2E",
            "/download/.hidden",
            "/download/a%00b.png",
            "/upload/a%00b.png",
        ],
    )
    def test_traversal_is_404(self, client: TestClient, path: str):
        assert client.get(path).status_code == 404


class TestAppWiring:
    """中间件与生命周期测试"""

    def test_security_headers(self, client: TestClient):
        response = client.get("/download/missing.png")

        assert response.headers["x-content-type-options"] == "nosniff"
        assert response.headers["x-frame-options"] == "DENY"
        assert "default-src 'self'" in response.headers["content-security-policy"]

    def test_cors_headers(self, client: TestClient):
        response = client.get(
            "/download/missing.png", headers={"Origin": "http://example.com"}
        )

        assert response.headers["access-control-allow-origin"] == "*"

    def test_lifespan_creates_directories(self, app_config: AppConfig, temp_dir: Path):
        app_config.storage = dataclasses.replace(
            app_config.storage,
            UPLOAD_DIR=temp_dir / "new-uploads",
            OPTIMIZED_DIR=temp_dir / "new-optimized",
        )

        with TestClient(create_app(app_config)):
            assert (temp_dir / "new-uploads").is_dir()
            assert (temp_dir / "new-optimized").is_dir()

    def test_lifespan_runs_janitor_when_enabled(self, app_config: AppConfig):
        app_config.lifecycle = dataclasses.replace(
            app_config.lifecycle, CLEANUP_ENABLED=True
        )
        app = create_app(app_config)

        with TestClient(app):
            assert app.state.janitor is not None
            assert app.state.janitor.is_running

        assert not app.state.janitor.is_running

    def test_static_directory_is_served(self, app_config: AppConfig, temp_dir: Path):
        static_dir = temp_dir / "public"
        static_dir.mkdir()
        (static_dir / "index.html").write_text("<h1>optimizer</h1>", encoding="utf-8")
        app_config.storage = dataclasses.replace(
            app_config.storage, STATIC_DIR=static_dir
        )

        with TestClient(create_app(app_config)) as client:
            response = client.get("/")

        assert response.status_code == 200
        assert "optimizer" in response.text
