"""归档打包测试。"""

import re
import zipfile
from pathlib import Path

import pytest

from py_image_optimize.engine.archive import ArchiveBuilder
from py_image_optimize.exceptions import ArchiveIOError


def _write_files(directory: Path, count: int) -> list[Path]:
    paths = []
    for i in range(count):
        path = directory / f"file{i}-opt.png"
        path.write_bytes(bytes(range(256)) * (i + 1))
        paths.append(path)
    return paths


class TestArchiveBuilder:
    """ZIP 归档构建器测试"""

    def test_archive_contains_all_entries(self, optimized_dir: Path):
        """测试归档包含 N 个条目，名称和大小一致"""
        paths = _write_files(optimized_dir, 3)

        archive = ArchiveBuilder(optimized_dir).bundle(paths)

        assert archive.path.parent == optimized_dir
        assert archive.filename == archive.path.name
        with zipfile.ZipFile(archive.path) as zf:
            infos = zf.infolist()
            assert [i.filename for i in infos] == [p.name for p in paths]
            assert [i.file_size for i in infos] == [p.stat().st_size for p in paths]
            assert all(i.compress_type == zipfile.ZIP_DEFLATED for i in infos)
            assert zf.testzip() is None
        assert archive.members == [p.name for p in paths]

    def test_archive_name_format(self, optimized_dir: Path):
        archive = ArchiveBuilder(optimized_dir).bundle(_write_files(optimized_dir, 2))

        assert re.fullmatch(r"[0-9a-f]{16}", archive.archive_id)
        assert archive.filename == f"bundle-{archive.archive_id}.zip"

    def test_archive_ids_are_random(self, optimized_dir: Path):
        paths = _write_files(optimized_dir, 2)
        builder = ArchiveBuilder(optimized_dir)

        first, second = builder.bundle(paths), builder.bundle(paths)

        assert first.archive_id != second.archive_id
        assert first.path.exists() and second.path.exists()

    def test_entries_are_flattened(self, optimized_dir: Path, temp_dir: Path):
        """测试条目名只保留文件名"""
        nested = temp_dir / "nested" / "deeper"
        nested.mkdir(parents=True)
        source = nested / "inner-opt.jpg"
        source.write_bytes(b"jpeg-bytes")

        archive = ArchiveBuilder(optimized_dir).bundle([source])

        with zipfile.ZipFile(archive.path) as zf:
            assert zf.namelist() == ["inner-opt.jpg"]

    def test_duplicate_basenames_get_suffix(self, optimized_dir: Path, temp_dir: Path):
        other = temp_dir / "other"
        other.mkdir()
        first = optimized_dir / "same-opt.png"
        second = other / "same-opt.png"
        first.write_bytes(b"one")
        second.write_bytes(b"two")

        archive = ArchiveBuilder(optimized_dir).bundle([first, second])

        assert archive.members == ["same-opt.png", "same-opt_1.png"]
        with zipfile.ZipFile(archive.path) as zf:
            assert zf.read("same-opt_1.png") == b"two"

    def test_missing_input_leaves_no_archive(self, optimized_dir: Path):
        """测试输入缺失时抛出 ArchiveIOError，且不留下任何归档或临时文件"""
        paths = _write_files(optimized_dir, 2) + [optimized_dir / "missing-opt.png"]

        with pytest.raises(ArchiveIOError):
            ArchiveBuilder(optimized_dir).bundle(paths)

        leftovers = [p.name for p in optimized_dir.iterdir() if p not in paths]
        assert leftovers == []

    def test_missing_output_dir(self, temp_dir: Path, optimized_dir: Path):
        paths = _write_files(optimized_dir, 1)

        with pytest.raises(ArchiveIOError):
            ArchiveBuilder(temp_dir / "does-not-exist").bundle(paths)
