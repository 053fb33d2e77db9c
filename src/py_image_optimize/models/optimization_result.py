"""优化结果模型。

定义单个文件的优化结果、批次结果以及对外响应结构。
"""

from pathlib import Path

from humanize import naturalsize
from pydantic import BaseModel, ConfigDict, Field

from .upload import UploadedFile


class BaseResult(BaseModel):
    """结果基类，包含通用字段和方法"""

    success: bool = Field(description="是否成功")
    error: str | None = Field(None, description="错误信息")

    @staticmethod
    def format_size(size_bytes: int) -> str:
        """格式化文件大小为人类可读格式"""
        return naturalsize(size_bytes, binary=True)


class OptimizationResult(BaseModel):
    """单个文件的优化结果，创建后不可修改"""

    model_config = ConfigDict(frozen=True)

    stored_name: str = Field(description="来源上传文件的暂存文件名")
    original_name: str = Field(description="来源上传文件的原始文件名")
    output_path: Path = Field(description="优化后文件路径")
    size_before: int = Field(ge=0, description="优化前大小（字节）")
    size_after: int = Field(ge=0, description="优化后大小（字节）")
    format_used: str = Field(description="使用的格式")

    @property
    def optimized_name(self) -> str:
        return self.output_path.name

    def get_size_saved(self) -> int:
        """节省的字节数"""
        return max(0, self.size_before - self.size_after)

    def get_compression_ratio(self) -> float:
        """压缩比例（百分比）"""
        if self.size_before == 0:
            return 0.0
        return (self.get_size_saved() / self.size_before) * 100

    def get_summary(self) -> str:
        """压缩结果摘要"""
        return (
            f"{naturalsize(self.size_before, binary=True)} → "
            f"{naturalsize(self.size_after, binary=True)} "
            f"({self.get_compression_ratio():.1f}% 压缩)"
        )


class FileOutcome(BaseResult):
    """单个文件的处理结果，成功时携带 OptimizationResult"""

    uploaded: UploadedFile = Field(description="来源上传文件")
    result: OptimizationResult | None = Field(None, description="优化结果")


class BatchOutcome(BaseResult):
    """批量优化结果，顺序与提交顺序一致"""

    outcomes: list[FileOutcome] = Field(description="各文件的处理结果")

    def get_results(self) -> list[OptimizationResult]:
        """成功的优化结果"""
        return [o.result for o in self.outcomes if o.success and o.result is not None]

    def get_failures(self) -> list[FileOutcome]:
        """失败的文件"""
        return [o for o in self.outcomes if not o.success]

    def get_total_count(self) -> int:
        return len(self.outcomes)

    def get_success_count(self) -> int:
        return len(self.get_results())

    def get_failure_count(self) -> int:
        return len(self.get_failures())

    def get_total_size_saved(self) -> int:
        """总节省大小"""
        return sum(r.get_size_saved() for r in self.get_results())

    def get_summary(self) -> str:
        """批量处理摘要"""
        total = self.get_total_count()
        successful = self.get_success_count()
        size_saved = self.format_size(self.get_total_size_saved())
        return f"处理 {successful}/{total} 个文件，总节省 {size_saved}"


class Archive(BaseModel):
    """打包后的归档文件"""

    model_config = ConfigDict(frozen=True)

    archive_id: str = Field(description="16 位十六进制随机标识")
    filename: str = Field(description="归档文件名")
    path: Path = Field(description="归档文件路径")
    members: list[str] = Field(description="归档中的条目名")


# ============================================================================
# 对外响应结构 - 字段名与前端约定一致（camelCase）
# ============================================================================


class _ResponseModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class OptimizedFileInfo(_ResponseModel):
    """单个文件的响应信息"""

    original_name: str = Field(alias="originalName")
    optimized_name: str = Field(alias="optimizedName")
    download_url: str = Field(alias="downloadUrl")
    upload_url: str = Field(alias="uploadUrl")
    size_before: int = Field(alias="sizeBefore")
    size_after: int = Field(alias="sizeAfter")


class FailedFileInfo(_ResponseModel):
    """处理失败的文件（仅在不中止整个批次时返回）"""

    original_name: str = Field(alias="originalName")
    error: str


class ZipInfo(_ResponseModel):
    """归档下载信息"""

    url: str


class OptimizeResponse(_ResponseModel):
    """上传接口响应"""

    files: list[OptimizedFileInfo] = Field(default_factory=list)
    zip: ZipInfo | None = None
    failed: list[FailedFileInfo] = Field(default_factory=list)
