"""上传文件模型。

定义入口校验通过后暂存在 incoming 目录中的文件及批次。
"""

from pathlib import Path

from humanize import naturalsize
from pydantic import BaseModel, Field


class UploadedFile(BaseModel):
    """已暂存的上传文件"""

    original_name: str = Field(description="客户端提供的原始文件名")
    stored_name: str = Field(description="暂存时分配的唯一文件名")
    path: Path = Field(description="暂存文件路径")
    size: int = Field(ge=0, description="文件大小（字节）")
    media_type: str = Field(description="声明的媒体类型")

    @property
    def extension(self) -> str:
        """小写扩展名"""
        return self.path.suffix.lower()


class Batch(BaseModel):
    """一次上传的文件批次，保持提交顺序"""

    files: list[UploadedFile] = Field(default_factory=list, description="批次文件")

    def __len__(self) -> int:
        return len(self.files)

    @property
    def total_size(self) -> int:
        """批次总大小"""
        return sum(f.size for f in self.files)

    @property
    def paths(self) -> list[Path]:
        """所有暂存文件路径"""
        return [f.path for f in self.files]

    def get_summary(self) -> str:
        """批次摘要"""
        return f"{len(self.files)} 个文件，共 {naturalsize(self.total_size, binary=True)}"
