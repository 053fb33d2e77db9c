"""压缩参数模型。

编解码器只接受一个封闭的配置：quality。
JPEG 使用整数质量（1-100），PNG 使用质量区间（0-1 的浮点数对）。
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


QualityRange = tuple[float, float]


class CodecOptions(BaseModel):
    """编解码器参数"""

    model_config = ConfigDict(extra="forbid", frozen=True)

    quality: int | QualityRange = Field(description="质量值或质量区间")

    @field_validator("quality")
    @classmethod
    def validate_quality(cls, v: int | QualityRange) -> int | QualityRange:
        if isinstance(v, int):
            if not (1 <= v <= 100):
                raise ValueError(f"质量值必须在 1-100 之间，当前值: {v}")
            return v

        low, high = v
        if not (0.0 <= low <= high <= 1.0):
            raise ValueError(f"质量区间必须满足 0 <= min <= max <= 1，当前值: {v}")
        return (float(low), float(high))

    @property
    def is_range(self) -> bool:
        """是否为质量区间"""
        return isinstance(self.quality, tuple)

    def as_range(self) -> QualityRange:
        """以区间形式返回质量，整数质量映射为 [q/100, q/100]"""
        if self.is_range:
            return self.quality
        value = self.quality / 100
        return (value, value)

    def as_int(self) -> int:
        """以整数形式返回质量，区间取上限"""
        if self.is_range:
            return max(1, round(self.quality[1] * 100))
        return self.quality
