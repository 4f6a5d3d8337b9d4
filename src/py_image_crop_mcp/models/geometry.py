"""几何模型。

裁剪矩形与旋转外接框，坐标均为源图像素空间。
"""

import math

from pydantic import BaseModel, ConfigDict, Field


# 浮点比较容差
BOUNDS_EPSILON = 1e-6


class RotatedSize(BaseModel):
    """旋转后轴对齐外接框尺寸"""

    model_config = ConfigDict(frozen=True)

    width: float = Field(ge=0, description="外接框宽度")
    height: float = Field(ge=0, description="外接框高度")

    def canvas_size(self) -> tuple[int, int]:
        """画布整数尺寸（截断，最小为 1）"""
        return max(1, int(self.width)), max(1, int(self.height))


class CropRect(BaseModel):
    """裁剪矩形"""

    model_config = ConfigDict(frozen=True)

    x: float = Field(ge=0, description="左上角 x")
    y: float = Field(ge=0, description="左上角 y")
    width: float = Field(gt=0, description="宽度")
    height: float = Field(gt=0, description="高度")

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    def fits_within(self, source_width: float, source_height: float) -> bool:
        """是否完全落在源图范围内"""
        return (
            self.x + self.width <= source_width + BOUNDS_EPSILON
            and self.y + self.height <= source_height + BOUNDS_EPSILON
        )

    def pixel_box(self) -> tuple[int, int, int, int]:
        """转换为整数像素框 (left, top, right, bottom)

        原点与尺寸都向零截断，尺寸最小为 1。
        """
        left = int(self.x)
        top = int(self.y)
        width = max(1, int(self.width))
        height = max(1, int(self.height))
        return left, top, left + width, top + height

    def scaled_size(self, scale: float) -> tuple[int, int]:
        """按比例缩放后的输出尺寸，每边最小为 1"""
        return (
            max(1, math.floor(self.width * scale)),
            max(1, math.floor(self.height * scale)),
        )
