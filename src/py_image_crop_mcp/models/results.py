"""处理结果模型。

定义单张裁剪与批量处理的结果数据结构。
"""

from pathlib import Path
from typing import TypedDict

from humanize import naturalsize
from pydantic import BaseModel, Field

from .batch import BatchState, BatchStatusEvent


class BaseResult(BaseModel):
    """结果基类，包含通用字段和方法"""

    success: bool = Field(description="是否成功")
    error: str | None = Field(None, description="错误信息")

    def is_successful(self) -> bool:
        """检查是否成功"""
        return self.success and self.error is None

    @staticmethod
    def format_size(size_bytes: int) -> str:
        """格式化文件大小为人类可读格式"""
        return naturalsize(size_bytes, binary=True)


class CropResult(BaseResult):
    """单张图片裁剪编码结果"""

    input_path: Path = Field(description="输入文件路径")
    output_path: Path | None = Field(None, description="输出文件路径")
    original_size: int = Field(0, description="原始文件大小（字节）")
    output_size: int = Field(0, description="输出大小（字节）")

    width: int | None = Field(None, description="输出宽度")
    height: int | None = Field(None, description="输出高度")
    format_used: str = Field("WEBP", description="输出格式")
    quality_used: float | None = Field(None, description="最终编码质量")
    scale_used: float | None = Field(None, description="最终缩放比例")
    max_bytes: int | None = Field(None, description="字节预算")

    @property
    def within_budget(self) -> bool:
        """是否满足字节预算；手动模式恒为 True"""
        if self.max_bytes is None:
            return True
        return self.success and self.output_size <= self.max_bytes

    def get_size_saved(self) -> int:
        """节省的字节数"""
        return max(0, self.original_size - self.output_size)

    def get_compression_ratio(self) -> float:
        """压缩比例（百分比）"""
        if self.original_size == 0:
            return 0.0
        return (self.get_size_saved() / self.original_size) * 100

    def get_summary(self) -> str:
        """结果摘要"""
        if not self.success:
            return f"失败: {self.error}"

        summary = (
            f"{self.format_size(self.original_size)} → {self.format_size(self.output_size)} "
            f"({self.width}x{self.height}, {self.get_compression_ratio():.1f}% 压缩)"
        )
        if not self.within_budget:
            summary += f"，超出预算 {self.format_size(self.max_bytes or 0)}"
        return summary


class BatchResult(BaseResult):
    """批量处理结果"""

    items: list[BatchStatusEvent] = Field(description="各项最终状态，按队列顺序")
    output_dir: Path | None = Field(None, description="输出目录")
    output_paths: dict[int, Path] = Field(
        default_factory=dict, description="已写出的文件，按队列位置索引"
    )
    cancelled: bool = Field(False, description="是否被取消")

    def get_states(self) -> list[BatchState]:
        return [item.state for item in self.items]

    def get_total_count(self) -> int:
        return len(self.items)

    def get_success_count(self) -> int:
        return sum(1 for item in self.items if item.state == BatchState.DONE)

    def get_failure_count(self) -> int:
        return sum(1 for item in self.items if item.state == BatchState.ERROR)

    def get_success_rate(self) -> float:
        """成功率（百分比）"""
        total = self.get_total_count()
        if total == 0:
            return 0.0
        return (self.get_success_count() / total) * 100

    def get_total_original_size(self) -> int:
        return sum(
            item.original_size or 0
            for item in self.items
            if item.state == BatchState.DONE
        )

    def get_total_output_size(self) -> int:
        return sum(item.size_bytes or 0 for item in self.items)

    def get_summary(self) -> str:
        """批量处理摘要"""
        if not self.success and self.error:
            return f"批量处理失败: {self.error}"

        total = self.get_total_count()
        successful = self.get_success_count()
        summary = (
            f"处理 {successful}/{total} 个文件 "
            f"(成功率 {self.get_success_rate():.1f}%), "
            f"{self.format_size(self.get_total_original_size())} → "
            f"{self.format_size(self.get_total_output_size())}"
        )
        if self.cancelled:
            summary += "，已取消"
        return summary


class ProcessingResult(TypedDict):
    """统一的处理结果类型定义"""

    success: bool
    result: CropResult | BatchResult
    error: str | None
