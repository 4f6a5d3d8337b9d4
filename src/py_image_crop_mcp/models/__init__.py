"""数据模型包。

定义裁剪与编码相关的数据结构和模型。
"""

from .artifact import EncodedArtifact
from .batch import ALLOWED_TRANSITIONS, BatchItem, BatchState, BatchStatusEvent
from .constants import (
    BYTES_PER_KB,
    ImageFormats,
    get_extension,
    get_format_alias,
    get_mime_type,
    kb_to_bytes,
)
from .geometry import CropRect, RotatedSize
from .results import BatchResult, CropResult, ProcessingResult
from .target import BudgetTarget, ManualTarget, TargetSpec


__all__ = [
    "ALLOWED_TRANSITIONS",
    "BYTES_PER_KB",
    "BatchItem",
    "BatchResult",
    "BatchState",
    "BatchStatusEvent",
    "BudgetTarget",
    "CropRect",
    "CropResult",
    "EncodedArtifact",
    "ImageFormats",
    "ManualTarget",
    "ProcessingResult",
    "RotatedSize",
    "TargetSpec",
    "get_extension",
    "get_format_alias",
    "get_mime_type",
    "kb_to_bytes",
]
