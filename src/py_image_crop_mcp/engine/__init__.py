"""图像裁剪处理引擎模块。

包含批量处理和输出目标构建等核心处理逻辑。
"""

from .batch import BatchRunner, BatchSource, StatusCallback
from .config import ConfigBuilder


__all__ = [
    "BatchRunner",
    "BatchSource",
    "ConfigBuilder",
    "StatusCallback",
]
