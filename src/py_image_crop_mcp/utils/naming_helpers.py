"""文件命名工具模块。

提供统一的输出文件命名策略和路径生成功能。
"""

import itertools
from pathlib import Path

from ..models.constants import get_extension


class FileNamingStrategy:
    """文件命名策略类"""

    @staticmethod
    def generate_output_name(
        input_name: str,
        prefix: str = "optimized_",
        target_format: str = "WEBP",
    ) -> str:
        """生成输出文件名

        取第一个点之前的部分作为主干，例如 ``a.b.jpg`` -> ``optimized_a.webp``。

        Args:
            input_name: 输入文件名
            prefix: 文件名前缀
            target_format: 目标格式

        Returns:
            str: 生成的文件名（不含路径）
        """
        stem = Path(input_name).name.split(".")[0] or "image"
        return f"{prefix}{stem}{get_extension(target_format)}"


class PathResolver:
    """路径解析器"""

    @staticmethod
    def resolve_output_path(
        input_name: str,
        output_path: Path | None = None,
        output_dir: Path | None = None,
        prefix: str = "optimized_",
        target_format: str = "WEBP",
    ) -> Path:
        """解析输出路径

        Args:
            input_name: 输入文件名或路径
            output_path: 用户指定的输出路径
            output_dir: 输出目录
            prefix: 文件名前缀
            target_format: 目标格式

        Returns:
            Path: 解析后的输出路径
        """
        # 优先使用用户指定的输出路径
        if output_path:
            return output_path

        target_dir = output_dir or Path(input_name).parent
        filename = FileNamingStrategy.generate_output_name(
            input_name, prefix=prefix, target_format=target_format
        )
        return PathResolver.ensure_unique_path(target_dir / filename)

    @staticmethod
    def ensure_unique_path(path: Path) -> Path:
        """确保路径唯一，如果文件已存在则添加数字后缀"""
        if not path.exists():
            return path

        base = path.stem
        suffix = path.suffix
        parent = path.parent

        for counter in itertools.count(1):
            new_path = parent / f"{base}_{counter}{suffix}"
            if not new_path.exists():
                return new_path

        return path  # pragma: no cover
