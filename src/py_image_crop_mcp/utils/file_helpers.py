"""工具函数模块。

提供图像文件查找与读取相关的实用工具函数。
"""

from collections.abc import Iterator
from pathlib import Path

from ..models.constants import ImageFormats
from .logging_helpers import get_logger
from .message_formatter import MessageFormatter


logger = get_logger()


def find_image_files(
    directory: str | Path,
    recursive: bool = False,
    exclude_dirs: list[str] | None = None,
) -> Iterator[Path]:
    """查找目录中的图像文件。

    结果按路径排序，保证批量队列顺序稳定。

    Args:
        directory: 搜索目录
        recursive: 是否递归搜索子目录
        exclude_dirs: 要排除的目录名列表

    Yields:
        Path: 图像文件路径
    """
    directory = Path(directory)
    exclude_dirs = exclude_dirs or []

    if not directory.exists():
        logger.warning(MessageFormatter.directory_not_found(directory))
        return

    if not directory.is_dir():
        logger.warning(MessageFormatter.path_not_directory(directory))
        return

    pattern = "**/*" if recursive else "*"
    supported_extensions = ImageFormats.get_supported_extensions()

    try:
        candidates = sorted(directory.glob(pattern))
    except PermissionError:
        logger.error(MessageFormatter.permission_error(directory, "访问目录"))
        return

    for file_path in candidates:
        if (
            file_path.is_file()
            and file_path.suffix.lower() in supported_extensions
            and not any(exclude_dir in file_path.parts for exclude_dir in exclude_dirs)
        ):
            yield file_path


def read_source_bytes(file_path: Path) -> bytes:
    """读取源文件的原始字节"""
    return Path(file_path).read_bytes()
