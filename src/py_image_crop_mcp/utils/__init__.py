"""工具模块包。

提供纯工具函数，不包含业务逻辑。
"""

from .file_helpers import find_image_files, read_source_bytes
from .logging_helpers import get_logger, setup_logging
from .message_formatter import MessageFormatter
from .naming_helpers import FileNamingStrategy, PathResolver


__all__ = [
    "FileNamingStrategy",
    "MessageFormatter",
    "PathResolver",
    "find_image_files",
    "get_logger",
    "read_source_bytes",
    "setup_logging",
]
