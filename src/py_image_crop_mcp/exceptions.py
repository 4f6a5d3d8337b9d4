"""图像裁剪异常处理模块。

定义统一的异常类和错误处理机制，包含现代化的异常处理装饰器。
"""

from collections.abc import Callable
from functools import wraps
from pathlib import Path
from typing import TypeVar

from PIL.Image import DecompressionBombError, UnidentifiedImageError

from .models.results import CropResult
from .utils.logging_helpers import get_logger
from .utils.message_formatter import MessageFormatter


logger = get_logger()
T = TypeVar("T")


# 统一的异常类型
class CropError(Exception):
    """裁剪编码相关错误基类"""

    def __init__(self, message: str, input_path: Path | None = None):
        super().__init__(message)
        self.message = message
        self.input_path = input_path


class ValidationError(CropError):
    """参数验证错误 - 统一的验证错误类型"""

    pass


class DecodeError(CropError):
    """输入字节不是有效图像"""

    pass


class EncodeFailure(CropError):
    """编码器未能产出数据"""

    pass


class ProcessingError(CropError):
    """处理过程错误"""

    pass


class OperationCancelledError(CropError):
    """操作在迭代边界被取消"""

    pass


def handle_image_errors(
    operation_name: str = "图像处理",
    error_type: type[CropError] = ProcessingError,
):
    """统一的图像处理异常处理装饰器

    项目自身的异常原样抛出，Pillow 与系统异常转换为 ``error_type``。

    Args:
        operation_name: 操作名称，用于日志记录
        error_type: 转换后的异常类型
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except CropError:
                raise
            except UnidentifiedImageError as e:
                logger.debug(f"{operation_name} - 无法识别图像格式: {e}")
                raise error_type(f"无法识别的图像数据: {e}") from e
            except DecompressionBombError as e:
                logger.debug(f"{operation_name} - 图像过大: {e}")
                raise error_type(f"图像过大，可能存在安全风险: {e}") from e
            except OSError as e:
                logger.debug(f"{operation_name} - 读写失败: {e}")
                raise error_type(f"{operation_name}失败: {e}") from e
            except (ValueError, TypeError) as e:
                logger.debug(f"{operation_name} - 参数错误: {e}")
                raise error_type(f"{operation_name}参数错误: {e}") from e

        return wrapper

    return decorator


class ErrorHandler:
    """统一错误处理器

    提供标准化的错误处理和日志记录功能。
    """

    @staticmethod
    def log_error(
        operation: str, path: Path | str, error: Exception, level: str = "error"
    ) -> None:
        """标准化的错误日志记录"""
        log_msg = MessageFormatter.format_error(operation, path, error)
        getattr(logger, level, logger.error)(log_msg)

    @staticmethod
    def describe(error: Exception) -> str:
        """生成面向用户的错误描述"""
        match error:
            case DecodeError():
                return f"解码失败: {error}"
            case EncodeFailure():
                return f"编码失败: {error}"
            case ValidationError():
                return f"参数验证失败: {error}"
            case FileNotFoundError():
                return f"文件不存在: {error.filename or error}"
            case PermissionError():
                return f"权限错误: {error}"
            case _:
                return f"处理失败: {error}"

    @staticmethod
    def _create_error_result(
        input_path: Path,
        error_msg: str,
        original_size: int | None = None,
        max_bytes: int | None = None,
    ) -> CropResult:
        """创建标准化的错误结果"""
        if original_size is None:
            try:
                original_size = input_path.stat().st_size if input_path.exists() else 0
            except OSError:
                original_size = 0

        return CropResult(
            input_path=input_path,
            output_path=None,
            original_size=original_size,
            output_size=0,
            success=False,
            error=error_msg,
            max_bytes=max_bytes,
        )

    @staticmethod
    def handle_crop_error(
        error: Exception,
        input_path: Path,
        operation: str = "图像裁剪",
        max_bytes: int | None = None,
    ) -> CropResult:
        """统一的裁剪错误处理，按异常类型决定日志级别"""
        match error:
            case ValidationError() | DecodeError() | FileNotFoundError():
                level = "warning"
            case OperationCancelledError():
                level = "info"
            case _:
                level = "error"

        ErrorHandler.log_error(operation, input_path, error, level)
        return ErrorHandler._create_error_result(
            input_path=input_path,
            error_msg=f"{operation}: {ErrorHandler.describe(error)}",
            max_bytes=max_bytes,
        )
