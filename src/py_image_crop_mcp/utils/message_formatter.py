"""消息格式化工具模块。

提供统一的错误消息、成功消息格式化功能。
"""

from pathlib import Path


class MessageFormatter:
    """统一的消息格式化器"""

    @staticmethod
    def file_not_found(file_path: str | Path) -> str:
        """文件不存在错误消息"""
        return f"文件不存在: {file_path}"

    @staticmethod
    def directory_not_found(directory: str | Path) -> str:
        """目录不存在错误消息"""
        return f"目录不存在: {directory}"

    @staticmethod
    def path_not_directory(path: str | Path) -> str:
        """路径不是目录错误消息"""
        return f"路径不是目录: {path}"

    @staticmethod
    def permission_error(path: str | Path, operation: str = "访问") -> str:
        """权限错误消息"""
        return f"权限错误，无法{operation}: {path}"

    @staticmethod
    def operation_failed(
        operation: str, target: str | Path, error: Exception | None = None
    ) -> str:
        """操作失败消息"""
        msg = f"{operation}失败: {target}"
        if error:
            msg += f" - {error}"
        return msg

    @staticmethod
    def format_error(operation: str, path: str | Path, error: Exception) -> str:
        """格式化通用错误消息"""
        return f"{operation}失败 [{path}]: {error}"

    @staticmethod
    def probe(
        phase: str, attempt: int, scale: float, quality: float, size: int, limit: int
    ) -> str:
        """搜索探测日志"""
        verdict = "≤" if size <= limit else ">"
        return (
            f"{phase} 第{attempt}次: scale={scale:.3f} quality={quality:.3f} "
            f"size={size} {verdict} {limit}"
        )

    @staticmethod
    def batch_transition(index: int, name: str, state: str) -> str:
        """批量状态变更日志"""
        return f"批量任务 #{index} [{name}] -> {state}"
