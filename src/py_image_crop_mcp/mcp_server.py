"""图像裁剪 MCP 服务器。

对外提供单张裁剪与批量裁剪两个工具。
"""

from pathlib import Path
from typing import Any

from fastmcp import FastMCP

from .cropper import ImageCropper
from .models import BatchResult, CropResult
from .utils.logging_helpers import get_logger, setup_logging
from .utils.message_formatter import MessageFormatter


# MCP 服务器响应类型定义
MCPCropResponse = dict[str, Any]


class MCPResponseBuilder:
    """MCP 服务器响应构建器，专门用于构建符合 MCP 协议的响应格式。"""

    @staticmethod
    def error(
        message: str,
        error_type: str = "general",
        details: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """构建错误结果。

        Args:
            message: 错误消息
            error_type: 错误类型
            details: 额外的错误详情

        Returns:
            dict: 标准化的错误响应
        """
        result = {
            "success": False,
            "error": message,
            "error_type": error_type,
        }

        if details:
            result["details"] = details

        return result

    @staticmethod
    def file_error(message: str, file_path: str | None = None) -> dict[str, Any]:
        """构建文件相关错误结果。"""
        details = {"file_path": file_path} if file_path else None
        return MCPResponseBuilder.error(
            message=message,
            error_type="file",
            details=details,
        )

    @staticmethod
    def processing_error(message: str, operation: str | None = None) -> dict[str, Any]:
        """构建处理错误结果。"""
        details = {"operation": operation} if operation else None
        return MCPResponseBuilder.error(
            message=message,
            error_type="processing",
            details=details,
        )

    @staticmethod
    def crop_result(result: CropResult) -> dict[str, Any]:
        """单张结果转为响应"""
        return {
            "success": result.success,
            "input_path": str(result.input_path),
            "output_path": str(result.output_path) if result.output_path else None,
            "original_size": result.original_size,
            "output_size": result.output_size,
            "width": result.width,
            "height": result.height,
            "quality_used": result.quality_used,
            "scale_used": result.scale_used,
            "max_bytes": result.max_bytes,
            "within_budget": result.within_budget,
            "summary": result.get_summary(),
            "error": result.error,
        }

    @staticmethod
    def batch_result(result: BatchResult) -> dict[str, Any]:
        """批量结果转为响应"""
        return {
            "success": result.success,
            "output_dir": str(result.output_dir) if result.output_dir else None,
            "total_files": result.get_total_count(),
            "successful_files": result.get_success_count(),
            "failed_files": result.get_failure_count(),
            "success_rate": result.get_success_rate(),
            "cancelled": result.cancelled,
            "summary": result.get_summary(),
            "items": [
                {
                    "index": item.index,
                    "name": item.name,
                    "state": item.state.value,
                    "output_path": str(result.output_paths[item.index])
                    if item.index in result.output_paths
                    else None,
                    "size_bytes": item.size_bytes,
                    "error": item.error_message,
                }
                for item in result.items
            ],
            "error": result.error,
        }


logger = get_logger(__name__)

# 创建MCP应用
mcp: FastMCP[Any] = FastMCP("图像裁剪压缩服务")

# 全局裁剪器实例
cropper = ImageCropper()


@mcp.tool()
async def crop_image(
    input_path: str,
    output_path: str | None = None,
    quality: int | None = None,
    max_kb: float | None = None,
    watermark: bool = True,
    rotation_degrees: float = 0.0,
) -> MCPCropResponse:
    """裁剪单张图片为 3:2 并编码为 WebP

    Args:
        input_path: 输入图像路径
        output_path: 输出路径（可选，默认 optimized_<名称>.webp）
        quality: 手动质量 1-100（与 max_kb 互斥，默认 92）
        max_kb: 输出体积上限（KB），如 150 / 100 / 60 / 50 / 30
        watermark: 是否在左下角添加水印
        rotation_degrees: 顺时针旋转角度

    Returns:
        dict: 裁剪结果；预算是尽力而为，请检查 within_budget
    """
    try:
        if not Path(input_path).exists():
            return MCPResponseBuilder.file_error(
                MessageFormatter.file_not_found(input_path), input_path
            )

        result = await cropper.crop_image(
            input_path,
            output_path=output_path,
            quality=quality,
            max_kb=max_kb,
            watermark=watermark,
            rotation_degrees=rotation_degrees,
        )
        return MCPResponseBuilder.crop_result(result)

    except Exception as e:
        logger.error(MessageFormatter.operation_failed("图像裁剪", input_path, e))
        return MCPResponseBuilder.processing_error(str(e), "图像裁剪")


@mcp.tool()
async def crop_batch(
    inputs: list[str] | str,
    output_dir: str | None = None,
    quality: int | None = None,
    max_kb: float | None = None,
    watermark: bool = True,
    recursive: bool = False,
) -> MCPCropResponse:
    """按顺序批量裁剪图片为 3:2，单项失败不影响其余项

    Args:
        inputs: 图像路径列表，或包含图像的目录
        output_dir: 输出目录（可选）
        quality: 手动质量 1-100（与 max_kb 互斥，默认 85）
        max_kb: 每张图片的体积上限（KB）
        watermark: 是否添加水印
        recursive: 目录输入时是否递归子目录

    Returns:
        dict: 每一项的最终状态与输出路径
    """
    try:
        result = await cropper.crop_batch(
            inputs,
            output_dir=output_dir,
            quality=quality,
            max_kb=max_kb,
            watermark=watermark,
            recursive=recursive,
        )
        return MCPResponseBuilder.batch_result(result)

    except Exception as e:
        logger.error(MessageFormatter.operation_failed("批量裁剪", str(inputs), e))
        return MCPResponseBuilder.processing_error(str(e), "批量裁剪")


def main() -> None:
    """启动 MCP 服务器"""
    setup_logging()
    logger.info("启动图像裁剪 MCP 服务器")
    mcp.run()


if __name__ == "__main__":
    main()
