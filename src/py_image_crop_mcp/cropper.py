"""图像裁剪器接口。

基于核心流水线的简洁用户接口：单张或批量裁剪为固定比例，
按手动质量或字节预算编码为 WebP 并写入磁盘。
"""

import asyncio
from pathlib import Path
from typing import Any

from .config import get_config
from .core.codec import Encoder
from .core.pipeline import process_image_bytes
from .engine.batch import BatchRunner, StatusCallback
from .engine.config import ConfigBuilder
from .exceptions import ErrorHandler, ValidationError
from .models import (
    BatchResult,
    BatchState,
    CropResult,
    EncodedArtifact,
    ProcessingResult,
)
from .models.target import BudgetTarget
from .utils.file_helpers import find_image_files, read_source_bytes
from .utils.logging_helpers import get_logger
from .utils.naming_helpers import PathResolver


logger = get_logger()


class ImageCropper:
    """图像裁剪器。

    提供单张与批量的裁剪编码接口，所有方法都是协程，
    在同一事件循环中串行执行编解码。
    """

    def __init__(self, encoder: Encoder | None = None):
        """初始化裁剪器。

        Args:
            encoder: 自定义编码器，None 时使用 WebP
        """
        self.encoder = encoder
        self.config_builder = ConfigBuilder()
        logger.debug("初始化图像裁剪器")

    async def crop_image(
        self,
        input_path: str | Path,
        output_path: str | Path | None = None,
        output_dir: str | Path | None = None,
        quality: int | None = None,
        max_kb: float | None = None,
        max_bytes: int | None = None,
        watermark: bool = True,
        rotation_degrees: float = 0.0,
        aspect: float | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> CropResult:
        """裁剪并编码单张图像。

        Args:
            input_path: 输入文件路径
            output_path: 输出文件路径（可选）
            output_dir: 输出目录（可选）
            quality: 手动质量 1-100，与预算互斥
            max_kb: 字节预算（KB）
            max_bytes: 字节预算（字节）
            watermark: 是否叠加水印
            rotation_degrees: 顺时针旋转角度
            aspect: 裁剪宽高比，默认 3:2
            cancel_event: 取消信号

        Returns:
            CropResult: 处理结果，失败时 success 为 False

        Examples:
            >>> cropper = ImageCropper()
            >>> result = asyncio.run(cropper.crop_image("photo.jpg", max_kb=100))
            >>> print(result.get_summary())
        """
        input_path = Path(input_path)
        settings = get_config().crop
        budget: int | None = None

        try:
            if not input_path.is_file():
                raise FileNotFoundError(2, "输入文件不存在", str(input_path))

            target = self.config_builder.build_target(
                quality=quality,
                max_kb=max_kb,
                max_bytes=max_bytes,
                default_quality=settings.DEFAULT_QUALITY,
                input_path=input_path,
            )
            if isinstance(target, BudgetTarget):
                budget = target.max_bytes

            data = await asyncio.to_thread(read_source_bytes, input_path)
            artifact = await process_image_bytes(
                data,
                target,
                watermark=watermark,
                aspect=self.config_builder.validate_aspect(
                    aspect if aspect is not None else settings.TARGET_ASPECT,
                    input_path,
                ),
                rotation=self.config_builder.validate_rotation(rotation_degrees),
                encoder=self.encoder,
                cancel_event=cancel_event,
            )

            destination = PathResolver.resolve_output_path(
                str(input_path),
                output_path=Path(output_path) if output_path else None,
                output_dir=Path(output_dir) if output_dir else None,
                prefix=settings.OUTPUT_PREFIX,
                target_format=artifact.format,
            )
            result = CropResult(
                input_path=input_path,
                output_path=destination,
                original_size=len(data),
                output_size=artifact.size_bytes,
                width=artifact.width,
                height=artifact.height,
                format_used=artifact.format,
                quality_used=artifact.quality,
                scale_used=artifact.scale,
                max_bytes=budget,
                success=True,
            )
            await asyncio.to_thread(self._persist, artifact, destination)

            if not result.within_budget:
                logger.warning(f"{input_path.name} 未能满足字节预算: {result.get_summary()}")
            return result

        except Exception as e:
            return ErrorHandler.handle_crop_error(e, input_path, "图像裁剪", budget)

    async def crop_batch(
        self,
        inputs: str | Path | list[str | Path],
        output_dir: str | Path | None = None,
        quality: int | None = None,
        max_kb: float | None = None,
        max_bytes: int | None = None,
        watermark: bool = True,
        aspect: float | None = None,
        recursive: bool = False,
        on_status: StatusCallback | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> BatchResult:
        """按顺序批量裁剪。

        Args:
            inputs: 文件路径列表，或包含图像的目录
            output_dir: 输出目录，目录输入时默认为其下的 output/
            quality: 手动质量 1-100，与预算互斥
            max_kb: 字节预算（KB）
            max_bytes: 字节预算（字节）
            watermark: 是否叠加水印
            aspect: 裁剪宽高比，默认 3:2
            recursive: 目录输入时是否递归
            on_status: 每次状态变更后的回调
            cancel_event: 取消信号

        Returns:
            BatchResult: 各项最终状态及写出的文件
        """
        settings = get_config().crop
        out_dir = Path(output_dir) if output_dir else None

        try:
            files = self._collect_inputs(inputs, out_dir, recursive)
            if out_dir is None and isinstance(inputs, str | Path) and Path(inputs).is_dir():
                out_dir = Path(inputs) / "output"

            target = self.config_builder.build_target(
                quality=quality,
                max_kb=max_kb,
                max_bytes=max_bytes,
                default_quality=settings.BATCH_QUALITY,
            )
            runner = BatchRunner(
                files,
                target,
                watermark=watermark,
                aspect=self.config_builder.validate_aspect(
                    aspect if aspect is not None else settings.TARGET_ASPECT
                ),
                encoder=self.encoder,
                on_status=on_status,
            )
            result = await runner.run(cancel_event=cancel_event)

        except ValidationError as e:
            ErrorHandler.log_error("批量裁剪", str(inputs), e, "warning")
            return BatchResult(
                success=False, error=e.message, items=[], output_dir=out_dir
            )

        output_paths: dict[int, Path] = {}
        write_errors: dict[int, str] = {}
        for item in runner.items:
            if item.state != BatchState.DONE or item.artifact is None:
                continue
            destination = PathResolver.resolve_output_path(
                str(item.source) if isinstance(item.source, Path) else item.name,
                output_dir=out_dir,
                prefix=settings.OUTPUT_PREFIX,
                target_format=item.artifact.format,
            )
            try:
                await asyncio.to_thread(self._persist, item.artifact, destination)
            except OSError as e:
                ErrorHandler.log_error("写出结果", destination, e, "warning")
                write_errors[item.index] = f"写出失败: {ErrorHandler.describe(e)}"
                continue
            output_paths[item.index] = destination

        return self._with_outputs(result, out_dir, output_paths, write_errors)

    @staticmethod
    def _with_outputs(
        result: BatchResult,
        output_dir: Path | None,
        output_paths: dict[int, Path],
        write_errors: dict[int, str],
    ) -> BatchResult:
        """附加写出结果；写出失败的项在返回结果中记为 error"""
        items = [
            event.model_copy(
                update={
                    "state": BatchState.ERROR,
                    "artifact": None,
                    "size_bytes": None,
                    "error_message": write_errors[event.index],
                }
            )
            if event.index in write_errors
            else event
            for event in result.items
        ]
        failed = sum(1 for event in items if event.state == BatchState.ERROR)
        success = not items or failed < len(items)

        return result.model_copy(
            update={
                "items": items,
                "success": success,
                "error": None if success else "所有文件处理都失败",
                "output_dir": output_dir,
                "output_paths": output_paths,
            }
        )

    @staticmethod
    def _collect_inputs(
        inputs: str | Path | list[str | Path],
        output_dir: Path | None,
        recursive: bool,
    ) -> list[Path]:
        """把输入展开为有序的文件列表"""
        if isinstance(inputs, str | Path):
            directory = Path(inputs)
            if not directory.is_dir():
                raise ValidationError(f"输入目录不存在: {directory}", directory)
            exclude = ["output"]
            if output_dir is not None:
                exclude.append(output_dir.name)
            return list(find_image_files(directory, recursive, exclude))

        return [Path(p) for p in inputs]

    @staticmethod
    def _persist(artifact: EncodedArtifact, destination: Path) -> None:
        """写出产物并释放其缓冲，写出失败时同样释放"""
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_bytes(artifact.data)
        finally:
            artifact.release()
        logger.debug(f"已写出: {destination}")


def crop_universal(input_path: str | Path, **kwargs: Any) -> ProcessingResult:
    """便捷的通用裁剪函数

    自动识别文件或目录：文件走单张裁剪，目录走批量裁剪。

    Args:
        input_path: 输入路径（文件或文件夹）
        **kwargs: 透传给 ``crop_image`` 或 ``crop_batch`` 的参数

    Returns:
        ProcessingResult: 统一的处理结果格式

    Examples:
        >>> result = crop_universal("photo.jpg", max_kb=100)
        >>> print(f"成功: {result['success']}")

        >>> result = crop_universal("photos/", quality=80, watermark=False)
        >>> print(result["result"].get_summary())
    """
    input_path = Path(input_path)
    cropper = ImageCropper()

    match input_path:
        case path if path.is_file():
            result: CropResult | BatchResult = asyncio.run(
                cropper.crop_image(path, **kwargs)
            )
        case path if path.is_dir():
            result = asyncio.run(cropper.crop_batch(path, **kwargs))
        case _:
            result = ErrorHandler.handle_crop_error(
                FileNotFoundError(2, "输入路径不存在", str(input_path)),
                input_path,
                "路径验证",
            )

    return {"success": result.success, "result": result, "error": result.error}
