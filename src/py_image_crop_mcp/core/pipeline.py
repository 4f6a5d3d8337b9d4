"""裁剪编码流水线。

原始字节 → 解码 → 居中裁剪 → 合成 → 编码，按输出目标选择手动或体积约束模式。
"""

import asyncio

from PIL import Image

from ..config import SearchDefaults, get_config
from ..exceptions import ValidationError
from ..models.artifact import EncodedArtifact
from ..models.geometry import CropRect
from ..models.target import BudgetTarget, ManualTarget, TargetSpec
from ..utils.logging_helpers import get_logger
from .codec import Encoder, decode_image
from .geometry import center_crop, rotated_bounding_box
from .size_search import encode_manual, raise_if_cancelled, search_for_budget


logger = get_logger()


async def render_target(
    raster: Image.Image,
    crop: CropRect,
    target: TargetSpec,
    rotation: float = 0.0,
    watermark: bool = False,
    encoder: Encoder | None = None,
    cancel_event: asyncio.Event | None = None,
    settings: SearchDefaults | None = None,
) -> EncodedArtifact:
    """按输出目标编码已解码的图像"""
    match target:
        case ManualTarget(quality=quality):
            return await encode_manual(
                raster, crop, rotation, quality, watermark, encoder, cancel_event
            )
        case BudgetTarget(max_bytes=max_bytes):
            return await search_for_budget(
                raster,
                crop,
                rotation,
                max_bytes,
                watermark,
                encoder,
                cancel_event,
                settings,
            )
        case _:
            raise ValidationError(f"未知的输出目标: {target!r}")


def resolve_crop(
    raster: Image.Image,
    rotation: float,
    aspect: float,
    crop: CropRect | None = None,
) -> CropRect:
    """确定裁剪矩形：未指定时在旋转后画布上居中裁剪，指定时检查边界"""
    canvas_width, canvas_height = rotated_bounding_box(
        raster.width, raster.height, rotation
    ).canvas_size()

    if crop is None:
        return center_crop(canvas_width, canvas_height, aspect)

    if not crop.fits_within(canvas_width, canvas_height):
        raise ValidationError(
            f"裁剪区域超出图像范围: {crop} 不在 {canvas_width}x{canvas_height} 内"
        )
    return crop


async def process_image_bytes(
    data: bytes,
    target: TargetSpec,
    watermark: bool = False,
    aspect: float | None = None,
    rotation: float = 0.0,
    crop: CropRect | None = None,
    encoder: Encoder | None = None,
    cancel_event: asyncio.Event | None = None,
) -> EncodedArtifact:
    """完整处理一张图像

    解码或编码失败会直接抛出 ``DecodeError`` / ``EncodeFailure``。
    """
    raise_if_cancelled(cancel_event, "解码")
    raster = await asyncio.to_thread(decode_image, data)

    crop = resolve_crop(
        raster,
        rotation,
        aspect if aspect is not None else get_config().crop.TARGET_ASPECT,
        crop,
    )
    logger.debug(
        f"裁剪区域: x={crop.x:.1f} y={crop.y:.1f} "
        f"{crop.width:.1f}x{crop.height:.1f} (源图 {raster.width}x{raster.height})"
    )

    return await render_target(
        raster, crop, target, rotation, watermark, encoder, cancel_event
    )
