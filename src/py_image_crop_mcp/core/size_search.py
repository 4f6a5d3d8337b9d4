"""体积约束搜索模块。

在字节预算内寻找尽量高的输出质量：先按几何比例缩小，再对质量做二分查找。
每次探测都是一次完整的合成加编码，在工作线程中执行，探测之间严格串行。
"""

import asyncio
import math

from PIL import Image

from ..config import SearchDefaults, get_config
from ..exceptions import EncodeFailure, OperationCancelledError, ValidationError
from ..models.artifact import EncodedArtifact
from ..models.geometry import CropRect
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter
from .codec import Encoder, default_encoder
from .compositor import compose


logger = get_logger()


def raise_if_cancelled(cancel_event: asyncio.Event | None, stage: str) -> None:
    """在迭代边界检查取消信号"""
    if cancel_event is not None and cancel_event.is_set():
        raise OperationCancelledError(f"{stage}已取消")


async def render_probe(
    raster: Image.Image,
    crop: CropRect,
    rotation: float,
    scale: float,
    quality: float,
    watermark: bool,
    encoder: Encoder,
) -> EncodedArtifact:
    """合成并编码一次，返回新的产物"""

    def _render() -> EncodedArtifact:
        composed = compose(raster, crop, rotation, scale, watermark)
        data = encoder.encode(composed, quality)
        if not data:
            raise EncodeFailure("编码器没有产生任何数据")
        return EncodedArtifact.from_bytes(
            data,
            width=composed.width,
            height=composed.height,
            quality=quality,
            scale=scale,
            format=encoder.format_name,
        )

    return await asyncio.to_thread(_render)


async def encode_manual(
    raster: Image.Image,
    crop: CropRect,
    rotation: float = 0.0,
    quality: float = 0.92,
    watermark: bool = False,
    encoder: Encoder | None = None,
    cancel_event: asyncio.Event | None = None,
) -> EncodedArtifact:
    """手动质量模式：原始比例下编码一次"""
    if not 0 < quality <= 1:
        raise ValidationError(f"质量必须在 (0, 1] 之间，当前值: {quality}")

    raise_if_cancelled(cancel_event, "手动编码")
    artifact = await render_probe(
        raster, crop, rotation, 1.0, quality, watermark, encoder or default_encoder()
    )
    logger.info(
        f"手动编码完成: quality={quality:.2f} {artifact.width}x{artifact.height} "
        f"{artifact.get_size_human()}"
    )
    return artifact


async def search_for_budget(
    raster: Image.Image,
    crop: CropRect,
    rotation: float = 0.0,
    max_bytes: int = 150 * 1024,
    watermark: bool = False,
    encoder: Encoder | None = None,
    cancel_event: asyncio.Event | None = None,
    settings: SearchDefaults | None = None,
) -> EncodedArtifact:
    """在字节预算内搜索输出

    预算是软约束：即使在最低缩放与最低质量下仍超出预算，也会返回该产物，
    调用方需要自行比较 ``size_bytes`` 与预算。

    Args:
        raster: 源图像
        crop: 裁剪矩形
        rotation: 旋转角度（弧度）
        max_bytes: 字节预算
        watermark: 是否叠加水印
        encoder: 编码器，默认 WebP
        cancel_event: 取消信号，在每次编码前检查
        settings: 搜索参数，默认取全局配置

    Returns:
        EncodedArtifact: 预算内质量最高的产物，或最低设置下的兜底产物
    """
    if max_bytes <= 0:
        raise ValidationError(f"字节预算必须大于 0，当前值: {max_bytes}")

    settings = settings or get_config().search
    encoder = encoder or default_encoder()

    scale = await _reduce_scale(
        raster, crop, rotation, max_bytes, watermark, encoder, cancel_event, settings
    )
    return await _search_quality(
        raster,
        crop,
        rotation,
        scale,
        max_bytes,
        watermark,
        encoder,
        cancel_event,
        settings,
    )


async def _reduce_scale(
    raster: Image.Image,
    crop: CropRect,
    rotation: float,
    max_bytes: int,
    watermark: bool,
    encoder: Encoder,
    cancel_event: asyncio.Event | None,
    settings: SearchDefaults,
) -> float:
    """阶段一：固定探测质量，按体积比的平方根缩小尺寸"""
    scale = 1.0

    for attempt in range(1, settings.MAX_SCALE_ATTEMPTS + 1):
        raise_if_cancelled(cancel_event, "缩放搜索")

        probe = await render_probe(
            raster, crop, rotation, scale, settings.PROBE_QUALITY, watermark, encoder
        )
        size = probe.size_bytes
        probe.release()
        logger.debug(
            MessageFormatter.probe(
                "缩放", attempt, scale, settings.PROBE_QUALITY, size, max_bytes
            )
        )

        if size <= max_bytes:
            return scale

        # 固定质量下体积约与像素数成正比，即与 scale² 成正比
        ratio = math.sqrt(max_bytes / size)
        scale = max(settings.MIN_SCALE, scale * ratio * settings.SCALE_DAMPING)

    logger.info(
        f"缩放搜索 {settings.MAX_SCALE_ATTEMPTS} 次未达预算，以 scale={scale:.3f} 继续"
    )
    return scale


async def _search_quality(
    raster: Image.Image,
    crop: CropRect,
    rotation: float,
    scale: float,
    max_bytes: int,
    watermark: bool,
    encoder: Encoder,
    cancel_event: asyncio.Event | None,
    settings: SearchDefaults,
) -> EncodedArtifact:
    """阶段二：固定缩放，对质量做二分查找

    ``QUALITY_STEPS`` 个中点全部未命中预算时，再按质量下限编码一次作为兜底，
    因此最坏情况下总编码次数为 ``MAX_SCALE_ATTEMPTS + QUALITY_STEPS + 1``。
    """
    low, high = settings.QUALITY_FLOOR, settings.QUALITY_CEILING
    best: EncodedArtifact | None = None

    try:
        for step in range(1, settings.QUALITY_STEPS + 1):
            raise_if_cancelled(cancel_event, "质量搜索")

            quality = (low + high) / 2
            probe = await render_probe(
                raster, crop, rotation, scale, quality, watermark, encoder
            )
            logger.debug(
                MessageFormatter.probe(
                    "质量", step, scale, quality, probe.size_bytes, max_bytes
                )
            )

            if probe.size_bytes <= max_bytes:
                if best is not None:
                    best.release()
                best = probe
                low = quality
            else:
                probe.release()
                high = quality
    except BaseException:
        if best is not None:
            best.release()
        raise

    if best is None:
        raise_if_cancelled(cancel_event, "质量搜索")
        fallback = await render_probe(
            raster,
            crop,
            rotation,
            scale,
            settings.QUALITY_FLOOR,
            watermark,
            encoder,
        )
        if fallback.size_bytes > max_bytes:
            logger.warning(
                f"最低设置下仍超出预算: {fallback.get_size_human()} > {max_bytes} 字节 "
                f"(scale={scale:.3f}, quality={settings.QUALITY_FLOOR:.2f})"
            )
        return fallback

    logger.info(
        f"体积搜索完成: scale={best.scale:.3f} quality={best.quality:.3f} "
        f"{best.width}x{best.height} {best.get_size_human()} ≤ {max_bytes} 字节"
    )
    return best
