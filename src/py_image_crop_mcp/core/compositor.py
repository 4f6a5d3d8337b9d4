"""合成器模块。

把旋转、裁剪、缩放和水印依次栅格化为新的 RGBA 图像。
输入图像不会被修改，每一步都产生新的图像对象。
"""

import math
from functools import lru_cache

from PIL import Image, ImageDraw, ImageFilter, ImageFont

from ..config import WatermarkDefaults, get_config
from ..models.geometry import CropRect
from ..utils.logging_helpers import get_logger
from .geometry import is_identity_rotation, rotated_bounding_box


logger = get_logger()

Font = ImageFont.FreeTypeFont | ImageFont.ImageFont


def compose(
    raster: Image.Image,
    crop: CropRect,
    rotation: float = 0.0,
    scale: float = 1.0,
    watermark: bool = False,
    watermark_settings: WatermarkDefaults | None = None,
) -> Image.Image:
    """合成输出图像

    Args:
        raster: 源图像
        crop: 旋转后画布坐标系中的裁剪矩形
        rotation: 旋转角度（弧度，顺时针）
        scale: 相对裁剪区域的缩放比例
        watermark: 是否叠加水印
        watermark_settings: 水印配置，默认取全局配置

    Returns:
        Image.Image: 尺寸为 floor(crop * scale) 的 RGBA 图像
    """
    if scale <= 0:
        raise ValueError(f"缩放比例必须大于 0: {scale}")

    if raster.mode != "RGBA":
        raster = raster.convert("RGBA")

    canvas = rotate_canvas(raster, rotation)
    block = canvas.crop(crop.pixel_box())

    target_size = crop.scaled_size(scale)
    if scale != 1.0 and block.size != target_size:
        block = block.resize(target_size, Image.Resampling.LANCZOS)

    if watermark:
        block = apply_watermark(block, watermark_settings or get_config().watermark)

    return block


def rotate_canvas(raster: Image.Image, rotation: float) -> Image.Image:
    """绕中心旋转整张源图，画布尺寸取旋转外接框"""
    if is_identity_rotation(rotation):
        return raster

    canvas_size = rotated_bounding_box(
        raster.width, raster.height, rotation
    ).canvas_size()

    # Pillow 的正角度为逆时针
    rotated = raster.rotate(
        -math.degrees(rotation), resample=Image.Resampling.BICUBIC, expand=True
    )

    canvas = Image.new("RGBA", canvas_size, (0, 0, 0, 0))
    offset = (
        round((canvas_size[0] - rotated.width) / 2),
        round((canvas_size[1] - rotated.height) / 2),
    )
    canvas.paste(rotated, offset)
    return canvas


def watermark_font_size(output_height: int, settings: WatermarkDefaults) -> int:
    return max(settings.MIN_FONT_SIZE, math.floor(output_height * settings.FONT_RATIO))


@lru_cache(maxsize=32)
def _load_font(font_size: int, candidates: tuple[str, ...]) -> Font:
    for candidate in candidates:
        try:
            return ImageFont.truetype(candidate, font_size)
        except OSError:
            continue

    logger.debug(f"未找到粗体字体 {candidates}，使用 Pillow 默认字体")
    return ImageFont.load_default(size=font_size)


def apply_watermark(image: Image.Image, settings: WatermarkDefaults) -> Image.Image:
    """在左下角叠加半透明白色文字与柔和阴影"""
    font = _load_font(
        watermark_font_size(image.height, settings), settings.FONT_CANDIDATES
    )

    # 文字底边对齐到距底部 MARGIN 处
    measure = ImageDraw.Draw(image)
    _, _, _, text_bottom = measure.textbbox((0, 0), settings.TEXT, font=font)
    origin = (settings.MARGIN, image.height - settings.MARGIN - text_bottom)

    shadow = Image.new("RGBA", image.size, (0, 0, 0, 0))
    ImageDraw.Draw(shadow).text(
        origin, settings.TEXT, font=font, fill=settings.SHADOW_COLOR
    )
    shadow = shadow.filter(ImageFilter.GaussianBlur(settings.SHADOW_BLUR / 2))

    text_layer = Image.new("RGBA", image.size, (0, 0, 0, 0))
    ImageDraw.Draw(text_layer).text(
        origin, settings.TEXT, font=font, fill=settings.FILL
    )

    return Image.alpha_composite(Image.alpha_composite(image, shadow), text_layer)
