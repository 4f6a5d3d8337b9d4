"""编解码模块。

解码原始字节为 RGBA 图像，以及把图像按给定质量编码为有损字节流。
"""

from io import BytesIO
from typing import Protocol, runtime_checkable

from PIL import Image, ImageOps

from ..config import get_config
from ..exceptions import DecodeError, EncodeFailure, ValidationError, handle_image_errors
from ..utils.logging_helpers import get_logger


logger = get_logger()


@runtime_checkable
class Encoder(Protocol):
    """有损编码器能力

    对固定尺寸的图像，质量越低输出越小；对固定质量，输出大小大致与像素数成正比。
    """

    format_name: str

    def encode(self, raster: Image.Image, quality: float) -> bytes:
        """编码图像，失败时抛出 EncodeFailure"""
        ...


class WebPEncoder:
    """基于 Pillow 的 WebP 编码器"""

    format_name = "WEBP"

    def __init__(self, method: int | None = None):
        """初始化编码器

        Args:
            method: WebP 压缩方法 0-6，None 时取全局配置
        """
        self.method = get_config().encoder.WEBP_METHOD if method is None else method

    @handle_image_errors("WebP 编码", EncodeFailure)
    def encode(self, raster: Image.Image, quality: float) -> bytes:
        if not 0 <= quality <= 1:
            raise ValidationError(f"质量必须在 0-1 之间，当前值: {quality}")

        buffer = BytesIO()
        raster.save(
            buffer,
            format=self.format_name,
            quality=round(quality * 100),
            method=self.method,
        )
        data = buffer.getvalue()
        if not data:
            raise EncodeFailure("编码器没有产生任何数据")
        return data


@handle_image_errors("图像解码", DecodeError)
def decode_image(data: bytes) -> Image.Image:
    """把原始字节解码为 RGBA 图像，并按 EXIF 方向摆正"""
    if not data:
        raise DecodeError("输入数据为空")

    with Image.open(BytesIO(data)) as img:
        img.load()
        oriented = ImageOps.exif_transpose(img)
        raster = oriented.convert("RGBA")

    logger.debug(f"解码完成: {raster.width}x{raster.height}")
    return raster


def default_encoder() -> Encoder:
    """按全局配置创建默认编码器"""
    return WebPEncoder()
