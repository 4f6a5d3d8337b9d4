"""编解码测试。"""

from io import BytesIO

import pytest
from PIL import Image

from py_image_crop_mcp.core.codec import (
    Encoder,
    WebPEncoder,
    decode_image,
    default_encoder,
)
from py_image_crop_mcp.exceptions import DecodeError, ValidationError
from tests.conftest import FakeEncoder, image_to_bytes


class TestDecodeImage:
    """解码测试"""

    def test_decodes_to_rgba(self, textured_image: Image.Image):
        raster = decode_image(image_to_bytes(textured_image.convert("RGB"), "JPEG"))
        assert raster.mode == "RGBA"
        assert raster.size == (480, 320)

    @pytest.mark.parametrize("data", [b"", b"not an image", b"\x89PNG\r\n\x1a\n broken"])
    def test_invalid_bytes_raise_decode_error(self, data):
        with pytest.raises(DecodeError):
            decode_image(data)

    def test_exif_orientation_is_applied(self):
        img = Image.new("RGB", (60, 40), "orange")
        exif = img.getexif()
        exif[0x0112] = 6  # 顺时针旋转 90°
        buffer = BytesIO()
        img.save(buffer, format="JPEG", exif=exif.tobytes())

        raster = decode_image(buffer.getvalue())
        assert raster.size == (40, 60)


class TestWebPEncoder:
    """WebP 编码测试"""

    def test_produces_webp(self, textured_image: Image.Image):
        data = WebPEncoder().encode(textured_image, 0.8)

        assert data
        with Image.open(BytesIO(data)) as img:
            assert img.format == "WEBP"
            assert img.size == textured_image.size

    def test_lower_quality_is_smaller(self, textured_image: Image.Image):
        encoder = WebPEncoder()
        low = len(encoder.encode(textured_image, 0.1))
        mid = len(encoder.encode(textured_image, 0.5))
        high = len(encoder.encode(textured_image, 0.95))

        assert low < high
        # 相邻质量之间允许少量抖动
        assert low <= mid * 1.05
        assert mid <= high * 1.05

    @pytest.mark.parametrize("quality", [-0.1, 1.5])
    def test_rejects_out_of_range_quality(self, small_image: Image.Image, quality):
        with pytest.raises(ValidationError):
            WebPEncoder().encode(small_image, quality)

    def test_protocol_conformance(self):
        assert isinstance(default_encoder(), Encoder)
        assert isinstance(FakeEncoder(), Encoder)
        assert WebPEncoder(method=0).method == 0
