"""合成器测试。"""

import math

import pytest
from PIL import Image, ImageChops

from py_image_crop_mcp.config import get_config
from py_image_crop_mcp.core.compositor import compose, watermark_font_size
from py_image_crop_mcp.core.geometry import center_crop
from py_image_crop_mcp.models.geometry import CropRect


class TestCompose:
    """合成流程测试"""

    def test_output_dimensions_follow_scale(self, textured_image: Image.Image):
        crop = CropRect(x=0, y=10, width=300, height=200)

        assert compose(textured_image, crop, scale=0.5).size == (150, 100)
        assert compose(textured_image, crop, scale=0.333).size == (99, 66)
        assert compose(textured_image, crop, scale=0.0001).size == (1, 1)

    def test_unit_scale_passes_pixels_through(self, textured_image: Image.Image):
        crop = center_crop(textured_image.width, textured_image.height, 1.0)
        result = compose(textured_image, crop)

        expected = textured_image.crop(crop.pixel_box())
        assert result.size == expected.size
        assert result.tobytes() == expected.tobytes()

    def test_source_is_not_modified(self, textured_image: Image.Image):
        before = textured_image.tobytes()
        crop = center_crop(textured_image.width, textured_image.height, 1.5)

        compose(textured_image, crop, rotation=0.3, scale=0.7, watermark=True)

        assert textured_image.tobytes() == before

    def test_converts_to_rgba(self):
        rgb = Image.new("RGB", (60, 40), "navy")
        result = compose(rgb, CropRect(x=0, y=0, width=60, height=40))
        assert result.mode == "RGBA"

    def test_rejects_non_positive_scale(self, small_image: Image.Image):
        with pytest.raises(ValueError):
            compose(small_image, CropRect(x=0, y=0, width=30, height=20), scale=0)

    def test_quarter_turn_rotates_clockwise(self):
        source = Image.new("RGBA", (300, 200), (0, 0, 255, 255))
        source.paste((255, 0, 0, 255), (0, 0, 20, 20))

        result = compose(
            source, CropRect(x=0, y=0, width=200, height=300), rotation=math.pi / 2
        )

        assert result.size == (200, 300)
        # 左上角顺时针转到右上角
        r, g, b, _ = result.getpixel((190, 10))
        assert r > 200 and b < 60
        r, g, b, _ = result.getpixel((10, 10))
        assert b > 200 and r < 60


class TestWatermark:
    """水印测试"""

    def test_font_size_rule(self):
        settings = get_config().watermark
        assert watermark_font_size(200, settings) == 12
        assert watermark_font_size(1000, settings) == 35
        assert watermark_font_size(2000, settings) == 70

    def test_watermark_is_anchored_bottom_left(self):
        source = Image.new("RGBA", (600, 400), (90, 90, 90, 255))
        crop = CropRect(x=0, y=0, width=600, height=400)

        plain = compose(source, crop)
        marked = compose(source, crop, watermark=True)

        bbox = ImageChops.difference(
            plain.convert("RGB"), marked.convert("RGB")
        ).getbbox()
        assert bbox is not None
        left, top, right, bottom = bbox
        assert left < 30
        assert top > 400 / 2
        assert bottom <= 400
        assert right < 600 * 0.75

    def test_watermark_keeps_size(self, textured_image: Image.Image):
        crop = CropRect(x=0, y=0, width=480, height=320)
        assert compose(textured_image, crop, scale=0.5, watermark=True).size == (240, 160)
