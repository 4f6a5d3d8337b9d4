"""裁剪几何测试。"""

import math

import pytest

from py_image_crop_mcp.core.geometry import (
    center_crop,
    is_identity_rotation,
    rotated_bounding_box,
)
from py_image_crop_mcp.models.geometry import CropRect


class TestCenterCrop:
    """居中裁剪测试"""

    def test_exact_aspect_is_full_frame(self):
        crop = center_crop(3000, 2000, 1.5)
        assert (crop.x, crop.y, crop.width, crop.height) == (0, 0, 3000, 2000)

    def test_wider_source_is_centered_horizontally(self):
        crop = center_crop(4000, 2000, 1.5)
        assert (crop.x, crop.y, crop.width, crop.height) == (500, 0, 3000, 2000)

    def test_taller_source_is_centered_vertically(self):
        crop = center_crop(1000, 2000, 1.5)
        assert crop.x == 0
        assert crop.width == 1000
        assert crop.height == pytest.approx(1000 / 1.5)
        assert crop.y == pytest.approx((2000 - 1000 / 1.5) / 2)

    @pytest.mark.parametrize(
        ("width", "height"),
        [(1, 1), (7, 3), (640, 480), (1920, 1080), (1080, 1920), (4999, 17), (3, 3001)],
    )
    @pytest.mark.parametrize("aspect", [0.25, 2 / 3, 1.0, 1.5, 16 / 9, 7.3])
    def test_crop_stays_inside_source(self, width, height, aspect):
        crop = center_crop(width, height, aspect)

        assert crop.x >= 0
        assert crop.y >= 0
        assert crop.x + crop.width <= width + 1e-9
        assert crop.y + crop.height <= height + 1e-9
        assert crop.aspect_ratio == pytest.approx(aspect, rel=1e-9)
        # 至少一条边占满
        assert crop.width == pytest.approx(width) or crop.height == pytest.approx(height)

    @pytest.mark.parametrize(
        ("width", "height", "aspect"), [(0, 10, 1.5), (10, -1, 1.5), (10, 10, 0)]
    )
    def test_rejects_non_positive_input(self, width, height, aspect):
        with pytest.raises(ValueError):
            center_crop(width, height, aspect)


class TestRotatedBoundingBox:
    """旋转外接框测试"""

    def test_zero_rotation_keeps_size(self):
        box = rotated_bounding_box(300, 200, 0)
        assert (box.width, box.height) == (300, 200)

    def test_quarter_turn_swaps_dimensions(self):
        box = rotated_bounding_box(300, 200, math.pi / 2)
        assert box.width == pytest.approx(200)
        assert box.height == pytest.approx(300)
        assert box.canvas_size() == (200, 300)

    def test_diagonal_of_square(self):
        box = rotated_bounding_box(100, 100, math.pi / 4)
        assert box.width == pytest.approx(100 * math.sqrt(2))
        assert box.height == pytest.approx(100 * math.sqrt(2))

    def test_identity_rotation_detection(self):
        assert is_identity_rotation(0.0)
        assert is_identity_rotation(math.tau)
        assert not is_identity_rotation(math.pi)


class TestCropRect:
    """裁剪矩形模型测试"""

    def test_pixel_box_truncates(self):
        crop = CropRect(x=10.7, y=3.2, width=100.9, height=50.5)
        assert crop.pixel_box() == (10, 3, 110, 53)

    def test_scaled_size_has_minimum_of_one(self):
        crop = CropRect(x=0, y=0, width=300, height=200)
        assert crop.scaled_size(0.5) == (150, 100)
        assert crop.scaled_size(0.001) == (1, 1)

    def test_fits_within(self):
        crop = CropRect(x=500, y=0, width=3000, height=2000)
        assert crop.fits_within(4000, 2000)
        assert not crop.fits_within(3400, 2000)

    def test_rejects_invalid_rect(self):
        with pytest.raises(ValueError):
            CropRect(x=-1, y=0, width=10, height=10)
        with pytest.raises(ValueError):
            CropRect(x=0, y=0, width=0, height=10)
