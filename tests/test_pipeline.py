"""流水线测试。"""

import asyncio
import math

import pytest

from py_image_crop_mcp.core.pipeline import process_image_bytes, render_target, resolve_crop
from py_image_crop_mcp.exceptions import DecodeError, ValidationError
from py_image_crop_mcp.models.geometry import CropRect
from py_image_crop_mcp.models.target import BudgetTarget, ManualTarget
from tests.conftest import FakeEncoder, image_to_bytes, make_textured_image


class TestResolveCrop:
    def test_defaults_to_center_crop(self, textured_image):
        crop = resolve_crop(textured_image, 0.0, 1.0)
        assert (crop.x, crop.y, crop.width, crop.height) == (80, 0, 320, 320)

    def test_uses_rotated_canvas(self, textured_image):
        crop = resolve_crop(textured_image, math.pi / 2, 1.5)
        # 旋转后画布为 320x480
        assert crop.width == pytest.approx(320)
        assert crop.height == pytest.approx(320 / 1.5)

    def test_explicit_crop_must_fit(self, textured_image):
        inside = CropRect(x=10, y=10, width=300, height=200)
        assert resolve_crop(textured_image, 0.0, 1.5, inside) is inside

        with pytest.raises(ValidationError):
            resolve_crop(textured_image, 0.0, 1.5, CropRect(x=300, y=0, width=300, height=200))


class TestProcessImageBytes:
    def test_manual_target_produces_three_by_two(self):
        data = image_to_bytes(make_textured_image(600, 300))
        encoder = FakeEncoder()

        artifact = asyncio.run(
            process_image_bytes(data, ManualTarget(quality=0.9), encoder=encoder)
        )

        assert (artifact.width, artifact.height) == (450, 300)
        assert encoder.calls == [(450, 300, 0.9)]

    def test_budget_target_respects_budget(self):
        data = image_to_bytes(make_textured_image(600, 400))
        encoder = FakeEncoder()

        artifact = asyncio.run(
            process_image_bytes(data, BudgetTarget(max_bytes=50_000), encoder=encoder)
        )

        assert artifact.size_bytes <= 50_000
        assert len(encoder.calls) <= 14

    def test_invalid_bytes_raise_decode_error(self):
        with pytest.raises(DecodeError):
            asyncio.run(process_image_bytes(b"garbage", ManualTarget(quality=0.5)))

    def test_render_target_dispatches_on_mode(self, small_image):
        crop = CropRect(x=0, y=0, width=300, height=200)
        encoder = FakeEncoder()

        asyncio.run(render_target(small_image, crop, ManualTarget(quality=0.5), encoder=encoder))
        assert len(encoder.calls) == 1

        asyncio.run(render_target(small_image, crop, BudgetTarget(max_bytes=40000), encoder=encoder))
        assert len(encoder.calls) == 7
