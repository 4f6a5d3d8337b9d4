"""测试配置文件。

提供测试所需的fixtures和配置。
"""

import tempfile
from io import BytesIO
from pathlib import Path

import numpy as np
import pytest
from PIL import Image


def make_textured_image(width: int = 480, height: int = 320, seed: int = 7) -> Image.Image:
    """渐变加噪声的 RGBA 图像，编码体积随质量变化明显"""
    rng = np.random.default_rng(seed)
    y, x = np.mgrid[0:height, 0:width]
    base = np.stack(
        [x / width * 255, y / height * 255, (x + y) / (width + height) * 255],
        axis=-1,
    )
    noise = rng.normal(0, 25, size=(height, width, 3))
    arr = np.clip(base + noise, 0, 255).astype(np.uint8)
    return Image.fromarray(arr).convert("RGBA")


def image_to_bytes(img: Image.Image, fmt: str = "PNG") -> bytes:
    buffer = BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


class FakeEncoder:
    """确定性的体积模型：size = 像素数 × 质量 × bytes_per_pixel"""

    format_name = "WEBP"

    def __init__(self, bytes_per_pixel: float = 1.0, on_encode=None):
        self.bytes_per_pixel = bytes_per_pixel
        self.on_encode = on_encode
        self.calls: list[tuple[int, int, float]] = []

    def encode(self, raster: Image.Image, quality: float) -> bytes:
        self.calls.append((raster.width, raster.height, quality))
        if self.on_encode is not None:
            self.on_encode(len(self.calls))
        size = max(1, int(raster.width * raster.height * quality * self.bytes_per_pixel))
        return b"\0" * size


@pytest.fixture
def temp_dir():
    """临时目录fixture"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def textured_image() -> Image.Image:
    return make_textured_image()


@pytest.fixture
def small_image() -> Image.Image:
    """300x200 的纯色图像，适合配合 FakeEncoder"""
    return Image.new("RGBA", (300, 200), (120, 140, 160, 255))


@pytest.fixture
def sample_files(temp_dir: Path) -> dict[str, Path]:
    """磁盘上的测试图片：宽图、竖图与损坏文件"""
    files = {
        "wide": temp_dir / "wide.png",
        "tall": temp_dir / "tall.jpg",
        "broken": temp_dir / "broken.png",
    }
    make_textured_image(600, 300, seed=1).save(files["wide"], "PNG")
    make_textured_image(300, 500, seed=2).convert("RGB").save(files["tall"], "JPEG")
    files["broken"].write_bytes(b"not really a png")
    return files
