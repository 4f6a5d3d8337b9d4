"""定比例裁剪与体积约束编码图像库。

基于 Pillow 11 的裁剪、水印与字节预算编码解决方案。
"""

__version__ = "0.1.0"
__author__ = "crper"
__description__ = "定比例裁剪与体积约束编码图像库，基于 Pillow 11"

# 核心功能导出
from .cropper import ImageCropper, crop_universal
from .engine.batch import BatchRunner
from .models import BatchResult, CropResult, EncodedArtifact


__all__ = [
    "BatchResult",
    "BatchRunner",
    "CropResult",
    "EncodedArtifact",
    "ImageCropper",
    "crop_universal",
    "get_version",
]


def get_version() -> str:
    """获取版本号。"""
    return __version__
