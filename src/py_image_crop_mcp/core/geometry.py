"""裁剪几何模块。

居中裁剪矩形与旋转外接框的纯函数计算。
"""

import math

from ..models.geometry import CropRect, RotatedSize


def center_crop(
    source_width: float, source_height: float, target_aspect: float
) -> CropRect:
    """计算指定宽高比下面积最大的居中裁剪矩形

    源图比目标更宽时占满高度、水平居中，否则占满宽度、垂直居中。

    Args:
        source_width: 源图宽度
        source_height: 源图高度
        target_aspect: 目标宽高比 (width / height)

    Returns:
        CropRect: 完全位于源图内的裁剪矩形

    Raises:
        ValueError: 任一参数不为正数
    """
    if source_width <= 0 or source_height <= 0:
        raise ValueError(f"源图尺寸必须为正数: {source_width}x{source_height}")
    if target_aspect <= 0:
        raise ValueError(f"目标宽高比必须为正数: {target_aspect}")

    source_aspect = source_width / source_height

    if source_aspect > target_aspect:
        height = source_height
        width = min(source_height * target_aspect, source_width)
        x = (source_width - width) / 2
        y = 0.0
    else:
        width = source_width
        height = min(source_width / target_aspect, source_height)
        x = 0.0
        y = (source_height - height) / 2

    return CropRect(x=max(0.0, x), y=max(0.0, y), width=width, height=height)


def rotated_bounding_box(
    width: float, height: float, rotation_radians: float
) -> RotatedSize:
    """矩形绕中心旋转后的轴对齐外接框"""
    cos_r = abs(math.cos(rotation_radians))
    sin_r = abs(math.sin(rotation_radians))
    return RotatedSize(
        width=cos_r * width + sin_r * height,
        height=sin_r * width + cos_r * height,
    )


def normalize_rotation(rotation_radians: float) -> float:
    """把角度归一化到 [0, 2π)"""
    return rotation_radians % math.tau


def is_identity_rotation(rotation_radians: float, tolerance: float = 1e-9) -> bool:
    normalized = normalize_rotation(rotation_radians)
    return normalized < tolerance or math.tau - normalized < tolerance
