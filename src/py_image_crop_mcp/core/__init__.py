"""核心模块包。

裁剪几何、合成、编解码与体积约束搜索。
"""

from .codec import Encoder, WebPEncoder, decode_image, default_encoder
from .compositor import apply_watermark, compose, rotate_canvas
from .geometry import center_crop, rotated_bounding_box
from .pipeline import process_image_bytes, render_target, resolve_crop
from .size_search import encode_manual, search_for_budget


__all__ = [
    "Encoder",
    "WebPEncoder",
    "apply_watermark",
    "center_crop",
    "compose",
    "decode_image",
    "default_encoder",
    "encode_manual",
    "process_image_bytes",
    "render_target",
    "resolve_crop",
    "rotate_canvas",
    "rotated_bounding_box",
    "search_for_budget",
]
