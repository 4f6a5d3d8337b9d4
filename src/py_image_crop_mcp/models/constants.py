"""图像处理相关常量定义。

基于 Pillow 动态能力的图像格式管理，避免硬编码重复。
"""

from typing import Final

from PIL import Image


BYTES_PER_KB: Final[int] = 1024


class ImageFormats:
    """基于 Pillow 的动态图像格式管理"""

    ALIASES: Final[dict[str, str]] = {
        "JPG": "JPEG",
    }

    PREFERRED_EXTENSIONS: Final[dict[str, str]] = {
        "JPEG": ".jpg",
        "WEBP": ".webp",
    }

    @classmethod
    def get_supported_extensions(cls) -> set[str]:
        """动态获取 Pillow 支持的所有扩展名"""
        return set(Image.registered_extensions().keys())

    @classmethod
    def get_mime_type(cls, format_name: str) -> str:
        """获取 MIME 类型，优先使用 Pillow 注册表"""
        format_upper = format_name.upper()
        Image.init()
        return Image.MIME.get(format_upper, f"image/{format_upper.lower()}")

    @classmethod
    def get_extension(cls, format_name: str) -> str:
        """获取扩展名，优先使用首选扩展名"""
        format_upper = format_name.upper()

        if format_upper in cls.PREFERRED_EXTENSIONS:
            return cls.PREFERRED_EXTENSIONS[format_upper]

        for ext, fmt in Image.registered_extensions().items():
            if fmt and fmt.upper() == format_upper:
                return ext.lower()

        return f".{format_upper.lower()}"


def get_format_alias(format_str: str) -> str:
    """获取格式的标准名称"""
    format_upper = format_str.upper()
    return ImageFormats.ALIASES.get(format_upper, format_upper)


def get_mime_type(format_str: str) -> str:
    """获取格式的MIME类型"""
    return ImageFormats.get_mime_type(get_format_alias(format_str))


def get_extension(format_str: str) -> str:
    """获取格式的首选扩展名"""
    return ImageFormats.get_extension(get_format_alias(format_str))


def kb_to_bytes(size_kb: float) -> int:
    """KB 转字节（1KB = 1024 字节）"""
    return int(size_kb * BYTES_PER_KB)
