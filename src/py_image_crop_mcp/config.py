"""统一配置管理模块。

提供应用程序的全局配置管理，包括默认值、环境变量支持等。
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class CropDefaults:
    """裁剪相关的默认配置"""

    # 固定 3:2 输出比例
    TARGET_ASPECT: float = 3 / 2

    # 手动质量（百分比），单张与批量的默认值不同
    DEFAULT_QUALITY: int = 92
    BATCH_QUALITY: int = 85

    # 体积预设（KB）
    TARGET_SIZE_PRESETS_KB: tuple[int, ...] = (150, 100, 60, 50, 30)

    OUTPUT_PREFIX: str = "optimized_"


@dataclass(frozen=True)
class SearchDefaults:
    """体积约束搜索的参数"""

    # 阶段一：缩放
    PROBE_QUALITY: float = 0.5
    MAX_SCALE_ATTEMPTS: int = 8
    SCALE_DAMPING: float = 0.92
    MIN_SCALE: float = 0.1

    # 阶段二：质量二分
    QUALITY_FLOOR: float = 0.1
    QUALITY_CEILING: float = 1.0
    QUALITY_STEPS: int = 5

    @property
    def max_encode_calls(self) -> int:
        """最坏情况下的编码次数"""
        # 质量二分全部未命中时另有一次下限兜底编码
        return self.MAX_SCALE_ATTEMPTS + self.QUALITY_STEPS + 1


@dataclass(frozen=True)
class WatermarkDefaults:
    """水印相关的默认配置"""

    TEXT: str = "©Gokarnastays.com"
    MARGIN: int = 20
    FONT_RATIO: float = 0.035
    MIN_FONT_SIZE: int = 12
    FILL: tuple[int, int, int, int] = (255, 255, 255, 204)
    SHADOW_COLOR: tuple[int, int, int, int] = (0, 0, 0, 128)
    SHADOW_BLUR: float = 4.0
    FONT_CANDIDATES: tuple[str, ...] = (
        "DejaVuSans-Bold.ttf",
        "Arial Bold.ttf",
        "arialbd.ttf",
    )


@dataclass(frozen=True)
class EncoderDefaults:
    """编码器相关的默认配置"""

    # 0-6，越大越慢压得越小
    WEBP_METHOD: int = 4


@dataclass(frozen=True)
class LoggingDefaults:
    """日志相关的默认配置"""

    # 日志级别
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # 文件日志
    ENABLE_FILE_LOGGING: bool = False
    LOG_FILE_PATH: str = "py_image_crop.log"
    LOG_FILE_MAX_SIZE: int = 10 * 1024 * 1024  # 10MB
    LOG_FILE_BACKUP_COUNT: int = 5


class AppConfig:
    """应用程序配置管理器

    支持环境变量覆盖默认配置
    """

    def __init__(self):
        self.crop = CropDefaults()
        self.search = SearchDefaults()
        self.watermark = WatermarkDefaults()
        self.encoder = EncoderDefaults()
        self.logging = LoggingDefaults()

        # 从环境变量加载配置
        self._load_from_env()

    def _load_from_env(self):
        """从环境变量加载配置"""
        if quality := os.getenv("PIC_DEFAULT_QUALITY"):
            object.__setattr__(self.crop, "DEFAULT_QUALITY", int(quality))

        if batch_quality := os.getenv("PIC_BATCH_QUALITY"):
            object.__setattr__(self.crop, "BATCH_QUALITY", int(batch_quality))

        if text := os.getenv("PIC_WATERMARK_TEXT"):
            object.__setattr__(self.watermark, "TEXT", text)

        if method := os.getenv("PIC_WEBP_METHOD"):
            object.__setattr__(
                self.encoder, "WEBP_METHOD", max(0, min(6, int(method)))
            )

        # 日志配置
        if log_level := os.getenv("PIC_LOG_LEVEL"):
            object.__setattr__(self.logging, "LOG_LEVEL", log_level.upper())

        if enable_file_log := os.getenv("PIC_ENABLE_FILE_LOGGING"):
            object.__setattr__(
                self.logging,
                "ENABLE_FILE_LOGGING",
                enable_file_log.lower() in ("true", "1", "yes"),
            )


# 全局配置实例
config = AppConfig()


def get_config() -> AppConfig:
    """获取全局配置实例"""
    return config


def reset_config():
    """重置配置（主要用于测试）"""
    global config
    config = AppConfig()
