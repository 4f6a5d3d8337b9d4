"""配置构建器模块。

统一的输出目标构建逻辑，集成参数验证功能。
"""

import math
from pathlib import Path

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ValidationError as CustomValidationError
from ..models.constants import kb_to_bytes
from ..models.target import BudgetTarget, ManualTarget, TargetSpec


_target_adapter: TypeAdapter[TargetSpec] = TypeAdapter(TargetSpec)


class ConfigBuilder:
    """输出目标构建器

    把面向用户的参数（百分比质量、KB 预算）转换为 ``TargetSpec``，
    并把 pydantic 的验证错误转换为项目统一的 ``ValidationError``。
    """

    def build_target(
        self,
        quality: int | None = None,
        max_kb: float | None = None,
        max_bytes: int | None = None,
        default_quality: int = 92,
        input_path: Path | None = None,
    ) -> ManualTarget | BudgetTarget:
        """构建输出目标

        ``max_kb`` 与 ``max_bytes`` 为 0 或 None 时视为未设置，使用手动质量。

        Args:
            quality: 手动质量 1-100
            max_kb: 字节预算（KB）
            max_bytes: 字节预算（字节）
            default_quality: 未指定质量时的默认值
            input_path: 关联的输入路径，用于错误信息

        Returns:
            ManualTarget | BudgetTarget: 输出目标

        Raises:
            CustomValidationError: 参数冲突或越界
        """
        if max_kb and max_bytes:
            raise CustomValidationError("max_kb 与 max_bytes 只能指定一个", input_path)

        budget = kb_to_bytes(max_kb) if max_kb else max_bytes
        if budget and quality is not None:
            raise CustomValidationError(
                "手动质量与字节预算互斥，只能指定其中一个", input_path
            )

        if budget:
            return self._validate({"mode": "budget", "max_bytes": budget}, input_path)

        quality = default_quality if quality is None else quality
        if not 1 <= quality <= 100:
            raise CustomValidationError(
                f"质量参数必须在 1-100 之间，当前值: {quality}", input_path
            )
        return self._validate({"mode": "manual", "quality": quality / 100}, input_path)

    def validate_aspect(self, aspect: float, input_path: Path | None = None) -> float:
        """验证宽高比"""
        if not math.isfinite(aspect) or aspect <= 0:
            raise CustomValidationError(
                f"宽高比必须为正数，当前值: {aspect}", input_path
            )
        return aspect

    def validate_rotation(self, rotation_degrees: float) -> float:
        """把角度转换为弧度"""
        if not math.isfinite(rotation_degrees):
            raise CustomValidationError(f"旋转角度无效: {rotation_degrees}")
        return math.radians(rotation_degrees % 360)

    def _validate(
        self, payload: dict, input_path: Path | None
    ) -> ManualTarget | BudgetTarget:
        try:
            return _target_adapter.validate_python(payload)
        except PydanticValidationError as e:
            raise CustomValidationError(
                self._format_validation_error(e), input_path
            ) from e

    def _format_validation_error(self, error: PydanticValidationError) -> str:
        """格式化验证错误"""
        messages = []
        for err in error.errors():
            field = ".".join(str(loc) for loc in err["loc"])
            msg = err["msg"]
            if field:
                messages.append(f"{field}: {msg}")
            else:
                messages.append(msg)
        return "; ".join(messages)
