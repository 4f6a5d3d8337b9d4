"""输出目标模型。

手动质量与字节预算两种互斥模式。
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class ManualTarget(BaseModel):
    """手动质量模式"""

    model_config = ConfigDict(frozen=True)

    mode: Literal["manual"] = "manual"
    quality: float = Field(gt=0, le=1, description="编码质量 (0, 1]")


class BudgetTarget(BaseModel):
    """字节预算模式"""

    model_config = ConfigDict(frozen=True)

    mode: Literal["budget"] = "budget"
    max_bytes: int = Field(gt=0, description="最大输出字节数")


TargetSpec = Annotated[ManualTarget | BudgetTarget, Field(discriminator="mode")]
