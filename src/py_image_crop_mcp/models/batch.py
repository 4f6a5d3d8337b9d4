"""批量处理模型。

队列中每一项的生命周期状态，以及每次状态变更发布的不可变事件。
"""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from .artifact import EncodedArtifact


class BatchState(str, Enum):
    """批量项状态枚举"""

    PENDING = "pending"
    PROCESSING = "processing"
    DONE = "done"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (BatchState.DONE, BatchState.ERROR)


# 允许的状态迁移；PROCESSING -> PENDING 仅用于取消时回退
ALLOWED_TRANSITIONS: dict[BatchState, frozenset[BatchState]] = {
    BatchState.PENDING: frozenset({BatchState.PROCESSING}),
    BatchState.PROCESSING: frozenset(
        {BatchState.DONE, BatchState.ERROR, BatchState.PENDING}
    ),
    BatchState.DONE: frozenset({BatchState.PENDING}),
    BatchState.ERROR: frozenset({BatchState.PROCESSING, BatchState.PENDING}),
}


class BatchItem(BaseModel):
    """批量队列中的一项"""

    index: int = Field(ge=0, description="队列位置")
    name: str = Field(description="显示名称")
    source: Path | bytes = Field(description="源文件路径或原始字节", repr=False)
    state: BatchState = Field(BatchState.PENDING, description="当前状态")
    artifact: EncodedArtifact | None = Field(None, description="编码产物")
    error: str | None = Field(None, description="错误信息")
    original_size: int | None = Field(None, description="源数据字节数")

    def can_transition(self, new_state: BatchState) -> bool:
        return new_state in ALLOWED_TRANSITIONS[self.state]

    def release_artifact(self) -> None:
        """释放并丢弃当前产物"""
        if self.artifact is not None:
            self.artifact.release()
            self.artifact = None

    def to_event(self) -> "BatchStatusEvent":
        return BatchStatusEvent(
            index=self.index,
            name=self.name,
            state=self.state,
            artifact=self.artifact,
            size_bytes=self.artifact.size_bytes if self.artifact else None,
            original_size=self.original_size,
            error_message=self.error,
        )


class BatchStatusEvent(BaseModel):
    """状态变更事件"""

    model_config = ConfigDict(frozen=True)

    index: int
    name: str
    state: BatchState
    artifact: EncodedArtifact | None = None
    size_bytes: int | None = None
    original_size: int | None = None
    error_message: str | None = None
