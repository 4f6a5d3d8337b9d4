"""批量处理器模块。

按队列顺序逐项执行裁剪编码流水线，任意时刻只有一项处于 processing。
每次状态变更都会发布一个不可变的状态事件；单项失败不会中断整个队列。
"""

import asyncio
from collections.abc import Callable, Sequence
from pathlib import Path

from ..config import get_config
from ..core.codec import Encoder
from ..core.pipeline import process_image_bytes
from ..exceptions import ErrorHandler, OperationCancelledError, ProcessingError
from ..models.artifact import EncodedArtifact
from ..models.batch import BatchItem, BatchState, BatchStatusEvent
from ..models.results import BatchResult
from ..models.target import BudgetTarget, ManualTarget
from ..utils.file_helpers import read_source_bytes
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter


logger = get_logger()

BatchSource = Path | tuple[str, bytes]
StatusCallback = Callable[[BatchStatusEvent], None]


class BatchRunner:
    """批量裁剪状态机

    队列中的项按位置寻址、顺序不变。再次调用 ``run`` 时会跳过已处于
    终态（done / error）的项，因此对部分完成的队列重复运行是幂等的。
    """

    def __init__(
        self,
        sources: Sequence[BatchSource],
        target: ManualTarget | BudgetTarget,
        watermark: bool = True,
        aspect: float | None = None,
        encoder: Encoder | None = None,
        on_status: StatusCallback | None = None,
    ):
        """初始化批量处理器

        Args:
            sources: 有序输入，文件路径或 (名称, 原始字节)
            target: 全部项共享的输出目标
            watermark: 是否叠加水印
            aspect: 裁剪宽高比，默认 3:2
            encoder: 编码器，默认 WebP
            on_status: 每次状态变更后调用的订阅函数
        """
        self.target = target
        self.watermark = watermark
        self.aspect = aspect if aspect is not None else get_config().crop.TARGET_ASPECT
        self.encoder = encoder
        self.on_status = on_status

        self._items = [self._make_item(i, source) for i, source in enumerate(sources)]
        self._events: list[BatchStatusEvent] = []
        self._running = False

    @staticmethod
    def _make_item(index: int, source: BatchSource) -> BatchItem:
        if isinstance(source, tuple):
            name, data = source
            return BatchItem(
                index=index, name=name, source=data, original_size=len(data)
            )
        path = Path(source)
        return BatchItem(index=index, name=path.name, source=path)

    @property
    def items(self) -> tuple[BatchItem, ...]:
        return tuple(self._items)

    @property
    def events(self) -> tuple[BatchStatusEvent, ...]:
        """按发布顺序记录的全部状态事件"""
        return tuple(self._events)

    @property
    def is_running(self) -> bool:
        return self._running

    def snapshot(self) -> list[BatchStatusEvent]:
        """当前各项状态，按队列顺序"""
        return [item.to_event() for item in self._items]

    async def run(
        self,
        cancel_event: asyncio.Event | None = None,
        retry_failed: bool = False,
    ) -> BatchResult:
        """处理队列中尚未完成的项

        Args:
            cancel_event: 取消信号，在两项之间以及每次编码前检查
            retry_failed: 是否重新处理 error 状态的项

        Returns:
            BatchResult: 各项最终状态
        """
        if self._running:
            raise ProcessingError("批量任务正在运行，不能重复启动")

        self._running = True
        cancelled = False
        try:
            for item in self._items:
                if self._should_skip(item, retry_failed):
                    continue

                if cancel_event is not None and cancel_event.is_set():
                    cancelled = True
                    break

                try:
                    await self._process_item(item, cancel_event)
                except OperationCancelledError:
                    cancelled = True
                    break
        finally:
            self._running = False

        if cancelled:
            logger.info("批量任务已取消")
        return self._build_result(cancelled)

    def reset(self, index: int | None = None) -> None:
        """把指定项（默认全部）恢复为 pending 并释放其产物"""
        if self._running:
            raise ProcessingError("批量任务运行中，不能重置")

        targets = self._items if index is None else [self._items[index]]
        for item in targets:
            if item.state != BatchState.PENDING:
                self._transition(item, BatchState.PENDING)

    @staticmethod
    def _should_skip(item: BatchItem, retry_failed: bool) -> bool:
        if item.state == BatchState.DONE:
            return True
        return item.state == BatchState.ERROR and not retry_failed

    async def _process_item(
        self, item: BatchItem, cancel_event: asyncio.Event | None
    ) -> None:
        self._transition(item, BatchState.PROCESSING)

        try:
            data = await self._load_source(item)
            artifact = await process_image_bytes(
                data,
                self.target,
                watermark=self.watermark,
                aspect=self.aspect,
                encoder=self.encoder,
                cancel_event=cancel_event,
            )
        except (OperationCancelledError, asyncio.CancelledError):
            self._transition(item, BatchState.PENDING)
            raise
        except Exception as e:
            ErrorHandler.log_error("批量裁剪", item.name, e, "warning")
            self._transition(item, BatchState.ERROR, error=ErrorHandler.describe(e))
            return

        self._transition(item, BatchState.DONE, artifact=artifact)

    async def _load_source(self, item: BatchItem) -> bytes:
        if isinstance(item.source, bytes):
            return item.source

        data = await asyncio.to_thread(read_source_bytes, item.source)
        item.original_size = len(data)
        return data

    def _transition(
        self,
        item: BatchItem,
        new_state: BatchState,
        artifact: EncodedArtifact | None = None,
        error: str | None = None,
    ) -> None:
        """执行一次状态迁移并发布事件"""
        if not item.can_transition(new_state):
            raise ProcessingError(
                f"非法状态迁移: #{item.index} {item.state.value} -> {new_state.value}"
            )

        match new_state:
            case BatchState.PENDING | BatchState.PROCESSING:
                item.release_artifact()
                item.error = None
            case BatchState.DONE:
                item.artifact = artifact
                item.error = None
            case BatchState.ERROR:
                item.error = error

        item.state = new_state
        event = item.to_event()
        self._events.append(event)
        logger.debug(
            MessageFormatter.batch_transition(item.index, item.name, new_state.value)
        )

        if self.on_status is not None:
            # 订阅者出错只记录日志，不影响队列推进
            try:
                self.on_status(event)
            except Exception as e:
                ErrorHandler.log_error("状态回调", item.name, e, "warning")

    def _build_result(self, cancelled: bool) -> BatchResult:
        items = self.snapshot()
        failed = sum(1 for item in items if item.state == BatchState.ERROR)
        success = not items or failed < len(items)

        result = BatchResult(
            success=success,
            error=None if success else "所有文件处理都失败",
            items=items,
            cancelled=cancelled,
        )
        logger.info(result.get_summary())
        return result
