"""编码产物模型。"""

from humanize import naturalsize
from pydantic import BaseModel, Field, PrivateAttr

from .constants import get_mime_type


class EncodedArtifact(BaseModel):
    """编码后的字节缓冲及其尺寸

    缓冲由最后接收它的组件持有，被替换或丢弃时调用 ``release()`` 释放一次。
    """

    width: int = Field(gt=0, description="像素宽度")
    height: int = Field(gt=0, description="像素高度")
    quality: float = Field(ge=0, le=1, description="编码质量")
    scale: float = Field(gt=0, description="相对裁剪区域的缩放比例")
    format: str = Field("WEBP", description="编码格式")

    _data: bytes = PrivateAttr(default=b"")
    _released: bool = PrivateAttr(default=False)

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        width: int,
        height: int,
        quality: float,
        scale: float,
        format: str = "WEBP",
    ) -> "EncodedArtifact":
        artifact = cls(
            width=width, height=height, quality=quality, scale=scale, format=format
        )
        artifact._data = bytes(data)
        return artifact

    @property
    def data(self) -> bytes:
        if self._released:
            from ..exceptions import ProcessingError

            raise ProcessingError("编码产物已释放，无法再读取")
        return self._data

    @property
    def size_bytes(self) -> int:
        return len(self._data)

    @property
    def released(self) -> bool:
        return self._released

    @property
    def mime_type(self) -> str:
        return get_mime_type(self.format)

    def release(self) -> bool:
        """释放缓冲；重复释放返回 False"""
        if self._released:
            return False
        self._data = b""
        self._released = True
        return True

    def get_size_human(self) -> str:
        """人类可读的大小"""
        return naturalsize(self.size_bytes, binary=True)
