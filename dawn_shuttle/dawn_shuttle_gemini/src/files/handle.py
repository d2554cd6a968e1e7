"""文件句柄。"""

from __future__ import annotations

from ..adapter.base import BaseTransport
from ..core.error import DecodeError
from .types import File, FileState


class FileHandle:
    """已上传文件的句柄。

    保存最近一次读取到的元数据, 可直接传给 ``ContentBuilder.with_file()``。
    """

    def __init__(self, file: File, transport: BaseTransport) -> None:
        if not file.name:
            raise DecodeError("File metadata has no name", fragment=file.to_dict())
        self._file = file
        self._transport = transport

    @property
    def name(self) -> str:
        return self._file.name or ""

    @property
    def file(self) -> File:
        return self._file

    @property
    def uri(self) -> str | None:
        return self._file.uri

    @property
    def mime_type(self) -> str | None:
        return self._file.mime_type

    @property
    def state(self) -> FileState | None:
        return self._file.state

    def __repr__(self) -> str:
        return f"FileHandle(name={self.name!r}, state={self.state})"

    async def refresh(self) -> File:
        """重新读取元数据(例如等待视频处理为 ACTIVE)。"""
        data = await self._transport.request("GET", self.name)
        self._file = File.from_dict(data)
        return self._file

    async def delete(self) -> None:
        await self._transport.request("DELETE", self.name)


__all__ = ["FileHandle"]
