"""文件检索存储与导入请求的构造器。"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from ..adapter.base import BaseTransport
from ..core.error import ConfigurationError
from .handle import FileSearchStoreHandle, OperationHandle
from .types import (
    ChunkingConfig,
    CreateFileSearchStoreRequest,
    CustomMetadata,
    ImportFileRequest,
    Operation,
)

if TYPE_CHECKING:
    from ..core.client import Gemini


class FileSearchStoreBuilder:
    """创建文件检索存储。"""

    def __init__(self, client: Gemini | None = None) -> None:
        self._client = client
        self._display_name: str | None = None

    def with_display_name(self, display_name: str) -> FileSearchStoreBuilder:
        self._display_name = display_name
        return self

    def build(self) -> CreateFileSearchStoreRequest:
        return CreateFileSearchStoreRequest(display_name=self._display_name)

    async def execute(self) -> FileSearchStoreHandle:
        if self._client is None:
            raise ConfigurationError("FileSearchStoreBuilder is not bound to a client")
        return await self._client.submit_file_search_store(self.build())


class ImportFileBuilder:
    """把已上传的文件导入存储。"""

    def __init__(
        self,
        store_name: str,
        file_name: str,
        transport: BaseTransport | None = None,
    ) -> None:
        self._store_name = store_name
        self._file_name = file_name
        self._transport = transport
        self._custom_metadata: list[CustomMetadata] = []
        self._chunking_config: ChunkingConfig | None = None

    def with_custom_metadata(self, metadata: Iterable[CustomMetadata]) -> ImportFileBuilder:
        self._custom_metadata.extend(metadata)
        return self

    def with_chunking_config(self, config: ChunkingConfig) -> ImportFileBuilder:
        self._chunking_config = config
        return self

    def build(self) -> ImportFileRequest:
        return ImportFileRequest(
            file_name=self._file_name,
            custom_metadata=list(self._custom_metadata) or None,
            chunking_config=self._chunking_config,
        )

    async def execute(self) -> OperationHandle:
        if self._transport is None:
            raise ConfigurationError("ImportFileBuilder is not bound to a transport")
        data = await self._transport.request(
            "POST", f"{self._store_name}:importFile", body=self.build().to_dict(),
        )
        return OperationHandle(Operation.from_dict(data), self._transport)


__all__ = ["FileSearchStoreBuilder", "ImportFileBuilder"]
