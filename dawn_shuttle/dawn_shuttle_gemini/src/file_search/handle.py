"""文件检索存储、文档与长时操作的句柄。"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Any

from ..adapter.base import BaseTransport
from ..batch.types import OperationError
from .types import (
    ChunkingConfig,
    CustomMetadata,
    Document,
    DocumentState,
    FileSearchStore,
    ListDocumentsResponse,
    Operation,
    UploadToFileSearchStoreRequest,
)

if TYPE_CHECKING:
    from .builder import ImportFileBuilder


class OperationHandle:
    """导入或上传文档的长时操作。"""

    def __init__(self, operation: Operation, transport: BaseTransport) -> None:
        self._operation = operation
        self._transport = transport

    @property
    def name(self) -> str:
        return self._operation.name

    @property
    def operation(self) -> Operation:
        return self._operation

    @property
    def is_done(self) -> bool:
        return bool(self._operation.done)

    @property
    def error(self) -> OperationError | None:
        return self._operation.error

    def __repr__(self) -> str:
        return f"OperationHandle(name={self.name!r}, done={self.is_done})"

    async def refresh(self) -> Operation:
        data = await self._transport.request("GET", self.name)
        self._operation = Operation.from_dict(data)
        return self._operation


class DocumentHandle:
    """存储中的单个文档。"""

    def __init__(self, document: Document, transport: BaseTransport) -> None:
        self._document = document
        self._transport = transport

    @property
    def name(self) -> str:
        return self._document.name

    @property
    def document(self) -> Document:
        return self._document

    @property
    def state(self) -> DocumentState | None:
        return self._document.state

    @property
    def is_active(self) -> bool:
        return self._document.state is DocumentState.ACTIVE

    def __repr__(self) -> str:
        return f"DocumentHandle(name={self.name!r}, state={self.state})"

    async def refresh(self) -> Document:
        data = await self._transport.request("GET", self.name)
        self._document = Document.from_dict(data)
        return self._document

    async def delete(self, *, force: bool = False) -> None:
        """删除文档, force 为 True 时同时删除其分块。"""
        await self._transport.request("DELETE", self.name, params={"force": _flag(force)})


class FileSearchStoreHandle:
    """文件检索存储。

    Example:
        >>> store = await client.create_file_search_store().with_display_name("docs").execute()
        >>> op = await store.import_file(uploaded.name).execute()
        >>> response = await client.generate_content().with_file_search([store]).with_user_message("...").execute()
    """

    def __init__(self, store: FileSearchStore, transport: BaseTransport) -> None:
        self._store = store
        self._transport = transport

    @property
    def name(self) -> str:
        return self._store.name

    @property
    def store(self) -> FileSearchStore:
        return self._store

    @property
    def display_name(self) -> str | None:
        return self._store.display_name

    def __repr__(self) -> str:
        return f"FileSearchStoreHandle(name={self.name!r})"

    async def refresh(self) -> FileSearchStore:
        data = await self._transport.request("GET", self.name)
        self._store = FileSearchStore.from_dict(data)
        return self._store

    async def delete(self, *, force: bool = False) -> None:
        """删除存储, 存储中仍有文档时需要 force=True。"""
        await self._transport.request("DELETE", self.name, params={"force": _flag(force)})

    def import_file(self, file_name: str) -> ImportFileBuilder:
        """把 Files API 中已上传的文件导入本存储。"""
        from .builder import ImportFileBuilder

        return ImportFileBuilder(self.name, file_name, self._transport)

    async def upload(
        self,
        data: bytes,
        *,
        mime_type: str,
        display_name: str | None = None,
        custom_metadata: list[CustomMetadata] | None = None,
        chunking_config: ChunkingConfig | None = None,
    ) -> OperationHandle:
        """直接上传内容到本存储。"""
        request = UploadToFileSearchStoreRequest(
            display_name=display_name,
            custom_metadata=custom_metadata,
            chunking_config=chunking_config,
            mime_type=mime_type,
        )
        response = await self._transport.upload(
            data,
            mime_type=mime_type,
            metadata=request.to_dict(),
            path=f"{self.name}:uploadToFileSearchStore",
        )
        return OperationHandle(Operation.from_dict(response), self._transport)

    async def get_operation(self, operation_id: str) -> OperationHandle:
        name = operation_id if "/" in operation_id else f"{self.name}/operations/{operation_id}"
        data = await self._transport.request("GET", name)
        return OperationHandle(Operation.from_dict(data), self._transport)

    # ============ 文档 ============

    def _document_name(self, document_id: str) -> str:
        return document_id if "/" in document_id else f"{self.name}/documents/{document_id}"

    async def get_document(self, document_id: str) -> DocumentHandle:
        data = await self._transport.request("GET", self._document_name(document_id))
        return DocumentHandle(Document.from_dict(data), self._transport)

    async def delete_document(self, document_id: str, *, force: bool = False) -> None:
        await self._transport.request(
            "DELETE", self._document_name(document_id), params={"force": _flag(force)},
        )

    async def list_documents(
        self,
        page_size: int | None = None,
        page_token: str | None = None,
    ) -> tuple[list[DocumentHandle], str | None]:
        """列出一页文档, 返回 (文档列表, 下一页 token)。"""
        data = await self._transport.request(
            "GET",
            f"{self.name}/documents",
            params={"pageSize": page_size, "pageToken": page_token},
        )
        page = ListDocumentsResponse.from_dict(data)
        handles = [DocumentHandle(d, self._transport) for d in page.documents or []]
        return handles, page.next_page_token

    async def iter_documents(self, page_size: int | None = None) -> AsyncIterator[DocumentHandle]:
        """逐页遍历所有文档。"""
        page_token: str | None = None
        while True:
            handles, page_token = await self.list_documents(page_size, page_token)
            for handle in handles:
                yield handle
            if not page_token:
                return


def _flag(value: bool) -> Any:
    return "true" if value else None


__all__ = ["DocumentHandle", "FileSearchStoreHandle", "OperationHandle"]
