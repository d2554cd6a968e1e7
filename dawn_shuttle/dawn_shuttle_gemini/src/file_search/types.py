"""文件检索存储的线格式类型。"""

from __future__ import annotations

from typing import Any

from ..batch.types import OperationError
from ..core.serde import Int64, WireEnum, WireModel


class DocumentState(WireEnum):
    """文档处理状态。"""

    UNSPECIFIED = "STATE_UNSPECIFIED"
    PENDING = "STATE_PENDING"
    ACTIVE = "STATE_ACTIVE"
    FAILED = "STATE_FAILED"


class FileSearchStore(WireModel):
    """文件检索存储。文档计数为 int64, 线上为字符串。"""

    name: str
    display_name: str | None = None
    create_time: str | None = None
    update_time: str | None = None
    active_documents_count: Int64 | None = None
    pending_documents_count: Int64 | None = None
    failed_documents_count: Int64 | None = None
    size_bytes: Int64 | None = None


class CreateFileSearchStoreRequest(WireModel):
    display_name: str | None = None


class StringList(WireModel):
    values: tuple[str, ...]


class CustomMetadata(WireModel):
    """文档的自定义元数据, 三种取值方式只能使用其一。"""

    key: str
    string_value: str | None = None
    string_list_value: StringList | None = None
    numeric_value: float | None = None

    @classmethod
    def of(cls, key: str, value: str | float | list[str] | tuple[str, ...]) -> CustomMetadata:
        """按值的类型选择对应字段。"""
        if isinstance(value, str):
            return cls(key=key, string_value=value)
        if isinstance(value, (list, tuple)):
            return cls(key=key, string_list_value=StringList(values=value))
        return cls(key=key, numeric_value=float(value))


class Document(WireModel):
    name: str
    display_name: str | None = None
    custom_metadata: tuple[CustomMetadata, ...] | None = None
    create_time: str | None = None
    update_time: str | None = None
    state: DocumentState | None = None
    size_bytes: Int64 | None = None
    mime_type: str | None = None


class WhiteSpaceConfig(WireModel):
    max_tokens_per_chunk: int
    max_overlap_tokens: int


class ChunkingConfig(WireModel):
    white_space_config: WhiteSpaceConfig | None = None

    @classmethod
    def white_space(cls, max_tokens_per_chunk: int, max_overlap_tokens: int) -> ChunkingConfig:
        return cls(white_space_config=WhiteSpaceConfig(
            max_tokens_per_chunk=max_tokens_per_chunk,
            max_overlap_tokens=max_overlap_tokens,
        ))


class ImportFileRequest(WireModel):
    file_name: str
    custom_metadata: tuple[CustomMetadata, ...] | None = None
    chunking_config: ChunkingConfig | None = None


class UploadToFileSearchStoreRequest(WireModel):
    display_name: str | None = None
    custom_metadata: tuple[CustomMetadata, ...] | None = None
    chunking_config: ChunkingConfig | None = None
    mime_type: str | None = None


class Operation(WireModel):
    """导入/上传文档的长时操作。"""

    name: str
    metadata: dict[str, Any] | None = None
    done: bool | None = None
    response: dict[str, Any] | None = None
    error: OperationError | None = None


class ListFileSearchStoresResponse(WireModel):
    file_search_stores: tuple[FileSearchStore, ...] | None = None
    next_page_token: str | None = None


class ListDocumentsResponse(WireModel):
    documents: tuple[Document, ...] | None = None
    next_page_token: str | None = None


__all__ = [
    "ChunkingConfig",
    "CreateFileSearchStoreRequest",
    "CustomMetadata",
    "Document",
    "DocumentState",
    "FileSearchStore",
    "ImportFileRequest",
    "ListDocumentsResponse",
    "ListFileSearchStoresResponse",
    "Operation",
    "StringList",
    "UploadToFileSearchStoreRequest",
    "WhiteSpaceConfig",
]
