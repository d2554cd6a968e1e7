"""已上传文件的线格式类型。"""

from __future__ import annotations

from typing import Any

from ..core.serde import Int64, WireEnum, WireModel


class FileState(WireEnum):
    """文件处理状态。"""

    UNSPECIFIED = "STATE_UNSPECIFIED"
    PROCESSING = "PROCESSING"
    ACTIVE = "ACTIVE"
    FAILED = "FAILED"


class File(WireModel):
    """Files API 中的文件元数据。"""

    name: str | None = None
    display_name: str | None = None
    mime_type: str | None = None
    size_bytes: Int64 | None = None
    create_time: str | None = None
    update_time: str | None = None
    expiration_time: str | None = None
    sha256_hash: str | None = None
    uri: str | None = None
    download_uri: str | None = None
    state: FileState | None = None
    source: str | None = None
    error: dict[str, Any] | None = None
    video_metadata: dict[str, Any] | None = None


class ListFilesResponse(WireModel):
    files: tuple[File, ...] | None = None
    next_page_token: str | None = None


__all__ = ["File", "FileState", "ListFilesResponse"]
