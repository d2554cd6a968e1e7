"""上下文缓存的线格式类型。"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from ..core.serde import WireModel
from ..core.types import Content
from ..tools.types import AnyTool, ToolConfig


def format_ttl(ttl: timedelta | float) -> str:
    """把时长编码为 API 的 Duration 字符串(如 ``"3600s"``)。"""
    seconds = ttl.total_seconds() if isinstance(ttl, timedelta) else float(ttl)
    if seconds.is_integer():
        return f"{int(seconds)}s"
    return f"{seconds:.9f}".rstrip("0") + "s"


def format_timestamp(value: datetime) -> str:
    """把时间编码为 RFC 3339 UTC 字符串。无时区的时间视为 UTC。"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class CacheUsageMetadata(WireModel):
    total_token_count: int | None = None


class CachedContent(WireModel):
    """服务端保存的缓存内容。"""

    name: str | None = None
    display_name: str | None = None
    model: str | None = None
    system_instruction: Content | None = None
    contents: tuple[Content, ...] | None = None
    tools: tuple[AnyTool, ...] | None = None
    tool_config: ToolConfig | None = None
    create_time: str | None = None
    update_time: str | None = None
    expire_time: str | None = None
    ttl: str | None = None
    usage_metadata: CacheUsageMetadata | None = None


class CreateCachedContentRequest(WireModel):
    """创建缓存的请求。ttl 与 expire_time 二选一。"""

    model: str
    display_name: str | None = None
    system_instruction: Content | None = None
    contents: tuple[Content, ...] | None = None
    tools: tuple[AnyTool, ...] | None = None
    tool_config: ToolConfig | None = None
    ttl: str | None = None
    expire_time: str | None = None


class ListCachedContentsResponse(WireModel):
    cached_contents: tuple[CachedContent, ...] | None = None
    next_page_token: str | None = None


__all__ = [
    "CacheUsageMetadata",
    "CachedContent",
    "CreateCachedContentRequest",
    "ListCachedContentsResponse",
    "format_timestamp",
    "format_ttl",
]
