"""CacheBuilder - 创建上下文缓存。"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from ..core.error import BuildError, ConfigurationError
from ..core.types import Content
from ..tools.types import Tool, ToolConfig
from .handle import CachedContentHandle
from .types import CreateCachedContentRequest, format_timestamp, format_ttl

if TYPE_CHECKING:
    from ..core.client import Gemini

MAX_DISPLAY_NAME_CHARS = 128


class CacheBuilder:
    """缓存构造器。必须通过 ``with_ttl`` 或 ``with_expire_time`` 指定过期时间。

    Example:
        >>> cache = await (
        ...     client.create_cache()
        ...     .with_system_instruction("You are a contract reviewer.")
        ...     .with_user_message(long_document)
        ...     .with_ttl(timedelta(hours=1))
        ...     .execute()
        ... )
        >>> await client.generate_content().with_cached_content(cache).with_user_message("Summarize").execute()
    """

    def __init__(self, model: str, client: Gemini | None = None) -> None:
        self._client = client
        self._model = model
        self._display_name: str | None = None
        self._system_instruction: Content | None = None
        self._contents: list[Content] = []
        self._tools: list[Tool] = []
        self._tool_config: ToolConfig | None = None
        self._ttl: str | None = None
        self._expire_time: str | None = None

    def with_display_name(self, display_name: str) -> CacheBuilder:
        """设置显示名称。

        Raises:
            BuildError: 超过 128 个字符。
        """
        if len(display_name) > MAX_DISPLAY_NAME_CHARS:
            raise BuildError(
                f"Display name is {len(display_name)} characters, "
                f"at most {MAX_DISPLAY_NAME_CHARS} allowed"
            ).with_detail(field="display_name", value=display_name)
        self._display_name = display_name
        return self

    def with_system_instruction(self, text: str) -> CacheBuilder:
        self._system_instruction = Content.system(text)
        return self

    def with_user_message(self, text: str) -> CacheBuilder:
        self._contents.append(Content.user(text))
        return self

    def with_model_message(self, text: str) -> CacheBuilder:
        self._contents.append(Content.model(text))
        return self

    def with_content(self, content: Content) -> CacheBuilder:
        self._contents.append(content)
        return self

    def with_contents(self, contents: Iterable[Content]) -> CacheBuilder:
        self._contents.extend(contents)
        return self

    def with_tool(self, tool: Tool) -> CacheBuilder:
        self._tools.append(tool)
        return self

    def with_tools(self, tools: Iterable[Tool]) -> CacheBuilder:
        self._tools.extend(tools)
        return self

    def with_tool_config(self, tool_config: ToolConfig) -> CacheBuilder:
        self._tool_config = tool_config
        return self

    def with_ttl(self, ttl: timedelta | float) -> CacheBuilder:
        """从创建起的存活时长(秒或 timedelta), 会覆盖 expire_time。"""
        self._ttl = format_ttl(ttl)
        self._expire_time = None
        return self

    def with_expire_time(self, expire_time: datetime) -> CacheBuilder:
        """绝对过期时间, 会覆盖 ttl。"""
        self._expire_time = format_timestamp(expire_time)
        self._ttl = None
        return self

    def build(self) -> CreateCachedContentRequest:
        """生成创建请求。

        Raises:
            BuildError: 未指定过期时间。
        """
        if self._ttl is None and self._expire_time is None:
            raise BuildError("Cache expiration is required").with_detail(
                field="ttl", suggestion="call with_ttl() or with_expire_time()",
            )

        return CreateCachedContentRequest(
            model=self._model,
            display_name=self._display_name,
            system_instruction=self._system_instruction,
            contents=list(self._contents) or None,
            tools=list(self._tools) or None,
            tool_config=self._tool_config,
            ttl=self._ttl,
            expire_time=self._expire_time,
        )

    async def execute(self) -> CachedContentHandle:
        if self._client is None:
            raise ConfigurationError("CacheBuilder is not bound to a client")
        return await self._client.create_cached_content(self.build())


__all__ = ["CacheBuilder", "MAX_DISPLAY_NAME_CHARS"]
