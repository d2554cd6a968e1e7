"""生成请求与 token 计数。"""

from __future__ import annotations

from ..core.response import ModalityTokenCount
from ..core.safety import SafetySetting
from ..core.serde import WireModel
from ..core.types import Content
from ..tools.types import AnyTool, ToolConfig
from .config import GenerationConfig


class GenerateContentRequest(WireModel):
    """一次 generateContent 请求(不可变)。

    由 ``ContentBuilder.build()`` 生成, 与 builder 不共享可变状态。
    """

    contents: tuple[Content, ...] = ()
    system_instruction: Content | None = None
    tools: tuple[AnyTool, ...] | None = None
    tool_config: ToolConfig | None = None
    safety_settings: tuple[SafetySetting, ...] | None = None
    generation_config: GenerationConfig | None = None
    cached_content: str | None = None
    model: str | None = None
    """仅在嵌套于其他请求(如 countTokens)时填写。"""


class CountTokensRequest(WireModel):
    generate_content_request: GenerateContentRequest


class CountTokensResponse(WireModel):
    """countTokens 的响应。"""

    total_tokens: int = 0
    cached_content_token_count: int | None = None
    prompt_tokens_details: tuple[ModalityTokenCount, ...] | None = None
    cache_tokens_details: tuple[ModalityTokenCount, ...] | None = None


__all__ = [
    "CountTokensRequest",
    "CountTokensResponse",
    "GenerateContentRequest",
]
