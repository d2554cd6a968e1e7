"""响应模型 - 生成响应的线格式结构及派生视图。

``GenerationResponse`` 是 API 返回的原始结构; ``GenerateResponse``
在其上提供 text / function_calls / thoughts 等派生视图。派生视图在
任何字段缺失时都不会抛出异常, 只返回空值。
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from .safety import BlockReason, PromptFeedback, SafetyRating
from .serde import WireEnum, WireModel
from .types import Blob, Content, FunctionCall, FunctionCallPart, InlineDataPart, Part, TextPart


class FinishReason(WireEnum):
    """候选结束原因。"""

    UNSPECIFIED = "FINISH_REASON_UNSPECIFIED"
    STOP = "STOP"
    MAX_TOKENS = "MAX_TOKENS"
    SAFETY = "SAFETY"
    RECITATION = "RECITATION"
    LANGUAGE = "LANGUAGE"
    OTHER = "OTHER"
    BLOCKLIST = "BLOCKLIST"
    PROHIBITED_CONTENT = "PROHIBITED_CONTENT"
    SPII = "SPII"
    MALFORMED_FUNCTION_CALL = "MALFORMED_FUNCTION_CALL"
    IMAGE_SAFETY = "IMAGE_SAFETY"
    UNEXPECTED_TOOL_CALL = "UNEXPECTED_TOOL_CALL"
    TOO_MANY_TOOL_CALLS = "TOO_MANY_TOOL_CALLS"


_BLOCKING_FINISH_REASONS = frozenset({
    FinishReason.SAFETY,
    FinishReason.BLOCKLIST,
    FinishReason.PROHIBITED_CONTENT,
    FinishReason.SPII,
    FinishReason.IMAGE_SAFETY,
})


class CitationSource(WireModel):
    start_index: int | None = None
    end_index: int | None = None
    uri: str | None = None
    title: str | None = None
    license: str | None = None


class CitationMetadata(WireModel):
    citation_sources: tuple[CitationSource, ...] | None = None


class GroundingMetadata(WireModel):
    """检索增强(Google Search / Maps / 文件检索)的来源信息。"""

    web_search_queries: tuple[str, ...] | None = None
    grounding_chunks: tuple[dict[str, Any], ...] | None = None
    grounding_supports: tuple[dict[str, Any], ...] | None = None
    search_entry_point: dict[str, Any] | None = None
    retrieval_metadata: dict[str, Any] | None = None
    google_maps_widget_context_token: str | None = None


class Candidate(WireModel):
    """单个候选回复。"""

    content: Content | None = None
    finish_reason: FinishReason | None = None
    finish_message: str | None = None
    safety_ratings: tuple[SafetyRating, ...] | None = None
    citation_metadata: CitationMetadata | None = None
    grounding_metadata: GroundingMetadata | None = None
    url_context_metadata: dict[str, Any] | None = None
    token_count: int | None = None
    avg_logprobs: float | None = None
    index: int | None = None

    @property
    def parts(self) -> list[Part]:
        if self.content is None or self.content.parts is None:
            return []
        return list(self.content.parts)


class ModalityTokenCount(WireModel):
    modality: str | None = None
    token_count: int | None = None


class UsageMetadata(WireModel):
    """Token 使用统计。"""

    prompt_token_count: int | None = None
    candidates_token_count: int | None = None
    total_token_count: int | None = None
    thoughts_token_count: int | None = None
    cached_content_token_count: int | None = None
    tool_use_prompt_token_count: int | None = None
    prompt_tokens_details: tuple[ModalityTokenCount, ...] | None = None
    candidates_tokens_details: tuple[ModalityTokenCount, ...] | None = None


class GenerationResponse(WireModel):
    """generateContent 的原始响应结构。"""

    candidates: tuple[Candidate, ...] | None = None
    prompt_feedback: PromptFeedback | None = None
    usage_metadata: UsageMetadata | None = None
    model_version: str | None = None
    response_id: str | None = None


@dataclass(frozen=True)
class GenerateResponse:
    """生成响应。

    Example:
        >>> response = await client.generate_content().with_user_message("Hi").execute()
        >>> print(response.text())
        >>> for call in response.function_calls():
        ...     print(call.name, call.args)
    """

    raw: GenerationResponse

    @classmethod
    def from_dict(cls, data: Any) -> GenerateResponse:
        return cls(raw=GenerationResponse.from_dict(data))

    def to_dict(self) -> dict[str, Any]:
        """还原为 API JSON。"""
        return self.raw.to_dict()

    # ============ 字段访问 ============

    @property
    def candidates(self) -> list[Candidate]:
        return list(self.raw.candidates or ())

    @property
    def first_candidate(self) -> Candidate | None:
        candidates = self.candidates
        return candidates[0] if candidates else None

    @property
    def finish_reason(self) -> FinishReason | None:
        candidate = self.first_candidate
        return candidate.finish_reason if candidate else None

    @property
    def usage_metadata(self) -> UsageMetadata | None:
        return self.raw.usage_metadata

    @property
    def prompt_feedback(self) -> PromptFeedback | None:
        return self.raw.prompt_feedback

    @property
    def model_version(self) -> str | None:
        return self.raw.model_version

    @property
    def response_id(self) -> str | None:
        return self.raw.response_id

    @property
    def block_reason(self) -> BlockReason | None:
        feedback = self.raw.prompt_feedback
        return feedback.block_reason if feedback else None

    @property
    def is_blocked(self) -> bool:
        """提示词被拦截, 或首个候选因安全原因终止。"""
        if self.block_reason is not None:
            return True
        return self.finish_reason in _BLOCKING_FINISH_REASONS

    # ============ 派生视图 ============

    def _first_parts(self) -> list[Part]:
        candidate = self.first_candidate
        return candidate.parts if candidate else []

    def text(self) -> str:
        """首个候选中所有非思考文本片段的拼接, 无内容时返回空字符串。"""
        return _joined_text(self._first_parts())

    def all_text(self) -> str:
        """所有候选的文本, 以换行分隔。"""
        return "\n".join(_joined_text(c.parts) for c in self.candidates)

    def function_calls(self) -> Iterator[FunctionCall]:
        """首个候选中的函数调用(按出现顺序)。"""
        for part in self._first_parts():
            if isinstance(part, FunctionCallPart):
                yield part.function_call

    def function_calls_with_thoughts(self) -> Iterator[tuple[FunctionCall, str | None]]:
        """函数调用及其思考签名, 回传模型时需要原样携带签名。"""
        for part in self._first_parts():
            if isinstance(part, FunctionCallPart):
                yield part.function_call, part.thought_signature

    def thoughts(self) -> Iterator[str]:
        """首个候选中被标记为思考的文本。"""
        for part in self._first_parts():
            if isinstance(part, TextPart) and part.is_thought:
                yield part.text

    def inline_data(self) -> Iterator[Blob]:
        """首个候选中的内联数据(如生成的图片或音频)。"""
        for part in self._first_parts():
            if isinstance(part, InlineDataPart):
                yield part.inline_data


def _joined_text(parts: list[Part]) -> str:
    return "".join(
        p.text for p in parts
        if isinstance(p, TextPart) and not p.is_thought
    )


__all__ = [
    "Candidate",
    "CitationMetadata",
    "CitationSource",
    "FinishReason",
    "GenerateResponse",
    "GenerationResponse",
    "GroundingMetadata",
    "ModalityTokenCount",
    "UsageMetadata",
]
