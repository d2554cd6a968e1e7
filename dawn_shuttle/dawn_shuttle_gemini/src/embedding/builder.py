"""EmbedBuilder - 构造嵌入请求。"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from ..core.error import BuildError, ConfigurationError
from ..core.types import Content, TextPart
from .types import (
    BatchEmbedContentsRequest,
    BatchEmbedContentsResponse,
    EmbedContentRequest,
    EmbedContentResponse,
    TaskType,
)

if TYPE_CHECKING:
    from ..core.client import Gemini


class EmbedBuilder:
    """嵌入请求构造器。

    ``execute()`` 把所有文本作为同一内容的多个片段, 返回一个向量;
    ``execute_batch()`` 为每段文本各返回一个向量。

    Example:
        >>> response = await (
        ...     client.embed_content()
        ...     .with_chunks(["Hello", "World"])
        ...     .with_task_type(TaskType.RETRIEVAL_DOCUMENT)
        ...     .execute_batch()
        ... )
    """

    def __init__(self, model: str, client: Gemini | None = None) -> None:
        self._client = client
        self._model = model
        self._chunks: list[str] = []
        self._task_type: TaskType | None = None
        self._title: str | None = None
        self._output_dimensionality: int | None = None

    def with_text(self, text: str) -> EmbedBuilder:
        self._chunks = [text]
        return self

    def with_chunks(self, chunks: Iterable[str]) -> EmbedBuilder:
        self._chunks = list(chunks)
        return self

    def with_task_type(self, task_type: TaskType) -> EmbedBuilder:
        self._task_type = task_type
        return self

    def with_title(self, title: str) -> EmbedBuilder:
        """文档标题, 仅在 RETRIEVAL_DOCUMENT 任务下有效。"""
        self._title = title
        return self

    def with_output_dimensionality(self, dimensions: int) -> EmbedBuilder:
        if dimensions <= 0:
            raise BuildError(f"output_dimensionality must be positive, got {dimensions}")
        self._output_dimensionality = dimensions
        return self

    def _request(self, content: Content) -> EmbedContentRequest:
        return EmbedContentRequest(
            model=self._model,
            content=content,
            task_type=self._task_type,
            title=self._title,
            output_dimensionality=self._output_dimensionality,
        )

    def _check_chunks(self) -> None:
        if not self._chunks:
            raise BuildError("Embedding request has no text").with_detail(
                field="content", reason="empty",
            )

    def build(self) -> EmbedContentRequest:
        self._check_chunks()
        return self._request(Content(parts=[TextPart(text=t) for t in self._chunks]))

    def build_batch(self) -> BatchEmbedContentsRequest:
        self._check_chunks()
        return BatchEmbedContentsRequest(requests=[
            self._request(Content(parts=[TextPart(text=t)])) for t in self._chunks
        ])

    def _require_client(self) -> Gemini:
        if self._client is None:
            raise ConfigurationError("EmbedBuilder is not bound to a client")
        return self._client

    async def execute(self) -> EmbedContentResponse:
        return await self._require_client().embed(self.build())

    async def execute_batch(self) -> BatchEmbedContentsResponse:
        return await self._require_client().batch_embed(self.build_batch())


__all__ = ["EmbedBuilder"]
