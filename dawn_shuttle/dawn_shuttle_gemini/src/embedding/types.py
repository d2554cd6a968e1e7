"""向量嵌入的线格式类型。"""

from __future__ import annotations

from pydantic import field_validator

from ..core.serde import WireEnum, WireModel
from ..core.types import Content


class TaskType(WireEnum):
    """嵌入用途, 影响向量的优化方向。"""

    UNSPECIFIED = "TASK_TYPE_UNSPECIFIED"
    SEMANTIC_SIMILARITY = "SEMANTIC_SIMILARITY"
    CLASSIFICATION = "CLASSIFICATION"
    CLUSTERING = "CLUSTERING"
    RETRIEVAL_DOCUMENT = "RETRIEVAL_DOCUMENT"
    RETRIEVAL_QUERY = "RETRIEVAL_QUERY"
    QUESTION_ANSWERING = "QUESTION_ANSWERING"
    FACT_VERIFICATION = "FACT_VERIFICATION"
    CODE_RETRIEVAL_QUERY = "CODE_RETRIEVAL_QUERY"


class ContentEmbedding(WireModel):
    """嵌入向量, 解码时保证非空。"""

    values: tuple[float, ...]

    @field_validator("values")
    @classmethod
    def _require_values(cls, values: tuple[float, ...]) -> tuple[float, ...]:
        if not values:
            raise ValueError("Embedding has no values")
        return values

    def __len__(self) -> int:
        return len(self.values)


class EmbedContentRequest(WireModel):
    model: str
    content: Content
    task_type: TaskType | None = None
    title: str | None = None
    output_dimensionality: int | None = None


class BatchEmbedContentsRequest(WireModel):
    requests: tuple[EmbedContentRequest, ...]


class EmbedContentResponse(WireModel):
    embedding: ContentEmbedding


class BatchEmbedContentsResponse(WireModel):
    embeddings: tuple[ContentEmbedding, ...]


__all__ = [
    "BatchEmbedContentsRequest",
    "BatchEmbedContentsResponse",
    "ContentEmbedding",
    "EmbedContentRequest",
    "EmbedContentResponse",
    "TaskType",
]
