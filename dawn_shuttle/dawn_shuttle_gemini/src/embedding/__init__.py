"""Embedding 模块 - 文本向量。"""

from .builder import EmbedBuilder
from .types import (
    BatchEmbedContentsResponse,
    ContentEmbedding,
    EmbedContentResponse,
    TaskType,
)

__all__ = [
    "BatchEmbedContentsResponse",
    "ContentEmbedding",
    "EmbedBuilder",
    "EmbedContentResponse",
    "TaskType",
]
