"""Generation 模块 - 生成请求与构造器。"""

from .builder import ContentBuilder
from .config import (
    GenerationConfig,
    Modality,
    SpeechConfig,
    ThinkingConfig,
    ThinkingLevel,
)
from .request import CountTokensResponse, GenerateContentRequest

__all__ = [
    "ContentBuilder",
    "CountTokensResponse",
    "GenerateContentRequest",
    "GenerationConfig",
    "Modality",
    "SpeechConfig",
    "ThinkingConfig",
    "ThinkingLevel",
]
