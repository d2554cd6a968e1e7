"""Core 模块 - 线格式类型、响应模型、流解码与错误定义。

客户端入口位于 ``core.client.Gemini``, 流解码位于 ``core.stream``。
"""

from .config import ClientConfig, Model
from .error import (
    ApiError,
    AuthenticationError,
    BatchStateError,
    BuildError,
    ConfigurationError,
    ConnectionError,
    DecodeError,
    GeminiError,
    InvalidRequestError,
    NotFoundError,
    RateLimitError,
    TimeoutError,
    TransportError,
    TruncatedStreamError,
)
from .response import Candidate, FinishReason, GenerateResponse, UsageMetadata
from .safety import HarmBlockThreshold, HarmCategory, SafetySetting
from .types import (
    Blob,
    Content,
    FileData,
    FunctionCall,
    FunctionResponse,
    Part,
    Role,
    TextPart,
)

__all__ = [
    # 类型定义
    "Content",
    "Role",
    "Part",
    "TextPart",
    "Blob",
    "FileData",
    "FunctionCall",
    "FunctionResponse",
    # 安全
    "HarmCategory",
    "HarmBlockThreshold",
    "SafetySetting",
    # 配置
    "ClientConfig",
    "Model",
    # 响应
    "GenerateResponse",
    "Candidate",
    "FinishReason",
    "UsageMetadata",
    # 错误
    "GeminiError",
    "BuildError",
    "ConfigurationError",
    "BatchStateError",
    "TransportError",
    "TimeoutError",
    "ConnectionError",
    "DecodeError",
    "TruncatedStreamError",
    "ApiError",
    "InvalidRequestError",
    "AuthenticationError",
    "NotFoundError",
    "RateLimitError",
]
