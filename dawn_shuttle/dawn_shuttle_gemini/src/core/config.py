"""客户端配置。"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .error import ConfigurationError

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/"
DEFAULT_UPLOAD_BASE_URL = "https://generativelanguage.googleapis.com/upload/v1beta/"
DEFAULT_TIMEOUT = 120.0


class Model(str, Enum):
    """常用模型名称。任意字符串同样可以作为模型名使用。"""

    GEMINI_25_FLASH = "models/gemini-2.5-flash"
    GEMINI_25_FLASH_LITE = "models/gemini-2.5-flash-lite"
    GEMINI_25_PRO = "models/gemini-2.5-pro"
    GEMINI_3_PRO_PREVIEW = "models/gemini-3-pro-preview"
    TEXT_EMBEDDING_004 = "models/text-embedding-004"
    GEMINI_EMBEDDING_001 = "models/gemini-embedding-001"


def normalize_model(model: str | Model) -> str:
    """补全 ``models/`` 前缀。"""
    name = model.value if isinstance(model, Model) else model
    return name if name.startswith("models/") else f"models/{name}"


@dataclass
class ClientConfig:
    """客户端配置。

    Attributes:
        api_key: API 密钥, 通过 x-goog-api-key 头发送。
        model: 默认模型(自动补全 ``models/`` 前缀)。
        base_url: API 端点。
        upload_base_url: 文件上传端点。
        timeout: 请求超时(秒), 交给传输层处理。
        headers: 额外的请求头。
    """

    api_key: str = ""
    model: str | Model = Model.GEMINI_25_FLASH
    base_url: str = DEFAULT_BASE_URL
    upload_base_url: str = DEFAULT_UPLOAD_BASE_URL
    timeout: float | None = DEFAULT_TIMEOUT
    headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.model = normalize_model(self.model)
        if not self.base_url.endswith("/"):
            self.base_url += "/"
        if not self.upload_base_url.endswith("/"):
            self.upload_base_url += "/"

    def validate(self) -> None:
        """校验配置。

        Raises:
            ConfigurationError: 缺少 API Key 或超时无效。
        """
        if not self.api_key:
            raise ConfigurationError("API key is required").with_detail(
                field="api_key", reason="empty",
            )
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigurationError(
                f"timeout must be positive, got {self.timeout}"
            ).with_detail(field="timeout", value=self.timeout)

    def to_dict(self) -> dict[str, Any]:
        """转换为字典(不包含 API Key)。"""
        result: dict[str, Any] = {
            "model": self.model,
            "base_url": self.base_url,
            "upload_base_url": self.upload_base_url,
        }
        if self.timeout is not None:
            result["timeout"] = self.timeout
        if self.headers:
            result["headers"] = dict(self.headers)
        return result


__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_UPLOAD_BASE_URL",
    "ClientConfig",
    "Model",
    "normalize_model",
]
