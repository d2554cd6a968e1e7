"""传输层基类与错误映射。"""

from __future__ import annotations

import contextlib
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any

from ..core.error import (
    ApiError,
    AuthenticationError,
    ConflictError,
    ErrorDetail,
    GatewayTimeoutError,
    InternalServerError,
    InvalidRequestError,
    NotFoundError,
    RateLimitError,
    ServiceUnavailableError,
)

_ERROR_MAP: dict[int, type[ApiError]] = {
    400: InvalidRequestError,
    401: AuthenticationError,
    403: AuthenticationError,
    404: NotFoundError,
    409: ConflictError,
    429: RateLimitError,
    500: InternalServerError,
    502: ServiceUnavailableError,
    503: ServiceUnavailableError,
    504: GatewayTimeoutError,
}


def map_status_code_to_error(
    status_code: int | None,
    message: str,
    *,
    api_status: str | None = None,
    api_code: int | None = None,
    retry_after: int | None = None,
    details: list[ErrorDetail] | None = None,
    raw_response: dict[str, Any] | None = None,
    cause: Exception | None = None,
) -> ApiError:
    """根据 HTTP 状态码映射到具体错误类型。

    Args:
        status_code: HTTP 状态码。
        message: 错误消息。
        api_status: 错误体中的 status 字符串。
        api_code: 错误体中的数字代码。
        retry_after: Retry-After 秒数。
        details: 错误详情。
        raw_response: 原始错误体。
        cause: 原始异常。

    Returns:
        具体的错误类型实例。
    """
    error_class: type[ApiError] = ApiError
    if status_code is not None:
        error_class = _ERROR_MAP.get(status_code, ApiError)
        if error_class is ApiError and status_code >= 500:
            error_class = InternalServerError

    return error_class(
        message,
        status_code=status_code,
        api_status=api_status,
        api_code=api_code,
        retry_after=retry_after,
        details=details,
        raw_response=raw_response,
        cause=cause,
    )


def error_from_payload(
    payload: Any,
    *,
    status_code: int | None = None,
    retry_after: int | None = None,
) -> ApiError:
    """从 Google 风格的错误体构造异常。

    错误体形如 ``{"error": {"code": 400, "message": "...", "status": "INVALID_ARGUMENT"}}``,
    不符合该结构时以原始内容作为消息。
    """
    error = payload.get("error") if isinstance(payload, dict) else None
    if not isinstance(error, dict):
        message = str(payload) if payload else f"HTTP {status_code}"
        return map_status_code_to_error(
            status_code, message, retry_after=retry_after,
            raw_response=payload if isinstance(payload, dict) else None,
        )

    api_code = error.get("code") if isinstance(error.get("code"), int) else None
    details = [
        ErrorDetail(field=d.get("@type"), value=d, reason=d.get("reason"))
        for d in error.get("details") or []
        if isinstance(d, dict)
    ]

    return map_status_code_to_error(
        status_code if status_code is not None else api_code,
        str(error.get("message") or f"HTTP {status_code}"),
        api_status=error.get("status"),
        api_code=api_code,
        retry_after=retry_after,
        details=details,
        raw_response=payload,
    )


def parse_retry_after(value: str | None) -> int | None:
    """解析 Retry-After 头(仅支持秒数形式)。"""
    if not value:
        return None
    with contextlib.suppress(ValueError):
        return int(value)
    return None


class BaseTransport(ABC):
    """传输层基类, 负责鉴权、端点解析与 HTTP 交互。

    路径均相对于 base_url, 例如 ``models/gemini-2.5-flash:generateContent``。

    Attributes:
        name: 传输层标识。
    """

    name: str = "base"

    @abstractmethod
    async def request(
        self,
        method: str,
        path: str,
        *,
        body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """发送请求并返回解码后的 JSON 对象(空响应体返回空字典)。

        Raises:
            TransportError: 连接失败或超时。
            ApiError: 非 2xx 响应。
            DecodeError: 响应体不是 JSON 对象。
        """

    @abstractmethod
    def stream(
        self,
        method: str,
        path: str,
        *,
        body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> AsyncIterator[bytes]:
        """发送请求并以字节块形式返回响应体。

        迭代器被关闭时释放连接。
        """

    @abstractmethod
    async def upload(
        self,
        data: bytes,
        *,
        mime_type: str,
        metadata: dict[str, Any] | None = None,
        path: str = "files",
    ) -> dict[str, Any]:
        """以可续传协议上传文件内容, 返回最终响应的 JSON 对象。"""

    async def aclose(self) -> None:
        """释放底层连接。"""

    async def __aenter__(self) -> BaseTransport:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


__all__ = [
    "BaseTransport",
    "error_from_payload",
    "map_status_code_to_error",
    "parse_retry_after",
]
