"""错误类型定义 - Gemini 客户端统一异常体系。

异常分为五类:
- BuildError: 本地请求构造错误, 永远不会到达网络。
- TransportError: 连接/超时等传输层错误, 原样抛给调用方。
- DecodeError: JSON 结构异常, 携带原始片段便于定位 API 变更。
- ApiError: 非 2xx 响应, 解析出 code/message/status。
- TruncatedStreamError: 流在帧中途结束。

核心层不做任何自动重试。
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """错误代码枚举。"""

    # 构造相关 (1xx)
    BUILD_INVALID = "BUILD_INVALID"
    BATCH_STATE = "BATCH_STATE"
    CONFIG_INVALID = "CONFIG_INVALID"

    # 传输相关 (2xx)
    TRANSPORT = "TRANSPORT"
    TIMEOUT = "TIMEOUT"
    CONNECTION = "CONNECTION"

    # 解析相关 (3xx)
    DECODE_ERROR = "DECODE_ERROR"
    STREAM_TRUNCATED = "STREAM_TRUNCATED"

    # API 相关 (4xx)
    API_ERROR = "API_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"
    AUTH_FAILED = "AUTH_FAILED"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    RATE_LIMIT = "RATE_LIMIT"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    GATEWAY_TIMEOUT = "GATEWAY_TIMEOUT"


@dataclass
class ErrorDetail:
    """错误详情。"""

    field: str | None = None
    """相关字段名。"""

    value: Any = None
    """相关值。"""

    reason: str | None = None
    """具体原因。"""

    suggestion: str | None = None
    """建议解决方案。"""


class GeminiError(Exception):
    """Gemini 客户端基础异常。

    Attributes:
        code: 错误代码。
        message: 错误消息。
        resource: 相关的资源名称(如 ``batches/123``)。
        status_code: HTTP 状态码, 本地错误为 None。
        details: 错误详情, 来自本地校验或 google.rpc.Status 的 details。
        raw_response: 原始错误体。
        cause: 底层异常(如 httpx 的超时)。
    """

    default_code: ErrorCode = ErrorCode.API_ERROR
    default_message: str = "An error occurred"
    user_guide: str = "请检查配置后重试。"

    def __init__(
        self,
        message: str | None = None,
        *,
        code: ErrorCode | None = None,
        resource: str | None = None,
        status_code: int | None = None,
        details: list[ErrorDetail] | None = None,
        raw_response: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.code = code or self.default_code
        self.message = message or self.default_message
        self.resource = resource
        self.status_code = status_code
        self.details = details or []
        self.raw_response = raw_response
        self.cause = cause
        super().__init__(self.message)

    def __str__(self) -> str:
        head = f"[{self.code.value}]"
        if self.status_code:
            head += f" HTTP {self.status_code}"
        if self.resource:
            head += f" {self.resource}:"
        return f"{head} {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value!r}, message={self.message!r})"

    def to_dict(self) -> dict[str, Any]:
        """转换为字典, 便于写入日志。"""
        result: dict[str, Any] = {
            "code": self.code.value,
            "type": self.__class__.__name__,
            "message": self.message,
            "guide": self.user_guide,
        }
        if self.resource:
            result["resource"] = self.resource
        if self.status_code:
            result["status_code"] = self.status_code
        if self.details:
            result["details"] = [asdict(d) for d in self.details]
        return result

    def with_detail(
        self,
        field: str | None = None,
        value: Any = None,
        reason: str | None = None,
        suggestion: str | None = None,
    ) -> GeminiError:
        """添加错误详情并返回 self, 便于链式调用。"""
        self.details.append(ErrorDetail(field=field, value=value, reason=reason, suggestion=suggestion))
        return self


# ============ 本地构造错误 ============


class BuildError(GeminiError):
    """请求构造失败(如对话为空)。不会触发任何网络请求。"""

    default_code = ErrorCode.BUILD_INVALID
    default_message = "Invalid request"
    user_guide = "请检查 builder 调用, 确保必填字段已设置。"


class ConfigurationError(BuildError):
    """客户端配置错误(如缺少 API Key)。"""

    default_code = ErrorCode.CONFIG_INVALID
    default_message = "Configuration error"
    user_guide = "请检查 ClientConfig 是否完整。"


class BatchStateError(BuildError):
    """对处于非终止状态的批任务执行了只允许终止状态的操作。"""

    default_code = ErrorCode.BATCH_STATE
    default_message = "Batch is not in a terminal state"
    user_guide = "请等待批任务结束, 或先调用 cancel()。"


# ============ 传输错误 ============


class TransportError(GeminiError):
    """传输层错误(连接、超时)。原样抛出, 核心层不重试。"""

    default_code = ErrorCode.TRANSPORT
    default_message = "Transport failure"
    user_guide = "请检查网络连接。"


class TimeoutError(TransportError):
    """请求超时。"""

    default_code = ErrorCode.TIMEOUT
    default_message = "Request timed out"
    user_guide = "请求超时, 可在 ClientConfig.timeout 中调整超时时间。"


class ConnectionError(TransportError):
    """连接失败。"""

    default_code = ErrorCode.CONNECTION
    default_message = "Connection failed"
    user_guide = "无法连接到服务器，请检查网络连接或 base_url。"


# ============ 解析错误 ============


class DecodeError(GeminiError):
    """响应 JSON 结构异常。

    Attributes:
        fragment: 触发错误的原始片段。
    """

    default_code = ErrorCode.DECODE_ERROR
    default_message = "Failed to decode response"
    user_guide = "响应格式与预期不符, 可能是 API 发生了变化。"

    def __init__(
        self,
        message: str | None = None,
        *,
        fragment: Any = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.fragment = fragment

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.fragment is not None:
            result["fragment"] = (
                self.fragment if isinstance(self.fragment, str) else repr(self.fragment)
            )
        return result


class TruncatedStreamError(DecodeError):
    """流在一个完整帧结束前就终止了。"""

    default_code = ErrorCode.STREAM_TRUNCATED
    default_message = "Stream ended in the middle of a frame"
    user_guide = "连接被提前关闭, 请重新发起请求。"


# ============ API 错误 ============


class ApiError(GeminiError):
    """API 返回的非 2xx 响应。

    Attributes:
        api_status: Google 风格的状态字符串(如 INVALID_ARGUMENT)。
        api_code: 错误体中的数字代码。
        retry_after: Retry-After 头给出的等待秒数。
    """

    default_code = ErrorCode.API_ERROR
    default_message = "API request failed"
    user_guide = "请根据错误消息检查请求参数。"

    def __init__(
        self,
        message: str | None = None,
        *,
        api_status: str | None = None,
        api_code: int | None = None,
        retry_after: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.api_status = api_status
        self.api_code = api_code
        self.retry_after = retry_after

    def __str__(self) -> str:
        text = super().__str__()
        if self.api_status:
            text += f" ({self.api_status})"
        return text

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.api_status:
            result["api_status"] = self.api_status
        if self.retry_after:
            result["retry_after"] = self.retry_after
        return result


class InvalidRequestError(ApiError):
    """请求参数无效(400)。"""

    default_code = ErrorCode.INVALID_REQUEST
    default_message = "Invalid request"
    user_guide = "请检查请求参数是否符合 API 要求。"


class AuthenticationError(ApiError):
    """认证失败(401/403)。"""

    default_code = ErrorCode.AUTH_FAILED
    default_message = "Authentication failed"
    user_guide = "请检查 API Key 是否正确，或重新生成 API Key。"


class NotFoundError(ApiError):
    """资源或模型不存在(404)。"""

    default_code = ErrorCode.NOT_FOUND
    default_message = "Resource not found"
    user_guide = "请检查模型名称或资源名称是否正确。"


class ConflictError(ApiError):
    """资源状态冲突(409)。"""

    default_code = ErrorCode.CONFLICT
    default_message = "Resource conflict"
    user_guide = "资源当前状态不允许该操作。"


class RateLimitError(ApiError):
    """速率限制或配额耗尽(429)。"""

    default_code = ErrorCode.RATE_LIMIT
    default_message = "Rate limit exceeded"
    user_guide = "请等待后重试，或升级账户以获得更高的速率限制。"


class InternalServerError(ApiError):
    """服务器内部错误(500)。"""

    default_code = ErrorCode.INTERNAL_ERROR
    default_message = "Internal server error"
    user_guide = "服务器内部错误，请稍后重试。"


class ServiceUnavailableError(ApiError):
    """服务不可用(502/503)。"""

    default_code = ErrorCode.SERVICE_UNAVAILABLE
    default_message = "Service unavailable"
    user_guide = "服务暂时不可用，请稍后重试。"


class GatewayTimeoutError(ApiError):
    """服务端处理超时(504)。"""

    default_code = ErrorCode.GATEWAY_TIMEOUT
    default_message = "Gateway timeout"
    user_guide = "服务端处理超时，请缩短输入或稍后重试。"


__all__ = [
    "ApiError",
    "AuthenticationError",
    "BatchStateError",
    "BuildError",
    "ConfigurationError",
    "ConflictError",
    "ConnectionError",
    "DecodeError",
    "ErrorCode",
    "ErrorDetail",
    "GatewayTimeoutError",
    "GeminiError",
    "InternalServerError",
    "InvalidRequestError",
    "NotFoundError",
    "RateLimitError",
    "ServiceUnavailableError",
    "TimeoutError",
    "TransportError",
    "TruncatedStreamError",
]
