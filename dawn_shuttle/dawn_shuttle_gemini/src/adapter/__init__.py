"""Adapter 模块 - 传输层。"""

from .base import BaseTransport, error_from_payload, map_status_code_to_error
from .http import HttpxTransport

__all__ = [
    "BaseTransport",
    "HttpxTransport",
    "error_from_payload",
    "map_status_code_to_error",
]
