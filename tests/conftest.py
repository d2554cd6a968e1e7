"""测试配置和共享 fixtures。"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

import pytest

from dawn_shuttle.dawn_shuttle_gemini.src.adapter.base import BaseTransport
from dawn_shuttle.dawn_shuttle_gemini.src.core.client import Gemini


class FakeTransport(BaseTransport):
    """按顺序返回预置响应并记录调用的传输层。

    预置响应为异常实例时直接抛出。
    """

    name = "fake"

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.responses: list[Any] = []
        self.chunks: list[bytes] = []
        self.closed = False

    def queue(self, *responses: Any) -> FakeTransport:
        self.responses.extend(responses)
        return self

    def _next(self) -> dict[str, Any]:
        if not self.responses:
            return {}
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def request(
        self,
        method: str,
        path: str,
        *,
        body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        self.calls.append({"method": method, "path": path, "body": body, "params": params})
        return self._next()

    async def stream(
        self,
        method: str,
        path: str,
        *,
        body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> AsyncIterator[bytes]:
        self.calls.append({"method": method, "path": path, "body": body, "params": params})
        for chunk in self.chunks:
            yield chunk

    async def upload(
        self,
        data: bytes,
        *,
        mime_type: str,
        metadata: dict[str, Any] | None = None,
        path: str = "files",
    ) -> dict[str, Any]:
        self.calls.append({
            "method": "UPLOAD",
            "path": path,
            "body": metadata,
            "params": {"mime_type": mime_type, "size": len(data)},
        })
        return self._next()

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def transport() -> FakeTransport:
    """返回记录调用的传输层。"""
    return FakeTransport()


@pytest.fixture
def client(transport: FakeTransport) -> Gemini:
    """返回绑定到 FakeTransport 的客户端。"""
    return Gemini(api_key="test-key", transport=transport)


@pytest.fixture
def text_response_dict() -> dict[str, Any]:
    """返回单候选文本响应。"""
    return {
        "candidates": [
            {
                "content": {"role": "model", "parts": [{"text": "4"}]},
                "finishReason": "STOP",
                "index": 0,
            }
        ],
        "usageMetadata": {
            "promptTokenCount": 8,
            "candidatesTokenCount": 1,
            "totalTokenCount": 9,
        },
        "modelVersion": "gemini-2.5-flash",
        "responseId": "resp-1",
    }
