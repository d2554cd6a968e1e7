"""基于 httpx 的默认传输层实现。"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from typing import Any

import httpx
from loguru import logger

from ..core.config import ClientConfig
from ..core.error import (
    ApiError,
    ConnectionError,
    DecodeError,
    TimeoutError,
    TransportError,
)
from .base import BaseTransport, error_from_payload, parse_retry_after

API_KEY_HEADER = "x-goog-api-key"


class HttpxTransport(BaseTransport):
    """使用 ``httpx.AsyncClient`` 访问 Gemini REST API。

    Example:
        >>> transport = HttpxTransport(ClientConfig(api_key="..."))
        >>> data = await transport.request("GET", "batches")
        >>> await transport.aclose()

    Attributes:
        config: 客户端配置。
    """

    name = "httpx"

    def __init__(
        self,
        config: ClientConfig,
        *,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """初始化传输层。

        Args:
            config: 客户端配置。
            client: 外部提供的 AsyncClient(由调用方负责关闭)。
            transport: 自定义 httpx 传输(测试中常用 ``httpx.MockTransport``)。
        """
        config.validate()
        self.config = config
        self._owns_client = client is None

        if client is None:
            client = httpx.AsyncClient(
                base_url=config.base_url,
                timeout=config.timeout,
                transport=transport,
            )
        self._client = client

    def _headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {API_KEY_HEADER: self.config.api_key, **self.config.headers}
        if extra:
            headers.update(extra)
        return headers

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return self.config.base_url + path.lstrip("/")

    async def _send(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise TimeoutError(str(e) or "Request timed out", cause=e) from e
        except (httpx.ConnectError, httpx.NetworkError) as e:
            raise ConnectionError(str(e) or "Connection failed", cause=e) from e
        except httpx.HTTPError as e:
            raise TransportError(str(e), cause=e) from e

        if response.status_code >= 400:
            raise _error_from_response(response)
        return response

    async def request(
        self,
        method: str,
        path: str,
        *,
        body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        logger.debug(f"{method} {path}")
        response = await self._send(
            method,
            self._url(path),
            json=body,
            params=_clean_params(params),
            headers=self._headers(),
        )
        return _json_object(response)

    async def stream(
        self,
        method: str,
        path: str,
        *,
        body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> AsyncIterator[bytes]:
        logger.debug(f"{method} {path} (stream)")
        try:
            async with self._client.stream(
                method,
                self._url(path),
                json=body,
                params=_clean_params(params),
                headers=self._headers(),
            ) as response:
                if response.status_code >= 400:
                    await response.aread()
                    raise _error_from_response(response)
                async for chunk in response.aiter_bytes():
                    yield chunk
        except httpx.TimeoutException as e:
            raise TimeoutError(str(e) or "Stream timed out", cause=e) from e
        except (httpx.ConnectError, httpx.NetworkError) as e:
            raise ConnectionError(str(e) or "Connection failed", cause=e) from e
        except httpx.HTTPError as e:
            raise TransportError(str(e), cause=e) from e

    async def upload(
        self,
        data: bytes,
        *,
        mime_type: str,
        metadata: dict[str, Any] | None = None,
        path: str = "files",
    ) -> dict[str, Any]:
        start_url = self.config.upload_base_url + path.lstrip("/")
        logger.debug(f"POST upload/{path} ({len(data)} bytes, {mime_type})")

        start = await self._send(
            "POST",
            start_url,
            json=metadata or {},
            headers=self._headers({
                "X-Goog-Upload-Protocol": "resumable",
                "X-Goog-Upload-Command": "start",
                "X-Goog-Upload-Header-Content-Length": str(len(data)),
                "X-Goog-Upload-Header-Content-Type": mime_type,
            }),
        )

        upload_url = start.headers.get("x-goog-upload-url")
        if not upload_url:
            raise DecodeError(
                "Upload start response is missing the X-Goog-Upload-URL header",
                fragment=dict(start.headers),
            )

        response = await self._send(
            "POST",
            upload_url,
            content=data,
            headers=self._headers({
                "X-Goog-Upload-Command": "upload, finalize",
                "X-Goog-Upload-Offset": "0",
                "Content-Length": str(len(data)),
            }),
        )
        return _json_object(response)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def _clean_params(params: dict[str, Any] | None) -> dict[str, Any] | None:
    if not params:
        return None
    return {k: v for k, v in params.items() if v is not None}


def _json_object(response: httpx.Response) -> dict[str, Any]:
    if not response.content:
        return {}
    try:
        data = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodeError(f"Response is not valid JSON: {e}", fragment=response.text) from e
    if not isinstance(data, dict):
        raise DecodeError("Expected JSON object in response", fragment=response.text)
    return data


def _error_from_response(response: httpx.Response) -> ApiError:
    retry_after = parse_retry_after(response.headers.get("retry-after"))
    try:
        payload: Any = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        payload = response.text
    return error_from_payload(payload, status_code=response.status_code, retry_after=retry_after)


__all__ = ["API_KEY_HEADER", "HttpxTransport"]
