"""Gemini 客户端入口。

所有网络调用都经过 ``BaseTransport``, 默认使用基于 httpx 的实现。
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import replace
from typing import Any

from loguru import logger

from ..adapter.base import BaseTransport
from ..adapter.http import HttpxTransport
from ..batch.builder import BatchBuilder
from ..batch.handle import Batch
from ..batch.types import (
    BatchGenerateContentRequest,
    BatchOperation,
    BatchPage,
    ListBatchesResponse,
)
from ..cache.builder import CacheBuilder
from ..cache.handle import CachedContentHandle
from ..cache.types import (
    CachedContent,
    CreateCachedContentRequest,
    ListCachedContentsResponse,
)
from ..embedding.builder import EmbedBuilder
from ..embedding.types import (
    BatchEmbedContentsRequest,
    BatchEmbedContentsResponse,
    EmbedContentRequest,
    EmbedContentResponse,
)
from ..file_search.builder import FileSearchStoreBuilder
from ..file_search.handle import FileSearchStoreHandle
from ..file_search.types import (
    CreateFileSearchStoreRequest,
    FileSearchStore,
    ListFileSearchStoresResponse,
)
from ..files.handle import FileHandle
from ..files.types import File, ListFilesResponse
from ..generation.builder import ContentBuilder
from ..generation.request import (
    CountTokensRequest,
    CountTokensResponse,
    GenerateContentRequest,
)
from .config import ClientConfig, Model, normalize_model
from .error import DecodeError
from .response import GenerateResponse
from .stream import StreamFraming, decode_stream


def _resource_name(collection: str, name: str) -> str:
    """补全资源前缀, 例如 ``abc`` -> ``batches/abc``。"""
    prefix = f"{collection}/"
    return name if name.startswith(prefix) else prefix + name


class Gemini:
    """Gemini API 客户端。

    Example:
        >>> async with Gemini(api_key="...") as client:
        ...     response = await (
        ...         client.generate_content()
        ...         .with_system_prompt("You are terse.")
        ...         .with_user_message("2+2?")
        ...         .execute()
        ...     )
        ...     print(response.text())

    Attributes:
        config: 客户端配置。
        transport: 传输层。
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        model: str | Model | None = None,
        config: ClientConfig | None = None,
        transport: BaseTransport | None = None,
    ) -> None:
        """初始化客户端。

        Args:
            api_key: API 密钥, 覆盖 config 中的值。
            model: 默认模型, 覆盖 config 中的值。
            config: 客户端配置。
            transport: 自定义传输层, 未提供时使用 ``HttpxTransport``。

        Raises:
            ConfigurationError: 使用默认传输层且配置无效。
        """
        config = config or ClientConfig()
        if api_key is not None:
            config = replace(config, api_key=api_key)
        if model is not None:
            config = replace(config, model=model)
        self.config = config
        self.transport = transport or HttpxTransport(config)
        logger.debug(f"Gemini client ready: model={config.model}, transport={self.transport.name}")

    @property
    def model(self) -> str:
        return str(self.config.model)

    def _model(self, model: str | Model | None) -> str:
        return normalize_model(model) if model is not None else self.model

    async def aclose(self) -> None:
        await self.transport.aclose()

    async def __aenter__(self) -> Gemini:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"Gemini(model={self.model!r})"

    # ============ 构造器 ============

    def generate_content(self, model: str | Model | None = None) -> ContentBuilder:
        return ContentBuilder(self, self._model(model))

    def embed_content(self, model: str | Model | None = None) -> EmbedBuilder:
        return EmbedBuilder(self._model(model or Model.GEMINI_EMBEDDING_001), self)

    def batch_generate_content(self, model: str | Model | None = None) -> BatchBuilder:
        return BatchBuilder(self._model(model), self)

    def create_cache(self, model: str | Model | None = None) -> CacheBuilder:
        return CacheBuilder(self._model(model), self)

    def create_file_search_store(self) -> FileSearchStoreBuilder:
        return FileSearchStoreBuilder(self)

    # ============ 生成 ============

    async def generate(
        self,
        request: GenerateContentRequest,
        *,
        model: str | None = None,
    ) -> GenerateResponse:
        """单次生成。

        Raises:
            ApiError: 服务端返回错误。
            TransportError: 网络错误或超时。
            DecodeError: 响应无法解码。
        """
        model = self._model(model or request.model)
        data = await self.transport.request(
            "POST", f"{model}:generateContent", body=request.to_dict(),
        )
        response = GenerateResponse.from_dict(data)
        if response.is_blocked:
            logger.warning(f"Prompt blocked: {response.block_reason}")
        return response

    def generate_stream(
        self,
        request: GenerateContentRequest,
        *,
        model: str | None = None,
    ) -> AsyncIterator[GenerateResponse]:
        """流式生成, 每个 SSE 事件对应一个响应片段。

        迭代器只能遍历一次, 提前退出时连接随之关闭。
        """
        model = self._model(model or request.model)
        source = self.transport.stream(
            "POST",
            f"{model}:streamGenerateContent",
            body=request.to_dict(),
            params={"alt": "sse"},
        )
        return decode_stream(source, StreamFraming.SSE)

    async def count_tokens(
        self,
        request: GenerateContentRequest,
        *,
        model: str | None = None,
    ) -> CountTokensResponse:
        model = self._model(model or request.model)
        body = CountTokensRequest(generate_content_request=request.replace(model=model))
        data = await self.transport.request("POST", f"{model}:countTokens", body=body.to_dict())
        return CountTokensResponse.from_dict(data)

    # ============ 向量 ============

    async def embed(self, request: EmbedContentRequest) -> EmbedContentResponse:
        model = self._model(request.model)
        data = await self.transport.request(
            "POST", f"{model}:embedContent", body=request.to_dict(),
        )
        return EmbedContentResponse.from_dict(data)

    async def batch_embed(self, request: BatchEmbedContentsRequest) -> BatchEmbedContentsResponse:
        model = self._model(request.requests[0].model if request.requests else None)
        data = await self.transport.request(
            "POST", f"{model}:batchEmbedContents", body=request.to_dict(),
        )
        return BatchEmbedContentsResponse.from_dict(data)

    # ============ 批处理 ============

    async def submit_batch(
        self,
        request: BatchGenerateContentRequest,
        *,
        model: str | None = None,
    ) -> Batch:
        """提交批任务, 返回可轮询的句柄。"""
        model = self._model(model)
        data = await self.transport.request(
            "POST", f"{model}:batchGenerateContent", body=request.to_dict(),
        )
        operation = BatchOperation.from_dict(data)
        logger.info(f"Batch submitted: {operation.name}")
        return Batch(operation.name, self.transport)

    def get_batch(self, name: str) -> Batch:
        """按名称取得批任务句柄, 不发起请求。"""
        return Batch(_resource_name("batches", name), self.transport)

    async def list_batches(
        self,
        page_size: int | None = None,
        page_token: str | None = None,
    ) -> BatchPage:
        data = await self.transport.request(
            "GET", "batches", params={"pageSize": page_size, "pageToken": page_token},
        )
        page = ListBatchesResponse.from_dict(data)
        return BatchPage(operations=list(page.operations or ()), next_page_token=page.next_page_token)

    async def iter_batches(self, page_size: int | None = None) -> AsyncIterator[BatchOperation]:
        """逐页遍历所有批任务。"""
        page_token: str | None = None
        while True:
            page = await self.list_batches(page_size, page_token)
            for operation in page.operations:
                yield operation
            page_token = page.next_page_token
            if not page_token:
                return

    # ============ 缓存 ============

    async def create_cached_content(self, request: CreateCachedContentRequest) -> CachedContentHandle:
        data = await self.transport.request("POST", "cachedContents", body=request.to_dict())
        cached = CachedContent.from_dict(data)
        if not cached.name:
            raise DecodeError("Cached content response has no name", fragment=data)
        logger.info(f"Cached content created: {cached.name}")
        return CachedContentHandle(cached.name, self.transport)

    def get_cache(self, name: str) -> CachedContentHandle:
        return CachedContentHandle(_resource_name("cachedContents", name), self.transport)

    async def list_caches(
        self,
        page_size: int | None = None,
        page_token: str | None = None,
    ) -> tuple[list[CachedContent], str | None]:
        data = await self.transport.request(
            "GET", "cachedContents", params={"pageSize": page_size, "pageToken": page_token},
        )
        page = ListCachedContentsResponse.from_dict(data)
        return list(page.cached_contents or ()), page.next_page_token

    # ============ 文件 ============

    async def upload_file(
        self,
        data: bytes,
        *,
        mime_type: str,
        display_name: str | None = None,
    ) -> FileHandle:
        """通过可续传协议上传文件。"""
        metadata: dict[str, Any] = {"file": {"displayName": display_name}} if display_name else {}
        response = await self.transport.upload(data, mime_type=mime_type, metadata=metadata)
        file = File.from_dict(response.get("file", response))
        logger.info(f"File uploaded: {file.name} ({len(data)} bytes)")
        return FileHandle(file, self.transport)

    async def get_file(self, name: str) -> FileHandle:
        data = await self.transport.request("GET", _resource_name("files", name))
        return FileHandle(File.from_dict(data), self.transport)

    async def list_files(
        self,
        page_size: int | None = None,
        page_token: str | None = None,
    ) -> tuple[list[FileHandle], str | None]:
        data = await self.transport.request(
            "GET", "files", params={"pageSize": page_size, "pageToken": page_token},
        )
        page = ListFilesResponse.from_dict(data)
        return [FileHandle(f, self.transport) for f in page.files or []], page.next_page_token

    async def delete_file(self, name: str) -> None:
        await self.transport.request("DELETE", _resource_name("files", name))

    # ============ 文件检索 ============

    async def submit_file_search_store(
        self,
        request: CreateFileSearchStoreRequest,
    ) -> FileSearchStoreHandle:
        data = await self.transport.request("POST", "fileSearchStores", body=request.to_dict())
        store = FileSearchStore.from_dict(data)
        logger.info(f"File search store created: {store.name}")
        return FileSearchStoreHandle(store, self.transport)

    async def get_file_search_store(self, name: str) -> FileSearchStoreHandle:
        data = await self.transport.request("GET", _resource_name("fileSearchStores", name))
        return FileSearchStoreHandle(FileSearchStore.from_dict(data), self.transport)

    async def list_file_search_stores(
        self,
        page_size: int | None = None,
        page_token: str | None = None,
    ) -> tuple[list[FileSearchStoreHandle], str | None]:
        data = await self.transport.request(
            "GET", "fileSearchStores", params={"pageSize": page_size, "pageToken": page_token},
        )
        page = ListFileSearchStoresResponse.from_dict(data)
        handles = [FileSearchStoreHandle(s, self.transport) for s in page.file_search_stores or []]
        return handles, page.next_page_token


__all__ = ["Gemini"]
