"""BatchBuilder - 组装并提交批量生成任务。"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from ..core.error import BuildError, ConfigurationError
from ..generation.request import GenerateContentRequest
from .handle import Batch
from .types import (
    BatchConfig,
    BatchGenerateContentRequest,
    BatchRequestItem,
    InputConfig,
    RequestMetadata,
    RequestsContainer,
)

if TYPE_CHECKING:
    from ..core.client import Gemini

DEFAULT_DISPLAY_NAME = "dawn-shuttle-batch"


class BatchBuilder:
    """批量生成构造器。

    每个请求的 key 为其加入顺序的下标, 结果按 key 排序返回。
    """

    def __init__(self, model: str, client: Gemini | None = None) -> None:
        self._client = client
        self._model = model
        self._display_name = DEFAULT_DISPLAY_NAME
        self._requests: list[GenerateContentRequest] = []
        self._input_file: str | None = None

    def with_name(self, display_name: str) -> BatchBuilder:
        self._display_name = display_name
        return self

    def with_request(self, request: GenerateContentRequest) -> BatchBuilder:
        self._requests.append(request)
        return self

    def with_requests(self, requests: Iterable[GenerateContentRequest]) -> BatchBuilder:
        """替换全部请求。"""
        self._requests = list(requests)
        return self

    def with_input_file(self, file_name: str) -> BatchBuilder:
        """使用已上传的 JSONL 文件作为输入(如 ``files/abc``)。"""
        self._input_file = file_name
        return self

    def build(self) -> BatchGenerateContentRequest:
        """生成提交请求。

        Raises:
            BuildError: 没有任何请求, 或同时指定了内联请求与输入文件。
        """
        if self._input_file is not None:
            if self._requests:
                raise BuildError("Batch input must be either inline requests or a file, not both")
            input_config = InputConfig(file_name=self._input_file)
        else:
            if not self._requests:
                raise BuildError("Batch must contain at least one request").with_detail(
                    field="requests", reason="empty",
                )
            input_config = InputConfig(requests=RequestsContainer(requests=[
                BatchRequestItem(request=request, metadata=RequestMetadata(key=str(i)))
                for i, request in enumerate(self._requests)
            ]))

        return BatchGenerateContentRequest(
            batch=BatchConfig(display_name=self._display_name, input_config=input_config),
        )

    async def execute(self) -> Batch:
        """提交任务并返回句柄。"""
        if self._client is None:
            raise ConfigurationError("BatchBuilder is not bound to a client")
        return await self._client.submit_batch(self.build(), model=self._model)


__all__ = ["BatchBuilder"]
