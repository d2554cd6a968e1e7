"""批处理的线格式类型与状态视图。

状态机: PENDING -> RUNNING -> {SUCCEEDED, FAILED, CANCELLED, EXPIRED}。
状态只由服务端推进, 客户端通过轮询观察; 终止状态不会再变化。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import Field

from ..core.response import GenerateResponse, GenerationResponse
from ..core.serde import Int64, WireEnum, WireModel
from ..generation.request import GenerateContentRequest


class BatchState(WireEnum):
    """批任务状态。"""

    UNSPECIFIED = "BATCH_STATE_UNSPECIFIED"
    PENDING = "BATCH_STATE_PENDING"
    RUNNING = "BATCH_STATE_RUNNING"
    SUCCEEDED = "BATCH_STATE_SUCCEEDED"
    FAILED = "BATCH_STATE_FAILED"
    CANCELLED = "BATCH_STATE_CANCELLED"
    EXPIRED = "BATCH_STATE_EXPIRED"

    @property
    def is_terminal(self) -> bool:
        """是否为终止状态。"""
        return self in _TERMINAL_STATES


_TERMINAL_STATES = frozenset({
    BatchState.SUCCEEDED,
    BatchState.FAILED,
    BatchState.CANCELLED,
    BatchState.EXPIRED,
})


# ============ 提交 ============


class RequestMetadata(WireModel):
    key: str


class BatchRequestItem(WireModel):
    request: GenerateContentRequest
    metadata: RequestMetadata | None = None


class RequestsContainer(WireModel):
    requests: tuple[BatchRequestItem, ...]


class InputConfig(WireModel):
    """批任务输入: 内联请求或已上传的 JSONL 文件, 二选一。"""

    requests: RequestsContainer | None = None
    file_name: str | None = None


class BatchConfig(WireModel):
    display_name: str
    input_config: InputConfig


class BatchGenerateContentRequest(WireModel):
    batch: BatchConfig


# ============ 操作 ============


class OperationError(WireModel):
    """google.rpc.Status 结构。"""

    code: int | None = None
    message: str | None = None
    details: tuple[dict[str, Any], ...] | None = None


class BatchStats(WireModel):
    """服务端报告的请求计数(int64, 线上通常为字符串)。"""

    request_count: Int64 | None = None
    successful_request_count: Int64 | None = None
    failed_request_count: Int64 | None = None
    pending_request_count: Int64 | None = None


class InlinedResponse(WireModel):
    response: GenerationResponse | None = None
    error: OperationError | None = None
    metadata: RequestMetadata | None = None


class InlinedResponses(WireModel):
    inlined_responses: tuple[InlinedResponse, ...] | None = None


class BatchOutput(WireModel):
    """批任务输出: 内联结果或结果文件。"""

    inlined_responses: InlinedResponses | None = None
    responses_file: str | None = None


class BatchMetadata(WireModel):
    type_url: str | None = Field(default=None, alias="@type")
    name: str | None = None
    model: str | None = None
    display_name: str | None = None
    create_time: str | None = None
    update_time: str | None = None
    end_time: str | None = None
    state: BatchState | None = None
    batch_stats: BatchStats | None = None
    output: BatchOutput | None = None


class BatchOperation(WireModel):
    """长时操作包装的批任务。"""

    name: str
    metadata: BatchMetadata | None = None
    done: bool | None = None
    response: BatchOutput | None = None
    error: OperationError | None = None


class ListBatchesResponse(WireModel):
    operations: tuple[BatchOperation, ...] | None = None
    next_page_token: str | None = None


# ============ 状态视图 ============


@dataclass(frozen=True)
class BatchResult:
    """单个请求的结果: response 与 error 二者之一。"""

    key: str
    response: GenerateResponse | None = None
    error: OperationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class BatchStatus:
    """某一时刻观察到的批任务状态。

    计数原样取自服务端, 缺失时为 None, 不做本地推算。

    Attributes:
        name: 批任务名称。
        state: 状态。
        total: 请求总数。
        completed: 成功完成数。
        failed: 失败数。
        pending: 待处理数。
        results: 内联结果(按请求 key 排序), 未完成或使用结果文件时为 None。
        responses_file: 结果文件名称。
        error: 批任务整体失败时的错误。
        operation: 原始操作对象。
    """

    name: str
    state: BatchState
    total: int | None = None
    completed: int | None = None
    failed: int | None = None
    pending: int | None = None
    results: list[BatchResult] | None = None
    responses_file: str | None = None
    error: OperationError | None = None
    operation: BatchOperation | None = None

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal

    @property
    def metadata(self) -> BatchMetadata | None:
        return self.operation.metadata if self.operation else None

    @classmethod
    def from_operation(cls, operation: BatchOperation) -> BatchStatus:
        metadata = operation.metadata or BatchMetadata()
        stats = metadata.batch_stats or BatchStats()
        output = operation.response or metadata.output

        results: list[BatchResult] | None = None
        responses_file: str | None = None
        if output is not None:
            responses_file = output.responses_file
            if output.inlined_responses is not None:
                results = _collect_results(output.inlined_responses.inlined_responses or ())

        return cls(
            name=operation.name,
            state=metadata.state or BatchState.UNSPECIFIED,
            total=stats.request_count,
            completed=stats.successful_request_count,
            failed=stats.failed_request_count,
            pending=stats.pending_request_count,
            results=results,
            responses_file=responses_file,
            error=operation.error,
            operation=operation,
        )


def _result_order(result: BatchResult) -> tuple[int, str]:
    try:
        return int(result.key), result.key
    except ValueError:
        return 2**63, result.key


def _collect_results(items: tuple[InlinedResponse, ...]) -> list[BatchResult]:
    results = []
    for index, item in enumerate(items):
        key = item.metadata.key if item.metadata else str(index)
        results.append(BatchResult(
            key=key,
            response=GenerateResponse(raw=item.response) if item.response is not None else None,
            error=item.error,
        ))
    results.sort(key=_result_order)
    return results


@dataclass(frozen=True)
class BatchPage:
    """批任务列表的一页, next_page_token 为 None 表示最后一页。"""

    operations: list[BatchOperation]
    next_page_token: str | None = None


__all__ = [
    "BatchConfig",
    "BatchGenerateContentRequest",
    "BatchMetadata",
    "BatchOperation",
    "BatchOutput",
    "BatchPage",
    "BatchRequestItem",
    "BatchResult",
    "BatchState",
    "BatchStats",
    "BatchStatus",
    "InlinedResponse",
    "InlinedResponses",
    "InputConfig",
    "ListBatchesResponse",
    "OperationError",
    "RequestMetadata",
    "RequestsContainer",
]
