"""测试 batch - 批量生成任务。"""

from __future__ import annotations

from typing import Any

import pytest

from dawn_shuttle.dawn_shuttle_gemini.src.batch.builder import BatchBuilder
from dawn_shuttle.dawn_shuttle_gemini.src.batch.handle import Batch
from dawn_shuttle.dawn_shuttle_gemini.src.batch.types import (
    BatchOperation,
    BatchState,
    BatchStatus,
)
from dawn_shuttle.dawn_shuttle_gemini.src.core.error import (
    BatchStateError,
    BuildError,
    ConfigurationError,
    InvalidRequestError,
)
from dawn_shuttle.dawn_shuttle_gemini.src.generation.builder import ContentBuilder

BATCH_NAME = "batches/abc123"
BATCH_TYPE = "type.googleapis.com/google.ai.generativelanguage.v1main.GenerateContentBatch"


def _operation(state: str, stats: dict[str, str], **extra: Any) -> dict[str, Any]:
    return {
        "name": BATCH_NAME,
        "metadata": {
            "@type": BATCH_TYPE,
            "name": BATCH_NAME,
            "model": "models/gemini-2.5-flash",
            "displayName": "nightly",
            "state": state,
            "batchStats": stats,
        },
        **extra,
    }


def _inlined(key: str, text: str) -> dict[str, Any]:
    return {
        "metadata": {"key": key},
        "response": {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]},
    }


def _request(text: str):
    return ContentBuilder().with_user_message(text).build()


class TestBatchBuilder:
    """测试 BatchBuilder。"""

    def test_build_inline(self) -> None:
        """测试内联请求按顺序编号。"""
        request = (
            BatchBuilder("models/gemini-2.5-flash")
            .with_name("nightly")
            .with_request(_request("a"))
            .with_request(_request("b"))
            .build()
        )
        data = request.to_dict()
        assert data["batch"]["displayName"] == "nightly"
        items = data["batch"]["inputConfig"]["requests"]["requests"]
        assert [i["metadata"]["key"] for i in items] == ["0", "1"]
        assert items[1]["request"]["contents"][0]["parts"][0]["text"] == "b"

    def test_default_display_name(self) -> None:
        """测试默认显示名称。"""
        request = BatchBuilder("m").with_request(_request("a")).build()
        assert request.batch.display_name == "dawn-shuttle-batch"

    def test_with_requests_replaces(self) -> None:
        """测试 with_requests 替换已有请求。"""
        request = (
            BatchBuilder("m")
            .with_request(_request("a"))
            .with_requests([_request("b"), _request("c")])
            .build()
        )
        assert len(request.batch.input_config.requests.requests) == 2

    def test_input_file(self) -> None:
        """测试以文件作为输入。"""
        request = BatchBuilder("m").with_input_file("files/input-jsonl").build()
        assert request.to_dict()["batch"]["inputConfig"] == {"fileName": "files/input-jsonl"}

    def test_empty(self) -> None:
        """测试没有请求时报错。"""
        with pytest.raises(BuildError):
            BatchBuilder("m").build()

    def test_inline_and_file(self) -> None:
        """测试同时指定内联请求与文件。"""
        with pytest.raises(BuildError):
            BatchBuilder("m").with_request(_request("a")).with_input_file("files/x").build()

    @pytest.mark.asyncio
    async def test_unbound(self) -> None:
        """测试未绑定客户端。"""
        with pytest.raises(ConfigurationError):
            await BatchBuilder("m").with_request(_request("a")).execute()

    @pytest.mark.asyncio
    async def test_execute(self, client, transport) -> None:
        """测试提交批任务。"""
        transport.queue(_operation("BATCH_STATE_PENDING", {"requestCount": "1", "pendingRequestCount": "1"}))
        batch = await client.batch_generate_content().with_request(_request("a")).execute()
        assert isinstance(batch, Batch)
        assert batch.name == BATCH_NAME
        assert transport.calls[0]["method"] == "POST"
        assert transport.calls[0]["path"] == "models/gemini-2.5-flash:batchGenerateContent"


class TestBatchStatus:
    """测试 BatchStatus 视图。"""

    def test_pending(self) -> None:
        """测试等待中的任务。"""
        status = BatchStatus.from_operation(BatchOperation.from_dict(
            _operation("BATCH_STATE_PENDING", {"requestCount": "2", "pendingRequestCount": "2"}),
        ))
        assert status.state is BatchState.PENDING
        assert status.total == 2
        assert status.pending == 2
        assert status.completed is None
        assert status.failed is None
        assert status.results is None
        assert status.is_terminal is False

    def test_results_sorted_by_key(self) -> None:
        """测试结果按 key 数值排序。"""
        operation = _operation(
            "BATCH_STATE_SUCCEEDED",
            {"requestCount": "11", "successfulRequestCount": "11"},
            done=True,
            response={
                "@type": "type.googleapis.com/google.ai.generativelanguage.v1main.GenerateContentBatchOutput",
                "inlinedResponses": {"inlinedResponses": [
                    _inlined("10", "k"), _inlined("2", "c"), _inlined("0", "a"),
                ]},
            },
        )
        status = BatchStatus.from_operation(BatchOperation.from_dict(operation))
        assert [r.key for r in status.results] == ["0", "2", "10"]
        assert [r.response.text() for r in status.results] == ["a", "c", "k"]

    def test_failed_item(self) -> None:
        """测试单个请求失败。"""
        operation = _operation(
            "BATCH_STATE_SUCCEEDED",
            {"requestCount": "1", "failedRequestCount": "1"},
            done=True,
            response={"inlinedResponses": {"inlinedResponses": [
                {"metadata": {"key": "0"}, "error": {"code": 400, "message": "bad"}},
            ]}},
        )
        result = BatchStatus.from_operation(BatchOperation.from_dict(operation)).results[0]
        assert result.ok is False
        assert result.response is None
        assert result.error.message == "bad"

    def test_output_from_metadata(self) -> None:
        """测试结果文件位于 metadata.output。"""
        operation = _operation("BATCH_STATE_SUCCEEDED", {"requestCount": "5"})
        operation["metadata"]["output"] = {"responsesFile": "files/out"}
        status = BatchStatus.from_operation(BatchOperation.from_dict(operation))
        assert status.responses_file == "files/out"
        assert status.results is None

    def test_unknown_state(self) -> None:
        """测试未知状态。"""
        status = BatchStatus.from_operation(BatchOperation.from_dict(
            _operation("BATCH_STATE_PAUSED", {}),
        ))
        assert status.state.is_unknown
        assert status.is_terminal is False

    def test_operation_round_trip(self) -> None:
        """测试操作对象往返。"""
        data = _operation("BATCH_STATE_RUNNING", {"requestCount": "3", "pendingRequestCount": "1"})
        assert BatchOperation.from_dict(data).to_dict() == data

    def test_numeric_counts_round_trip(self) -> None:
        """测试以数字返回的计数按数字写回。"""
        data = _operation("BATCH_STATE_RUNNING", {"requestCount": 2, "successfulRequestCount": 1})
        operation = BatchOperation.from_dict(data)
        assert BatchStatus.from_operation(operation).total == 2
        assert operation.to_dict() == data


class TestBatchHandle:
    """测试 Batch 句柄。"""

    @pytest.mark.asyncio
    async def test_status_progression(self, transport) -> None:
        """测试从 PENDING 到 SUCCEEDED 的轮询。"""
        transport.queue(
            _operation("BATCH_STATE_PENDING", {"requestCount": "2", "pendingRequestCount": "2"}),
            _operation(
                "BATCH_STATE_SUCCEEDED",
                {"requestCount": "2", "successfulRequestCount": "2"},
                done=True,
                response={"inlinedResponses": {"inlinedResponses": [
                    _inlined("1", "second"), _inlined("0", "first"),
                ]}},
            ),
        )
        batch = Batch(BATCH_NAME, transport)

        first = await batch.status()
        assert first.state is BatchState.PENDING
        assert (first.total, first.pending) == (2, 2)

        second = await batch.status()
        assert second.state is BatchState.SUCCEEDED
        assert (second.total, second.completed) == (2, 2)
        assert [r.response.text() for r in second.results] == ["first", "second"]
        assert [c["path"] for c in transport.calls] == [BATCH_NAME, BATCH_NAME]

    @pytest.mark.asyncio
    async def test_cancel(self, transport) -> None:
        """测试取消运行中的任务。"""
        transport.queue({}, _operation("BATCH_STATE_CANCELLED", {"requestCount": "2"}))
        status = await Batch(BATCH_NAME, transport).cancel()
        assert status.state is BatchState.CANCELLED
        assert transport.calls[0]["path"] == f"{BATCH_NAME}:cancel"

    @pytest.mark.asyncio
    async def test_cancel_finished_batch(self, transport) -> None:
        """测试取消已成功的任务返回 SUCCEEDED 而不抛出异常。"""
        transport.queue(
            InvalidRequestError("Batch is already in a terminal state", status_code=400),
            _operation("BATCH_STATE_SUCCEEDED", {"requestCount": "2", "successfulRequestCount": "2"}),
        )
        status = await Batch(BATCH_NAME, transport).cancel()
        assert status.state is BatchState.SUCCEEDED

    @pytest.mark.asyncio
    async def test_cancel_rejected_while_running(self, transport) -> None:
        """测试任务未结束时取消失败会抛出异常。"""
        transport.queue(
            InvalidRequestError("nope", status_code=400),
            _operation("BATCH_STATE_RUNNING", {"requestCount": "2"}),
        )
        with pytest.raises(InvalidRequestError):
            await Batch(BATCH_NAME, transport).cancel()

    @pytest.mark.asyncio
    async def test_delete_running(self, transport) -> None:
        """测试删除未结束的任务被拒绝且不发送删除请求。"""
        transport.queue(_operation("BATCH_STATE_RUNNING", {"requestCount": "2"}))
        with pytest.raises(BatchStateError) as exc_info:
            await Batch(BATCH_NAME, transport).delete()
        assert exc_info.value.resource == BATCH_NAME
        assert [c["method"] for c in transport.calls] == ["GET"]

    @pytest.mark.asyncio
    async def test_delete_finished(self, transport) -> None:
        """测试删除已结束的任务。"""
        transport.queue(_operation("BATCH_STATE_EXPIRED", {}), {})
        await Batch(BATCH_NAME, transport).delete()
        assert [c["method"] for c in transport.calls] == ["GET", "DELETE"]


class TestBatchListing:
    """测试批任务列表。"""

    @pytest.mark.asyncio
    async def test_list_batches(self, client, transport) -> None:
        """测试分页列出。"""
        transport.queue({
            "operations": [_operation("BATCH_STATE_RUNNING", {})],
            "nextPageToken": "p2",
        })
        page = await client.list_batches(page_size=1)
        assert len(page.operations) == 1
        assert page.next_page_token == "p2"
        assert transport.calls[0]["params"] == {"pageSize": 1, "pageToken": None}

    @pytest.mark.asyncio
    async def test_iter_batches(self, client, transport) -> None:
        """测试遍历所有分页。"""
        transport.queue(
            {"operations": [_operation("BATCH_STATE_RUNNING", {})], "nextPageToken": "p2"},
            {"operations": [_operation("BATCH_STATE_SUCCEEDED", {})]},
        )
        names = [op.name async for op in client.iter_batches()]
        assert names == [BATCH_NAME, BATCH_NAME]
        assert transport.calls[1]["params"]["pageToken"] == "p2"

    def test_get_batch_normalizes_name(self, client) -> None:
        """测试补全 batches/ 前缀。"""
        assert client.get_batch("abc123").name == BATCH_NAME
        assert client.get_batch(BATCH_NAME).name == BATCH_NAME
