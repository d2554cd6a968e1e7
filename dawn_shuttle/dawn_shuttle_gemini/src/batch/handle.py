"""批任务句柄 - 观察与操作远端批任务。"""

from __future__ import annotations

from loguru import logger

from ..adapter.base import BaseTransport
from ..core.error import ApiError, BatchStateError
from .types import BatchOperation, BatchStatus


class Batch:
    """远端批任务的句柄。

    句柄只保存名称, 每次调用都重新读取远端状态, 不缓存。

    Example:
        >>> batch = await client.batch_generate_content().with_request(req).execute()
        >>> status = await batch.status()
        >>> if status.is_terminal:
        ...     await batch.delete()
    """

    def __init__(self, name: str, transport: BaseTransport) -> None:
        self._name = name
        self._transport = transport

    @property
    def name(self) -> str:
        return self._name

    def __repr__(self) -> str:
        return f"Batch(name={self._name!r})"

    async def status(self) -> BatchStatus:
        """读取当前状态。"""
        data = await self._transport.request("GET", self._name)
        status = BatchStatus.from_operation(BatchOperation.from_dict(data))
        logger.debug(
            f"Batch {self._name} state={status.state.value} "
            f"total={status.total} completed={status.completed} "
            f"failed={status.failed} pending={status.pending}"
        )
        return status

    async def cancel(self) -> BatchStatus:
        """请求取消, 返回取消后观察到的状态。

        如果服务端因为任务已经结束而拒绝取消, 返回观察到的终止状态而不是抛出异常。

        Raises:
            ApiError: 取消被拒绝且任务仍未结束。
        """
        try:
            await self._transport.request("POST", f"{self._name}:cancel")
        except ApiError as e:
            status = await self.status()
            if status.is_terminal:
                logger.warning(
                    f"Cancel of {self._name} rejected ({e.message}), "
                    f"batch already {status.state.value}"
                )
                return status
            raise

        return await self.status()

    async def delete(self) -> None:
        """删除已结束的批任务。

        Raises:
            BatchStateError: 任务尚未结束(不会发送删除请求)。
        """
        status = await self.status()
        if not status.is_terminal:
            raise BatchStateError(
                f"Cannot delete batch in state {status.state.value}",
                resource=self._name,
            ).with_detail(field="state", value=status.state.value, suggestion="cancel() first")

        await self._transport.request("DELETE", self._name)
        logger.debug(f"Batch {self._name} deleted")


__all__ = ["Batch"]
