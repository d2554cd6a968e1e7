"""Batch 模块 - 批量生成任务。"""

from .builder import BatchBuilder
from .handle import Batch
from .types import BatchPage, BatchResult, BatchState, BatchStatus

__all__ = [
    "Batch",
    "BatchBuilder",
    "BatchPage",
    "BatchResult",
    "BatchState",
    "BatchStatus",
]
