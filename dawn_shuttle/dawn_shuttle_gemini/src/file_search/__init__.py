"""File Search 模块 - 文件检索存储。"""

from .builder import FileSearchStoreBuilder, ImportFileBuilder
from .handle import DocumentHandle, FileSearchStoreHandle, OperationHandle
from .types import ChunkingConfig, CustomMetadata, Document, FileSearchStore

__all__ = [
    "ChunkingConfig",
    "CustomMetadata",
    "Document",
    "DocumentHandle",
    "FileSearchStore",
    "FileSearchStoreBuilder",
    "FileSearchStoreHandle",
    "ImportFileBuilder",
    "OperationHandle",
]
