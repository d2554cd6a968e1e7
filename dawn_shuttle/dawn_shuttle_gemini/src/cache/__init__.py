"""Cache 模块 - 上下文缓存。"""

from .builder import CacheBuilder
from .handle import CachedContentHandle
from .types import CachedContent

__all__ = ["CacheBuilder", "CachedContent", "CachedContentHandle"]
