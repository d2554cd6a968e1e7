"""Files 模块 - 文件上传与管理。"""

from .handle import FileHandle
from .types import File, FileState

__all__ = ["File", "FileHandle", "FileState"]
