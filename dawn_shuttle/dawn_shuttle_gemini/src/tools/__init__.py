"""Tools 模块 - 工具声明与函数 Schema 提取。"""

from .schema import extract_function_schema, python_type_to_schema, validate_arguments
from .types import (
    FunctionCallingMode,
    FunctionDeclaration,
    FunctionTool,
    Tool,
    ToolConfig,
)

__all__ = [
    # 类型
    "Tool",
    "FunctionTool",
    "FunctionDeclaration",
    "FunctionCallingMode",
    "ToolConfig",
    # Schema
    "extract_function_schema",
    "python_type_to_schema",
    "validate_arguments",
]
