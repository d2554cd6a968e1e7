"""参数 Schema 生成 - 从 Python 类型注解生成 Gemini 函数声明所需的 OpenAPI Schema。"""

from __future__ import annotations

import dataclasses
import inspect
import types
from collections.abc import Callable
from enum import Enum
from typing import (
    Annotated,
    Any,
    Literal,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

_SCALAR_TYPES: dict[Any, str] = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
    list: "array",
    dict: "object",
}

_DOC_SECTIONS = ("Args:", "Returns:", "Raises:", "Example:", "Note:")


def python_type_to_schema(python_type: Any) -> dict[str, Any]:
    """将 Python 类型转换为 OpenAPI 3 Schema(Gemini 支持的子集)。

    Args:
        python_type: Python 类型注解。

    Returns:
        dict[str, Any]: Schema 字典。
    """
    if isinstance(python_type, type) and python_type in _SCALAR_TYPES:
        return {"type": _SCALAR_TYPES[python_type]}

    origin = get_origin(python_type)

    if origin is Literal:
        args = get_args(python_type)
        return {"type": _infer_literal_type(args), "enum": list(args)}

    # Optional[T] 映射为 nullable, 其余联合映射为 anyOf
    if origin is Union or origin is types.UnionType:
        non_none = [a for a in get_args(python_type) if a is not type(None)]
        if len(non_none) == 1:
            schema = python_type_to_schema(non_none[0])
            schema["nullable"] = True
            return schema
        return {"anyOf": [python_type_to_schema(a) for a in non_none]}

    if origin is list:
        args = get_args(python_type)
        if args:
            return {"type": "array", "items": python_type_to_schema(args[0])}
        return {"type": "array"}

    if origin is dict:
        return {"type": "object"}

    if origin is Annotated:
        args = get_args(python_type)
        schema = python_type_to_schema(args[0])
        for annotation in args[1:]:
            if isinstance(annotation, str):
                schema["description"] = annotation
            elif isinstance(annotation, dict):
                schema.update(annotation)
        return schema

    if isinstance(python_type, type) and issubclass(python_type, Enum):
        values = [m.value for m in python_type]
        return {"type": _infer_literal_type(tuple(values)), "enum": values}

    if dataclasses.is_dataclass(python_type) and isinstance(python_type, type):
        return _dataclass_schema(python_type)

    return {"type": "object"}


def _infer_literal_type(args: tuple[Any, ...]) -> str:
    if not args:
        return "string"
    first = type(args[0])
    if first is bool:
        return "boolean"
    if first is int:
        return "integer"
    if first is float:
        return "number"
    return "string"


def _dataclass_schema(cls: type) -> dict[str, Any]:
    hints = get_type_hints(cls, include_extras=True)
    properties: dict[str, Any] = {}
    required: list[str] = []

    for f in dataclasses.fields(cls):
        properties[f.name] = python_type_to_schema(hints.get(f.name, Any))
        no_default = (
            f.default is dataclasses.MISSING
            and f.default_factory is dataclasses.MISSING
        )
        if no_default:
            required.append(f.name)

    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


def extract_function_schema(
    func: Callable[..., Any],
    *,
    name: str | None = None,
    description: str | None = None,
) -> dict[str, Any]:
    """从函数签名提取函数声明。

    Args:
        func: 目标函数。
        name: 函数名(默认使用 ``func.__name__``)。
        description: 描述(默认使用 docstring 第一段)。

    Returns:
        dict[str, Any]: 包含 name/description/parameters 的字典。
    """
    hints = get_type_hints(func, include_extras=True)
    sig = inspect.signature(func)

    properties: dict[str, Any] = {}
    required: list[str] = []

    for param_name, param in sig.parameters.items():
        if param_name in ("self", "cls"):
            continue
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue

        param_type = hints.get(param_name, Any)
        if param_type is Any:
            param_type = str

        properties[param_name] = python_type_to_schema(param_type)

        if param.default is inspect.Parameter.empty:
            required.append(param_name)

    parameters: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        parameters["required"] = required

    return {
        "name": name or func.__name__,
        "description": description or _extract_docstring(func),
        "parameters": parameters,
    }


def _extract_docstring(func: Callable[..., Any]) -> str:
    doc = func.__doc__
    if not doc:
        return ""

    description_lines = []
    for line in doc.strip().split("\n"):
        stripped = line.strip()
        if stripped and not stripped.startswith(_DOC_SECTIONS):
            description_lines.append(stripped)
        elif description_lines:
            break

    return " ".join(description_lines)


def validate_arguments(
    arguments: dict[str, Any],
    schema: dict[str, Any],
) -> tuple[bool, list[str]]:
    """检查模型给出的调用参数是否符合声明的 Schema。

    Args:
        arguments: 参数字典。
        schema: 函数声明的 parameters。

    Returns:
        tuple[bool, list[str]]: (是否有效, 错误消息列表)。
    """
    errors: list[str] = []

    for req in schema.get("required", []):
        if req not in arguments:
            errors.append(f"Missing required parameter: {req}")

    properties = schema.get("properties", {})
    for key, value in arguments.items():
        if key not in properties:
            continue
        prop_schema = properties[key]
        expected = prop_schema.get("type")
        if not _validate_type(value, expected, prop_schema):
            errors.append(f"Parameter '{key}' has invalid type, expected {expected}")

    return not errors, errors


_TYPE_VALIDATORS: dict[str, Callable[[Any], bool]] = {
    "string": lambda v: isinstance(v, str),
    "integer": lambda v: isinstance(v, int) and not isinstance(v, bool),
    "number": lambda v: isinstance(v, (int, float)) and not isinstance(v, bool),
    "boolean": lambda v: isinstance(v, bool),
    "array": lambda v: isinstance(v, list),
    "object": lambda v: isinstance(v, dict),
}


def _validate_type(value: Any, expected: str | None, schema: dict[str, Any]) -> bool:
    if expected is None:
        return True
    if value is None:
        return bool(schema.get("nullable"))
    if "enum" in schema and value not in schema["enum"]:
        return False
    validator = _TYPE_VALIDATORS.get(expected)
    return validator is None or validator(value)


__all__ = [
    "extract_function_schema",
    "python_type_to_schema",
    "validate_arguments",
]
