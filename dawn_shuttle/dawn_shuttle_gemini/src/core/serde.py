"""线格式序列化工具 - pydantic 模型与 API JSON 之间的双向转换。

约定:
- Python 侧字段使用 snake_case, 线上使用 camelCase。
- None 表示"字段缺失", 编码时省略; 空列表保持为空列表。
- 列表字段解码为 tuple, 构造后的对象整体不可变。
- 未识别的键作为 pydantic extra 保存, 编码时原样写回。
- 未识别的枚举值解码为 ``UNKNOWN`` 伪成员, 保留原始字符串。
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    PlainSerializer,
    PlainValidator,
    ValidationError,
    ValidationInfo,
    model_serializer,
)
from pydantic.alias_generators import to_camel
from pydantic_core import core_schema

from .error import DecodeError

# 解码 API 响应时的校验上下文
_WIRE_CONTEXT = {"wire": True}


class WireEnum(str, Enum):
    """宽松解码的枚举基类。

    未知字符串不会导致解码失败, 而是得到名为 ``UNKNOWN`` 的伪成员,
    其 ``value`` 为原始字符串, 编码时原样写回。
    """

    @classmethod
    def _missing_(cls, value: object) -> Any:
        if not isinstance(value, str):
            return None
        member = str.__new__(cls, value)
        member._name_ = "UNKNOWN"
        member._value_ = value
        return member

    @property
    def is_unknown(self) -> bool:
        """是否为未识别的枚举值。"""
        return self._name_ == "UNKNOWN"

    @classmethod
    def _coerce(cls, value: Any) -> Any:
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Expected string for {cls.__name__}, got {type(value).__name__}")
        return cls(value)

    @classmethod
    def __get_pydantic_core_schema__(cls, source: Any, handler: Any) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls._coerce,
            serialization=core_schema.plain_serializer_function_ser_schema(_enum_value),
        )


def _enum_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


class _WireNumber(int):
    """以 JSON 数字收到的 int64, 编码时保持数字形式。"""


def _parse_int64(value: Any, info: ValidationInfo) -> int:
    if isinstance(value, bool):
        raise ValueError("Expected int64, got bool")
    if isinstance(value, int):
        if info.context and info.context.get("wire") and not isinstance(value, _WireNumber):
            return _WireNumber(value)
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"Invalid int64 string: {value!r}") from None
    raise ValueError(f"Expected int64, got {type(value).__name__}")


def _dump_int64(value: int) -> Any:
    if isinstance(value, _WireNumber):
        return int(value)
    return str(value)


Int64 = Annotated[int, PlainValidator(_parse_int64), PlainSerializer(_dump_int64, return_type=Any)]
"""API 以 JSON 字符串传输的 64 位整数; 收到数字时按数字写回。"""


def polymorphic(base: type[WireModel]) -> Any:
    """声明由 ``base.from_dict`` 按线上键分派子类的字段类型。

    Example:
        >>> AnyPart = polymorphic(Part)
        >>> parts: tuple[AnyPart, ...] | None = None
    """

    def validate(value: Any) -> Any:
        if isinstance(value, base):
            return value
        return base.from_dict(value)

    def serialize(value: WireModel) -> dict[str, Any]:
        return value.to_dict()

    return Annotated[base, PlainValidator(validate), PlainSerializer(serialize, return_type=Any)]


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(p) for p in first["loc"]) or "<root>"
    return f"{location}: {first['msg']}"


class WireModel(BaseModel):
    """所有线格式类型的基类。

    字段名自动映射为 camelCase 别名, 也接受 snake_case 名称构造。
    实例不可变, 修改使用 :meth:`replace`。
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        frozen=True,
        protected_namespaces=(),
    )

    @model_serializer(mode="wrap")
    def _drop_absent(self, handler: Any) -> dict[str, Any]:
        data = handler(self)
        for name, info in type(self).model_fields.items():
            if getattr(self, name) is None:
                data.pop(info.alias or name, None)
                data.pop(name, None)
        return data

    @property
    def extra(self) -> dict[str, Any]:
        """未识别的线上字段。"""
        return dict(self.model_extra or {})

    def to_dict(self) -> dict[str, Any]:
        """编码为 API JSON 对象(camelCase, 省略 None)。"""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_dict(cls, data: Any) -> Any:
        """从 API JSON 对象解码。

        Raises:
            DecodeError: 不是 JSON 对象, 缺少必填字段, 或值的类型不匹配。
        """
        if not isinstance(data, dict):
            raise DecodeError(
                f"Expected JSON object for {cls.__name__}, got {type(data).__name__}",
                fragment=data,
            )
        try:
            return cls.model_validate(data, context=_WIRE_CONTEXT)
        except ValidationError as e:
            raise DecodeError(f"Invalid {cls.__name__}: {_describe(e)}", fragment=data) from e

    def replace(self, **changes: Any) -> Any:
        """返回修改部分字段后的新实例(重新校验, 保留未识别字段)。"""
        values = {name: getattr(self, name) for name in type(self).model_fields}
        values.update(changes)
        return type(self).model_validate({**self.extra, **values})


__all__ = [
    "Int64",
    "WireEnum",
    "WireModel",
    "polymorphic",
    "to_camel",
]
