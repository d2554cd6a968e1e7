"""Schema 工具测试。"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, Literal, Union

from dawn_shuttle.dawn_shuttle_gemini.src.tools.schema import (
    _infer_literal_type,
    extract_function_schema,
    python_type_to_schema,
    validate_arguments,
)


class Unit(Enum):
    CELSIUS = "c"
    FAHRENHEIT = "f"


@dataclass
class Location:
    city: str
    country: str | None = None
    tags: list[str] = field(default_factory=list)


class TestInferLiteralType:
    """_infer_literal_type 测试。"""

    def test_string_literal(self) -> None:
        """测试字符串字面量。"""
        assert _infer_literal_type(("a", "b")) == "string"

    def test_int_literal(self) -> None:
        """测试整数字面量。"""
        assert _infer_literal_type((1, 2, 3)) == "integer"

    def test_float_literal(self) -> None:
        """测试浮点数字面量。"""
        assert _infer_literal_type((1.0, 2.0)) == "number"

    def test_bool_literal(self) -> None:
        """测试布尔字面量。"""
        assert _infer_literal_type((True, False)) == "boolean"

    def test_empty_args(self) -> None:
        """测试空参数。"""
        assert _infer_literal_type(()) == "string"


class TestPythonTypeToSchema:
    """python_type_to_schema 测试。"""

    def test_basic_types(self) -> None:
        """测试基础类型。"""
        assert python_type_to_schema(str) == {"type": "string"}
        assert python_type_to_schema(int) == {"type": "integer"}
        assert python_type_to_schema(float) == {"type": "number"}
        assert python_type_to_schema(bool) == {"type": "boolean"}
        assert python_type_to_schema(list) == {"type": "array"}
        assert python_type_to_schema(dict) == {"type": "object"}

    def test_literal_type(self) -> None:
        """测试 Literal 类型。"""
        schema = python_type_to_schema(Literal["a", "b", "c"])
        assert schema == {"type": "string", "enum": ["a", "b", "c"]}

        schema = python_type_to_schema(Literal[1, 2, 3])
        assert schema == {"type": "integer", "enum": [1, 2, 3]}

    def test_optional_type(self) -> None:
        """测试 Optional 映射为 nullable。"""
        schema = python_type_to_schema(str | None)
        assert schema == {"type": "string", "nullable": True}

    def test_union_multiple_types(self) -> None:
        """测试多类型 Union 映射为 anyOf。"""
        schema = python_type_to_schema(Union[str, int])
        assert schema == {"anyOf": [{"type": "string"}, {"type": "integer"}]}

    def test_list_type(self) -> None:
        """测试 list 类型。"""
        assert python_type_to_schema(list[int]) == {"type": "array", "items": {"type": "integer"}}

    def test_dict_type(self) -> None:
        """测试 dict 类型。"""
        assert python_type_to_schema(dict[str, int]) == {"type": "object"}

    def test_annotated_description(self) -> None:
        """测试 Annotated 描述。"""
        schema = python_type_to_schema(Annotated[str, "城市名"])
        assert schema == {"type": "string", "description": "城市名"}

    def test_annotated_dict(self) -> None:
        """测试 Annotated 附加 Schema 字段。"""
        schema = python_type_to_schema(Annotated[int, {"minimum": 0}])
        assert schema == {"type": "integer", "minimum": 0}

    def test_enum(self) -> None:
        """测试 Enum 类型。"""
        assert python_type_to_schema(Unit) == {"type": "string", "enum": ["c", "f"]}

    def test_dataclass(self) -> None:
        """测试 dataclass 映射为对象。"""
        schema = python_type_to_schema(Location)
        assert schema["type"] == "object"
        assert schema["required"] == ["city"]
        assert schema["properties"]["country"] == {"type": "string", "nullable": True}
        assert schema["properties"]["tags"] == {"type": "array", "items": {"type": "string"}}

    def test_unknown_type(self) -> None:
        """测试未知类型。"""
        assert python_type_to_schema(object) == {"type": "object"}


class TestExtractFunctionSchema:
    """extract_function_schema 测试。"""

    def test_simple_function(self) -> None:
        """测试简单函数。"""
        def greet(name: str) -> str:
            """问候函数。"""
            return f"Hello, {name}"

        schema = extract_function_schema(greet)

        assert schema["name"] == "greet"
        assert schema["description"] == "问候函数。"
        assert schema["parameters"] == {
            "type": "object",
            "properties": {"name": {"type": "string"}},
            "required": ["name"],
        }

    def test_function_with_default(self) -> None:
        """测试带默认值的函数。"""
        def search(query: str, limit: int = 10) -> list:
            """搜索函数。"""
            return []

        params = extract_function_schema(search)["parameters"]
        assert set(params["properties"]) == {"query", "limit"}
        assert params["required"] == ["query"]

    def test_docstring_sections_skipped(self) -> None:
        """测试 docstring 只取第一段。"""
        def calculate(a: int, b: int) -> int:
            """计算两个数的和。

            Args:
                a: 第一个数
                b: 第二个数
            """
            return a + b

        assert extract_function_schema(calculate)["description"] == "计算两个数的和。"

    def test_custom_name_and_description(self) -> None:
        """测试自定义名称与描述。"""
        def func() -> None:
            pass

        schema = extract_function_schema(func, name="custom", description="自定义描述")
        assert schema["name"] == "custom"
        assert schema["description"] == "自定义描述"

    def test_no_parameters(self) -> None:
        """测试无参数函数没有 required。"""
        def func() -> None:
            pass

        assert extract_function_schema(func)["parameters"] == {"type": "object", "properties": {}}

    def test_varargs_skipped(self) -> None:
        """测试 *args 与 **kwargs 被跳过。"""
        def func(*args, **kwargs) -> None:
            """带可变参数的函数。"""

        assert extract_function_schema(func)["parameters"]["properties"] == {}

    def test_method_skips_self(self) -> None:
        """测试方法跳过 self。"""
        class MyClass:
            def method(self, value: str) -> str:
                """类方法。"""
                return value

        params = extract_function_schema(MyClass.method)["parameters"]
        assert "self" not in params["properties"]
        assert "value" in params["properties"]

    def test_unannotated_parameter(self) -> None:
        """测试无注解参数视为字符串。"""
        def func(value) -> None:
            pass

        props = extract_function_schema(func)["parameters"]["properties"]
        assert props["value"] == {"type": "string"}


class TestValidateArguments:
    """validate_arguments 测试。"""

    def test_valid(self) -> None:
        """测试有效参数。"""
        schema = {
            "type": "object",
            "properties": {"name": {"type": "string"}, "count": {"type": "integer"}},
            "required": ["name"],
        }
        assert validate_arguments({"name": "x", "count": 2}, schema) == (True, [])

    def test_missing_required(self) -> None:
        """测试缺少必需参数。"""
        schema = {"type": "object", "properties": {"name": {"type": "string"}}, "required": ["name"]}
        valid, errors = validate_arguments({}, schema)
        assert valid is False
        assert errors == ["Missing required parameter: name"]

    def test_invalid_type(self) -> None:
        """测试类型不匹配。"""
        schema = {"type": "object", "properties": {"count": {"type": "integer"}}}
        valid, _ = validate_arguments({"count": "3"}, schema)
        assert valid is False

    def test_bool_is_not_integer(self) -> None:
        """测试布尔值不被当作整数。"""
        schema = {"type": "object", "properties": {"count": {"type": "integer"}}}
        assert validate_arguments({"count": True}, schema)[0] is False

    def test_enum(self) -> None:
        """测试枚举值。"""
        schema = {"type": "object", "properties": {"unit": {"type": "string", "enum": ["c", "f"]}}}
        assert validate_arguments({"unit": "c"}, schema)[0] is True
        assert validate_arguments({"unit": "k"}, schema)[0] is False

    def test_nullable(self) -> None:
        """测试可空值。"""
        schema = {"type": "object", "properties": {"v": {"type": "string", "nullable": True}}}
        assert validate_arguments({"v": None}, schema)[0] is True

    def test_unknown_arguments_ignored(self) -> None:
        """测试未声明的参数不做检查。"""
        schema = {"type": "object", "properties": {}}
        assert validate_arguments({"extra": 1}, schema)[0] is True
