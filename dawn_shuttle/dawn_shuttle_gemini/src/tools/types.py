"""工具相关的线格式类型。"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pydantic import Field

from ..core.serde import WireEnum, WireModel, polymorphic
from ..core.types import FunctionCall
from .schema import extract_function_schema, python_type_to_schema, validate_arguments


class Behavior(WireEnum):
    """函数执行方式(仅双向流接口支持)。"""

    UNSPECIFIED = "UNSPECIFIED"
    BLOCKING = "BLOCKING"
    NON_BLOCKING = "NON_BLOCKING"


class FunctionCallingMode(WireEnum):
    """函数调用模式。"""

    MODE_UNSPECIFIED = "MODE_UNSPECIFIED"
    AUTO = "AUTO"
    ANY = "ANY"
    NONE = "NONE"
    VALIDATED = "VALIDATED"


class FunctionDeclaration(WireModel):
    """模型可以调用的函数声明。

    Attributes:
        name: 函数名。
        description: 函数用途描述。
        parameters: 参数的 OpenAPI Schema。
        response: 返回值的 OpenAPI Schema。
        behavior: 执行方式。
    """

    name: str
    description: str = ""
    parameters: dict[str, Any] | None = None
    response: dict[str, Any] | None = None
    behavior: Behavior | None = None

    @classmethod
    def from_function(
        cls,
        func: Callable[..., Any],
        *,
        name: str | None = None,
        description: str | None = None,
        response_type: Any = None,
    ) -> FunctionDeclaration:
        """根据函数签名和 docstring 生成声明。

        Example:
            >>> def get_weather(city: str, unit: Literal["c", "f"] = "c") -> str:
            ...     '''查询天气。'''
            >>> FunctionDeclaration.from_function(get_weather)
        """
        schema = extract_function_schema(func, name=name, description=description)
        return cls(
            name=schema["name"],
            description=schema["description"],
            parameters=schema["parameters"],
            response=python_type_to_schema(response_type) if response_type is not None else None,
        )

    def validate(self, call: FunctionCall) -> tuple[bool, list[str]]:
        """检查一次函数调用的参数是否符合本声明。"""
        if call.name != self.name:
            return False, [f"Function name mismatch: {call.name} != {self.name}"]
        if self.parameters is None:
            return True, []
        return validate_arguments(call.args or {}, self.parameters)


# ============ Tool 变体 ============


class Tool(WireModel):
    """模型可用的工具(带标签的联合类型)。"""

    @classmethod
    def from_dict(cls, data: Any) -> Tool:
        if cls is not Tool:
            return super(Tool, cls).from_dict(data)
        if isinstance(data, dict):
            for key, variant in _TOOL_VARIANTS:
                if key in data:
                    return variant.from_dict(data)
        return UnknownTool.from_dict(data)


class FunctionTool(Tool):
    function_declarations: tuple[FunctionDeclaration, ...] = ()


class GoogleSearchTool(Tool):
    google_search: dict[str, Any] = Field(default_factory=dict)


class GoogleMapsConfig(WireModel):
    enable_widget: bool | None = None


class GoogleMapsTool(Tool):
    google_maps: GoogleMapsConfig = Field(default_factory=GoogleMapsConfig)


class UrlContextTool(Tool):
    url_context: dict[str, Any] = Field(default_factory=dict)


class CodeExecutionTool(Tool):
    code_execution: dict[str, Any] = Field(default_factory=dict)


class FileSearchConfig(WireModel):
    """文件检索配置。"""

    file_search_store_names: tuple[str, ...] = ()
    metadata_filter: str | None = None
    top_k: int | None = None


class FileSearchTool(Tool):
    file_search: FileSearchConfig = Field(default_factory=FileSearchConfig)


class UnknownTool(Tool):
    """未识别的工具, 原样透传。"""


_TOOL_VARIANTS: tuple[tuple[str, type[Tool]], ...] = (
    ("functionDeclarations", FunctionTool),
    ("googleSearch", GoogleSearchTool),
    ("googleMaps", GoogleMapsTool),
    ("urlContext", UrlContextTool),
    ("codeExecution", CodeExecutionTool),
    ("fileSearch", FileSearchTool),
)

# 按线上键分派到具体变体的字段类型
AnyTool = polymorphic(Tool)


# ============ 工具配置 ============


class FunctionCallingConfig(WireModel):
    mode: FunctionCallingMode | None = None
    allowed_function_names: tuple[str, ...] | None = None


class LatLng(WireModel):
    latitude: float
    longitude: float


class RetrievalConfig(WireModel):
    """检索类工具的上下文(如 Google Maps 的位置)。"""

    lat_lng: LatLng | None = None
    language_code: str | None = None


class ToolConfig(WireModel):
    """工具配置, 作用于请求中的所有工具。"""

    function_calling_config: FunctionCallingConfig | None = None
    retrieval_config: RetrievalConfig | None = None

    @classmethod
    def with_mode(
        cls,
        mode: FunctionCallingMode,
        allowed_function_names: list[str] | None = None,
    ) -> ToolConfig:
        return cls(function_calling_config=FunctionCallingConfig(
            mode=mode, allowed_function_names=allowed_function_names,
        ))

    @classmethod
    def with_location(cls, latitude: float, longitude: float) -> ToolConfig:
        return cls(retrieval_config=RetrievalConfig(
            lat_lng=LatLng(latitude=latitude, longitude=longitude),
        ))


__all__ = [
    "AnyTool",
    "Behavior",
    "CodeExecutionTool",
    "FileSearchConfig",
    "FileSearchTool",
    "FunctionCallingConfig",
    "FunctionCallingMode",
    "FunctionDeclaration",
    "FunctionTool",
    "GoogleMapsConfig",
    "GoogleMapsTool",
    "GoogleSearchTool",
    "LatLng",
    "RetrievalConfig",
    "Tool",
    "ToolConfig",
    "UnknownTool",
    "UrlContextTool",
]
