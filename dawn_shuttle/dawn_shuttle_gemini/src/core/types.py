"""核心类型定义 - 对话轮次与消息片段。"""

from __future__ import annotations

from typing import Any

from loguru import logger

from .serde import WireEnum, WireModel, polymorphic


class Role(WireEnum):
    """对话角色。"""

    USER = "user"
    MODEL = "model"
    FUNCTION = "function"


class Language(WireEnum):
    """可执行代码的语言。"""

    LANGUAGE_UNSPECIFIED = "LANGUAGE_UNSPECIFIED"
    PYTHON = "PYTHON"


class Outcome(WireEnum):
    """代码执行结果状态。"""

    OUTCOME_UNSPECIFIED = "OUTCOME_UNSPECIFIED"
    OUTCOME_OK = "OUTCOME_OK"
    OUTCOME_FAILED = "OUTCOME_FAILED"
    OUTCOME_DEADLINE_EXCEEDED = "OUTCOME_DEADLINE_EXCEEDED"


class Blob(WireModel):
    """内联二进制数据。"""

    mime_type: str
    data: str
    """Base64 编码的内容。"""


class FileData(WireModel):
    """通过 URI 引用的已上传文件。"""

    file_uri: str
    mime_type: str | None = None


class FunctionCall(WireModel):
    """模型发起的函数调用。"""

    name: str
    args: dict[str, Any] | None = None
    id: str | None = None

    def get(self, key: str, default: Any = None) -> Any:
        """读取调用参数, 不存在时返回 default。"""
        if not self.args:
            return default
        return self.args.get(key, default)


class FunctionResponse(WireModel):
    """函数执行结果, 回传给模型。"""

    name: str
    response: dict[str, Any]
    id: str | None = None


class ExecutableCode(WireModel):
    """模型生成的待执行代码。"""

    language: Language
    code: str


class CodeExecutionResult(WireModel):
    """代码执行工具的输出。"""

    outcome: Outcome
    output: str | None = None


# ============ Part 变体 ============


class Part(WireModel):
    """消息片段(带标签的联合类型)。

    具体变体由 JSON 中出现的键决定。``thought`` 与 ``thought_signature``
    可以出现在任何变体上。
    """

    thought: bool | None = None
    thought_signature: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> Part:
        if cls is not Part:
            return super(Part, cls).from_dict(data)

        if isinstance(data, dict):
            for key, variant in _PART_VARIANTS:
                if key in data:
                    return variant.from_dict(data)
            if "thoughtSignature" in data and set(data) <= {"thoughtSignature", "thought"}:
                return ThoughtSignaturePart.from_dict(data)
            logger.warning(f"Unknown part keys {sorted(data)}, kept as passthrough")

        return UnknownPart.from_dict(data)

    @property
    def is_thought(self) -> bool:
        return bool(self.thought)


class TextPart(Part):
    text: str


class InlineDataPart(Part):
    inline_data: Blob


class FileDataPart(Part):
    file_data: FileData


class FunctionCallPart(Part):
    function_call: FunctionCall


class FunctionResponsePart(Part):
    function_response: FunctionResponse


class ExecutableCodePart(Part):
    executable_code: ExecutableCode


class CodeExecutionResultPart(Part):
    code_execution_result: CodeExecutionResult


class ThoughtSignaturePart(Part):
    """只携带思考签名的片段。"""


class UnknownPart(Part):
    """无法识别的片段, 所有键保存在 extra 中原样回写。"""


_PART_VARIANTS: tuple[tuple[str, type[Part]], ...] = (
    ("text", TextPart),
    ("inlineData", InlineDataPart),
    ("fileData", FileDataPart),
    ("functionCall", FunctionCallPart),
    ("functionResponse", FunctionResponsePart),
    ("executableCode", ExecutableCodePart),
    ("codeExecutionResult", CodeExecutionResultPart),
)

# 按线上键分派到具体变体的字段类型
AnyPart = polymorphic(Part)


# ============ 对话轮次 ============


class Content(WireModel):
    """一个对话轮次。

    Example:
        >>> Content.user("Hello")
        >>> Content.model("Hi there")
    """

    role: Role | None = None
    parts: tuple[AnyPart, ...] | None = None

    @classmethod
    def user(cls, text: str) -> Content:
        """创建用户文本轮次。"""
        return cls(role=Role.USER, parts=[TextPart(text=text)])

    @classmethod
    def model(cls, text: str) -> Content:
        """创建模型文本轮次。"""
        return cls(role=Role.MODEL, parts=[TextPart(text=text)])

    @classmethod
    def system(cls, text: str) -> Content:
        """创建系统指令(无角色)。"""
        return cls(parts=[TextPart(text=text)])

    @classmethod
    def function_response(
        cls, name: str, response: dict[str, Any], *, id: str | None = None
    ) -> Content:
        """创建携带函数结果的用户轮次。"""
        return cls(
            role=Role.USER,
            parts=[FunctionResponsePart(
                function_response=FunctionResponse(name=name, response=response, id=id)
            )],
        )

    @property
    def text(self) -> str:
        """所有非思考文本片段拼接后的内容。"""
        return "".join(
            p.text for p in self.parts or []
            if isinstance(p, TextPart) and not p.is_thought
        )


__all__ = [
    "AnyPart",
    "Blob",
    "CodeExecutionResult",
    "CodeExecutionResultPart",
    "Content",
    "ExecutableCode",
    "ExecutableCodePart",
    "FileData",
    "FileDataPart",
    "FunctionCall",
    "FunctionCallPart",
    "FunctionResponse",
    "FunctionResponsePart",
    "InlineDataPart",
    "Language",
    "Outcome",
    "Part",
    "Role",
    "TextPart",
    "ThoughtSignaturePart",
    "UnknownPart",
]
