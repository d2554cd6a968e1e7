"""ContentBuilder - 流式 API 组装多轮生成请求。"""

from __future__ import annotations

import base64
import copy
from collections.abc import AsyncIterator, Iterable
from typing import TYPE_CHECKING, Any

from ..core.error import BuildError, ConfigurationError
from ..core.response import GenerateResponse
from ..core.safety import HarmBlockThreshold, HarmCategory, SafetySetting
from ..core.types import (
    Blob,
    Content,
    FileData,
    FileDataPart,
    InlineDataPart,
    Part,
    Role,
)
from ..tools.types import (
    CodeExecutionTool,
    FileSearchConfig,
    FileSearchTool,
    FunctionCallingConfig,
    FunctionCallingMode,
    FunctionDeclaration,
    FunctionTool,
    GoogleMapsConfig,
    GoogleMapsTool,
    GoogleSearchTool,
    Tool,
    ToolConfig,
    UnknownTool,
    UrlContextTool,
)
from .config import (
    GenerationConfig,
    MediaResolution,
    Modality,
    MultiSpeakerVoiceConfig,
    SpeakerVoiceConfig,
    SpeechConfig,
    ThinkingConfig,
    ThinkingLevel,
    VoiceConfig,
)
from .request import CountTokensResponse, GenerateContentRequest

if TYPE_CHECKING:
    from ..core.client import Gemini

# 可以在同一请求中重复出现的工具类型
_REPEATABLE_TOOLS = (FunctionTool, UnknownTool)


class ContentBuilder:
    """生成请求构造器。

    所有 ``with_*`` 方法修改自身并返回 self, ``build()`` 返回与构造器
    不共享可变状态的不可变请求。

    Example:
        >>> response = await (
        ...     client.generate_content()
        ...     .with_system_prompt("You are terse.")
        ...     .with_user_message("2+2?")
        ...     .with_max_output_tokens(16)
        ...     .execute()
        ... )
        >>> response.text()
        '4'
    """

    def __init__(self, client: Gemini | None = None, model: str | None = None) -> None:
        self._client = client
        self._model = model
        self._contents: list[Content] = []
        self._system_instruction: Content | None = None
        self._tools: list[Tool] = []
        self._tool_config: ToolConfig | None = None
        self._safety_settings: dict[HarmCategory, SafetySetting] = {}
        self._generation_config: GenerationConfig | None = None
        self._cached_content: str | None = None

    # ============ 对话内容 ============

    def with_system_prompt(self, text: str) -> ContentBuilder:
        """设置系统指令(重复调用时替换)。"""
        return self.with_system_instruction(text)

    def with_system_instruction(self, text: str) -> ContentBuilder:
        self._system_instruction = Content.system(text)
        return self

    def with_user_message(self, text: str) -> ContentBuilder:
        self._contents.append(Content.user(text))
        return self

    def with_model_message(self, text: str) -> ContentBuilder:
        self._contents.append(Content.model(text))
        return self

    def with_message(self, content: Content) -> ContentBuilder:
        """追加一个完整的对话轮次。"""
        self._contents.append(content)
        return self

    def with_messages(self, contents: Iterable[Content]) -> ContentBuilder:
        self._contents.extend(contents)
        return self

    def with_function_response(
        self,
        name: str,
        response: dict[str, Any],
        *,
        id: str | None = None,
    ) -> ContentBuilder:
        """以用户轮次回传函数执行结果。"""
        self._contents.append(Content.function_response(name, response, id=id))
        return self

    def with_inline_data(self, mime_type: str, data: str | bytes) -> ContentBuilder:
        """附加内联数据到当前用户轮次。

        Args:
            mime_type: MIME 类型。
            data: Base64 字符串或原始字节(自动编码)。
        """
        if isinstance(data, bytes):
            data = base64.b64encode(data).decode("ascii")
        return self._append_user_part(InlineDataPart(inline_data=Blob(mime_type=mime_type, data=data)))

    def with_file(self, file: Any, mime_type: str | None = None) -> ContentBuilder:
        """引用已上传的文件。

        Args:
            file: 文件 URI, 或带 ``uri``/``mime_type`` 属性的文件对象。
            mime_type: MIME 类型(文件对象自带时可省略)。
        """
        if isinstance(file, str):
            uri = file
        else:
            uri = file.uri
            mime_type = mime_type or getattr(file, "mime_type", None)
        if not uri:
            raise BuildError("File has no URI").with_detail(field="file", value=file)
        return self._append_user_part(FileDataPart(file_data=FileData(file_uri=uri, mime_type=mime_type)))

    def _append_user_part(self, part: Part) -> ContentBuilder:
        if self._contents and self._contents[-1].role is Role.USER:
            last = self._contents[-1]
            self._contents[-1] = last.replace(parts=(*(last.parts or ()), part))
        else:
            self._contents.append(Content(role=Role.USER, parts=[part]))
        return self

    # ============ 工具 ============

    def with_tool(self, tool: Tool) -> ContentBuilder:
        self._tools.append(tool)
        return self

    def with_function(self, function: FunctionDeclaration) -> ContentBuilder:
        return self.with_tool(FunctionTool(function_declarations=[function]))

    def with_google_search(self) -> ContentBuilder:
        return self.with_tool(GoogleSearchTool())

    def with_google_maps(self, *, enable_widget: bool | None = None) -> ContentBuilder:
        return self.with_tool(GoogleMapsTool(google_maps=GoogleMapsConfig(enable_widget=enable_widget)))

    def with_url_context(self) -> ContentBuilder:
        return self.with_tool(UrlContextTool())

    def with_code_execution(self) -> ContentBuilder:
        return self.with_tool(CodeExecutionTool())

    def with_file_search(
        self,
        store_names: Iterable[Any],
        *,
        metadata_filter: str | None = None,
        top_k: int | None = None,
    ) -> ContentBuilder:
        """启用文件检索工具。

        Args:
            store_names: 存储名称或带 ``name`` 属性的存储对象。
            metadata_filter: 文档元数据过滤表达式。
            top_k: 返回的最大片段数。
        """
        names = [s if isinstance(s, str) else s.name for s in store_names]
        return self.with_tool(FileSearchTool(file_search=FileSearchConfig(
            file_search_store_names=names,
            metadata_filter=metadata_filter,
            top_k=top_k,
        )))

    def with_tool_config(self, config: ToolConfig) -> ContentBuilder:
        self._tool_config = config
        return self

    def with_function_calling_mode(
        self,
        mode: FunctionCallingMode,
        allowed_function_names: list[str] | None = None,
    ) -> ContentBuilder:
        calling = FunctionCallingConfig(mode=mode, allowed_function_names=allowed_function_names)
        self._tool_config = (self._tool_config or ToolConfig()).replace(function_calling_config=calling)
        return self

    # ============ 生成参数 ============

    def with_generation_config(self, config: GenerationConfig) -> ContentBuilder:
        """整体替换生成参数。"""
        self._generation_config = config
        return self

    def _patch_config(self, **changes: Any) -> ContentBuilder:
        self._generation_config = (self._generation_config or GenerationConfig()).replace(**changes)
        return self

    def with_temperature(self, temperature: float) -> ContentBuilder:
        return self._patch_config(temperature=temperature)

    def with_top_p(self, top_p: float) -> ContentBuilder:
        return self._patch_config(top_p=top_p)

    def with_top_k(self, top_k: int) -> ContentBuilder:
        return self._patch_config(top_k=top_k)

    def with_max_output_tokens(self, max_output_tokens: int) -> ContentBuilder:
        return self._patch_config(max_output_tokens=max_output_tokens)

    def with_candidate_count(self, candidate_count: int) -> ContentBuilder:
        return self._patch_config(candidate_count=candidate_count)

    def with_stop_sequences(self, stop_sequences: Iterable[str]) -> ContentBuilder:
        return self._patch_config(stop_sequences=list(stop_sequences))

    def with_seed(self, seed: int) -> ContentBuilder:
        return self._patch_config(seed=seed)

    def with_response_mime_type(self, mime_type: str) -> ContentBuilder:
        return self._patch_config(response_mime_type=mime_type)

    def with_response_schema(self, schema: dict[str, Any]) -> ContentBuilder:
        return self._patch_config(response_schema=schema)

    def with_response_modalities(self, modalities: Iterable[Modality]) -> ContentBuilder:
        return self._patch_config(response_modalities=list(modalities))

    def with_media_resolution(self, resolution: MediaResolution) -> ContentBuilder:
        return self._patch_config(media_resolution=resolution)

    def with_speech_config(self, speech_config: SpeechConfig) -> ContentBuilder:
        return self._patch_config(speech_config=speech_config, response_modalities=[Modality.AUDIO])

    def with_voice(self, voice_name: str) -> ContentBuilder:
        """单一音色语音输出。"""
        return self.with_speech_config(SpeechConfig(voice_config=VoiceConfig.named(voice_name)))

    def with_multi_speaker_voices(self, voices: dict[str, str]) -> ContentBuilder:
        """多说话人语音输出。

        Args:
            voices: 说话人名 -> 音色名。
        """
        speakers = [
            SpeakerVoiceConfig(speaker=speaker, voice_config=VoiceConfig.named(voice))
            for speaker, voice in voices.items()
        ]
        return self.with_speech_config(SpeechConfig(
            multi_speaker_voice_config=MultiSpeakerVoiceConfig(speaker_voice_configs=speakers),
        ))

    # ============ 思考配置 ============

    def _patch_thinking(self, **changes: Any) -> ContentBuilder:
        current = self._generation_config.thinking_config if self._generation_config else None
        return self._patch_config(thinking_config=(current or ThinkingConfig()).replace(**changes))

    def with_thinking_config(self, thinking_config: ThinkingConfig) -> ContentBuilder:
        return self._patch_config(thinking_config=thinking_config)

    def with_thinking_budget(self, budget: int) -> ContentBuilder:
        """设置思考预算, 清除已设置的 thinking_level。"""
        return self._patch_thinking(thinking_budget=budget, thinking_level=None)

    def with_dynamic_thinking(self) -> ContentBuilder:
        """由模型动态决定思考预算。"""
        return self.with_thinking_budget(-1)

    def with_thinking_level(self, level: ThinkingLevel) -> ContentBuilder:
        """设置思考深度, 清除已设置的 thinking_budget。"""
        return self._patch_thinking(thinking_level=level, thinking_budget=None)

    def with_thoughts_included(self, include: bool = True) -> ContentBuilder:
        return self._patch_thinking(include_thoughts=include)

    # ============ 安全与缓存 ============

    def with_safety_setting(
        self, category: HarmCategory, threshold: HarmBlockThreshold
    ) -> ContentBuilder:
        """设置单个类别的阈值, 同一类别以最后一次为准。"""
        self._safety_settings[category] = SafetySetting(category=category, threshold=threshold)
        return self

    def with_safety_settings(self, settings: Iterable[SafetySetting]) -> ContentBuilder:
        for setting in settings:
            self._safety_settings[setting.category] = setting
        return self

    def with_cached_content(self, cache: Any) -> ContentBuilder:
        """引用已创建的缓存(名称字符串或带 ``name`` 属性的句柄)。"""
        self._cached_content = cache if isinstance(cache, str) else cache.name
        return self

    # ============ 构造与执行 ============

    def build(self) -> GenerateContentRequest:
        """生成不可变请求。

        Raises:
            BuildError: 没有任何对话轮次, 或同一内置工具出现多次。
        """
        if not self._contents:
            raise BuildError("Request must contain at least one turn").with_detail(
                field="contents", reason="empty",
                suggestion="call with_user_message() before build()",
            )

        seen: set[type[Tool]] = set()
        for tool in self._tools:
            kind = type(tool)
            if isinstance(tool, _REPEATABLE_TOOLS):
                continue
            if kind in seen:
                raise BuildError(f"Duplicate built-in tool: {kind.__name__}").with_detail(
                    field="tools", value=kind.__name__, reason="duplicate",
                )
            seen.add(kind)

        return GenerateContentRequest(
            contents=copy.deepcopy(self._contents),
            system_instruction=copy.deepcopy(self._system_instruction),
            tools=copy.deepcopy(self._tools) or None,
            tool_config=copy.deepcopy(self._tool_config),
            safety_settings=list(self._safety_settings.values()) or None,
            generation_config=copy.deepcopy(self._generation_config),
            cached_content=self._cached_content,
        )

    def _require_client(self) -> Gemini:
        if self._client is None:
            raise ConfigurationError("ContentBuilder is not bound to a client")
        return self._client

    async def execute(self) -> GenerateResponse:
        """发送请求并返回完整响应。"""
        client = self._require_client()
        return await client.generate(self.build(), model=self._model)

    def execute_stream(self) -> AsyncIterator[GenerateResponse]:
        """发送流式请求, 逐个返回响应片段。"""
        client = self._require_client()
        return client.generate_stream(self.build(), model=self._model)

    async def count_tokens(self) -> CountTokensResponse:
        """统计当前请求的输入 token 数。"""
        client = self._require_client()
        return await client.count_tokens(self.build(), model=self._model)


__all__ = ["ContentBuilder"]
