"""测试 generation/builder.py - 生成请求构造器。"""

from __future__ import annotations

import base64
from typing import Any

import pytest
from pydantic import ValidationError

from dawn_shuttle.dawn_shuttle_gemini.src.core.error import BuildError, ConfigurationError
from dawn_shuttle.dawn_shuttle_gemini.src.core.safety import (
    HarmBlockThreshold,
    HarmCategory,
    SafetySetting,
)
from dawn_shuttle.dawn_shuttle_gemini.src.core.types import (
    Content,
    FunctionResponsePart,
    Role,
    TextPart,
)
from dawn_shuttle.dawn_shuttle_gemini.src.generation.builder import ContentBuilder
from dawn_shuttle.dawn_shuttle_gemini.src.generation.config import (
    GenerationConfig,
    Modality,
    ThinkingLevel,
)
from dawn_shuttle.dawn_shuttle_gemini.src.tools.types import (
    FunctionCallingMode,
    FunctionDeclaration,
    GoogleSearchTool,
    ToolConfig,
)


class _Named:
    def __init__(self, name: str) -> None:
        self.name = name


class _UploadedFile:
    uri = "https://generativelanguage.googleapis.com/v1beta/files/abc"
    mime_type = "video/mp4"


class TestContentBuilder:
    """测试对话内容。"""

    def test_terse_example(self) -> None:
        """测试系统指令、用户消息与输出上限。"""
        request = (
            ContentBuilder()
            .with_system_prompt("You are terse.")
            .with_user_message("2+2?")
            .with_max_output_tokens(16)
            .build()
        )
        assert request.to_dict() == {
            "contents": [{"role": "user", "parts": [{"text": "2+2?"}]}],
            "systemInstruction": {"parts": [{"text": "You are terse."}]},
            "generationConfig": {"maxOutputTokens": 16},
        }

    def test_turn_order_preserved(self) -> None:
        """测试轮次顺序与调用顺序一致。"""
        request = (
            ContentBuilder()
            .with_user_message("a")
            .with_model_message("b")
            .with_user_message("c")
            .build()
        )
        assert [(c.role, c.text) for c in request.contents] == [
            (Role.USER, "a"), (Role.MODEL, "b"), (Role.USER, "c"),
        ]

    def test_empty_contents(self) -> None:
        """测试没有轮次时报错。"""
        with pytest.raises(BuildError) as exc_info:
            ContentBuilder().with_system_prompt("x").build()
        assert exc_info.value.details[0].field == "contents"

    def test_system_prompt_replaced(self) -> None:
        """测试系统指令以最后一次为准。"""
        request = ContentBuilder().with_system_prompt("a").with_system_instruction("b").with_user_message("x").build()
        assert request.system_instruction.text == "b"

    def test_with_messages(self) -> None:
        """测试批量追加轮次。"""
        history = [Content.user("hi"), Content.model("hello")]
        request = ContentBuilder().with_messages(history).with_message(Content.user("bye")).build()
        assert len(request.contents) == 3

    def test_function_response(self) -> None:
        """测试回传函数结果。"""
        request = (
            ContentBuilder()
            .with_user_message("weather?")
            .with_function_response("get_weather", {"temp": 20}, id="call-1")
            .build()
        )
        part = request.contents[-1].parts[0]
        assert isinstance(part, FunctionResponsePart)
        assert part.function_response.id == "call-1"

    def test_build_is_isolated(self) -> None:
        """测试 build 结果不受后续修改影响。"""
        builder = ContentBuilder().with_user_message("a")
        first = builder.build()
        builder.with_user_message("b").with_temperature(0.5)
        assert len(first.contents) == 1
        assert first.generation_config is None
        assert len(builder.build().contents) == 2

    def test_built_request_is_immutable(self) -> None:
        """测试构造出的请求及其嵌套内容不可修改。"""
        request = ContentBuilder().with_user_message("a").build()
        with pytest.raises(AttributeError):
            request.contents.append(Content.user("b"))
        with pytest.raises(AttributeError):
            request.contents[0].parts.append(TextPart(text="b"))
        with pytest.raises(ValidationError):
            request.cached_content = "cachedContents/x"
        assert request.to_dict() == {"contents": [{"role": "user", "parts": [{"text": "a"}]}]}


class TestMediaParts:
    """测试多媒体片段。"""

    def test_inline_bytes_encoded(self) -> None:
        """测试字节自动 Base64 编码并追加到当前用户轮次。"""
        request = (
            ContentBuilder()
            .with_user_message("describe")
            .with_inline_data("image/png", b"\x89PNG")
            .build()
        )
        assert len(request.contents) == 1
        parts = request.contents[0].to_dict()["parts"]
        assert parts[1] == {
            "inlineData": {"mimeType": "image/png", "data": base64.b64encode(b"\x89PNG").decode()},
        }

    def test_inline_after_model_turn(self) -> None:
        """测试模型轮次之后附加媒体会开启新的用户轮次。"""
        request = (
            ContentBuilder()
            .with_user_message("a")
            .with_model_message("b")
            .with_inline_data("image/png", "AAAA")
            .build()
        )
        assert len(request.contents) == 3
        assert request.contents[2].role is Role.USER

    def test_file_object(self) -> None:
        """测试引用文件对象。"""
        request = ContentBuilder().with_file(_UploadedFile()).with_user_message("summarize").build()
        assert request.contents[0].to_dict() == {
            "role": "user",
            "parts": [{"fileData": {"fileUri": _UploadedFile.uri, "mimeType": "video/mp4"}}],
        }

    def test_file_uri(self) -> None:
        """测试引用文件 URI。"""
        request = ContentBuilder().with_file("gs://bucket/a.pdf", "application/pdf").build()
        assert request.contents[0].parts[0].file_data.file_uri == "gs://bucket/a.pdf"

    def test_file_without_uri(self) -> None:
        """测试文件缺少 URI。"""
        class NoUri:
            uri = None

        with pytest.raises(BuildError):
            ContentBuilder().with_file(NoUri())


class TestTools:
    """测试工具配置。"""

    def test_functions_are_separate_tools(self) -> None:
        """测试每个函数声明成为独立的工具。"""
        request = (
            ContentBuilder()
            .with_user_message("x")
            .with_function(FunctionDeclaration(name="a"))
            .with_function(FunctionDeclaration(name="b"))
            .build()
        )
        assert [t.to_dict() for t in request.tools] == [
            {"functionDeclarations": [{"name": "a", "description": ""}]},
            {"functionDeclarations": [{"name": "b", "description": ""}]},
        ]

    def test_builtin_tools(self) -> None:
        """测试内置工具组合。"""
        request = (
            ContentBuilder()
            .with_user_message("x")
            .with_google_search()
            .with_url_context()
            .with_code_execution()
            .with_google_maps(enable_widget=True)
            .build()
        )
        assert [t.to_dict() for t in request.tools] == [
            {"googleSearch": {}},
            {"urlContext": {}},
            {"codeExecution": {}},
            {"googleMaps": {"enableWidget": True}},
        ]

    def test_duplicate_builtin_tool(self) -> None:
        """测试重复的内置工具被拒绝。"""
        builder = ContentBuilder().with_user_message("x").with_google_search().with_tool(GoogleSearchTool())
        with pytest.raises(BuildError):
            builder.build()

    def test_file_search(self) -> None:
        """测试文件检索工具。"""
        request = (
            ContentBuilder()
            .with_user_message("x")
            .with_file_search([_Named("fileSearchStores/a"), "fileSearchStores/b"], top_k=5)
            .build()
        )
        assert request.tools[0].to_dict() == {
            "fileSearch": {
                "fileSearchStoreNames": ["fileSearchStores/a", "fileSearchStores/b"],
                "topK": 5,
            },
        }

    def test_function_calling_mode(self) -> None:
        """测试函数调用模式。"""
        request = (
            ContentBuilder()
            .with_user_message("x")
            .with_tool_config(ToolConfig.with_location(1.0, 2.0))
            .with_function_calling_mode(FunctionCallingMode.ANY, ["a"])
            .build()
        )
        data = request.tool_config.to_dict()
        assert data["functionCallingConfig"] == {"mode": "ANY", "allowedFunctionNames": ["a"]}
        assert "retrievalConfig" in data


class TestGenerationParams:
    """测试生成参数。"""

    def _config(self, builder: ContentBuilder) -> dict[str, Any]:
        return builder.with_user_message("x").build().to_dict()["generationConfig"]

    def test_sampling(self) -> None:
        """测试采样参数。"""
        config = self._config(
            ContentBuilder()
            .with_temperature(0.2)
            .with_top_p(0.9)
            .with_top_k(40)
            .with_candidate_count(2)
            .with_stop_sequences(["END"])
            .with_seed(7)
        )
        assert config == {
            "temperature": 0.2,
            "topP": 0.9,
            "topK": 40,
            "candidateCount": 2,
            "stopSequences": ["END"],
            "seed": 7,
        }

    def test_structured_output(self) -> None:
        """测试结构化输出。"""
        schema = {"type": "object", "properties": {"answer": {"type": "integer"}}}
        config = self._config(
            ContentBuilder().with_response_mime_type("application/json").with_response_schema(schema)
        )
        assert config == {"responseMimeType": "application/json", "responseSchema": schema}

    def test_generation_config_replaced(self) -> None:
        """测试整体替换生成参数后仍可继续修改。"""
        config = self._config(
            ContentBuilder()
            .with_temperature(1.0)
            .with_generation_config(GenerationConfig(max_output_tokens=8))
            .with_seed(1)
        )
        assert config == {"maxOutputTokens": 8, "seed": 1}

    def test_thinking(self) -> None:
        """测试思考配置合并。"""
        config = self._config(
            ContentBuilder().with_thinking_budget(1024).with_thoughts_included()
        )
        assert config == {"thinkingConfig": {"thinkingBudget": 1024, "includeThoughts": True}}

    def test_dynamic_thinking(self) -> None:
        """测试动态思考预算。"""
        config = self._config(ContentBuilder().with_dynamic_thinking())
        assert config["thinkingConfig"] == {"thinkingBudget": -1}

    def test_thinking_level(self) -> None:
        """测试思考深度。"""
        config = self._config(ContentBuilder().with_thinking_level(ThinkingLevel.LOW))
        assert config["thinkingConfig"] == {"thinkingLevel": "LOW"}

    def test_thinking_level_clears_budget(self) -> None:
        """测试思考深度与思考预算互斥, 以最后一次设置为准。"""
        builder = ContentBuilder().with_thinking_budget(1024).with_thoughts_included()
        config = self._config(builder.with_thinking_level(ThinkingLevel.HIGH))
        assert config["thinkingConfig"] == {"includeThoughts": True, "thinkingLevel": "HIGH"}

        config = self._config(builder.with_thinking_budget(512))
        assert config["thinkingConfig"] == {"includeThoughts": True, "thinkingBudget": 512}

    def test_dynamic_thinking_clears_level(self) -> None:
        """测试动态思考预算清除思考深度。"""
        builder = ContentBuilder().with_thinking_level(ThinkingLevel.LOW).with_dynamic_thinking()
        assert self._config(builder)["thinkingConfig"] == {"thinkingBudget": -1}

    def test_voice(self) -> None:
        """测试语音输出。"""
        config = self._config(ContentBuilder().with_voice("Kore"))
        assert config == {
            "responseModalities": ["AUDIO"],
            "speechConfig": {"voiceConfig": {"prebuiltVoiceConfig": {"voiceName": "Kore"}}},
        }

    def test_multi_speaker(self) -> None:
        """测试多说话人语音。"""
        config = self._config(ContentBuilder().with_multi_speaker_voices({"Joe": "Kore", "Jane": "Puck"}))
        speakers = config["speechConfig"]["multiSpeakerVoiceConfig"]["speakerVoiceConfigs"]
        assert [s["speaker"] for s in speakers] == ["Joe", "Jane"]

    def test_response_modalities(self) -> None:
        """测试响应模态。"""
        config = self._config(ContentBuilder().with_response_modalities([Modality.TEXT, Modality.IMAGE]))
        assert config == {"responseModalities": ["TEXT", "IMAGE"]}


class TestSafetyAndCache:
    """测试安全设置与缓存引用。"""

    def test_safety_setting_last_wins(self) -> None:
        """测试同一类别以最后一次为准。"""
        request = (
            ContentBuilder()
            .with_user_message("x")
            .with_safety_setting(HarmCategory.HARASSMENT, HarmBlockThreshold.BLOCK_NONE)
            .with_safety_settings([
                SafetySetting(category=HarmCategory.HATE_SPEECH, threshold=HarmBlockThreshold.BLOCK_ONLY_HIGH),
                SafetySetting(category=HarmCategory.HARASSMENT, threshold=HarmBlockThreshold.BLOCK_LOW_AND_ABOVE),
            ])
            .build()
        )
        assert [s.to_dict() for s in request.safety_settings] == [
            {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_LOW_AND_ABOVE"},
            {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_ONLY_HIGH"},
        ]

    def test_cached_content(self) -> None:
        """测试引用缓存。"""
        request = ContentBuilder().with_user_message("x").with_cached_content(_Named("cachedContents/1")).build()
        assert request.to_dict()["cachedContent"] == "cachedContents/1"


class TestExecute:
    """测试执行。"""

    @pytest.mark.asyncio
    async def test_unbound_builder(self) -> None:
        """测试未绑定客户端时报错。"""
        with pytest.raises(ConfigurationError):
            await ContentBuilder().with_user_message("x").execute()

    @pytest.mark.asyncio
    async def test_build_error_before_network(self, client, transport) -> None:
        """测试构造失败时不会发送请求。"""
        with pytest.raises(BuildError):
            await client.generate_content().execute()
        assert transport.calls == []

    @pytest.mark.asyncio
    async def test_execute(self, client, transport, text_response_dict) -> None:
        """测试执行生成请求。"""
        transport.queue(text_response_dict)
        response = await (
            client.generate_content()
            .with_system_prompt("You are terse.")
            .with_user_message("2+2?")
            .with_max_output_tokens(16)
            .execute()
        )
        assert response.text() == "4"
        assert list(response.function_calls()) == []
        assert list(response.thoughts()) == []
        assert transport.calls[0]["path"] == "models/gemini-2.5-flash:generateContent"
