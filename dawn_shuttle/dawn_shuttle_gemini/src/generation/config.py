"""生成参数配置。

所有字段均可选, ``None`` 表示使用 API 默认值, 序列化时省略。
"""

from __future__ import annotations

from typing import Any

from ..core.serde import WireEnum, WireModel


class Modality(WireEnum):
    """响应模态。"""

    UNSPECIFIED = "MODALITY_UNSPECIFIED"
    TEXT = "TEXT"
    IMAGE = "IMAGE"
    AUDIO = "AUDIO"
    VIDEO = "VIDEO"
    DOCUMENT = "DOCUMENT"


class ThinkingLevel(WireEnum):
    """思考深度(Gemini 3 系列)。"""

    UNSPECIFIED = "THINKING_LEVEL_UNSPECIFIED"
    MINIMAL = "MINIMAL"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class MediaResolution(WireEnum):
    """输入媒体的处理分辨率。"""

    UNSPECIFIED = "MEDIA_RESOLUTION_UNSPECIFIED"
    LOW = "MEDIA_RESOLUTION_LOW"
    MEDIUM = "MEDIA_RESOLUTION_MEDIUM"
    HIGH = "MEDIA_RESOLUTION_HIGH"


class ThinkingConfig(WireModel):
    """思考配置。

    Attributes:
        thinking_budget: 思考 token 预算, -1 表示由模型动态决定, 0 表示关闭。
        include_thoughts: 是否在响应中返回思考摘要。
        thinking_level: 思考深度, 与 thinking_budget 二选一。
    """

    thinking_budget: int | None = None
    include_thoughts: bool | None = None
    thinking_level: ThinkingLevel | None = None


class PrebuiltVoiceConfig(WireModel):
    voice_name: str


class VoiceConfig(WireModel):
    prebuilt_voice_config: PrebuiltVoiceConfig | None = None

    @classmethod
    def named(cls, voice_name: str) -> VoiceConfig:
        return cls(prebuilt_voice_config=PrebuiltVoiceConfig(voice_name=voice_name))


class SpeakerVoiceConfig(WireModel):
    speaker: str
    voice_config: VoiceConfig


class MultiSpeakerVoiceConfig(WireModel):
    speaker_voice_configs: tuple[SpeakerVoiceConfig, ...]


class SpeechConfig(WireModel):
    """语音合成配置: 单一音色或多说话人, 二选一。"""

    voice_config: VoiceConfig | None = None
    multi_speaker_voice_config: MultiSpeakerVoiceConfig | None = None
    language_code: str | None = None


class GenerationConfig(WireModel):
    """生成参数。

    Attributes:
        temperature: 采样温度。
        top_p: 核采样阈值。
        top_k: Top-K 采样。
        candidate_count: 候选数量。
        max_output_tokens: 最大输出 token 数。
        stop_sequences: 停止序列。
        presence_penalty: 存在惩罚。
        frequency_penalty: 频率惩罚。
        seed: 随机种子。
        response_mime_type: 响应 MIME 类型(如 application/json)。
        response_schema: 结构化输出的 Schema。
        response_modalities: 响应模态列表。
        thinking_config: 思考配置。
        media_resolution: 媒体分辨率。
        speech_config: 语音配置。
    """

    temperature: float | None = None
    top_p: float | None = None
    top_k: int | None = None
    candidate_count: int | None = None
    max_output_tokens: int | None = None
    stop_sequences: tuple[str, ...] | None = None
    presence_penalty: float | None = None
    frequency_penalty: float | None = None
    seed: int | None = None
    response_mime_type: str | None = None
    response_schema: dict[str, Any] | None = None
    response_modalities: tuple[Modality, ...] | None = None
    response_logprobs: bool | None = None
    logprobs: int | None = None
    thinking_config: ThinkingConfig | None = None
    media_resolution: MediaResolution | None = None
    speech_config: SpeechConfig | None = None


__all__ = [
    "GenerationConfig",
    "MediaResolution",
    "Modality",
    "MultiSpeakerVoiceConfig",
    "PrebuiltVoiceConfig",
    "SpeakerVoiceConfig",
    "SpeechConfig",
    "ThinkingConfig",
    "ThinkingLevel",
    "VoiceConfig",
]
