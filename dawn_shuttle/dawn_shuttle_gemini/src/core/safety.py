"""安全设置与安全评级。"""

from __future__ import annotations

from .serde import WireEnum, WireModel


class HarmCategory(WireEnum):
    """有害内容类别。"""

    UNSPECIFIED = "HARM_CATEGORY_UNSPECIFIED"
    DEROGATORY = "HARM_CATEGORY_DEROGATORY"
    TOXICITY = "HARM_CATEGORY_TOXICITY"
    VIOLENCE = "HARM_CATEGORY_VIOLENCE"
    SEXUAL = "HARM_CATEGORY_SEXUAL"
    MEDICAL = "HARM_CATEGORY_MEDICAL"
    DANGEROUS = "HARM_CATEGORY_DANGEROUS"
    HARASSMENT = "HARM_CATEGORY_HARASSMENT"
    HATE_SPEECH = "HARM_CATEGORY_HATE_SPEECH"
    SEXUALLY_EXPLICIT = "HARM_CATEGORY_SEXUALLY_EXPLICIT"
    DANGEROUS_CONTENT = "HARM_CATEGORY_DANGEROUS_CONTENT"
    CIVIC_INTEGRITY = "HARM_CATEGORY_CIVIC_INTEGRITY"


class HarmBlockThreshold(WireEnum):
    """拦截阈值。"""

    UNSPECIFIED = "HARM_BLOCK_THRESHOLD_UNSPECIFIED"
    BLOCK_LOW_AND_ABOVE = "BLOCK_LOW_AND_ABOVE"
    BLOCK_MEDIUM_AND_ABOVE = "BLOCK_MEDIUM_AND_ABOVE"
    BLOCK_ONLY_HIGH = "BLOCK_ONLY_HIGH"
    BLOCK_NONE = "BLOCK_NONE"
    OFF = "OFF"


class HarmProbability(WireEnum):
    """内容有害的概率等级。"""

    UNSPECIFIED = "HARM_PROBABILITY_UNSPECIFIED"
    NEGLIGIBLE = "NEGLIGIBLE"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class BlockReason(WireEnum):
    """提示词被拦截的原因。"""

    UNSPECIFIED = "BLOCK_REASON_UNSPECIFIED"
    SAFETY = "SAFETY"
    OTHER = "OTHER"
    BLOCKLIST = "BLOCKLIST"
    PROHIBITED_CONTENT = "PROHIBITED_CONTENT"
    IMAGE_SAFETY = "IMAGE_SAFETY"


class SafetySetting(WireModel):
    """单个类别的拦截阈值。"""

    category: HarmCategory
    threshold: HarmBlockThreshold


class SafetyRating(WireModel):
    """单个类别的安全评级。"""

    category: HarmCategory
    probability: HarmProbability | None = None
    blocked: bool | None = None


class PromptFeedback(WireModel):
    """针对提示词的安全反馈。"""

    safety_ratings: tuple[SafetyRating, ...] | None = None
    block_reason: BlockReason | None = None


__all__ = [
    "BlockReason",
    "HarmBlockThreshold",
    "HarmCategory",
    "HarmProbability",
    "PromptFeedback",
    "SafetyRating",
    "SafetySetting",
]
