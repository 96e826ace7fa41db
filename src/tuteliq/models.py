from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Union

from .enums import (
    AnalysisType,
    Audience,
    ContentSeverity,
    EmotionTrend,
    GroomingRisk,
    ImageAnalysisType,
    MessageRole,
    RiskLevel,
    Severity,
    VoiceAnalysisType,
)
from .serialization import JsonValue, from_wire

__all__ = [
    "AnalysisContext",
    "DetectBullyingInput",
    "BullyingResult",
    "DetectUnsafeInput",
    "UnsafeResult",
    "GroomingMessage",
    "DetectGroomingInput",
    "GroomingResult",
    "AnalyzeInput",
    "AnalyzeResult",
    "EmotionMessage",
    "AnalyzeEmotionsInput",
    "EmotionsResult",
    "GetActionPlanInput",
    "ActionPlanResult",
    "ReportMessage",
    "GenerateReportInput",
    "ReportResult",
    "BatchItem",
    "BatchAnalyzeInput",
    "BatchResultItem",
    "BatchSummary",
    "BatchAnalyzeResult",
    "AnalyzeVoiceInput",
    "AnalyzeImageInput",
    "TranscriptionSegment",
    "Transcription",
    "MediaAnalysis",
    "VoiceAnalysisResult",
    "VisionResult",
    "ImageAnalysisResult",
]

# ---------- Common ----------


@dataclass
class AnalysisContext:
    """Optional hints that improve analysis accuracy."""

    language: str | None = None
    # e.g. "11-13"
    age_group: str | None = None
    # e.g. "classmates"
    relationship: str | None = None
    # e.g. "Discord"; the SDK identifier is appended on the wire
    platform: str | None = None


# ---------- Bullying / unsafe ----------


@dataclass
class DetectBullyingInput:
    content: str
    context: AnalysisContext | None = None
    # correlation ID echoed back (max 255 chars)
    external_id: str | None = None
    # multi-tenant customer ID used for webhook routing (max 255 chars)
    customer_id: str | None = None
    metadata: dict[str, JsonValue] | None = None


@dataclass
class BullyingResult:
    is_bullying: bool
    bullying_type: list[str]
    confidence: float
    severity: Severity
    rationale: str
    recommended_action: str
    risk_score: float
    external_id: str | None = None
    customer_id: str | None = None
    metadata: dict[str, JsonValue] | None = None


@dataclass
class DetectUnsafeInput:
    content: str
    context: AnalysisContext | None = None
    external_id: str | None = None
    customer_id: str | None = None
    metadata: dict[str, JsonValue] | None = None


@dataclass
class UnsafeResult:
    unsafe: bool
    categories: list[str]
    severity: Severity
    confidence: float
    risk_score: float
    rationale: str
    recommended_action: str
    external_id: str | None = None
    customer_id: str | None = None
    metadata: dict[str, JsonValue] | None = None


# ---------- Grooming ----------


@dataclass
class GroomingMessage:
    role: MessageRole
    content: str
    timestamp: datetime | None = None


@dataclass
class DetectGroomingInput:
    messages: list[GroomingMessage]
    child_age: int | None = None
    context: AnalysisContext | None = None
    external_id: str | None = None
    customer_id: str | None = None
    metadata: dict[str, JsonValue] | None = None


@dataclass
class GroomingResult:
    grooming_risk: GroomingRisk
    confidence: float
    flags: list[str]
    rationale: str
    risk_score: float
    recommended_action: str
    external_id: str | None = None
    customer_id: str | None = None
    metadata: dict[str, JsonValue] | None = None


# ---------- Combined analysis ----------


@dataclass
class AnalyzeInput:
    """Input for the client-side combined bullying + unsafe analysis."""

    content: str
    context: AnalysisContext | None = None
    # defaults to bullying + unsafe
    include: list[AnalysisType] | None = None
    external_id: str | None = None
    customer_id: str | None = None
    metadata: dict[str, JsonValue] | None = None


@dataclass
class AnalyzeResult:
    risk_level: str
    risk_score: float
    summary: str
    recommended_action: str
    bullying: BullyingResult | None = None
    unsafe: UnsafeResult | None = None
    external_id: str | None = None
    customer_id: str | None = None
    metadata: dict[str, JsonValue] | None = None

    @property
    def risk_level_value(self) -> Union[RiskLevel, None]:
        try:
            return RiskLevel(self.risk_level)
        except ValueError:
            return None


# ---------- Emotions ----------


@dataclass
class EmotionMessage:
    sender: str
    content: str
    timestamp: datetime | None = None


@dataclass
class AnalyzeEmotionsInput:
    # a single text is sent as one "user" message
    content: str | None = None
    messages: list[EmotionMessage] | None = None
    context: AnalysisContext | None = None
    external_id: str | None = None
    customer_id: str | None = None
    metadata: dict[str, JsonValue] | None = None


@dataclass
class EmotionsResult:
    dominant_emotions: list[str]
    emotion_scores: dict[str, float]
    trend: EmotionTrend
    summary: str
    recommended_followup: str
    external_id: str | None = None
    customer_id: str | None = None
    metadata: dict[str, JsonValue] | None = None


# ---------- Guidance / reports ----------


@dataclass
class GetActionPlanInput:
    situation: str
    child_age: int | None = None
    # defaults to Audience.PARENT
    audience: Audience | None = None
    severity: Severity | None = None
    external_id: str | None = None
    customer_id: str | None = None
    metadata: dict[str, JsonValue] | None = None


@dataclass
class ActionPlanResult:
    audience: str
    steps: list[str]
    tone: str
    reading_level: str | None = field(default=None, metadata={"key": "approx_reading_level"})
    external_id: str | None = None
    customer_id: str | None = None
    metadata: dict[str, JsonValue] | None = None


@dataclass
class ReportMessage:
    sender: str
    content: str
    timestamp: datetime | None = None


@dataclass
class GenerateReportInput:
    messages: list[ReportMessage]
    child_age: int | None = None
    # e.g. "bullying", "grooming"
    incident_type: str | None = None
    conversation_id: str | None = None
    # [start, end] as ISO strings
    timestamp_range: list[str] | None = None
    external_id: str | None = None
    customer_id: str | None = None
    metadata: dict[str, JsonValue] | None = None


@dataclass
class ReportResult:
    summary: str
    risk_level: str
    categories: list[str]
    recommended_next_steps: list[str]
    external_id: str | None = None
    customer_id: str | None = None
    metadata: dict[str, JsonValue] | None = None

    @property
    def risk_level_value(self) -> Union[RiskLevel, None]:
        try:
            return RiskLevel(self.risk_level)
        except ValueError:
            return None


# ---------- Batch ----------


@dataclass
class BatchItem:
    """One item of a batch request; build it with the per-type constructors."""

    id: str
    type: AnalysisType
    text: str | None = None
    messages: list[Union[GroomingMessage, EmotionMessage]] | None = None
    context: AnalysisContext | None = None

    @classmethod
    def bullying(cls, id: str, text: str, context: AnalysisContext | None = None):
        return cls(id=id, type=AnalysisType.BULLYING, text=text, context=context)

    @classmethod
    def unsafe(cls, id: str, text: str, context: AnalysisContext | None = None):
        return cls(id=id, type=AnalysisType.UNSAFE, text=text, context=context)

    @classmethod
    def grooming(
        cls, id: str, messages: list[GroomingMessage], context: AnalysisContext | None = None
    ):
        return cls(id=id, type=AnalysisType.GROOMING, messages=list(messages), context=context)

    @classmethod
    def emotions(
        cls, id: str, messages: list[EmotionMessage], context: AnalysisContext | None = None
    ):
        return cls(id=id, type=AnalysisType.EMOTIONS, messages=list(messages), context=context)


@dataclass
class BatchAnalyzeInput:
    # max 50 items
    items: list[BatchItem]
    parallel: bool = True


@dataclass
class BatchResultItem:
    id: str
    type: str
    success: bool
    result: JsonValue = None
    error: str | None = None

    def decode_result(self, tp) -> Any:
        """Decode the embedded result as tp, e.g. item.decode_result(BullyingResult)."""
        if self.result is None:
            return None
        return from_wire(tp, self.result)


@dataclass
class BatchSummary:
    total: int
    successful: int
    failed: int
    processing_time_ms: int


@dataclass
class BatchAnalyzeResult:
    results: list[BatchResultItem]
    summary: BatchSummary


# ---------- Media ----------


@dataclass
class AnalyzeVoiceInput:
    """Audio upload; supported formats are mp3, wav, m4a, ogg, flac, webm and mp4."""

    file: bytes
    filename: str
    analysis_type: VoiceAnalysisType | None = None
    file_id: str | None = None
    external_id: str | None = None
    customer_id: str | None = None
    age_group: str | None = None
    language: str | None = None
    platform: str | None = None
    child_age: int | None = None
    metadata: dict[str, JsonValue] | None = None


@dataclass
class AnalyzeImageInput:
    """Image upload; supported formats are png, jpg, jpeg, gif and webp."""

    file: bytes
    filename: str
    analysis_type: ImageAnalysisType | None = None
    file_id: str | None = None
    external_id: str | None = None
    customer_id: str | None = None
    age_group: str | None = None
    platform: str | None = None
    metadata: dict[str, JsonValue] | None = None


@dataclass
class TranscriptionSegment:
    start: float
    end: float
    text: str


@dataclass
class Transcription:
    text: str
    language: str | None = None
    duration: float | None = None
    segments: list[TranscriptionSegment] = field(default_factory=list)


@dataclass
class MediaAnalysis:
    bullying: BullyingResult | None = None
    unsafe: UnsafeResult | None = None
    grooming: GroomingResult | None = None
    emotions: EmotionsResult | None = None


@dataclass
class VoiceAnalysisResult:
    transcription: Transcription
    analysis: MediaAnalysis
    overall_risk_score: float
    overall_severity: ContentSeverity
    file_id: str | None = None
    external_id: str | None = None
    customer_id: str | None = None
    metadata: dict[str, JsonValue] | None = None


@dataclass
class VisionResult:
    extracted_text: str
    visual_categories: list[str]
    visual_severity: ContentSeverity
    visual_confidence: float
    visual_description: str | None = None
    contains_text: bool = False
    contains_faces: bool = False


@dataclass
class ImageAnalysisResult:
    vision: VisionResult
    overall_risk_score: float
    overall_severity: ContentSeverity
    text_analysis: MediaAnalysis | None = None
    file_id: str | None = None
    external_id: str | None = None
    customer_id: str | None = None
    metadata: dict[str, JsonValue] | None = None
