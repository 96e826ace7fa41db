from .adapters import (
    AiohttpTransport,
    AsyncHttpxTransport,
    AsyncTransport,
    HttpxTransport,
    RequestsTransport,
    Transport,
)
from .cancellation import CancellationToken
from .client import AsyncTuteliq, Tuteliq
from .endpoints import SDK_IDENTIFIER, resolve_platform
from .enums import (
    AnalysisType,
    Audience,
    AuditAction,
    BreachNotificationStatus,
    BreachSeverity,
    BreachStatus,
    ConsentStatus,
    ConsentType,
    ContentSeverity,
    EmotionTrend,
    GroomingRisk,
    ImageAnalysisType,
    MessageRole,
    RecommendedAction,
    RiskLevel,
    Severity,
    VoiceAnalysisType,
    WebhookEventType,
)
from .env import load_config_from_env
from .errors import (
    APIErrorBody,
    AuthenticationError,
    ErrorKind,
    ErrorLinks,
    NetworkError,
    NotFoundError,
    RateLimitError,
    RequestCancelledError,
    RequestTimeoutError,
    ServerError,
    SubscriptionError,
    TuteliqError,
    UnknownError,
    ValidationError,
    classify_status,
)
from .management import *  # noqa: F403
from .management import __all__ as _management_all
from .models import *  # noqa: F403
from .models import __all__ as _models_all
from .multipart import MultipartBuilder, mime_type_for
from .state import MetadataSnapshot
from .types import ClientConfig, RateLimitInfo, RawResponse, Usage

__all__ = [
    "Tuteliq",
    "AsyncTuteliq",
    "ClientConfig",
    "CancellationToken",
    "load_config_from_env",
    "RateLimitInfo",
    "Usage",
    "RawResponse",
    "MetadataSnapshot",
    "Transport",
    "AsyncTransport",
    "HttpxTransport",
    "AsyncHttpxTransport",
    "RequestsTransport",
    "AiohttpTransport",
    "MultipartBuilder",
    "mime_type_for",
    "SDK_IDENTIFIER",
    "resolve_platform",
    "TuteliqError",
    "ErrorKind",
    "ErrorLinks",
    "APIErrorBody",
    "ValidationError",
    "AuthenticationError",
    "SubscriptionError",
    "NotFoundError",
    "RateLimitError",
    "ServerError",
    "RequestTimeoutError",
    "NetworkError",
    "RequestCancelledError",
    "UnknownError",
    "classify_status",
    "Severity",
    "GroomingRisk",
    "RiskLevel",
    "EmotionTrend",
    "Audience",
    "MessageRole",
    "AnalysisType",
    "ContentSeverity",
    "RecommendedAction",
    "VoiceAnalysisType",
    "ImageAnalysisType",
    "WebhookEventType",
    "ConsentType",
    "ConsentStatus",
    "AuditAction",
    "BreachSeverity",
    "BreachStatus",
    "BreachNotificationStatus",
    *_models_all,
    *_management_all,
]
