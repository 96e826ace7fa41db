import enum


class Severity(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class GroomingRisk(str, enum.Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class RiskLevel(str, enum.Enum):
    SAFE = "safe"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class EmotionTrend(str, enum.Enum):
    IMPROVING = "improving"
    STABLE = "stable"
    WORSENING = "worsening"


class Audience(str, enum.Enum):
    """Target audience of an action plan (sent as the ``role`` field)."""

    CHILD = "child"
    PARENT = "parent"
    PLATFORM = "platform"


class MessageRole(str, enum.Enum):
    ADULT = "adult"
    CHILD = "child"
    UNKNOWN = "unknown"


class AnalysisType(str, enum.Enum):
    BULLYING = "bullying"
    UNSAFE = "unsafe"
    GROOMING = "grooming"
    EMOTIONS = "emotions"
    VOICE = "voice"
    IMAGE = "image"


class ContentSeverity(str, enum.Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class RecommendedAction(str, enum.Enum):
    NONE = "none"
    MONITOR = "monitor"
    FLAG_FOR_MODERATOR = "flag_for_moderator"
    IMMEDIATE_INTERVENTION = "immediate_intervention"


class VoiceAnalysisType(str, enum.Enum):
    BULLYING = "bullying"
    UNSAFE = "unsafe"
    GROOMING = "grooming"
    EMOTIONS = "emotions"
    ALL = "all"


class ImageAnalysisType(str, enum.Enum):
    BULLYING = "bullying"
    UNSAFE = "unsafe"
    EMOTIONS = "emotions"
    ALL = "all"


class WebhookEventType(str, enum.Enum):
    INCIDENT_CRITICAL = "incident.critical"
    INCIDENT_HIGH = "incident.high"
    GROOMING_DETECTED = "grooming.detected"
    SELF_HARM_DETECTED = "self_harm.detected"
    BULLYING_SEVERE = "bullying.severe"


class ConsentType(str, enum.Enum):
    DATA_PROCESSING = "data_processing"
    ANALYTICS = "analytics"
    MARKETING = "marketing"
    THIRD_PARTY_SHARING = "third_party_sharing"
    CHILD_SAFETY_MONITORING = "child_safety_monitoring"


class ConsentStatus(str, enum.Enum):
    GRANTED = "granted"
    WITHDRAWN = "withdrawn"


class AuditAction(str, enum.Enum):
    DATA_ACCESS = "data_access"
    DATA_EXPORT = "data_export"
    DATA_DELETION = "data_deletion"
    DATA_RECTIFICATION = "data_rectification"
    CONSENT_GRANTED = "consent_granted"
    CONSENT_WITHDRAWN = "consent_withdrawn"
    BREACH_NOTIFICATION = "breach_notification"


class BreachSeverity(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class BreachStatus(str, enum.Enum):
    DETECTED = "detected"
    INVESTIGATING = "investigating"
    CONTAINED = "contained"
    REPORTED = "reported"
    RESOLVED = "resolved"


class BreachNotificationStatus(str, enum.Enum):
    PENDING = "pending"
    USERS_NOTIFIED = "users_notified"
    DPA_NOTIFIED = "dpa_notified"
    COMPLETED = "completed"
