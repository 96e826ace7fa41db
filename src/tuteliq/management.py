from dataclasses import dataclass, field
from datetime import datetime

from .enums import (
    BreachNotificationStatus,
    BreachSeverity,
    BreachStatus,
    ConsentType,
    WebhookEventType,
)
from .serialization import JsonValue

__all__ = [
    "PolicyResult",
    "UsageStats",
    "UsageSummaryQuota",
    "UsageSummaryResult",
    "UsageDay",
    "UsageHistoryResult",
    "QuotaLimits",
    "QuotaCounters",
    "UsageQuotaResult",
    "UsageByToolResult",
    "MonthlyBilling",
    "MonthlyUsage",
    "MonthlyRateLimit",
    "UpgradeRecommendation",
    "MonthlyLinks",
    "UsageMonthlyResult",
    "Webhook",
    "WebhookListResult",
    "CreateWebhookInput",
    "CreateWebhookResult",
    "UpdateWebhookInput",
    "UpdateWebhookResult",
    "DeleteResult",
    "TestWebhookResult",
    "RegenerateSecretResult",
    "PricingPlan",
    "PricingResult",
    "PricingDetailPlan",
    "PricingDetailsResult",
    "AccountDeletionResult",
    "AccountExportResult",
    "RecordConsentInput",
    "ConsentRecord",
    "ConsentActionResult",
    "ConsentStatusResult",
    "RectifyDataInput",
    "RectifyDataResult",
    "AuditLogEntry",
    "AuditLogsResult",
    "LogBreachInput",
    "UpdateBreachInput",
    "BreachRecord",
    "LogBreachResult",
    "BreachListResult",
    "BreachResult",
]

# ---------- Policy ----------


@dataclass
class PolicyResult:
    success: bool
    config: dict[str, JsonValue]
    message: str


# ---------- Usage ----------


@dataclass
class UsageStats:
    total_requests: int
    success_requests: int
    error_requests: int


@dataclass
class UsageSummaryQuota:
    requests_per_minute: int
    requests_per_month: int
    requests_per_day: int
    remaining_today: int


@dataclass
class UsageSummaryResult:
    api_key_id: str
    tier: str
    date: str
    usage: UsageStats
    quota: UsageSummaryQuota


@dataclass
class UsageDay:
    date: str
    total_requests: int
    success_requests: int
    error_requests: int


@dataclass
class UsageHistoryResult:
    api_key_id: str
    days: list[UsageDay]


@dataclass
class QuotaLimits:
    requests_per_minute: int
    requests_per_month: int
    requests_per_day: int


@dataclass
class QuotaCounters:
    requests_this_minute: int
    requests_today: int


@dataclass
class UsageQuotaResult:
    api_key_id: str
    tier: str
    limits: QuotaLimits
    current: QuotaCounters
    remaining: QuotaCounters


@dataclass
class UsageByToolResult:
    date: str
    tools: dict[str, int]
    endpoints: dict[str, int]


@dataclass
class MonthlyBilling:
    current_period_start: str
    current_period_end: str
    days_remaining: int


@dataclass
class MonthlyUsage:
    used: int
    limit: int
    remaining: int
    percent_used: float


@dataclass
class MonthlyRateLimit:
    requests_per_minute: int


@dataclass
class UpgradeRecommendation:
    should_upgrade: bool
    reason: str
    suggested_tier: str
    upgrade_url: str


@dataclass
class MonthlyLinks:
    dashboard: str
    pricing: str
    buy_credits: str


@dataclass
class UsageMonthlyResult:
    tier: str
    tier_display_name: str
    billing: MonthlyBilling
    usage: MonthlyUsage
    rate_limit: MonthlyRateLimit
    links: MonthlyLinks
    recommendations: UpgradeRecommendation | None = None


# ---------- Webhooks ----------


@dataclass
class Webhook:
    id: str
    name: str
    url: str
    events: list[str]
    is_active: bool
    failure_count: int
    created_at: datetime
    updated_at: datetime
    last_triggered_at: datetime | None = None
    last_error: str | None = None


@dataclass
class WebhookListResult:
    webhooks: list[Webhook]


@dataclass
class CreateWebhookInput:
    # max 100 chars
    name: str
    # must be HTTPS
    url: str
    # 1-5 events
    events: list[WebhookEventType]
    headers: dict[str, str] | None = None


@dataclass
class CreateWebhookResult:
    id: str
    name: str
    url: str
    # signing secret, only returned once
    secret: str
    events: list[str]
    is_active: bool
    created_at: datetime


@dataclass
class UpdateWebhookInput:
    """Only fields that are not None are sent."""

    name: str | None = None
    url: str | None = None
    events: list[WebhookEventType] | None = None
    is_active: bool | None = None
    headers: dict[str, str] | None = None


@dataclass
class UpdateWebhookResult:
    id: str
    name: str
    url: str
    events: list[str]
    is_active: bool
    updated_at: datetime


@dataclass
class DeleteResult:
    success: bool
    message: str


@dataclass
class TestWebhookResult:
    __test__ = False  # not a pytest class

    success: bool
    status_code: int
    latency_ms: int
    error: str | None = None


@dataclass
class RegenerateSecretResult:
    secret: str


# ---------- Pricing ----------


@dataclass
class PricingPlan:
    name: str
    price: str
    period: str
    description: str
    features: list[str]
    is_popular: bool
    cta: str
    cta_link: str


@dataclass
class PricingResult:
    plans: list[PricingPlan]


@dataclass
class PricingDetailPlan:
    id: str
    name: str
    tier: str
    description: str
    price_monthly: float
    price_yearly: float
    api_calls_per_month: int
    rate_limit: int
    features: list[str]
    is_popular: bool


@dataclass
class PricingDetailsResult:
    plans: list[PricingDetailPlan]


# ---------- Account (GDPR) ----------


@dataclass
class AccountDeletionResult:
    message: str
    deleted_count: int


@dataclass
class AccountExportResult:
    # this endpoint answers in camelCase
    user_id: str = field(metadata={"key": "userId"})
    exported_at: str = field(metadata={"key": "exportedAt"})
    data: dict[str, list[JsonValue]] = field(default_factory=dict)


@dataclass
class RecordConsentInput:
    consent_type: ConsentType
    version: str


@dataclass
class ConsentRecord:
    id: str
    user_id: str
    consent_type: str
    status: str
    version: str
    created_at: datetime


@dataclass
class ConsentActionResult:
    message: str
    consent: ConsentRecord


@dataclass
class ConsentStatusResult:
    consents: list[ConsentRecord]


@dataclass
class RectifyDataInput:
    collection: str
    document_id: str
    fields: dict[str, JsonValue]


@dataclass
class RectifyDataResult:
    message: str
    updated_fields: list[str]


@dataclass
class AuditLogEntry:
    id: str
    user_id: str
    action: str
    created_at: datetime
    details: JsonValue = None


@dataclass
class AuditLogsResult:
    audit_logs: list[AuditLogEntry]


# ---------- Breaches (GDPR Art. 33/34) ----------


@dataclass
class LogBreachInput:
    title: str
    description: str
    severity: BreachSeverity
    affected_user_ids: list[str]
    data_categories: list[str]
    reported_by: str


@dataclass
class UpdateBreachInput:
    status: BreachStatus
    notification_status: BreachNotificationStatus | None = None
    notes: str | None = None


@dataclass
class BreachRecord:
    id: str
    title: str
    description: str
    severity: str
    status: str
    notification_status: str
    affected_user_ids: list[str]
    data_categories: list[str]
    reported_by: str
    notification_deadline: datetime
    created_at: datetime
    updated_at: datetime


@dataclass
class LogBreachResult:
    message: str
    breach: BreachRecord


@dataclass
class BreachListResult:
    breaches: list[BreachRecord]


@dataclass
class BreachResult:
    breach: BreachRecord
