"""Domain methods shared by the sync and async clients.

Every method returns ``self._request(...)``: a decoded value on ``Tuteliq`` and an
awaitable on ``AsyncTuteliq``.
"""

from typing import Any, Union
from urllib.parse import quote

from .enums import (
    AnalysisType,
    Audience,
    AuditAction,
    BreachStatus,
    ConsentType,
    RecommendedAction,
    RiskLevel,
)
from .management import (
    AccountDeletionResult,
    AccountExportResult,
    AuditLogsResult,
    BreachListResult,
    BreachResult,
    ConsentActionResult,
    ConsentStatusResult,
    CreateWebhookInput,
    CreateWebhookResult,
    DeleteResult,
    LogBreachInput,
    LogBreachResult,
    PolicyResult,
    PricingDetailsResult,
    PricingResult,
    RecordConsentInput,
    RectifyDataInput,
    RectifyDataResult,
    RegenerateSecretResult,
    TestWebhookResult,
    UpdateBreachInput,
    UpdateWebhookInput,
    UpdateWebhookResult,
    UsageByToolResult,
    UsageHistoryResult,
    UsageMonthlyResult,
    UsageQuotaResult,
    UsageSummaryResult,
    WebhookListResult,
)
from .models import (
    ActionPlanResult,
    AnalysisContext,
    AnalyzeEmotionsInput,
    AnalyzeImageInput,
    AnalyzeInput,
    AnalyzeResult,
    AnalyzeVoiceInput,
    BatchAnalyzeInput,
    BatchAnalyzeResult,
    BatchItem,
    BullyingResult,
    DetectBullyingInput,
    DetectGroomingInput,
    DetectUnsafeInput,
    EmotionsResult,
    GenerateReportInput,
    GetActionPlanInput,
    GroomingResult,
    ImageAnalysisResult,
    ReportResult,
    UnsafeResult,
    VoiceAnalysisResult,
)
from .multipart import MultipartBuilder

SDK_IDENTIFIER = "Python SDK"

# (threshold, level) checked top-down against the highest risk score
RISK_THRESHOLDS = (
    (0.9, RiskLevel.CRITICAL),
    (0.7, RiskLevel.HIGH),
    (0.5, RiskLevel.MEDIUM),
    (0.3, RiskLevel.LOW),
)

# most severe first
ACTION_PRIORITY = (
    RecommendedAction.IMMEDIATE_INTERVENTION,
    RecommendedAction.FLAG_FOR_MODERATOR,
    RecommendedAction.MONITOR,
)


def resolve_platform(platform: Union[str, None]) -> str:
    """Append the SDK identifier: 'Discord' -> 'Discord - Python SDK', None -> 'Python SDK'."""
    if platform:
        return f"{platform} - {SDK_IDENTIFIER}"
    return SDK_IDENTIFIER


def context_payload(
    context: Union[AnalysisContext, None], child_age: Union[int, None] = None
) -> dict[str, Any]:
    ctx = context or AnalysisContext()
    payload = {
        "language": ctx.language,
        "age_group": ctx.age_group,
        "relationship": ctx.relationship,
        "platform": resolve_platform(ctx.platform),
        "child_age": child_age,
    }
    return _compact(payload)


def _compact(payload: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in payload.items() if v is not None}


def _segment(value) -> str:
    return quote(str(getattr(value, "value", value)), safe="")


def _tracking(input) -> dict[str, Any]:
    return {
        "external_id": input.external_id,
        "customer_id": input.customer_id,
        "metadata": input.metadata,
    }


def encode_batch_item(item: BatchItem) -> dict[str, Any]:
    data: dict[str, Any] = {}
    if item.type in (AnalysisType.BULLYING, AnalysisType.UNSAFE):
        data["text"] = item.text
        data["context"] = context_payload(item.context)
    elif item.type is AnalysisType.GROOMING:
        data["messages"] = [{"sender_role": m.role.value, "text": m.content} for m in item.messages]
        if item.context is not None:
            data["context"] = context_payload(item.context)
    elif item.type is AnalysisType.EMOTIONS:
        data["messages"] = [{"sender": m.sender, "text": m.content} for m in item.messages]
        if item.context is not None:
            data["context"] = context_payload(item.context)
    else:
        raise ValueError(f"Batch analysis does not support item type '{item.type.value}'")
    return {"id": item.id, "type": item.type.value, "data": data}


def merge_analysis(
    input: AnalyzeInput,
    bullying: Union[BullyingResult, None],
    unsafe: Union[UnsafeResult, None],
) -> AnalyzeResult:
    """Combine individual detections into one client-side AnalyzeResult."""
    scores = [r.risk_score for r in (bullying, unsafe) if r is not None]
    max_score = max(scores, default=0.0)
    level = next((lvl for threshold, lvl in RISK_THRESHOLDS if max_score >= threshold), RiskLevel.SAFE)

    findings = []
    if bullying is not None and bullying.is_bullying:
        findings.append(f"Bullying detected ({bullying.severity.value})")
    if unsafe is not None and unsafe.unsafe:
        findings.append(f"Unsafe content: {', '.join(unsafe.categories)}")
    summary = ". ".join(findings) if findings else "No safety concerns detected."

    actions = {r.recommended_action for r in (bullying, unsafe) if r is not None}
    action = next((a for a in ACTION_PRIORITY if a.value in actions), RecommendedAction.NONE)

    return AnalyzeResult(
        risk_level=level.value,
        risk_score=max_score,
        summary=summary,
        recommended_action=action.value,
        bullying=bullying,
        unsafe=unsafe,
        external_id=input.external_id,
        customer_id=input.customer_id,
        metadata=input.metadata,
    )


def analysis_requests(input: Union[AnalyzeInput, str], context):
    if isinstance(input, str):
        input = AnalyzeInput(content=input, context=context)
    include = input.include if input.include is not None else [AnalysisType.BULLYING, AnalysisType.UNSAFE]
    bullying = unsafe = None
    if AnalysisType.BULLYING in include:
        bullying = DetectBullyingInput(
            content=input.content,
            context=input.context,
            external_id=input.external_id,
            customer_id=input.customer_id,
            metadata=input.metadata,
        )
    if AnalysisType.UNSAFE in include:
        unsafe = DetectUnsafeInput(
            content=input.content,
            context=input.context,
            external_id=input.external_id,
            customer_id=input.customer_id,
            metadata=input.metadata,
        )
    return input, bullying, unsafe


class EndpointsMixin:
    # ---------- safety detection ----------
    def detect_bullying(self, input: Union[DetectBullyingInput, str], *, context=None, cancel=None):
        """Detect bullying in a piece of text; accepts an input object or plain text."""
        if isinstance(input, str):
            input = DetectBullyingInput(content=input, context=context)
        body = {"text": input.content, "context": context_payload(input.context), **_tracking(input)}
        return self._request(
            "POST", "/api/v1/safety/bullying", body=body, result=BullyingResult, cancel=cancel
        )

    def detect_grooming(self, input: DetectGroomingInput, *, cancel=None):
        body = {
            "messages": [{"sender_role": m.role.value, "text": m.content} for m in input.messages],
            "context": context_payload(input.context, child_age=input.child_age),
            **_tracking(input),
        }
        return self._request(
            "POST", "/api/v1/safety/grooming", body=body, result=GroomingResult, cancel=cancel
        )

    def detect_unsafe(self, input: Union[DetectUnsafeInput, str], *, context=None, cancel=None):
        """Detect self-harm, violence, hate speech and other unsafe content."""
        if isinstance(input, str):
            input = DetectUnsafeInput(content=input, context=context)
        body = {"text": input.content, "context": context_payload(input.context), **_tracking(input)}
        return self._request(
            "POST", "/api/v1/safety/unsafe", body=body, result=UnsafeResult, cancel=cancel
        )

    # ---------- analysis ----------
    def analyze_emotions(self, input: Union[AnalyzeEmotionsInput, str], *, context=None, cancel=None):
        if isinstance(input, str):
            input = AnalyzeEmotionsInput(content=input, context=context)
        if input.content is not None:
            messages = [{"sender": "user", "text": input.content}]
        else:
            messages = [{"sender": m.sender, "text": m.content} for m in input.messages or []]
        body = {"messages": messages, "context": context_payload(input.context), **_tracking(input)}
        return self._request(
            "POST", "/api/v1/analysis/emotions", body=body, result=EmotionsResult, cancel=cancel
        )

    def get_action_plan(self, input: GetActionPlanInput, *, cancel=None):
        """Generate an age-appropriate action plan for the given audience."""
        body = {
            "role": (input.audience or Audience.PARENT).value,
            "situation": input.situation,
            "child_age": input.child_age,
            "severity": input.severity,
            **_tracking(input),
        }
        return self._request(
            "POST", "/api/v1/guidance/action-plan", body=body, result=ActionPlanResult, cancel=cancel
        )

    def generate_report(self, input: GenerateReportInput, *, cancel=None):
        meta = _compact(
            {
                "child_age": input.child_age,
                "type": input.incident_type,
                "conversation_id": input.conversation_id,
                "timestamp_range": input.timestamp_range,
            }
        )
        body = {
            "messages": [{"sender": m.sender, "text": m.content} for m in input.messages],
            "meta": meta or None,
            **_tracking(input),
        }
        return self._request(
            "POST", "/api/v1/reports/incident", body=body, result=ReportResult, cancel=cancel
        )

    # ---------- policy ----------
    def get_policy(self, *, cancel=None):
        return self._request("GET", "/api/v1/policy", result=PolicyResult, cancel=cancel)

    def update_policy(self, config: dict[str, Any], *, cancel=None):
        return self._request(
            "PUT", "/api/v1/policy", body={"config": config}, result=PolicyResult, cancel=cancel
        )

    # ---------- batch ----------
    def batch_analyze(self, input: BatchAnalyzeInput, *, cancel=None):
        """Analyze up to 50 items in one request; see BatchResultItem.decode_result."""
        body = {"items": [encode_batch_item(i) for i in input.items], "parallel": input.parallel}
        return self._request(
            "POST", "/api/v1/batch/analyze", body=body, result=BatchAnalyzeResult, cancel=cancel
        )

    # ---------- usage ----------
    def get_usage_summary(self, date: Union[str, None] = None, *, cancel=None):
        return self._request(
            "GET", "/api/v1/usage/summary", query={"date": date}, result=UsageSummaryResult, cancel=cancel
        )

    def get_usage_history(self, days: Union[int, None] = None, *, cancel=None):
        return self._request(
            "GET", "/api/v1/usage/history", query={"days": days}, result=UsageHistoryResult, cancel=cancel
        )

    def get_usage_quota(self, *, cancel=None):
        return self._request("GET", "/api/v1/usage/quota", result=UsageQuotaResult, cancel=cancel)

    def get_usage_by_tool(self, date: Union[str, None] = None, *, cancel=None):
        return self._request(
            "GET", "/api/v1/usage/by-tool", query={"date": date}, result=UsageByToolResult, cancel=cancel
        )

    def get_usage_monthly(self, *, cancel=None):
        return self._request("GET", "/api/v1/usage/monthly", result=UsageMonthlyResult, cancel=cancel)

    # ---------- webhooks ----------
    def list_webhooks(self, *, cancel=None):
        return self._request("GET", "/api/v1/webhooks", result=WebhookListResult, cancel=cancel)

    def create_webhook(self, input: CreateWebhookInput, *, cancel=None):
        """Create a webhook. The returned secret is only shown once."""
        body = {"name": input.name, "url": input.url, "events": input.events, "headers": input.headers}
        return self._request(
            "POST", "/api/v1/webhooks", body=body, result=CreateWebhookResult, cancel=cancel
        )

    def update_webhook(self, id: str, input: UpdateWebhookInput, *, cancel=None):
        return self._request(
            "PUT", f"/api/v1/webhooks/{_segment(id)}", body=input, result=UpdateWebhookResult, cancel=cancel
        )

    def delete_webhook(self, id: str, *, cancel=None):
        return self._request(
            "DELETE", f"/api/v1/webhooks/{_segment(id)}", result=DeleteResult, cancel=cancel
        )

    def test_webhook(self, id: str, *, cancel=None):
        return self._request(
            "POST", "/api/v1/webhooks/test", body={"webhook_id": id}, result=TestWebhookResult, cancel=cancel
        )

    def regenerate_webhook_secret(self, id: str, *, cancel=None):
        """Rotate a webhook's signing secret; the old one stops working immediately."""
        return self._request(
            "POST",
            f"/api/v1/webhooks/{_segment(id)}/regenerate-secret",
            result=RegenerateSecretResult,
            cancel=cancel,
        )

    # ---------- media ----------
    def analyze_voice(self, input: AnalyzeVoiceInput, *, cancel=None):
        builder = MultipartBuilder()
        builder.add_file("file", input.filename, input.file)
        builder.add_fields(
            {
                "analysis_type": input.analysis_type,
                "file_id": input.file_id,
                "external_id": input.external_id,
                "customer_id": input.customer_id,
                "age_group": input.age_group,
                "language": input.language,
                "platform": resolve_platform(input.platform),
                "child_age": input.child_age,
                "metadata": input.metadata,
            }
        )
        return self._request_multipart(
            "/api/v1/safety/voice", builder, result=VoiceAnalysisResult, cancel=cancel
        )

    def analyze_image(self, input: AnalyzeImageInput, *, cancel=None):
        builder = MultipartBuilder()
        builder.add_file("file", input.filename, input.file)
        builder.add_fields(
            {
                "analysis_type": input.analysis_type,
                "file_id": input.file_id,
                "external_id": input.external_id,
                "customer_id": input.customer_id,
                "age_group": input.age_group,
                "platform": resolve_platform(input.platform),
                "metadata": input.metadata,
            }
        )
        return self._request_multipart(
            "/api/v1/safety/image", builder, result=ImageAnalysisResult, cancel=cancel
        )

    # ---------- pricing ----------
    def get_pricing(self, *, cancel=None):
        return self._request("GET", "/api/v1/pricing", result=PricingResult, cancel=cancel)

    def get_pricing_details(self, *, cancel=None):
        return self._request("GET", "/api/v1/pricing/details", result=PricingDetailsResult, cancel=cancel)

    # ---------- account (GDPR) ----------
    def delete_account_data(self, *, cancel=None):
        """Erase all account data (GDPR Art. 17)."""
        return self._request("DELETE", "/api/v1/account/data", result=AccountDeletionResult, cancel=cancel)

    def export_account_data(self, *, cancel=None):
        """Export all account data (GDPR Art. 20)."""
        return self._request("GET", "/api/v1/account/export", result=AccountExportResult, cancel=cancel)

    def record_consent(self, input: RecordConsentInput, *, cancel=None):
        body = {"consent_type": input.consent_type, "version": input.version}
        return self._request(
            "POST", "/api/v1/account/consent", body=body, result=ConsentActionResult, cancel=cancel
        )

    def get_consent_status(self, type: Union[ConsentType, None] = None, *, cancel=None):
        return self._request(
            "GET", "/api/v1/account/consent", query={"type": type}, result=ConsentStatusResult, cancel=cancel
        )

    def withdraw_consent(self, type: ConsentType, *, cancel=None):
        return self._request(
            "DELETE", f"/api/v1/account/consent/{_segment(type)}", result=ConsentActionResult, cancel=cancel
        )

    def rectify_data(self, input: RectifyDataInput, *, cancel=None):
        """Update stored fields of one document (GDPR Art. 16)."""
        body = {"collection": input.collection, "document_id": input.document_id, "fields": input.fields}
        return self._request(
            "PATCH", "/api/v1/account/data", body=body, result=RectifyDataResult, cancel=cancel
        )

    def get_audit_logs(
        self,
        action: Union[AuditAction, None] = None,
        limit: Union[int, None] = None,
        *,
        cancel=None,
    ):
        return self._request(
            "GET",
            "/api/v1/account/audit-logs",
            query={"action": action, "limit": limit},
            result=AuditLogsResult,
            cancel=cancel,
        )

    # ---------- breaches ----------
    def log_breach(self, input: LogBreachInput, *, cancel=None):
        return self._request("POST", "/api/v1/admin/breach", body=input, result=LogBreachResult, cancel=cancel)

    def list_breaches(
        self,
        status: Union[BreachStatus, None] = None,
        limit: Union[int, None] = None,
        *,
        cancel=None,
    ):
        return self._request(
            "GET",
            "/api/v1/admin/breach",
            query={"status": status, "limit": limit},
            result=BreachListResult,
            cancel=cancel,
        )

    def get_breach(self, id: str, *, cancel=None):
        return self._request("GET", f"/api/v1/admin/breach/{_segment(id)}", result=BreachResult, cancel=cancel)

    def update_breach_status(self, id: str, input: UpdateBreachInput, *, cancel=None):
        return self._request(
            "PATCH", f"/api/v1/admin/breach/{_segment(id)}", body=input, result=BreachResult, cancel=cancel
        )
