import math
from datetime import datetime, timezone

import pytest
from conftest import BULLYING

from tuteliq import (
    AccountExportResult,
    ActionPlanResult,
    AnalysisContext,
    BullyingResult,
    Severity,
    UpdateWebhookInput,
    Webhook,
    WebhookEventType,
)
from tuteliq.serialization import (
    decode_json,
    encode_json,
    ensure_json_value,
    from_wire,
    to_snake_case,
    to_wire,
)


@pytest.mark.parametrize(
    "name,expected",
    [
        ("childAge", "child_age"),
        ("externalId", "external_id"),
        ("child_age", "child_age"),
        ("text", "text"),
        ("fileID", "file_id"),
    ],
)
def test_to_snake_case(name, expected):
    assert to_snake_case(name) == expected


def test_to_wire_dataclass_omits_none_and_converts_enums():
    body = UpdateWebhookInput(events=[WebhookEventType.GROOMING_DETECTED], is_active=False)
    assert to_wire(body) == {"events": ["grooming.detected"], "is_active": False}


def test_to_wire_datetime_iso():
    ts = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert to_wire({"at": ts}) == {"at": "2026-01-02T03:04:05+00:00"}


def test_encode_json_compact():
    assert encode_json(AnalysisContext(platform="Discord")) == b'{"platform":"Discord"}'


@pytest.mark.parametrize("value", [object(), {1: "a"}, {"a": {b"x"}}])
def test_ensure_json_value_rejects_foreign_types(value):
    with pytest.raises(TypeError):
        ensure_json_value(value)


@pytest.mark.parametrize("value", [math.nan, math.inf, [1.0, -math.inf]])
def test_ensure_json_value_rejects_non_finite(value):
    with pytest.raises(ValueError):
        ensure_json_value(value)


def test_ensure_json_value_accepts_nested():
    value = {"a": [1, 2.5, None, True, {"b": "c"}]}
    assert ensure_json_value(value) is value


def test_from_wire_dataclass():
    result = from_wire(BullyingResult, dict(BULLYING, unknown_field=1))
    assert result.is_bullying is True
    assert result.severity is Severity.HIGH
    assert result.external_id is None


def test_from_wire_missing_required_field():
    data = dict(BULLYING)
    del data["risk_score"]
    with pytest.raises(ValueError, match="risk_score"):
        from_wire(BullyingResult, data)


def test_from_wire_wrong_type():
    with pytest.raises(ValueError):
        from_wire(BullyingResult, dict(BULLYING, is_bullying="yes"))


def test_from_wire_int_to_float():
    result = from_wire(BullyingResult, dict(BULLYING, confidence=1))
    assert isinstance(result.confidence, float)


def test_wire_key_override():
    plan = decode_json(
        ActionPlanResult,
        b'{"audience": "parent", "steps": ["talk"], "tone": "calm", "approx_reading_level": "grade 5"}',
    )
    assert plan.reading_level == "grade 5"

    export = decode_json(AccountExportResult, b'{"userId": "u1", "exportedAt": "2026-01-01", "data": {}}')
    assert export.user_id == "u1"
    assert export.exported_at == "2026-01-01"


def test_datetime_with_z_suffix():
    hook = from_wire(
        Webhook,
        {
            "id": "wh_1",
            "name": "alerts",
            "url": "https://example.com/hook",
            "events": ["incident.critical"],
            "is_active": True,
            "failure_count": 0,
            "created_at": "2026-01-01T00:00:00Z",
            "updated_at": "2026-01-02T00:00:00.500Z",
        },
    )
    assert hook.created_at == datetime(2026, 1, 1, tzinfo=timezone.utc)
    assert hook.last_triggered_at is None
