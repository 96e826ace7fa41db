import time

import httpx
import pytest
from conftest import Recorder

from tuteliq import (
    AuthenticationError,
    CancellationToken,
    NetworkError,
    RateLimitError,
    RequestCancelledError,
    RequestTimeoutError,
    ServerError,
    UnknownError,
)


@pytest.fixture
def sleeps(monkeypatch):
    recorded = []
    monkeypatch.setattr(time, "sleep", lambda d: recorded.append(d))
    return recorded


def test_server_error_retries_with_exponential_backoff(make_client, sleeps):
    rec = Recorder(httpx.Response(500, json={"error": {"message": "boom"}}))
    client = make_client(rec, max_retries=3, retry_delay=0.01)
    with pytest.raises(ServerError) as ei:
        client.execute("POST", "/api/v1/safety/bullying", {"text": "hi"})
    assert rec.calls == 3
    assert sleeps == [0.01, 0.02]
    assert ei.value.status_code == 500
    assert ei.value.message == "boom"


def test_non_retryable_error_raises_immediately(make_client, sleeps):
    rec = Recorder(
        httpx.Response(401, json={"error": {"code": "AUTH_1002", "message": "API key invalid"}})
    )
    client = make_client(rec)
    with pytest.raises(AuthenticationError) as ei:
        client.execute("GET", "/api/v1/policy")
    assert rec.calls == 1
    assert sleeps == []
    assert ei.value.message == "API key invalid"
    assert ei.value.code == "AUTH_1002"


def test_recovers_after_transient_failure(make_client, sleeps):
    rec = Recorder(
        httpx.Response(503),
        httpx.Response(429, json={"error": {"message": "slow down"}}),
        httpx.Response(200, json={"ok": True}),
    )
    client = make_client(rec, max_retries=3)
    assert client.execute("GET", "/api/v1/policy") == b'{"ok":true}'
    assert rec.calls == 3
    assert len(sleeps) == 2


def test_rate_limit_exhaustion_raises_last_error(make_client, sleeps):
    rec = Recorder(httpx.Response(429, json={"error": {"message": "Too many requests"}}))
    client = make_client(rec, max_retries=2)
    with pytest.raises(RateLimitError, match="Too many requests"):
        client.execute("GET", "/api/v1/policy")
    assert rec.calls == 2


def test_timeout_is_classified_and_retried(make_client, sleeps):
    rec = Recorder(httpx.ConnectTimeout("timed out"))
    client = make_client(rec, max_retries=2, timeout=5)
    with pytest.raises(RequestTimeoutError) as ei:
        client.execute("GET", "/api/v1/policy")
    assert ei.value.message == "Request timed out after 5 seconds"
    assert rec.calls == 2
    # no response, no metadata
    assert client.last_latency is None


def test_connect_error_is_network_error(make_client, sleeps):
    rec = Recorder(httpx.ConnectError("refused"))
    client = make_client(rec, max_retries=1)
    with pytest.raises(NetworkError, match="No internet connection"):
        client.execute("GET", "/api/v1/policy")


def test_undecodable_success_is_retried_as_unknown(make_client, sleeps):
    rec = Recorder(httpx.Response(200, content=b"not json"))
    client = make_client(rec, max_retries=3)
    with pytest.raises(UnknownError, match="Failed to decode"):
        client.get_policy()
    assert rec.calls == 3


def test_cancel_before_start_sends_nothing(make_client):
    rec = Recorder()
    client = make_client(rec)
    token = CancellationToken()
    token.cancel()
    with pytest.raises(RequestCancelledError):
        client.execute("GET", "/api/v1/policy", cancel=token)
    assert rec.calls == 0


def test_cancel_during_backoff_stops_retrying(make_client):
    token = CancellationToken()

    def failing(request):
        token.cancel()
        return httpx.Response(500)

    rec = Recorder(failing)
    client = make_client(rec, max_retries=5, retry_delay=30)
    started = time.monotonic()
    with pytest.raises(RequestCancelledError):
        client.execute("GET", "/api/v1/policy", cancel=token)
    assert rec.calls == 1
    assert time.monotonic() - started < 5


def test_in_flight_attempt_may_still_succeed(make_client):
    token = CancellationToken()

    def succeed_after_cancel(request):
        token.cancel()
        return httpx.Response(200, json={"ok": True})

    client = make_client(Recorder(succeed_after_cancel))
    assert client.execute("GET", "/api/v1/policy", cancel=token) == b'{"ok":true}'


def test_metadata_updated_on_error_responses(make_client, sleeps):
    headers = {
        "X-Request-ID": "req_429",
        "X-RateLimit-Limit": "60",
        "X-RateLimit-Remaining": "0",
        "X-RateLimit-Reset": "1700000000",
    }
    rec = Recorder(httpx.Response(429, headers=headers))
    client = make_client(rec, max_retries=1)
    with pytest.raises(RateLimitError):
        client.execute("GET", "/api/v1/policy")
    assert client.last_request_id == "req_429"
    assert client.rate_limit_info.remaining == 0
    assert client.last_latency is not None and client.last_latency >= 0


def test_get_cache_hits_and_expires(make_client):
    rec = Recorder(httpx.Response(200, json={"plans": []}))
    client = make_client(rec, cache_ttl=60)
    clock = [1000.0]
    client._now = lambda: clock[0]

    assert client.execute("GET", "/api/v1/pricing") == b'{"plans":[]}'
    assert client.execute("GET", "/api/v1/pricing") == b'{"plans":[]}'
    assert rec.calls == 1

    clock[0] += 61
    client.execute("GET", "/api/v1/pricing")
    assert rec.calls == 2

    client.clear_cache()
    client.execute("GET", "/api/v1/pricing")
    assert rec.calls == 3


def test_cache_keys_include_query(make_client):
    rec = Recorder(
        httpx.Response(200, json={"api_key_id": "k", "days": []}),
    )
    client = make_client(rec, cache_ttl=60)
    client.get_usage_history(days=7)
    client.get_usage_history(days=7)
    client.get_usage_history(days=30)
    assert rec.calls == 2


def test_cache_hit_skips_cancellation_check(make_client):
    rec = Recorder(httpx.Response(200, json={"plans": []}))
    client = make_client(rec, cache_ttl=60)
    client.execute("GET", "/api/v1/pricing")
    token = CancellationToken()
    token.cancel()
    assert client.execute("GET", "/api/v1/pricing", cancel=token) == b'{"plans":[]}'
    assert rec.calls == 1


def test_non_get_and_failures_not_cached(make_client, sleeps):
    rec = Recorder(httpx.Response(200, content=b"garbage"), httpx.Response(200, json={"plans": []}))
    client = make_client(rec, cache_ttl=60, max_retries=1)
    with pytest.raises(UnknownError):
        client.get_pricing()
    assert client.get_pricing().plans == []
    client.execute("POST", "/api/v1/pricing")
    client.execute("POST", "/api/v1/pricing")
    assert rec.calls == 4


def test_cache_disabled_by_default(make_client):
    rec = Recorder(httpx.Response(200, json={"plans": []}))
    client = make_client(rec)
    client.execute("GET", "/api/v1/pricing")
    client.execute("GET", "/api/v1/pricing")
    assert rec.calls == 2


def test_retry_logged(make_client, sleeps, caplog):
    rec = Recorder(httpx.Response(500), httpx.Response(200, json={}))
    client = make_client(rec, max_retries=2)
    with caplog.at_level("INFO", logger="tuteliq"):
        client.execute("GET", "/api/v1/policy")
    messages = [r.getMessage() for r in caplog.records]
    assert any("retrying path=/api/v1/policy" in m for m in messages)
    assert all("tq_test_key" not in m for m in messages)


def test_corrupt_body_encoding_is_network_error(make_client, sleeps):
    rec = Recorder(httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"not gzip"))
    client = make_client(rec, max_retries=2)
    with pytest.raises(NetworkError):
        client.execute("GET", "/api/v1/policy")
    assert rec.calls == 2
